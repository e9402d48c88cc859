"""
Type resolver — maps catalog column descriptors to generated field types.

Small-integer columns are ambiguous: they hold booleans as often as counters, so
the stored data decides. Every distinct value is sampled once per generation;
only a column whose values are all "0", "1" or empty becomes a bool.
"""
import logging
from typing import Callable, Iterable, Optional

from tablegen.core.naming import attribute_name
from tablegen.models.column import ColumnDescriptor, KeyRole, ResolvedField, TargetType

logger = logging.getLogger(__name__)

# column name -> distinct stored values (None for NULL)
Probe = Callable[[str], Iterable[Optional[str]]]

INT_TYPES = {"int", "mediumint"}
SMALL_INT_TYPES = {"tinyint", "smallint"}
BOOL_TYPES = {"bool", "boolean"}
FLOAT_TYPES = {"float", "decimal"}
TIME_TYPES = {"date", "datetime", "timestamp"}

BOOLEAN_SAMPLE = {"0", "1", ""}


def looks_boolean(values: Iterable[Optional[str]]) -> bool:
    return all((v or "") in BOOLEAN_SAMPLE for v in values)


def resolve(column: ColumnDescriptor, probe: Probe) -> ResolvedField:
    """Resolve one column. `probe` is only called for tinyint/smallint columns."""
    declared = column.declared_type.lower()
    if declared in INT_TYPES:
        target = TargetType.INT
    elif declared in SMALL_INT_TYPES:
        values = list(probe(column.name))
        target = TargetType.BOOL if looks_boolean(values) else TargetType.INT
        logger.debug("Probed %s: %d distinct value(s) -> %s", column.name, len(values), target.value)
    elif declared in BOOL_TYPES:
        target = TargetType.BOOL
    elif declared in FLOAT_TYPES:
        target = TargetType.FLOAT
    elif declared in TIME_TYPES:
        target = TargetType.TIMESTAMP
    else:
        target = TargetType.TEXT

    is_pk = column.key_role is KeyRole.PRIMARY
    # Keys keep integer ordering semantics even when the data looks boolean
    if is_pk and target is TargetType.BOOL:
        target = TargetType.INT

    return ResolvedField(
        name=column.name,
        attr=attribute_name(column.name),
        target_type=target,
        nullable=column.nullable,
        is_primary_key=is_pk,
        default_literal=column.default_literal,
        column=column,
    )


def resolve_columns(columns: list[ColumnDescriptor], probe: Probe) -> list[ResolvedField]:
    """Resolve a table's columns in catalog order; a repeated column name keeps its first occurrence."""
    seen: set[str] = set()
    used_attrs: set[str] = set()
    fields: list[ResolvedField] = []
    for column in columns:
        if column.name in seen:
            continue
        seen.add(column.name)
        field = resolve(column, probe)
        attr = field.attr
        n = 2
        while attr in used_attrs:
            attr = f"{field.attr}_{n}"
            n += 1
        used_attrs.add(attr)
        if attr != field.attr:
            field = field.model_copy(update={"attr": attr})
        fields.append(field)
    return fields

"""
Field descriptor table and the generic routines that read it.

Every generated module carries a FIELDS tuple describing its columns exactly as
the catalog reported them. Saving, validating and decoding rows all work from
that table instead of inspecting the record class.
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Any, NamedTuple

from tablegen.errors import ValidationError

EMPTY_TIME = datetime.min


class FieldSpec(NamedTuple):
    attr: str
    column: str
    default: str
    column_type: str
    key: str
    null: str
    extra: str
    kind: str          # int | bool | float | timestamp | text


ZERO_VALUES: dict[str, Any] = {
    "int": 0,
    "bool": False,
    "float": 0.0,
    "timestamp": EMPTY_TIME,
    "text": "",
}


def is_empty(value: Any) -> bool:
    """None, '' and the unset timestamp are empty. Zero and False are real values."""
    if isinstance(value, datetime):
        return value == EMPTY_TIME
    return value is None or value == ""


def is_empty_key(value: Any) -> bool:
    """A key still holding its zero value has not been assigned by the database yet."""
    return is_empty(value) or (isinstance(value, int) and not isinstance(value, bool) and value == 0)


def between(initial: str, beginning: str, end: str) -> str:
    """Text between the first `beginning` and the last `end`."""
    start = initial.find(beginning)
    if start < 0:
        return ""
    start += len(beginning)
    stop = initial.rfind(end)
    if stop < start:
        return ""
    return initial[start:stop]


def allowed_values(column_type: str) -> list[str]:
    """Literal members of an enum(...) or set(...) column type; empty for anything else."""
    lowered = column_type.lower()
    if "enum" in lowered:
        opening = "enum('"
    elif lowered.startswith("set("):
        opening = "set('"
    else:
        return []
    # the catalog doubles quotes inside members: enum('it''s')
    return [m.replace("''", "'") for m in between(column_type, opening, "')").split("','")]


def validate_value(value: Any, spec: FieldSpec) -> None:
    if is_empty(value):
        return
    allowed = allowed_values(spec.column_type)
    if not allowed:
        return
    text_value = str(value)
    members = text_value.split(",") if spec.column_type.lower().startswith("set(") else [text_value]
    for member in members:
        if member not in allowed:
            raise ValidationError(
                f"Invalid value: '{member}' for column: {spec.column}. "
                f"Possible values are: {', '.join(allowed)}"
            )


def _auto_generated(spec: FieldSpec) -> bool:
    extra = spec.extra.lower()
    return "auto_increment" in extra or "generated" in extra


def get_value(obj: Any, spec: FieldSpec, bool_as_int: bool = True) -> tuple[bool, Any]:
    """
    Returns (include, value) for one column of a save.
    With `bool_as_int` a bool is written as 0/1 for tinyint(1) columns.
    Empty non-key values are left out so the database applies the declared default;
    a NOT NULL column with nothing to fall back on is rejected.
    """
    value = getattr(obj, spec.attr)
    validate_value(value, spec)

    if spec.key == "PRI":
        return True, (None if is_empty_key(value) else value)

    if not is_empty(value):
        if bool_as_int and isinstance(value, bool):
            value = int(value)
        return True, value
    if spec.default or _auto_generated(spec):
        return False, None
    if spec.null == "NO":
        raise ValidationError(f"you must provide a value for column: {spec.column}")
    return True, None


def build_upsert(dialect, table: str, fields: tuple[FieldSpec, ...], obj: Any) -> tuple[str, dict[str, Any]]:
    """
    Build INSERT ... ON DUPLICATE KEY UPDATE (MySQL) or INSERT ... ON CONFLICT (others).
    When a single key is left for the database to generate and the dialect supports it,
    the statement ends in RETURNING <key> so the new value can be read back.
    """
    quote = dialect.identifier_preparer.quote
    keys = [f for f in fields if f.key == "PRI"]

    columns: list[str] = []
    params: dict[str, Any] = {}
    updates: list[str] = []
    generated_key = None
    for i, spec in enumerate(fields):
        include, value = get_value(obj, spec, bool_as_int=dialect.name == "mysql")
        if not include:
            continue
        if spec.key == "PRI" and value is None:
            if len(keys) > 1:
                raise ValidationError(f"composite key column {spec.column} must be supplied")
            generated_key = spec.column
            continue
        name = f"v{i}"
        params[name] = value
        columns.append(quote(spec.column))
        if spec.key != "PRI":
            updates.append(spec.column)

    returning = ""
    if generated_key and dialect.name != "mysql" and getattr(dialect, "insert_returning", False):
        returning = f" RETURNING {quote(generated_key)}"

    if not columns and dialect.name != "mysql":
        return f"INSERT INTO {quote(table)} DEFAULT VALUES{returning}", params

    query = (
        f"INSERT INTO {quote(table)} ({', '.join(columns)}) "
        f"VALUES ({', '.join(':' + n for n in params)})"
    )
    if dialect.name == "mysql":
        if updates:
            assignments = ", ".join(f"{quote(c)} = VALUES({quote(c)})" for c in updates)
        else:
            assignments = ", ".join(f"{quote(k.column)} = {quote(k.column)}" for k in keys)
        query += f" ON DUPLICATE KEY UPDATE {assignments}"
    else:
        target = ", ".join(quote(k.column) for k in keys)
        if updates:
            assignments = ", ".join(f"{quote(c)} = excluded.{quote(c)}" for c in updates)
            query += f" ON CONFLICT ({target}) DO UPDATE SET {assignments}"
        else:
            query += f" ON CONFLICT ({target}) DO NOTHING"
        query += returning
    return query, params


def decode(value: Any, kind: str, nullable: bool) -> Any:
    """Convert one scanned value to the record field's type; NULL in a non-null column becomes its zero value."""
    if value is None:
        return None if nullable else ZERO_VALUES[kind]
    if kind == "int":
        return int(value)
    if kind == "bool":
        return bool(int(value))
    if kind == "float":
        return float(value)
    if kind == "timestamp":
        if isinstance(value, (datetime, date)):
            return value
        return datetime.fromisoformat(str(value))
    if isinstance(value, bytes):
        return value.decode("utf-8")
    if isinstance(value, Decimal):
        return str(value)
    return value if isinstance(value, str) else str(value)

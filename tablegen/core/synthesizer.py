"""
Model synthesizer — renders the source text of a table's generated modules.

The base module holds the field descriptor table (FIELDS), the record dataclass,
its all-Optional row shadow used for positional scanning, and the CRUD / read
functions. Which CRUD pieces appear depends on the key arity:
  0 keys  -> reads only
  1 key   -> save with id back-assignment, delete, read_by_key, primary_key_info
  N keys  -> save, delete and read_by_key over the conjunction of all key columns
"""
import logging
from typing import Optional

from tablegen.core.key_analyzer import key_params, supports_back_assignment
from tablegen.core.naming import class_name, module_name, quote_literal
from tablegen.models.column import ForeignKey, KeySet, ResolvedField, TargetType

logger = logging.getLogger(__name__)

ANNOTATIONS = {
    TargetType.INT: "int",
    TargetType.BOOL: "bool",
    TargetType.FLOAT: "float",
    TargetType.TIMESTAMP: "datetime",
    TargetType.TEXT: "str",
}

ZERO_LITERALS = {
    TargetType.INT: "0",
    TargetType.BOOL: "False",
    TargetType.FLOAT: "0.0",
    TargetType.TIMESTAMP: "EMPTY_TIME",
    TargetType.TEXT: '""',
}


def function_names(module: str, name_funcs: bool = False) -> dict[str, str]:
    """Generated function names; in naming mode the table name is embedded in each."""
    if not name_funcs:
        return {
            "save": "save",
            "delete": "delete",
            "read_by_key": "read_by_key",
            "read_all": "read_all",
            "read_by_query": "read_by_query",
            "read_one_by_query": "read_one_by_query",
            "execute": "execute",
        }
    return {
        "save": f"save_{module}",
        "delete": f"delete_{module}",
        "read_by_key": f"read_{module}_by_key",
        "read_all": f"read_all_{module}",
        "read_by_query": f"read_{module}_by_query",
        "read_one_by_query": f"read_one_{module}_by_query",
        "execute": f"execute_{module}",
    }


def annotation(field: ResolvedField) -> str:
    base = ANNOTATIONS[field.target_type]
    return f"Optional[{base}]" if field.nullable else base


def nilable_annotation(field: ResolvedField) -> str:
    return f"Optional[{ANNOTATIONS[field.target_type]}]"


def python_default(field: ResolvedField) -> str:
    """Default for the dataclass field: the declared column default when it is a plain literal."""
    if field.nullable:
        return "None"
    literal = field.default_literal
    generated = "default_generated" in field.column.extra.lower()
    if literal and not generated:
        kind = field.target_type
        try:
            if kind is TargetType.INT:
                return repr(int(literal))
            if kind is TargetType.FLOAT:
                return repr(float(literal))
            if kind is TargetType.BOOL:
                return "True" if literal.strip().lower() in ("1", "true", "b'1'") else "False"
            if kind is TargetType.TEXT:
                return quote_literal(literal)
        except ValueError:
            logger.debug("Default %r of %s is not a literal; using the zero value", literal, field.name)
    return ZERO_LITERALS[field.target_type]


def quote_identifier(name: str, quote_char: str) -> str:
    return f"{quote_char}{name.replace(quote_char, quote_char * 2)}{quote_char}"


def key_predicate(keys: KeySet, quote_char: str) -> str:
    """`k1` = ? AND `k2` = ? in key order."""
    return " AND ".join(f"{quote_identifier(k.name, quote_char)} = ?" for k in keys.fields)


def _field_spec(field: ResolvedField) -> str:
    col = field.column
    parts = [
        f"attr={quote_literal(field.attr)}",
        f"column={quote_literal(col.name)}",
        f"default={quote_literal(field.default_literal)}",
        f"column_type={quote_literal(col.full_type)}",
        f"key={quote_literal(col.key_role.value)}",
        f"null={quote_literal(col.is_nullable_flag)}",
        f"extra={quote_literal(col.extra)}",
        f"kind={quote_literal(field.target_type.value)}",
    ]
    return f"    FieldSpec({', '.join(parts)}),"


def _imports(fields: list[ResolvedField], keys: KeySet) -> list[str]:
    runtime = {"ExecResult", "FieldSpec", "QueryOptions", "connection", "decode"}
    if any(python_default(f) == "EMPTY_TIME" for f in fields):
        runtime.add("EMPTY_TIME")
    if keys.arity:
        runtime.add("build_upsert")
    if supports_back_assignment(keys):
        runtime.add("is_empty_key")
    uses_datetime = any(f.target_type is TargetType.TIMESTAMP for f in fields)

    lines = ["from dataclasses import dataclass"]
    if uses_datetime:
        lines.append("from datetime import datetime")
    lines.append("from typing import NamedTuple, Optional")
    lines.append("")
    lines.append(f"from tablegen.runtime import {', '.join(sorted(runtime, key=str.lower))}")
    return lines


def _save_method(table_var: str, keys: KeySet, names: dict[str, str]) -> list[str]:
    lines = [
        f"    def {names['save']}(self) -> ExecResult:",
        '        """Insert the row, or update it when the key already exists. Values are validated first."""',
        "        engine = connection.get(DATABASE)",
        f"        statement, params = build_upsert(engine.dialect, {table_var}, FIELDS, self)",
    ]
    if not supports_back_assignment(keys):
        lines.append("        return connection.execute_named(engine, statement, params)")
        return lines

    key = keys.first
    assigned = "res.lastrowid" if key.target_type is TargetType.INT else "str(res.lastrowid)"
    lines += [
        f"        new_record = is_empty_key(self.{key.attr})",
        "        res = connection.execute_named(engine, statement, params)",
        "        if new_record and res.lastrowid:",
        f"            self.{key.attr} = {assigned}",
        "        return res",
    ]
    return lines


def _delete_method(keys: KeySet, names: dict[str, str], quote_char: str, table: str) -> list[str]:
    statement = f"DELETE FROM {quote_identifier(table, quote_char)} WHERE {key_predicate(keys, quote_char)}"
    values = ", ".join(f"self.{k.attr}" for k in keys.fields)
    return [
        f"    def {names['delete']}(self) -> ExecResult:",
        '        """Remove the row matching this record\'s primary key."""',
        f"        return {names['execute']}({quote_literal(statement)}, {values})",
    ]


def _fk_accessor(fk: ForeignKey, by_column: dict[str, ResolvedField], models_package: str,
                 name_funcs: bool, quote_char: str) -> list[str]:
    field = by_column.get(fk.column)
    if field is None:
        return []
    ref_module = module_name(fk.referred_table)
    ref_read_one = function_names(ref_module, name_funcs)["read_one_by_query"]
    predicate = f"{quote_identifier(fk.referred_column, quote_char)} = ?"
    return [
        f"    def {ref_module}_by_{field.attr}(self):",
        f'        """The {fk.referred_table} row referenced by {fk.column}, or None."""',
        f"        if self.{field.attr} is None:",
        "            return None",
        f"        from {models_package}.{ref_module}.{ref_module}_base import {ref_read_one} as read_referenced",
        f"        return read_referenced({quote_literal(predicate)}, self.{field.attr})",
    ]


def render_base(
    table: str,
    database: str,
    fields: list[ResolvedField],
    keys: KeySet,
    foreign_keys: Optional[list[ForeignKey]] = None,
    name_funcs: bool = False,
    quote_char: str = "`",
    models_package: str = "models",
) -> str:
    """Source of <table>_base.py. Deterministic for identical inputs."""
    if not fields:
        raise ValueError(f"No fields to render for table {table}")
    module = module_name(table)
    cls = class_name(table)
    row_cls = f"_{cls}Row"
    names = function_names(module, name_funcs)
    safe_table = table.replace('"', "'")
    safe_db = database.replace('"', "'")

    out: list[str] = [
        '"""',
        f"Base model for the {safe_table} table in the {safe_db} database.",
        f"Generated by tablegen and rewritten on every run; put hand-written code in {module}_extended.py.",
        '"""',
    ]
    out += _imports(fields, keys)
    out += ["", "DATABASE = " + quote_literal(database), "TABLE_NAME = " + quote_literal(table), ""]

    out.append("FIELDS = (")
    out += [_field_spec(f) for f in fields]
    out.append(")")
    out.append("")

    select = (
        f"SELECT {', '.join(quote_identifier(f.name, quote_char) for f in fields)} "
        f"FROM {quote_identifier(table, quote_char)}"
    )
    out.append(f"_SELECT = {quote_literal(select)}")

    exported = [cls, "DATABASE", "TABLE_NAME", "FIELDS"]
    if keys.arity:
        exported.append(names["read_by_key"])
    exported += [names["read_all"], names["read_by_query"], names["read_one_by_query"], names["execute"]]
    out.append("")
    out.append("__all__ = [" + ", ".join(quote_literal(n) for n in exported) + "]")

    # ── Record type ──
    out += ["", "", "@dataclass", f"class {cls}:", f'    """One row of the {safe_table} table."""', ""]
    for f in fields:
        out.append(f"    {f.attr}: {annotation(f)} = {python_default(f)}")

    if keys.is_single:
        key = keys.first
        out += [
            "",
            "    def primary_key_info(self) -> tuple[str, object]:",
            '        """Name of the primary key column and this record\'s value for it."""',
            f"        return {quote_literal(key.name)}, self.{key.attr}",
        ]
    if keys.arity:
        out.append("")
        out += _save_method("TABLE_NAME", keys, names)
        out.append("")
        out += _delete_method(keys, names, quote_char, table)

    by_column = {f.name: f for f in fields}
    for fk in foreign_keys or []:
        accessor = _fk_accessor(fk, by_column, models_package, name_funcs, quote_char)
        if accessor:
            out.append("")
            out += accessor

    # ── Nilable shadow ──
    out += [
        "",
        "",
        f"class {row_cls}(NamedTuple):",
        '    """Scan target for one row. Every column may come back NULL."""',
        "",
    ]
    for f in fields:
        out.append(f"    {f.attr}: {nilable_annotation(f)}")

    out += ["", "", f"def _from_row(row) -> {cls}:", f"    raw = {row_cls}(*row)", f"    return {cls}("]
    for f in fields:
        out.append(f"        {f.attr}=decode(raw.{f.attr}, {quote_literal(f.target_type.value)}, {f.nullable}),")
    out.append("    )")

    # ── Reads ──
    if keys.arity:
        params = key_params(keys)
        signature = ", ".join(f"{p}: {t}" for p, t in params)
        args = ", ".join(p for p, _ in params)
        out += [
            "",
            "",
            f"def {names['read_by_key']}({signature}) -> Optional[{cls}]:",
            f'    """Return the {safe_table} row with the given primary key, or None."""',
            f"    return {names['read_one_by_query']}({quote_literal(key_predicate(keys, quote_char))}, {args})",
        ]

    out += [
        "",
        "",
        f"def {names['read_all']}(options: Optional[QueryOptions] = None) -> list[{cls}]:",
        f'    """Every row in the {safe_table} table."""',
        f"    return {names['read_by_query']}(\"\", options=options)",
        "",
        "",
        f"def {names['read_by_query']}(predicate: str = \"\", *args, options: Optional[QueryOptions] = None) -> list[{cls}]:",
        '    """',
        "    Rows matching `predicate`, a WHERE clause body using ? placeholders for `args`.",
        "    Columns are selected in declaration order and scanned positionally.",
        '    """',
        "    query = _SELECT + (f\" WHERE {predicate}\" if predicate else \"\")",
        "    query = connection.apply_query_options(query, options)",
        "    rows = connection.fetch_rows(connection.get(DATABASE), query, args)",
        "    return [_from_row(row) for row in rows]",
        "",
        "",
        f"def {names['read_one_by_query']}(predicate: str = \"\", *args, options: Optional[QueryOptions] = None) -> Optional[{cls}]:",
        '    """First row matching `predicate`, or None."""',
        "    order_by = options.order_by if options else \"\"",
        f"    records = {names['read_by_query']}(predicate, *args, options=QueryOptions(order_by=order_by, limit=1))",
        "    return records[0] if records else None",
        "",
        "",
        f"def {names['execute']}(statement: str, *args) -> ExecResult:",
        '    """Run a write statement with ? placeholders against the table\'s database."""',
        "    return connection.execute(connection.get(DATABASE), statement, args)",
        "",
    ]
    return "\n".join(out)


def render_extended(table: str, models_package: str, name_funcs: bool = False) -> str:
    module = module_name(table)
    names = function_names(module, name_funcs)
    return "\n".join([
        '"""',
        f"Custom queries and methods for the {table.replace(chr(34), chr(39))} table.",
        "Created once by tablegen and never overwritten.",
        '"""',
        f"from {models_package}.{module}.{module}_base import {class_name(table)}, "
        f"{names['read_by_query']}, {names['read_one_by_query']}  # noqa: F401",
        "",
    ])


def render_test(table: str, models_package: str) -> str:
    module = module_name(table)
    cls = class_name(table)
    return "\n".join([
        f'"""Tests for the {module} model. Created once by tablegen; edit freely."""',
        f"from {models_package}.{module} import {cls}",
        "",
        "",
        f"def test_{module}_record_builds():",
        f"    assert {cls}() is not None",
        "",
    ])


def render_package_init(table: str, models_package: str) -> str:
    module = module_name(table)
    return "\n".join([
        f"from {models_package}.{module}.{module}_base import *  # noqa: F401,F403",
        f"from {models_package}.{module}.{module}_extended import *  # noqa: F401,F403",
        "",
    ])


def render_models_init() -> str:
    return '"""Models generated by tablegen."""\n'

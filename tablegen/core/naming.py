"""
Identifier rules for generated source: attribute, parameter, class and module
names, plus the literal quoting used when values are spliced into source text.
"""
import keyword
import re

# Generated parameters that would shadow these are renamed to obj_<name>.
RESERVED_PARAMS = frozenset(keyword.kwlist) | {"type", "typeId"}

# Record attributes may not hide the generated methods.
RESERVED_ATTRS = frozenset(keyword.kwlist) | {"save", "delete", "primary_key_info"}


def _sanitize(name: str) -> str:
    ident = re.sub(r"\W", "_", name)
    if not ident or ident[0].isdigit() or ident[0] == "_":
        ident = "c" + ident
    return ident


def attribute_name(column: str) -> str:
    ident = _sanitize(column)
    return ident + "_" if ident in RESERVED_ATTRS else ident


def param_name(column: str) -> str:
    if column in RESERVED_PARAMS:
        return "obj_" + _sanitize(column)
    return attribute_name(column)


def module_name(table: str) -> str:
    ident = _sanitize(table.lower())
    return ident + "_" if keyword.iskeyword(ident) else ident


def class_name(table: str) -> str:
    """order_items -> OrderItems"""
    parts = [p for p in re.split(r"[^0-9a-zA-Z]+", table) if p]
    name = "".join(p[:1].upper() + p[1:] for p in parts)
    if not name or name[0].isdigit():
        name = "T" + name
    return name


def quote_literal(value: str) -> str:
    """Double-quoted Python string literal with backslashes, newlines and inner quotes escaped."""
    escaped = (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
    )
    return f'"{escaped}"'

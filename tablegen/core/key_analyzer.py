"""Primary key analysis — key arity, names and parameter types for generated CRUD."""
from tablegen.core.naming import RESERVED_PARAMS, param_name
from tablegen.models.column import KeySet, ResolvedField, TargetType

PARAM_TYPES = {
    TargetType.INT: "int",
    TargetType.FLOAT: "float",
    TargetType.TIMESTAMP: "datetime",
    TargetType.TEXT: "str",
}


def analyze(fields: list[ResolvedField]) -> KeySet:
    return KeySet(fields=[f for f in fields if f.is_primary_key])


def key_params(keys: KeySet) -> list[tuple[str, str]]:
    """(parameter name, annotation) per key field, in key order. Names are unique within the list."""
    params: list[tuple[str, str]] = []
    used: set[str] = set()
    for f in keys.fields:
        base = param_name(f.name) if f.name in RESERVED_PARAMS else f.attr
        name, n = base, 2
        while name in used:
            name = f"{base}_{n}"
            n += 1
        used.add(name)
        params.append((name, PARAM_TYPES.get(f.target_type, "int")))
    return params


def supports_back_assignment(keys: KeySet) -> bool:
    """Only a single integer or text key can take the generated id after an insert."""
    return keys.is_single and keys.first.target_type in (TargetType.INT, TargetType.TEXT)

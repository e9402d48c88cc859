"""Runtime support imported by generated model modules."""
from tablegen.runtime import connection  # noqa: F401
from tablegen.runtime.connection import ExecResult, QueryOptions  # noqa: F401
from tablegen.runtime.extract import EMPTY_TIME, FieldSpec, build_upsert, decode, is_empty_key  # noqa: F401

"""
Catalog readers — column descriptors, foreign keys and distinct-value probes.

MySQL is read straight from information_schema. Every other dialect goes through
SQLAlchemy's inspector and is normalized into the same MySQL-shaped descriptors,
so the type resolver only ever sees one vocabulary.
"""
import logging
import re
from typing import Optional, Protocol

from sqlalchemy import inspect, text, types as sa_types
from sqlalchemy.engine import Engine
from sqlalchemy.exc import CompileError, NoSuchTableError, SQLAlchemyError

from tablegen.core.db_connector import _get_default_schema
from tablegen.errors import DatabaseConnectionError, NoSuchTable, ProbeError
from tablegen.models.column import ColumnDescriptor, ForeignKey, KeyRole

logger = logging.getLogger(__name__)


class CatalogReader(Protocol):
    database: str

    def columns(self, table: str) -> list[ColumnDescriptor]: ...

    def distinct_values(self, table: str, column: str) -> list[Optional[str]]: ...

    def foreign_keys(self, table: str) -> list[ForeignKey]: ...

    def list_tables(self) -> list[str]: ...


def _as_text(value) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, (bytes, bytearray)):
        return value.decode("utf-8")
    return str(value)


# ── MySQL ─────────────────────────────────────────────────────────────────────

class InformationSchemaCatalog:
    """Reads MySQL information_schema for one database."""

    def __init__(self, engine: Engine, database: str):
        self.engine = engine
        self.database = database

    def columns(self, table: str) -> list[ColumnDescriptor]:
        try:
            with self.engine.connect() as conn:
                rows = conn.execute(text(
                    "SELECT column_name, is_nullable, column_key, data_type, column_type, column_default, extra "
                    "FROM information_schema.columns "
                    "WHERE table_name = :table AND table_schema = :schema "
                    "ORDER BY ordinal_position"
                ), {"table": table, "schema": self.database}).fetchall()
        except SQLAlchemyError as e:
            raise DatabaseConnectionError(f"Catalog query failed: {e}", table=table) from e

        if not rows:
            raise NoSuchTable(f"No results for table: {table}", table=table)
        return [
            ColumnDescriptor.from_catalog_row(*(_as_text(v) for v in row))
            for row in rows
        ]

    def distinct_values(self, table: str, column: str) -> list[Optional[str]]:
        sql = f"SELECT DISTINCT `{column}` FROM `{self.database}`.`{table}`"
        try:
            with self.engine.connect() as conn:
                return [_as_text(r[0]) for r in conn.execute(text(sql))]
        except SQLAlchemyError as e:
            raise ProbeError(f"Distinct-value probe failed for column {column}: {e}", table=table) from e

    def foreign_keys(self, table: str) -> list[ForeignKey]:
        with self.engine.connect() as conn:
            rows = conn.execute(text(
                "SELECT column_name, referenced_table_name, referenced_column_name "
                "FROM information_schema.key_column_usage "
                "WHERE table_schema = :schema AND table_name = :table "
                "AND referenced_table_name IS NOT NULL "
                "ORDER BY ordinal_position"
            ), {"table": table, "schema": self.database}).fetchall()
        return [
            ForeignKey(column=_as_text(r[0]), referred_table=_as_text(r[1]), referred_column=_as_text(r[2]))
            for r in rows
        ]

    def list_tables(self) -> list[str]:
        with self.engine.connect() as conn:
            rows = conn.execute(text(
                "SELECT DISTINCT table_name FROM information_schema.columns "
                "WHERE table_schema = :schema ORDER BY table_name"
            ), {"schema": self.database}).fetchall()
        return [_as_text(r[0]) for r in rows]


# ── Other dialects ────────────────────────────────────────────────────────────

def _mysql_type(col_type, dialect) -> tuple[str, str]:
    """Map a reflected SQLAlchemy type to MySQL (data_type, column_type) names."""
    if isinstance(col_type, sa_types.Boolean):
        # SQLite stores booleans as 0/1 integers, so they go through the probe like MySQL tinyint(1)
        if dialect.name == "sqlite":
            return "tinyint", "tinyint(1)"
        return "boolean", "boolean"
    if isinstance(col_type, sa_types.Enum):
        members = "','".join(col_type.enums)
        return "enum", f"enum('{members}')"
    if isinstance(col_type, sa_types.SmallInteger):
        return "smallint", "smallint"
    if isinstance(col_type, sa_types.BigInteger):
        return "bigint", "bigint"
    if isinstance(col_type, sa_types.Integer):
        return "int", "int"
    if isinstance(col_type, sa_types.Float):
        return "float", "float"
    if isinstance(col_type, sa_types.Numeric):
        return "decimal", "decimal"
    if isinstance(col_type, sa_types.TIMESTAMP):
        return "timestamp", "timestamp"
    if isinstance(col_type, sa_types.DateTime):
        return "datetime", "datetime"
    if isinstance(col_type, sa_types.Date):
        return "date", "date"
    try:
        full = col_type.compile(dialect=dialect).lower()
    except CompileError:
        full = str(col_type).lower()
    return full.split("(")[0].strip(), full


_CAST_SUFFIX = re.compile(r"(::[\w\s\".\[\]]+)+$")
_CALL = re.compile(r"^\w*\(.*\)$", re.DOTALL)
SQL_NOW = {"current_timestamp", "current_date", "current_time", "localtimestamp", "localtime"}


def _parse_default(default: Optional[str]) -> tuple[Optional[str], bool]:
    """
    Reflected default as a plain literal, and whether the database computes it.
    PostgreSQL casts (`'x'::character varying`) are dropped before unquoting; function
    calls such as now() or nextval(...) and the CURRENT_* keywords count as generated.
    """
    if default is None:
        return None, False
    value = _CAST_SUFFIX.sub("", str(default).strip()).strip()
    if len(value) >= 2 and value[0] == value[-1] == "'":
        return value[1:-1].replace("''", "'"), False
    return value, bool(_CALL.match(value)) or value.lower() in SQL_NOW


class InspectorCatalog:
    """Catalog reader for SQLite / PostgreSQL built on sqlalchemy.inspect."""

    def __init__(self, engine: Engine, database: str, schema: Optional[str] = None):
        self.engine = engine
        self.database = database
        self.schema = schema

    def _q(self, name: str) -> str:
        return self.engine.dialect.identifier_preparer.quote(name)

    def _key_roles(self, insp, table: str) -> dict[str, KeyRole]:
        roles: dict[str, KeyRole] = {}
        for idx in insp.get_indexes(table, schema=self.schema):
            cols = [c for c in idx.get("column_names") or [] if c]
            if cols:
                roles.setdefault(cols[0], KeyRole.UNIQUE if idx.get("unique") and len(cols) == 1 else KeyRole.INDEX)
        for uc in insp.get_unique_constraints(table, schema=self.schema):
            cols = uc.get("column_names") or []
            if len(cols) == 1:
                roles[cols[0]] = KeyRole.UNIQUE
        pk = insp.get_pk_constraint(table, schema=self.schema).get("constrained_columns", []) or []
        for col in pk:
            roles[col] = KeyRole.PRIMARY
        return roles

    def columns(self, table: str) -> list[ColumnDescriptor]:
        try:
            insp = inspect(self.engine)
            raw_cols = insp.get_columns(table, schema=self.schema)
            roles = self._key_roles(insp, table)
        except NoSuchTableError:
            raw_cols = []
        except SQLAlchemyError as e:
            raise DatabaseConnectionError(f"Catalog query failed: {e}", table=table) from e

        if not raw_cols:
            raise NoSuchTable(f"No results for table: {table}", table=table)

        pk_cols = [name for name, role in roles.items() if role is KeyRole.PRIMARY]
        result = []
        for col in raw_cols:
            data_type, column_type = _mysql_type(col["type"], self.engine.dialect)
            default, generated = _parse_default(col.get("default"))
            extra = "DEFAULT_GENERATED" if generated else ""
            role = roles.get(col["name"], KeyRole.NONE)
            if default and default.lower().startswith("nextval("):
                extra = "auto_increment"
            elif col.get("autoincrement") is True:
                extra = "auto_increment"
            elif role is KeyRole.PRIMARY and len(pk_cols) == 1 and data_type == "int" and self.engine.dialect.name == "sqlite":
                # INTEGER PRIMARY KEY aliases the rowid
                extra = "auto_increment"
            result.append(ColumnDescriptor(
                name=col["name"],
                nullable=bool(col.get("nullable", True)) and role is not KeyRole.PRIMARY,
                key_role=role,
                declared_type=data_type,
                full_type=column_type,
                default_value=default,
                extra=extra,
            ))
        return result

    def distinct_values(self, table: str, column: str) -> list[Optional[str]]:
        qualified = f"{self._q(self.schema)}.{self._q(table)}" if self.schema else self._q(table)
        try:
            with self.engine.connect() as conn:
                return [_as_text(r[0]) for r in conn.execute(text(f"SELECT DISTINCT {self._q(column)} FROM {qualified}"))]
        except SQLAlchemyError as e:
            raise ProbeError(f"Distinct-value probe failed for column {column}: {e}", table=table) from e

    def foreign_keys(self, table: str) -> list[ForeignKey]:
        insp = inspect(self.engine)
        result = []
        for fk in insp.get_foreign_keys(table, schema=self.schema):
            for lc, rc in zip(fk["constrained_columns"], fk["referred_columns"]):
                result.append(ForeignKey(column=lc, referred_table=fk["referred_table"], referred_column=rc))
        return result

    def list_tables(self) -> list[str]:
        return sorted(inspect(self.engine).get_table_names(schema=self.schema))


def catalog_for(engine: Engine, database: str) -> CatalogReader:
    if engine.dialect.name == "mysql":
        return InformationSchemaCatalog(engine, database)
    return InspectorCatalog(engine, database, schema=_get_default_schema(engine.dialect.name))

"""
Connection provider for generated modules.
Hands out pooled SQLAlchemy engines keyed by database name and runs statements
with positional `?` arguments rewritten to named binds.
"""
import logging
import threading
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from tablegen.config import settings
from tablegen.errors import DatabaseConnectionError

logger = logging.getLogger(__name__)


@dataclass
class QueryOptions:
    """Optional ORDER BY / LIMIT applied to generated read queries."""
    order_by: str = ""
    limit: int = 0


@dataclass
class ExecResult:
    rowcount: int
    lastrowid: Optional[Any]


class ConnectionProvider:
    """Pooled engines keyed by database name, shared by every generated module."""

    def __init__(self, url_template: Optional[str] = None):
        self.url_template = url_template or settings.RUNTIME_DATABASE_URL
        self._engines: dict[str, Engine] = {}
        self._lock = threading.Lock()

    def get(self, database: str) -> Engine:
        """Return the cached engine for `database`, opening and checking a new one if needed."""
        with self._lock:
            engine = self._engines.get(database)
            if engine is not None:
                return engine
            url = self.url_template.format(database=database)
            engine = create_engine(url, pool_pre_ping=True)
            try:
                with engine.connect() as conn:
                    conn.execute(text("SELECT 1"))
            except SQLAlchemyError as e:
                engine.dispose()
                raise DatabaseConnectionError(f"Could not connect to database {database!r}: {e}") from e
            logger.debug("Opened engine for database %s", database)
            self._engines[database] = engine
            return engine

    def register(self, database: str, engine: Engine) -> None:
        with self._lock:
            self._engines[database] = engine

    def dispose(self) -> None:
        with self._lock:
            for engine in self._engines.values():
                engine.dispose()
            self._engines.clear()


provider = ConnectionProvider()


def get(database: str) -> Engine:
    return provider.get(database)


def register(database: str, engine: Engine) -> None:
    provider.register(database, engine)


# ── Statement helpers ─────────────────────────────────────────────────────────

def apply_query_options(query: str, options: Optional[QueryOptions]) -> str:
    if options is None:
        return query
    if options.order_by:
        query += f" ORDER BY {options.order_by}"
    if options.limit:
        query += f" LIMIT {int(options.limit)}"
    return query


def bind_positional(statement: str, args: Sequence[Any]) -> tuple[str, dict[str, Any]]:
    """
    Rewrite `?` placeholders outside quoted text into named binds (:p0, :p1, ...).
    Colons inside quoted literals are escaped so SQLAlchemy does not read them as binds.
    """
    out: list[str] = []
    params: dict[str, Any] = {}
    quote: Optional[str] = None
    escaped = False
    for ch in statement:
        if quote:
            # a backslash escapes the next character inside MySQL string literals
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == quote:
                quote = None
            out.append("\\:" if ch == ":" else ch)
        elif ch in ("'", '"', "`"):
            quote = ch
            out.append(ch)
        elif ch == "?":
            name = f"p{len(params)}"
            if len(params) >= len(args):
                raise ValueError(f"Statement has more placeholders than the {len(args)} argument(s) given")
            params[name] = args[len(params)]
            out.append(f":{name}")
        else:
            out.append(ch)
    if len(params) != len(args):
        raise ValueError(f"Statement has {len(params)} placeholder(s) but {len(args)} argument(s) were given")
    return "".join(out), params


def fetch_rows(engine: Engine, statement: str, args: Sequence[Any] = ()) -> list[tuple]:
    sql, params = bind_positional(statement, args)
    with engine.connect() as conn:
        return [tuple(row) for row in conn.execute(text(sql), params)]


def execute(engine: Engine, statement: str, args: Sequence[Any] = ()) -> ExecResult:
    sql, params = bind_positional(statement, args)
    return execute_named(engine, sql, params)


def execute_named(engine: Engine, statement: str, params: dict[str, Any]) -> ExecResult:
    """Run one write statement. A RETURNING row supplies the generated key in place of the cursor's lastrowid."""
    with engine.begin() as conn:
        result = conn.execute(text(statement), params)
        if result.returns_rows:
            row = result.first()
            return ExecResult(rowcount=1 if row else 0, lastrowid=row[0] if row else None)
        return ExecResult(rowcount=result.rowcount, lastrowid=result.lastrowid)

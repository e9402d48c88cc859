"""
Database connector — SQLAlchemy engine factory for the source database.
Supports MySQL (primary target), SQLite and PostgreSQL.
"""
import logging
from typing import Optional
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from tablegen.errors import DatabaseConnectionError
from tablegen.models.connection import ConnectionRequest

logger = logging.getLogger(__name__)


def create_engine_from_request(req: ConnectionRequest) -> Engine:
    """Build and test a SQLAlchemy engine from a ConnectionRequest."""
    url = req.get_sqlalchemy_url()
    engine = create_engine(url, pool_pre_ping=True)
    # Validate the connection immediately
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        engine.dispose()
        raise DatabaseConnectionError(f"Could not connect to database: {e}") from e
    logger.info("Connected to %s database %s", req.db_type, req.database)
    return engine


def _get_default_schema(db_type: str) -> Optional[str]:
    if db_type == "postgresql":
        return "public"
    return None   # SQLite has no schema concept; MySQL uses the database name


def identifier_quote(engine: Engine) -> str:
    """Quote character used for identifiers in generated SQL text."""
    return "`" if engine.dialect.name == "mysql" else '"'

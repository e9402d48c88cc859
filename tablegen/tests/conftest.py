import os
import sys

# Add the repository root to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..', '..')))

import pytest
import sqlite3
import tempfile
from typing import Optional
from fastapi.testclient import TestClient
from sqlalchemy import create_engine

from tablegen.errors import NoSuchTable, ProbeError
from tablegen.main import app
from tablegen.models.column import ColumnDescriptor, ForeignKey


def col(name, data_type="int", nullable=False, key="", column_type=None, default=None, extra=""):
    """Column descriptor shaped like an information_schema row."""
    return ColumnDescriptor.from_catalog_row(
        name, "YES" if nullable else "NO", key, data_type, column_type or data_type, default, extra,
    )


class FakeCatalog:
    """In-memory catalog reader."""

    def __init__(self, database="shop", tables=None, samples=None, fks=None, failing_probes=()):
        self.database = database
        self.tables: dict[str, list[ColumnDescriptor]] = tables or {}
        self.samples: dict[tuple[str, str], list[Optional[str]]] = samples or {}
        self.fks: dict[str, list[ForeignKey]] = fks or {}
        self.failing_probes = set(failing_probes)
        self.probe_calls: list[tuple[str, str]] = []

    def columns(self, table):
        if table not in self.tables:
            raise NoSuchTable(f"No results for table: {table}", table=table)
        return list(self.tables[table])

    def distinct_values(self, table, column):
        self.probe_calls.append((table, column))
        if (table, column) in self.failing_probes:
            raise ProbeError(f"Distinct-value probe failed for column {column}", table=table)
        return list(self.samples.get((table, column), []))

    def foreign_keys(self, table):
        return list(self.fks.get(table, []))

    def list_tables(self):
        return sorted(self.tables)


SHOP_DDL = [
    """
    CREATE TABLE customers (
        id          INTEGER PRIMARY KEY,
        name        TEXT    NOT NULL,
        active      BOOLEAN NOT NULL DEFAULT 1,
        email       TEXT    UNIQUE,
        created_at  TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )""",
    """
    CREATE TABLE orders (
        id          INTEGER PRIMARY KEY,
        customer_id INTEGER REFERENCES customers(id),
        status      TEXT,
        quantity    SMALLINT NOT NULL DEFAULT 1,
        total       REAL
    )""",
    """
    CREATE TABLE order_items (
        order_id    INTEGER NOT NULL,
        line        INTEGER NOT NULL,
        sku         TEXT,
        PRIMARY KEY (order_id, line)
    )""",
    """
    CREATE TABLE audit_log (
        message     TEXT,
        level       SMALLINT
    )""",
]

SHOP_ROWS = [
    "INSERT INTO customers (name, active, email) VALUES ('Ann', 1, 'ann@example.com')",
    "INSERT INTO customers (name, active, email) VALUES ('Bob', 0, 'bob@example.com')",
    "INSERT INTO orders (customer_id, status, quantity, total) VALUES (1, 'PENDING', 1, 9.5)",
    "INSERT INTO orders (customer_id, status, quantity, total) VALUES (2, 'SHIPPED', 3, 30.0)",
    "INSERT INTO audit_log (message, level) VALUES ('boot', 1)",
    "INSERT INTO audit_log (message, level) VALUES ('warn', 2)",
    "INSERT INTO audit_log (message, level) VALUES ('fail', 3)",
]


@pytest.fixture(scope="session")
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def temp_sqlite_db():
    fd, path = tempfile.mkstemp(suffix=".db")
    try:
        conn = sqlite3.connect(path)
        cur = conn.cursor()
        for ddl in SHOP_DDL:
            cur.execute(ddl)
        for row in SHOP_ROWS:
            cur.execute(row)
        conn.commit()
        conn.close()
        yield path
    finally:
        os.close(fd)
        os.remove(path)


@pytest.fixture
def sqlite_engine(temp_sqlite_db):
    engine = create_engine(f"sqlite:///{temp_sqlite_db}")
    yield engine
    engine.dispose()

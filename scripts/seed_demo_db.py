#!/usr/bin/env python3
"""
Seed a local SQLite database to generate demo models from.
Usage (from the repository root):
    python scripts/seed_demo_db.py
    tablegen --dialect sqlite --sqlite-path scripts/demo.db --db demo --all --output-dir scripts/out
Creates: scripts/demo.db

The schema covers every shape the generator distinguishes: single integer keys,
a text key, a composite key, a keyless log table, small-integer flag columns
that hold only 0/1 (become bool) next to ones that do not (stay int), and
foreign keys for --follow-deps.
"""
import random
import sqlite3
from datetime import datetime, timedelta
from pathlib import Path

DB_PATH = Path(__file__).parent / "demo.db"

DDL = [
    """
    CREATE TABLE IF NOT EXISTS customers (
        id          INTEGER PRIMARY KEY AUTOINCREMENT,
        name        TEXT    NOT NULL,
        email       TEXT    UNIQUE NOT NULL,
        active      SMALLINT NOT NULL DEFAULT 1,
        tier        SMALLINT NOT NULL DEFAULT 0,
        created_at  TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )""",
    """
    CREATE TABLE IF NOT EXISTS products (
        sku         TEXT    PRIMARY KEY,
        name        TEXT    NOT NULL,
        price       REAL    NOT NULL,
        discontinued BOOLEAN NOT NULL DEFAULT 0,
        stock_qty   INTEGER DEFAULT 0
    )""",
    """
    CREATE TABLE IF NOT EXISTS orders (
        id              INTEGER PRIMARY KEY AUTOINCREMENT,
        customer_id     INTEGER REFERENCES customers(id),
        order_date      TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        status          TEXT,
        total_amount    REAL
    )""",
    """
    CREATE TABLE IF NOT EXISTS order_items (
        order_id    INTEGER NOT NULL REFERENCES orders(id),
        line        INTEGER NOT NULL,
        sku         TEXT    REFERENCES products(sku),
        quantity    INTEGER NOT NULL,
        unit_price  REAL    NOT NULL,
        PRIMARY KEY (order_id, line)
    )""",
    """
    CREATE TABLE IF NOT EXISTS audit_log (
        logged_at   TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        level       SMALLINT,
        message     TEXT
    )""",
]

STATUSES = ['PENDING', 'PROCESSING', 'SHIPPED', 'CANCELLED', 'DELIVERED']


def seed():
    conn = sqlite3.connect(DB_PATH)
    cur = conn.cursor()

    for stmt in DDL:
        cur.execute(stmt)

    for i in range(1, 51):
        cur.execute("INSERT OR IGNORE INTO customers(name, email, active, tier) VALUES (?,?,?,?)",
                    (f"Customer {i}", f"user{i}@example.com", random.randint(0, 1), random.randint(0, 3)))

    for i in range(1, 21):
        cur.execute("INSERT OR IGNORE INTO products(sku, name, price, discontinued, stock_qty) VALUES (?,?,?,?,?)",
                    (f"SKU-{i:04d}", f"Product {i}", round(random.uniform(5, 500), 2),
                     random.randint(0, 1), random.randint(0, 1000)))

    for _ in range(100):
        order_dt = (datetime.now() - timedelta(days=random.randint(0, 365))).isoformat(sep=" ")
        cur.execute("INSERT INTO orders(customer_id, order_date, status) VALUES (?,?,?)",
                    (random.randint(1, 50), order_dt, random.choice(STATUSES)))
        order_id = cur.lastrowid
        total = 0.0
        for line in range(1, random.randint(2, 5)):
            qty = random.randint(1, 5)
            price = round(random.uniform(5, 500), 2)
            total += qty * price
            cur.execute("INSERT INTO order_items(order_id, line, sku, quantity, unit_price) VALUES (?,?,?,?,?)",
                        (order_id, line, f"SKU-{random.randint(1, 20):04d}", qty, price))
        cur.execute("UPDATE orders SET total_amount=? WHERE id=?", (round(total, 2), order_id))

    for level, message in ((1, "seeded"), (2, "slow query"), (3, "retry")):
        cur.execute("INSERT INTO audit_log(level, message) VALUES (?,?)", (level, message))

    conn.commit()
    conn.close()
    print(f"Demo database seeded: {DB_PATH}")
    print("   Tables: customers, products, orders, order_items, audit_log")


if __name__ == "__main__":
    seed()

"""
Command line entry point.

Usage:
    tablegen --tables users,orders --db shop --host localhost
    tablegen --all --db shop --host localhost --follow-deps
    tablegen --dialect sqlite --sqlite-path demo.db --db demo --all
"""
import argparse
import logging
import sys
from typing import Optional

from tablegen.config import settings
from tablegen.core.orchestrator import generate
from tablegen.errors import ConfigurationError, DatabaseConnectionError
from tablegen.models.connection import ConnectionRequest
from tablegen.models.generation import BatchReport

logger = logging.getLogger("tablegen")


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate typed data-access modules from database tables")
    parser.add_argument("--tables", default="", help="Comma separated list of tables")
    parser.add_argument("--db", default="", help="Database")
    parser.add_argument("--host", default=settings.DB_HOST, help="DB Host")
    parser.add_argument("--port", type=int, default=None, help="DB Port (3306 for MySQL, 5432 for PostgreSQL by default)")
    parser.add_argument("--user", default=settings.DB_USER, help="DB user")
    parser.add_argument("--password", default=settings.DB_PASSWORD, help="DB password")
    parser.add_argument("--dialect", choices=["mysql", "sqlite", "postgresql"], default=settings.DB_DIALECT)
    parser.add_argument("--sqlite-path", default=None, help="Path to the .db file (SQLite only)")
    parser.add_argument("--all", action="store_true", help="Run for all tables")
    parser.add_argument("--name-funcs", action="store_true",
                        help="Include the table name in generated function names")
    parser.add_argument("--output-dir", default=settings.OUTPUT_DIR, help="Directory receiving the models package")
    parser.add_argument("--workers", type=int, default=settings.WORKERS, help="Concurrent table workers")
    parser.add_argument("--follow-deps", action="store_true",
                        help="Also generate tables referenced through foreign keys")
    return parser.parse_args(argv)


def build_request(args: argparse.Namespace) -> ConnectionRequest:
    if not args.db:
        raise ConfigurationError("You must include the 'db' flag")
    if not args.tables.strip() and not args.all:
        raise ConfigurationError("You must include the 'tables' flag or 'all'")
    if args.dialect == "sqlite":
        if not args.sqlite_path:
            raise ConfigurationError("You must include the 'sqlite-path' flag for sqlite")
    elif not args.host:
        raise ConfigurationError("You must include the 'host' flag")
    return ConnectionRequest(
        db_type=args.dialect,
        database=args.db,
        file_path=args.sqlite_path,
        host=args.host,
        port=args.port if args.port is not None else settings.DB_PORT,
        username=args.user,
        password=args.password,
    )


def print_report(report: BatchReport) -> None:
    print("\n======= Results =======")
    print(f"Processed: {report.processed}")
    print(f"Duration: {report.duration_seconds}s")
    if report.errored:
        print(f"\n======= Errors: {report.errored}/{report.processed} =======")
        for i, err in enumerate(report.errors, start=1):
            print(f"{i} : {err}")


def main(argv: Optional[list[str]] = None) -> int:
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )
    args = parse_args(argv)
    try:
        req = build_request(args)
        report = generate(
            req,
            tables=[t.strip() for t in args.tables.split(",")],
            all_tables=args.all,
            output_dir=args.output_dir,
            name_funcs=args.name_funcs,
            workers=args.workers,
            follow_dependencies=args.follow_deps,
        )
    except (ConfigurationError, DatabaseConnectionError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    print_report(report)
    return 1 if report.errored else 0


if __name__ == "__main__":
    raise SystemExit(main())

import pytest

from tablegen.cli import build_request, main, parse_args
from tablegen.config import settings
from tablegen.errors import ConfigurationError


@pytest.mark.parametrize("argv", [
    ["--tables", "users"],
    ["--db", "shop"],
    ["--db", "shop", "--tables", "users", "--host", ""],
    ["--db", "demo", "--all", "--dialect", "sqlite"],
])
def test_missing_flags(argv):
    with pytest.raises(ConfigurationError):
        build_request(parse_args(argv))


def test_missing_flags_exit_code(capsys):
    assert main(["--tables", "users"]) == 2
    assert "db" in capsys.readouterr().err


def test_build_request():
    req = build_request(parse_args(["--db", "shop", "--tables", "users,orders", "--host", "db1", "--port", "3307"]))
    assert req.db_type == "mysql"
    assert req.get_sqlalchemy_url().endswith("@db1:3307/shop")


@pytest.mark.parametrize("dialect, port", [("postgresql", 5432), ("mysql", 3306)])
def test_port_defaults_to_dialect(monkeypatch, dialect, port):
    monkeypatch.setattr(settings, "DB_PORT", None)
    req = build_request(parse_args(["--db", "shop", "--tables", "users", "--host", "h", "--dialect", dialect]))
    assert req.port is None
    assert req.get_sqlalchemy_url().endswith(f"@h:{port}/shop")


def test_port_from_settings(monkeypatch):
    monkeypatch.setattr(settings, "DB_PORT", 6543)
    req = build_request(parse_args(["--db", "shop", "--tables", "users", "--host", "h", "--dialect", "postgresql"]))
    assert req.get_sqlalchemy_url().endswith("@h:6543/shop")


def test_generate_from_sqlite(temp_sqlite_db, tmp_path, monkeypatch, capsys):
    monkeypatch.setattr(settings, "FORMATTER_COMMAND", "")
    code = main([
        "--dialect", "sqlite", "--sqlite-path", temp_sqlite_db, "--db", "demo",
        "--tables", "customers, orders", "--output-dir", str(tmp_path), "--name-funcs",
    ])
    assert code == 0
    assert "Processed: 2" in capsys.readouterr().out
    source = (tmp_path / "models" / "orders" / "orders_base.py").read_text()
    assert "def read_orders_by_key(" in source


def test_unknown_table_exit_code(temp_sqlite_db, tmp_path, monkeypatch, capsys):
    monkeypatch.setattr(settings, "FORMATTER_COMMAND", "")
    code = main([
        "--dialect", "sqlite", "--sqlite-path", temp_sqlite_db, "--db", "demo",
        "--tables", "ghosts", "--output-dir", str(tmp_path),
    ])
    assert code == 1
    assert "Errors: 1/1" in capsys.readouterr().out

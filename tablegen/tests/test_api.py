import pytest
from unittest.mock import patch

from tablegen import __version__
from tablegen.config import settings
from tablegen.core.catalog import InspectorCatalog
from tablegen.errors import DatabaseConnectionError


def test_health_check(client):
    with patch("tablegen.api.health._check_formatter", return_value={"status": "up", "error": None}):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json() == {
            "status": "ok",
            "version": __version__,
            "services": {
                "formatter": {"status": "up", "error": None}
            }
        }


def test_health_check_degraded(client):
    with patch("tablegen.api.health._check_formatter", return_value={"status": "down", "error": "missing"}):
        response = client.get("/api/health")
        assert response.json()["status"] == "degraded"


def test_inspect_table(client, temp_sqlite_db):
    payload = {
        "connection": {"db_type": "sqlite", "database": "demo", "file_path": temp_sqlite_db},
        "table_name": "customers",
        "include_source": True,
    }
    response = client.post("/api/inspect", json=payload)
    assert response.status_code == 200
    data = response.json()
    fields = {f["name"]: f["target_type"] for f in data["model"]["fields"]}
    assert fields == {"id": "int", "name": "text", "active": "bool", "email": "text", "created_at": "timestamp"}
    assert data["model"]["keys"]["fields"][0]["name"] == "id"
    assert "class Customers:" in data["source"]


def test_inspect_missing_table(client, temp_sqlite_db):
    payload = {
        "connection": {"db_type": "sqlite", "database": "demo", "file_path": temp_sqlite_db},
        "table_name": "ghosts",
    }
    response = client.post("/api/inspect", json=payload)
    assert response.status_code == 404


def test_inspect_catalog_failure(client, temp_sqlite_db):
    payload = {
        "connection": {"db_type": "sqlite", "database": "demo", "file_path": temp_sqlite_db},
        "table_name": "customers",
    }
    with patch.object(InspectorCatalog, "columns", side_effect=DatabaseConnectionError("Catalog query failed: gone")):
        response = client.post("/api/inspect", json=payload)
    assert response.status_code == 400
    assert "Catalog query failed" in response.json()["detail"]


def test_generate_endpoint(client, temp_sqlite_db, tmp_path):
    with patch.object(settings, "FORMATTER_COMMAND", ""):
        response = client.post("/api/generate", json={
            "connection": {"db_type": "sqlite", "database": "demo", "file_path": temp_sqlite_db},
            "tables": ["orders"],
            "follow_dependencies": True,
            "output_dir": str(tmp_path),
        })
    assert response.status_code == 200
    data = response.json()
    assert data["processed"] == 2
    assert data["errored"] == 0
    assert (tmp_path / "models" / "customers" / "customers_base.py").exists()


def test_generate_without_tables(client, temp_sqlite_db):
    response = client.post("/api/generate", json={
        "connection": {"db_type": "sqlite", "database": "demo", "file_path": temp_sqlite_db},
    })
    assert response.status_code == 400


@pytest.mark.parametrize("payload", [{}, {"table_name": "users"}])
def test_inspect_validation(client, payload):
    response = client.post("/api/inspect", json=payload)
    assert response.status_code == 422

"""Integration tests for the DuckDB gateway, run against real in-memory databases."""

import asyncio

import pytest

from sqlwarden.adapters import GatewayError
from sqlwarden.adapters.duckdb import DuckDBGateway


def _fetch(gateway: DuckDBGateway, path: str, **body):
    body.setdefault("database", "default")
    return asyncio.run(gateway.fetch(path, body))


@pytest.fixture
def gateway():
    g = DuckDBGateway()
    _fetch(
        g,
        "database/execute",
        sql="CREATE TABLE users (id INTEGER PRIMARY KEY, name VARCHAR NOT NULL, "
        "active BOOLEAN DEFAULT true, note VARCHAR)",
    )
    _fetch(g, "database/execute", sql="INSERT INTO users VALUES (1, 'ann', true, NULL)")
    _fetch(g, "database/execute", sql="INSERT INTO users VALUES (2, 'bob', false, 'x')")
    _fetch(g, "database/execute", sql="INSERT INTO users VALUES (3, 'cy', true, NULL)")
    yield g
    g.close()


def test_query_rows_and_columns(gateway) -> None:
    result = _fetch(gateway, "database/query", sql="SELECT id, name FROM users ORDER BY id")
    assert result["columns"] == ["id", "name"]
    assert result["rows"][0] == {"id": 1, "name": "ann"}
    assert result["truncated"] is False


def test_query_truncates_at_max_rows(gateway) -> None:
    result = _fetch(gateway, "database/query", sql="SELECT id FROM users", maxRows=2)
    assert len(result["rows"]) == 2
    assert result["truncated"] is True


def test_query_binds_params(gateway) -> None:
    result = _fetch(
        gateway, "database/query", sql="SELECT name FROM users WHERE id = ?", params=[2]
    )
    assert result["rows"] == [{"name": "bob"}]


def test_execute_reports_rows_affected(gateway) -> None:
    result = _fetch(gateway, "database/execute", sql="UPDATE users SET active = false")
    assert result == {"rowsAffected": 3}


def test_describe_table(gateway) -> None:
    columns = _fetch(gateway, "database/describe_table", table="users")["columns"]
    by_name = {c["name"]: c for c in columns}
    assert [c["name"] for c in columns] == ["id", "name", "active", "note"]
    assert by_name["id"]["primaryKey"] is True
    assert by_name["id"]["type"] == "INTEGER"
    assert by_name["name"]["nullable"] is False
    assert by_name["note"]["nullable"] is True
    assert by_name["active"]["defaultValue"] is not None
    assert by_name["note"]["primaryKey"] is False


def test_describe_schema_qualified(gateway) -> None:
    columns = _fetch(gateway, "database/describe_table", table="main.users")["columns"]
    assert len(columns) == 4


def test_describe_missing_table(gateway) -> None:
    with pytest.raises(GatewayError, match="does not exist"):
        _fetch(gateway, "database/describe_table", table="nope")


def test_list_tables(gateway) -> None:
    tables = _fetch(gateway, "database/list_tables")["tables"]
    assert {"schema": "main", "name": "users", "type": "BASE TABLE"} in tables


def test_list_tables_schema_filter(gateway) -> None:
    _fetch(gateway, "database/execute", sql="CREATE SCHEMA analytics")
    _fetch(gateway, "database/execute", sql="CREATE TABLE analytics.events (id INTEGER)")
    tables = _fetch(gateway, "database/list_tables", schema="analytics")["tables"]
    assert [t["name"] for t in tables] == ["events"]


def test_explain(gateway) -> None:
    plan = _fetch(gateway, "database/explain", sql="SELECT * FROM users")["plan"]
    assert isinstance(plan, str)
    assert plan


def test_explain_accepts_explain_prefix(gateway) -> None:
    assert _fetch(gateway, "database/explain", sql="explain SELECT 1")["plan"]


def test_bad_sql_raises_gateway_error(gateway) -> None:
    with pytest.raises(GatewayError, match="DuckDB execution failed"):
        _fetch(gateway, "database/query", sql="SELECT * FROM missing_table")


def test_unknown_database() -> None:
    with pytest.raises(GatewayError, match='Unknown database "other"'):
        _fetch(DuckDBGateway(), "database/query", database="other", sql="SELECT 1")


def test_unsupported_endpoint() -> None:
    with pytest.raises(GatewayError, match="Unsupported endpoint"):
        _fetch(DuckDBGateway(), "database/drop_everything")


def test_file_database(tmp_path) -> None:
    path = str(tmp_path / "local.duckdb")
    g = DuckDBGateway({"local": path})
    _fetch(g, "database/execute", database="local", sql="CREATE TABLE t (a INTEGER)")
    g.close()

    g = DuckDBGateway({"local": path})
    tables = _fetch(g, "database/list_tables", database="local")["tables"]
    g.close()
    assert [t["name"] for t in tables] == ["t"]

"""CLI tests for schema ls / schema show."""

from __future__ import annotations

import duckdb
import pytest
from click.testing import CliRunner

from sqlwarden.cli import main


@pytest.fixture
def db(tmp_path) -> str:
    path = tmp_path / "shop.duckdb"
    conn = duckdb.connect(str(path))
    conn.execute("CREATE TABLE orders (id INTEGER PRIMARY KEY, total DECIMAL(10, 2) NOT NULL)")
    conn.execute("CREATE SCHEMA archive")
    conn.execute("CREATE TABLE archive.old_orders (id INTEGER)")
    conn.close()
    return f"shop={path}"


def test_ls(db) -> None:
    runner = CliRunner()
    result = runner.invoke(main, ["schema", "ls", "--db", db, "--database", "shop"])
    assert result.exit_code == 0
    assert result.output.startswith('Tables in "shop":')
    assert "old_orders" in result.output
    assert "orders" in result.output


def test_ls_schema_filter(db) -> None:
    runner = CliRunner()
    result = runner.invoke(main, ["schema", "ls", "archive", "--db", db, "--database", "shop"])
    assert result.exit_code == 0
    assert result.output.startswith('Tables in "shop" (schema: "archive"):')
    assert "1. old_orders" in result.output
    assert " orders" not in result.output.replace("old_orders", "")


def test_ls_empty_schema(db) -> None:
    runner = CliRunner()
    result = runner.invoke(main, ["schema", "ls", "nowhere", "--db", db, "--database", "shop"])
    assert result.exit_code == 0
    assert 'No tables found in database "shop" schema "nowhere".' in result.output


def test_show(db) -> None:
    runner = CliRunner()
    result = runner.invoke(main, ["schema", "show", "orders", "--db", db, "--database", "shop"])
    assert result.exit_code == 0
    assert result.output.startswith('Table "orders" schema:')
    assert "  id INTEGER NOT NULL [PK]" in result.output
    assert "total DECIMAL(10,2) NOT NULL" in result.output


def test_show_missing_table(db) -> None:
    runner = CliRunner()
    result = runner.invoke(main, ["schema", "show", "nope", "--db", db, "--database", "shop"])
    assert result.exit_code == 1
    assert "DESCRIBE_FAILED" in result.output
    assert 'Table "nope" does not exist' in result.output

"""CLI integration tests for query, exec and explain against local DuckDB."""

from __future__ import annotations

import json
from unittest.mock import patch

from click.testing import CliRunner

from sqlwarden.cli import main


def _db(tmp_path) -> str:
    return f"main={tmp_path / 'app.duckdb'}"


def _seed(runner: CliRunner, db: str) -> None:
    for sql in (
        "CREATE TABLE users (id INTEGER PRIMARY KEY, name VARCHAR)",
        "INSERT INTO users VALUES (1, 'alice'), (2, 'bob')",
    ):
        result = runner.invoke(main, ["exec", sql, "--db", db, "--database", "main", "--confirm"])
        assert result.exit_code == 0, result.output


class TestQuery:
    def test_in_memory_select(self) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["query", "SELECT 42 AS answer"])
        assert result.exit_code == 0
        assert result.output.splitlines()[0] == "Query returned 1 row(s):"
        assert "answer" in result.output
        assert "42" in result.output

    def test_json_envelope(self, tmp_path) -> None:
        runner = CliRunner()
        db = _db(tmp_path)
        _seed(runner, db)
        result = runner.invoke(main, [
            "query", "SELECT id, name FROM users WHERE id = ?", "--param", "2",
            "--db", db, "--database", "main", "--format", "json",
        ])
        assert result.exit_code == 0
        data = json.loads(result.output)
        meta = data["metadata"]
        assert meta["success"] is True
        assert meta["rowCount"] == 1
        assert meta["columns"] == ["id", "name"]
        assert meta["tables"] == ["users"]
        assert "2 | bob" in data["result"]

    def test_max_rows_truncates(self, tmp_path) -> None:
        runner = CliRunner()
        db = _db(tmp_path)
        _seed(runner, db)
        result = runner.invoke(main, [
            "query", "SELECT * FROM users", "--db", db, "--database", "main",
            "--max-rows", "1",
        ])
        assert result.exit_code == 0
        assert "(truncated)" in result.output

    def test_write_rejected(self) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["query", "DELETE FROM users"])
        assert result.exit_code == 1
        assert 'Write operation "DELETE"' in result.output
        assert "= code: SQL_NOT_ALLOWED (not retriable)" in result.output

    def test_database_not_configured(self) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["query", "SELECT 1", "--database", "warehouse"])
        assert result.exit_code == 1
        assert "DATABASE_NOT_ALLOWED" in result.output

    def test_bad_db_option(self) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["query", "SELECT 1", "--db", "nopath"])
        assert result.exit_code == 1
        assert "Expected NAME=PATH" in result.output

    def test_upstream_failure_is_retriable(self) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["query", "SELECT * FROM missing_table"])
        assert result.exit_code == 1
        assert result.output.startswith("Error executing query:")
        assert "= code: QUERY_FAILED (retriable)" in result.output


class TestExec:
    def test_requires_confirm(self, tmp_path) -> None:
        runner = CliRunner()
        db = _db(tmp_path)
        _seed(runner, db)
        result = runner.invoke(main, [
            "exec", "DELETE FROM users WHERE id = 1", "--db", db, "--database", "main",
        ])
        assert result.exit_code == 1
        assert "CONFIRMATION_REQUIRED" in result.output

        # Nothing was deleted.
        result = runner.invoke(main, [
            "query", "SELECT count(*) AS n FROM users", "--db", db, "--database", "main",
        ])
        assert "2" in result.output.splitlines()[-1]

    def test_confirmed_write(self, tmp_path) -> None:
        runner = CliRunner()
        db = _db(tmp_path)
        _seed(runner, db)
        result = runner.invoke(main, [
            "exec", "UPDATE users SET name = ? WHERE id = ?", "--param", "carol",
            "--param", "1", "--db", db, "--database", "main", "--confirm", "--format", "json",
        ])
        assert result.exit_code == 0
        meta = json.loads(result.output)["metadata"]
        assert meta["rowsAffected"] == 1
        assert meta["tables"] == ["users"]

    def test_injection_blocked(self) -> None:
        runner = CliRunner()
        result = runner.invoke(main, [
            "exec", "DELETE FROM users WHERE name = '' OR 1=1", "--confirm",
        ])
        assert result.exit_code == 1
        assert "SQL_INJECTION_DETECTED" in result.output


class TestExplain:
    def test_plan(self) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["explain", "SELECT 1"])
        assert result.exit_code == 0
        assert result.output.startswith("Query execution plan:")

    def test_write_rejected(self) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["explain", "DROP TABLE users"])
        assert result.exit_code == 1
        assert "SQL_NOT_ALLOWED" in result.output


def test_audit_log_from_config(tmp_path) -> None:
    config = tmp_path / "sqlwarden.toml"
    config.write_text("audit_log = true\n\n[databases]\ndefault = \":memory:\"\n")
    log_root = tmp_path / "logs"
    runner = CliRunner()
    with patch("sqlwarden.querylog._LOG_ROOT", log_root):
        result = runner.invoke(main, ["query", "SELECT 1", "--config", str(config)])
    assert result.exit_code == 0
    entries = [
        json.loads(line)
        for f in log_root.rglob("*.jsonl")
        for line in f.read_text().splitlines()
    ]
    assert len(entries) == 1
    assert entries[0]["action"] == "query"
    assert entries[0]["allowed"] is True


def test_empty_allow_list_in_config_blocks_everything(tmp_path) -> None:
    config = tmp_path / "sqlwarden.toml"
    config.write_text("allowed_databases = []\n\n[databases]\ndefault = \":memory:\"\n")
    runner = CliRunner()
    result = runner.invoke(main, ["query", "SELECT 1", "--config", str(config)])
    assert result.exit_code == 1
    assert "DATABASE_NOT_ALLOWED" in result.output

"""Tests for referenced-table extraction."""

from sqlwarden.policy.tables import referenced_tables


def test_simple_select() -> None:
    assert referenced_tables("SELECT * FROM users") == ["users"]


def test_join_sorted_and_deduplicated() -> None:
    sql = "SELECT * FROM orders o JOIN users u ON o.user_id = u.id JOIN users x ON 1 = 1"
    assert referenced_tables(sql) == ["orders", "users"]


def test_schema_qualified() -> None:
    assert referenced_tables("SELECT * FROM analytics.events") == ["analytics.events"]


def test_cte_names_excluded() -> None:
    sql = "WITH recent AS (SELECT * FROM orders) SELECT * FROM recent"
    assert referenced_tables(sql) == ["orders"]


def test_write_target_included() -> None:
    assert referenced_tables("DELETE FROM sessions WHERE id = 1") == ["sessions"]


def test_multiple_statements() -> None:
    assert referenced_tables("SELECT 1 FROM a; SELECT 2 FROM b") == ["a", "b"]


def test_unparseable_returns_empty() -> None:
    assert referenced_tables("SELECT (1") == []

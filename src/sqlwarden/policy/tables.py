"""Best-effort list of the physical tables a statement references."""

from __future__ import annotations

import sqlglot
from sqlglot import exp


def referenced_tables(sql: str, *, dialect: str | None = None) -> list[str]:
    """Return sorted table names (schema.table when qualified), CTE names excluded.

    Informational only: SQL that sqlglot cannot parse yields an empty list and
    never blocks a request.
    """
    try:
        statements = [s for s in sqlglot.parse(sql, dialect=dialect) if s is not None]
    except sqlglot.errors.SqlglotError:
        return []

    tables: set[str] = set()
    for statement in statements:
        cte_names = {cte.alias_or_name for cte in statement.find_all(exp.CTE)}
        for table in statement.find_all(exp.Table):
            if not table.name or table.name in cte_names:
                continue
            tables.add(f"{table.db}.{table.name}" if table.db else table.name)
    return sorted(tables)

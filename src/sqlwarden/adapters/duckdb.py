"""DuckDB gateway: serves the database/* endpoints from local DuckDB files.

Stands in for the remote gateway when running from the command line or in
tests. Queries run in a worker thread so the dispatcher's timeout can abandon
them; an abandoned query is interrupted on its connection.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping

import duckdb as _duckdb

from sqlwarden.adapters._base import ColumnInfo, GatewayError

logger = logging.getLogger(__name__)

Body = Mapping[str, object]


def _bind(body: Body) -> list[object] | None:
    params = body.get("params")
    return list(params) if params else None


def _split_table(table: str) -> tuple[str | None, str]:
    schema, _, name = table.rpartition(".")
    return (schema or None), name


class DuckDBGateway:
    """In-process gateway, one lazily opened connection per database name."""

    def __init__(self, databases: Mapping[str, str] | None = None) -> None:
        self._paths = dict(databases or {"default": ":memory:"})
        self._conns: dict[str, _duckdb.DuckDBPyConnection] = {}
        self._endpoints: dict[str, Callable[[_duckdb.DuckDBPyConnection, Body], dict]] = {
            "database/query": self._query,
            "database/execute": self._execute,
            "database/describe_table": self._describe_table,
            "database/list_tables": self._list_tables,
            "database/explain": self._explain,
        }

    def connection(self, database: str) -> _duckdb.DuckDBPyConnection:
        conn = self._conns.get(database)
        if conn is not None:
            return conn
        path = self._paths.get(database)
        if path is None:
            raise GatewayError(f'Unknown database "{database}"')
        try:
            conn = _duckdb.connect(path, config={"custom_user_agent": "sqlwarden/0.1.0"})
        except Exception as e:
            raise GatewayError(f"DuckDB connection failed: {e}") from e
        self._conns[database] = conn
        return conn

    def close(self) -> None:
        for conn in self._conns.values():
            conn.close()
        self._conns.clear()

    async def fetch(self, path: str, body: Body) -> dict:
        handler = self._endpoints.get(path)
        if handler is None:
            raise GatewayError(f"Unsupported endpoint: {path}")
        conn = self.connection(str(body.get("database")))
        try:
            return await asyncio.to_thread(handler, conn, body)
        except asyncio.CancelledError:
            logger.debug("interrupting abandoned %s call", path)
            conn.interrupt()
            raise

    # -- Endpoints --------------------------------------------------------------

    def _query(self, conn: _duckdb.DuckDBPyConnection, body: Body) -> dict:
        max_rows = int(body.get("maxRows") or 1000)
        try:
            result = conn.execute(str(body["sql"]), _bind(body))
            columns = [desc[0] for desc in result.description] if result.description else []
            rows_raw = result.fetchmany(max_rows + 1)
        except Exception as e:
            raise GatewayError(f"DuckDB execution failed: {e}") from e

        rows = [dict(zip(columns, row, strict=True)) for row in rows_raw[:max_rows]]
        return {"rows": rows, "columns": columns, "truncated": len(rows_raw) > max_rows}

    def _execute(self, conn: _duckdb.DuckDBPyConnection, body: Body) -> dict:
        try:
            result = conn.execute(str(body["sql"]), _bind(body))
            # DML reports its row count as a single "Count" column.
            row = result.fetchone() if result.description else None
        except Exception as e:
            raise GatewayError(f"DuckDB execution failed: {e}") from e

        affected = row[0] if row and result.description[0][0] == "Count" else 0
        return {"rowsAffected": affected}

    def _describe_table(self, conn: _duckdb.DuckDBPyConnection, body: Body) -> dict:
        schema, name = _split_table(str(body["table"]))
        where = "table_name = ?" + (" AND table_schema = ?" if schema else "")
        args = [name, schema] if schema else [name]
        try:
            col_rows = conn.execute(
                "SELECT column_name, data_type, is_nullable, column_default "
                "FROM information_schema.columns "
                f"WHERE {where} "
                "ORDER BY ordinal_position",
                args,
            ).fetchall()
            pk_rows = conn.execute(
                "SELECT constraint_column_names FROM duckdb_constraints() "
                "WHERE constraint_type = 'PRIMARY KEY' AND "
                + where.replace("table_schema", "schema_name"),
                args,
            ).fetchall()
        except Exception as e:
            raise GatewayError(f"DuckDB introspection failed: {e}") from e

        if not col_rows:
            raise GatewayError(f'Table "{body["table"]}" does not exist')

        primary = {col for (cols,) in pk_rows for col in cols}
        columns = [
            ColumnInfo(
                name=col_name,
                data_type=data_type,
                is_nullable=(nullable == "YES"),
                is_primary_key=col_name in primary,
                default_value=default,
            )
            for col_name, data_type, nullable, default in col_rows
        ]
        return {"columns": [c.to_dict() for c in columns]}

    def _list_tables(self, conn: _duckdb.DuckDBPyConnection, body: Body) -> dict:
        schema = body.get("schema")
        sql = (
            "SELECT table_schema, table_name, table_type "
            "FROM information_schema.tables "
            "WHERE table_schema NOT IN ('pg_catalog', 'information_schema') "
        )
        args: list[object] = []
        if schema:
            sql += "AND table_schema = ? "
            args.append(schema)
        sql += "ORDER BY table_schema, table_name"
        try:
            rows = conn.execute(sql, args).fetchall()
        except Exception as e:
            raise GatewayError(f"DuckDB introspection failed: {e}") from e

        return {
            "tables": [
                {"schema": table_schema, "name": table_name, "type": table_type}
                for table_schema, table_name, table_type in rows
            ]
        }

    def _explain(self, conn: _duckdb.DuckDBPyConnection, body: Body) -> dict:
        sql = str(body["sql"]).strip()
        if sql.split(None, 1)[0].upper() != "EXPLAIN":
            sql = f"EXPLAIN {sql}"
        try:
            plan = conn.execute(sql, _bind(body)).fetchall()
        except Exception as e:
            raise GatewayError(f"DuckDB EXPLAIN failed: {e}") from e

        return {"plan": "\n".join(row[1] if len(row) > 1 else row[0] for row in plan)}

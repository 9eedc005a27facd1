"""Database query skill: admit, dispatch and format one request.

Every path returns the same envelope::

    {"result": str, "metadata": {"success": bool, "action": str, "layer": "L2", ...}}

Failures add ``metadata.error = {code, message, retriable}``. Human-readable
text and caller-echoed fields are redacted before they leave; gateway
payloads (rows, columns, plan, tables) are returned untouched.
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from sqlwarden import querylog
from sqlwarden.adapters import DispatchTimeout, UpstreamError
from sqlwarden.adapters.dispatch import dispatch, resolve_client
from sqlwarden.config import EffectiveLimits, SkillConfig
from sqlwarden.context import SkillContext
from sqlwarden.diagnostics import ErrorCode, codes
from sqlwarden.policy import Action, PolicyDecision, StatementRequest, evaluate
from sqlwarden.policy.tables import referenced_tables
from sqlwarden.redact import redact

logger = logging.getLogger(__name__)

LAYER = "L2"
METHOD = "POST"
VALID_ACTIONS = tuple(a.value for a in Action)


@dataclass(frozen=True)
class _Endpoint:
    path: str
    failure: ErrorCode
    failure_prefix: str


_ENDPOINTS = {
    Action.QUERY: _Endpoint("database/query", codes.QUERY_FAILED, "Error executing query"),
    Action.EXECUTE: _Endpoint(
        "database/execute", codes.EXECUTE_FAILED, "Error executing write operation"
    ),
    Action.DESCRIBE_TABLE: _Endpoint(
        "database/describe_table", codes.DESCRIBE_FAILED, "Error describing table"
    ),
    Action.LIST_TABLES: _Endpoint(
        "database/list_tables", codes.LIST_TABLES_FAILED, "Error listing tables"
    ),
    Action.EXPLAIN: _Endpoint(
        "database/explain", codes.EXPLAIN_FAILED, "Error getting execution plan"
    ),
}


# -- Envelopes -------------------------------------------------------------------


def _envelope(action: str, result: str, *, success: bool, **fields: object) -> dict:
    metadata: dict[str, object] = {"success": success, "action": action, "layer": LAYER}
    metadata.update(fields)
    return {"result": redact(result), "metadata": metadata}


def _failure(action: str, code: ErrorCode, message: str, result: str, **fields: object) -> dict:
    error = {"code": str(code), "message": redact(message), "retriable": code.retriable}
    return _envelope(action, result, success=False, error=error, **fields)


def _invalid_action(action: object) -> dict:
    valid = ", ".join(VALID_ACTIONS)
    return _failure(
        str(action) if action else "unknown",
        codes.INVALID_ACTION,
        f"Action must be one of: {valid}",
        f'Error: Invalid action "{action}". Must be one of: {valid}',
    )


def _provider_not_configured(action: str) -> dict:
    return _failure(
        action,
        codes.PROVIDER_NOT_CONFIGURED,
        "No gatewayClient found in context. Platform adapter must inject a gateway "
        "client for database access.",
        f'Error: No database gateway configured. The "{action}" action requires a '
        "gateway client to proxy database operations. Configure a gateway provider "
        "in the platform settings.",
    )


def _rejection(action: str, request: StatementRequest, decision: PolicyDecision) -> dict:
    diag = decision.diagnostic
    assert diag is not None
    fields: dict[str, object] = {}
    if diag.code == codes.SQL_INJECTION_DETECTED:
        fields["injectionIssues"] = [f.message for f in decision.findings]
        fields["injectionFindings"] = [f.to_dict() for f in decision.findings]
    elif diag.code == codes.CONFIRMATION_REQUIRED:
        fields["sql"] = redact(request.sql)
    return _failure(action, diag.code, diag.message, diag.headline, **fields)


# -- Request bodies -------------------------------------------------------------


def _statement_body(request: StatementRequest, limits: EffectiveLimits) -> dict:
    return {
        "sql": request.sql,
        "database": request.database,
        "params": list(request.params or []),
        "timeoutMs": limits.timeout_ms,
    }


def _query_body(request: StatementRequest, limits: EffectiveLimits) -> dict:
    body = _statement_body(request, limits)
    body["maxRows"] = limits.max_rows
    body["maxCostUsd"] = limits.max_cost_usd
    return body


def _execute_body(request: StatementRequest, limits: EffectiveLimits) -> dict:
    body = _statement_body(request, limits)
    body["maxCostUsd"] = limits.max_cost_usd
    return body


def _describe_body(request: StatementRequest, limits: EffectiveLimits) -> dict:
    return {"table": request.table, "database": request.database, "timeoutMs": limits.timeout_ms}


def _list_tables_body(request: StatementRequest, limits: EffectiveLimits) -> dict:
    body: dict[str, object] = {"database": request.database, "timeoutMs": limits.timeout_ms}
    if request.schema:
        body["schema"] = request.schema
    return body


_BODIES: dict[Action, Callable[[StatementRequest, EffectiveLimits], dict]] = {
    Action.QUERY: _query_body,
    Action.EXECUTE: _execute_body,
    Action.DESCRIBE_TABLE: _describe_body,
    Action.LIST_TABLES: _list_tables_body,
    Action.EXPLAIN: _statement_body,
}


# -- Response formatting ----------------------------------------------------------


def _payload(response: Any) -> Mapping[str, Any]:
    return response if isinstance(response, Mapping) else {}


def _cell(value: object) -> str:
    return "NULL" if value is None else str(value)


def _column_label(column: object) -> str:
    """Header text for a column given as a name or as a descriptor mapping."""
    if isinstance(column, Mapping):
        name = column.get("name") or column.get("column_name")
        return str(name) if name else json.dumps(column, default=str)
    return str(column)


def _format_query(request: StatementRequest, response: Any, config: SkillConfig) -> dict:
    data = _payload(response)
    rows = data.get("rows") or []
    columns = data.get("columns") or []
    if not columns and rows and isinstance(rows[0], Mapping):
        columns = list(rows[0])
    truncated = bool(data.get("truncated"))

    if not rows:
        text = "Query executed successfully. No rows returned."
    else:
        names = [_column_label(col) for col in columns]
        lines = [" | ".join(names), " | ".join("---" for _ in names)]
        for row in rows:
            if isinstance(row, Mapping):
                lines.append(" | ".join(_cell(row.get(name)) for name in names))
            elif isinstance(row, (list, tuple)):
                lines.append(" | ".join(_cell(v) for v in row))
            else:
                lines.append(_cell(row))
        marker = " (truncated)" if truncated else ""
        text = f"Query returned {len(rows)} row(s){marker}:\n\n" + "\n".join(lines)

    return _envelope(
        "query",
        text,
        success=True,
        rowCount=len(rows),
        columns=columns,
        truncated=truncated,
        database=redact(request.database),
        tables=referenced_tables(request.sql, dialect=config.dialect),
    )


def _format_execute(request: StatementRequest, response: Any, config: SkillConfig) -> dict:
    affected = _payload(response).get("rowsAffected")
    if affected is None:
        affected = 0
    return _envelope(
        "execute",
        f"Write operation executed successfully. Rows affected: {affected}.",
        success=True,
        rowsAffected=affected,
        database=redact(request.database),
        tables=referenced_tables(request.sql, dialect=config.dialect),
    )


def _format_describe(request: StatementRequest, response: Any, config: SkillConfig) -> dict:
    columns = _payload(response).get("columns") or []
    lines = []
    for col in columns:
        if not isinstance(col, Mapping):
            lines.append(f"  {col}")
            continue
        nullable = "NULL" if col.get("nullable") else "NOT NULL"
        default = col.get("defaultValue")
        default_text = f" DEFAULT {default}" if default is not None else ""
        pk = " [PK]" if col.get("primaryKey") else ""
        lines.append(f"  {col.get('name')} {col.get('type')} {nullable}{default_text}{pk}")

    return _envelope(
        "describe_table",
        f'Table "{request.table}" schema:\n\n' + "\n".join(lines),
        success=True,
        table=request.table,
        columnCount=len(columns),
        columns=columns,
        database=redact(request.database),
    )


def _table_label(table: object) -> str:
    if isinstance(table, str):
        return table
    if isinstance(table, Mapping):
        name = table.get("name") or table.get("table_name")
        if name:
            return str(name)
    return json.dumps(table, default=str)


def _format_list_tables(request: StatementRequest, response: Any, config: SkillConfig) -> dict:
    tables = _payload(response).get("tables") or []
    database, schema = request.database, request.schema

    if not tables:
        text = (
            f'No tables found in database "{database}" schema "{schema}".'
            if schema
            else f'No tables found in database "{database}".'
        )
    else:
        prefix = f'Tables in "{database}" (schema: "{schema}")' if schema else f'Tables in "{database}"'
        listing = "\n".join(f"  {i}. {_table_label(t)}" for i, t in enumerate(tables, start=1))
        text = f"{prefix}:\n\n{listing}"

    return _envelope(
        "list_tables",
        text,
        success=True,
        tableCount=len(tables),
        tables=tables,
        database=redact(database),
    )


def _format_explain(request: StatementRequest, response: Any, config: SkillConfig) -> dict:
    data = _payload(response)
    plan = data.get("plan") or data.get("explanation")
    if plan is None:
        plan_text = ""
    elif isinstance(plan, str):
        plan_text = plan
    else:
        plan_text = json.dumps(plan, indent=2, default=str)

    return _envelope(
        "explain",
        f"Query execution plan:\n\n{plan_text}",
        success=True,
        plan=plan,
        database=redact(request.database),
    )


_FORMATTERS: dict[Action, Callable[[StatementRequest, Any, SkillConfig], dict]] = {
    Action.QUERY: _format_query,
    Action.EXECUTE: _format_execute,
    Action.DESCRIBE_TABLE: _format_describe,
    Action.LIST_TABLES: _format_list_tables,
    Action.EXPLAIN: _format_explain,
}


# -- Entry point -----------------------------------------------------------------


async def _handle(action: Action, params: Mapping[str, object], ctx: SkillContext) -> dict:
    name = action.value
    client = resolve_client(ctx)
    if client is None:
        logger.info("%s rejected: no gateway client in context", name)
        return _provider_not_configured(name)

    request = StatementRequest.from_params(action, params)
    decision = evaluate(request, ctx.config)
    if not decision.allowed:
        logger.info(
            "%s rejected [%s]: %s", name, decision.error_code, redact(decision.diagnostic.message)
        )
        return _rejection(name, request, decision)

    limits = decision.limits
    assert limits is not None
    endpoint = _ENDPOINTS[action]
    body = _BODIES[action](request, limits)
    try:
        response = await dispatch(client, METHOD, endpoint.path, body, limits.timeout_ms)
    except DispatchTimeout as e:
        logger.warning("%s timed out after %d ms", endpoint.path, e.timeout_ms)
        return _failure(name, codes.TIMEOUT, str(e), f"{endpoint.failure_prefix}: {e}")
    except UpstreamError as e:
        message = str(e) or "Unknown error"
        logger.warning("%s failed: %s", endpoint.path, redact(message))
        return _failure(
            name, endpoint.failure, message, f"{endpoint.failure_prefix}: {message}"
        )

    return _FORMATTERS[action](request, response, ctx.config)


def _audit(action: str, params: Mapping[str, object], envelope: dict, started: float) -> None:
    metadata = envelope["metadata"]
    error = metadata.get("error")
    tables = metadata.get("tables") if action in ("query", "execute") else None
    try:
        querylog.log_request(
            action=action,
            database=params.get("database"),
            sql=params.get("sql"),
            # Retriable errors only arise after dispatch, so the request was admitted.
            allowed=error is None or error["retriable"],
            error_code=error["code"] if error else None,
            findings=[f["id"] for f in metadata.get("injectionFindings", [])],
            tables=tables,
            duration_ms=(time.monotonic() - started) * 1000,
        )
    except OSError as e:
        logger.warning("could not write audit log entry: %s", e)


async def execute(
    params: Mapping[str, object],
    context: SkillContext | Mapping[str, object] | None = None,
) -> dict:
    """Handle one database-query skill call.

    Args:
        params: ``{action, sql?, database?, table?, schema?, params?, confirm?,
            timeout?, maxRows?, maxCostUsd?}``.
        context: A SkillContext, or the runtime's mapping with
            ``providerClient``/``gatewayClient``/``config``.

    Returns:
        The ``{result, metadata}`` envelope. Never raises for request-level
        failures.
    """
    raw_action = params.get("action")
    if not isinstance(raw_action, str) or raw_action not in VALID_ACTIONS:
        logger.info("rejected invalid action %r", raw_action)
        return _invalid_action(raw_action)

    action = Action(raw_action)
    started = time.monotonic()
    ctx = SkillContext.coerce(context)
    try:
        envelope = await _handle(action, params, ctx)
    except Exception as e:
        message = str(e) or "Unknown error"
        logger.warning("%s failed unexpectedly: %s", raw_action, redact(message))
        envelope = _failure(
            raw_action,
            codes.OPERATION_FAILED,
            message,
            f"Error during {raw_action} operation: {message}",
        )

    if ctx.config.audit_log:
        _audit(raw_action, params, envelope, started)
    return envelope

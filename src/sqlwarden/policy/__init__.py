"""Policy gate: validate a request, classify, scan, and decide before dispatch."""

from __future__ import annotations

from collections.abc import Sequence

from sqlwarden.config import WILDCARD, SkillConfig, resolve_limits
from sqlwarden.diagnostics import Diagnostic, codes
from sqlwarden.policy._types import (
    READ_ONLY_ACTIONS,
    Action,
    ClassificationResult,
    InjectionFinding,
    PolicyDecision,
    StatementRequest,
    Verdict,
)
from sqlwarden.policy.classify import classify, deep_classify
from sqlwarden.policy.injection import scan_for_injection
from sqlwarden.policy.normalize import normalize

__all__ = [
    "Action",
    "ClassificationResult",
    "InjectionFinding",
    "PolicyDecision",
    "StatementRequest",
    "Verdict",
    "check_database",
    "check_params",
    "check_read_only",
    "evaluate",
]

_SCALARS = (str, int, float, bool, type(None))


def _is_blank(value: object) -> bool:
    return not isinstance(value, str) or not value.strip()


def _missing(name: str) -> Diagnostic:
    return Diagnostic.error(codes.MISSING_PARAMETER, f"{name} is required.").summarize(
        f'Error: The "{name}" parameter is required and must be a non-empty string.'
    )


def check_database(database: str, allowed: Sequence[str]) -> Diagnostic | None:
    """Reject a database that is not in the allow-list. ``*`` allows all."""
    if WILDCARD in allowed or database in allowed:
        return None
    return Diagnostic.error(
        codes.DATABASE_NOT_ALLOWED,
        f'Database "{database}" is not in the allowed list. Allowed: {", ".join(allowed)}',
    )


def check_params(params: object) -> Diagnostic | None:
    """Bound parameters must be an ordered sequence of scalars, or absent."""
    if params is None:
        return None
    if isinstance(params, (list, tuple)) and all(isinstance(p, _SCALARS) for p in params):
        return None
    return Diagnostic.error(
        codes.INVALID_PARAMETER, "params must be a list of scalar values."
    ).summarize(
        'Error: The "params" parameter must be a list of strings, numbers, booleans or nulls.'
    )


def check_read_only(
    sql: str, *, deep: bool = False, dialect: str | None = None
) -> ClassificationResult:
    """Classify sql for the read-only path.

    Literal boundaries depend on whether the dialect treats ``\\'`` as an
    escaped quote, so the statement is normalized both ways and rejected if
    either reading rejects. The AST check, when enabled, runs last.
    """
    result = classify(normalize(sql))
    if not result.is_read_only:
        return result
    escaped = classify(normalize(sql, backslash_escapes=True))
    if not escaped.is_read_only:
        return escaped
    if deep:
        checked = deep_classify(sql, dialect=dialect)
        if not checked.is_read_only:
            return checked
    return result


def _rejected(
    diagnostic: Diagnostic,
    *,
    classification: ClassificationResult | None = None,
    findings: Sequence[InjectionFinding] = (),
) -> PolicyDecision:
    return PolicyDecision(
        allowed=False,
        diagnostic=diagnostic,
        classification=classification,
        findings=tuple(findings),
    )


def evaluate(request: StatementRequest, config: SkillConfig | None = None) -> PolicyDecision:
    """Run the admission checks for one request. First failure wins.

    Steps:
        1. Required fields (``table`` for describe_table, then ``sql``, then
           ``database``)
        2. Bound parameter shape
        3. Database allow-list
        4. Read-only classification (query, explain)
        5. Injection heuristics (query, execute, explain)
        6. Explicit confirmation (execute)
        7. Resolve effective limits

    Args:
        request: The inbound call.
        config: Skill configuration. None means all defaults.

    Returns:
        PolicyDecision. When ``allowed`` is False, ``diagnostic`` says why and
        nothing may be dispatched.
    """
    config = config or SkillConfig()
    action = request.action
    has_sql = action in (Action.QUERY, Action.EXECUTE, Action.EXPLAIN)

    # Step 1: Required fields
    if action == Action.DESCRIBE_TABLE and _is_blank(request.table):
        return _rejected(_missing("table"))
    if has_sql and _is_blank(request.sql):
        return _rejected(_missing("sql"))
    if _is_blank(request.database):
        return _rejected(_missing("database"))

    # Step 2: Parameter shape
    if has_sql:
        param_diag = check_params(request.params)
        if param_diag is not None:
            return _rejected(param_diag)

    # Step 3: Allow-list
    db_diag = check_database(request.database, config.databases)
    if db_diag is not None:
        return _rejected(db_diag)

    classification = None
    findings: list[InjectionFinding] = []
    if has_sql:
        sql = request.sql

        # Step 4: Read-only classification
        if action in READ_ONLY_ACTIONS:
            classification = check_read_only(
                sql, deep=bool(config.deep_classify), dialect=config.dialect
            )
            if not classification.is_read_only:
                return _rejected(
                    Diagnostic.error(codes.SQL_NOT_ALLOWED, classification.reason or ""),
                    classification=classification,
                )

        # Step 5: Injection heuristics
        findings = scan_for_injection(sql)
        if findings:
            diag = Diagnostic.error(
                codes.SQL_INJECTION_DETECTED, " ".join(f.message for f in findings)
            ).summarize(f"Error: Potential SQL injection detected: {findings[0].message}")
            for finding in findings:
                if finding.span is not None:
                    diag.note(f"{finding.pattern_id} matched {finding.span.slice(sql)!r}")
            return _rejected(diag, classification=classification, findings=findings)

    # Step 6: Confirmation
    if action == Action.EXECUTE and request.confirm is not True:
        return _rejected(
            Diagnostic.error(
                codes.CONFIRMATION_REQUIRED,
                "Write operations require confirm: true. This is a safety measure "
                "to prevent accidental data modification.",
            ).summarize(
                "Warning: Write operations require explicit confirmation. "
                "Set confirm: true to proceed with this operation."
            )
        )

    # Step 7: Limits
    limits = resolve_limits(
        config,
        timeout_ms=request.timeout,
        max_rows=request.max_rows,
        max_cost_usd=request.max_cost_usd,
    )
    return PolicyDecision(
        allowed=True,
        classification=classification,
        findings=tuple(findings),
        limits=limits,
    )

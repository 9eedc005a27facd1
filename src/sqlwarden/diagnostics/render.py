"""Render policy decisions for terminal (text) and agent (JSON) output."""

from __future__ import annotations

from sqlwarden.diagnostics.types import Diagnostic
from sqlwarden.policy import PolicyDecision


def render_json(decision: PolicyDecision) -> dict:
    """Render a PolicyDecision as a JSON-serializable dict."""
    d: dict = {
        "allowed": decision.allowed,
        "error": _diagnostic_to_dict(decision.diagnostic) if decision.diagnostic else None,
        "findings": [f.to_dict() for f in decision.findings],
    }
    if decision.classification is not None:
        d["classification"] = {
            "verdict": decision.classification.verdict.value,
            "leading_keyword": decision.classification.leading_keyword,
        }
    if decision.limits is not None:
        d["limits"] = {
            "timeout_ms": decision.limits.timeout_ms,
            "max_rows": decision.limits.max_rows,
            "max_cost_usd": decision.limits.max_cost_usd,
        }
    return d


def render_text(decision: PolicyDecision) -> str:
    """Render a PolicyDecision as human-readable text."""
    d = decision.diagnostic
    if d is None:
        lines = ["ok: statement allowed"]
        if decision.limits is not None:
            lines.append(
                f"  = limits: timeout {decision.limits.timeout_ms} ms, "
                f"max rows {decision.limits.max_rows}, "
                f"max cost ${decision.limits.max_cost_usd:.2f}"
            )
        return "\n".join(lines)

    lines = [f"{d.level.name.lower()}[{d.code}]: {d.message}"]
    for note in d.notes:
        lines.append(f"  = note: {note}")
    return "\n".join(lines)


def _diagnostic_to_dict(d: Diagnostic) -> dict:
    return {
        "level": d.level.name.lower(),
        "code": str(d.code),
        "message": d.message,
        "retriable": d.retriable,
        "notes": d.notes,
    }

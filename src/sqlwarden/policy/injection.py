"""Injection heuristics over the raw, unnormalized statement.

These are known attack shapes, not proof of safety: a statement with no
findings merely matched none of them. The scan runs on the text as submitted
because payloads hide in exactly the literals and comments the normalizer
throws away.
"""

from __future__ import annotations

import re

from sqlwarden.diagnostics import Span
from sqlwarden.policy._types import InjectionFinding

# (pattern id, compiled pattern, message), checked and reported in this order.
_PATTERNS: tuple[tuple[str, re.Pattern[str], str], ...] = (
    (
        "numeric_tautology",
        re.compile(r"\bOR\s+\d+\s*=\s*\d+", re.IGNORECASE),
        "Possible SQL injection tautology detected (OR number=number).",
    ),
    (
        "string_tautology",
        re.compile(r"\bOR\s+'[^']*'\s*=\s*'", re.IGNORECASE),
        "Possible SQL injection tautology detected (OR string=string).",
    ),
    (
        "union_select",
        re.compile(r"UNION\s+(?:ALL\s+)?SELECT\b", re.IGNORECASE),
        "Possible UNION-based SQL injection detected.",
    ),
    (
        "statement_chaining",
        re.compile(r";\s*(?:DROP|DELETE|UPDATE|INSERT|ALTER|CREATE|TRUNCATE)\b", re.IGNORECASE),
        "Possible SQL injection via statement chaining detected.",
    ),
    (
        "waitfor_delay",
        re.compile(r"WAITFOR\s+DELAY\b", re.IGNORECASE),
        "Possible time-based SQL injection detected (WAITFOR DELAY).",
    ),
    (
        "benchmark",
        re.compile(r"BENCHMARK\s*\(", re.IGNORECASE),
        "Possible time-based SQL injection detected (BENCHMARK).",
    ),
    (
        "sleep",
        re.compile(r"SLEEP\s*\(", re.IGNORECASE),
        "Possible time-based SQL injection detected (SLEEP).",
    ),
    (
        "string_concatenation",
        re.compile(r"'\s*\+\s*|`\$\{"),
        "String concatenation detected in SQL. Use parameterized placeholders instead.",
    ),
)

PATTERN_IDS = tuple(pattern_id for pattern_id, _, _ in _PATTERNS)


def scan_for_injection(sql: str) -> list[InjectionFinding]:
    """Return one finding per matching pattern, in check order."""
    findings: list[InjectionFinding] = []
    for pattern_id, pattern, message in _PATTERNS:
        match = pattern.search(sql)
        if match is not None:
            findings.append(
                InjectionFinding(
                    pattern_id=pattern_id,
                    message=message,
                    span=Span(match.start(), match.end()),
                )
            )
    return findings

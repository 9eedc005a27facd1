"""Scrub connection details and credentials from outbound text.

Each pattern replaces the whole ``key=value`` assignment with a marker, so
neither the value nor a partial echo of it survives. Patterns run in order;
later ones never see text an earlier one already replaced.
"""

from __future__ import annotations

import re

_PATTERNS: tuple[tuple[re.Pattern[str], str], ...] = (
    (
        re.compile(r"""(?:host|hostname|server)\s*[:=]\s*['"]?[^\s'",:;]+['"]?""", re.IGNORECASE),
        "[REDACTED_HOST]",
    ),
    (
        re.compile(r"""port\s*[:=]\s*['"]?\d+['"]?""", re.IGNORECASE),
        "[REDACTED_PORT]",
    ),
    (
        re.compile(r"""(?:password|passwd|pwd)\s*[:=]\s*['"]?[^\s'"]{4,}['"]?""", re.IGNORECASE),
        "[REDACTED_PASSWORD]",
    ),
    (
        re.compile(r"""(?:user|username)\s*[:=]\s*['"]?[^\s'",:;]+['"]?""", re.IGNORECASE),
        "[REDACTED_USER]",
    ),
    (
        re.compile(
            r"""(?:connection[_-]?string|dsn|jdbc|odbc)\s*[:=]\s*['"]?[^\s'"]+['"]?""",
            re.IGNORECASE,
        ),
        "[REDACTED_CONNECTION_STRING]",
    ),
    (
        re.compile(r"""(?:mysql|postgres|postgresql|mssql|mongodb|redis)://[^\s'"]+""", re.IGNORECASE),
        "[REDACTED_CONNECTION_URI]",
    ),
    (
        re.compile(
            r"""(?:api[_-]?key|apikey|secret|token)\s*[:=]\s*['"]?[a-zA-Z0-9_\-]{8,}['"]?""",
            re.IGNORECASE,
        ),
        "[REDACTED_SECRET]",
    ),
    (
        re.compile(r"\bBearer\s+[A-Za-z0-9._~+/\-]+=*", re.IGNORECASE),
        "[REDACTED_SECRET]",
    ),
)

MARKERS = tuple(dict.fromkeys(label for _, label in _PATTERNS))


def redact(text: object) -> str:
    """Return text with every known credential shape replaced by a marker."""
    result = text if isinstance(text, str) else str(text)
    for pattern, label in _PATTERNS:
        result = pattern.sub(label, result)
    return result

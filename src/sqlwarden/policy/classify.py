"""Classify SQL submissions as read-only or rejected.

Two layers:

- ``classify`` works on normalized text: split on ``;`` and look at the
  leading keyword of every fragment. This is a keyword heuristic, not a
  parser, and it is the check every read-only request goes through.
- ``deep_classify`` parses the raw SQL with sqlglot and catches what a
  leading keyword cannot show: writable CTEs and SELECT INTO. It is opt-in
  because it rejects anything sqlglot cannot parse.
"""

from __future__ import annotations

import re

import sqlglot
from sqlglot import exp

from sqlwarden.policy._types import ClassificationResult, Verdict

READ_KEYWORDS = frozenset({"SELECT", "WITH", "EXPLAIN"})

WRITE_KEYWORDS = (
    "INSERT",
    "UPDATE",
    "DELETE",
    "DROP",
    "ALTER",
    "CREATE",
    "TRUNCATE",
    "GRANT",
    "REVOKE",
    "MERGE",
    "UPSERT",
    "REPLACE",
    "RENAME",
    "CALL",
    "EXEC",
    "EXECUTE",
    "SET",
)

_LEADING_WORD = re.compile(r"\w+")

# Overlaps the per-fragment check on purpose: catches a write verb right after
# a semicolon even if fragment splitting were ever to miss it.
_EMBEDDED_WRITE = re.compile(
    r";\s*(" + "|".join(WRITE_KEYWORDS) + r")\b",
    re.IGNORECASE,
)

_READ_ONLY = ClassificationResult(Verdict.READ_ONLY)


def split_statements(cleaned: str) -> list[str]:
    """Split normalized SQL on semicolons, dropping empty fragments."""
    return [s.strip() for s in cleaned.split(";") if s.strip()]


def leading_keyword(fragment: str) -> str:
    """Uppercased first token of a fragment, trimmed to its word characters."""
    token = fragment.split(None, 1)[0] if fragment.strip() else ""
    match = _LEADING_WORD.match(token)
    return (match.group(0) if match else token).upper()


def classify(cleaned: str) -> ClassificationResult:
    """Classify normalized SQL for the read-only path.

    Every fragment must start with SELECT, WITH or EXPLAIN. The first
    fragment that does not decides the reported keyword. Unknown leading
    keywords are rejected just like write verbs.
    """
    fragments = split_statements(cleaned)
    if not fragments:
        return ClassificationResult(
            Verdict.REJECTED,
            reason="SQL contains no executable statement.",
        )

    first = ""
    for fragment in fragments:
        keyword = leading_keyword(fragment)
        first = first or keyword
        if keyword in READ_KEYWORDS:
            continue
        if keyword in WRITE_KEYWORDS:
            return ClassificationResult(
                Verdict.REJECTED,
                leading_keyword=keyword,
                reason=(
                    f'Write operation "{keyword}" is not allowed in read-only query mode. '
                    'Use the "execute" action for write operations.'
                ),
            )
        return ClassificationResult(
            Verdict.REJECTED,
            leading_keyword=keyword,
            reason=(
                f'SQL statement starting with "{keyword}" is not allowed in read-only '
                "query mode. Only SELECT, WITH and EXPLAIN are permitted."
            ),
        )

    embedded = _EMBEDDED_WRITE.search(cleaned)
    if embedded is not None:
        keyword = embedded.group(1).upper()
        return ClassificationResult(
            Verdict.REJECTED,
            leading_keyword=keyword,
            reason=f'Write operation "{keyword}" detected embedded in the query.',
        )

    return ClassificationResult(Verdict.READ_ONLY, leading_keyword=first)


# -- AST layer -----------------------------------------------------------------

_READ_TYPES = (exp.Select, exp.Union, exp.Intersect, exp.Except)
_DML_TYPES = (exp.Insert, exp.Update, exp.Delete, exp.Merge)

_EXPLAIN_OPTIONS = re.compile(
    r"^\s*(?:\([^)]*\)\s*)?(?:(?:ANALYZE|ANALYSE|VERBOSE|QUERY\s+PLAN)\s+)*",
    re.IGNORECASE,
)


def _explained(statement: exp.Expression) -> str | None:
    """Return the SQL wrapped by an EXPLAIN command, or None."""
    if not isinstance(statement, exp.Command):
        return None
    if str(statement.this or "").upper() != "EXPLAIN":
        return None
    rest = statement.args.get("expression")
    body = rest.name if isinstance(rest, exp.Expression) else str(rest or "")
    return _EXPLAIN_OPTIONS.sub("", body, count=1)


def _write_keyword(statement: exp.Expression) -> str | None:
    """Name the write hidden in a parsed statement, or None if it only reads."""
    if isinstance(statement, _READ_TYPES):
        for cte in statement.find_all(exp.CTE):
            if isinstance(cte.this, _DML_TYPES):
                return cte.this.key.upper()
        if isinstance(statement, exp.Select) and statement.find(exp.Into) is not None:
            return "INTO"
        return None
    # Some dialects parse EXPLAIN <stmt> as Describe wrapping the statement.
    if isinstance(statement, exp.Describe) and isinstance(statement.this, exp.Expression):
        if isinstance(statement.this, exp.Table):
            return None
        return _write_keyword(statement.this)
    return statement.key.upper()


def deep_classify(sql: str, *, dialect: str | None = None) -> ClassificationResult:
    """Parse raw SQL and reject anything whose AST is not a pure query."""
    try:
        statements = [s for s in sqlglot.parse(sql, dialect=dialect) if s is not None]
    except sqlglot.errors.SqlglotError as e:
        return ClassificationResult(
            Verdict.REJECTED,
            reason=f"SQL could not be parsed for read-only verification: {e}",
        )

    for statement in statements:
        inner = _explained(statement)
        if inner is not None:
            result = deep_classify(inner, dialect=dialect)
            if not result.is_read_only:
                return result
            continue

        keyword = _write_keyword(statement)
        if keyword is not None:
            return ClassificationResult(
                Verdict.REJECTED,
                leading_keyword=keyword,
                reason=f'Statement performs a write ("{keyword}") and is not read-only.',
            )

    return _READ_ONLY

"""Internal types for the admission pipeline."""

from __future__ import annotations

import enum
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from sqlwarden.diagnostics import Diagnostic, Span

if TYPE_CHECKING:
    from sqlwarden.config import EffectiveLimits


class Action(enum.Enum):
    QUERY = "query"
    EXECUTE = "execute"
    DESCRIBE_TABLE = "describe_table"
    LIST_TABLES = "list_tables"
    EXPLAIN = "explain"


# Actions whose SQL must be read-only.
READ_ONLY_ACTIONS = frozenset({Action.QUERY, Action.EXPLAIN})


class Verdict(enum.Enum):
    READ_ONLY = "read_only"
    REJECTED = "rejected"  # write verb or unknown statement


@dataclass(frozen=True)
class StatementRequest:
    """One inbound call, fields kept exactly as the caller sent them."""

    action: Action
    sql: object = None
    database: object = None
    table: object = None
    schema: object = None
    params: object = None
    confirm: object = None
    timeout: object = None
    max_rows: object = None
    max_cost_usd: object = None

    @classmethod
    def from_params(cls, action: Action, params: Mapping[str, object]) -> StatementRequest:
        return cls(
            action=action,
            sql=params.get("sql"),
            database=params.get("database"),
            table=params.get("table"),
            schema=params.get("schema"),
            params=params.get("params"),
            confirm=params.get("confirm"),
            timeout=params.get("timeout"),
            max_rows=params.get("maxRows"),
            max_cost_usd=params.get("maxCostUsd"),
        )


@dataclass(frozen=True)
class ClassificationResult:
    verdict: Verdict
    leading_keyword: str = ""
    reason: str | None = None

    @property
    def is_read_only(self) -> bool:
        return self.verdict == Verdict.READ_ONLY


@dataclass(frozen=True)
class InjectionFinding:
    pattern_id: str
    message: str
    span: Span | None = None

    def to_dict(self) -> dict[str, object]:
        d: dict[str, object] = {"id": self.pattern_id, "message": self.message}
        if self.span is not None:
            d["span"] = [self.span.start, self.span.end]
        return d


@dataclass
class PolicyDecision:
    allowed: bool
    diagnostic: Diagnostic | None = None
    classification: ClassificationResult | None = None
    findings: Sequence[InjectionFinding] = field(default_factory=tuple)
    limits: EffectiveLimits | None = None

    @property
    def error_code(self) -> str | None:
        return str(self.diagnostic.code) if self.diagnostic is not None else None

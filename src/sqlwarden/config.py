"""Skill configuration and per-call limit resolution.

Configuration is normally an in-memory mapping handed over by the host
runtime. The CLI can also read it from a TOML file:

    timeout_ms = 15000
    max_rows = 500
    allowed_databases = ["default", "analytics"]
    deep_classify = true

    [databases]
    default = ":memory:"
    analytics = "/data/analytics.duckdb"
"""

from __future__ import annotations

import math
import tomllib
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, fields
from pathlib import Path

DEFAULT_TIMEOUT_MS = 30_000
MAX_TIMEOUT_MS = 60_000
DEFAULT_MAX_ROWS = 1000
MAX_ROWS = 10_000
DEFAULT_MAX_COST_USD = 0.10
MAX_COST_USD = 1.00
DEFAULT_ALLOWED_DATABASES = ("default",)

WILDCARD = "*"

# Wire spelling used by host runtimes → attribute name.
_ALIASES = {
    "timeoutMs": "timeout_ms",
    "maxRows": "max_rows",
    "maxCostUsd": "max_cost_usd",
    "allowedDatabases": "allowed_databases",
    "deepClassify": "deep_classify",
    "auditLog": "audit_log",
}


@dataclass
class SkillConfig:
    """Per-skill configuration.

    Limit values are kept exactly as supplied; ``resolve_limits`` decides
    whether they are usable.
    """

    timeout_ms: object = None
    max_rows: object = None
    max_cost_usd: object = None
    allowed_databases: Sequence[str] | str | None = None
    deep_classify: bool = False
    dialect: str | None = None
    audit_log: bool = False

    @classmethod
    def from_mapping(cls, data: Mapping[str, object] | None) -> SkillConfig:
        """Build from a runtime mapping. Unknown keys are ignored."""
        if not isinstance(data, Mapping) or not data:
            return cls()
        names = {f.name for f in fields(cls)}
        kwargs: dict[str, object] = {}
        for key, value in data.items():
            name = _ALIASES.get(key, key)
            if name in names:
                kwargs[name] = value
        return cls(**kwargs)

    @property
    def databases(self) -> tuple[str, ...]:
        """The allow-list. Unset falls back to the default; an empty list allows nothing."""
        allowed = self.allowed_databases
        if allowed is None:
            return DEFAULT_ALLOWED_DATABASES
        if isinstance(allowed, str):
            allowed = [allowed]
        return tuple(str(name) for name in allowed)


@dataclass(frozen=True)
class EffectiveLimits:
    timeout_ms: int
    max_rows: int
    max_cost_usd: float


def _positive_number(value: object) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if math.isnan(value) or value <= 0:
        return None
    return float(value)


def _first_usable(candidates: Sequence[object], default: float, maximum: float) -> float:
    for candidate in candidates:
        number = _positive_number(candidate)
        if number is not None:
            return min(number, maximum)
    return default


def resolve_limits(
    config: SkillConfig,
    *,
    timeout_ms: object = None,
    max_rows: object = None,
    max_cost_usd: object = None,
) -> EffectiveLimits:
    """Merge call override → skill config → default, clamped to hard maxima.

    A candidate that is missing, non-numeric or not positive is skipped, so
    a bad override falls through to the configured value and a bad
    configured value falls through to the default.
    """
    return EffectiveLimits(
        timeout_ms=math.ceil(
            _first_usable((timeout_ms, config.timeout_ms), DEFAULT_TIMEOUT_MS, MAX_TIMEOUT_MS)
        ),
        max_rows=math.ceil(
            _first_usable((max_rows, config.max_rows), DEFAULT_MAX_ROWS, MAX_ROWS)
        ),
        max_cost_usd=_first_usable(
            (max_cost_usd, config.max_cost_usd), DEFAULT_MAX_COST_USD, MAX_COST_USD
        ),
    )


def load_config_file(path: Path) -> tuple[SkillConfig, dict[str, str]]:
    """Read a TOML config file. Returns the skill config and its [databases] table."""
    data = tomllib.loads(path.read_text())
    databases = data.pop("databases", {}) or {}
    return SkillConfig.from_mapping(data), {k: str(v) for k, v in databases.items()}

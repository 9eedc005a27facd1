"""Audit log: daily JSONL files per project, with automatic retention cleanup."""

from __future__ import annotations

import contextlib
import json
import os
from datetime import UTC, datetime, timedelta
from pathlib import Path

from sqlwarden.redact import redact

DEFAULT_RETENTION_DAYS = 30
_LOG_ROOT = Path.home() / ".sqlwarden" / "logs"


def _project_slug() -> str:
    """Encode cwd into a directory-safe slug."""
    cwd = os.getcwd()
    return cwd.replace("/", "-").lstrip("-")


def _log_dir() -> Path:
    return _LOG_ROOT / _project_slug()


def _today_file() -> Path:
    today = datetime.now(UTC).strftime("%Y-%m-%d")
    return _log_dir() / f"{today}.jsonl"


def log_request(
    *,
    action: str,
    database: object = None,
    sql: object = None,
    allowed: bool,
    error_code: str | None = None,
    findings: list[str] | None = None,
    tables: list[str] | None = None,
    duration_ms: float | None = None,
) -> None:
    """Append one handled request to today's JSONL file. SQL is stored redacted."""
    entry = {
        "ts": datetime.now(UTC).isoformat(),
        "action": action,
        "database": redact(database) if database is not None else None,
        "sql": redact(sql) if sql is not None else None,
        "allowed": allowed,
        "error_code": error_code,
        "findings": findings or [],
        "tables": tables or [],
        "duration_ms": duration_ms,
    }

    log_file = _today_file()
    log_file.parent.mkdir(parents=True, exist_ok=True)
    with open(log_file, "a") as f:
        f.write(json.dumps(entry, default=str) + "\n")


def cleanup_old_logs(*, retention_days: int = DEFAULT_RETENTION_DAYS) -> int:
    """Delete log files older than retention_days. Returns count of deleted files."""
    cutoff = datetime.now(UTC) - timedelta(days=retention_days)
    deleted = 0

    log_dir = _log_dir()
    if not log_dir.exists():
        return 0

    for log_file in log_dir.glob("*.jsonl"):
        try:
            file_date = datetime.strptime(log_file.stem, "%Y-%m-%d").replace(tzinfo=UTC)
        except ValueError:
            continue
        if file_date < cutoff:
            log_file.unlink()
            deleted += 1

    # Drop the project directory once it is empty.
    with contextlib.suppress(OSError):
        log_dir.rmdir()

    return deleted

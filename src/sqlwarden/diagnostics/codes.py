"""Stable, searchable error code registry.

Groups:
- request shape: INVALID_ACTION, MISSING_PARAMETER, INVALID_PARAMETER
- access control: DATABASE_NOT_ALLOWED, CONFIRMATION_REQUIRED
- SQL safety: SQL_NOT_ALLOWED, SQL_INJECTION_DETECTED
- environment: PROVIDER_NOT_CONFIGURED
- dispatch: TIMEOUT, *_FAILED, OPERATION_FAILED

Everything detected before dispatch is final for the call. Only failures that
happen at or after dispatch are retriable.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ErrorCode:
    value: str
    retriable: bool = False

    def __str__(self) -> str:
        return self.value


# Request shape
INVALID_ACTION = ErrorCode("INVALID_ACTION")
MISSING_PARAMETER = ErrorCode("MISSING_PARAMETER")
INVALID_PARAMETER = ErrorCode("INVALID_PARAMETER")

# Access control
DATABASE_NOT_ALLOWED = ErrorCode("DATABASE_NOT_ALLOWED")
CONFIRMATION_REQUIRED = ErrorCode("CONFIRMATION_REQUIRED")

# SQL safety
SQL_NOT_ALLOWED = ErrorCode("SQL_NOT_ALLOWED")
SQL_INJECTION_DETECTED = ErrorCode("SQL_INJECTION_DETECTED")

# Environment
PROVIDER_NOT_CONFIGURED = ErrorCode("PROVIDER_NOT_CONFIGURED")

# Dispatch
TIMEOUT = ErrorCode("TIMEOUT", retriable=True)
QUERY_FAILED = ErrorCode("QUERY_FAILED", retriable=True)
EXECUTE_FAILED = ErrorCode("EXECUTE_FAILED", retriable=True)
DESCRIBE_FAILED = ErrorCode("DESCRIBE_FAILED", retriable=True)
LIST_TABLES_FAILED = ErrorCode("LIST_TABLES_FAILED", retriable=True)
EXPLAIN_FAILED = ErrorCode("EXPLAIN_FAILED", retriable=True)
OPERATION_FAILED = ErrorCode("OPERATION_FAILED", retriable=True)

"""Diagnostic system: error codes, diagnostic values, rendering."""

from sqlwarden.diagnostics.codes import ErrorCode
from sqlwarden.diagnostics.types import Diagnostic, Level, Span

__all__ = [
    "Diagnostic",
    "ErrorCode",
    "Level",
    "Span",
]

"""Diagnostic values produced by the admission pipeline.

Policy checks never raise. Each check returns either None or a Diagnostic;
the first blocking diagnostic ends the pipeline and is turned into the error
part of the response envelope.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

from sqlwarden.diagnostics.codes import ErrorCode


class Level(enum.Enum):
    ERROR = "error"


@dataclass(frozen=True)
class Span:
    start: int
    end: int

    def slice(self, sql: str) -> str:
        return sql[self.start : self.end]


@dataclass
class Diagnostic:
    """A single finding.

    ``message`` is the terse machine-facing text carried in
    ``metadata.error.message``. ``summary``, when set, replaces the default
    ``Error: <message>`` line shown to the caller in ``result``.
    """

    level: Level
    code: ErrorCode
    message: str
    notes: list[str] = field(default_factory=list)
    summary: str | None = None

    # -- Builder classmethods ---------------------------------------------------

    @classmethod
    def error(cls, code: ErrorCode, message: str) -> Diagnostic:
        return cls(level=Level.ERROR, code=code, message=message)

    # -- Builder chain methods --------------------------------------------------

    def note(self, note: str) -> Diagnostic:
        self.notes.append(note)
        return self

    def summarize(self, summary: str) -> Diagnostic:
        self.summary = summary
        return self

    # -- Query methods ----------------------------------------------------------

    @property
    def retriable(self) -> bool:
        return self.code.retriable

    @property
    def headline(self) -> str:
        return self.summary if self.summary is not None else f"Error: {self.message}"

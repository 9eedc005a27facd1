"""Lexical normalizer: blank out literals, drop comments, collapse whitespace."""

from __future__ import annotations

import re

# One left-to-right scan so whichever construct opens first wins: a quote
# inside a comment never starts a literal, and "--" inside a literal never
# starts a comment. Unterminated literals and block comments run to the end.
_STANDARD = re.compile(
    r"""
      (?P<single>'[^']*(?P<single_end>'|$))
    | (?P<double>"[^"]*(?P<double_end>"|$))
    | (?P<line>(?:--|\#)[^\n]*)
    | (?P<block>/\*.*?(?:\*/|$))
    """,
    re.VERBOSE | re.DOTALL,
)

_BACKSLASH = re.compile(
    r"""
      (?P<single>'(?:[^'\\]|\\.)*\\?(?P<single_end>'|$))
    | (?P<double>"(?:[^"\\]|\\.)*\\?(?P<double_end>"|$))
    | (?P<line>(?:--|\#)[^\n]*)
    | (?P<block>/\*.*?(?:\*/|$))
    """,
    re.VERBOSE | re.DOTALL,
)

_WHITESPACE = re.compile(r"\s+")


def _replace(match: re.Match[str]) -> str:
    for kind, quote in (("single", "'"), ("double", '"')):
        if match.group(kind) is not None:
            # An unterminated literal keeps only its opening quote.
            return quote * 2 if match.group(f"{kind}_end") else quote
    return " "


def normalize(sql: str, *, backslash_escapes: bool = False) -> str:
    """Return sql with literal contents emptied and comments removed.

    Quoted literals become empty placeholders of the same quote style,
    comments become a single space, runs of whitespace collapse to one space.
    Semicolons and leading keywords survive untouched, and the result is
    never longer than the input.

    With backslash_escapes, ``\\'`` inside a literal does not close it (MySQL
    style). The default follows standard SQL, where only a doubled quote
    escapes, and a doubled quote already collapses to two adjacent empty
    literals.
    """
    pattern = _BACKSLASH if backslash_escapes else _STANDARD
    cleaned = pattern.sub(_replace, sql)
    return _WHITESPACE.sub(" ", cleaned).strip()

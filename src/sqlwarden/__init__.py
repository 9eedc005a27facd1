"""sqlwarden: SQL admission control for a proxied database-query skill."""

from sqlwarden.handler import execute

__all__ = ["execute"]

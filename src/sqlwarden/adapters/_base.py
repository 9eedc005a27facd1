"""Gateway client protocols: the boundary between the handler and the database proxy."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class RequestClient(Protocol):
    def request(
        self,
        method: str,
        path: str,
        body: Mapping[str, object],
        options: Mapping[str, object],
    ) -> Any: ...


@runtime_checkable
class FetchClient(Protocol):
    def fetch(self, path: str, body: Mapping[str, object]) -> Any: ...


GatewayClient = RequestClient | FetchClient


class DispatchError(Exception):
    """Raised by the dispatcher when the single outbound call fails."""


class DispatchTimeout(DispatchError):
    def __init__(self, timeout_ms: int) -> None:
        super().__init__(f"Request timed out after {timeout_ms}ms")
        self.timeout_ms = timeout_ms


class UpstreamError(DispatchError):
    """Transport or remote-side failure."""


class GatewayError(Exception):
    """Raised by in-process gateways for connection/execution failures."""


@dataclass
class ColumnInfo:
    name: str
    data_type: str
    is_nullable: bool = True
    is_primary_key: bool = False
    default_value: str | None = None

    def to_dict(self) -> dict[str, object]:
        return {
            "name": self.name,
            "type": self.data_type,
            "nullable": self.is_nullable,
            "defaultValue": self.default_value,
            "primaryKey": self.is_primary_key,
        }

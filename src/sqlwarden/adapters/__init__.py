"""Gateway clients and the dispatcher that calls them."""

from sqlwarden.adapters._base import (
    ColumnInfo,
    DispatchError,
    DispatchTimeout,
    FetchClient,
    GatewayClient,
    GatewayError,
    RequestClient,
    UpstreamError,
)

__all__ = [
    "ColumnInfo",
    "DispatchError",
    "DispatchTimeout",
    "FetchClient",
    "GatewayClient",
    "GatewayError",
    "RequestClient",
    "UpstreamError",
]

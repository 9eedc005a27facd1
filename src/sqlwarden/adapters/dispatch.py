"""Issue the single outbound call for a request, bounded by a timeout."""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from sqlwarden.adapters._base import (
    DispatchError,
    DispatchTimeout,
    FetchClient,
    GatewayClient,
    RequestClient,
    UpstreamError,
)

if TYPE_CHECKING:
    from sqlwarden.context import SkillContext

logger = logging.getLogger(__name__)


def resolve_client(context: SkillContext) -> GatewayClient | None:
    """Pick the injected client: provider client first, gateway client second."""
    if context.provider_client is not None:
        return context.provider_client
    return context.gateway_client


async def _call(
    client: GatewayClient,
    method: str,
    path: str,
    body: Mapping[str, object],
    timeout_ms: int,
) -> Any:
    if isinstance(client, RequestClient):
        result = client.request(method, path, body, {"timeout_ms": timeout_ms})
    elif isinstance(client, FetchClient):
        result = client.fetch(path, body)
    else:
        raise UpstreamError(
            f"{type(client).__name__} exposes neither request() nor fetch()"
        )
    if inspect.isawaitable(result):
        result = await result
    return result


async def dispatch(
    client: GatewayClient,
    method: str,
    path: str,
    body: Mapping[str, object],
    timeout_ms: int,
) -> Any:
    """Make one call to client and return its parsed body.

    There is no retry. A synchronous client runs to completion before the
    timer can fire, so only awaitable clients are actually pre-empted.

    Raises:
        DispatchTimeout: the call outlived timeout_ms.
        UpstreamError: the client raised, or exposes no usable method.
    """
    logger.debug("dispatching %s %s (timeout %d ms)", method, path, timeout_ms)
    timer = asyncio.timeout(timeout_ms / 1000)
    try:
        async with timer:
            return await _call(client, method, path, body, timeout_ms)
    except TimeoutError as e:
        if timer.expired():
            raise DispatchTimeout(timeout_ms) from e
        raise UpstreamError(str(e) or "Request timed out") from e
    except DispatchError:
        raise
    except Exception as e:
        raise UpstreamError(str(e) or type(e).__name__) from e

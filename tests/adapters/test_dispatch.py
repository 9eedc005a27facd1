"""Tests for the request dispatcher and client resolution."""

import asyncio

import pytest

from sqlwarden.adapters import DispatchTimeout, UpstreamError
from sqlwarden.adapters.dispatch import dispatch, resolve_client
from sqlwarden.context import SkillContext


class SyncFetch:
    def __init__(self):
        self.calls = []

    def fetch(self, path, body):
        self.calls.append((path, body))
        return {"ok": True}


class Both:
    def __init__(self):
        self.used = None

    async def request(self, method, path, body, options):
        self.used = "request"
        return "via request"

    async def fetch(self, path, body):
        self.used = "fetch"
        return "via fetch"


class Raising:
    def __init__(self, error):
        self.error = error

    async def fetch(self, path, body):
        raise self.error


def test_request_client_gets_method_and_options(request_client) -> None:
    client = request_client({"rows": []})
    result = asyncio.run(dispatch(client, "POST", "database/query", {"sql": "SELECT 1"}, 500))
    assert result == {"rows": []}
    assert client.calls == [("POST", "database/query", {"sql": "SELECT 1"}, {"timeout_ms": 500})]


def test_fetch_client(fetch_client) -> None:
    client = fetch_client({"rowsAffected": 2})
    result = asyncio.run(dispatch(client, "POST", "database/execute", {"sql": "x"}, 500))
    assert result == {"rowsAffected": 2}
    assert client.calls == [("database/execute", {"sql": "x"})]


def test_sync_client_supported() -> None:
    client = SyncFetch()
    assert asyncio.run(dispatch(client, "POST", "database/query", {}, 500)) == {"ok": True}


def test_request_preferred_over_fetch() -> None:
    client = Both()
    assert asyncio.run(dispatch(client, "POST", "p", {}, 500)) == "via request"
    assert client.used == "request"


def test_slow_client_times_out(fetch_client) -> None:
    client = fetch_client({}, delay=1.0)
    with pytest.raises(DispatchTimeout) as exc_info:
        asyncio.run(dispatch(client, "POST", "database/query", {}, 20))
    assert exc_info.value.timeout_ms == 20
    assert "20ms" in str(exc_info.value)


def test_client_error_becomes_upstream_error() -> None:
    with pytest.raises(UpstreamError, match="boom") as exc_info:
        asyncio.run(dispatch(Raising(RuntimeError("boom")), "POST", "p", {}, 500))
    assert isinstance(exc_info.value.__cause__, RuntimeError)


def test_client_own_timeout_is_upstream_error() -> None:
    with pytest.raises(UpstreamError, match="socket read timed out"):
        asyncio.run(dispatch(Raising(TimeoutError("socket read timed out")), "POST", "p", {}, 500))


def test_client_without_methods_rejected() -> None:
    with pytest.raises(UpstreamError, match="neither request"):
        asyncio.run(dispatch(object(), "POST", "p", {}, 500))


class TestResolveClient:
    def test_provider_preferred(self) -> None:
        provider, gateway = SyncFetch(), SyncFetch()
        ctx = SkillContext(provider_client=provider, gateway_client=gateway)
        assert resolve_client(ctx) is provider

    def test_gateway_fallback(self) -> None:
        gateway = SyncFetch()
        assert resolve_client(SkillContext(gateway_client=gateway)) is gateway

    def test_none_when_unconfigured(self) -> None:
        assert resolve_client(SkillContext()) is None

    def test_mapping_context(self) -> None:
        gateway = SyncFetch()
        ctx = SkillContext.coerce({"gatewayClient": gateway, "config": {"maxRows": 5}})
        assert resolve_client(ctx) is gateway
        assert ctx.config.max_rows == 5

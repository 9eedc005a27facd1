"""Shared fixtures."""

from __future__ import annotations

import asyncio

import pytest


class FetchStub:
    """Gateway client exposing only fetch(), recording every call."""

    def __init__(self, response=None, *, error: Exception | None = None, delay: float = 0.0):
        self.response = response
        self.error = error
        self.delay = delay
        self.calls: list[tuple[str, dict]] = []

    async def fetch(self, path, body):
        self.calls.append((path, dict(body)))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.response


class RequestStub:
    """Gateway client exposing request(method, path, body, options)."""

    def __init__(self, response=None):
        self.response = response
        self.calls: list[tuple[str, str, dict, dict]] = []

    async def request(self, method, path, body, options):
        self.calls.append((method, path, dict(body), dict(options)))
        return self.response


@pytest.fixture
def fetch_client():
    """Factory for recording fetch-style clients."""
    return FetchStub


@pytest.fixture
def request_client():
    """Factory for recording request-style clients."""
    return RequestStub

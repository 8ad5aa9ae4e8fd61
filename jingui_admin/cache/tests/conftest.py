"""Test fixtures for the view cache."""

from __future__ import annotations

import asyncio

import pytest

from jingui_admin.cache.store import ViewCache


@pytest.fixture
def cache():
    return ViewCache()


class GatedFetcher:
    """Fetcher that blocks until released, counting its invocations."""

    def __init__(self, value=None, error: BaseException | None = None) -> None:
        self.value = value
        self.error = error
        self.calls = 0
        self.gate = asyncio.Event()

    async def __call__(self):
        self.calls += 1
        await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.value

    def release(self) -> None:
        self.gate.set()


@pytest.fixture
def gated():
    return GatedFetcher

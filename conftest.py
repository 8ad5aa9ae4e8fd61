"""
Root-level shared test fixtures.

Inherited by the root tests/ suite and the client/ and cache/ subpackage
suites. FakeServer stands in for the Jingui admin API through
httpx.MockTransport, so wire-level tests never open a socket.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import httpx
import pytest

from jingui_admin.config import reset_config
from jingui_admin.settings import CredentialPair, CredentialStore

ENDPOINT = "https://jingui.test"
TOKEN = "admin-token"


class FakeServer:
    """Route table of (method, raw path) -> response, recording every request."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._routes: dict[tuple[str, str], Callable[[httpx.Request], httpx.Response]] = {}

    def route(
        self,
        method: str,
        path: str,
        *,
        status: int = 200,
        json: Any = None,
        content: bytes | None = None,
    ) -> None:
        def respond(request: httpx.Request) -> httpx.Response:
            if content is not None:
                return httpx.Response(status, content=content)
            if json is None:
                return httpx.Response(status)
            return httpx.Response(status, json=json)

        self._routes[(method, path)] = respond

    def handler(self, method: str, path: str, fn: Callable[[httpx.Request], httpx.Response]) -> None:
        self._routes[(method, path)] = fn

    def calls(self, method: str, path: str) -> int:
        return sum(1 for r in self.requests if r.method == method and _raw_path(r) == path)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self._dispatch)

    def _dispatch(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        fn = self._routes.get((request.method, _raw_path(request)))
        if fn is None:
            return httpx.Response(404, json={"error": "route not found"})
        return fn(request)


def _raw_path(request: httpx.Request) -> str:
    return request.url.raw_path.split(b"?")[0].decode("ascii")


@pytest.fixture(autouse=True)
def clean_config():
    """Reset config singleton between tests."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def clean_env(monkeypatch):
    """Remove Jingui env vars that leak between tests."""
    for key in [
        "JINGUI_SETTINGS_PATH",
        "JINGUI_HTTP_TIMEOUT",
        "JINGUI_NOTIFICATION_TTL",
        "JINGUI_LOG_LEVEL",
    ]:
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def settings_path(tmp_path):
    return tmp_path / "jingui" / "settings.json"


@pytest.fixture
def store(settings_path):
    """An empty (unconfigured) credential store."""
    return CredentialStore(settings_path)


@pytest.fixture
def configured_store(store):
    store.write(CredentialPair(ENDPOINT, TOKEN))
    return store


@pytest.fixture
def server():
    return FakeServer()

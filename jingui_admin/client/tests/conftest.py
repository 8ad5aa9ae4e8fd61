"""
Test fixtures for the API client.

store, configured_store and server are inherited from the root conftest.py.
"""

from __future__ import annotations

import pytest

from jingui_admin.client.api import JinguiClient
from jingui_admin.client.factory import ClientFactory
from jingui_admin.client.resources import ResourceTransport


@pytest.fixture
def client(server):
    """A JinguiClient wired to the fake server."""
    return JinguiClient("https://jingui.test/", "admin-token", transport=server.transport)


@pytest.fixture
def factory(configured_store, server):
    return ClientFactory(configured_store, transport=server.transport)


@pytest.fixture
def resources(factory):
    return ResourceTransport(factory)

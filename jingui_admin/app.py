"""
Composition root — builds and owns every data-layer component.

One AdminApp per session. It wires the credential store to the client
factory (credential changes reset the cached client and drop cached views
that belonged to the previous server) and hands the same cache and
notification bus to queries and mutations.

Usage:
    async with AdminApp() as app:
        app.configure("https://jingui.example.com", token)
        vaults = await app.queries.vaults()
        await app.mutations.create_vault("v1", "Production")
"""

from __future__ import annotations

import logging

import httpx

from jingui_admin.cache.store import ViewCache
from jingui_admin.client.api import JinguiClient
from jingui_admin.client.factory import ClientFactory
from jingui_admin.client.resources import ResourceTransport
from jingui_admin.config import Config, get_config
from jingui_admin.errors import Unconfigured
from jingui_admin.mutations import MutationEngine, Mutations
from jingui_admin.notifications import NotificationBus
from jingui_admin.queries import Queries
from jingui_admin.settings import CredentialPair, CredentialStore

logger = logging.getLogger(__name__)


class AdminApp:
    """Owns the store, factory, cache, bus, queries and mutations of one session."""

    def __init__(
        self,
        config: Config | None = None,
        *,
        store: CredentialStore | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config or get_config()
        self.store = store or CredentialStore(self.config.settings_path)
        self._transport = transport

        self.factory = ClientFactory(
            self.store, timeout=self.config.http_timeout, transport=transport
        )
        self.cache = ViewCache()
        self.bus = NotificationBus(ttl=self.config.notification_ttl)

        self.transport = ResourceTransport(self.factory)
        self.queries = Queries(self.transport, self.cache)
        self.engine = MutationEngine(self.cache, self.bus)
        self.mutations = Mutations(self.transport, self.engine)

        self._unsubscribe_store = self.store.on_change(self._on_credentials_changed)

    @property
    def configured(self) -> bool:
        return self.store.configured

    def configure(self, endpoint: str, token: str) -> CredentialPair:
        """Store a new endpoint/token pair."""
        return self.store.write(CredentialPair(endpoint=endpoint, token=token))

    def logout(self) -> None:
        """Forget the stored credentials."""
        self.store.clear()

    async def test_connection(self, endpoint: str | None = None, token: str | None = None) -> None:
        """Ping the server. Raises a JinguiError subclass on failure.

        With no arguments the stored credentials are used; otherwise a
        throwaway client checks the candidate pair before it is saved. A
        missing half of the candidate is taken from the stored pair.
        """
        if endpoint is None and token is None:
            await self.transport.ping()
            return

        stored = self.store.read()
        if stored is not None:
            endpoint = endpoint or stored.endpoint
            token = token or stored.token
        if not endpoint or not token:
            raise Unconfigured("Both endpoint and token are required")

        client = JinguiClient(
            endpoint,
            token,
            timeout=self.config.http_timeout,
            transport=self._transport,
        )
        try:
            await client.ping()
        finally:
            await client.close()

    def _on_credentials_changed(self) -> None:
        logger.info("Credentials changed; resetting client and view cache")
        self.factory.reset()
        self.cache.clear()

    async def aclose(self) -> None:
        self._unsubscribe_store()
        self.bus.close()
        await self.factory.aclose()

    async def __aenter__(self) -> AdminApp:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

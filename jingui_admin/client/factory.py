"""
Client factory — owns the single cached JinguiClient.

The factory holds one slot {pair, client}. On every get_client() call it
re-reads the credential store and hands back the cached client only if the
stored pair still equals (by value) the pair the client was built from.
reset() empties the slot; it is wired to CredentialStore.on_change() by the
composition root.

Replaced clients are retired. A retired client with no request in flight is
closed as soon as a running loop is available; a busy one is kept until a
later get_client() finds it idle. aclose() closes everything.
"""

from __future__ import annotations

import asyncio
import logging

import httpx

from jingui_admin.client.api import JinguiClient
from jingui_admin.errors import Unconfigured
from jingui_admin.settings import CredentialPair, CredentialStore

logger = logging.getLogger(__name__)


class ClientFactory:
    """Builds and caches the request-executing client for the stored credentials."""

    def __init__(
        self,
        store: CredentialStore,
        *,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._store = store
        self._timeout = timeout
        self._transport = transport
        self._pair: CredentialPair | None = None
        self._client: JinguiClient | None = None
        self._retired: list[JinguiClient] = []
        self._closing: set[asyncio.Task] = set()

    def get_client(self) -> JinguiClient:
        """Return the client for the current credentials, building it if needed."""
        pair = self._store.read()
        if pair is None:
            raise Unconfigured()
        if self._retired:
            self._close_idle()

        if self._client is not None and self._pair == pair:
            return self._client

        self._retire()
        logger.info("Building API client for %s", pair.endpoint)
        self._client = JinguiClient(
            pair.endpoint,
            pair.token,
            timeout=self._timeout,
            transport=self._transport,
        )
        self._pair = pair
        return self._client

    def reset(self) -> None:
        """Drop the cached client so the next get_client() rebuilds it."""
        if self._client is not None:
            logger.debug("Client cache reset")
        self._retire()

    async def aclose(self) -> None:
        """Close the current client and every retired one."""
        self._retire()
        retired, self._retired = self._retired, []
        for client in retired:
            if not client.closed:
                await client.close()
        if self._closing:
            await asyncio.gather(*self._closing)

    def _retire(self) -> None:
        if self._client is not None:
            self._retired.append(self._client)
        self._client = None
        self._pair = None
        self._close_idle()

    def _close_idle(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # no loop to close on; aclose() picks them up
            return
        busy = []
        for client in self._retired:
            if client.closed:
                continue
            if client.busy:
                busy.append(client)
                continue
            task = loop.create_task(client.close())
            self._closing.add(task)
            task.add_done_callback(self._closing.discard)
        self._retired = busy

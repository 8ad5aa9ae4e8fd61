"""
Read side — cached view queries.

Each query pairs a key from the registry with the transport call that
fills it, so every view of the same resource shares one cache entry.

fetch_view() is the view-fetch error boundary: it turns data-layer failures
into a message for inline rendering, except Unconfigured, which propagates
so the caller can send the user to configuration instead.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable
from dataclasses import dataclass
from typing import Generic, TypeVar

from jingui_admin.cache import keys
from jingui_admin.cache.store import ViewCache
from jingui_admin.client.resources import ResourceTransport
from jingui_admin.errors import JinguiError, Unconfigured, describe_error
from jingui_admin.models import DebugPolicy, Instance, Vault, VaultItem, VaultItemDetail

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class ViewState(Generic[T]):
    """Outcome of loading one view: either data or a displayable error."""

    data: T | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


async def fetch_view(query: Awaitable[T]) -> ViewState[T]:
    """Await a query, capturing failures as ViewState.error."""
    try:
        return ViewState(data=await query)
    except Unconfigured:
        raise
    except JinguiError as e:
        logger.debug("View fetch failed: %s", e)
        return ViewState(error=describe_error(e))


class Queries:
    """Cached read operations, one per logical view."""

    def __init__(self, transport: ResourceTransport, cache: ViewCache) -> None:
        self.transport = transport
        self.cache = cache

    async def vaults(self) -> list[Vault]:
        return await self.cache.get_or_fetch(keys.ALL_VAULTS, self.transport.list_vaults)

    async def vault(self, vault_id: str) -> Vault:
        return await self.cache.get_or_fetch(
            keys.vault_detail(vault_id), lambda: self.transport.get_vault(vault_id)
        )

    async def items(self, vault_id: str) -> list[VaultItem]:
        return await self.cache.get_or_fetch(
            keys.vault_items(vault_id), lambda: self.transport.list_items(vault_id)
        )

    async def item(self, vault_id: str, section: str) -> VaultItemDetail:
        return await self.cache.get_or_fetch(
            keys.vault_item_detail(vault_id, section),
            lambda: self.transport.get_item(vault_id, section),
        )

    async def vault_instances(self, vault_id: str) -> list[Instance]:
        return await self.cache.get_or_fetch(
            keys.instances_by_vault(vault_id),
            lambda: self.transport.list_vault_instances(vault_id),
        )

    async def instances(self) -> list[Instance]:
        return await self.cache.get_or_fetch(keys.ALL_INSTANCES, self.transport.list_instances)

    async def instance(self, fid: str) -> Instance:
        return await self.cache.get_or_fetch(
            keys.instance_detail(fid), lambda: self.transport.get_instance(fid)
        )

    async def debug_policy(self, vault_id: str, fid: str) -> DebugPolicy:
        return await self.cache.get_or_fetch(
            keys.debug_policy(vault_id, fid),
            lambda: self.transport.get_debug_policy(vault_id, fid),
        )

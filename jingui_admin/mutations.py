"""
Mutation engine — every write goes through perform().

On success, in this order and without suspending in between:
  1. evict every cache pattern the mutation declares (see cache.keys),
  2. post the success notification,
  3. return the payload.
On failure: post an error notification, leave the cache untouched, re-raise.

Mutations are neither queued nor retried. Two writes to the same resource
may race; the server applies them last-write-wins.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterable
from typing import Any, TypeVar

from jingui_admin.cache import keys
from jingui_admin.cache.keys import ANY, MutationKind, QueryKey, invalidation_for
from jingui_admin.cache.store import ViewCache
from jingui_admin.client.resources import ResourceTransport
from jingui_admin.errors import describe_error
from jingui_admin.models import (
    CreateVaultRequest,
    InstanceRequest,
    InstanceUpdateRequest,
    StatusResponse,
    UpdateVaultRequest,
)
from jingui_admin.notifications import NotificationBus, NotificationKind

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Static patterns, or a callable computing them from the operation's result.
Invalidation = Iterable[QueryKey] | Callable[[Any], Iterable[QueryKey]]


class MutationEngine:
    """Runs write operations and keeps the view cache consistent with them."""

    def __init__(self, cache: ViewCache, bus: NotificationBus) -> None:
        self.cache = cache
        self.bus = bus

    async def perform(
        self,
        operation: Callable[[], Awaitable[T]],
        invalidation: Invalidation,
        *,
        success_message: str | Callable[[T], str],
    ) -> T:
        try:
            result = await operation()
        except Exception as e:
            message = describe_error(e)
            logger.warning("Mutation failed: %s", message)
            self.bus.post(message, NotificationKind.ERROR)
            raise

        patterns = invalidation(result) if callable(invalidation) else invalidation
        for pattern in patterns:
            self.cache.invalidate(pattern)

        text = success_message(result) if callable(success_message) else success_message
        self.bus.post(text, NotificationKind.SUCCESS)
        return result


class Mutations:
    """One coroutine per write operation, wired to its invalidation set."""

    def __init__(self, transport: ResourceTransport, engine: MutationEngine) -> None:
        self.transport = transport
        self.engine = engine

    # ── Vaults ──────────────────────────────────────────────────────────

    async def create_vault(self, vault_id: str, name: str) -> StatusResponse:
        req = CreateVaultRequest(id=vault_id, name=name)
        return await self.engine.perform(
            lambda: self.transport.create_vault(req),
            invalidation_for(MutationKind.CREATE_VAULT, vault=vault_id),
            success_message="Vault created successfully",
        )

    async def update_vault(self, vault_id: str, name: str) -> StatusResponse:
        req = UpdateVaultRequest(name=name)
        return await self.engine.perform(
            lambda: self.transport.update_vault(vault_id, req),
            invalidation_for(MutationKind.UPDATE_VAULT, vault=vault_id),
            success_message="Vault updated successfully",
        )

    async def delete_vault(self, vault_id: str, cascade: bool = False) -> StatusResponse | None:
        kind = MutationKind.DELETE_VAULT_CASCADE if cascade else MutationKind.DELETE_VAULT
        return await self.engine.perform(
            lambda: self.transport.delete_vault(vault_id, cascade),
            invalidation_for(kind, vault=vault_id),
            success_message="Vault deleted successfully",
        )

    # ── Vault items ─────────────────────────────────────────────────────

    async def put_item(
        self,
        vault_id: str,
        section: str,
        fields: dict[str, str],
        delete_keys: list[str] | None = None,
    ) -> StatusResponse:
        return await self.engine.perform(
            lambda: self.transport.put_item(vault_id, section, fields, delete_keys),
            invalidation_for(MutationKind.PUT_ITEM, vault=vault_id, item=section),
            success_message="Item saved successfully",
        )

    async def delete_item(
        self, vault_id: str, section: str, cascade: bool = False
    ) -> StatusResponse | None:
        kind = MutationKind.DELETE_ITEM_CASCADE if cascade else MutationKind.DELETE_ITEM
        return await self.engine.perform(
            lambda: self.transport.delete_item(vault_id, section, cascade),
            invalidation_for(kind, vault=vault_id, item=section),
            success_message="Item deleted successfully",
        )

    # ── Vault ↔ instance access ─────────────────────────────────────────

    async def grant_access(self, vault_id: str, fid: str) -> StatusResponse | None:
        return await self.engine.perform(
            lambda: self.transport.grant_access(vault_id, fid),
            invalidation_for(MutationKind.GRANT_ACCESS, vault=vault_id),
            success_message="Access granted successfully",
        )

    async def revoke_access(self, vault_id: str, fid: str) -> StatusResponse | None:
        return await self.engine.perform(
            lambda: self.transport.revoke_access(vault_id, fid),
            invalidation_for(MutationKind.REVOKE_ACCESS, vault=vault_id),
            success_message="Access revoked successfully",
        )

    # ── Instances ───────────────────────────────────────────────────────

    async def register_instance(self, req: InstanceRequest) -> StatusResponse:
        def stale_keys(res: StatusResponse | None) -> tuple[QueryKey, ...]:
            # fid is assigned by the server
            if res is not None and res.fid:
                return invalidation_for(
                    MutationKind.REGISTER_INSTANCE, fid=res.fid, bound_vault=req.bound_vault
                )
            return (
                keys.ALL_INSTANCES,
                keys.instance_detail(ANY),
                keys.instances_by_vault(req.bound_vault),
            )

        return await self.engine.perform(
            lambda: self.transport.register_instance(req),
            stale_keys,
            success_message="Instance registered successfully",
        )

    async def update_instance(self, fid: str, req: InstanceUpdateRequest) -> StatusResponse:
        return await self.engine.perform(
            lambda: self.transport.update_instance(fid, req),
            invalidation_for(MutationKind.UPDATE_INSTANCE, fid=fid),
            success_message="Instance updated successfully",
        )

    async def delete_instance(self, fid: str) -> StatusResponse | None:
        return await self.engine.perform(
            lambda: self.transport.delete_instance(fid),
            invalidation_for(MutationKind.DELETE_INSTANCE, fid=fid),
            success_message="Instance deleted successfully",
        )

    # ── Debug policy ────────────────────────────────────────────────────

    async def update_debug_policy(
        self, vault_id: str, fid: str, allow_read: bool
    ) -> StatusResponse:
        def message(res: StatusResponse | None) -> str:
            allowed = allow_read
            if res is not None and res.allow_read is not None:
                allowed = res.allow_read
            return f"Debug read {'enabled' if allowed else 'disabled'}"

        return await self.engine.perform(
            lambda: self.transport.update_debug_policy(vault_id, fid, allow_read),
            invalidation_for(MutationKind.UPDATE_DEBUG_POLICY, vault=vault_id, fid=fid),
            success_message=message,
        )

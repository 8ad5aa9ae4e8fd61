"""
Typed resource operations — one coroutine per resource kind and verb.

Each operation resolves the current client from the ClientFactory before
doing anything else, so an unconfigured store fails with Unconfigured
without touching the network.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from jingui_admin.client import paths
from jingui_admin.models import (
    CreateVaultRequest,
    DebugPolicy,
    DebugPolicyRequest,
    Instance,
    InstanceRequest,
    InstanceUpdateRequest,
    PutItemRequest,
    StatusResponse,
    UpdateVaultRequest,
    Vault,
    VaultItem,
    VaultItemDetail,
)

if TYPE_CHECKING:
    from jingui_admin.client.api import JinguiClient
    from jingui_admin.client.factory import ClientFactory


def _cascade(cascade: bool) -> dict[str, str] | None:
    return {"cascade": "true"} if cascade else None


class ResourceTransport:
    """Typed admin API operations over the factory-managed client."""

    def __init__(self, factory: ClientFactory) -> None:
        self._factory = factory

    def _client(self) -> JinguiClient:
        return self._factory.get_client()

    # ── Liveness ────────────────────────────────────────────────────────

    async def ping(self) -> None:
        await self._client().ping()

    # ── Vaults ──────────────────────────────────────────────────────────

    async def list_vaults(self) -> list[Vault]:
        client = self._client()
        return await client.request("GET", paths.VAULTS, model=list[Vault])

    async def get_vault(self, vault_id: str) -> Vault:
        client = self._client()
        return await client.request("GET", paths.vault_path(vault_id), model=Vault)

    async def create_vault(self, req: CreateVaultRequest) -> StatusResponse:
        client = self._client()
        return await client.request("POST", paths.VAULTS, body=req, model=StatusResponse)

    async def update_vault(self, vault_id: str, req: UpdateVaultRequest) -> StatusResponse:
        client = self._client()
        return await client.request(
            "PUT", paths.vault_path(vault_id), body=req, model=StatusResponse
        )

    async def delete_vault(self, vault_id: str, cascade: bool = False) -> StatusResponse | None:
        client = self._client()
        return await client.request(
            "DELETE", paths.vault_path(vault_id), params=_cascade(cascade), model=StatusResponse
        )

    # ── Vault items ─────────────────────────────────────────────────────

    async def list_items(self, vault_id: str) -> list[VaultItem]:
        client = self._client()
        return await client.request("GET", paths.items_path(vault_id), model=list[VaultItem])

    async def get_item(self, vault_id: str, section: str) -> VaultItemDetail:
        client = self._client()
        return await client.request(
            "GET", paths.item_path(vault_id, section), model=VaultItemDetail
        )

    async def put_item(
        self,
        vault_id: str,
        section: str,
        fields: dict[str, str],
        delete_keys: list[str] | None = None,
    ) -> StatusResponse:
        client = self._client()
        req = PutItemRequest(fields=fields, delete=delete_keys or [])
        return await client.request(
            "PUT", paths.item_path(vault_id, section), body=req, model=StatusResponse
        )

    async def delete_item(
        self, vault_id: str, section: str, cascade: bool = False
    ) -> StatusResponse | None:
        client = self._client()
        return await client.request(
            "DELETE",
            paths.item_path(vault_id, section),
            params=_cascade(cascade),
            model=StatusResponse,
        )

    # ── Vault ↔ instance access ─────────────────────────────────────────

    async def list_vault_instances(self, vault_id: str) -> list[Instance]:
        client = self._client()
        return await client.request(
            "GET", paths.vault_instances_path(vault_id), model=list[Instance]
        )

    async def grant_access(self, vault_id: str, fid: str) -> StatusResponse | None:
        client = self._client()
        return await client.request(
            "POST", paths.vault_instance_path(vault_id, fid), model=StatusResponse
        )

    async def revoke_access(self, vault_id: str, fid: str) -> StatusResponse | None:
        client = self._client()
        return await client.request(
            "DELETE", paths.vault_instance_path(vault_id, fid), model=StatusResponse
        )

    # ── Instances ───────────────────────────────────────────────────────

    async def list_instances(self) -> list[Instance]:
        client = self._client()
        return await client.request("GET", paths.INSTANCES, model=list[Instance])

    async def get_instance(self, fid: str) -> Instance:
        client = self._client()
        return await client.request("GET", paths.instance_path(fid), model=Instance)

    async def register_instance(self, req: InstanceRequest) -> StatusResponse:
        client = self._client()
        return await client.request("POST", paths.INSTANCES, body=req, model=StatusResponse)

    async def update_instance(self, fid: str, req: InstanceUpdateRequest) -> StatusResponse:
        client = self._client()
        return await client.request(
            "PUT", paths.instance_path(fid), body=req, model=StatusResponse
        )

    async def delete_instance(self, fid: str) -> StatusResponse | None:
        client = self._client()
        return await client.request("DELETE", paths.instance_path(fid), model=StatusResponse)

    # ── Debug policy ────────────────────────────────────────────────────

    async def get_debug_policy(self, vault_id: str, fid: str) -> DebugPolicy:
        client = self._client()
        return await client.request(
            "GET", paths.debug_policy_path(vault_id, fid), model=DebugPolicy
        )

    async def update_debug_policy(
        self, vault_id: str, fid: str, allow_read: bool
    ) -> StatusResponse:
        client = self._client()
        return await client.request(
            "PUT",
            paths.debug_policy_path(vault_id, fid),
            body=DebugPolicyRequest(allow_read_debug=allow_read),
            model=StatusResponse,
        )

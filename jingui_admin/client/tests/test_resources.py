"""Tests for ResourceTransport — routes, payloads and typed results."""

from __future__ import annotations

import json

import pytest

from jingui_admin.client.factory import ClientFactory
from jingui_admin.client.resources import ResourceTransport
from jingui_admin.errors import Unconfigured
from jingui_admin.models import (
    CreateVaultRequest,
    InstanceRequest,
    InstanceUpdateRequest,
    PolicySource,
)

INSTANCE = {
    "fid": "f1",
    "public_key": "pk",
    "bound_vault": "v1",
    "bound_attestation_app_id": "app",
    "bound_item": "db",
    "label": "worker",
    "created_at": "2025-03-04T09:15:00Z",
    "last_used_at": None,
}


class TestUnconfigured:
    @pytest.mark.asyncio
    async def test_fails_before_any_request(self, store, server):
        resources = ResourceTransport(ClientFactory(store, transport=server.transport))
        with pytest.raises(Unconfigured):
            await resources.list_vaults()
        with pytest.raises(Unconfigured):
            await resources.ping()
        assert server.requests == []


class TestVaults:
    @pytest.mark.asyncio
    async def test_list_and_get(self, resources, server):
        server.route("GET", "/v1/vaults", json=[{"id": "v1", "name": "Prod"}])
        server.route("GET", "/v1/vaults/v1", json={"id": "v1", "name": "Prod"})

        assert [v.id for v in await resources.list_vaults()] == ["v1"]
        assert (await resources.get_vault("v1")).name == "Prod"

    @pytest.mark.asyncio
    async def test_create(self, resources, server):
        server.route("POST", "/v1/vaults", status=201, json={"status": "created", "id": "v1"})
        res = await resources.create_vault(CreateVaultRequest(id="v1", name="Prod"))
        assert res.status == "created"
        assert res.id == "v1"

    @pytest.mark.asyncio
    async def test_delete_cascade_flag(self, resources, server):
        server.route("DELETE", "/v1/vaults/v1", json={"status": "deleted"})

        await resources.delete_vault("v1")
        await resources.delete_vault("v1", cascade=True)

        assert "cascade" not in server.requests[0].url.params
        assert server.requests[1].url.params["cascade"] == "true"

    @pytest.mark.asyncio
    async def test_identifier_with_slash(self, resources, server):
        server.route("GET", "/v1/vaults/a%2Fb", json={"id": "a/b", "name": "Slashed"})
        vault = await resources.get_vault("a/b")
        assert vault.id == "a/b"
        assert server.calls("GET", "/v1/vaults/a%2Fb") == 1


class TestItems:
    @pytest.mark.asyncio
    async def test_list_accepts_legacy_field_names(self, resources, server):
        server.route("GET", "/v1/vaults/v1/items", json=[{"vault": "v1", "item": "db"}])
        items = await resources.list_items("v1")
        assert items[0].vault_id == "v1"
        assert items[0].section == "db"

    @pytest.mark.asyncio
    async def test_get_with_redacted_fields(self, resources, server):
        server.route(
            "GET",
            "/v1/vaults/v1/items/db",
            json={"vault_id": "v1", "section": "db", "fields": {"password": "", "user": ""}},
        )
        item = await resources.get_item("v1", "db")
        assert set(item.fields) == {"password", "user"}

    @pytest.mark.asyncio
    async def test_put_body(self, resources, server):
        server.route("PUT", "/v1/vaults/v1/items/db", json={"status": "updated"})
        await resources.put_item("v1", "db", {"password": "s3cret"}, ["old"])

        body = json.loads(server.requests[0].content)
        assert body == {"fields": {"password": "s3cret"}, "delete": ["old"]}

    @pytest.mark.asyncio
    async def test_delete_item_cascade(self, resources, server):
        server.route("DELETE", "/v1/vaults/v1/items/db", json={"status": "deleted"})
        await resources.delete_item("v1", "db", cascade=True)
        assert server.requests[0].url.params["cascade"] == "true"


class TestInstancesAndAccess:
    @pytest.mark.asyncio
    async def test_list_and_get(self, resources, server):
        server.route("GET", "/v1/instances", json=[INSTANCE])
        server.route("GET", "/v1/instances/f1", json=INSTANCE)

        assert (await resources.list_instances())[0].fid == "f1"
        inst = await resources.get_instance("f1")
        assert inst.last_used_at is None
        assert inst.label == "worker"

    @pytest.mark.asyncio
    async def test_register_and_update(self, resources, server):
        server.route("POST", "/v1/instances", status=201, json={"status": "registered", "fid": "f9"})
        server.route("PUT", "/v1/instances/f9", json={"status": "updated", "fid": "f9"})

        res = await resources.register_instance(
            InstanceRequest(
                public_key="pk",
                bound_vault="v1",
                bound_attestation_app_id="app",
                bound_item="db",
            )
        )
        assert res.fid == "f9"

        await resources.update_instance(
            "f9", InstanceUpdateRequest(bound_attestation_app_id="app2", label="new")
        )
        body = json.loads(server.requests[1].content)
        assert body == {"bound_attestation_app_id": "app2", "label": "new"}

    @pytest.mark.asyncio
    async def test_grant_and_revoke(self, resources, server):
        server.route("POST", "/v1/vaults/v1/instances/f1", json={"status": "granted"})
        server.route("DELETE", "/v1/vaults/v1/instances/f1", status=204)

        assert (await resources.grant_access("v1", "f1")).status == "granted"
        assert await resources.revoke_access("v1", "f1") is None

    @pytest.mark.asyncio
    async def test_vault_instances(self, resources, server):
        server.route("GET", "/v1/vaults/v1/instances", json=[INSTANCE])
        assert len(await resources.list_vault_instances("v1")) == 1


class TestDebugPolicy:
    @pytest.mark.asyncio
    async def test_default_policy(self, resources, server):
        """A missing record is reported as allowed with source=default."""
        server.route(
            "GET",
            "/v1/debug-policy/v1/f1",
            json={"vault": "v1", "fid": "f1", "allow_read_debug": True, "source": "default"},
        )
        policy = await resources.get_debug_policy("v1", "f1")
        assert policy.allow_read is True
        assert policy.source is PolicySource.DEFAULT
        assert policy.vault_id == "v1"

    @pytest.mark.asyncio
    async def test_update(self, resources, server):
        server.route(
            "PUT",
            "/v1/debug-policy/v1/f1",
            json={"status": "updated", "allow_read_debug": False},
        )
        res = await resources.update_debug_policy("v1", "f1", False)

        assert res.allow_read is False
        assert json.loads(server.requests[0].content) == {"allow_read_debug": False}

    @pytest.mark.asyncio
    async def test_enable_sends_wire_field(self, resources, server):
        """The server binds only allow_read_debug; any other key reads as false."""
        server.route(
            "PUT",
            "/v1/debug-policy/v1/f1",
            json={"status": "updated", "allow_read_debug": True},
        )
        res = await resources.update_debug_policy("v1", "f1", True)

        assert res.allow_read is True
        assert json.loads(server.requests[0].content) == {"allow_read_debug": True}

"""Tests for JinguiClient — headers, payload parsing, error normalization."""

from __future__ import annotations

import json

import httpx
import pytest

from jingui_admin.client.api import JinguiClient, remote_error_from
from jingui_admin.errors import MalformedResponse, NetworkFailure, RemoteError
from jingui_admin.models import CreateVaultRequest, Vault


class TestRequest:
    @pytest.mark.asyncio
    async def test_headers_and_base_url(self, client, server):
        """Trailing slash is stripped and the bearer token is sent."""
        server.route("GET", "/v1/vaults", json=[])
        await client.request("GET", "/v1/vaults")

        req = server.requests[0]
        assert str(req.url) == "https://jingui.test/v1/vaults"
        assert req.headers["Authorization"] == "Bearer admin-token"
        assert req.headers["Content-Type"] == "application/json"
        assert client.endpoint == "https://jingui.test"

    @pytest.mark.asyncio
    async def test_parses_model_list(self, client, server):
        server.route(
            "GET",
            "/v1/vaults",
            json=[{"id": "v1", "name": "Prod", "created_at": "2025-03-04T09:15:00Z"}],
        )
        vaults = await client.request("GET", "/v1/vaults", model=list[Vault])
        assert len(vaults) == 1
        assert vaults[0].id == "v1"
        assert vaults[0].created_at.year == 2025

    @pytest.mark.asyncio
    async def test_sends_model_body_as_json(self, client, server):
        server.route("POST", "/v1/vaults", status=201, json={"status": "created", "id": "v1"})
        await client.request("POST", "/v1/vaults", body=CreateVaultRequest(id="v1", name="Prod"))

        assert json.loads(server.requests[0].content) == {"id": "v1", "name": "Prod"}

    @pytest.mark.asyncio
    async def test_no_content_returns_none(self, client, server):
        server.route("DELETE", "/v1/vaults/v1", status=204)
        assert await client.request("DELETE", "/v1/vaults/v1") is None

    @pytest.mark.asyncio
    async def test_without_model_returns_raw_json(self, client, server):
        server.route("GET", "/v1/vaults", json=[{"id": "v1"}])
        assert await client.request("GET", "/v1/vaults") == [{"id": "v1"}]

    @pytest.mark.asyncio
    async def test_query_params(self, client, server):
        server.route("DELETE", "/v1/vaults/v1", json={"status": "deleted"})
        await client.request("DELETE", "/v1/vaults/v1", params={"cascade": "true"})
        assert server.requests[0].url.params["cascade"] == "true"

    @pytest.mark.asyncio
    async def test_ping(self, client, server):
        server.route("GET", "/", json={"service": "jingui"})
        await client.ping()
        assert server.calls("GET", "/") == 1


class TestErrorNormalization:
    @pytest.mark.asyncio
    async def test_remote_error_with_hint(self, client, server):
        server.route(
            "GET",
            "/v1/vaults/nope",
            status=404,
            json={"error": "vault not found", "hint": "check the vault id"},
        )
        with pytest.raises(RemoteError) as exc_info:
            await client.request("GET", "/v1/vaults/nope")

        err = exc_info.value
        assert err.status == 404
        assert err.message == "vault not found"
        assert err.hint == "check the vault id"

    @pytest.mark.asyncio
    async def test_remote_error_non_json_body(self, client, server):
        server.route("GET", "/v1/vaults", status=502, content=b"<html>Bad Gateway</html>")
        with pytest.raises(RemoteError) as exc_info:
            await client.request("GET", "/v1/vaults")

        assert exc_info.value.message == "HTTP 502"
        assert exc_info.value.hint is None

    @pytest.mark.asyncio
    async def test_unauthorized(self, client, server):
        server.route("GET", "/v1/vaults", status=401, json={"error": "invalid token"})
        with pytest.raises(RemoteError) as exc_info:
            await client.request("GET", "/v1/vaults")
        assert exc_info.value.status == 401

    @pytest.mark.asyncio
    async def test_network_failure(self, server):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        server.handler("GET", "/v1/vaults", refuse)
        client = JinguiClient("https://jingui.test", "t", transport=server.transport)
        with pytest.raises(NetworkFailure):
            await client.request("GET", "/v1/vaults")

    @pytest.mark.asyncio
    async def test_success_with_non_json_body(self, client, server):
        server.route("GET", "/v1/vaults", content=b"not json")
        with pytest.raises(MalformedResponse):
            await client.request("GET", "/v1/vaults", model=list[Vault])

    @pytest.mark.asyncio
    async def test_success_with_wrong_shape(self, client, server):
        server.route("GET", "/v1/vaults", json={"vaults": "nope"})
        with pytest.raises(MalformedResponse):
            await client.request("GET", "/v1/vaults", model=list[Vault])

    def test_remote_error_from_missing_error_key(self):
        resp = httpx.Response(500, json={"detail": "boom"})
        err = remote_error_from(resp)
        assert err.message == "HTTP 500"
        assert err.status == 500


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_close(self, client):
        assert client.closed is False
        await client.close()
        assert client.closed is True

    @pytest.mark.asyncio
    async def test_not_busy_after_failed_request(self, server):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        server.handler("GET", "/", refuse)
        client = JinguiClient("https://jingui.test", "t", transport=server.transport)
        with pytest.raises(NetworkFailure):
            await client.ping()
        assert client.busy is False

"""
HTTP client for the Jingui admin API.

Wraps httpx.AsyncClient bound to one endpoint + token pair. Every failure is
normalized into the jingui_admin.errors taxonomy:

  httpx transport error      -> NetworkFailure
  non-2xx status             -> RemoteError(message, status, hint)
  2xx with unparsable body   -> MalformedResponse
  204 / empty body           -> None
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError

from jingui_admin.errors import MalformedResponse, NetworkFailure, RemoteError
from jingui_admin.settings import CredentialPair, normalize_endpoint

logger = logging.getLogger(__name__)


class JinguiClient:
    """Async request executor bound to a single credential pair."""

    def __init__(
        self,
        endpoint: str,
        token: str,
        *,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.endpoint = normalize_endpoint(endpoint)
        self.pair = CredentialPair(endpoint=self.endpoint, token=token)
        self._client = httpx.AsyncClient(
            base_url=self.endpoint,
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {token}",
            },
            timeout=timeout,
            transport=transport,
        )
        self._in_flight = 0

    @property
    def closed(self) -> bool:
        return self._client.is_closed

    @property
    def busy(self) -> bool:
        """True while a request sent through this client has not completed."""
        return self._in_flight > 0

    async def close(self) -> None:
        await self._client.aclose()

    async def ping(self) -> None:
        """GET / — raises unless the server answers with a success status."""
        await self._send("GET", "/")

    async def request(
        self,
        method: str,
        path: str,
        *,
        body: BaseModel | dict[str, Any] | None = None,
        params: dict[str, str] | None = None,
        model: Any = None,
    ) -> Any:
        """Send one request and return the parsed payload.

        If `model` is given (a pydantic model or a type such as list[Vault]),
        the JSON body is validated against it; otherwise the decoded JSON is
        returned as-is.
        """
        resp = await self._send(method, path, body=body, params=params)

        if resp.status_code == 204 or not resp.content:
            return None

        try:
            data = resp.json()
        except ValueError as e:
            raise MalformedResponse(f"{method} {path}: body is not JSON") from e

        if model is None:
            return data
        try:
            return TypeAdapter(model).validate_python(data)
        except ValidationError as e:
            raise MalformedResponse(
                f"{method} {path}: {e.error_count()} validation error(s)"
            ) from e

    async def _send(
        self,
        method: str,
        path: str,
        *,
        body: BaseModel | dict[str, Any] | None = None,
        params: dict[str, str] | None = None,
    ) -> httpx.Response:
        payload = body.model_dump(mode="json") if isinstance(body, BaseModel) else body
        self._in_flight += 1
        try:
            resp = await self._client.request(method, path, json=payload, params=params)
        except httpx.HTTPError as e:
            logger.debug("%s %s failed: %s", method, path, e)
            raise NetworkFailure(f"{method} {path}: {e}") from e
        finally:
            self._in_flight -= 1

        logger.debug("%s %s -> %d", method, path, resp.status_code)
        if not resp.is_success:
            raise remote_error_from(resp)
        return resp


def remote_error_from(resp: httpx.Response) -> RemoteError:
    """Build a RemoteError from an error response, tolerating non-JSON bodies."""
    try:
        body = resp.json()
    except ValueError:
        body = None
    if not isinstance(body, dict):
        body = {}

    message = body.get("error") or f"HTTP {resp.status_code}"
    hint = body.get("hint") or None
    return RemoteError(str(message), resp.status_code, str(hint) if hint else None)

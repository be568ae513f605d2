"""Async client for the Hetzner Cloud API.

Wraps the three server endpoints the tool needs (``GET /servers``,
``POST /servers``, ``DELETE /servers/{id}``) with bearer authentication, a
fixed timeout and a single error type.  Every non-success response and
every transport failure surfaces as ``RemoteApiError``.

Typical usage::

    client = HetznerClient(api_token="...")
    servers = await client.list_servers()
"""

from __future__ import annotations

import asyncio
import random
from typing import Any

import httpx

from coding_class.config import Config
from coding_class.errors import RemoteApiError
from coding_class.models import ManagedInstance, ServerCreateRequest

DEFAULT_BASE_URL = "https://api.hetzner.cloud/v1"

PAGE_SIZE = 50


class HetznerClient:
    """Async client for the Hetzner Cloud REST API.

    ``GET`` requests are retried on transport errors and 5xx responses.
    ``POST`` and ``DELETE`` are sent exactly once: the API accepts
    duplicate server names, so a blind retry of a create could leave two
    servers behind.
    """

    def __init__(
        self,
        api_token: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        max_retries: int = 2,
        retry_backoff: float = 1.0,
    ) -> None:
        self.api_token = api_token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_backoff = retry_backoff

    @classmethod
    def from_config(cls, config: Config) -> "HetznerClient":
        """Build a client from a ``Config`` instance."""
        hetzner = config.hetzner
        return cls(
            api_token=hetzner.api_token,
            base_url=hetzner.base_url,
            timeout=hetzner.timeout,
            max_retries=hetzner.max_retries,
            retry_backoff=hetzner.retry_backoff,
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _client(self) -> httpx.AsyncClient:
        """Return a fresh ``AsyncClient`` with auth headers, base URL and timeout."""
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(self.timeout, connect=10.0),
            headers={
                "Authorization": f"Bearer {self.api_token}",
                "Content-Type": "application/json",
            },
        )

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        """Pull ``error.message`` out of an error envelope.

        Falls back to ``"API Error: <status>"`` when the body is not JSON or
        carries no message.
        """
        try:
            data = response.json()
        except ValueError:
            data = None
        if isinstance(data, dict):
            error = data.get("error")
            if isinstance(error, dict) and error.get("message"):
                return str(error["message"])
        return f"API Error: {response.status_code}"

    @staticmethod
    def _decode(response: httpx.Response) -> dict[str, Any]:
        """Decode a success body; empty bodies (e.g. 204) become ``{}``."""
        if not response.content:
            return {}
        try:
            data = response.json()
        except ValueError as exc:
            raise RemoteApiError(
                f"Hetzner API returned a non-JSON response (HTTP {response.status_code})",
                status_code=response.status_code,
            ) from exc
        return data if isinstance(data, dict) else {}

    def _backoff_delay(self, attempt: int) -> float:
        """Exponential backoff with up to 50% random jitter."""
        base = self.retry_backoff * (2 ** attempt)
        return base + random.uniform(0, base / 2)

    async def _request(
        self,
        method: str,
        path: str,
        body: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Send one API request and return the decoded JSON body.

        Raises:
            RemoteApiError: On any non-success status or transport failure.
        """
        attempts = self.max_retries + 1 if method == "GET" else 1

        for attempt in range(attempts):
            last_try = attempt == attempts - 1
            try:
                async with self._client() as client:
                    response = await client.request(method, path, json=body, params=params)
            except httpx.TimeoutException as exc:
                if not last_try:
                    await asyncio.sleep(self._backoff_delay(attempt))
                    continue
                raise RemoteApiError(
                    f"Request to Hetzner API timed out after {self.timeout}s ({method} {path})."
                ) from exc
            except httpx.TransportError as exc:
                if not last_try:
                    await asyncio.sleep(self._backoff_delay(attempt))
                    continue
                raise RemoteApiError(
                    f"Cannot connect to Hetzner API at {self.base_url}: {exc}"
                ) from exc

            if response.is_success:
                return self._decode(response)

            if response.status_code >= 500 and not last_try:
                await asyncio.sleep(self._backoff_delay(attempt))
                continue

            raise RemoteApiError(self._error_message(response), status_code=response.status_code)

        # range(attempts) is never empty, every iteration returns, continues or raises
        raise AssertionError("unreachable")

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def list_servers(self) -> list[ManagedInstance]:
        """Return every server in the project, following pagination."""
        servers: list[ManagedInstance] = []
        page: int | None = 1
        while page is not None:
            data = await self._request(
                "GET", "/servers", params={"page": page, "per_page": PAGE_SIZE}
            )
            servers.extend(ManagedInstance.from_api(s) for s in data.get("servers", []))
            pagination = (data.get("meta") or {}).get("pagination") or {}
            next_page = pagination.get("next_page")
            page = next_page if isinstance(next_page, int) and next_page > page else None
        return servers

    async def create_server(self, request: ServerCreateRequest) -> ManagedInstance:
        """Create a server and return it as the API reports it right after creation."""
        data = await self._request("POST", "/servers", body=request.to_payload())
        server = data.get("server")
        if not isinstance(server, dict):
            raise RemoteApiError("Hetzner API response did not contain a server object")
        return ManagedInstance.from_api(server)

    async def delete_server(self, server_id: int) -> None:
        """Delete a server by id."""
        await self._request("DELETE", f"/servers/{server_id}")

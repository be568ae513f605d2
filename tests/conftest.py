"""Shared pytest fixtures for the coding class test suite.

Provides reusable fixtures for:
- A ready-to-use Config
- Raw Hetzner server payloads
- A mocked httpx.AsyncClient for HetznerClient tests
- A mocked HetznerClient for orchestrator and CLI tests
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from coding_class.config import AdminConfig, Config, HetznerConfig
from coding_class.models import ManagedInstance


# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

@pytest.fixture
def ready_config() -> Config:
    """A complete configuration that passes the readiness check."""
    return Config(
        hetzner=HetznerConfig(api_token="test-token-123", max_retries=2, retry_backoff=0.0),
        admin=AdminConfig(
            name="jonas",
            ssh_keys=["ssh-ed25519 AAAAC3NzaC1lZDI1NTE5AAAAIKey jonas@laptop"],
        ),
    )


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    """A config.json using the camelCase keys of the example file."""
    path = tmp_path / "config.json"
    path.write_text(
        json.dumps({
            "hetzner": {"apiToken": "file-token"},
            "admin": {"name": "jonas", "sshKeys": ["ssh-ed25519 AAAA jonas@laptop"]},
        }),
        encoding="utf-8",
    )
    return path


# ---------------------------------------------------------------------------
# Hetzner payloads
# ---------------------------------------------------------------------------

def make_server_payload(
    name: str,
    server_id: int = 1,
    status: str = "running",
    ip: str | None = "203.0.113.10",
) -> dict[str, Any]:
    """Build a realistic Hetzner ``server`` object."""
    return {
        "id": server_id,
        "name": name,
        "status": status,
        "created": "2026-10-01T08:00:00+00:00",
        "public_net": {
            "ipv4": {"ip": ip, "blocked": False} if ip else None,
            "ipv6": {"ip": "2001:db8::/64", "blocked": False},
        },
        "server_type": {"name": "cx33"},
        "labels": {},
    }


def make_instance(name: str, server_id: int = 1, ip: str | None = "203.0.113.10") -> ManagedInstance:
    return ManagedInstance.from_api(make_server_payload(name, server_id=server_id, ip=ip))


def make_response(status_code: int = 200, payload: Any = None) -> MagicMock:
    """Build a mocked ``httpx.Response``."""
    response = MagicMock()
    response.status_code = status_code
    response.is_success = 200 <= status_code < 300
    if payload is None:
        response.content = b""
        response.json.side_effect = ValueError("no body")
    else:
        response.content = json.dumps(payload).encode()
        response.json.return_value = payload
    return response


@pytest.fixture
def mock_http():
    """Factory that patches httpx.AsyncClient with a queue of responses.

    Usage:
        def test_something(mock_http):
            client_mock, patcher = mock_http([make_response(200, {...})])
            with patcher:
                ...
            client_mock.request.assert_awaited_once()
    """
    def factory(responses: list[Any]) -> tuple[AsyncMock, Any]:
        mock_client = AsyncMock()
        mock_client.request = AsyncMock(side_effect=responses)
        mock_client.__aenter__ = AsyncMock(return_value=mock_client)
        mock_client.__aexit__ = AsyncMock(return_value=False)
        return mock_client, patch("httpx.AsyncClient", return_value=mock_client)

    return factory


# ---------------------------------------------------------------------------
# Mocked gateway
# ---------------------------------------------------------------------------

@pytest.fixture
def fake_client():
    """A HetznerClient stand-in with AsyncMock methods.

    ``list_servers`` returns an empty project by default; ``create_server``
    echoes the requested name back with a fresh id and no IP yet.
    """
    client = MagicMock()
    client.list_servers = AsyncMock(return_value=[])

    async def _create(request):
        return ManagedInstance(id=4711, name=request.name, status="initializing", ipv4=None)

    client.create_server = AsyncMock(side_effect=_create)
    client.delete_server = AsyncMock(return_value=None)
    return client


@pytest.fixture
def server_payload():
    """Factory fixture for raw Hetzner server objects."""
    return make_server_payload


@pytest.fixture
def instance():
    """Factory fixture for ManagedInstance objects."""
    return make_instance


@pytest.fixture
def http_response():
    """Factory fixture for mocked httpx responses."""
    return make_response

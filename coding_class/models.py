"""Pydantic v2 models shared by the gateway and the orchestrator.

``ManagedInstance`` mirrors the subset of the Hetzner Cloud server object the
tool cares about.  ``CredentialSet`` and ``CreateResult`` only ever live in
memory for the duration of a single ``create`` call.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Provider-side resources
# ---------------------------------------------------------------------------

class ManagedInstance(BaseModel):
    """A server as reported by the provider."""
    id: int = Field(..., description="Opaque numeric server id")
    name: str = Field(..., description="Fully-qualified server name")
    status: str = Field(default="unknown", description="Provider lifecycle status")
    ipv4: Optional[str] = Field(default=None, description="Public IPv4, absent until assigned")

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "ManagedInstance":
        """Build an instance from a raw ``server`` object of the REST API.

        ``public_net`` and ``public_net.ipv4`` may both be ``null`` while the
        provider is still allocating an address.
        """
        public_net = data.get("public_net") or {}
        ipv4 = public_net.get("ipv4") or {}
        return cls(
            id=data["id"],
            name=data["name"],
            status=data.get("status") or "unknown",
            ipv4=ipv4.get("ip") or None,
        )


class ServerCreateRequest(BaseModel):
    """Body of ``POST /servers``."""
    name: str
    server_type: str
    image: str
    location: str
    user_data: str
    ssh_keys: Optional[list[str]] = Field(
        default=None, description="Names of provider-stored SSH keys to inject"
    )

    def to_payload(self) -> dict[str, Any]:
        """Return the JSON body, omitting ``ssh_keys`` when none are configured."""
        return self.model_dump(exclude_none=True)


# ---------------------------------------------------------------------------
# Create results
# ---------------------------------------------------------------------------

class CredentialSet(BaseModel):
    """The three secrets generated for a new workstation."""
    model_config = ConfigDict(frozen=True)

    admin: str
    mentee: str
    vnc: str


class CreateResult(BaseModel):
    """What a successful create hands back to the caller for the one-time report."""
    model_config = ConfigDict(frozen=True)

    identifier: str
    instance: ManagedInstance
    credentials: CredentialSet

"""Coding class deployment configuration.

Typed configuration for the whole tool.  All settings use Pydantic v2 models
so a malformed ``config.json`` is rejected when it is loaded rather than
halfway through a create.  A ``Config`` is built once by the CLI and passed
explicitly to the orchestrator, the Hetzner client and the renderer.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from coding_class.errors import ConfigurationError

DEFAULT_CONFIG_PATH = Path("config.json")

# Values shipped in config.example.json; treated the same as "not set".
PLACEHOLDER_API_TOKEN = "your-api-token-here"
PLACEHOLDER_ADMIN_NAME = "your-admin-name"


class HetznerConfig(BaseModel):
    """Connection settings for the Hetzner Cloud API."""

    model_config = ConfigDict(populate_by_name=True)

    api_token: str = Field(default="", alias="apiToken")
    base_url: str = Field(default="https://api.hetzner.cloud/v1", alias="baseUrl")
    timeout: float = Field(default=30.0, gt=0, description="Per-request timeout in seconds")
    max_retries: int = Field(
        default=2, ge=0, alias="maxRetries", description="Extra attempts for GET requests"
    )
    retry_backoff: float = Field(
        default=1.0, ge=0, alias="retryBackoff", description="Base backoff in seconds"
    )
    ssh_key_names: list[str] = Field(
        default_factory=list,
        alias="sshKeyNames",
        description="Names of SSH keys stored in the Hetzner project",
    )


class AdminConfig(BaseModel):
    """The administrator account created on every workstation."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(default="")
    ssh_keys: list[str] = Field(default_factory=list, alias="sshKeys")


class ServerProfile(BaseModel):
    """Fixed machine profile used for every workstation."""

    model_config = ConfigDict(populate_by_name=True)

    server_type: str = Field(default="cx33", alias="serverType")
    image: str = Field(default="debian-12")
    location: str = Field(default="nbg1")


class Config(BaseModel):
    """Global coding class configuration."""

    model_config = ConfigDict(populate_by_name=True)

    hetzner: HetznerConfig = Field(default_factory=HetznerConfig)
    admin: AdminConfig = Field(default_factory=AdminConfig)
    server: ServerProfile = Field(default_factory=ServerProfile)

    # ------------------------------------------------------------------
    # Readiness
    # ------------------------------------------------------------------

    def missing_settings(self) -> list[str]:
        """Return dotted names of required settings that are unset or placeholders."""
        missing: list[str] = []
        token = self.hetzner.api_token.strip()
        if not token or token == PLACEHOLDER_API_TOKEN:
            missing.append("hetzner.apiToken")
        admin_name = self.admin.name.strip()
        if not admin_name or admin_name == PLACEHOLDER_ADMIN_NAME:
            missing.append("admin.name")
        return missing

    def ensure_ready(self) -> None:
        """Raise ``ConfigurationError`` unless every required setting is present."""
        missing = self.missing_settings()
        if missing:
            raise ConfigurationError(
                f"Missing configuration: {', '.join(missing)}. "
                "Edit config.json and fill in the values.",
                missing=missing,
            )

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    @classmethod
    def load(cls, path: Path) -> "Config":
        """Load a configuration file.

        Args:
            path: The JSON file to read.

        Returns:
            A validated ``Config`` instance.

        Raises:
            ConfigurationError: If the file is missing, is not JSON, or does
                not match the expected shape.
        """
        file_path = Path(path)
        try:
            raw = file_path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigurationError(f"Cannot read config file {file_path}: {exc}") from exc
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"Config file {file_path} is not valid JSON: {exc}") from exc
        try:
            return cls.model_validate(data)
        except PydanticValidationError as exc:
            raise ConfigurationError(f"Invalid config file {file_path}: {exc}") from exc

    @classmethod
    def from_env(cls, path: Path | None = None) -> "Config":
        """Build a ``Config`` from the config file plus environment overrides.

        The file is read from *path*, else ``CODING_CLASS_CONFIG``, else
        ``./config.json``.  A missing default file is not an error; the
        readiness check reports what is still absent.

        Recognised variables (all optional):
            CODING_CLASS_CONFIG, HCLOUD_TOKEN, CODING_CLASS_ADMIN_NAME,
            CODING_CLASS_SERVER_TYPE, CODING_CLASS_IMAGE,
            CODING_CLASS_LOCATION, CODING_CLASS_API_TIMEOUT.
        """
        explicit = path is not None or bool(os.environ.get("CODING_CLASS_CONFIG"))
        config_path = Path(path or os.environ.get("CODING_CLASS_CONFIG") or DEFAULT_CONFIG_PATH)

        if config_path.exists() or explicit:
            config = cls.load(config_path)
        else:
            config = cls()

        hetzner_kwargs: dict[str, Any] = {}
        if os.environ.get("HCLOUD_TOKEN"):
            hetzner_kwargs["api_token"] = os.environ["HCLOUD_TOKEN"]
        if os.environ.get("CODING_CLASS_API_TIMEOUT"):
            try:
                hetzner_kwargs["timeout"] = float(os.environ["CODING_CLASS_API_TIMEOUT"])
            except ValueError as exc:
                raise ConfigurationError(
                    f"CODING_CLASS_API_TIMEOUT must be a number, got "
                    f"{os.environ['CODING_CLASS_API_TIMEOUT']!r}"
                ) from exc

        admin_kwargs: dict[str, Any] = {}
        if os.environ.get("CODING_CLASS_ADMIN_NAME"):
            admin_kwargs["name"] = os.environ["CODING_CLASS_ADMIN_NAME"]

        server_kwargs: dict[str, Any] = {}
        if os.environ.get("CODING_CLASS_SERVER_TYPE"):
            server_kwargs["server_type"] = os.environ["CODING_CLASS_SERVER_TYPE"]
        if os.environ.get("CODING_CLASS_IMAGE"):
            server_kwargs["image"] = os.environ["CODING_CLASS_IMAGE"]
        if os.environ.get("CODING_CLASS_LOCATION"):
            server_kwargs["location"] = os.environ["CODING_CLASS_LOCATION"]

        return config.model_copy(
            update={
                "hetzner": config.hetzner.model_copy(update=hetzner_kwargs),
                "admin": config.admin.model_copy(update=admin_kwargs),
                "server": config.server.model_copy(update=server_kwargs),
            }
        )

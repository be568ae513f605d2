"""Workstation lifecycle orchestrator.

Implements the three supported operations on top of the Hetzner client:

create -- Validate the name, refuse duplicates, generate passwords, render
          the boot configuration and submit the server.
list   -- Report every owned workstation.
delete -- Look up an owned workstation and remove it after confirmation.

Every operation first checks that the configuration is complete, so a
missing API token never results in a network request.
"""

from __future__ import annotations

from collections.abc import Callable

from coding_class.cloud_config import CloudConfigRenderer, CloudConfigValues
from coding_class.config import Config
from coding_class.discovery import (
    find_by_identifier,
    fully_qualified_name,
    list_owned,
    validate_identifier,
)
from coding_class.errors import NotFoundError, ResourceConflictError
from coding_class.hetzner_client import HetznerClient
from coding_class.models import CreateResult, ManagedInstance, ServerCreateRequest
from coding_class.passwords import generate_credentials
from coding_class.utils import console, print_progress


class WorkstationOrchestrator:
    """Drives create, list and delete for coding class workstations.

    Attributes:
        config: Validated tool configuration, never mutated here.
        client: Gateway to the Hetzner Cloud API.
        renderer: Boot configuration renderer.
        confirm: Called with a yes/no question before a non-forced delete.
            Without one, non-forced deletes are declined.
    """

    def __init__(
        self,
        config: Config,
        client: HetznerClient | None = None,
        renderer: CloudConfigRenderer | None = None,
        confirm: Callable[[str], bool] | None = None,
        verbose: bool = False,
    ) -> None:
        self.config = config
        self.client = client or HetznerClient.from_config(config)
        self.renderer = renderer or CloudConfigRenderer()
        self.confirm = confirm
        self.verbose = verbose

    def _trace(self, message: str) -> None:
        if self.verbose:
            print_progress(message)

    async def _discover(self) -> list[ManagedInstance]:
        owned = await list_owned(self.client)
        self._trace(f"Found {len(owned)} coding class workstation(s)")
        return owned

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def create(self, name: str) -> CreateResult:
        """Provision a new workstation for *name*.

        The returned credentials exist nowhere else; the caller must show
        them to the operator.

        Raises:
            ConfigurationError: Required settings are missing.
            ValidationError: *name* is not lowercase letters only.
            ResourceConflictError: A workstation with that name already exists.
            RemoteApiError: The provider rejected a request.
        """
        self.config.ensure_ready()
        identifier = validate_identifier(name)
        server_name = fully_qualified_name(identifier)

        existing = find_by_identifier(identifier, await self._discover())
        if existing is not None:
            raise ResourceConflictError(
                f'Server "{server_name}" already exists!', existing=existing
            )

        credentials = generate_credentials()
        values = CloudConfigValues.build(self.config, credentials)
        user_data = self.renderer.render(values)
        self._trace(f"Rendered cloud-config ({len(user_data)} bytes)")

        profile = self.config.server
        request = ServerCreateRequest(
            name=server_name,
            server_type=profile.server_type,
            image=profile.image,
            location=profile.location,
            user_data=user_data,
            ssh_keys=list(self.config.hetzner.ssh_key_names) or None,
        )

        console.print(f"\nCreating server for [bold]{identifier}[/bold]...")
        self._trace(
            f"POST /servers name={server_name} type={profile.server_type} "
            f"image={profile.image} location={profile.location}"
        )
        instance = await self.client.create_server(request)

        return CreateResult(identifier=identifier, instance=instance, credentials=credentials)

    async def list_workstations(self) -> list[ManagedInstance]:
        """Return every owned workstation; an empty list means none exist."""
        self.config.ensure_ready()
        return await self._discover()

    async def delete(
        self,
        name: str,
        force: bool = False,
        owned: list[ManagedInstance] | None = None,
    ) -> ManagedInstance | None:
        """Delete the workstation for *name*.

        Args:
            name: Person identifier (normalised and validated here).
            force: Skip the confirmation question.
            owned: Result of a discovery the caller already ran, to avoid
                listing twice.

        Returns:
            The deleted instance, or ``None`` if the operator declined.

        Raises:
            NotFoundError: No owned workstation matches *name*.
        """
        self.config.ensure_ready()
        identifier = validate_identifier(name)
        if owned is None:
            owned = await self._discover()

        server = find_by_identifier(identifier, owned)
        if server is None:
            raise NotFoundError(f'Server "{fully_qualified_name(identifier)}" not found.')

        if not force:
            question = f"Really delete {server.name}?"
            if self.confirm is None or not self.confirm(question):
                return None

        self._trace(f"DELETE /servers/{server.id}")
        await self.client.delete_server(server.id)
        return server

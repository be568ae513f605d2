"""Workstation naming and discovery.

A workstation's provider-visible name is ``coding-class-<identifier>``.
The prefix is the only ownership marker: anything in the Hetzner project
without it is never listed, touched or deleted by this tool.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from typing import TYPE_CHECKING

from coding_class.errors import ValidationError
from coding_class.models import ManagedInstance

if TYPE_CHECKING:
    from coding_class.hetzner_client import HetznerClient

SERVER_PREFIX = "coding-class-"

_IDENTIFIER_RE = re.compile(r"^[a-z]+$")


def validate_identifier(raw: str | None) -> str:
    """Normalise and validate a person identifier.

    The identifier ends up in a hostname and a Unix account name on the
    VM, so only lowercase ASCII letters are allowed.

    Examples::

        validate_identifier("Max")   -> "max"
        validate_identifier(" ida ") -> "ida"
        validate_identifier("max1")  -> ValidationError

    Raises:
        ValidationError: If the normalised value is empty or contains
            anything other than ``a-z``.
    """
    identifier = (raw or "").strip().lower()
    if not _IDENTIFIER_RE.fullmatch(identifier):
        raise ValidationError(
            f'Name must consist of lowercase letters only (e.g. "max"), got {raw!r}'
        )
    return identifier


def fully_qualified_name(identifier: str) -> str:
    """Return the server name for an already validated identifier."""
    return f"{SERVER_PREFIX}{identifier}"


def display_name(server_name: str) -> str:
    """Strip the ownership prefix from a server name for display."""
    if server_name.startswith(SERVER_PREFIX):
        return server_name[len(SERVER_PREFIX):]
    return server_name


def filter_owned(servers: Iterable[ManagedInstance]) -> list[ManagedInstance]:
    """Keep only servers whose name carries the ownership prefix."""
    return [s for s in servers if s.name.startswith(SERVER_PREFIX)]


async def list_owned(client: HetznerClient) -> list[ManagedInstance]:
    """Fetch every server in the project and return the owned ones."""
    return filter_owned(await client.list_servers())


def find_by_identifier(
    identifier: str, owned: Iterable[ManagedInstance]
) -> ManagedInstance | None:
    """Exact, case-sensitive lookup of ``coding-class-<identifier>``."""
    target = fully_qualified_name(identifier)
    for server in owned:
        if server.name == target:
            return server
    return None

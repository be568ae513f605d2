"""Error taxonomy for the coding class deployment tool.

Every failure the orchestrator can hit is represented by a subclass of
``CodingClassError``.  Core modules only raise; the CLI is the single place
that catches them, prints one human-readable line and exits non-zero.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from coding_class.models import ManagedInstance


class CodingClassError(Exception):
    """Base class for all fatal, user-facing errors."""

    exit_code: int = 1


class ConfigurationError(CodingClassError):
    """Raised when required settings are absent or still placeholders."""

    def __init__(self, message: str, missing: list[str] | None = None) -> None:
        self.missing = missing or []
        super().__init__(message)


class ValidationError(CodingClassError):
    """Raised when a person identifier does not match ``^[a-z]+$``."""


class ResourceConflictError(CodingClassError):
    """Raised when a create targets a name that is already in use."""

    def __init__(self, message: str, existing: ManagedInstance | None = None) -> None:
        self.existing = existing
        super().__init__(message)


class NotFoundError(CodingClassError):
    """Raised when no owned workstation matches the requested identifier."""


class RemoteApiError(CodingClassError):
    """Raised for non-success provider responses and transport failures.

    ``status_code`` is ``None`` when the request never produced a response
    (connection refused, timeout).
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class TemplateRenderError(CodingClassError):
    """Raised when the boot configuration cannot be rendered into a valid document."""

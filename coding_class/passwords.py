"""Password generation for new workstations.

Passwords become live account credentials on the VM, so every byte comes
from :func:`secrets.token_bytes`.  The alphabet leaves out characters that
are easy to misread when copied off a screen (``0 O 1 l I``).
"""

from __future__ import annotations

import secrets

from coding_class.models import CredentialSet

SAFE_ALPHABET = "abcdefghijkmnopqrstuvwxyzABCDEFGHJKLMNPQRSTUVWXYZ23456789"

DEFAULT_LENGTH = 12
# VNC authentication only looks at the first 8 characters.
VNC_LENGTH = 8


def generate_password(length: int = DEFAULT_LENGTH) -> str:
    """Return a random password of exactly *length* characters.

    Each random byte is mapped with ``byte % len(SAFE_ALPHABET)``.

    Raises:
        ValueError: If *length* is not positive.
    """
    if length <= 0:
        raise ValueError(f"Password length must be positive, got {length}")
    raw = secrets.token_bytes(length)
    return "".join(SAFE_ALPHABET[b % len(SAFE_ALPHABET)] for b in raw)


def generate_credentials() -> CredentialSet:
    """Generate a fresh admin, mentee and VNC password."""
    return CredentialSet(
        admin=generate_password(),
        mentee=generate_password(),
        vnc=generate_password(VNC_LENGTH),
    )

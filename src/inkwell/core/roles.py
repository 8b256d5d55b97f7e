"""Role names and the single hierarchy check used by every gate."""

from __future__ import annotations

from typing import Final

READER: Final = "reader"
AUTHOR: Final = "author"
ADMIN: Final = "admin"

# Lowest to highest; a role satisfies every role at or below its rank.
ROLE_HIERARCHY: Final[tuple[str, ...]] = (READER, AUTHOR, ADMIN)

SELF_SERVICE_ROLES: Final[frozenset[str]] = frozenset({READER, AUTHOR})


def normalize_role(role_name: str | None) -> str:
    """Return the canonical lower-case role name."""
    return (role_name or "").strip().lower()


def is_known_role(role_name: str | None) -> bool:
    """Return True if ``role_name`` is part of the hierarchy."""
    return normalize_role(role_name) in ROLE_HIERARCHY


def role_satisfies(actual: str | None, required: str) -> bool:
    """Return True when ``actual`` ranks at or above ``required``.

    Unknown role names satisfy nothing and are satisfied by nothing.
    """
    actual_name = normalize_role(actual)
    required_name = normalize_role(required)
    if actual_name not in ROLE_HIERARCHY or required_name not in ROLE_HIERARCHY:
        return False
    return ROLE_HIERARCHY.index(actual_name) >= ROLE_HIERARCHY.index(required_name)

from __future__ import annotations

from typing import Final

LEGACY_ROLE_ALIASES: Final[dict[str, str]] = {
    "owner": "host",
    "user": "host",
    "collaborator": "viewer",
}

CANONICAL_ROLES: Final[set[str]] = {"admin", "host", "viewer"}

ANALYTICS_READ: Final[str] = "analytics.read"
EVENTS_READ_ANY: Final[str] = "events.read_any"

ROLE_PERMISSION_BUNDLES: Final[dict[str, set[str]]] = {
    "admin": {
        ANALYTICS_READ,
        EVENTS_READ_ANY,
    },
    "host": {
        ANALYTICS_READ,
    },
    "viewer": set(),
}


def normalize_role(role: str) -> str:
    raw = (role or "").strip().lower()
    normalized = LEGACY_ROLE_ALIASES.get(raw, raw)
    if normalized not in CANONICAL_ROLES:
        raise ValueError(f"Unsupported role: {role}")
    return normalized


def permissions_for_role(role: str) -> set[str]:
    normalized = normalize_role(role)
    return set(ROLE_PERMISSION_BUNDLES[normalized])


def role_has_permission(role: str, permission_key: str) -> bool:
    return permission_key in permissions_for_role(role)

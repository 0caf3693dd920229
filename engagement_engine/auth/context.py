from dataclasses import dataclass
from engagement_engine.auth.permissions import normalize_role, permissions_for_role


@dataclass
class AuthContext:
    """Identity of the dashboard user behind a request."""
    user_id: str
    role: str = "host"
    email: str | None = None
    permissions: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        self.role = normalize_role(self.role)
        if self.permissions:
            self.permissions = tuple(sorted(set(self.permissions)))
            return
        self.permissions = tuple(sorted(permissions_for_role(self.role)))

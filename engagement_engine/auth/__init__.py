from engagement_engine.auth.context import AuthContext
from engagement_engine.auth.dependencies import (
    get_current_user,
    has_permission,
    require_permission,
)
from engagement_engine.auth.jwt import create_access_token

__all__ = [
    "AuthContext",
    "get_current_user",
    "has_permission",
    "require_permission",
    "create_access_token",
]

from fastapi import Depends, Header, HTTPException, status
from engagement_engine.auth.context import AuthContext
from engagement_engine.auth.jwt import decode_access_token
from engagement_engine.auth.permissions import role_has_permission


def _extract_bearer_token(authorization: str | None) -> str | None:
    """Extract token from 'Bearer <token>' header."""
    if not authorization:
        return None
    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    return parts[1]


async def get_current_user(authorization: str | None = Header(None)) -> AuthContext:
    """
    JWT session auth for dashboard endpoints.
    """
    token = _extract_bearer_token(authorization)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing authorization header",
        )

    payload = decode_access_token(token)
    if not payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired session",
        )

    try:
        return AuthContext(
            user_id=payload["sub"],
            role=payload.get("role") or "host",
            email=payload.get("email"),
        )
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Unsupported role",
        )


def has_permission(auth: AuthContext, permission_key: str) -> bool:
    if permission_key in auth.permissions:
        return True
    return role_has_permission(auth.role, permission_key)


def require_permission(permission_key: str):
    async def _require(auth: AuthContext = Depends(get_current_user)) -> AuthContext:
        if not has_permission(auth, permission_key):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Permission required: {permission_key}",
            )
        return auth

    return _require

from datetime import datetime, timedelta, timezone
from jose import jwt, JWTError
from engagement_engine.config import settings


def create_access_token(user_id: str, role: str = "host", email: str | None = None) -> str:
    """Create a signed JWT session token for a dashboard user."""
    issued_at = datetime.now(timezone.utc)
    payload = {
        "sub": user_id,
        "role": role,
        "email": email,
        "type": "session",
        "exp": issued_at + timedelta(minutes=settings.jwt_expiration_minutes),
        "iat": issued_at,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict | None:
    """Decode and validate a session JWT. Returns payload or None if invalid."""
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None
    if payload.get("type") != "session" or not payload.get("sub"):
        return None
    return payload

import pytest
from jose import jwt

from engagement_engine.auth.context import AuthContext
from engagement_engine.auth.dependencies import has_permission
from engagement_engine.auth.jwt import create_access_token, decode_access_token
from engagement_engine.auth.permissions import normalize_role
from engagement_engine.config import settings


def test_auth_context_normalizes_legacy_owner_role() -> None:
    auth = AuthContext(user_id="u-1", role="owner")

    assert auth.role == "host"
    assert "analytics.read" in auth.permissions
    assert "events.read_any" not in auth.permissions


def test_admin_can_read_any_event() -> None:
    auth = AuthContext(user_id="u-1", role="admin")

    assert has_permission(auth, "analytics.read")
    assert has_permission(auth, "events.read_any")


def test_viewer_has_no_analytics_access() -> None:
    auth = AuthContext(user_id="u-1", role="collaborator")

    assert auth.role == "viewer"
    assert auth.permissions == ()
    assert not has_permission(auth, "analytics.read")


def test_unknown_role_is_rejected() -> None:
    with pytest.raises(ValueError):
        normalize_role("superuser")


def test_session_token_round_trip() -> None:
    token = create_access_token("u-1", role="admin", email="host@example.com")
    payload = decode_access_token(token)

    assert payload is not None
    assert payload["sub"] == "u-1"
    assert payload["role"] == "admin"
    assert payload["email"] == "host@example.com"


def test_decode_rejects_token_signed_with_other_secret() -> None:
    token = jwt.encode({"sub": "u-1", "type": "session"}, "some-other-secret", algorithm="HS256")
    assert decode_access_token(token) is None


def test_decode_rejects_non_session_token() -> None:
    token = jwt.encode({"sub": "u-1", "type": "invite"}, settings.jwt_secret, algorithm=settings.jwt_algorithm)
    assert decode_access_token(token) is None

"""Signed admin session tokens."""

import uuid
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt

from vip_admin.core.settings import get_settings


def create_session_token(email: str, expires_delta: timedelta | None = None) -> tuple[str, str]:
    """
    Create a JWT for an admin browser session.

    Args:
        email: Signed-in email, stored as the subject
        expires_delta: Time until the token expires (defaults to settings)

    Returns:
        Tuple of (encoded token, session id)
    """
    settings = get_settings()
    if expires_delta is None:
        expires_delta = timedelta(hours=settings.session_expire_hours)

    session_id = uuid.uuid4().hex
    now = datetime.now(UTC)
    payload = {
        "sub": email,
        "type": "admin_session",
        "jti": session_id,
        "exp": now + expires_delta,
        "iat": now,
    }
    token = jwt.encode(payload, settings.session_secret_key, algorithm=settings.jwt_algorithm)
    return token, session_id


def verify_session_token(token: str) -> dict[str, Any]:
    """
    Verify and decode a session token.

    Raises:
        jwt.ExpiredSignatureError: If token is expired
        jwt.InvalidTokenError: If token is invalid or not a session token
    """
    settings = get_settings()
    payload = jwt.decode(
        token,
        settings.session_secret_key,
        algorithms=[settings.jwt_algorithm],
        options={"require": ["sub", "jti", "exp"]},
    )
    if payload.get("type") != "admin_session":
        raise jwt.InvalidTokenError("Not an admin session token")
    return payload

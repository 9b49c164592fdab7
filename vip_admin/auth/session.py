"""Admin sessions: sign-in, per-request session object, sign-out."""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import jwt

from vip_admin.auth.identity import IdentityProvider
from vip_admin.core.errors import AccessDeniedError
from vip_admin.core.logging import get_logger
from vip_admin.core.security import create_session_token, verify_session_token
from vip_admin.core.settings import Settings, get_settings
from vip_admin.listing.views import ListViewRegistry

logger = get_logger(__name__)

ADMIN_SESSION_COOKIE = "admin_session"


@dataclass(frozen=True)
class SessionClaims:
    email: str
    session_id: str
    expires_at: datetime | None = None


class SessionManager:
    """Issues signed session cookies and remembers which ones were revoked.

    Revocations are kept in process memory, so a restart forgets them; the
    token expiry still bounds every session. A revocation is forgotten once
    the token it names has expired.
    """

    def __init__(self) -> None:
        # session id -> expiry of the revoked token
        self._revoked: dict[str, datetime] = {}

    def issue(self, email: str) -> str:
        token, _ = create_session_token(email)
        return token

    def resolve(self, token: str | None) -> SessionClaims | None:
        """Return the claims of a valid, unrevoked token, else None."""
        if not token:
            return None
        try:
            payload = verify_session_token(token)
        except jwt.InvalidTokenError:
            return None
        if payload["jti"] in self._revoked:
            return None
        return SessionClaims(
            email=str(payload["sub"]),
            session_id=str(payload["jti"]),
            expires_at=datetime.fromtimestamp(payload["exp"], UTC),
        )

    def revoke(self, session_id: str, expires_at: datetime | None = None) -> None:
        """Reject ``session_id`` until ``expires_at`` (default: a full session lifetime)."""
        now = datetime.now(UTC)
        self.prune(now)
        if expires_at is None:
            expires_at = now + timedelta(hours=get_settings().session_expire_hours)
        self._revoked[session_id] = expires_at

    def prune(self, now: datetime | None = None) -> int:
        """Forget revocations whose tokens have expired."""
        now = now or datetime.now(UTC)
        expired = [jti for jti, expires_at in self._revoked.items() if expires_at <= now]
        for jti in expired:
            del self._revoked[jti]
        return len(expired)


class AdminSession:
    """Who is signed in for the current request.

    Injected into routes instead of reading any global auth state.
    """

    def __init__(
        self,
        claims: SessionClaims | None,
        *,
        manager: SessionManager,
        views: ListViewRegistry,
        settings: Settings | None = None,
    ):
        self._claims = claims
        self._manager = manager
        self._views = views
        self._settings = settings or get_settings()

    @property
    def session_id(self) -> str | None:
        return self._claims.session_id if self._claims else None

    @property
    def expires_at(self) -> datetime | None:
        return self._claims.expires_at if self._claims else None

    def current_user(self) -> str | None:
        """Email of the signed-in user, if any."""
        return self._claims.email if self._claims else None

    def is_authorized(self) -> bool:
        return self._claims is not None and self._claims.email == self._settings.admin_email

    def sign_out(self) -> None:
        """Revoke the session and unmount its list views."""
        if self._claims is None:
            return
        self._manager.revoke(self._claims.session_id, self._claims.expires_at)
        self._views.unmount_session(self._claims.session_id)
        logger.info("Admin signed out")
        self._claims = None


async def sign_in_admin(
    provider: IdentityProvider,
    manager: SessionManager,
    email: str,
    password: str,
    settings: Settings | None = None,
) -> str:
    """Verify credentials and issue a session token for the admin.

    Raises:
        AuthError: credentials rejected (always the generic message).
        AccessDeniedError: valid account that is not the configured admin.
    """
    settings = settings or get_settings()
    user = await provider.sign_in(email, password)
    if user.email != settings.admin_email:
        logger.warning("Sign-in by non-admin account refused", extra={"operation": "sign_in"})
        raise AccessDeniedError()
    logger.info("Admin signed in", extra={"operation": "sign_in"})
    return manager.issue(user.email)


session_manager = SessionManager()


def get_session_manager() -> SessionManager:
    return session_manager

"""Email + password sign-in against the Identity Toolkit REST API."""

from dataclasses import dataclass

import httpx

from vip_admin.core.errors import AuthError
from vip_admin.core.logging import get_logger
from vip_admin.core.settings import Settings, get_settings

logger = get_logger(__name__)


@dataclass(frozen=True)
class IdentityUser:
    """Signed-in identity returned by the provider."""

    uid: str
    email: str
    display_name: str | None = None


class IdentityProvider:
    """
    Thin client for ``accounts:signInWithPassword``.

    Every failure (wrong password, unknown user, disabled account, network
    error, malformed response) surfaces as the same ``AuthError`` so the
    login form never reveals which credential was wrong.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._settings = settings or get_settings()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._settings.identity_base_url,
                headers={"Content-Type": "application/json"},
                timeout=httpx.Timeout(self._settings.identity_timeout_seconds),
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def sign_in(self, email: str, password: str) -> IdentityUser:
        """Verify credentials and return the identity.

        Raises:
            AuthError: on any failure.
        """
        client = await self._get_client()
        try:
            response = await client.post(
                "/accounts:signInWithPassword",
                params={"key": self._settings.firebase_api_key},
                json={"email": email, "password": password, "returnSecureToken": True},
            )
        except httpx.HTTPError as e:
            logger.error(
                "Identity service request failed: %s",
                type(e).__name__,
                extra={"operation": "sign_in", "error_type": type(e).__name__},
            )
            raise AuthError() from e

        if response.status_code != 200:
            reason = _error_reason(response)
            logger.info(
                "Sign-in rejected (%s): %s",
                response.status_code,
                reason,
                extra={"operation": "sign_in"},
            )
            raise AuthError()

        try:
            body = response.json()
            user = IdentityUser(
                uid=str(body["localId"]),
                email=str(body["email"]),
                display_name=body.get("displayName") or None,
            )
        except (ValueError, KeyError, TypeError) as e:
            logger.error("Malformed identity response", extra={"operation": "sign_in"})
            raise AuthError() from e
        return user


def _error_reason(response: httpx.Response) -> str:
    try:
        return str(response.json()["error"]["message"])
    except (ValueError, KeyError, TypeError):
        return "unknown"

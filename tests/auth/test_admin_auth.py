"""Tests for identity sign-in and admin sessions."""

import json
from datetime import UTC, datetime, timedelta

import httpx
import pytest

from vip_admin.auth.identity import IdentityProvider
from vip_admin.auth.session import AdminSession, SessionManager, sign_in_admin
from vip_admin.core.errors import AccessDeniedError, AuthError
from vip_admin.core.security import create_session_token
from vip_admin.core.settings import get_settings
from vip_admin.listing.entities import TRANSACTIONS, VIP_NUMBERS
from vip_admin.listing.views import ListViewRegistry

ADMIN = "admin@numbersguru.test"


def _provider(handler):
    return IdentityProvider(get_settings(), transport=httpx.MockTransport(handler))


async def test_sign_in_posts_credentials_with_api_key():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = request.url
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"localId": "uid-1", "email": ADMIN, "displayName": "Admin"})

    user = await _provider(handler).sign_in(ADMIN, "correct-horse")

    assert user.uid == "uid-1"
    assert user.email == ADMIN
    assert user.display_name == "Admin"
    assert seen["url"].path.endswith("/accounts:signInWithPassword")
    assert seen["url"].params["key"] == "test-api-key"
    assert seen["body"] == {"email": ADMIN, "password": "correct-horse", "returnSecureToken": True}


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(400, json={"error": {"message": "INVALID_PASSWORD"}}),
        httpx.Response(400, json={"error": {"message": "EMAIL_NOT_FOUND"}}),
        httpx.Response(400, json={"error": {"message": "USER_DISABLED"}}),
        httpx.Response(500, text="upstream exploded"),
        httpx.Response(200, json={"unexpected": True}),
        httpx.Response(200, text="not json"),
    ],
)
async def test_every_failure_is_the_same_generic_error(response):
    with pytest.raises(AuthError) as exc_info:
        await _provider(lambda request: response).sign_in(ADMIN, "whatever")

    assert exc_info.value.message == "Invalid email or password."


async def test_network_errors_are_auth_errors():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(AuthError):
        await _provider(handler).sign_in(ADMIN, "whatever")


async def test_close_releases_client():
    provider = _provider(lambda request: httpx.Response(200, json={"localId": "u", "email": ADMIN}))
    await provider.sign_in(ADMIN, "pw")

    await provider.close()

    assert provider._client is None


async def test_sign_in_admin_issues_token_only_for_admin(identity_provider):
    manager = SessionManager()

    token = await sign_in_admin(identity_provider, manager, ADMIN, "correct-horse")
    assert manager.resolve(token).email == ADMIN

    with pytest.raises(AccessDeniedError):
        await sign_in_admin(identity_provider, manager, "someone@else.test", "other-user")
    with pytest.raises(AuthError):
        await sign_in_admin(identity_provider, manager, ADMIN, "wrong-password")


class TestSessionManager:
    def test_resolves_valid_tokens(self):
        manager = SessionManager()
        claims = manager.resolve(manager.issue(ADMIN))
        assert claims.email == ADMIN
        assert claims.session_id

    @pytest.mark.parametrize("token", [None, "", "garbage.token.value"])
    def test_invalid_tokens_resolve_to_none(self, token):
        assert SessionManager().resolve(token) is None

    def test_revoked_sessions_stop_resolving(self):
        manager = SessionManager()
        token = manager.issue(ADMIN)
        manager.revoke(manager.resolve(token).session_id)
        assert manager.resolve(token) is None

    def test_claims_carry_the_token_expiry(self):
        claims = SessionManager().resolve(SessionManager().issue(ADMIN))
        lifetime = claims.expires_at - datetime.now(UTC)
        assert timedelta(hours=get_settings().session_expire_hours - 1) < lifetime

    def test_revocations_are_forgotten_once_the_token_expires(self):
        manager = SessionManager()
        now = datetime.now(UTC)
        manager.revoke("old", now - timedelta(seconds=1))
        manager.revoke("current", now + timedelta(hours=1))

        assert set(manager._revoked) == {"current"}
        assert manager.prune(now + timedelta(hours=2)) == 1
        assert manager._revoked == {}


class TestAdminSession:
    def _session(self, email, views=None):
        manager = SessionManager()
        claims = manager.resolve(manager.issue(email))
        return AdminSession(claims, manager=manager, views=views if views is not None else ListViewRegistry()), manager

    def test_authorization_is_an_exact_email_match(self):
        session, _ = self._session(ADMIN)
        assert session.current_user() == ADMIN
        assert session.is_authorized()

        other, _ = self._session("ADMIN@numbersguru.test")
        assert not other.is_authorized()

    def test_anonymous_session(self):
        session = AdminSession(None, manager=SessionManager(), views=ListViewRegistry())
        assert session.current_user() is None
        assert session.session_id is None
        assert not session.is_authorized()
        session.sign_out()

    async def test_sign_out_revokes_and_unmounts_views(self, memory_store):
        views = ListViewRegistry()
        session, manager = self._session(ADMIN, views)
        session_id = session.session_id
        view = await views.open(session_id, VIP_NUMBERS, memory_store, 10)
        assert view.mounted

        session.sign_out()

        assert session.current_user() is None
        assert not view.mounted
        assert not view.trigger.mounted
        assert views.get(session_id, VIP_NUMBERS.slug) is None
        assert session_id in manager._revoked


class TestListViewRegistryExpiry:
    async def test_expired_sessions_release_their_views(self, memory_store):
        views = ListViewRegistry()
        now = datetime.now(UTC)
        past, future = now - timedelta(seconds=1), now + timedelta(hours=1)
        stale = [
            await views.open(f"s{i}", VIP_NUMBERS, memory_store, 10, expires_at=past) for i in range(5)
        ]
        live = await views.open("live", VIP_NUMBERS, memory_store, 10, expires_at=future)

        assert len(views) == 1
        assert not any(view.mounted for view in stale)
        assert views.get("live", VIP_NUMBERS.slug) is live
        assert views.get("s0", VIP_NUMBERS.slug) is None

    async def test_prune_at_expiry_unmounts_every_view_of_the_session(self, memory_store):
        views = ListViewRegistry()
        expires_at = datetime.now(UTC) + timedelta(hours=1)
        first = await views.open("s1", VIP_NUMBERS, memory_store, 10, expires_at=expires_at)
        second = await views.open("s1", TRANSACTIONS, memory_store, 10, expires_at=expires_at)

        assert views.prune(expires_at) == 2
        assert len(views) == 0
        assert not first.mounted
        assert not second.trigger.mounted

    async def test_signed_in_session_views_follow_the_cookie_expiry(self, memory_store):
        views = ListViewRegistry()
        manager = SessionManager()
        token, _ = create_session_token(ADMIN, expires_delta=timedelta(minutes=5))
        session = AdminSession(manager.resolve(token), manager=manager, views=views)

        await views.open(
            session.session_id, VIP_NUMBERS, memory_store, 10, expires_at=session.expires_at
        )

        assert views.prune(session.expires_at - timedelta(seconds=1)) == 0
        assert views.prune(session.expires_at) == 1

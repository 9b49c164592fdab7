"""FastAPI dependencies for the store, identity provider and admin session."""

from functools import lru_cache
from typing import Annotated
from urllib.parse import quote

from fastapi import Depends, HTTPException, Request, status

from vip_admin.auth.identity import IdentityProvider
from vip_admin.auth.session import (
    ADMIN_SESSION_COOKIE,
    AdminSession,
    SessionManager,
    get_session_manager,
)
from vip_admin.core.settings import get_settings
from vip_admin.listing.views import ListViewRegistry, get_list_views
from vip_admin.store.base import DocumentStore
from vip_admin.store.sqlalchemy_store import SqlAlchemyDocumentStore


@lru_cache
def get_store() -> DocumentStore:
    """Process-wide document store."""
    return SqlAlchemyDocumentStore()


@lru_cache
def get_identity_provider() -> IdentityProvider:
    return IdentityProvider()


def get_admin_session(
    request: Request,
    manager: Annotated[SessionManager, Depends(get_session_manager)],
    views: Annotated[ListViewRegistry, Depends(get_list_views)],
) -> AdminSession:
    """Build the session object for this request from the session cookie."""
    claims = manager.resolve(request.cookies.get(ADMIN_SESSION_COOKIE))
    return AdminSession(claims, manager=manager, views=views)


class AdminAuthRequired(Exception):
    """Exception raised when admin authentication is required."""

    def __init__(self, redirect_url: str):
        self.redirect_url = redirect_url


def require_admin(
    request: Request,
    session: Annotated[AdminSession, Depends(get_admin_session)],
) -> AdminSession:
    """
    Require an authorized admin session for HTML pages.

    Raises:
        AdminAuthRequired: redirect to the login page, with ``next`` when
            signed out and ``error=role`` when signed in as someone else
    """
    if session.current_user() is None:
        next_url = quote(str(request.url.path), safe="")
        raise AdminAuthRequired(redirect_url=f"/auth/login?next={next_url}")
    if not session.is_authorized():
        session.sign_out()
        raise AdminAuthRequired(redirect_url="/auth/login?error=role")
    return session


def require_admin_api(
    session: Annotated[AdminSession, Depends(get_admin_session)],
) -> AdminSession:
    """Same gate for JSON routes: 401/403 instead of a redirect."""
    if session.current_user() is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not signed in")
    if not session.is_authorized():
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="You do not have admin privileges."
        )
    return session


def get_page_size() -> int:
    return get_settings().page_size

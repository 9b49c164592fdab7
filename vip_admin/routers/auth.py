"""Admin sign-in and sign-out."""

from typing import Annotated

from fastapi import APIRouter, Depends, Form, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse

from vip_admin.auth.identity import IdentityProvider
from vip_admin.auth.session import (
    ADMIN_SESSION_COOKIE,
    AdminSession,
    SessionManager,
    get_session_manager,
    sign_in_admin,
)
from vip_admin.core.deps import get_admin_session, get_identity_provider
from vip_admin.core.errors import AccessDeniedError, AdminError, AuthError
from vip_admin.core.settings import get_settings
from vip_admin.listing.views import Notice
from vip_admin.models.records import LoginForm, validate_form
from vip_admin.templates import templates

router = APIRouter()

_ROLE_NOTICE = Notice(
    "Access Denied",
    "You do not have admin privileges for this dashboard.",
    "destructive",
)


def _safe_next(next_url: str | None) -> str:
    """Only allow same-site relative redirects."""
    if next_url and next_url.startswith("/") and not next_url.startswith("//"):
        return next_url
    return "/admin/"


def _render_login(
    request: Request,
    *,
    email: str = "",
    next_url: str = "",
    notices: list[Notice] | None = None,
    status_code: int = status.HTTP_200_OK,
) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "login.html",
        {"email": email, "next": next_url, "notices": notices or []},
        status_code=status_code,
    )


@router.get("/login", response_class=HTMLResponse)
def login_page(
    request: Request,
    session: Annotated[AdminSession, Depends(get_admin_session)],
    next: str = "",
    error: str | None = None,
):
    """Render the admin login page; signed-in admins go straight to the dashboard."""
    if session.is_authorized():
        return RedirectResponse(url=_safe_next(next), status_code=status.HTTP_303_SEE_OTHER)
    notices = [_ROLE_NOTICE] if error == "role" else []
    return _render_login(request, next_url=next, notices=notices)


@router.post("/login", response_class=HTMLResponse)
async def login(
    request: Request,
    provider: Annotated[IdentityProvider, Depends(get_identity_provider)],
    manager: Annotated[SessionManager, Depends(get_session_manager)],
    email: Annotated[str, Form()] = "",
    password: Annotated[str, Form()] = "",
    next: Annotated[str, Form()] = "",
):
    """
    Sign in with email and password.

    Only the configured admin email gets a session cookie. Wrong credentials
    of any kind produce the same message.
    """
    try:
        form = validate_form(LoginForm, {"email": email, "password": password})
        token = await sign_in_admin(provider, manager, form.email, form.password)
    except AuthError as e:
        return _render_login(
            request,
            email=email,
            next_url=next,
            notices=[Notice.from_error("Login Failed", e)],
            status_code=e.http_status,
        )
    except AccessDeniedError as e:
        return _render_login(
            request,
            next_url=next,
            notices=[Notice.from_error("Access Denied", e)],
            status_code=e.http_status,
        )
    except AdminError as e:
        return _render_login(
            request,
            email=email,
            next_url=next,
            notices=[Notice.from_error("Login Failed", e)],
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    response = RedirectResponse(url=_safe_next(next), status_code=status.HTTP_303_SEE_OTHER)
    response.set_cookie(
        key=ADMIN_SESSION_COOKIE,
        value=token,
        httponly=True,
        max_age=get_settings().session_expire_hours * 60 * 60,
        samesite="lax",
    )
    return response


@router.post("/logout")
def logout(session: Annotated[AdminSession, Depends(get_admin_session)]):
    """Sign out: revoke the session, drop its list views, clear the cookie."""
    session.sign_out()
    response = RedirectResponse(url="/auth/login", status_code=status.HTTP_303_SEE_OTHER)
    response.delete_cookie(key=ADMIN_SESSION_COOKIE)
    return response

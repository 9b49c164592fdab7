"""Admin dashboard overview."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse

from vip_admin.auth.session import AdminSession
from vip_admin.core.deps import get_store, require_admin
from vip_admin.core.errors import AdminError
from vip_admin.core.logging import get_logger
from vip_admin.listing.views import Notice
from vip_admin.services.dashboard import load_dashboard_stats
from vip_admin.store.base import DocumentStore
from vip_admin.templates import templates

logger = get_logger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/", response_class=HTMLResponse)
async def admin_dashboard(
    request: Request,
    store: Annotated[DocumentStore, Depends(get_store)],
    session: Annotated[AdminSession, Depends(require_admin)],
):
    """Dashboard with stock and activity counts."""
    stats = None
    notices = []
    try:
        stats = await load_dashboard_stats(store)
    except AdminError as e:
        logger.error(f"Loading dashboard stats failed: {e.message}")
        notices.append(Notice.from_error("Error Loading Dashboard", e))

    return templates.TemplateResponse(
        request,
        "dashboard.html",
        {"stats": stats, "notices": notices, "user_email": session.current_user()},
    )

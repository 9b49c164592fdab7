"""Generic list pages: paging, filters, search, refresh, delete.

Each admin session gets its own mounted view per entity. Form posts
redirect back to the list page, which renders the view's buffer without
refetching; the sentinel and search endpoints return the rows fragment for
in-place updates.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Form, Request, Response, status
from fastapi.responses import HTMLResponse, RedirectResponse

from vip_admin.auth.session import AdminSession
from vip_admin.core.deps import get_page_size, get_store, require_admin
from vip_admin.listing.controller import FetchStatus
from vip_admin.listing.entities import EntitySpec, get_entity
from vip_admin.listing.views import ListView, ListViewRegistry, get_list_views
from vip_admin.models.records import OrderStatusPatch
from vip_admin.store.base import DocumentStore
from vip_admin.templates import templates

router = APIRouter(prefix="/admin", tags=["listings"])

HAS_MORE_HEADER = "X-Has-More"


def entity_from_path(entity: str) -> EntitySpec:
    return get_entity(entity)


async def current_view(
    entity: Annotated[EntitySpec, Depends(entity_from_path)],
    session: Annotated[AdminSession, Depends(require_admin)],
    store: Annotated[DocumentStore, Depends(get_store)],
    views: Annotated[ListViewRegistry, Depends(get_list_views)],
    page_size: Annotated[int, Depends(get_page_size)],
) -> ListView:
    return await views.open(
        session.session_id, entity, store, page_size, expires_at=session.expires_at
    )


def _list_url(view: ListView) -> str:
    return f"/admin/{view.entity.slug}"


def _redirect(view: ListView) -> RedirectResponse:
    return RedirectResponse(url=_list_url(view), status_code=status.HTTP_303_SEE_OTHER)


def _context(view: ListView) -> dict:
    return {
        "entity": view.entity,
        "view": view,
        "records": view.visible_records,
        "filters": view.controller.filters.to_query_params(),
        "has_more": view.controller.has_more,
        "search_term": view.search_term,
        "notices": view.take_notices(),
    }


def _rows(request: Request, view: ListView) -> HTMLResponse:
    response = templates.TemplateResponse(request, "_rows.html", _context(view))
    response.headers[HAS_MORE_HEADER] = "true" if view.controller.has_more else "false"
    return response


@router.get("/{entity}", response_class=HTMLResponse)
async def list_page(request: Request, view: Annotated[ListView, Depends(current_view)]):
    """Render the list page from the loaded buffer."""
    response = templates.TemplateResponse(request, "list.html", _context(view))
    response.headers[HAS_MORE_HEADER] = "true" if view.controller.has_more else "false"
    return response


@router.get("/{entity}/rows", response_class=HTMLResponse)
async def search_rows(
    request: Request,
    view: Annotated[ListView, Depends(current_view)],
    q: str = "",
):
    """Narrow the loaded rows by a search term; never queries the store."""
    view.search(q)
    return _rows(request, view)


@router.post("/{entity}/filters")
async def apply_filters(request: Request, view: Annotated[ListView, Depends(current_view)]):
    form = await request.form()
    await view.apply_filters({key: value for key, value in form.items() if isinstance(value, str)})
    return _redirect(view)


@router.post("/{entity}/sentinel")
async def sentinel_visibility(
    request: Request,
    view: Annotated[ListView, Depends(current_view)],
    visible: Annotated[bool, Form()],
):
    """Visibility report from the scroll sentinel; returns new rows when a page loaded."""
    result = await view.scroll(visible)
    if result is None or result.status in (FetchStatus.DROPPED, FetchStatus.STALE):
        return Response(
            status_code=status.HTTP_204_NO_CONTENT,
            headers={HAS_MORE_HEADER: "true" if view.controller.has_more else "false"},
        )
    return _rows(request, view)


@router.post("/{entity}/refresh")
async def refresh(view: Annotated[ListView, Depends(current_view)]):
    await view.refresh()
    return _redirect(view)


@router.post("/{entity}/{record_id}/delete")
async def delete_record(
    record_id: str,
    view: Annotated[ListView, Depends(current_view)],
    confirmed: Annotated[bool, Form()] = False,
):
    """Delete after explicit confirmation; the row is removed without a refetch."""
    if view.entity.deletable:
        await view.delete(record_id, confirmed)
    return _redirect(view)


@router.post("/orders/{record_id}/deliver")
async def mark_delivered(
    record_id: str,
    session: Annotated[AdminSession, Depends(require_admin)],
    store: Annotated[DocumentStore, Depends(get_store)],
    views: Annotated[ListViewRegistry, Depends(get_list_views)],
    page_size: Annotated[int, Depends(get_page_size)],
):
    view = await views.open(
        session.session_id, get_entity("orders"), store, page_size, expires_at=session.expires_at
    )
    await view.update_fields(
        record_id, OrderStatusPatch(order_status="delivered"), done="marked as delivered"
    )
    return _redirect(view)

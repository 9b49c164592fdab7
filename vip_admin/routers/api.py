"""Stateless JSON list API with opaque cursors."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from vip_admin.auth.session import AdminSession
from vip_admin.core.deps import get_page_size, get_store, require_admin_api
from vip_admin.listing.entities import get_entity
from vip_admin.listing.filters import apply_post_filters, parse_filters
from vip_admin.listing.query import build_page_query
from vip_admin.models.pagination import PageCursor, PageMetadata, PageResponse
from vip_admin.store.base import DocumentStore
from vip_admin.utils.pagination import cursor_matches, decode_cursor, encode_cursor

router = APIRouter(tags=["api"])


@router.get("/{entity}", response_model=PageResponse)
async def list_entity(
    entity: str,
    request: Request,
    store: Annotated[DocumentStore, Depends(get_store)],
    _: Annotated[AdminSession, Depends(require_admin_api)],
    default_page_size: Annotated[int, Depends(get_page_size)],
    cursor: Annotated[str | None, Query(description="Opaque cursor from a previous page")] = None,
    page_size: Annotated[int | None, Query(ge=1, le=100)] = None,
) -> PageResponse:
    """
    One page of an entity list, newest first.

    Filters are passed as query parameters named like the list page filters
    (``status``, ``category``, ``method``, ``date_from``, ``date_to``,
    ``min_amount``, ``max_amount``). A cursor only continues the filter set
    it was issued under.

    Raises:
        HTTPException: 404 for an unknown entity, 400 for a bad cursor
    """
    spec = get_entity(entity)
    filters = parse_filters(spec.filter_fields, request.query_params)
    size = page_size or default_page_size

    page_cursor: PageCursor | None = None
    if cursor:
        try:
            page_cursor = decode_cursor(cursor)
        except ValueError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
        if not cursor_matches(page_cursor, filters):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cursor was issued for different filters; start again without a cursor.",
            )

    query = build_page_query(spec.collection, spec.filter_fields, filters, page_cursor, size)
    records = await store.query(query)

    # The cursor follows the unfiltered page so amount bounds never end paging early
    has_more = len(records) == size
    next_cursor = None
    if has_more and records:
        next_cursor = encode_cursor(PageCursor.after(records[-1], filters.fingerprint()))

    items = apply_post_filters(spec.filter_fields, filters, records)
    return PageResponse(
        entity=spec.slug,
        items=[record.model_dump(mode="json") for record in items],
        meta=PageMetadata(next_cursor=next_cursor, has_more=has_more, page_size=len(items)),
    )

"""Pydantic models for pagination."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class PageCursor(BaseModel):
    """Position of the last record of a fetched page.

    ``filters_hash`` records the filter set the page was fetched under, so a
    cursor can never be replayed against a different filter set.
    """

    model_config = ConfigDict(frozen=True)

    last_id: str = Field(..., description="ID of last item in current page")
    last_created_at: datetime = Field(..., description="Created timestamp of last item")
    filters_hash: str | None = Field(None, description="Hash of filter parameters for validation")

    @classmethod
    def after(cls, record: Any, filters_hash: str | None = None) -> "PageCursor":
        return cls(
            last_id=record.id,
            last_created_at=record.created_at,
            filters_hash=filters_hash,
        )


class PageMetadata(BaseModel):
    """Pagination metadata for responses."""

    next_cursor: str | None = Field(
        None, description="Opaque cursor token for next page (null if no more results)"
    )
    has_more: bool = Field(False, description="Whether more results are available")
    page_size: int = Field(..., description="Number of items in current response")


class PageResponse(BaseModel):
    """One page of an entity list for the JSON API."""

    entity: str
    items: list[dict[str, Any]]
    meta: PageMetadata

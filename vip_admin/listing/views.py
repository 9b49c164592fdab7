"""Mounted list views and the notices they raise.

A ``ListView`` bundles one controller, its scroll trigger, its mutation
service and the current search term. Views are kept per admin session and
entity, so two browser sessions never share a buffer or cursor.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel

from vip_admin.core.errors import AdminError
from vip_admin.core.logging import get_logger
from vip_admin.listing.controller import FetchResult, FetchStatus, ListQueryController
from vip_admin.listing.entities import EntitySpec
from vip_admin.listing.filters import parse_filters
from vip_admin.listing.mutations import MutationResult, MutationService, MutationStatus
from vip_admin.listing.scroll import InfiniteScrollTrigger
from vip_admin.listing.search import search_overlay
from vip_admin.models.records import ListableRecord
from vip_admin.store.base import DocumentStore

logger = get_logger(__name__)


@dataclass(frozen=True)
class Notice:
    """A user-visible notification (rendered as a toast)."""

    title: str
    description: str
    variant: Literal["default", "destructive"] = "default"

    @classmethod
    def from_error(cls, title: str, error: AdminError) -> "Notice":
        return cls(title=title, description=error.message, variant="destructive")


class ListView:
    def __init__(self, entity: EntitySpec, store: DocumentStore, page_size: int):
        self.entity = entity
        self.controller = ListQueryController(
            store,
            entity.collection,
            filter_fields=entity.filter_fields,
            page_size=page_size,
        )
        self.trigger = InfiniteScrollTrigger(self.controller)
        self.mutations = MutationService(store, self.controller, unique_field=entity.unique_field)
        self.search_term = ""
        self.notices: list[Notice] = []
        self.mounted = False

    @property
    def visible_records(self) -> Sequence[ListableRecord]:
        return search_overlay(self.controller.records, self.search_term, self.entity.search_fields)

    async def mount(self) -> FetchResult:
        self.mounted = True
        return self._note_fetch(await self.controller.load_first_page())

    def unmount(self) -> None:
        self.mounted = False
        self.trigger.unmount()

    async def apply_filters(self, raw: Mapping[str, Any]) -> FetchResult | None:
        try:
            filters = parse_filters(self.entity.filter_fields, raw)
        except AdminError as e:
            self.notices.append(Notice.from_error("Invalid Filter", e))
            return None
        result = await self.controller.set_filters(filters)
        return self._note_fetch(result) if result is not None else None

    async def scroll(self, fully_visible: bool) -> FetchResult | None:
        result = await self.trigger.on_visibility(fully_visible)
        return self._note_fetch(result) if result is not None else None

    async def refresh(self) -> FetchResult:
        self.search_term = ""
        result = self._note_fetch(await self.controller.refresh())
        if result.merged:
            self.notices.append(
                Notice("Refreshed", f"{self.entity.title} list has been updated.")
            )
        return result

    def search(self, term: str | None) -> Sequence[ListableRecord]:
        self.search_term = term or ""
        return self.visible_records

    async def create(self, document: BaseModel) -> MutationResult:
        result = await self.mutations.create(document)
        return self._note_mutation(result, "Added", "added")

    async def update(self, record_id: str, document: BaseModel) -> MutationResult:
        result = await self.mutations.update(record_id, document)
        return self._note_mutation(result, "Updated", "updated")

    async def update_fields(self, record_id: str, patch: BaseModel, *, done: str) -> MutationResult:
        result = await self.mutations.update_fields(record_id, patch)
        return self._note_mutation(result, "Updated", done)

    async def delete(self, record_id: str, confirmed: bool) -> MutationResult:
        label = self._label_for(record_id)
        result = await self.mutations.delete(record_id, confirmed)
        return self._note_mutation(result, "Deleted", "deleted", label=label)

    def take_notices(self) -> list[Notice]:
        notices, self.notices = self.notices, []
        return notices

    def _label_for(self, record_id: str) -> str:
        for record in self.controller.records:
            if record.id == record_id:
                return str(getattr(record, self.entity.label_field, record_id))
        return record_id

    def _note_fetch(self, result: FetchResult) -> FetchResult:
        if result.status is FetchStatus.FAILED and result.error is not None:
            self.notices.append(Notice.from_error(f"Error Fetching {self.entity.title}", result.error))
        return result

    def _note_mutation(
        self,
        result: MutationResult,
        title: str,
        verb: str,
        *,
        label: str | None = None,
    ) -> MutationResult:
        noun = self.entity.noun
        if result.status is MutationStatus.FAILED and result.error is not None:
            self.notices.append(Notice.from_error("Error", result.error))
        elif result.status is MutationStatus.APPLIED:
            if label is None and result.record is not None:
                label = str(getattr(result.record, self.entity.label_field, result.record.id))
            subject = f'{noun} "{label}"' if label else noun
            self.notices.append(Notice(f"{noun} {title}", f"{subject} has been {verb}."))
            if result.resync is not None:
                self._note_fetch(result.resync)
        return result


class ListViewRegistry:
    """In-memory views keyed by (session id, entity slug).

    Each session's views are remembered together with the expiry of its
    session token; once that passes, the views are unmounted and dropped on
    the next ``get`` or ``open``.
    """

    def __init__(self) -> None:
        self._views: dict[tuple[str, str], ListView] = {}
        self._expires: dict[str, datetime] = {}

    def get(self, session_id: str, slug: str) -> ListView | None:
        self.prune()
        return self._views.get((session_id, slug))

    def mount(
        self,
        session_id: str,
        entity: EntitySpec,
        store: DocumentStore,
        page_size: int,
        *,
        expires_at: datetime | None = None,
    ) -> ListView:
        """Create a fresh view, unmounting any previous one for the same key."""
        key = (session_id, entity.slug)
        previous = self._views.pop(key, None)
        if previous is not None:
            previous.unmount()
        view = ListView(entity, store, page_size)
        self._views[key] = view
        if expires_at is not None:
            self._expires[session_id] = expires_at
        return view

    def unmount_session(self, session_id: str) -> int:
        self._expires.pop(session_id, None)
        keys = [key for key in self._views if key[0] == session_id]
        for key in keys:
            self._views.pop(key).unmount()
        if keys:
            logger.debug(f"Unmounted {len(keys)} list view(s) for session")
        return len(keys)

    def prune(self, now: datetime | None = None) -> int:
        """Unmount the views of every session whose token has expired."""
        now = now or datetime.now(UTC)
        expired = [session_id for session_id, expires in self._expires.items() if expires <= now]
        return sum(self.unmount_session(session_id) for session_id in expired)

    def clear(self) -> None:
        for view in self._views.values():
            view.unmount()
        self._views.clear()
        self._expires.clear()

    def __len__(self) -> int:
        return len(self._views)

    async def open(
        self,
        session_id: str,
        entity: EntitySpec,
        store: DocumentStore,
        page_size: int,
        *,
        expires_at: datetime | None = None,
    ) -> ListView:
        """Return the mounted view for this session, mounting and loading page 1 if needed."""
        view = self.get(session_id, entity.slug)
        if view is None or not view.mounted:
            view = self.mount(session_id, entity, store, page_size, expires_at=expires_at)
            await view.mount()
        elif expires_at is not None:
            self._expires[session_id] = expires_at
        return view


list_views = ListViewRegistry()


def get_list_views() -> ListViewRegistry:
    return list_views

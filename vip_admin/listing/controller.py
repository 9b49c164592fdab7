"""Cursor-paginated list controller shared by every entity list view.

The controller owns the loaded record buffer, the page cursor and the active
filter set for one view. All methods run on the event loop; the only
suspension point is the store query inside ``fetch_page``.

State machine::

    IDLE/ERROR --fetch_page--> LOADING --success--> IDLE
                                       --failure--> ERROR

A non-resync fetch requested while LOADING is dropped. A resync always
proceeds and bumps the generation counter, so a completion belonging to an
older generation is discarded instead of merged (last resync wins).
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from vip_admin.core.errors import AdminError, StoreQueryError
from vip_admin.core.logging import get_logger
from vip_admin.listing.filters import FilterField, FilterSet, apply_post_filters
from vip_admin.listing.query import build_page_query
from vip_admin.models.pagination import PageCursor
from vip_admin.models.records import ListableRecord
from vip_admin.store.base import DocumentStore

logger = get_logger(__name__)


class ControllerState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    ERROR = "error"


class FetchStatus(str, Enum):
    MERGED = "merged"
    DROPPED = "dropped"  # non-resync request while a fetch was in flight
    STALE = "stale"  # completed after a newer resync started
    FAILED = "failed"


@dataclass
class FetchResult:
    status: FetchStatus
    records: list[ListableRecord] = field(default_factory=list)
    error: AdminError | None = None

    @property
    def merged(self) -> bool:
        return self.status is FetchStatus.MERGED


class ListQueryController:
    """Loads pages of one collection into an ordered, de-duplicated buffer."""

    def __init__(
        self,
        store: DocumentStore,
        collection: str,
        *,
        filter_fields: Iterable[FilterField] = (),
        page_size: int = 10,
        filters: FilterSet | None = None,
    ):
        if page_size <= 0:
            raise ValueError("page_size must be a positive integer")
        self.store = store
        self.collection = collection
        self.filter_fields = tuple(filter_fields)
        self.page_size = page_size
        self.filters = filters or FilterSet()

        self.records: list[ListableRecord] = []
        self.cursor: PageCursor | None = None
        # Until the first page arrives there may be something to load
        self.has_more = True
        self.state = ControllerState.IDLE
        self.loading_resync = False
        self.last_error: AdminError | None = None
        self._generation = 0

    @property
    def is_loading(self) -> bool:
        return self.state is ControllerState.LOADING

    @property
    def generation(self) -> int:
        return self._generation

    async def fetch_page(
        self,
        cursor: PageCursor | None,
        filters: FilterSet,
        page_size: int,
        is_resync: bool,
    ) -> FetchResult:
        """Fetch one page and reconcile it into the buffer.

        A resync replaces the buffer and adopts ``filters`` as the active
        set; otherwise the page is appended, skipping ids already loaded.
        """
        if page_size <= 0:
            raise ValueError("page_size must be a positive integer")

        if not is_resync:
            if self.is_loading:
                logger.debug(
                    "Dropping next-page request for %s: fetch in flight",
                    self.collection,
                    extra={"collection": self.collection, "operation": "fetch_page"},
                )
                return FetchResult(FetchStatus.DROPPED)
            if filters != self.filters:
                # Cursor belongs to a filter set that is no longer active
                return FetchResult(FetchStatus.STALE)
        else:
            self._generation += 1
            self.filters = filters

        generation = self._generation
        self.state = ControllerState.LOADING
        self.loading_resync = is_resync
        query = build_page_query(self.collection, self.filter_fields, filters, cursor, page_size)

        try:
            page = await self.store.query(query)
        except Exception as e:
            error = e if isinstance(e, AdminError) else None
            if error is None:
                error = StoreQueryError(self.collection, index_hint=query.index_hint())
            if generation != self._generation:
                return FetchResult(FetchStatus.STALE, error=error)
            self.state = ControllerState.ERROR
            self.loading_resync = False
            self.has_more = False
            self.last_error = error
            logger.error(
                "Fetching %s failed: %s",
                self.collection,
                error.message,
                exc_info=(type(e), e, e.__traceback__),
                extra={
                    "collection": self.collection,
                    "operation": "fetch_page",
                    "context_data": {
                        "filters": filters.to_query_params(),
                        "resync": is_resync,
                        "index_hint": query.index_hint(),
                    },
                },
            )
            return FetchResult(FetchStatus.FAILED, error=error)

        if generation != self._generation:
            logger.debug(
                "Discarding stale %s page (generation %s, current %s)",
                self.collection,
                generation,
                self._generation,
                extra={"collection": self.collection, "operation": "fetch_page"},
            )
            return FetchResult(FetchStatus.STALE, records=list(page))

        kept = apply_post_filters(self.filter_fields, filters, page)
        if is_resync:
            self.records = kept
        else:
            loaded = {record.id for record in self.records}
            self.records.extend(record for record in kept if record.id not in loaded)

        # Judged on the unfiltered page: a full page may be followed by more
        self.has_more = len(page) == page_size
        self.cursor = (
            PageCursor.after(page[-1], filters.fingerprint()) if self.has_more and page else None
        )
        self.state = ControllerState.IDLE
        self.loading_resync = False
        self.last_error = None
        return FetchResult(FetchStatus.MERGED, records=kept)

    async def load_first_page(self) -> FetchResult:
        return await self.fetch_page(None, self.filters, self.page_size, is_resync=True)

    async def load_next_page(self) -> FetchResult:
        if not self.has_more:
            return FetchResult(FetchStatus.DROPPED)
        return await self.fetch_page(self.cursor, self.filters, self.page_size, is_resync=False)

    async def refresh(self) -> FetchResult:
        """Reload page 1 under the current filters.

        The buffer is kept until the new page arrives, so a failed refresh
        leaves what was loaded on screen.
        """
        return await self.load_first_page()

    async def resync(self) -> FetchResult:
        """Discard the buffer and reload page 1 (after a create or update)."""
        self.reset()
        return await self.load_first_page()

    async def set_filters(self, filters: FilterSet) -> FetchResult | None:
        """Switch to a new filter set: clear buffer and cursor, then resync.

        Returns ``None`` when ``filters`` equals the active set.
        """
        if filters == self.filters:
            return None
        self.filters = filters
        self.reset()
        return await self.load_first_page()

    def reset(self) -> None:
        self.records = []
        self.cursor = None
        self.has_more = True

    def remove_local(self, record_id: str) -> bool:
        """Drop a record from the buffer without refetching."""
        before = len(self.records)
        self.records = [record for record in self.records if record.id != record_id]
        return len(self.records) != before

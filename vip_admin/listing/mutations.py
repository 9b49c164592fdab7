"""Create, update and delete with buffer reconciliation.

Create and update discard the loaded buffer and reload page 1 under the
active filters. Delete removes the record locally without a refetch.
Failures leave the buffer untouched; nothing is retried.
"""

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel

from vip_admin.core.errors import AdminError, DuplicateValueError, RecordValidationError
from vip_admin.core.logging import get_logger
from vip_admin.listing.controller import FetchResult, ListQueryController
from vip_admin.listing.query import Limit, StoreQuery, Where
from vip_admin.models.records import ListableRecord
from vip_admin.store.base import DocumentStore

logger = get_logger(__name__)


class MutationStatus(str, Enum):
    APPLIED = "applied"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass
class MutationResult:
    status: MutationStatus
    record: ListableRecord | None = None
    error: AdminError | None = None
    resync: FetchResult | None = None

    @property
    def ok(self) -> bool:
        return self.status is MutationStatus.APPLIED


@dataclass(frozen=True)
class UniqueField:
    """A field no two records of the collection may share."""

    name: str
    label: str


class MutationService:
    def __init__(
        self,
        store: DocumentStore,
        controller: ListQueryController,
        *,
        unique_field: UniqueField | None = None,
    ):
        self.store = store
        self.controller = controller
        self.unique_field = unique_field

    @property
    def collection(self) -> str:
        return self.controller.collection

    async def create(self, document: BaseModel) -> MutationResult:
        try:
            await self._check_unique(document, None)
            record = await self.store.add(self.collection, document)
        except AdminError as e:
            return self._failed("add", e)
        return MutationResult(MutationStatus.APPLIED, record, resync=await self.controller.resync())

    async def update(self, record_id: str, document: BaseModel) -> MutationResult:
        try:
            await self._check_unique(document, record_id)
            record = await self.store.update(self.collection, record_id, document)
        except AdminError as e:
            return self._failed("update", e, record_id)
        return MutationResult(MutationStatus.APPLIED, record, resync=await self.controller.resync())

    async def update_fields(self, record_id: str, patch: BaseModel) -> MutationResult:
        """Apply a partial update such as marking an order delivered."""
        return await self.update(record_id, patch)

    async def delete(self, record_id: str, confirmed: bool) -> MutationResult:
        if not confirmed:
            return MutationResult(MutationStatus.CANCELLED)
        try:
            await self.store.delete(self.collection, record_id)
        except AdminError as e:
            return self._failed("delete", e, record_id)
        self.controller.remove_local(record_id)
        return MutationResult(MutationStatus.APPLIED)

    async def _check_unique(self, document: BaseModel, record_id: str | None) -> None:
        if self.unique_field is None:
            return
        value = getattr(document, self.unique_field.name, None)
        if value is None:
            return
        value = str(value).strip()
        # Two rows are enough to see a record other than the one being edited
        matches = await self.store.query(
            StoreQuery(self.collection, (Where(self.unique_field.name, "==", value), Limit(2)))
        )
        if any(match.id != record_id for match in matches):
            raise DuplicateValueError(self.unique_field.label, value)

    def _failed(self, operation: str, error: AdminError, record_id: str | None = None) -> MutationResult:
        log = logger.info if isinstance(error, RecordValidationError) else logger.error
        log(
            "%s on %s failed: %s",
            operation,
            self.collection,
            error.message,
            extra={
                "collection": self.collection,
                "operation": operation,
                "record_id": record_id,
                "error_type": type(error).__name__,
            },
        )
        return MutationResult(MutationStatus.FAILED, error=error)

"""SQLAlchemy implementation of the document store.

Session work is synchronous and runs in a worker thread so the event loop
stays free while a query is outstanding.
"""

import asyncio
import uuid
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel
from sqlalchemy import and_, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from vip_admin.core.db import get_session_factory, session_scope
from vip_admin.core.errors import (
    RecordNotFoundError,
    RecordValidationError,
    StoreQueryError,
    StoreWriteError,
)
from vip_admin.core.logging import get_logger
from vip_admin.core.timing import timed
from vip_admin.listing.query import CREATED_AT, RECORD_ID, OrderBy, StoreQuery, Where
from vip_admin.models.pagination import PageCursor
from vip_admin.models.records import ListableRecord
from vip_admin.store.base import DocumentStore
from vip_admin.store.collections import CollectionSpec, get_collection

logger = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


def _column(spec: CollectionSpec, field: str) -> Any:
    column = spec.table.__table__.columns.get(field)
    if column is None:
        raise StoreQueryError(spec.name, f"Unknown field '{field}' on {spec.name}.")
    return getattr(spec.table, column.key)


def _predicate(spec: CollectionSpec, where: Where) -> Any:
    column = _column(spec, where.field)
    if where.op == "==":
        return column == where.value
    if where.op == ">=":
        return column >= where.value
    if where.op == "<=":
        return column <= where.value
    raise StoreQueryError(spec.name, f"Unsupported operator '{where.op}'.")


def _after_cursor(spec: CollectionSpec, orderings: list[OrderBy], cursor: PageCursor) -> Any:
    """Keyset predicate for rows strictly after the cursor in (created_at, id) order."""
    fields = [o.field for o in orderings]
    directions = {o.direction for o in orderings}
    if fields != [CREATED_AT, RECORD_ID] or len(directions) != 1:
        raise StoreQueryError(
            spec.name,
            "A cursor can only be used with ordering by created_at then id.",
        )
    created_at = _column(spec, CREATED_AT)
    record_id = _column(spec, RECORD_ID)
    if directions == {"desc"}:
        return or_(
            created_at < cursor.last_created_at,
            and_(created_at == cursor.last_created_at, record_id < cursor.last_id),
        )
    return or_(
        created_at > cursor.last_created_at,
        and_(created_at == cursor.last_created_at, record_id > cursor.last_id),
    )


class SqlAlchemyDocumentStore(DocumentStore):
    """Document store backed by one SQL table per collection."""

    def __init__(self, session_factory: sessionmaker | None = None):
        self._session_factory = session_factory

    @property
    def session_factory(self) -> sessionmaker:
        return self._session_factory or get_session_factory()

    # Reads

    async def query(self, query: StoreQuery) -> list[ListableRecord]:
        spec = get_collection(query.collection)
        return await asyncio.to_thread(self._run_query, spec, query)

    def _run_query(self, spec: CollectionSpec, query: StoreQuery) -> list[ListableRecord]:
        stmt = select(spec.table)
        for where in query.wheres:
            stmt = stmt.where(_predicate(spec, where))
        orderings = query.orderings
        if query.start_after is not None:
            stmt = stmt.where(_after_cursor(spec, orderings, query.start_after))
        for ordering in orderings:
            column = _column(spec, ordering.field)
            stmt = stmt.order_by(column.desc() if ordering.direction == "desc" else column.asc())
        if query.limit is not None:
            stmt = stmt.limit(query.limit)

        try:
            with timed(f"query {spec.name}", collection=spec.name):
                with session_scope(self.session_factory) as db:
                    rows = db.execute(stmt).scalars().all()
                    return [spec.record_model.model_validate(row) for row in rows]
        except SQLAlchemyError as e:
            index_hint = query.index_hint()
            logger.exception(
                "Query against %s failed",
                spec.name,
                extra={
                    "collection": spec.name,
                    "operation": "query",
                    "context_data": {"index_hint": index_hint},
                },
            )
            raise StoreQueryError(spec.name, index_hint=index_hint) from e

    async def get(self, collection: str, record_id: str) -> ListableRecord:
        spec = get_collection(collection)
        return await asyncio.to_thread(self._get, spec, record_id)

    def _get(self, spec: CollectionSpec, record_id: str) -> ListableRecord:
        try:
            with session_scope(self.session_factory) as db:
                row = db.get(spec.table, record_id)
                if row is None:
                    raise RecordNotFoundError(spec.name, record_id)
                return spec.record_model.model_validate(row)
        except SQLAlchemyError as e:
            logger.exception(
                "Fetch of %s/%s failed",
                spec.name,
                record_id,
                extra={"collection": spec.name, "operation": "get", "record_id": record_id},
            )
            raise StoreQueryError(spec.name) from e

    async def count(self, collection: str, wheres: tuple[Where, ...] = ()) -> int:
        spec = get_collection(collection)
        return await asyncio.to_thread(self._count, spec, wheres)

    def _count(self, spec: CollectionSpec, wheres: tuple[Where, ...]) -> int:
        stmt = select(func.count()).select_from(spec.table)
        for where in wheres:
            stmt = stmt.where(_predicate(spec, where))
        try:
            with timed(f"count {spec.name}", collection=spec.name):
                with session_scope(self.session_factory) as db:
                    return int(db.execute(stmt).scalar_one())
        except SQLAlchemyError as e:
            logger.exception(
                "Count of %s failed",
                spec.name,
                extra={"collection": spec.name, "operation": "count"},
            )
            raise StoreQueryError(spec.name) from e

    # Writes

    def _writable(self, spec: CollectionSpec, document: BaseModel) -> dict[str, Any]:
        if not isinstance(document, spec.write_models):
            raise RecordValidationError(
                f"{spec.name} does not accept {type(document).__name__} documents.",
                details={"collection": spec.name},
            )
        return document.model_dump(mode="json")

    async def add(self, collection: str, document: BaseModel) -> ListableRecord:
        spec = get_collection(collection)
        data = self._writable(spec, document)
        return await asyncio.to_thread(self._insert, spec, data)

    def _insert(self, spec: CollectionSpec, data: dict[str, Any]) -> ListableRecord:
        row = spec.table(id=uuid.uuid4().hex, created_at=_utcnow(), **data)
        try:
            with timed(f"add {spec.name}", collection=spec.name):
                with session_scope(self.session_factory) as db:
                    db.add(row)
                    db.flush()
                    record = spec.record_model.model_validate(row)
        except SQLAlchemyError as e:
            logger.exception(
                "Insert into %s failed",
                spec.name,
                extra={"collection": spec.name, "operation": "add"},
            )
            raise StoreWriteError(spec.name, "add") from e
        logger.info(
            "Added %s/%s",
            spec.name,
            record.id,
            extra={"collection": spec.name, "operation": "add", "record_id": record.id},
        )
        return record

    async def update(self, collection: str, record_id: str, document: BaseModel) -> ListableRecord:
        spec = get_collection(collection)
        data = self._writable(spec, document)
        return await asyncio.to_thread(self._update, spec, record_id, data)

    def _update(self, spec: CollectionSpec, record_id: str, data: dict[str, Any]) -> ListableRecord:
        try:
            with timed(f"update {spec.name}", collection=spec.name):
                with session_scope(self.session_factory) as db:
                    row = db.get(spec.table, record_id)
                    if row is None:
                        raise RecordNotFoundError(spec.name, record_id)
                    for key, value in data.items():
                        setattr(row, key, value)
                    row.updated_at = _utcnow()
                    db.flush()
                    record = spec.record_model.model_validate(row)
        except SQLAlchemyError as e:
            logger.exception(
                "Update of %s/%s failed",
                spec.name,
                record_id,
                extra={"collection": spec.name, "operation": "update", "record_id": record_id},
            )
            raise StoreWriteError(spec.name, "update") from e
        logger.info(
            "Updated %s/%s",
            spec.name,
            record_id,
            extra={"collection": spec.name, "operation": "update", "record_id": record_id},
        )
        return record

    async def delete(self, collection: str, record_id: str) -> None:
        spec = get_collection(collection)
        if not spec.deletable:
            raise StoreWriteError(spec.name, "delete", f"Records in {spec.name} cannot be deleted.")
        await asyncio.to_thread(self._delete, spec, record_id)

    def _delete(self, spec: CollectionSpec, record_id: str) -> None:
        try:
            with timed(f"delete {spec.name}", collection=spec.name):
                with session_scope(self.session_factory) as db:
                    row = db.get(spec.table, record_id)
                    if row is None:
                        raise RecordNotFoundError(spec.name, record_id)
                    db.delete(row)
        except SQLAlchemyError as e:
            logger.exception(
                "Delete of %s/%s failed",
                spec.name,
                record_id,
                extra={"collection": spec.name, "operation": "delete", "record_id": record_id},
            )
            raise StoreWriteError(spec.name, "delete") from e
        logger.info(
            "Deleted %s/%s",
            spec.name,
            record_id,
            extra={"collection": spec.name, "operation": "delete", "record_id": record_id},
        )

"""Test configuration and fixtures."""
import asyncio
import json
import os
import tempfile
import uuid
from collections import defaultdict
from datetime import UTC, datetime, timedelta
from pathlib import Path

# Settings fail fast on missing credentials, so they must exist before import
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ADMIN_EMAIL"] = "admin@numbersguru.test"
os.environ["FIREBASE_API_KEY"] = "test-api-key"
os.environ["SESSION_SECRET_KEY"] = "test-session-secret-key-0123456789abcdef"
os.environ["LOGS_DIR"] = str(Path(tempfile.gettempdir()) / "vip_admin_test_logs")
os.environ["PAGE_SIZE"] = "10"

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from vip_admin.auth.identity import IdentityProvider
from vip_admin.auth.session import ADMIN_SESSION_COOKIE, session_manager
from vip_admin.core.db import Base
from vip_admin.core.deps import get_identity_provider, get_store
from vip_admin.core.errors import RecordNotFoundError, StoreWriteError
from vip_admin.core.settings import get_settings
from vip_admin.listing.query import StoreQuery
from vip_admin.listing.views import list_views
from vip_admin.main import app
from vip_admin.models import schema
from vip_admin.models.records import VipNumberRecord
from vip_admin.store.base import DocumentStore
from vip_admin.store.collections import get_collection
from vip_admin.store.sqlalchemy_store import SqlAlchemyDocumentStore

ADMIN_EMAIL = os.environ["ADMIN_EMAIL"]
BASE_TIME = datetime(2026, 1, 1, 12, 0, 0)


class MemoryStore(DocumentStore):
    """In-memory document store that can hold queries open.

    With ``paused`` set, every query parks on its own event in ``waiting``
    until the test releases it, so completions can be reordered.
    """

    def __init__(self):
        self.rows = defaultdict(list)
        self.queries: list[StoreQuery] = []
        self.writes: list[tuple[str, str]] = []
        self.paused = False
        self.waiting: list[asyncio.Event] = []
        self.fail_with: Exception | None = None
        self.fail_writes_with: Exception | None = None

    def load(self, collection, records):
        self.rows[collection].extend(records)

    async def release(self, index):
        self.waiting[index].set()
        # Let the released fetch run to completion
        for _ in range(5):
            await asyncio.sleep(0)

    async def query(self, query):
        self.queries.append(query)
        error = self.fail_with
        if self.paused:
            event = asyncio.Event()
            self.waiting.append(event)
            await event.wait()
        if error is not None:
            raise error
        return self._evaluate(query)

    def _evaluate(self, query):
        rows = [
            row
            for row in self.rows[query.collection]
            if all(_matches(row, where) for where in query.wheres)
        ]
        for ordering in reversed(query.orderings):
            rows.sort(key=lambda row: getattr(row, ordering.field), reverse=ordering.direction == "desc")
        cursor = query.start_after
        if cursor is not None:
            rows = [row for row in rows if (row.created_at, row.id) < (cursor.last_created_at, cursor.last_id)]
        if query.limit is not None:
            rows = rows[: query.limit]
        return rows

    async def get(self, collection, record_id):
        for row in self.rows[collection]:
            if row.id == record_id:
                return row
        raise RecordNotFoundError(collection, record_id)

    async def add(self, collection, document):
        self.writes.append(("add", collection))
        if self.fail_writes_with is not None:
            raise self.fail_writes_with
        spec = get_collection(collection)
        record = spec.record_model(
            id=uuid.uuid4().hex,
            created_at=datetime.now(UTC).replace(tzinfo=None),
            **document.model_dump(),
        )
        self.rows[collection].append(record)
        return record

    async def update(self, collection, record_id, document):
        self.writes.append(("update", collection))
        if self.fail_writes_with is not None:
            raise self.fail_writes_with
        current = await self.get(collection, record_id)
        updated = current.model_copy(update=document.model_dump())
        rows = self.rows[collection]
        rows[rows.index(current)] = updated
        return updated

    async def delete(self, collection, record_id):
        self.writes.append(("delete", collection))
        if self.fail_writes_with is not None:
            raise self.fail_writes_with
        if not get_collection(collection).deletable:
            raise StoreWriteError(collection, "delete")
        current = await self.get(collection, record_id)
        self.rows[collection].remove(current)

    async def count(self, collection, wheres=()):
        return len([row for row in self.rows[collection] if all(_matches(row, w) for w in wheres)])


def _matches(row, where):
    value = getattr(row, where.field)
    if where.op == "==":
        return value == where.value
    if where.op == ">=":
        return value >= where.value
    return value <= where.value


@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest.fixture
def vip_record():
    """Build a VipNumberRecord; higher index means created later."""

    def _make(index, **overrides):
        values = {
            "id": f"vip{index:03d}",
            "number": f"98765{index:05d}",
            "price": 1000 + index,
            "status": "available",
            "category_slug": "gold",
            "created_at": BASE_TIME + timedelta(minutes=index),
        }
        values.update(overrides)
        return VipNumberRecord(**values)

    return _make


@pytest.fixture
def test_db():
    """Create a test database."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def session_factory(test_db):
    return sessionmaker(autocommit=False, autoflush=False, bind=test_db)


@pytest.fixture
def db_session(session_factory):
    """Create a test database session."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def store(session_factory):
    return SqlAlchemyDocumentStore(session_factory)


@pytest.fixture
def make_vip_row():
    """Build a VipNumber ORM row; higher index means created later."""

    def _make(index, **overrides):
        values = {
            "id": f"vip{index:03d}",
            "number": f"98765{index:05d}",
            "price": 1000 + index,
            "status": "available",
            "category_slug": "gold",
            "is_vip": False,
            "created_at": BASE_TIME + timedelta(minutes=index),
        }
        values.update(overrides)
        return schema.VipNumber(**values)

    return _make


@pytest.fixture
def identity_responses():
    """Responses the mocked identity service returns, keyed by password."""
    return {
        "correct-horse": (200, {"localId": "uid-admin", "email": ADMIN_EMAIL}),
        "other-user": (200, {"localId": "uid-other", "email": "someone@else.test"}),
    }


@pytest.fixture
def identity_provider(identity_responses):
    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        status_code, payload = identity_responses.get(
            body.get("password"), (400, {"error": {"message": "INVALID_LOGIN_CREDENTIALS"}})
        )
        return httpx.Response(status_code, json=payload)

    return IdentityProvider(get_settings(), transport=httpx.MockTransport(handler))


@pytest.fixture
def client(store, identity_provider):
    """Create a test client with store and identity overrides."""
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_identity_provider] = lambda: identity_provider
    list_views.clear()

    with TestClient(app) as test_client:
        yield test_client

    list_views.clear()
    app.dependency_overrides.clear()


@pytest.fixture
def admin_client(client):
    """Test client carrying a valid admin session cookie."""
    client.cookies.set(ADMIN_SESSION_COOKIE, session_manager.issue(ADMIN_EMAIL))
    return client

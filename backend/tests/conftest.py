"""
Apna SAHE Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures: an in-memory Firestore, signed-in principals,
       and an HTTPX client wired to the app with dependency overrides.
Why:   Tests must not need Firebase credentials, a Firestore emulator or a
       Cloudinary account.

Fixture Hierarchy (all function-scoped):
    ├── fake_db:        in-memory stand-in for the async Firestore client
    ├── student_user / other_student / admin_user: AuthenticatedUser values
    ├── sample_pdf_bytes
    ├── test_client:    AsyncClient; Firestore overridden, caller anonymous
    ├── sign_in_as:     makes later requests come from a given user
    └── student_profile: factory for `users/{uid}` documents

The fake supports the Firestore surface the services use: documents,
collections, `where(filter=FieldFilter(...))`, `order_by`, `limit`, async
`stream()`, and transactions (applied immediately; `async_transactional` is
replaced by an identity decorator).
"""

import os

# Set before any apna_sahe import so Settings() picks them up
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("ADMIN_EMAIL", "admin@vrsec.ac.in")
os.environ.setdefault("CLOUDINARY_CLOUD_NAME", "test-cloud")
os.environ.setdefault("CLOUDINARY_API_KEY", "test-key-not-real")
os.environ.setdefault("CLOUDINARY_API_SECRET", "test-secret-not-real")
os.environ.setdefault("FIREBASE_WEB_API_KEY", "test-web-key")
os.environ.setdefault("RETRY_MIN_WAIT", "0")
os.environ.setdefault("RATE_LIMIT_REQUESTS", "10000")

import copy
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from unittest.mock import patch

import pytest
import pytest_asyncio
from google.api_core import exceptions as google_exceptions
from google.cloud import firestore
from httpx import ASGITransport, AsyncClient

from apna_sahe.firebase import get_firestore
from apna_sahe.security.auth import AuthenticatedUser, get_current_user


# ══════════════════════════════════════════════════════════════════════════
# In-Memory Firestore
# ══════════════════════════════════════════════════════════════════════════

class FakeSnapshot:
    def __init__(self, doc_id: str, data: Optional[Dict[str, Any]]):
        self.id = doc_id
        self._data = data

    @property
    def exists(self) -> bool:
        return self._data is not None

    def to_dict(self):
        return copy.deepcopy(self._data) if self._data is not None else None


class FakeDocumentReference:
    def __init__(self, db: "FakeFirestore", collection: str, doc_id: str):
        self._db = db
        self._collection = collection
        self.id = doc_id

    @property
    def _store(self) -> Dict[str, Dict[str, Any]]:
        return self._db.collections.setdefault(self._collection, {})

    async def get(self, transaction=None) -> FakeSnapshot:
        return FakeSnapshot(self.id, self._store.get(self.id))

    async def set(self, data: Dict[str, Any]) -> None:
        self._store[self.id] = self._db.resolve(data)

    async def update(self, data: Dict[str, Any]) -> None:
        if self.id not in self._store:
            raise google_exceptions.NotFound(f"No document to update: {self._collection}/{self.id}")
        self._store[self.id].update(self._db.resolve(data))

    async def delete(self) -> None:
        self._store.pop(self.id, None)


def _matches(value, op: str, expected) -> bool:
    if op == "==":
        return value == expected
    if op == "in":
        return value in expected
    if value is None:
        return False
    if op == ">=":
        return value >= expected
    if op == "<=":
        return value <= expected
    if op == ">":
        return value > expected
    if op == "<":
        return value < expected
    raise NotImplementedError(op)


class FakeQuery:
    def __init__(self, db: "FakeFirestore", collection: str, filters=(), orders=(), limit_count=None):
        self._db = db
        self._collection = collection
        self._filters = tuple(filters)
        self._orders = tuple(orders)
        self._limit = limit_count

    def where(self, filter=None):
        clause = (filter.field_path, filter.op_string, filter.value)
        return FakeQuery(self._db, self._collection, self._filters + (clause,), self._orders, self._limit)

    def order_by(self, field_path: str, direction: str = firestore.Query.ASCENDING):
        orders = self._orders + ((field_path, direction),)
        return FakeQuery(self._db, self._collection, self._filters, orders, self._limit)

    def limit(self, count: int):
        return FakeQuery(self._db, self._collection, self._filters, self._orders, count)

    def _results(self):
        docs = list(self._db.collections.get(self._collection, {}).items())
        for field, op, expected in self._filters:
            docs = [(i, d) for i, d in docs if _matches(d.get(field), op, expected)]
        # Firestore leaves out documents that lack an ordered field
        for field, _ in self._orders:
            docs = [(i, d) for i, d in docs if field in d]
        for field, direction in reversed(self._orders):
            docs.sort(key=lambda item: item[1][field], reverse=direction == firestore.Query.DESCENDING)
        if self._limit is not None:
            docs = docs[: self._limit]
        return [FakeSnapshot(i, d) for i, d in docs]

    async def stream(self):
        for snapshot in self._results():
            yield snapshot

    async def get(self):
        return self._results()


class FakeCollection(FakeQuery):
    def __init__(self, db: "FakeFirestore", name: str):
        super().__init__(db, name)

    def document(self, doc_id: Optional[str] = None) -> FakeDocumentReference:
        return FakeDocumentReference(self._db, self._collection, doc_id or uuid.uuid4().hex[:20])


class FakeTransaction:
    """Writes apply immediately; `async_transactional` is patched to identity."""

    def __init__(self, db: "FakeFirestore"):
        self._db = db
        self.writes = []

    def set(self, ref: FakeDocumentReference, data: Dict[str, Any]) -> None:
        self.writes.append(("set", ref.id))
        ref._store[ref.id] = self._db.resolve(data)

    def update(self, ref: FakeDocumentReference, data: Dict[str, Any]) -> None:
        if ref.id not in ref._store:
            raise google_exceptions.NotFound(f"No document to update: {ref.id}")
        self.writes.append(("update", ref.id))
        ref._store[ref.id].update(self._db.resolve(data))

    def delete(self, ref: FakeDocumentReference) -> None:
        self.writes.append(("delete", ref.id))
        ref._store.pop(ref.id, None)


class FakeFirestore:
    """
    Minimal async Firestore client over nested dicts.

    Server timestamps resolve to a clock that advances one second per write,
    so "newest first" ordering is deterministic.
    """

    def __init__(self):
        self.collections: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self._clock = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def collection(self, name: str) -> FakeCollection:
        return FakeCollection(self, name)

    def transaction(self) -> FakeTransaction:
        return FakeTransaction(self)

    def resolve(self, data: Dict[str, Any]) -> Dict[str, Any]:
        resolved = copy.deepcopy({k: v for k, v in data.items() if v is not firestore.SERVER_TIMESTAMP})
        for key, value in data.items():
            if value is firestore.SERVER_TIMESTAMP:
                self._clock += timedelta(seconds=1)
                resolved[key] = self._clock
        return resolved

    # ── Test helpers ──────────────────────────────────────────────────────

    def seed(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        self.collections.setdefault(collection, {})[doc_id] = copy.deepcopy(data)

    def doc(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        return self.collections.get(collection, {}).get(doc_id)


# ══════════════════════════════════════════════════════════════════════════
# Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture(autouse=True)
def immediate_transactions(monkeypatch):
    """Run transaction bodies directly against FakeTransaction."""
    monkeypatch.setattr(firestore, "async_transactional", lambda fn: fn)


@pytest.fixture
def fake_db():
    return FakeFirestore()


def _student_profile(uid: str, name: str, points: int = 0, notes: int = 0, branch: str = "CSE") -> Dict[str, Any]:
    return {
        "uid": uid,
        "name": name,
        "email": f"{uid}@vrsec.ac.in",
        "role": "student",
        "branch": branch,
        "semester": "3",
        "points": points,
        "notesUploaded": notes,
        "createdAt": datetime(2023, 9, 1, tzinfo=timezone.utc),
    }


@pytest.fixture
def student_profile():
    return _student_profile


@pytest.fixture
def student_user():
    return AuthenticatedUser(uid="stu1", email="stu1@vrsec.ac.in")


@pytest.fixture
def other_student():
    return AuthenticatedUser(uid="stu2", email="stu2@vrsec.ac.in")


@pytest.fixture
def admin_user():
    """Admin by ADMIN_EMAIL; has no user document."""
    return AuthenticatedUser(uid="adm1", email="admin@vrsec.ac.in")


@pytest.fixture
def sample_pdf_bytes():
    """Smallest file that starts like a PDF; MIME sniffing is mocked where it matters."""
    return b"%PDF-1.4\n1 0 obj\n<<>>\nendobj\ntrailer\n<<>>\n%%EOF\n"


@pytest.fixture
def app(fake_db):
    from apna_sahe.main import app as application

    application.dependency_overrides[get_firestore] = lambda: fake_db
    # /health builds its own client instead of taking the dependency
    with patch("apna_sahe.routes.health.get_firestore", return_value=fake_db):
        yield application
    application.dependency_overrides.clear()


@pytest_asyncio.fixture
async def test_client(app):
    """
    Anonymous client; the lifespan is not run, so no platform is contacted.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def sign_in_as(app):
    """Make every following request come from `user`."""
    def _sign_in(user: AuthenticatedUser) -> None:
        app.dependency_overrides[get_current_user] = lambda: user
    return _sign_in

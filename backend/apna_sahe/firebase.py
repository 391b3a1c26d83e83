"""
Apna SAHE Backend — Firebase Platform Access
==============================================

What:  Firebase Admin initialization, the Firestore client dependency, the
       Storage bucket accessor, and small helpers for turning Firestore
       snapshots into plain dicts.
Why:   Centralizes every platform connection concern in one place, the way a
       relational app keeps its engine and session factory together.
How:   `init_firebase_admin()` is idempotent and called from the lifespan;
       `get_firestore()` is injected into routes with `Depends()` so tests can
       swap in an in-memory client through `app.dependency_overrides`.

Credential Precedence:
    1. FIREBASE_SERVICE_ACCOUNT_JSON — parsed as-is first; if that fails the
       parse is retried leniently (raw newlines inside strings allowed), and an
       escaped private key ("\\n") is normalized to real newlines.
    2. FIREBASE_SERVICE_ACCOUNT_PATH — path to the downloaded key file.
    3. Application default credentials (GOOGLE_APPLICATION_CREDENTIALS or the
       metadata server on Google Cloud).
"""

import json
import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List

import firebase_admin
from firebase_admin import credentials, firestore_async, storage
from google.api_core import exceptions as google_exceptions

from apna_sahe.config import settings
from apna_sahe.exceptions import DatabaseError, NotFoundError, StorageError

logger = logging.getLogger(__name__)

# ── Collection Names ──────────────────────────────────────────────────────
USERS = "users"
NOTES = "notes"
EVENTS = "events"
FACILITIES = "facilities"
QUERIES = "queries"


def load_service_account(raw: str) -> Dict[str, Any]:
    """
    Parse a service account JSON blob taken from an environment variable.

    Hosting dashboards mangle multi-line values in two ways: the private key
    arrives with literal newlines (invalid JSON), or with double-escaped
    "\\n" sequences. Both are accepted.
    """
    try:
        info = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Service account JSON did not parse as-is, retrying with lenient parsing")
        info = json.loads(raw, strict=False)

    private_key = info.get("private_key")
    if isinstance(private_key, str) and "\\n" in private_key:
        info["private_key"] = private_key.replace("\\n", "\n")
    return info


def init_firebase_admin() -> firebase_admin.App:
    """
    Initialize the default Firebase app once and return it.

    When:   Called during startup, and lazily by the client accessors below.
    Raises: ValueError / OSError when credentials are unusable. The lifespan
            treats that as fatal.
    """
    try:
        return firebase_admin.get_app()
    except ValueError:
        pass  # Not initialized yet

    options: Dict[str, Any] = {}
    if settings.firebase_storage_bucket:
        options["storageBucket"] = settings.firebase_storage_bucket

    if settings.firebase_service_account_json:
        cred = credentials.Certificate(load_service_account(settings.firebase_service_account_json))
        source = "service account JSON"
    elif settings.firebase_service_account_path:
        cred = credentials.Certificate(settings.firebase_service_account_path)
        source = "service account file"
    else:
        cred = None
        source = "application default credentials"

    app = firebase_admin.initialize_app(cred, options or None)
    logger.info("Firebase Admin initialized with %s", source)
    return app


def get_firestore():
    """
    FastAPI dependency returning the shared async Firestore client.

    Example usage in a route:
        @router.get("/events")
        async def list_events(db=Depends(get_firestore)):
            return await event_service.get_all_events(db)
    """
    return firestore_async.client(init_firebase_admin())


def get_storage_bucket():
    """Return the configured Cloud Storage bucket (legacy note files)."""
    if not settings.firebase_storage_bucket:
        raise StorageError(
            message="File storage is not configured",
            context={"setting": "FIREBASE_STORAGE_BUCKET"},
        )
    return storage.bucket(app=init_firebase_admin())


# ── Document Helpers ──────────────────────────────────────────────────────

def snapshot_to_dict(snapshot) -> Dict[str, Any]:
    """Flatten a document snapshot into `{"id": ..., **fields}`."""
    return {"id": snapshot.id, **(snapshot.to_dict() or {})}


async def collect(query) -> List[Dict[str, Any]]:
    """Stream every document matching a query into a list of dicts."""
    return [snapshot_to_dict(snapshot) async for snapshot in query.stream()]


@contextmanager
def firestore_errors(action: str) -> Iterator[None]:
    """
    Translate Google API failures raised inside the block into DatabaseError.

    Application exceptions raised inside the block pass through untouched.
    """
    try:
        yield
    except (google_exceptions.GoogleAPICallError, google_exceptions.RetryError) as e:
        logger.error("Firestore error while %s: %s", action, str(e), exc_info=True)
        raise DatabaseError(context={"action": action, "error_type": type(e).__name__}) from e


async def fetch_document(db, collection: str, doc_id: str, not_found: str) -> Dict[str, Any]:
    """Read one document as a dict, raising NotFoundError(not_found) if absent."""
    with firestore_errors(f"reading {collection}"):
        snapshot = await db.collection(collection).document(doc_id).get()
    if not snapshot.exists:
        raise NotFoundError(not_found, resource=collection, resource_id=doc_id)
    return snapshot_to_dict(snapshot)


async def update_document(db, collection: str, doc_id: str, data: Dict[str, Any], not_found: str) -> None:
    """Partial update of an existing document; NotFoundError if it is gone."""
    with firestore_errors(f"updating {collection}"):
        try:
            await db.collection(collection).document(doc_id).update(data)
        except google_exceptions.NotFound as e:
            raise NotFoundError(not_found, resource=collection, resource_id=doc_id) from e


async def delete_document(db, collection: str, doc_id: str) -> None:
    """Delete a document. Deleting a missing document is not an error."""
    with firestore_errors(f"deleting from {collection}"):
        await db.collection(collection).document(doc_id).delete()

"""
Database Connection Module
Handles the MongoDB connection using a process-wide pymongo client.
"""

import logging
from functools import lru_cache
from typing import Any, Iterator, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import MongoClient
from pymongo.database import Database
from pymongo.results import DeleteResult, InsertOneResult, UpdateResult

from bistro.core.config import get_settings
from bistro.models import Collection

logger = logging.getLogger(__name__)


@lru_cache()
def get_client() -> MongoClient:
    """
    Create the process-wide MongoDB client on first use.

    MongoClient is thread-safe and owns its own connection pool, so one
    instance serves every request.
    """
    settings = get_settings()
    return MongoClient(
        settings.mongodb_url,
        serverSelectionTimeoutMS=settings.db_timeout_ms,
        tz_aware=True,
    )


def get_database() -> Database:
    """Return the bistro database handle."""
    return get_client()[get_settings().database_name]


def get_db() -> Iterator[Database]:
    """
    Dependency injection for FastAPI routes.
    Yields the database handle the handlers operate on.
    """
    yield get_database()


def init_db() -> None:
    """
    Verify the deployment is reachable.
    Called once at application startup.
    """
    get_client().admin.command("ping")
    logger.info("Pinged your deployment. You successfully connected to MongoDB!")


def close_db() -> None:
    """Close the client and its connection pool."""
    if get_client.cache_info().currsize:
        get_client().close()
        get_client.cache_clear()


# =============================================================================
# DOCUMENT HELPERS
# =============================================================================

def parse_object_id(value: Any) -> Optional[ObjectId]:
    """
    Convert a client-supplied identifier to an ObjectId.

    Returns None when the value is not a valid 24-hex key, so callers can
    turn a bad id into a zero-effect query instead of an error.
    """
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


def id_candidates(values: list[Any]) -> list[Any]:
    """
    Keys a client-supplied id may be stored under.

    Documents inserted through the API use ObjectId keys, while imported
    seed data may use the same 24-hex value as a plain string.
    """
    candidates: list[Any] = []
    for value in values:
        oid = parse_object_id(value)
        if oid is not None:
            candidates.append(oid)
        if not isinstance(value, ObjectId):
            candidates.append(value)
    return candidates


def id_filter(value: Any) -> dict[str, Any]:
    """Filter matching a single document by a client-supplied id."""
    return {"_id": {"$in": id_candidates([value])}}


def serialize(value: Any) -> Any:
    """Recursively convert ObjectIds in a document to hex strings."""
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, dict):
        return {key: serialize(item) for key, item in value.items()}
    if isinstance(value, list):
        return [serialize(item) for item in value]
    return value


def serialize_many(documents) -> list[dict]:
    """Materialize a cursor into JSON-ready documents."""
    return [serialize(doc) for doc in documents]


def get_collection(db: Database, name: Collection):
    """Return a collection handle by its enum name."""
    return db[name.value]


# =============================================================================
# WRITE RESULTS
# =============================================================================
# Handlers return the store's write result as-is, in the driver's JSON shape.

def insert_result(result: InsertOneResult) -> dict[str, Any]:
    return {
        "acknowledged": result.acknowledged,
        "insertedId": str(result.inserted_id),
    }


def delete_result(result: DeleteResult) -> dict[str, Any]:
    return {
        "acknowledged": result.acknowledged,
        "deletedCount": result.deleted_count,
    }


def update_result(result: UpdateResult) -> dict[str, Any]:
    return {
        "acknowledged": result.acknowledged,
        "matchedCount": result.matched_count,
        "modifiedCount": result.modified_count,
    }
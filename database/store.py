"""
Record store client - a thin async adapter over the Motor database.

Collections are addressed by name, filters are Mongo filter dicts with
equality on plain fields. Records go out with ``id`` (hex string) instead
of ``_id``; an ``id`` key in a filter is translated back to an ObjectId.
Driver failures surface as StoreError / DuplicateRecordError.
"""
import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple

from bson import ObjectId
from fastapi import Request
from pymongo import ASCENDING, DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError, OperationFailure, PyMongoError

from core.errors import DuplicateRecordError, StoreError
from database.mongo import (
    RECIPE_COMMENTS,
    RECIPE_INGREDIENTS,
    RECIPE_INSTRUCTIONS,
    RECIPE_LIKES,
    RECIPE_RATINGS,
    RECIPES,
    USER_PROFILES,
)

logger = logging.getLogger(__name__)

Sort = Sequence[Tuple[str, int]]

# Filter value that can never match a stored _id
_NO_MATCH = object()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


async def gather_all(*calls) -> List[Any]:
    """
    Run store calls concurrently. Every call is awaited to completion before the
    first failure (in argument order) is raised.
    """
    results = await asyncio.gather(*calls, return_exceptions=True)
    for result in results:
        if isinstance(result, BaseException):
            raise result
    return list(results)


def to_object_id(value: Any):
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return _NO_MATCH


def serialize(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Mongo document -> plain record with a string ``id``."""
    if doc is None:
        return None
    out = {"id": str(doc["_id"])} if "_id" in doc else {}
    for key, value in doc.items():
        if key == "_id":
            continue
        out[key] = str(value) if isinstance(value, ObjectId) else value
    return out


def _translate(filters: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Record filter -> Mongo filter. None means the filter cannot match anything."""
    if not filters:
        return {}
    query = dict(filters)
    if "id" in query:
        oid = to_object_id(query.pop("id"))
        if oid is _NO_MATCH:
            return None
        query["_id"] = oid
    return query


@asynccontextmanager
async def _driver_errors(operation: str, collection: str):
    try:
        yield
    except DuplicateKeyError as e:
        raise DuplicateRecordError(
            f"Duplicate record in {collection}", code=str(e.code), details=e.details
        ) from e
    except OperationFailure as e:
        logger.error(f"Store {operation} on {collection} failed: {e}")
        raise StoreError(str(e), code=str(e.code), details=e.details) from e
    except PyMongoError as e:
        logger.error(f"Store {operation} on {collection} failed: {e}")
        raise StoreError(str(e)) from e


class MongoStore:
    """Per-collection find / insert / delete / upsert / count."""

    def __init__(self, db):
        self.db = db

    async def find_one(self, collection: str, filters: Dict[str, Any],
                       projection: Optional[Dict[str, int]] = None) -> Optional[Dict[str, Any]]:
        query = _translate(filters)
        if query is None:
            return None
        async with _driver_errors("find_one", collection):
            doc = await self.db[collection].find_one(query, projection)
        return serialize(doc)

    async def find(self, collection: str, filters: Optional[Dict[str, Any]] = None,
                   sort: Optional[Sort] = None, projection: Optional[Dict[str, int]] = None,
                   limit: int = 0) -> List[Dict[str, Any]]:
        query = _translate(filters)
        if query is None:
            return []
        async with _driver_errors("find", collection):
            cursor = self.db[collection].find(query, projection)
            if sort:
                cursor = cursor.sort(list(sort))
            if limit > 0:
                cursor = cursor.limit(limit)
            docs = await cursor.to_list(length=None)
        return [serialize(d) for d in docs]

    async def insert(self, collection: str, record: Dict[str, Any]) -> Dict[str, Any]:
        doc = dict(record)
        async with _driver_errors("insert", collection):
            result = await self.db[collection].insert_one(doc)
        doc["_id"] = result.inserted_id
        return serialize(doc)

    async def insert_many(self, collection: str, records: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        if not records:
            return []
        docs = [dict(r) for r in records]
        async with _driver_errors("insert_many", collection):
            result = await self.db[collection].insert_many(docs)
        for doc, inserted_id in zip(docs, result.inserted_ids):
            doc["_id"] = inserted_id
        return [serialize(d) for d in docs]

    async def delete(self, collection: str, filters: Dict[str, Any]) -> int:
        query = _translate(filters)
        if query is None:
            return 0
        async with _driver_errors("delete", collection):
            result = await self.db[collection].delete_many(query)
        return result.deleted_count

    async def upsert(self, collection: str, keys: Dict[str, Any], values: Dict[str, Any],
                     on_insert: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Atomic insert-or-update keyed on ``keys``; returns the stored record.
        """
        query = _translate(keys)
        if query is None:
            raise StoreError(f"Invalid id in upsert keys for {collection}")
        update: Dict[str, Any] = {"$set": values}
        if on_insert:
            update["$setOnInsert"] = on_insert
        async with _driver_errors("upsert", collection):
            doc = await self.db[collection].find_one_and_update(
                query,
                update,
                upsert=True,
                return_document=ReturnDocument.AFTER,
            )
        return serialize(doc)

    async def count(self, collection: str, filters: Optional[Dict[str, Any]] = None) -> int:
        query = _translate(filters)
        if query is None:
            return 0
        async with _driver_errors("count", collection):
            return await self.db[collection].count_documents(query)

    async def ping(self) -> bool:
        async with _driver_errors("ping", "admin"):
            await self.db.command("ping")
        return True

    async def ensure_indexes(self):
        """
        Unique (recipe_id, user_id) on likes and ratings backs the toggle and the upsert.
        """
        async with _driver_errors("create_index", RECIPE_LIKES):
            await self.db[RECIPE_LIKES].create_index(
                [("recipe_id", ASCENDING), ("user_id", ASCENDING)], unique=True
            )
        async with _driver_errors("create_index", RECIPE_RATINGS):
            await self.db[RECIPE_RATINGS].create_index(
                [("recipe_id", ASCENDING), ("user_id", ASCENDING)], unique=True
            )
        async with _driver_errors("create_index", RECIPE_COMMENTS):
            await self.db[RECIPE_COMMENTS].create_index([("recipe_id", ASCENDING), ("created_at", ASCENDING)])
        async with _driver_errors("create_index", RECIPES):
            await self.db[RECIPES].create_index([("user_id", ASCENDING), ("created_at", DESCENDING)])
            await self.db[RECIPES].create_index([("created_at", DESCENDING)])
        async with _driver_errors("create_index", RECIPE_INGREDIENTS):
            await self.db[RECIPE_INGREDIENTS].create_index("recipe_id")
        async with _driver_errors("create_index", RECIPE_INSTRUCTIONS):
            await self.db[RECIPE_INSTRUCTIONS].create_index([("recipe_id", ASCENDING), ("step_number", ASCENDING)])
        async with _driver_errors("create_index", USER_PROFILES):
            await self.db[USER_PROFILES].create_index("user_id", unique=True)
        logger.info("✅ Store indexes ensured")


def get_store(request: Request) -> MongoStore:
    """FastAPI dependency: the store created at startup."""
    return request.app.state.store

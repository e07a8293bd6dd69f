import asyncio
import copy
import re
from datetime import datetime, timedelta, timezone

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from core.errors import DuplicateRecordError, StoreError
from database.mongo import RECIPE_LIKES, RECIPE_RATINGS, RECIPES, USER_PROFILES
from database.store import get_store
from main_async import app
from tests.helpers import fake_verify_id_token
from utils.image_storage import ImageStorage, get_image_storage

UNIQUE_KEYS = {
    RECIPE_LIKES: ("recipe_id", "user_id"),
    RECIPE_RATINGS: ("recipe_id", "user_id"),
    USER_PROFILES: ("user_id",),
}


def _matches(record, filters):
    for key, expected in (filters or {}).items():
        if key == "$or":
            if not any(_matches(record, sub) for sub in expected):
                return False
        elif isinstance(expected, dict) and "$regex" in expected:
            flags = re.I if "i" in expected.get("$options", "") else 0
            if not re.search(expected["$regex"], str(record.get(key) or ""), flags):
                return False
        elif record.get(key) != expected:
            return False
    return True


class FakeStore:
    """In-memory stand-in for MongoStore with the same async surface.

    Every operation yields to the event loop once, so concurrent calls interleave.
    ``fail`` maps (operation, collection) to an exception to raise, optionally
    only when a predicate on the filters holds.
    """

    def __init__(self):
        self.collections = {}
        self.fail = {}
        self._clock = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def rows(self, collection):
        return self.collections.setdefault(collection, [])

    def seed(self, collection, record):
        row = {"id": str(ObjectId()), **record}
        self.rows(collection).append(row)
        return row

    def next_time(self):
        self._clock += timedelta(seconds=1)
        return self._clock

    async def _enter(self, operation, collection, filters=None):
        await asyncio.sleep(0)
        rule = self.fail.get((operation, collection))
        if rule is None:
            return
        error, predicate = rule if isinstance(rule, tuple) else (rule, None)
        if predicate is None or predicate(filters or {}):
            raise error

    async def find_one(self, collection, filters, projection=None):
        await self._enter("find_one", collection, filters)
        for row in self.rows(collection):
            if _matches(row, filters):
                return copy.deepcopy(row)
        return None

    async def find(self, collection, filters=None, sort=None, projection=None, limit=0):
        await self._enter("find", collection, filters)
        found = [copy.deepcopy(r) for r in self.rows(collection) if _matches(r, filters)]
        for field, direction in reversed(list(sort or [])):
            found.sort(key=lambda r: r.get(field), reverse=direction < 0)
        return found[:limit] if limit > 0 else found

    async def insert(self, collection, record):
        await self._enter("insert", collection, record)
        keys = UNIQUE_KEYS.get(collection)
        if keys and any(all(r.get(k) == record.get(k) for k in keys) for r in self.rows(collection)):
            raise DuplicateRecordError(f"Duplicate record in {collection}", code="11000")
        row = {"id": str(ObjectId()), **record}
        self.rows(collection).append(row)
        return copy.deepcopy(row)

    async def insert_many(self, collection, records):
        return [await self.insert(collection, r) for r in records]

    async def delete(self, collection, filters):
        await self._enter("delete", collection, filters)
        before = len(self.rows(collection))
        self.collections[collection] = [r for r in self.rows(collection) if not _matches(r, filters)]
        return before - len(self.collections[collection])

    async def upsert(self, collection, keys, values, on_insert=None):
        await self._enter("upsert", collection, keys)
        for row in self.rows(collection):
            if _matches(row, keys):
                row.update(values)
                return copy.deepcopy(row)
        row = {"id": str(ObjectId()), **keys, **(on_insert or {}), **values}
        self.rows(collection).append(row)
        return copy.deepcopy(row)

    async def count(self, collection, filters=None):
        await self._enter("count", collection, filters)
        return sum(1 for r in self.rows(collection) if _matches(r, filters))

    async def ping(self):
        await self._enter("ping", "admin")
        return True


class CloudinaryStub:
    def __init__(self):
        self.uploads = []
        self.destroyed = []
        self.upload_error = None

    def upload(self, source, public_id=None, folder=None, **kwargs):
        if self.upload_error:
            raise self.upload_error
        self.uploads.append({"source": source, "public_id": public_id, "folder": folder})
        full_id = f"{folder}/{public_id}"
        return {"public_id": full_id, "secure_url": f"https://res.cloudinary.com/demo/image/upload/{full_id}.jpg"}

    def destroy(self, public_id, **kwargs):
        self.destroyed.append(public_id)
        return {"result": "ok"}


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def cloudinary_stub(monkeypatch):
    stub = CloudinaryStub()
    monkeypatch.setattr("cloudinary.uploader.upload", stub.upload)
    monkeypatch.setattr("cloudinary.uploader.destroy", stub.destroy)
    return stub


@pytest.fixture
def images(cloudinary_stub):
    return ImageStorage(enabled=True, folder="recipes")


@pytest.fixture
def client(store, images, monkeypatch):
    monkeypatch.setattr("core.auth.dependencies.fb_auth.verify_id_token", fake_verify_id_token)
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_image_storage] = lambda: images
    # No lifespan: Firebase and Mongo are never contacted
    test_client = TestClient(app)
    yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def recipe(store):
    return store.seed(RECIPES, {
        "user_id": "alice",
        "title": "Street Tacos",
        "description": "Corn tortillas, grilled pork",
        "created_at": store.next_time(),
    })


@pytest.fixture
def failing_store_error():
    return StoreError("connection reset", code="6", details="network")

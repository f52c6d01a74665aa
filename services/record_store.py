"""Record store — document persistence for exams, questions and evaluations.

Provides an abstract interface with an in-memory implementation (tests,
single-process deployments) and a MongoDB implementation.

Documents are plain dicts.  The store owns the identifier: it is exposed
to callers as the string ``id`` key and is never part of inserted data.
Filters are dicts of field equality or ``{"$in": [...]}`` conditions; the
``id`` key addresses the identifier.
"""

from __future__ import annotations

import copy
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from bson import ObjectId
from bson.errors import InvalidId

from errors import PersistenceError

logger = logging.getLogger(__name__)

EXAMS = "exams"
QUESTIONS = "questions"
EVALUATIONS = "evaluations"


@dataclass(frozen=True)
class UpdateResult:
    """Outcome of :meth:`RecordStore.update_one`."""

    matched_count: int
    modified_count: int

    @property
    def matched(self) -> bool:
        return self.matched_count > 0


# ── Abstract Interface ───────────────────────────────────────


class RecordStore(ABC):
    """Abstract document store — implement for different backends."""

    @abstractmethod
    async def insert_one(self, collection: str, document: dict[str, Any]) -> str:
        """Insert one document.  Returns its new id."""
        ...

    @abstractmethod
    async def insert_many(
        self, collection: str, documents: list[dict[str, Any]]
    ) -> list[str]:
        """Insert documents in order.  Returns their new ids in the same order."""
        ...

    @abstractmethod
    async def find(
        self, collection: str, filter: dict[str, Any] | None = None
    ) -> list[dict[str, Any]]:
        """Return all documents matching *filter* (all documents if None)."""
        ...

    @abstractmethod
    async def find_one(
        self, collection: str, filter: dict[str, Any]
    ) -> dict[str, Any] | None:
        """Return the first matching document, or None."""
        ...

    @abstractmethod
    async def update_one(
        self, collection: str, filter: dict[str, Any], fields: dict[str, Any]
    ) -> UpdateResult:
        """Set *fields* (dotted paths allowed) on the first matching document."""
        ...

    async def ping(self) -> bool:
        """Check store connectivity."""
        return True

    async def close(self) -> None:
        """Release backend resources."""


# ── In-Memory Implementation ────────────────────────────────


def _matches(document: dict[str, Any], filter: dict[str, Any]) -> bool:
    for key, condition in filter.items():
        value = document.get(key)
        if isinstance(condition, dict) and "$in" in condition:
            if value not in condition["$in"]:
                return False
        elif value != condition:
            return False
    return True


def _set_path(document: dict[str, Any], path: str, value: Any) -> bool:
    """Set a dotted *path* on *document*.  Returns True if the value changed."""
    *parents, leaf = path.split(".")
    node = document
    for part in parents:
        child = node.get(part)
        if not isinstance(child, dict):
            child = {}
            node[part] = child
        node = child
    changed = leaf not in node or node[leaf] != value
    node[leaf] = value
    return changed


class InMemoryRecordStore(RecordStore):
    """Dict-backed store.  Per-document writes are atomic within one event loop."""

    def __init__(self) -> None:
        self._collections: dict[str, list[dict[str, Any]]] = {}

    def _docs(self, collection: str) -> list[dict[str, Any]]:
        return self._collections.setdefault(collection, [])

    async def insert_one(self, collection: str, document: dict[str, Any]) -> str:
        doc = copy.deepcopy(document)
        doc.pop("id", None)
        doc["id"] = str(ObjectId())
        self._docs(collection).append(doc)
        return doc["id"]

    async def insert_many(
        self, collection: str, documents: list[dict[str, Any]]
    ) -> list[str]:
        return [await self.insert_one(collection, d) for d in documents]

    async def find(
        self, collection: str, filter: dict[str, Any] | None = None
    ) -> list[dict[str, Any]]:
        return [
            copy.deepcopy(d)
            for d in self._docs(collection)
            if _matches(d, filter or {})
        ]

    async def find_one(
        self, collection: str, filter: dict[str, Any]
    ) -> dict[str, Any] | None:
        for d in self._docs(collection):
            if _matches(d, filter):
                return copy.deepcopy(d)
        return None

    async def update_one(
        self, collection: str, filter: dict[str, Any], fields: dict[str, Any]
    ) -> UpdateResult:
        for d in self._docs(collection):
            if _matches(d, filter):
                changed = False
                for path, value in fields.items():
                    changed = _set_path(d, path, copy.deepcopy(value)) or changed
                return UpdateResult(matched_count=1, modified_count=int(changed))
        return UpdateResult(matched_count=0, modified_count=0)

    def count(self, collection: str) -> int:
        """Number of documents in *collection*."""
        return len(self._docs(collection))


# ── MongoDB Implementation ──────────────────────────────────


class _NoMatch(Exception):
    """Filter can never match (e.g. malformed ObjectId)."""


def _to_object_id(value: Any) -> ObjectId:
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(value)
    except (InvalidId, TypeError) as exc:
        raise _NoMatch from exc


def _to_mongo_filter(filter: dict[str, Any] | None) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for key, condition in (filter or {}).items():
        if key != "id":
            result[key] = condition
            continue
        if isinstance(condition, dict) and "$in" in condition:
            ids = []
            for v in condition["$in"]:
                try:
                    ids.append(_to_object_id(v))
                except _NoMatch:
                    continue
            result["_id"] = {"$in": ids}
        else:
            result["_id"] = _to_object_id(condition)
    return result


def _from_mongo(document: dict[str, Any]) -> dict[str, Any]:
    doc = dict(document)
    doc["id"] = str(doc.pop("_id"))
    return doc


class MongoRecordStore(RecordStore):
    """MongoDB-backed store using the pymongo async client.

    Supports multi-worker deployments.  Driver errors are re-raised as
    :class:`PersistenceError`.
    """

    def __init__(self, uri: str, db_name: str = "examDB", timeout_ms: int = 10000):
        from pymongo import AsyncMongoClient

        self._client = AsyncMongoClient(
            uri,
            serverSelectionTimeoutMS=timeout_ms,
            tz_aware=True,
        )
        self._db = self._client[db_name]
        self._db_name = db_name

    async def insert_one(self, collection: str, document: dict[str, Any]) -> str:
        from pymongo.errors import PyMongoError

        doc = {k: v for k, v in document.items() if k != "id"}
        try:
            result = await self._db[collection].insert_one(doc)
        except PyMongoError as exc:
            raise PersistenceError("insert_one", str(exc)) from exc
        return str(result.inserted_id)

    async def insert_many(
        self, collection: str, documents: list[dict[str, Any]]
    ) -> list[str]:
        from pymongo.errors import PyMongoError

        if not documents:
            return []
        docs = [{k: v for k, v in d.items() if k != "id"} for d in documents]
        try:
            result = await self._db[collection].insert_many(docs, ordered=True)
        except PyMongoError as exc:
            raise PersistenceError("insert_many", str(exc)) from exc
        return [str(i) for i in result.inserted_ids]

    async def find(
        self, collection: str, filter: dict[str, Any] | None = None
    ) -> list[dict[str, Any]]:
        from pymongo.errors import PyMongoError

        try:
            query = _to_mongo_filter(filter)
        except _NoMatch:
            return []
        try:
            cursor = self._db[collection].find(query)
            return [_from_mongo(d) async for d in cursor]
        except PyMongoError as exc:
            raise PersistenceError("find", str(exc)) from exc

    async def find_one(
        self, collection: str, filter: dict[str, Any]
    ) -> dict[str, Any] | None:
        from pymongo.errors import PyMongoError

        try:
            query = _to_mongo_filter(filter)
        except _NoMatch:
            return None
        try:
            doc = await self._db[collection].find_one(query)
        except PyMongoError as exc:
            raise PersistenceError("find_one", str(exc)) from exc
        return _from_mongo(doc) if doc is not None else None

    async def update_one(
        self, collection: str, filter: dict[str, Any], fields: dict[str, Any]
    ) -> UpdateResult:
        from pymongo.errors import PyMongoError

        try:
            query = _to_mongo_filter(filter)
        except _NoMatch:
            return UpdateResult(matched_count=0, modified_count=0)
        try:
            result = await self._db[collection].update_one(query, {"$set": fields})
        except PyMongoError as exc:
            raise PersistenceError("update_one", str(exc)) from exc
        return UpdateResult(
            matched_count=result.matched_count,
            modified_count=result.modified_count,
        )

    async def ping(self) -> bool:
        try:
            await self._client.admin.command("ping")
            return True
        except Exception:
            logger.warning("MongoDB ping failed", exc_info=True)
            return False

    async def close(self) -> None:
        """Close the MongoDB connection pool."""
        await self._client.close()


def create_record_store(settings) -> RecordStore:
    """Build the store selected by ``settings.record_store_type``."""
    if settings.record_store_type == "mongo":
        logger.info("Initialized MongoRecordStore (db=%s)", settings.mongo_db_name)
        return MongoRecordStore(
            uri=settings.mongo_uri,
            db_name=settings.mongo_db_name,
            timeout_ms=settings.mongo_timeout_ms,
        )
    logger.info("Initialized InMemoryRecordStore")
    return InMemoryRecordStore()

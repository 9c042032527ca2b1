"""
MongoDB-backed store: one document per cache entry.

Document layout::

    {"_id": "<physical key>", "item": <value>, "is_dirty": <bool>}

The dirty flag lives on the entry's own document and is updated with a
single ``$set``, so dirty tracking needs no shared sentinel and has no
read-modify-write race. Marking a key that has no document is a no-op.

Round trips:
    - get_many: one ``$in`` query regardless of key count
    - remove_matching: one ``$regex`` delete, no key scan

Values are stored as BSON unless a serializer is given, in which case the
encoded bytes are stored as binary.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

from bson.errors import InvalidDocument
from pymongo import MongoClient
from pymongo import errors as mongo_errors
from pymongo.collection import Collection

from cachespine.errors import SerializationError
from cachespine.serializers import Serializer
from cachespine.stores.base import backend_errors

DEFAULT_DATABASE = "cache"
DEFAULT_COLLECTION = "cache"

_UNAVAILABLE = (mongo_errors.ConnectionFailure,)
_FAILURE = (mongo_errors.PyMongoError,)


class MongoStore:
    """MongoDB key store.

    Args:
        collection: Existing collection. Built from *url*/*database*/
            *collection_name* if omitted.
        url: MongoDB connection string.
        database: Database name.
        collection_name: Collection name.
        serializer: Optional value serializer for non-BSON values.
    """

    backend_name = "mongo"

    def __init__(
        self,
        collection: Collection | None = None,
        *,
        url: str = "mongodb://localhost:27017",
        database: str = DEFAULT_DATABASE,
        collection_name: str = DEFAULT_COLLECTION,
        serializer: Serializer | None = None,
    ):
        if collection is None:
            collection = MongoClient(url)[database][collection_name]
        self._collection = collection
        self._serializer = serializer

    def _errors(self, operation: str, key: str | None = None):
        return backend_errors(
            self.backend_name, operation, unavailable=_UNAVAILABLE, failure=_FAILURE, key=key
        )

    def _encode(self, value: Any) -> Any:
        return value if self._serializer is None else self._serializer.dumps(value)

    def _decode(self, item: Any) -> Any:
        if item is None or self._serializer is None:
            return item
        return self._serializer.loads(bytes(item))

    @staticmethod
    def _upsert(key: str, item: Any) -> tuple[dict[str, Any], dict[str, Any]]:
        return {"_id": key}, {"$set": {"item": item}, "$setOnInsert": {"is_dirty": False}}

    # ── KeyStore ─────────────────────────────────────────────────

    def get(self, key: str) -> Any | None:
        with self._errors("get", key):
            doc = self._collection.find_one({"_id": key}, {"item": 1})
        return None if doc is None else self._decode(doc.get("item"))

    def put(self, key: str, value: Any) -> None:
        query, update = self._upsert(key, self._encode(value))
        with self._errors("put", key):
            try:
                self._collection.update_one(query, update, upsert=True)
            except InvalidDocument as exc:
                raise SerializationError(
                    f"Value of type {type(value).__name__} cannot be stored as BSON",
                    cause=exc,
                ).with_context(operation="put", backend=self.backend_name, key=key) from exc

    def remove(self, key: str) -> None:
        with self._errors("remove", key):
            self._collection.delete_one({"_id": key})

    # ── Capabilities ─────────────────────────────────────────────

    def list_keys(self) -> list[str]:
        with self._errors("list_keys"):
            return [doc["_id"] for doc in self._collection.find({}, {"_id": 1})]

    def contains(self, key: str) -> bool:
        with self._errors("contains", key):
            return self._collection.count_documents({"_id": key}, limit=1) > 0

    def get_many(self, keys: Sequence[str]) -> dict[str, Any]:
        keys = list(keys)
        if not keys:
            return {}
        with self._errors("get_many"):
            docs = list(self._collection.find({"_id": {"$in": keys}}, {"item": 1}))
        return {
            doc["_id"]: self._decode(doc["item"])
            for doc in docs
            if doc.get("item") is not None
        }

    def remove_many(self, keys: Iterable[str]) -> None:
        keys = list(keys)
        if not keys:
            return
        with self._errors("remove_many"):
            self._collection.delete_many({"_id": {"$in": keys}})

    def remove_matching(self, pattern: str) -> int:
        with self._errors("remove_matching"):
            return self._collection.delete_many({"_id": {"$regex": pattern}}).deleted_count

    def set_dirty_flag(self, key: str, dirty: bool) -> None:
        with self._errors("set_dirty_flag", key):
            self._collection.update_one({"_id": key}, {"$set": {"is_dirty": dirty}})

    def get_dirty_flag(self, key: str) -> bool:
        with self._errors("get_dirty_flag", key):
            doc = self._collection.find_one({"_id": key}, {"is_dirty": 1})
        return bool(doc and doc.get("is_dirty"))


__all__ = ["MongoStore", "DEFAULT_DATABASE", "DEFAULT_COLLECTION"]

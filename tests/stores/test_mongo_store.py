"""Tests for ``cachespine.stores.mongo.MongoStore`` — document-per-entry store.

Uses mongomock; skipped if not installed.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

mongomock = pytest.importorskip("mongomock")

from pymongo import errors as mongo_errors

from cachespine.cache import Cache
from cachespine.dirty import DIRTY_LIST_KEY
from cachespine.errors import BackendError, BackendUnavailableError
from cachespine.serializers import PickleSerializer
from cachespine.stores.mongo import MongoStore


@pytest.fixture
def collection():
    return mongomock.MongoClient().db.cache


@pytest.fixture
def store(collection):
    return MongoStore(collection)


class TestMongoStoreOperations:
    def test_put_creates_document(self, store, collection):
        store.put("k", {"v": 1})
        assert collection.find_one({"_id": "k"}) == {"_id": "k", "item": {"v": 1}, "is_dirty": False}

    def test_get(self, store):
        store.put("k", [1, 2])
        assert store.get("k") == [1, 2]
        assert store.get("missing") is None

    def test_put_replaces_item_keeps_flag(self, store, collection):
        store.put("k", 1)
        store.set_dirty_flag("k", True)
        store.put("k", 2)
        doc = collection.find_one({"_id": "k"})
        assert doc["item"] == 2
        assert doc["is_dirty"] is True

    def test_remove(self, store, collection):
        store.put("k", 1)
        store.remove("k")
        store.remove("k")
        assert collection.count_documents({}) == 0

    def test_list_keys_and_contains(self, store):
        store.put("a", 1)
        store.put("b", 2)
        assert sorted(store.list_keys()) == ["a", "b"]
        assert store.contains("a") is True
        assert store.contains("z") is False

    def test_get_many(self, store):
        store.put("a", 1)
        store.put("b", 2)
        assert store.get_many(["a", "b", "c"]) == {"a": 1, "b": 2}
        assert store.get_many([]) == {}

    def test_remove_many(self, store):
        for key in ("a", "b", "c"):
            store.put(key, 1)
        store.remove_many(["a", "b", "missing"])
        assert store.list_keys() == ["c"]

    def test_remove_matching(self, store):
        for key in ("user:1", "user:2", "order:1"):
            store.put(key, 1)
        assert store.remove_matching("^user:") == 2
        assert store.list_keys() == ["order:1"]

    def test_serializer_stores_binary(self, collection):
        store = MongoStore(collection, serializer=PickleSerializer())
        store.put("k", {1, 2})
        assert store.get("k") == {1, 2}
        assert store.get_many(["k"]) == {"k": {1, 2}}


class TestMongoDirtyFlags:
    def test_flag_round_trip(self, store):
        store.put("k", 1)
        assert store.get_dirty_flag("k") is False
        store.set_dirty_flag("k", True)
        assert store.get_dirty_flag("k") is True
        store.set_dirty_flag("k", False)
        assert store.get_dirty_flag("k") is False

    def test_flag_on_missing_document_is_noop(self, store, collection):
        store.set_dirty_flag("missing", True)
        assert store.get_dirty_flag("missing") is False
        assert collection.count_documents({}) == 0


class TestMongoCacheContract:
    def test_set_get_dirty(self, store, collection):
        cache = Cache(store, key_prefix="t:")
        cache.set("k", {"v": 1})
        assert cache.get("k") == {"v": 1}
        assert cache.is_dirty("k") is False
        cache.set_dirty("k")
        assert cache.is_dirty("k") is True
        assert collection.find_one({"_id": "t:k"})["is_dirty"] is True
        assert collection.find_one({"_id": "t:" + DIRTY_LIST_KEY}) is None

    def test_set_clears_dirty(self, store):
        cache = Cache(store)
        cache.set("k", 1)
        cache.set_dirty("k")
        cache.set("k", 2)
        assert cache.is_dirty("k") is False

    def test_multi_get(self, store):
        cache = Cache(store, key_prefix="t:")
        cache.add_many({"a": 1, "b": 2})
        assert cache.multi_get(["a", "a", "b", "c"]) == {"a": 1, "b": 2}

    def test_regex_clear_is_namespaced(self, store):
        tenant = Cache(store, key_prefix="t1:")
        other = Cache(store, key_prefix="t2:")
        tenant.add_many({"user:1": 1, "user:2": 2, "order:1": 3})
        other.add("user:1", 4)

        assert tenant.regex_clear("^user:") == 2

        assert tenant.keys() == ["order:1"]
        assert other.get("user:1") == 4

    def test_regex_clear_alternation_stays_in_namespace(self, store, collection):
        mine = Cache(store, key_prefix="a:")
        other = Cache(store, key_prefix="b:")
        mine.add("x", 1)
        other.add("y", 2)

        assert mine.regex_clear("^x|^b") == 1

        assert other.exists("y") is True
        assert [doc["_id"] for doc in collection.find()] == ["b:y"]

    def test_regex_clear_unanchored_matches_like_memory(self, store, memory_store):
        data = {"user:1": 1, "order:1": 2, "user:2": 3}
        in_memory = Cache(memory_store, key_prefix="a:")
        in_mongo = Cache(store, key_prefix="a:")
        in_memory.add_many(data)
        in_mongo.add_many(data)

        assert in_mongo.regex_clear("1") == in_memory.regex_clear("1") == 2
        assert in_mongo.keys() == in_memory.keys() == ["user:2"]

    def test_unprefixed_regex_clear_uses_native_delete(self, store, collection):
        cache = Cache(store)
        cache.add_many({"user:1": 1, "order:1": 2})
        assert cache.regex_clear("1") == 2
        assert collection.count_documents({}) == 0

    def test_probe_and_instance_sentinel(self, store):
        cache = Cache(store)
        assert cache.test() is True
        assert cache.is_instance_set() is False
        cache.mark_instance_set()
        assert cache.is_instance_set() is True


class TestMongoErrors:
    def test_connection_failure_is_unavailable(self):
        collection = MagicMock()
        collection.find_one.side_effect = mongo_errors.ServerSelectionTimeoutError("no servers")
        with pytest.raises(BackendUnavailableError) as exc_info:
            MongoStore(collection).get("k")
        assert exc_info.value.context.backend == "mongo"

    def test_operation_failure_is_backend_error(self):
        collection = MagicMock()
        collection.delete_many.side_effect = mongo_errors.OperationFailure("bad regex")
        with pytest.raises(BackendError):
            MongoStore(collection).remove_matching("(")

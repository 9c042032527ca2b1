"""Tests for ``cachespine.stores.memory`` — MemoryStore and EvictingMemoryStore."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from cachespine.cache import Cache
from cachespine.errors import NotSupportedError
from cachespine.protocols import BatchRemover, KeyLister, KeyStore
from cachespine.stores.memory import EvictingMemoryStore, MemoryStore


class TestMemoryStore:
    def test_get_put(self):
        s = MemoryStore()
        s.put("k1", {"val": 42})
        assert s.get("k1") == {"val": 42}

    def test_get_missing(self):
        assert MemoryStore().get("nope") is None

    def test_remove(self):
        s = MemoryStore()
        s.put("k1", 1)
        s.remove("k1")
        assert s.get("k1") is None
        s.remove("nonexistent")  # no error

    def test_remove_many(self):
        s = MemoryStore()
        for key in ("a", "b", "c"):
            s.put(key, 1)
        s.remove_many(["a", "b", "zzz"])
        assert s.list_keys() == ["c"]

    def test_capabilities(self):
        s = MemoryStore()
        assert isinstance(s, KeyStore)
        assert isinstance(s, KeyLister)
        assert isinstance(s, BatchRemover)

    def test_len(self):
        s = MemoryStore()
        s.put("a", 1)
        assert len(s) == 1


class TestEvictingMemoryStore:
    def test_get_put(self):
        s = EvictingMemoryStore(default_ttl_seconds=None)
        s.put("k", "v")
        assert s.get("k") == "v"

    def test_lru_eviction(self):
        s = EvictingMemoryStore(max_size=2, default_ttl_seconds=None)
        s.put("a", 1)
        s.put("b", 2)
        s.get("a")  # a is now most recently used
        s.put("c", 3)
        assert s.get("a") == 1
        assert s.get("b") is None
        assert s.get("c") == 3

    def test_overwrite_does_not_evict(self):
        s = EvictingMemoryStore(max_size=2, default_ttl_seconds=None)
        s.put("a", 1)
        s.put("b", 2)
        s.put("a", 10)
        assert s.size() == 2
        assert s.get("b") == 2

    def test_ttl_expiry(self):
        s = EvictingMemoryStore(default_ttl_seconds=10)
        with patch("cachespine.stores.memory.time.time", return_value=1000.0):
            s.put("k", "v")
        with patch("cachespine.stores.memory.time.time", return_value=1005.0):
            assert s.get("k") == "v"
        with patch("cachespine.stores.memory.time.time", return_value=1011.0):
            assert s.get("k") is None
        assert s.size() == 0

    def test_invalid_max_size(self):
        with pytest.raises(ValueError):
            EvictingMemoryStore(max_size=0)

    def test_not_enumerable(self):
        assert not isinstance(EvictingMemoryStore(), KeyLister)

    def test_cache_contract_over_evicting_store(self):
        cache = Cache(EvictingMemoryStore(default_ttl_seconds=None))
        cache.set("k", 1)
        assert cache.get("k") == 1
        assert cache.multi_get(["k", "k", "x"]) == {"k": 1}
        cache.set_dirty("k")
        assert cache.is_dirty("k") is True
        assert cache.test() is True

    def test_regex_clear_not_supported(self):
        cache = Cache(EvictingMemoryStore())
        with pytest.raises(NotSupportedError):
            cache.regex_clear("^user:")

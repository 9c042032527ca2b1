"""
In-process stores.

- :class:`MemoryStore`: a plain dict living as long as the object (or the
  process, when held at module level). Zero dependencies, enumerable.
  Suitable for single-process use; every process has its own copy.
- :class:`EvictingMemoryStore`: bounded LRU with TTL expiry that drops
  entries on its own whenever it sees fit. Its key view is never stable,
  so it does not offer key enumeration and ``regex_clear`` on it raises
  :class:`~cachespine.errors.NotSupportedError`.

Examples:
    >>> store = EvictingMemoryStore(max_size=2, default_ttl_seconds=None)
    >>> store.put("a", 1); store.put("b", 2); store.put("c", 3)
    >>> store.get("a") is None
    True
"""

from __future__ import annotations

import threading
import time
from collections import OrderedDict
from collections.abc import Iterable
from typing import Any


class MemoryStore:
    """Dict-backed store. Thread-safe for single-process use."""

    backend_name = "memory"

    def __init__(self) -> None:
        self._data: dict[str, Any] = {}
        self._lock = threading.RLock()

    def get(self, key: str) -> Any | None:
        return self._data.get(key)

    def put(self, key: str, value: Any) -> None:
        with self._lock:
            self._data[key] = value

    def remove(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def remove_many(self, keys: Iterable[str]) -> None:
        with self._lock:
            for key in keys:
                self._data.pop(key, None)

    def list_keys(self) -> list[str]:
        with self._lock:
            return list(self._data)

    def __len__(self) -> int:
        return len(self._data)


class EvictingMemoryStore:
    """Bounded in-memory store with LRU eviction and TTL expiry.

    Attributes:
        max_size: Maximum number of keys before LRU eviction.
        default_ttl_seconds: TTL applied to every entry (``None`` → no expiry).

    Expiry is lazy: an expired entry is dropped the next time it is read.
    """

    backend_name = "evicting-memory"

    def __init__(
        self,
        *,
        max_size: int = 10_000,
        default_ttl_seconds: int | None = 3600,
    ):
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self._store: OrderedDict[str, tuple[Any, float | None]] = OrderedDict()
        self._max_size = max_size
        self._default_ttl = default_ttl_seconds
        self._lock = threading.RLock()

    def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return None

            value, expires_at = entry
            if expires_at is not None and time.time() > expires_at:
                del self._store[key]
                return None

            self._store.move_to_end(key)
            return value

    def put(self, key: str, value: Any) -> None:
        expires_at = (time.time() + self._default_ttl) if self._default_ttl else None
        with self._lock:
            if key not in self._store and len(self._store) >= self._max_size:
                self._store.popitem(last=False)
            self._store[key] = (value, expires_at)
            self._store.move_to_end(key)

    def remove(self, key: str) -> None:
        with self._lock:
            self._store.pop(key, None)

    def size(self) -> int:
        """Return current number of stored keys, expired ones included."""
        return len(self._store)


__all__ = ["MemoryStore", "EvictingMemoryStore"]

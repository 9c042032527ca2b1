"""
Dirty/clean bookkeeping for cache entries.

"Dirty" is a caller-declared staleness flag, orthogonal to the data itself.
Two strategies exist:

- :class:`SentinelDirtyTracker` keeps a list of dirty logical keys as one
  ordinary entry under the reserved key ``DIRTY_ITEMS``. Works with any
  :class:`~cachespine.protocols.KeyStore`.
- :class:`FlagDirtyTracker` delegates to stores that keep a flag next to
  each entry (:class:`~cachespine.protocols.DirtyFlagStore`), so every
  update is a single atomic backend call.

Concurrency:
    The sentinel list is a read-modify-write. Updates are serialized per
    tracker with a lock, but two processes (or two ``Cache`` objects) that
    share one backend can still interleave and lose an update. Prefer a
    store implementing ``DirtyFlagStore`` when that matters.
"""

from __future__ import annotations

import threading

from cachespine.namespacing import KeyNamespace
from cachespine.protocols import DirtyFlagStore, KeyStore

DIRTY_LIST_KEY = "DIRTY_ITEMS"


class SentinelDirtyTracker:
    """Dirty list stored under a reserved key in the same key space.

    Args:
        store: Backing store.
        namespace: Namespace applied to the reserved key.
        dedupe: When true (default) a key is listed at most once; when
            false every ``mark_dirty`` appends and ``mark_clean`` removes
            only the first occurrence unless ``all_occurrences`` is set.
    """

    def __init__(self, store: KeyStore, namespace: KeyNamespace, *, dedupe: bool = True):
        self._store = store
        self._list_key = namespace.prefix(DIRTY_LIST_KEY)
        self._dedupe = dedupe
        self._lock = threading.Lock()

    def _load(self) -> list[str] | None:
        items = self._store.get(self._list_key)
        if items is None:
            return None
        # A clobbered sentinel reads as an empty list
        return list(items) if isinstance(items, (list, tuple)) else []

    def mark_dirty(self, key: str) -> None:
        with self._lock:
            items = self._load() or []
            if self._dedupe and key in items:
                return
            items.append(key)
            self._store.put(self._list_key, items)

    def mark_clean(self, key: str, *, all_occurrences: bool = False) -> None:
        with self._lock:
            items = self._load()
            if not items or key not in items:
                return
            if all_occurrences:
                items = [item for item in items if item != key]
            else:
                items.remove(key)
            self._store.put(self._list_key, items)

    def is_dirty(self, key: str) -> bool:
        items = self._load()
        return items is not None and key in items


class FlagDirtyTracker:
    """Dirty flags persisted by the store itself, one per entry."""

    def __init__(self, store: DirtyFlagStore, namespace: KeyNamespace):
        self._store = store
        self._namespace = namespace

    def mark_dirty(self, key: str) -> None:
        self._store.set_dirty_flag(self._namespace.prefix(key), True)

    def mark_clean(self, key: str, *, all_occurrences: bool = False) -> None:
        self._store.set_dirty_flag(self._namespace.prefix(key), False)

    def is_dirty(self, key: str) -> bool:
        return self._store.get_dirty_flag(self._namespace.prefix(key))


def create_dirty_tracker(
    store: KeyStore,
    namespace: KeyNamespace,
    *,
    dedupe: bool = True,
) -> SentinelDirtyTracker | FlagDirtyTracker:
    """Pick the flag tracker when the store supports it, else the sentinel list."""
    if isinstance(store, DirtyFlagStore):
        return FlagDirtyTracker(store, namespace)
    return SentinelDirtyTracker(store, namespace, dedupe=dedupe)


__all__ = [
    "DIRTY_LIST_KEY",
    "SentinelDirtyTracker",
    "FlagDirtyTracker",
    "create_dirty_tracker",
]

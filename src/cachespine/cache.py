"""
Uniform cache contract over interchangeable key/value stores.

:class:`Cache` is written once and parameterized over any
:class:`~cachespine.protocols.KeyStore`. It adds the policy the stores do
not have: typed reads, dirty tracking, deduplicated batch reads, pattern
invalidation, key namespacing and an instance-set sentinel.

Manifesto:
    Call sites should not know whether their data lives in a dict, the
    current HTTP session, Redis or Mongo. They should know one contract
    whose only "failure" for a missing item is ``None``.

    - **Protocol-based:** stores implement get/put/remove, nothing more
    - **Capability-aware:** batch, listing and flag capabilities are used
      when a store has them, and their absence is reported, never faked
    - **Namespaced:** one physical store can host many logical caches
    - **Stateless:** every call goes straight through to the store

Architecture:
    ::

        caller
          │
          ▼
        Cache ── KeyNamespace (prefix / unprefix / prefix_pattern)
          │   └─ SentinelDirtyTracker | FlagDirtyTracker
          ▼
        KeyStore (+ KeyLister, BatchReader, PatternRemover, ...)
          │
          ▼
        backend (dict, session, app state, Redis, Mongo)

Examples:
    >>> from cachespine.cache import Cache
    >>> from cachespine.stores.memory import MemoryStore
    >>> cache = Cache(MemoryStore())
    >>> cache.set("user:1", {"name": "Alice"})
    >>> cache.get("user:1")
    {'name': 'Alice'}
    >>> cache.multi_get(["user:1", "user:1", "user:2"])
    {'user:1': {'name': 'Alice'}}
    >>> cache.regex_clear("^user:")
    1

Performance:
    - get/set/add/clear: one store call (set adds dirty bookkeeping)
    - multi_get: one round trip with a ``BatchReader`` store, else one per key
    - regex_clear: full key scan, O(n) in stored keys; unsuitable for
      large backends unless the store removes by pattern natively
      (unprefixed caches only)

Guardrails:
    ❌ DON'T: Store ``None``; it is indistinguishable from absence
    ✅ DO: Store an explicit marker value if "known empty" matters

    ❌ DON'T: Rely on any item surviving; stores may evict at will
    ✅ DO: Treat every read as possibly absent
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from cachespine.dirty import create_dirty_tracker
from cachespine.errors import NotSupportedError
from cachespine.logging import get_logger
from cachespine.namespacing import KeyNamespace
from cachespine.protocols import (
    BatchReader,
    BatchRemover,
    BatchWriter,
    Cacheable,
    ExistenceChecker,
    KeyLister,
    KeyStore,
    PatternRemover,
)

logger = get_logger(__name__)

INSTANCE_SET_KEY = "IS_SET_PLACEHOLDER"
PROBE_KEY = "test"
PROBE_VALUE = "test"


class Cache:
    """The cache contract, bound to one store and one namespace.

    Args:
        store: Backend implementing at least ``get``/``put``/``remove``.
        namespace: Key namespace. Mutually exclusive with *key_prefix*.
        key_prefix: Shorthand for ``KeyNamespace(key_prefix)``.
        dedupe_dirty: Keep each key at most once in the sentinel dirty
            list. Ignored by stores that track dirty flags themselves.
        name: Label used in logs and errors (defaults to the store's
            ``backend_name``).
    """

    def __init__(
        self,
        store: KeyStore,
        *,
        namespace: KeyNamespace | None = None,
        key_prefix: str = "",
        dedupe_dirty: bool = True,
        name: str | None = None,
    ):
        if namespace is not None and key_prefix:
            raise ValueError("Pass either namespace or key_prefix, not both")
        self._store = store
        self._namespace = namespace or KeyNamespace(key_prefix)
        self._dirty = create_dirty_tracker(store, self._namespace, dedupe=dedupe_dirty)
        self.name = name or getattr(store, "backend_name", type(store).__name__)

    @property
    def store(self) -> KeyStore:
        return self._store

    @property
    def namespace(self) -> KeyNamespace:
        return self._namespace

    # ------------------------------------------------------------------ #
    # Single-key operations
    # ------------------------------------------------------------------ #

    def exists(self, key: str) -> bool:
        """Return whether a value is present for *key*."""
        physical = self._namespace.prefix(key)
        if isinstance(self._store, ExistenceChecker):
            return self._store.contains(physical)
        return self._store.get(physical) is not None

    def get(self, key: str, cls: type | tuple[type, ...] | None = None) -> Any | None:
        """Return the value for *key*, or ``None`` when absent.

        With *cls*, a stored value that is not an instance of *cls* is
        reported as absent rather than raised.
        """
        value = self._store.get(self._namespace.prefix(key))
        return self._typed(key, value, cls)

    def set(self, key: str, value: Any) -> None:
        """Store an authoritative value and mark *key* clean."""
        self._store.put(self._namespace.prefix(key), value)
        self._dirty.mark_clean(key, all_occurrences=True)

    def add(self, key: str, value: Any) -> None:
        """Store *value* without touching the dirty flag."""
        self._store.put(self._namespace.prefix(key), value)

    def clear(self, key: str) -> None:
        """Remove *key*. Removing an absent key is a no-op."""
        self._store.remove(self._namespace.prefix(key))

    # ------------------------------------------------------------------ #
    # Batch operations
    # ------------------------------------------------------------------ #

    def add_many(self, items: Mapping[str, Any]) -> None:
        """Store every pair in *items*.

        Best effort per key: a failure part-way leaves earlier pairs stored.
        """
        physical = {self._namespace.prefix(key): value for key, value in items.items()}
        if not physical:
            return
        if isinstance(self._store, BatchWriter):
            self._store.put_many(physical)
            return
        for key, value in physical.items():
            self._store.put(key, value)

    def add_cacheables(self, items: Iterable[Cacheable], prefix: str) -> None:
        """Store each item under ``item.cache_key(prefix)``.

        Two items computing the same key collide silently; the last one wins.
        """
        self.add_many({item.cache_key(prefix): item for item in items})

    def multi_get(
        self,
        keys: Sequence[str],
        cls: type | tuple[type, ...] | None = None,
    ) -> dict[str, Any]:
        """Return a mapping of the present keys among *keys*.

        Repeated keys are fetched once. Absent keys, and with *cls* values of
        the wrong type, are left out: callers must not assume every
        requested key appears in the result.
        """
        unique = list(dict.fromkeys(keys))
        if not unique:
            return {}

        if isinstance(self._store, BatchReader):
            found = self._store.get_many([self._namespace.prefix(key) for key in unique])
            pairs = ((self._namespace.unprefix(physical), value) for physical, value in found.items())
        else:
            pairs = ((key, self._store.get(self._namespace.prefix(key))) for key in unique)

        result = {}
        for key, value in pairs:
            value = self._typed(key, value, cls)
            if value is not None:
                result[key] = value
        return result

    def multi_clear(self, keys: Iterable[str]) -> None:
        """Remove every key in *keys*. Absent keys are ignored."""
        physical = [self._namespace.prefix(key) for key in keys]
        if not physical:
            return
        if isinstance(self._store, BatchRemover):
            self._store.remove_many(physical)
            return
        for key in physical:
            self._store.remove(key)

    def keys(self) -> list[str]:
        """Return every logical key this cache's namespace owns.

        Raises:
            NotSupportedError: If the store cannot enumerate keys.
        """
        if not isinstance(self._store, KeyLister):
            raise NotSupportedError(
                f"Store {self.name!r} cannot enumerate keys"
            ).with_context(operation="keys", backend=self.name)
        return [
            self._namespace.unprefix(physical)
            for physical in self._store.list_keys()
            if self._namespace.owns(physical)
        ]

    def regex_clear(self, pattern: str) -> int:
        """Remove every entry whose logical key matches *pattern*.

        Matching uses :func:`re.search`. Sentinel entries are ordinary keys
        and are removed too if the pattern matches them.

        Native pattern removal is only used without a namespace prefix,
        where physical and logical keys coincide. A prefixed cache always
        scans its own keys.

        Returns:
            Number of entries removed.

        Raises:
            NotSupportedError: If the store can neither remove by pattern
                nor enumerate keys.
            re.error: If *pattern* is not a valid regular expression.
        """
        regex = re.compile(pattern)

        if isinstance(self._store, PatternRemover) and not self._namespace.prefix_value:
            removed = self._store.remove_matching(pattern)
            logger.info("cache_regex_clear", cache=self.name, pattern=pattern, removed=removed, native=True)
            return removed

        if not isinstance(self._store, KeyLister):
            raise NotSupportedError(
                f"Store {self.name!r} cannot enumerate keys; regex_clear is unavailable"
            ).with_context(operation="regex_clear", backend=self.name, pattern=pattern)

        matches = [key for key in self.keys() if regex.search(key)]
        self.multi_clear(matches)
        logger.info("cache_regex_clear", cache=self.name, pattern=pattern, removed=len(matches), native=False)
        return len(matches)

    # ------------------------------------------------------------------ #
    # Dirty tracking
    # ------------------------------------------------------------------ #

    def set_dirty(self, key: str) -> None:
        self._dirty.mark_dirty(key)

    def set_clean(self, key: str) -> None:
        self._dirty.mark_clean(key)

    def is_dirty(self, key: str) -> bool:
        return self._dirty.is_dirty(key)

    # ------------------------------------------------------------------ #
    # Instance sentinel and self-check
    # ------------------------------------------------------------------ #

    def is_instance_set(self) -> bool:
        """Return whether :meth:`mark_instance_set` has been called. Advisory."""
        return self.exists(INSTANCE_SET_KEY)

    def mark_instance_set(self) -> None:
        self.add(INSTANCE_SET_KEY, True)

    def test(self) -> bool:
        """Round-trip a probe value through the store.

        The probe is written only when it is not already there. ``False``
        means the backend is not working, or evicted the probe before the
        re-read; both are meaningful answers.
        """
        if not self.get(PROBE_KEY, str):
            self.add(PROBE_KEY, PROBE_VALUE)
        ok = self.get(PROBE_KEY) == PROBE_VALUE
        if not ok:
            logger.warning("cache_probe_failed", cache=self.name, key=PROBE_KEY)
        return ok

    # ------------------------------------------------------------------ #

    def _typed(self, key: str, value: Any, cls: type | tuple[type, ...] | None) -> Any | None:
        if value is None or cls is None or isinstance(value, cls):
            return value
        logger.debug(
            "cache_type_mismatch",
            cache=self.name,
            key=key,
            expected=getattr(cls, "__name__", repr(cls)),
            actual=type(value).__name__,
        )
        return None

    def __repr__(self) -> str:
        return f"Cache(name={self.name!r}, prefix={self._namespace.prefix_value!r})"


__all__ = [
    "Cache",
    "INSTANCE_SET_KEY",
    "PROBE_KEY",
    "PROBE_VALUE",
]

"""
Canonical protocols for cachespine.

The cache core is written once against :class:`KeyStore`, a three-method
contract every backend can meet. Everything a backend may or may not be
able to do beyond that is a separate, runtime-checkable capability
protocol. :class:`~cachespine.cache.Cache` probes for capabilities with
``isinstance`` and picks the fast path when one is present.

Architecture:
    ::

        KeyStore            get / put / remove            (required)
        KeyLister           list_keys                     regex_clear, keys
        ExistenceChecker    contains                      exists
        BatchReader         get_many                      multi_get
        BatchWriter         put_many                      add_many
        BatchRemover        remove_many                   multi_clear
        PatternRemover      remove_matching               regex_clear
        DirtyFlagStore      set_dirty_flag / get_dirty_flag   dirty tracking

        Cacheable           cache_key(prefix)             add_cacheables

Guardrails:
    ❌ DON'T: Add implementation logic to protocol classes
    ✅ DO: Keep protocols pure contracts; implementations live in ``stores``

    ❌ DON'T: Raise from ``get`` for a missing key
    ✅ DO: Return ``None``; absence is the cache's natural outcome

Every key a store receives is a PHYSICAL key (namespace prefix applied).
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class KeyStore(Protocol):
    """Minimal storage contract required from every backend."""

    def get(self, key: str) -> Any | None:
        """Return the stored value, or ``None`` when absent."""
        ...

    def put(self, key: str, value: Any) -> None:
        """Store *value* under *key*, replacing any existing value."""
        ...

    def remove(self, key: str) -> None:
        """Remove *key*. No-op if absent."""
        ...


@runtime_checkable
class KeyLister(Protocol):
    """Store that can enumerate its keys."""

    def list_keys(self) -> Sequence[str]:
        ...


@runtime_checkable
class ExistenceChecker(Protocol):
    """Store with its own existence primitive."""

    def contains(self, key: str) -> bool:
        ...


@runtime_checkable
class BatchReader(Protocol):
    """Store that can fetch many keys in one round trip.

    Absent keys are omitted from the returned mapping.
    """

    def get_many(self, keys: Sequence[str]) -> dict[str, Any]:
        ...


@runtime_checkable
class BatchWriter(Protocol):
    """Store that can write many entries in one round trip."""

    def put_many(self, items: Mapping[str, Any]) -> None:
        ...


@runtime_checkable
class BatchRemover(Protocol):
    """Store that can delete many keys in one round trip."""

    def remove_many(self, keys: Iterable[str]) -> None:
        ...


@runtime_checkable
class PatternRemover(Protocol):
    """Store that can delete by regular expression natively.

    The pattern is matched against physical keys with search semantics.
    :class:`~cachespine.cache.Cache` only uses this capability when it has
    no namespace prefix; to confine a pattern to a namespace yourself, use
    :meth:`KeyNamespace.prefix_pattern`.
    """

    def remove_matching(self, pattern: str) -> int:
        ...


@runtime_checkable
class DirtyFlagStore(Protocol):
    """Store that keeps a dirty flag alongside each entry."""

    def set_dirty_flag(self, key: str, dirty: bool) -> None:
        ...

    def get_dirty_flag(self, key: str) -> bool:
        ...


@runtime_checkable
class Cacheable(Protocol):
    """A value that can compute its own cache key.

    Example:
        @dataclass
        class User:
            id: int
            name: str

            def cache_key(self, prefix: str) -> str:
                return f"{prefix}{self.id}"
    """

    def cache_key(self, prefix: str) -> str:
        ...


__all__ = [
    "KeyStore",
    "KeyLister",
    "ExistenceChecker",
    "BatchReader",
    "BatchWriter",
    "BatchRemover",
    "PatternRemover",
    "DirtyFlagStore",
    "Cacheable",
]

"""
Factory functions that build stores and caches from settings.

Example::

    from cachespine.factory import create_cache
    from cachespine.settings import CacheSettings

    cache = create_cache(CacheSettings(backend="redis", key_prefix="orders:"))
"""

from __future__ import annotations

from cachespine.cache import Cache
from cachespine.errors import CacheConfigError
from cachespine.namespacing import KeyNamespace
from cachespine.protocols import KeyStore
from cachespine.serializers import get_serializer
from cachespine.settings import CacheSettings, StoreBackend, get_settings


def create_store(settings: CacheSettings) -> KeyStore:
    """Create the store selected by *settings.backend*.

    Request, session and application stores need a live ASGI context and
    are built with :mod:`cachespine.stores.context` instead.
    """
    match settings.backend:
        case StoreBackend.MEMORY:
            from cachespine.stores.memory import MemoryStore

            return MemoryStore()
        case StoreBackend.EVICTING:
            from cachespine.stores.memory import EvictingMemoryStore

            return EvictingMemoryStore(
                max_size=settings.memory_max_size,
                default_ttl_seconds=settings.memory_default_ttl_seconds,
            )
        case StoreBackend.REDIS:
            from cachespine.stores.redis import RedisStore

            return RedisStore(
                url=settings.redis_url,
                serializer=get_serializer(settings.redis_serializer.value),
                default_ttl_seconds=settings.redis_default_ttl_seconds,
                scan_count=settings.redis_scan_count,
            )
        case StoreBackend.MONGO:
            from cachespine.stores.mongo import MongoStore

            return MongoStore(
                url=settings.mongo_url,
                database=settings.mongo_database,
                collection_name=settings.mongo_collection,
            )
    raise CacheConfigError(f"Unsupported cache backend: {settings.backend!r}")


def create_cache(settings: CacheSettings | None = None, *, store: KeyStore | None = None) -> Cache:
    """Create a :class:`Cache` from *settings* (default: :func:`get_settings`).

    An explicit *store* overrides the backend selected by settings while
    keeping the namespace and dirty-tracking options.
    """
    settings = settings or get_settings()
    return Cache(
        store if store is not None else create_store(settings),
        namespace=KeyNamespace(settings.key_prefix, strict=settings.strict_namespace),
        dedupe_dirty=settings.dedupe_dirty,
    )


__all__ = ["create_store", "create_cache"]

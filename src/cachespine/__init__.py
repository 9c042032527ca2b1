"""cachespine -- one cache contract over interchangeable key/value stores.

Architecture::

    Layer 1 -- Contracts & Errors
        errors.py          Structured error hierarchy (CacheError, NotSupportedError)
        protocols.py       KeyStore + optional capability protocols, Cacheable
        logging.py         structlog configuration

    Layer 2 -- Core
        cache.py           Cache: typed get/set/add, batches, regex clear
        dirty.py           Sentinel-list and per-entry flag dirty tracking
        namespacing.py     KeyNamespace: prefix / unprefix / pattern rewrite

    Layer 3 -- Stores
        stores/memory.py   MemoryStore, EvictingMemoryStore
        stores/context.py  Request / session / application stores (Starlette)
        stores/redis.py    RedisStore
        stores/mongo.py    MongoStore

    Layer 4 -- Wiring
        serializers.py     JSON / pickle value encoding for remote stores
        settings.py        CacheSettings (pydantic-settings, CACHESPINE_*)
        factory.py         create_store / create_cache
        cli/               ``cachespine`` Typer app
"""

__version__ = "0.1.0"

from cachespine.cache import Cache
from cachespine.errors import (
    BackendError,
    BackendUnavailableError,
    CacheConfigError,
    CacheError,
    NamespaceError,
    NotSupportedError,
    SerializationError,
)
from cachespine.namespacing import KeyNamespace
from cachespine.protocols import Cacheable, KeyStore

__all__ = [
    "__version__",
    "Cache",
    "KeyNamespace",
    "KeyStore",
    "Cacheable",
    "CacheError",
    "NotSupportedError",
    "BackendUnavailableError",
    "BackendError",
    "SerializationError",
    "NamespaceError",
    "CacheConfigError",
]

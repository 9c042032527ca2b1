"""Key store adapters, one per backend."""

from cachespine.stores.context import (
    ApplicationStore,
    MappingStore,
    RequestStore,
    SessionStore,
    application_cache,
    request_cache,
    session_cache,
)
from cachespine.stores.memory import EvictingMemoryStore, MemoryStore
from cachespine.stores.mongo import MongoStore
from cachespine.stores.redis import RedisStore

__all__ = [
    "MemoryStore",
    "EvictingMemoryStore",
    "MappingStore",
    "RequestStore",
    "SessionStore",
    "ApplicationStore",
    "RedisStore",
    "MongoStore",
    "request_cache",
    "session_cache",
    "application_cache",
]

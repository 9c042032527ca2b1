"""
Redis-backed store for caches shared between processes and machines.

Values go through a :mod:`~cachespine.serializers` serializer (JSON by
default). Batch reads use MGET, batch writes a non-transactional
pipeline, batch deletes a single DEL. Dirty flags live in one Redis set,
so marking and clearing are atomic SADD/SREM calls. The set is never
listed as an entry.

Performance:
    ``contains`` lists every key with SCAN and checks membership. That is
    O(n) in the number of keys in the database, a known slow path kept for
    parity with backends that have no existence primitive. Prefer
    ``Cache.get(key) is not None`` on hot paths.

Examples:
    >>> store = RedisStore(url="redis://localhost:6379/0", default_ttl_seconds=600)
    >>> cache = Cache(store, key_prefix="orders:")
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

import redis
from redis import exceptions as redis_errors

from cachespine.serializers import JsonSerializer, Serializer
from cachespine.stores.base import backend_errors

DIRTY_SET_KEY = "DIRTY_ITEMS"

_UNAVAILABLE = (redis_errors.ConnectionError, redis_errors.TimeoutError)
_FAILURE = (redis_errors.RedisError,)


def _decode(key: bytes | str) -> str:
    return key.decode("utf-8") if isinstance(key, bytes) else key


class RedisStore:
    """Redis key store.

    Args:
        client: Existing ``redis.Redis`` client. Created from *url* if omitted.
        url: Redis connection URL (``redis://host:port/db``).
        serializer: Value serializer (default :class:`JsonSerializer`).
        default_ttl_seconds: TTL applied on every write (``None`` → no expiry).
        scan_count: SCAN batch size hint used when listing keys.
        dirty_set_key: Name of the Redis set holding dirty physical keys.
    """

    backend_name = "redis"

    def __init__(
        self,
        client: redis.Redis | None = None,
        *,
        url: str = "redis://localhost:6379/0",
        serializer: Serializer | None = None,
        default_ttl_seconds: int | None = None,
        scan_count: int = 500,
        dirty_set_key: str = DIRTY_SET_KEY,
    ):
        self._client = client if client is not None else redis.from_url(url, decode_responses=False)
        self._serializer = serializer or JsonSerializer()
        self._default_ttl = default_ttl_seconds
        self._scan_count = scan_count
        self._dirty_set_key = dirty_set_key

    def _errors(self, operation: str, key: str | None = None):
        return backend_errors(
            self.backend_name, operation, unavailable=_UNAVAILABLE, failure=_FAILURE, key=key
        )

    # ── KeyStore ─────────────────────────────────────────────────

    def get(self, key: str) -> Any | None:
        with self._errors("get", key):
            raw = self._client.get(key)
        return None if raw is None else self._serializer.loads(raw)

    def put(self, key: str, value: Any) -> None:
        data = self._serializer.dumps(value)
        with self._errors("put", key):
            if self._default_ttl:
                self._client.setex(key, self._default_ttl, data)
            else:
                self._client.set(key, data)

    def remove(self, key: str) -> None:
        with self._errors("remove", key):
            self._client.delete(key)

    # ── Capabilities ─────────────────────────────────────────────

    def list_keys(self) -> list[str]:
        """List entry keys. The dirty-flag set is bookkeeping and is left out."""
        with self._errors("list_keys"):
            keys = [_decode(key) for key in self._client.scan_iter(count=self._scan_count)]
        return [key for key in keys if key != self._dirty_set_key]

    def contains(self, key: str) -> bool:
        return key in self.list_keys()

    def get_many(self, keys: Sequence[str]) -> dict[str, Any]:
        keys = list(keys)
        if not keys:
            return {}
        with self._errors("get_many"):
            raws = self._client.mget(keys)
        return {
            key: self._serializer.loads(raw)
            for key, raw in zip(keys, raws)
            if raw is not None
        }

    def put_many(self, items: Mapping[str, Any]) -> None:
        encoded = {key: self._serializer.dumps(value) for key, value in items.items()}
        if not encoded:
            return
        with self._errors("put_many"):
            pipe = self._client.pipeline(transaction=False)
            for key, data in encoded.items():
                if self._default_ttl:
                    pipe.setex(key, self._default_ttl, data)
                else:
                    pipe.set(key, data)
            pipe.execute()

    def remove_many(self, keys: Iterable[str]) -> None:
        keys = list(keys)
        if not keys:
            return
        with self._errors("remove_many"):
            self._client.delete(*keys)

    def set_dirty_flag(self, key: str, dirty: bool) -> None:
        with self._errors("set_dirty_flag", key):
            if dirty:
                self._client.sadd(self._dirty_set_key, key)
            else:
                self._client.srem(self._dirty_set_key, key)

    def get_dirty_flag(self, key: str) -> bool:
        with self._errors("get_dirty_flag", key):
            return bool(self._client.sismember(self._dirty_set_key, key))


__all__ = ["RedisStore", "DIRTY_SET_KEY"]

"""
Stores bound to an ASGI execution context.

Request-, session- and application-scoped caches depend on state a
hosting framework owns. Each store here takes that state explicitly in
its constructor, never from a global, so the same code runs under
Starlette/FastAPI and in plain unit tests.

- :class:`MappingStore`: any ``MutableMapping``; the building block.
- :class:`RequestStore`: lives as long as one request (a dict in the ASGI
  scope).
- :class:`SessionStore`: per user, persisted by ``SessionMiddleware``
  (signed cookie). Values must be JSON-serializable and small.
- :class:`ApplicationStore`: shared by every request of one application
  object, for the lifetime of the process.

FastAPI usage::

    from fastapi import Depends, FastAPI
    from cachespine.stores.context import request_cache

    @app.get("/users/{user_id}")
    def read_user(user_id: int, cache: Cache = Depends(request_cache)):
        ...
"""

from __future__ import annotations

from collections.abc import Iterable, MutableMapping
from typing import Any

from starlette.applications import Starlette
from starlette.requests import HTTPConnection

from cachespine.cache import Cache
from cachespine.errors import CacheConfigError

REQUEST_SCOPE_KEY = "cachespine"
APPLICATION_STATE_ATTR = "cachespine"


class MappingStore:
    """Adapter exposing a ``MutableMapping`` as a key store."""

    backend_name = "mapping"

    def __init__(self, mapping: MutableMapping[str, Any]):
        self._mapping = mapping

    def get(self, key: str) -> Any | None:
        return self._mapping.get(key)

    def put(self, key: str, value: Any) -> None:
        self._mapping[key] = value

    def remove(self, key: str) -> None:
        self._mapping.pop(key, None)

    def remove_many(self, keys: Iterable[str]) -> None:
        for key in keys:
            self._mapping.pop(key, None)

    def list_keys(self) -> list[str]:
        return list(self._mapping.keys())


class RequestStore(MappingStore):
    """Entries scoped to a single request or websocket connection."""

    backend_name = "request"

    def __init__(self, connection: HTTPConnection, *, scope_key: str = REQUEST_SCOPE_KEY):
        super().__init__(connection.scope.setdefault(scope_key, {}))


class SessionStore(MappingStore):
    """Entries scoped to the user's session.

    Raises:
        CacheConfigError: If ``SessionMiddleware`` is not installed.
    """

    backend_name = "session"

    def __init__(self, connection: HTTPConnection):
        if "session" not in connection.scope:
            raise CacheConfigError(
                "SessionStore requires starlette.middleware.sessions.SessionMiddleware"
            ).with_context(backend=self.backend_name)
        super().__init__(connection.session)


class ApplicationStore(MappingStore):
    """Entries shared by every request served by *app*."""

    backend_name = "application"

    def __init__(self, app: Starlette, *, attribute: str = APPLICATION_STATE_ATTR):
        data = getattr(app.state, attribute, None)
        if data is None:
            data = {}
            setattr(app.state, attribute, data)
        super().__init__(data)


# ------------------------------------------------------------------ #
# Dependency callables
# ------------------------------------------------------------------ #


def request_cache(request: HTTPConnection) -> Cache:
    """Cache over the current request's scope."""
    return Cache(RequestStore(request))


def session_cache(request: HTTPConnection) -> Cache:
    """Cache over the current user's session."""
    return Cache(SessionStore(request))


def application_cache(request: HTTPConnection) -> Cache:
    """Cache over state shared by the whole application."""
    return Cache(ApplicationStore(request.app))


__all__ = [
    "MappingStore",
    "RequestStore",
    "SessionStore",
    "ApplicationStore",
    "request_cache",
    "session_cache",
    "application_cache",
]

"""Helpers shared by the store adapters."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from cachespine.errors import BackendError, BackendUnavailableError, CacheError
from cachespine.logging import get_logger

logger = get_logger(__name__)


@contextmanager
def backend_errors(
    backend: str,
    operation: str,
    *,
    unavailable: tuple[type[BaseException], ...] = (),
    failure: tuple[type[BaseException], ...] = (),
    key: str | None = None,
) -> Iterator[None]:
    """Translate a client library's exceptions into cachespine errors.

    Exceptions in *unavailable* become :class:`BackendUnavailableError`,
    exceptions in *failure* become :class:`BackendError`. Both are logged
    and re-raised with the operation and backend attached; anything else
    propagates untouched.
    """
    try:
        yield
    except CacheError:
        raise
    except unavailable as exc:
        logger.warning("cache_backend_error", backend=backend, operation=operation, key=key, error=str(exc))
        raise BackendUnavailableError(
            f"{backend} unavailable during {operation}: {exc}",
            cause=exc,
        ).with_context(operation=operation, backend=backend, key=key) from exc
    except failure as exc:
        logger.warning("cache_backend_error", backend=backend, operation=operation, key=key, error=str(exc))
        raise BackendError(
            f"{backend} failed during {operation}: {exc}",
            cause=exc,
        ).with_context(operation=operation, backend=backend, key=key) from exc

"""
Structured error types for cachespine.

Every failure a cache operation can surface is a :class:`CacheError`
carrying a category, a retryable flag, structured context (operation,
backend, key, pattern) and the chained backend exception.

Manifesto:
    A cache has one natural failure mode: the item is not there. That is
    never an error. Everything else (the backend cannot do what was asked,
    the backend cannot be reached, a value cannot be encoded) must reach
    the caller with enough context to tell "no data" from "no connection".

    - **Absent is not an error:** get/exists/clear return normally
    - **Typed hierarchy:** one subclass per failure class
    - **Explicit retry semantics:** only transport failures are retryable
    - **Error chaining:** the backend exception is kept as ``cause``

Architecture:
    ::

        CacheError  (category, retryable, context, cause)
        ├── NotSupportedError        CAPABILITY     never retryable
        ├── BackendUnavailableError  BACKEND        retryable
        ├── BackendError             BACKEND        never retryable
        ├── SerializationError       SERIALIZATION  never retryable
        ├── NamespaceError           NAMESPACE      never retryable
        └── CacheConfigError         CONFIG         never retryable

Examples:
    >>> error = BackendUnavailableError("redis unreachable")
    >>> error.retryable
    True
    >>> error.with_context(operation="get", backend="redis").context.backend
    'redis'

Guardrails:
    ❌ DON'T: Raise for a missing key
    ✅ DO: Return ``None`` / ``False`` and let the caller decide

    ❌ DON'T: Swallow the backend exception
    ✅ DO: Pass it as ``cause=`` so tracebacks keep the root cause
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and routing."""

    BACKEND = "BACKEND"                # Store unreachable or failing
    CAPABILITY = "CAPABILITY"          # Store cannot provide an operation
    SERIALIZATION = "SERIALIZATION"    # Value could not be encoded/decoded
    NAMESPACE = "NAMESPACE"            # Key outside the configured namespace
    CONFIG = "CONFIG"                  # Missing or invalid settings
    INTERNAL = "INTERNAL"              # Bugs, unexpected state


@dataclass
class ErrorContext:
    """Structured metadata attached to a :class:`CacheError`.

    Attributes:
        operation: Cache operation that failed (``get``, ``regex_clear``, ...)
        backend: Name of the store (``memory``, ``redis``, ``mongo``, ...)
        key: Physical key involved, when there is exactly one
        pattern: Regex pattern involved, for pattern operations
        metadata: Additional key-value pairs
    """

    operation: str | None = None
    backend: str | None = None
    key: str | None = None
    pattern: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for name in ["operation", "backend", "key", "pattern"]:
            value = getattr(self, name)
            if value is not None:
                result[name] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class CacheError(Exception):
    """
    Base exception for all cachespine errors.

    Subclasses set ``default_category`` and ``default_retryable`` so that
    raising sites only need a message and, usually, a cause.

    Examples:
        >>> error = CacheError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>
        >>> error.to_dict()["retryable"]
        False
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> CacheError:
        """
        Add context to this error (fluent API).

        Usage:
            raise NotSupportedError("cannot list keys").with_context(
                operation="regex_clear", backend="evicting-memory"
            )
        """
        for key, value in kwargs.items():
            if key != "metadata" and hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


class NotSupportedError(CacheError):
    """The store lacks a capability the operation requires (e.g. key listing)."""

    default_category = ErrorCategory.CAPABILITY


class BackendUnavailableError(CacheError):
    """The store could not be reached. Distinct from an absent key."""

    default_category = ErrorCategory.BACKEND
    default_retryable = True


class BackendError(CacheError):
    """The store was reachable but the operation failed."""

    default_category = ErrorCategory.BACKEND


class SerializationError(CacheError):
    """A value could not be encoded for, or decoded from, a remote store."""

    default_category = ErrorCategory.SERIALIZATION


class NamespaceError(CacheError):
    """A physical key does not belong to the configured namespace."""

    default_category = ErrorCategory.NAMESPACE


class CacheConfigError(CacheError):
    """Configuration is missing or inconsistent."""

    default_category = ErrorCategory.CONFIG


def is_retryable(error: BaseException) -> bool:
    """Return whether *error* is a retryable :class:`CacheError`."""
    return isinstance(error, CacheError) and error.retryable


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "CacheError",
    "NotSupportedError",
    "BackendUnavailableError",
    "BackendError",
    "SerializationError",
    "NamespaceError",
    "CacheConfigError",
    "is_retryable",
]

"""
Value serializers for remote stores.

Remote stores hold bytes. A serializer turns an opaque cache value into
bytes and back. In-process stores never serialize.

- :class:`JsonSerializer`: JSON-compatible values only; safe to share
  between services and languages. Default for Redis.
- :class:`PickleSerializer`: any picklable Python object, including
  :class:`~cachespine.protocols.Cacheable` domain objects. Only for data
  written by trusted processes: unpickling runs arbitrary code.
"""

from __future__ import annotations

import json
import pickle
from typing import Any, Protocol

from cachespine.errors import SerializationError


class Serializer(Protocol):
    name: str

    def dumps(self, value: Any) -> bytes:
        ...

    def loads(self, data: bytes) -> Any:
        ...


class JsonSerializer:
    """UTF-8 JSON encoding."""

    name = "json"

    def dumps(self, value: Any) -> bytes:
        try:
            return json.dumps(value).encode("utf-8")
        except (TypeError, ValueError) as exc:
            raise SerializationError(
                f"Value of type {type(value).__name__} is not JSON serializable",
                cause=exc,
            ).with_context(serializer=self.name) from exc

    def loads(self, data: bytes) -> Any:
        try:
            return json.loads(data)
        except (TypeError, ValueError) as exc:
            raise SerializationError("Stored value is not valid JSON", cause=exc).with_context(
                serializer=self.name
            ) from exc


class PickleSerializer:
    """Pickle encoding at a fixed protocol version."""

    name = "pickle"

    def __init__(self, protocol: int = pickle.HIGHEST_PROTOCOL):
        self._protocol = protocol

    def dumps(self, value: Any) -> bytes:
        try:
            return pickle.dumps(value, protocol=self._protocol)
        except (pickle.PicklingError, TypeError, AttributeError) as exc:
            raise SerializationError(
                f"Value of type {type(value).__name__} cannot be pickled",
                cause=exc,
            ).with_context(serializer=self.name) from exc

    def loads(self, data: bytes) -> Any:
        try:
            return pickle.loads(data)
        except (pickle.UnpicklingError, EOFError, AttributeError, ImportError) as exc:
            raise SerializationError("Stored value cannot be unpickled", cause=exc).with_context(
                serializer=self.name
            ) from exc


_SERIALIZERS: dict[str, type[JsonSerializer] | type[PickleSerializer]] = {
    JsonSerializer.name: JsonSerializer,
    PickleSerializer.name: PickleSerializer,
}


def get_serializer(name: str) -> Serializer:
    """Return a serializer instance by name (``json`` or ``pickle``)."""
    try:
        return _SERIALIZERS[name]()
    except KeyError:
        raise ValueError(f"Unknown serializer {name!r}; expected one of {sorted(_SERIALIZERS)}") from None


__all__ = [
    "Serializer",
    "JsonSerializer",
    "PickleSerializer",
    "get_serializer",
]

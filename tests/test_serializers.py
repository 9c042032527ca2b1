"""Tests for cachespine.serializers."""

from dataclasses import dataclass

import pytest

from cachespine.errors import SerializationError
from cachespine.serializers import JsonSerializer, PickleSerializer, get_serializer


@dataclass
class Point:
    x: int
    y: int


class TestJsonSerializer:
    def test_encodes_utf8_json(self):
        assert JsonSerializer().dumps({"a": [1, 2]}) == b'{"a": [1, 2]}'

    def test_decodes(self):
        assert JsonSerializer().loads(b'{"name": "Alice"}') == {"name": "Alice"}

    def test_unserializable_value(self):
        with pytest.raises(SerializationError) as exc_info:
            JsonSerializer().dumps(object())
        assert exc_info.value.context.metadata["serializer"] == "json"

    def test_invalid_payload(self):
        with pytest.raises(SerializationError):
            JsonSerializer().loads(b"\x80not json")


class TestPickleSerializer:
    def test_preserves_domain_objects(self):
        serializer = PickleSerializer()
        point = Point(1, 2)
        assert serializer.loads(serializer.dumps(point)) == point

    def test_unpicklable_value(self):
        with pytest.raises(SerializationError):
            PickleSerializer().dumps(lambda: None)

    def test_corrupt_payload(self):
        with pytest.raises(SerializationError):
            PickleSerializer().loads(b"garbage")


class TestGetSerializer:
    def test_by_name(self):
        assert isinstance(get_serializer("json"), JsonSerializer)
        assert isinstance(get_serializer("pickle"), PickleSerializer)

    def test_unknown_name(self):
        with pytest.raises(ValueError, match="Unknown serializer"):
            get_serializer("yaml")

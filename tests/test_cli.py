"""Tests for cachespine.cli — command smoke tests via CliRunner.

Every invocation builds a fresh cache from settings, so the memory backend
is pinned to one shared store for the duration of a test.
"""

from __future__ import annotations

import pytest
from typer.testing import CliRunner

from cachespine import __version__
from cachespine.cli.app import app
from cachespine.settings import StoreBackend
from cachespine.stores.memory import MemoryStore

runner = CliRunner()


@pytest.fixture
def shared_store(monkeypatch):
    """Route the memory backend to a single store shared across invocations."""
    import cachespine.factory as factory

    store = MemoryStore()
    original = factory.create_store

    def create_store(settings):
        if settings.backend == StoreBackend.MEMORY:
            return store
        return original(settings)

    monkeypatch.setattr(factory, "create_store", create_store)
    return store


class TestRoot:
    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_unknown_backend_is_bad_parameter(self, shared_store):
        result = runner.invoke(app, ["--backend", "nope", "check"])
        assert result.exit_code == 2


class TestCheck:
    def test_check_ok(self, shared_store):
        result = runner.invoke(app, ["check"])
        assert result.exit_code == 0
        assert "OK memory" in result.output
        assert shared_store.get("test") == "test"

    def test_check_fails_on_wrong_probe(self, shared_store):
        shared_store.put("test", "stale")
        result = runner.invoke(app, ["check"])
        assert result.exit_code == 1
        assert "FAIL" in result.output


class TestReadWrite:
    def test_set_then_get(self, shared_store):
        result = runner.invoke(app, ["set", "user:1", '{"name": "Alice"}'])
        assert result.exit_code == 0
        assert shared_store.get("user:1") == {"name": "Alice"}

        result = runner.invoke(app, ["get", "user:1", "--json"])
        assert result.exit_code == 0
        assert '"name": "Alice"' in result.output

    def test_set_plain_string(self, shared_store):
        runner.invoke(app, ["set", "greeting", "hello"])
        assert shared_store.get("greeting") == "hello"

    def test_get_absent(self, shared_store):
        result = runner.invoke(app, ["get", "missing"])
        assert result.exit_code == 1
        assert "absent" in result.output

    def test_exists(self, shared_store):
        shared_store.put("k", 1)
        assert runner.invoke(app, ["exists", "k"]).exit_code == 0
        assert runner.invoke(app, ["exists", "other"]).exit_code == 1

    def test_prefix_option(self, shared_store):
        result = runner.invoke(app, ["--prefix", "t1:", "set", "k", "1"])
        assert result.exit_code == 0
        assert shared_store.get("t1:k") == 1
        assert shared_store.get("k") is None

    def test_delete(self, shared_store):
        shared_store.put("a", 1)
        shared_store.put("b", 2)
        result = runner.invoke(app, ["delete", "a", "b"])
        assert result.exit_code == 0
        assert "removed 2 key(s)" in result.output
        assert len(shared_store) == 0


class TestClear:
    def test_clear_by_pattern(self, shared_store):
        for key in ("user:1", "user:2", "order:1"):
            shared_store.put(key, 1)

        result = runner.invoke(app, ["clear", "^user:"])

        assert result.exit_code == 0
        assert "removed 2 key(s)" in result.output
        assert shared_store.list_keys() == ["order:1"]

    def test_invalid_pattern(self, shared_store):
        result = runner.invoke(app, ["clear", "(unclosed"])
        assert result.exit_code == 2

    def test_not_supported_on_evicting_backend(self, shared_store):
        result = runner.invoke(app, ["--backend", "evicting", "clear", "^user:"])
        assert result.exit_code == 1
        assert "CAPABILITY" in result.output


class TestKeys:
    def test_lists_keys(self, shared_store):
        shared_store.put("user:1", 1)
        shared_store.put("order:1", 1)
        result = runner.invoke(app, ["keys"])
        assert result.exit_code == 0
        assert "user:1" in result.output
        assert "order:1" in result.output

    def test_pattern_filter(self, shared_store):
        shared_store.put("user:1", 1)
        shared_store.put("order:1", 1)
        result = runner.invoke(app, ["keys", "--pattern", "^order"])
        assert "order:1" in result.output
        assert "user:1" not in result.output


class TestDirty:
    def test_mark_and_clean(self, shared_store):
        result = runner.invoke(app, ["dirty", "k", "--mark"])
        assert "k: dirty" in result.output

        result = runner.invoke(app, ["dirty", "k"])
        assert "k: dirty" in result.output

        result = runner.invoke(app, ["dirty", "k", "--clean"])
        assert "k: clean" in result.output

    def test_mark_and_clean_together(self, shared_store):
        result = runner.invoke(app, ["dirty", "k", "--mark", "--clean"])
        assert result.exit_code == 2

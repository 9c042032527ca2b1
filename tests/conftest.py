"""
Shared pytest fixtures for cachespine tests.

This module provides:
- In-memory stores and caches for contract tests
- A small Cacheable domain class
- Settings cache isolation
"""

import sys
from dataclasses import dataclass
from pathlib import Path

import pytest

# Ensure cachespine package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from cachespine.cache import Cache
from cachespine.settings import clear_settings_cache
from cachespine.stores.memory import MemoryStore


@dataclass
class User:
    """Cacheable test object keyed by id."""

    id: int
    name: str

    def cache_key(self, prefix: str) -> str:
        return f"{prefix}{self.id}"


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    """Drop cached settings and CACHESPINE_* env vars around every test."""
    import os

    for name in list(os.environ):
        if name.startswith("CACHESPINE_"):
            monkeypatch.delenv(name, raising=False)
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def cache(memory_store) -> Cache:
    return Cache(memory_store)


@pytest.fixture
def users() -> list[User]:
    return [User(1, "Alice"), User(2, "Bob"), User(3, "Carol")]


@pytest.fixture
def user_cls() -> type[User]:
    return User

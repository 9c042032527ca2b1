"""
CLI utility helpers — cache construction and output formatting.
"""

from __future__ import annotations

import json
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

from cachespine.cache import Cache
from cachespine.errors import CacheError
from cachespine.factory import create_cache
from cachespine.settings import CacheSettings, StoreBackend, get_settings

console = Console()
err_console = Console(stderr=True)


def make_cache(backend: str | None = None, prefix: str | None = None) -> Cache:
    """Build a cache from settings, applying command-line overrides."""
    settings = get_settings()
    overrides: dict[str, Any] = {}
    if backend is not None:
        overrides["backend"] = StoreBackend(backend)
    if prefix is not None:
        overrides["key_prefix"] = prefix
    if overrides:
        settings = CacheSettings.model_validate({**settings.model_dump(), **overrides})
    return create_cache(settings)


def parse_value(raw: str) -> Any:
    """Decode *raw* as JSON, falling back to the plain string."""
    try:
        return json.loads(raw)
    except ValueError:
        return raw


def fail(error: CacheError) -> None:
    """Print a cache error and exit with status 1."""
    err_console.print(f"[bold red]Error[/bold red] ({error.category.value}): {error.message}")
    raise typer.Exit(code=1)


def output_value(value: Any, *, as_json: bool = False) -> None:
    if as_json:
        console.print_json(json.dumps(value, default=str))
    else:
        console.print(repr(value), markup=False)


def output_keys(keys: list[str], *, title: str = "Keys") -> None:
    table = Table(title=f"{title} ({len(keys)})")
    table.add_column("key")
    for key in sorted(keys):
        table.add_row(key)
    console.print(table)

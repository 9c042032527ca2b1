"""
Root Typer application for the cachespine CLI.

Every command builds a cache from :class:`~cachespine.settings.CacheSettings`
(``CACHESPINE_*`` env vars / ``.env``); ``--backend`` and ``--prefix``
override the settings for one invocation.
"""

from __future__ import annotations

import re

import typer

from cachespine.cli.utils import console, fail, make_cache, output_keys, output_value, parse_value
from cachespine.errors import CacheError
from cachespine.logging import LogContext, configure_logging
from cachespine.settings import get_settings

app = typer.Typer(
    name="cachespine",
    help="cachespine — inspect and invalidate cache backends.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        from cachespine import __version__

        typer.echo(f"cachespine {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    backend: str | None = typer.Option(None, "--backend", "-b", help="memory | evicting | redis | mongo"),
    prefix: str | None = typer.Option(None, "--prefix", "-p", help="Key namespace prefix."),
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """cachespine CLI — read, write and invalidate cache entries."""
    settings = get_settings()
    configure_logging(level=settings.log_level, json_format=settings.log_format == "json")
    ctx.obj = {"backend": backend, "prefix": prefix}


def _cache(ctx: typer.Context):
    try:
        return make_cache(ctx.obj["backend"], ctx.obj["prefix"])
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


@app.command("check")
def check(ctx: typer.Context) -> None:
    """Round-trip a probe value through the backend."""
    cache = _cache(ctx)
    try:
        ok = cache.test()
    except CacheError as exc:
        fail(exc)
    if not ok:
        console.print(f"[bold red]FAIL[/bold red] {cache.name}: probe did not round-trip")
        raise typer.Exit(code=1)
    console.print(f"[bold green]OK[/bold green] {cache.name}")


@app.command("get")
def get(
    ctx: typer.Context,
    key: str = typer.Argument(..., help="Logical key."),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Print the value stored under KEY."""
    try:
        value = _cache(ctx).get(key)
    except CacheError as exc:
        fail(exc)
    if value is None:
        console.print(f"[yellow]absent[/yellow] {key}")
        raise typer.Exit(code=1)
    output_value(value, as_json=json_out)


@app.command("set")
def set_(
    ctx: typer.Context,
    key: str = typer.Argument(...),
    value: str = typer.Argument(..., help="Value; decoded as JSON when possible."),
) -> None:
    """Store VALUE under KEY and mark it clean."""
    try:
        _cache(ctx).set(key, parse_value(value))
    except CacheError as exc:
        fail(exc)
    console.print(f"[green]stored[/green] {key}")


@app.command("exists")
def exists(ctx: typer.Context, key: str = typer.Argument(...)) -> None:
    """Exit 0 if KEY is present, 1 otherwise."""
    try:
        present = _cache(ctx).exists(key)
    except CacheError as exc:
        fail(exc)
    console.print(f"{key}: {'present' if present else 'absent'}")
    if not present:
        raise typer.Exit(code=1)


@app.command("delete")
def delete(ctx: typer.Context, keys: list[str] = typer.Argument(..., help="Logical keys.")) -> None:
    """Remove one or more keys."""
    try:
        _cache(ctx).multi_clear(keys)
    except CacheError as exc:
        fail(exc)
    console.print(f"[green]removed[/green] {len(keys)} key(s)")


@app.command("clear")
def clear(ctx: typer.Context, pattern: str = typer.Argument(..., help="Regex on logical keys.")) -> None:
    """Remove every key matching PATTERN (full key scan)."""
    cache = _cache(ctx)
    try:
        with LogContext(command="clear", pattern=pattern):
            removed = cache.regex_clear(pattern)
    except re.error as exc:
        raise typer.BadParameter(f"Invalid pattern: {exc}") from exc
    except CacheError as exc:
        fail(exc)
    console.print(f"[green]removed[/green] {removed} key(s) matching {pattern!r}")


@app.command("keys")
def keys(
    ctx: typer.Context,
    pattern: str | None = typer.Option(None, "--pattern", help="Only keys matching this regex."),
) -> None:
    """List the logical keys of the namespace."""
    try:
        found = _cache(ctx).keys()
    except CacheError as exc:
        fail(exc)
    if pattern:
        regex = re.compile(pattern)
        found = [key for key in found if regex.search(key)]
    output_keys(found)


@app.command("dirty")
def dirty(
    ctx: typer.Context,
    key: str = typer.Argument(...),
    mark: bool = typer.Option(False, "--mark", help="Mark KEY dirty."),
    clean: bool = typer.Option(False, "--clean", help="Mark KEY clean."),
) -> None:
    """Show or change the dirty flag of KEY."""
    if mark and clean:
        raise typer.BadParameter("--mark and --clean are mutually exclusive")
    cache = _cache(ctx)
    try:
        if mark:
            cache.set_dirty(key)
        elif clean:
            cache.set_clean(key)
        state = cache.is_dirty(key)
    except CacheError as exc:
        fail(exc)
    console.print(f"{key}: {'dirty' if state else 'clean'}")

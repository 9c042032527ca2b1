"""cachespine command-line interface."""

from cachespine.cli.app import app

__all__ = ["app"]

"""
Key namespacing for caches that share one physical backend.

A :class:`KeyNamespace` turns logical keys into physical keys by
prepending a tenant prefix, and back again. Several logical caches can
then live in one Redis database or one Mongo collection without their
keys colliding.

Examples:
    >>> ns = KeyNamespace("orders:")
    >>> ns.prefix("42")
    'orders:42'
    >>> ns.unprefix("orders:42")
    '42'
    >>> ns.prefix_pattern("^4")
    '^orders:(?:4)'

Limitation:
    A prefix is only a string. A physical key of another tenant that
    happens to start with this tenant's prefix (``"a"`` vs ``"ab"``) is
    indistinguishable from an owned key. Choose prefixes that end in a
    separator no tenant name contains, and use :meth:`KeyNamespace.owns`
    or ``strict=True`` where foreign keys must never be mistaken for owned
    ones.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from cachespine.errors import NamespaceError


@dataclass(frozen=True)
class KeyNamespace:
    """Prefix/unprefix rules for one logical cache.

    Attributes:
        prefix_value: String prepended to every physical key. Empty means
            no namespacing; every key is owned.
        strict: When true, :meth:`unprefix` raises :class:`NamespaceError`
            for a key the namespace does not own instead of returning it
            unchanged.
    """

    prefix_value: str = ""
    strict: bool = False

    def prefix(self, key: str) -> str:
        return f"{self.prefix_value}{key}"

    def owns(self, physical_key: str) -> bool:
        """Return whether *physical_key* carries this namespace's prefix."""
        return physical_key.startswith(self.prefix_value)

    def unprefix(self, physical_key: str) -> str:
        """Strip the prefix from *physical_key*.

        Keys without the prefix come back unchanged, unless ``strict`` is
        set, in which case they raise :class:`NamespaceError`.
        """
        if self.owns(physical_key):
            return physical_key[len(self.prefix_value):]
        if self.strict:
            raise NamespaceError(
                f"Key {physical_key!r} is outside namespace {self.prefix_value!r}"
            ).with_context(key=physical_key)
        return physical_key

    def prefix_pattern(self, pattern: str) -> str:
        """Rewrite a logical-key regex so it matches only this namespace's physical keys.

        The caller's pattern is wrapped in a group after the anchored,
        escaped prefix, so an alternation cannot reach keys of another
        namespace. An unanchored pattern may match anywhere after the
        prefix. With an empty prefix the pattern is returned unchanged.

        With a leading ``^`` every alternative is anchored right after the
        prefix, and a ``^`` inside a later alternative never matches under a
        non-empty prefix. :class:`~cachespine.cache.Cache` therefore scans
        rather than rewriting when it has a prefix.
        """
        if not self.prefix_value:
            return pattern
        escaped = re.escape(self.prefix_value)
        if pattern.startswith("^"):
            return f"^{escaped}(?:{pattern[1:]})"
        return f"^{escaped}.*?(?:{pattern})"


__all__ = ["KeyNamespace"]

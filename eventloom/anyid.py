"""Event identifiers built from any value through a digest."""

from __future__ import annotations

import functools
from typing import Any, Callable


def _less(a: Any, b: Any) -> bool:
    """``a < b``, or False when the values cannot be ordered."""
    try:
        return bool(a < b)
    except TypeError:
        return False


def type_digester(value: Any) -> type:
    """Digest a value to its type; a type digests to itself."""
    return value if isinstance(value, type) else type(value)


@functools.total_ordering
class AnyId:
    """Identifier holding the digest of a value and, optionally, the value.

    Two ids are equal when their digests are equal and, if both keep their
    values, the values are equal too.
    """

    __slots__ = ("digest", "value", "_has_value")

    def __init__(
        self,
        value: Any = None,
        digester: Callable[[Any], Any] = hash,
        store_value: bool = False,
    ) -> None:
        self.digest = digester(value)
        self.value = value if store_value else None
        self._has_value = store_value

    def _compares_values(self, other: "AnyId") -> bool:
        return self._has_value and other._has_value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AnyId):
            return NotImplemented
        if self.digest != other.digest:
            return False
        if self._compares_values(other):
            return bool(self.value == other.value)
        return True

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, AnyId):
            return NotImplemented
        if _less(self.digest, other.digest):
            return True
        return (
            self._compares_values(other)
            and _less(self.value, other.value)
            and self.digest == other.digest
        )

    def __hash__(self) -> int:
        return hash(self.digest)

    def __repr__(self) -> str:
        if self._has_value:
            return f"AnyId(digest={self.digest!r}, value={self.value!r})"
        return f"AnyId(digest={self.digest!r})"
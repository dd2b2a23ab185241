"""
Path Resolver
=============

Dot-separated key path lookups against nested mappings, and the layered
read-only scope used while rendering loop blocks.
"""

from collections.abc import Mapping
from typing import Any, Iterator, Optional


class _Missing:
    """Sentinel for a path that does not resolve."""

    _instance: Optional["_Missing"] = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


def resolve(path: str, context: Mapping) -> Any:
    """
    Resolve a dot-notation path against a mapping.

    Args:
        path: Key path such as ``user.company.name``
        context: Mapping to descend through

    Returns:
        The resolved value, or ``MISSING`` when a segment is absent or the
        current value is not a mapping
    """
    current: Any = context
    for segment in path.split("."):
        if not isinstance(current, Mapping) or segment not in current:
            return MISSING
        current = current[segment]
    return current


class Scope(Mapping):
    """
    Immutable chain of binding layers.

    Lookups walk from the innermost layer outwards. ``child`` returns a new
    scope and leaves this one, and every layer it wraps, untouched.
    """

    __slots__ = ("_bindings", "_parent")

    def __init__(self, bindings: Mapping, parent: Optional["Scope"] = None):
        self._bindings = bindings
        self._parent = parent

    def child(self, bindings: Mapping) -> "Scope":
        return Scope(bindings, self)

    def __getitem__(self, key: str) -> Any:
        scope: Optional[Scope] = self
        while scope is not None:
            if key in scope._bindings:
                return scope._bindings[key]
            scope = scope._parent
        raise KeyError(key)

    def __contains__(self, key: object) -> bool:
        scope: Optional[Scope] = self
        while scope is not None:
            if key in scope._bindings:
                return True
            scope = scope._parent
        return False

    def __iter__(self) -> Iterator[str]:
        seen = set()
        scope: Optional[Scope] = self
        while scope is not None:
            for key in scope._bindings:
                if key not in seen:
                    seen.add(key)
                    yield key
            scope = scope._parent

    def __len__(self) -> int:
        return sum(1 for _ in self)

    def __repr__(self) -> str:
        return f"Scope({list(self)!r})"

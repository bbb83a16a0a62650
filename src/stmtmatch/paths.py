"""Dotted-path lookups into statement trees."""

from __future__ import annotations

from typing import Any, Mapping


def select(tree: Any, path: str, default: Any = None) -> Any:
    """Return the value at dotted ``path`` in ``tree``, or ``default`` when absent.

    Only mappings are traversed; a list or leaf in an intermediate position
    ends the walk with ``default``. Missing segments are never an error.
    """
    current = tree
    for segment in path.split("."):
        if not isinstance(current, Mapping) or segment not in current:
            return default
        current = current[segment]
    return current

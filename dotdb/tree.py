"""
Recursive traversal of the in-memory JSON tree.

Only dicts are descended into; lists and scalars end a path. All functions take
an already-split list of segments.
"""

from __future__ import annotations

import math
from typing import Any, Sequence

from .errors import PathConflictError


class _Missing:
    """Marks the absence of a value (distinct from a stored None)."""

    _instance: "_Missing | None" = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


def get_in(node: Any, path: Sequence[str]) -> Any:
    if not path:
        return node
    if not isinstance(node, dict) or path[0] not in node:
        return MISSING
    return get_in(node[path[0]], path[1:])


def set_in(node: dict[str, Any], path: Sequence[str], value: Any, *, strict: bool = False, key: str = "") -> None:
    """
    Store value at path below node, creating dicts along the way.

    A non-dict intermediate is replaced with {} unless strict is set, in which
    case PathConflictError is raised before anything is modified.
    """
    if strict:
        _check_conflicts(node, path, key)
    _set_in(node, path, value)


def _check_conflicts(node: dict[str, Any], path: Sequence[str], key: str) -> None:
    head, rest = path[0], path[1:]
    if not rest or head not in node:
        return
    child = node[head]
    if not isinstance(child, dict):
        raise PathConflictError(key or ".".join(path), head)
    _check_conflicts(child, rest, key)


def _set_in(node: dict[str, Any], path: Sequence[str], value: Any) -> None:
    head, rest = path[0], path[1:]
    if not rest:
        node[head] = value
        return
    child = node.get(head)
    if not isinstance(child, dict):
        child = {}
        node[head] = child
    _set_in(child, rest, value)


def unset_in(node: Any, path: Sequence[str]) -> bool:
    if not isinstance(node, dict) or path[0] not in node:
        return False
    if len(path) == 1:
        del node[path[0]]
        return True
    return unset_in(node[path[0]], path[1:])


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_finite_number(value: Any) -> bool:
    if not is_number(value):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        # ints too large for a float
        return False


def json_equal(a: Any, b: Any) -> bool:
    """Deep equality that keeps booleans apart from numbers."""
    if isinstance(a, bool) or isinstance(b, bool):
        return isinstance(a, bool) and isinstance(b, bool) and a == b
    if is_number(a) or is_number(b):
        return is_number(a) and is_number(b) and a == b
    if isinstance(a, dict):
        if not isinstance(b, dict) or a.keys() != b.keys():
            return False
        return all(json_equal(v, b[k]) for k, v in a.items())
    if isinstance(a, (list, tuple)):
        if not isinstance(b, (list, tuple)) or len(a) != len(b):
            return False
        return all(json_equal(x, y) for x, y in zip(a, b))
    return type(a) is type(b) and a == b

"""Dotted key validation and splitting."""

from __future__ import annotations

from typing import Any

from .errors import InvalidKeyError, InvalidNameError

SEPARATOR = "."


def is_valid_key(key: Any) -> bool:
    return isinstance(key, str) and all(key.split(SEPARATOR))


def validate_key(key: Any) -> None:
    if not is_valid_key(key):
        raise InvalidKeyError(key)


def segments(key: Any) -> list[str]:
    """Split a dotted key into its segments, e.g. "a.b.c" -> ["a", "b", "c"]."""
    validate_key(key)
    return key.split(SEPARATOR)


def validate_name(name: Any, *, dotted: bool = False) -> None:
    """
    Validate a collection name (a single segment) or, with dotted=True,
    a rename target (any valid key).
    """
    if not is_valid_key(name):
        raise InvalidNameError(name)
    if not dotted and SEPARATOR in name:
        raise InvalidNameError(name)

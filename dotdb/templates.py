"""
Default-value templates for collection entries.

A template maps field names to either Literal(value) or AutoIncrement(seed).
Raw mappings use a "$" prefix to mark auto-increment fields:

    {"$id": 0, "content": "empty"}  ->  {"id": AutoIncrement(0), "content": Literal("empty")}
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Union

from .errors import InvalidValueError
from .tree import is_number

AUTO_INCREMENT_SIGIL = "$"


@dataclass(frozen=True)
class Literal:
    value: Any = None

    def materialize(self) -> Any:
        return copy.deepcopy(self.value)


@dataclass(frozen=True)
class AutoIncrement:
    seed: Any = 0

    def next_value(self, field: str, entries: Iterable[Mapping[str, Any]]) -> Any:
        found = [e[field] for e in entries if field in e]
        numbers = [v for v in found if is_number(v)]
        if not numbers:
            return copy.deepcopy(self.seed)
        return max(numbers) + 1


DefaultValue = Union[Literal, AutoIncrement]
Template = dict[str, DefaultValue]


def parse_template(raw: Mapping[str, Any] | None) -> Template:
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise InvalidValueError("The default values must be an object")

    template: Template = {}
    for name, value in raw.items():
        if not isinstance(name, str) or not name:
            raise InvalidValueError(f"Invalid default value field: {name!r}")
        if isinstance(value, (Literal, AutoIncrement)):
            template[name] = value
        elif name.startswith(AUTO_INCREMENT_SIGIL) and len(name) > 1:
            template[name[len(AUTO_INCREMENT_SIGIL):]] = AutoIncrement(value)
        else:
            template[name] = Literal(value)
    return template


def dump_template(template: Mapping[str, DefaultValue]) -> dict[str, Any]:
    """Inverse of parse_template, using the "$" form for auto-increment fields."""
    out: dict[str, Any] = {}
    for name, default in template.items():
        if isinstance(default, AutoIncrement):
            out[AUTO_INCREMENT_SIGIL + name] = copy.deepcopy(default.seed)
        else:
            out[name] = default.materialize()
    return out


def apply_template(
    template: Mapping[str, DefaultValue],
    partial: Mapping[str, Any],
    existing: Iterable[Mapping[str, Any]],
) -> dict[str, Any]:
    """Return a copy of partial with every missing template field filled in."""
    entry = dict(partial)
    existing = list(existing)
    for name, default in template.items():
        if name in entry:
            continue
        if isinstance(default, AutoIncrement):
            entry[name] = default.next_value(name, existing)
        else:
            entry[name] = default.materialize()
    return entry

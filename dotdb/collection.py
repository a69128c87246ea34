"""A named, separately persisted list of documents."""

from __future__ import annotations

import logging
import random as _random
import time
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Iterator, Mapping

from persistence.paths import collection_file

from .config import CollectionConfig
from .errors import (
    AmountExceedsSizeError,
    DocumentNotFoundError,
    InvalidAmountError,
    InvalidEntryError,
    InvalidFilterError,
    InvalidInputError,
    KeyNotFoundError,
    UpdateCallbackError,
)
from .keys import validate_name
from .templates import AutoIncrement, DefaultValue, Literal, apply_template, dump_template, parse_template
from .tree import json_equal

if TYPE_CHECKING:
    from persistence.interfaces import PersistenceProvider

logger = logging.getLogger(__name__)

Entry = dict[str, Any]
Predicate = Callable[[Entry], Any]

CREATED_AT = "createdAt"
UPDATED_AT = "updatedAt"
TIMESTAMP_FIELDS = (CREATED_AT, UPDATED_AT)
DEFAULT_IDENTITY_FIELD = "id"


def _now_ms() -> int:
    return int(time.time() * 1000)


def _match_all(entry: Entry) -> bool:
    return True


def _check_callable(value: Any) -> None:
    if not callable(value):
        raise InvalidFilterError("The provided parameter must be a function")


class Collection:
    """
    Entries live in memory; get*/has/random read the cache and fetch* re-read
    the backing file. Mutations persist when auto_save is on.

    Example:
        posts = db.create_collection("posts", {"$id": 0, "content": "empty"})
        posts.create({"content": "hi"})       # {"content": "hi", "id": 0}
        posts.get(lambda p: p["id"] == 0)     # the same entry
    """

    def __init__(
        self,
        name: str,
        provider: "PersistenceProvider",
        config: CollectionConfig | None = None,
        default_values: Mapping[str, Any] | None = None,
    ):
        validate_name(name)
        self.name = name
        self._provider = provider
        self._config = config or CollectionConfig()
        self._template: dict[str, DefaultValue] = parse_template(default_values)
        self._path = collection_file(self._config.folder_path, name)
        self._entries: list[Entry] = self._read_entries()
        logger.debug("COLLECTION LOAD: %s (%d entries)", self.name, len(self._entries))

    # Introspection

    @property
    def path(self) -> Path:
        return self._path

    @property
    def config(self) -> CollectionConfig:
        return self._config

    @property
    def default_values(self) -> dict[str, Any]:
        return dump_template(self._template)

    @property
    def entries(self) -> int:
        return len(self._entries)

    @property
    def identity_field(self) -> str:
        for name, default in self._template.items():
            if isinstance(default, AutoIncrement):
                return name
        return DEFAULT_IDENTITY_FIELD

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Entry]:
        return iter(list(self._entries))

    def __repr__(self) -> str:
        return f"Collection(name={self.name!r}, entries={len(self._entries)})"

    # Creation

    def create(self, partial: Mapping[str, Any]) -> Entry:
        entry = self._build_entry(partial, self._entries)
        self._entries.append(entry)
        self._autosave()
        return entry

    def create_bulk(self, partials: list[Mapping[str, Any]]) -> list[Entry]:
        if not isinstance(partials, list):
            raise InvalidInputError("The provided parameter must be an array")
        for partial in partials:
            self._check_entry(partial)

        created: list[Entry] = []
        for partial in partials:
            # earlier entries of the same batch count towards auto-increment fields
            created.append(self._build_entry(partial, self._entries + created))
        self._entries.extend(created)
        if created:
            self._autosave()
        return created

    # Reads

    def get(self, predicate: Predicate = _match_all) -> Entry | list[Entry] | None:
        _check_callable(predicate)
        return self._shape(self._filter(self._entries, predicate), explicit=predicate is not _match_all)

    def get_or_create(self, predicate: Predicate, partial: Mapping[str, Any]) -> Entry | list[Entry] | None:
        if not self.has(predicate):
            self.create(partial)
        return self.get(predicate)

    def has(self, predicate: Predicate | None = None) -> bool:
        _check_callable(predicate)
        return any(True for _ in self._iter_matches(self._entries, predicate))

    def fetch(self, predicate: Predicate = _match_all) -> Entry | list[Entry] | None:
        _check_callable(predicate)
        fresh = self._read_entries()
        return self._shape(self._filter(fresh, predicate), explicit=predicate is not _match_all)

    def fetch_or_create(self, predicate: Predicate, partial: Mapping[str, Any]) -> Entry | list[Entry] | None:
        _check_callable(predicate)
        found = self.fetch(predicate)
        if found is None:
            return self.create(partial)
        return found

    def random(self, amount: int = 1) -> Entry | list[Entry]:
        if not isinstance(amount, int) or isinstance(amount, bool) or amount <= 0:
            raise InvalidAmountError("The amount of entries must be a number bigger than 0 (zero)")
        if amount > len(self._entries):
            raise AmountExceedsSizeError(
                "The provided amount of entries exceeds the total amount of entries from the collection"
            )
        sample = _random.sample(self._entries, amount)
        return sample[0] if amount == 1 else sample

    # Mutations

    def remove(self, predicate: Predicate = _match_all) -> list[Entry]:
        _check_callable(predicate)
        removed = self._filter(self._entries, predicate)
        removed_ids = {id(e) for e in removed}
        self._entries = [e for e in self._entries if id(e) not in removed_ids]
        self._autosave()
        return removed

    def reset(self, predicate: Predicate = _match_all) -> list[Entry]:
        literals = {
            name: default
            for name, default in self._template.items()
            if isinstance(default, Literal) and name not in TIMESTAMP_FIELDS
        }

        def _reset(entry: Entry) -> None:
            for name, default in literals.items():
                entry[name] = default.materialize()

        return self.update(_reset, predicate)

    def update(self, update_fn: Callable[[Entry], Any], predicate: Predicate = _match_all) -> list[Entry]:
        _check_callable(update_fn)
        _check_callable(predicate)

        matched = self._filter(self._entries, predicate)
        now = _now_ms()
        for entry in matched:
            if self._config.timestamps:
                entry[UPDATED_AT] = now
            try:
                update_fn(entry)
            except Exception as e:
                raise UpdateCallbackError(self.name, e) from e

        if matched:
            self._autosave()
        return matched

    # Persistence

    def save(self) -> None:
        self._provider.save(self._path, self._entries, self._config.tab_size)
        logger.debug("COLLECTION SAVE: %s (%d entries)", self.name, len(self._entries))

    def save_entry(self, entry_id: Any) -> Entry:
        """
        Persist the collection after changing one entry in place.

        The entry is found by its identity field (the first auto-increment
        field of the template, else "id").
        """
        field = self.identity_field
        for entry in self._entries:
            if field in entry and json_equal(entry[field], entry_id):
                if self._config.timestamps:
                    entry[UPDATED_AT] = _now_ms()
                self.save()
                return entry
        raise KeyNotFoundError(f"{self.name}[{field}={entry_id!r}]")

    # Internals

    def _autosave(self) -> None:
        if self._config.auto_save:
            self.save()

    @staticmethod
    def _check_entry(partial: Any) -> None:
        if not isinstance(partial, Mapping):
            raise InvalidEntryError("Provided entry must be an object")

    def _build_entry(self, partial: Mapping[str, Any], existing: list[Entry]) -> Entry:
        self._check_entry(partial)
        entry = apply_template(self._template, partial, existing)
        if self._config.timestamps:
            now = _now_ms()
            entry[CREATED_AT] = now
            entry[UPDATED_AT] = now
        return entry

    @staticmethod
    def _iter_matches(entries: list[Entry], predicate: Predicate) -> Iterator[Entry]:
        return (e for e in entries if predicate(e))

    def _filter(self, entries: list[Entry], predicate: Predicate) -> list[Entry]:
        return list(self._iter_matches(entries, predicate))

    @staticmethod
    def _shape(matches: list[Entry], *, explicit: bool) -> Entry | list[Entry] | None:
        if not matches:
            return None
        if explicit and len(matches) == 1:
            return matches[0]
        return matches

    def _read_entries(self) -> list[Entry]:
        try:
            data = self._provider.load(self._path)
        except DocumentNotFoundError:
            return []
        if data is None:
            return []
        if not isinstance(data, list):
            logger.warning("COLLECTION LOAD: %s does not hold an array; starting empty", self._path)
            return []
        entries = [e for e in data if isinstance(e, dict)]
        if len(entries) != len(data):
            logger.warning(
                "COLLECTION LOAD: dropped %d non-object items from %s", len(data) - len(entries), self._path
            )
        return entries

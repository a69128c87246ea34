"""The path-addressed JSON document database."""

from __future__ import annotations

import copy
import logging
from typing import TYPE_CHECKING, Any, Callable, Mapping

from . import crypto
from .collection import Collection
from .config import DatabaseConfig
from .errors import (
    DocumentNotFoundError,
    DuplicateCollectionError,
    InvalidFilterError,
    InvalidValueError,
    KeyNotFoundError,
    MissingEncryptionKeyError,
    MissingValueError,
    NotAnArrayError,
    PathConflictError,
    PersistenceError,
    UpdateCallbackError,
)
from .keys import segments, validate_name
from .registry import CollectionRegistry
from .tree import MISSING, get_in, is_finite_number, is_number, json_equal, set_in, unset_in

if TYPE_CHECKING:
    from persistence.interfaces import PersistenceProvider

logger = logging.getLogger(__name__)


def _check_flag(name: str, value: Any) -> None:
    if not isinstance(value, bool):
        raise InvalidValueError(f"Parameter {name} must be of type boolean")


class Database:
    """
    An in-memory JSON object addressed by dotted keys and persisted to one file.

    Mutating operations return the value of the key's top-level segment, e.g.
    set("person.name", "Peter") returns {"name": "Peter"}.

    Example:
        db = Database(DatabaseConfig(data_file="data.json"))
        db.set("person.name", "Peter")
        db.get("person.name")     # "Peter"
        db.to_json()              # {"person": {"name": "Peter"}}
    """

    def __init__(self, config: DatabaseConfig | None = None, provider: "PersistenceProvider | None" = None):
        if provider is None:
            from persistence.disk_store import DiskPersistenceProvider

            provider = DiskPersistenceProvider()

        self._config = config or DatabaseConfig()
        self._provider = provider
        self._collections = CollectionRegistry()
        self._data: dict[str, Any] = {}
        self._data = self._load()

    # Introspection

    @property
    def config(self) -> DatabaseConfig:
        return self._config

    @property
    def version(self) -> str:
        from . import __version__

        return __version__

    @property
    def collections(self) -> list[str]:
        return list(self._collections)

    def __str__(self) -> str:
        return f"[dotdb - {self._config.data_file.name}]"

    def __repr__(self) -> str:
        return f"Database(data_file={str(self._config.data_file)!r})"

    # Reads

    def get(self, key: str, decrypt: bool = False, default: Any = None) -> Any:
        _check_flag("decrypt", decrypt)
        path = segments(key)
        if decrypt:
            encryption_key = self._require_encryption_key()
        value = get_in(self._data, path)
        if value is MISSING:
            return default
        if decrypt:
            return crypto.decrypt(encryption_key, value)
        return copy.deepcopy(value)

    def has(self, key: str) -> bool:
        return get_in(self._data, segments(key)) is not MISSING

    def fetch(self, key: str, default: Any = None) -> Any:
        """Read key from the data file on disk, bypassing the in-memory tree."""
        path = segments(key)
        value = get_in(self._read_file(), path)
        return default if value is MISSING else value

    def filter(self, predicate: Callable[[Any, str], Any]) -> dict[str, Any]:
        """Top-level items for which predicate(value, key) is truthy."""
        if not callable(predicate):
            raise InvalidFilterError("The provided parameter must be a function")
        return {k: copy.deepcopy(v) for k, v in self._data.items() if predicate(v, k)}

    def to_json(self) -> dict[str, Any]:
        return copy.deepcopy(self._data)

    # Writes

    def set(self, key: str, value: Any, encrypt: bool = False) -> Any:
        _check_flag("encrypt", encrypt)
        path = segments(key)
        if encrypt:
            value = crypto.encrypt(self._require_encryption_key(), value)

        existing = get_in(self._data, path)
        if existing is not MISSING and json_equal(existing, value):
            logger.debug("DB SET: %s unchanged; skipping write", key)
            return self._top(path)

        # stored values are private copies
        set_in(self._data, path, copy.deepcopy(value), strict=self._config.strict_paths, key=key)
        self._autosave()
        return self._top(path)

    def delete(self, key: str) -> bool:
        path = segments(key)
        removed = unset_in(self._data, path)
        if removed:
            self._autosave()
        return removed and get_in(self._data, path) is MISSING

    def add(self, key: str, value: int | float) -> Any:
        return self._add_or_subtract(key, value, 1)

    def subtract(self, key: str, value: int | float) -> Any:
        return self._add_or_subtract(key, value, -1)

    def push(self, key: str, value: Any = MISSING) -> Any:
        items = self._array_at(key, value)
        return self.set(key, items + [value])

    def pull(self, key: str, value: Any = MISSING) -> Any:
        items = self._array_at(key, value)
        return self.set(key, [item for item in items if not json_equal(item, value)])

    def rename(self, key: str, new_name: str) -> Any:
        path = segments(key)
        validate_name(new_name, dotted=True)
        new_path = new_name.split(".")

        value = get_in(self._data, path)
        if value is MISSING:
            raise KeyNotFoundError(key)
        if new_path == path:
            return self._top(path)

        # detach first so the value can move below or above its old location
        unset_in(self._data, path)
        try:
            set_in(self._data, new_path, value, strict=self._config.strict_paths, key=new_name)
        except PathConflictError:
            set_in(self._data, path, value)
            raise
        self._autosave()
        return self._top(new_path)

    def update(self, key: str, callback: Callable[[Any], Any]) -> Any:
        path = segments(key)
        if not callable(callback):
            raise InvalidFilterError("The provided callback must be a function")

        value = get_in(self._data, path)
        if value is MISSING:
            raise KeyNotFoundError(key)

        try:
            result = callback(value)
        except Exception as e:
            raise UpdateCallbackError(key, e) from e

        # mappings are edited in place; so is a list the callback hands back
        if isinstance(value, dict) or (isinstance(value, list) and result is value):
            self._autosave()
            return self._top(path)
        return self.set(key, result)

    def clear(self) -> None:
        self._data = {}
        self._autosave()

    def save(self) -> None:
        self._provider.save(self._config.data_file, self._data, self._config.tab_size)
        logger.debug("DB SAVE: %s", self._config.data_file)

    # Collections

    def create_collection(self, name: str, default_values: Mapping[str, Any] | None = None) -> Collection:
        validate_name(name)
        if name in self._collections:
            # checked before constructing so the backing file is not read twice
            raise DuplicateCollectionError(name)

        self._provider.ensure_directory(self._config.collections_folder)
        collection = Collection(
            name,
            self._provider,
            config=self._config.collection_config(),
            default_values=default_values,
        )
        self._collections.register(collection)
        logger.info("COLLECTION CREATE: %s (%d entries)", name, len(collection))
        return collection

    def get_collection(self, name: str) -> Collection | None:
        return self._collections.get(name)

    def delete_collection(self, name: str) -> bool:
        collection = self._collections.remove(name)
        if collection is None:
            return False
        try:
            self._provider.delete(collection.path)
        except PersistenceError as e:
            logger.warning("COLLECTION DELETE: failed to remove %s: %r", collection.path, e)
        logger.info("COLLECTION DELETE: %s", name)
        return True

    # Internals

    def _autosave(self) -> None:
        if self._config.auto_save:
            self.save()

    def _top(self, path: list[str]) -> Any:
        return copy.deepcopy(self._data.get(path[0]))

    def _require_encryption_key(self) -> str:
        if not self._config.encryption_key:
            raise MissingEncryptionKeyError()
        return self._config.encryption_key

    def _add_or_subtract(self, key: str, value: Any, sign: int) -> Any:
        path = segments(key)
        if not is_finite_number(value):
            raise InvalidValueError("A valid value must be provided")

        existing = get_in(self._data, path)
        if existing is MISSING or existing is None:
            existing = 0
        elif not is_number(existing):
            raise InvalidValueError("The value from the provided key is not a number")

        try:
            total = existing + sign * value
        except OverflowError:
            raise InvalidValueError("The result is not a finite number") from None
        if not is_finite_number(total):
            raise InvalidValueError("The result is not a finite number")
        return self.set(key, total)

    def _array_at(self, key: str, value: Any) -> list[Any]:
        path = segments(key)
        if value is MISSING:
            raise MissingValueError("A value must be provided")
        existing = get_in(self._data, path)
        if existing is MISSING:
            return []
        if not isinstance(existing, list):
            raise NotAnArrayError(key)
        return existing

    def _read_file(self) -> Any:
        try:
            return self._provider.load(self._config.data_file)
        except DocumentNotFoundError:
            return None

    def _load(self) -> dict[str, Any]:
        data = self._read_file()
        if isinstance(data, dict):
            logger.debug("DB LOAD: %s (%d top-level keys)", self._config.data_file, len(data))
            return data
        if data is not None:
            logger.warning("DB LOAD: %s does not hold an object; resetting to {}", self._config.data_file)
        else:
            logger.debug("DB LOAD: %s is missing or empty; starting empty", self._config.data_file)
        if data is not None and self._config.auto_save:
            self.save()
        return {}

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from dotdb.errors import AccessDeniedError, DocumentNotFoundError, PersistenceError
from json_store import atomic_write_json, read_json

from .interfaces import PersistenceProvider
from .locks import GLOBAL_PATH_LOCKS, PathLockRegistry
from .paths import ensure_dir

logger = logging.getLogger(__name__)


class DiskPersistenceProvider(PersistenceProvider):
    """
    Stores each JSON tree in its own file.

    - load() returns None for an empty file and raises DocumentNotFoundError if missing.
    - save() writes atomically (temp file + replace) under a per-path lock.
    """

    def __init__(self, locks: PathLockRegistry | None = None):
        self._locks = locks or GLOBAL_PATH_LOCKS

    def load(self, path: Path) -> Any:
        path = Path(path)
        with self._locks.lock_for(path):
            try:
                data = read_json(path)
            except FileNotFoundError as e:
                raise DocumentNotFoundError(path) from e
            except PermissionError as e:
                raise AccessDeniedError(path) from e
            except json.JSONDecodeError as e:
                raise PersistenceError(path, f"The file is not valid JSON ({e.msg})") from e
            except (OSError, UnicodeDecodeError) as e:
                raise PersistenceError(path, f"The file could not be read ({e})") from e
        logger.debug("DISK LOAD: %s", path)
        return data

    def save(self, path: Path, tree: Any, indent: int = 0) -> None:
        path = Path(path)
        with self._locks.lock_for(path):
            try:
                atomic_write_json(path, tree, indent=indent)
            except PermissionError as e:
                raise AccessDeniedError(path) from e
            except (OSError, TypeError, ValueError) as e:
                raise PersistenceError(path, f"The file could not be written ({e})") from e
        logger.debug("DISK SAVE: %s", path)

    def ensure_directory(self, path: Path) -> Path:
        path = Path(path)
        try:
            return ensure_dir(path)
        except PermissionError as e:
            raise AccessDeniedError(path) from e
        except OSError as e:
            raise PersistenceError(path, f"The directory could not be created ({e})") from e

    def delete(self, path: Path) -> bool:
        path = Path(path)
        with self._locks.lock_for(path):
            try:
                path.unlink()
            except FileNotFoundError:
                return False
            except PermissionError as e:
                raise AccessDeniedError(path) from e
            except OSError as e:
                raise PersistenceError(path, f"The file could not be deleted ({e})") from e
        self._locks.discard(path)
        logger.debug("DISK DELETE: %s", path)
        return True

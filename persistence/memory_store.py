"""In-memory persistence provider for tests and throwaway databases."""

from __future__ import annotations

import copy
from collections import Counter
from pathlib import Path
from typing import Any

from dotdb.errors import DocumentNotFoundError

from .interfaces import PersistenceProvider


class MemoryPersistenceProvider(PersistenceProvider):
    """
    Keeps deep copies of saved trees keyed by path. Data is lost when the
    provider is garbage collected.

    Example:
        provider = MemoryPersistenceProvider()
        db = Database(DatabaseConfig(), provider=provider)
        db.set("a", 1)
        provider.writes(db.config.data_file)  # 1
    """

    def __init__(self, files: dict[Path | str, Any] | None = None):
        self._files: dict[str, Any] = {}
        self._writes: Counter[str] = Counter()
        for path, tree in (files or {}).items():
            self._files[self._key(path)] = copy.deepcopy(tree)

    @staticmethod
    def _key(path: Path | str) -> str:
        return str(Path(path))

    def load(self, path: Path) -> Any:
        key = self._key(path)
        if key not in self._files:
            raise DocumentNotFoundError(path)
        return copy.deepcopy(self._files[key])

    def save(self, path: Path, tree: Any, indent: int = 0) -> None:
        key = self._key(path)
        self._files[key] = copy.deepcopy(tree)
        self._writes[key] += 1

    def ensure_directory(self, path: Path) -> Path:
        return Path(path)

    def delete(self, path: Path) -> bool:
        key = self._key(path)
        if key not in self._files:
            return False
        del self._files[key]
        return True

    def exists(self, path: Path | str) -> bool:
        return self._key(path) in self._files

    def writes(self, path: Path | str) -> int:
        """Number of save() calls for path."""
        return self._writes[self._key(path)]

from __future__ import annotations

from pathlib import Path
from typing import Any, Protocol


class PersistenceProvider(Protocol):
    """
    Loads and saves whole JSON trees by path. Failures surface as
    dotdb.errors.PersistenceError subclasses.
    """

    def load(self, path: Path) -> Any:
        """Return the stored tree, or None for an empty file. Raises DocumentNotFoundError if absent."""
        ...

    def save(self, path: Path, tree: Any, indent: int = 0) -> None:
        """Persist the full tree atomically."""
        ...

    def ensure_directory(self, path: Path) -> Path:
        """Create the directory (and parents) if needed."""
        ...

    def delete(self, path: Path) -> bool:
        """Remove the stored tree; True if something was removed."""
        ...

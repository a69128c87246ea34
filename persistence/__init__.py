from __future__ import annotations

from .disk_store import DiskPersistenceProvider
from .interfaces import PersistenceProvider
from .locks import GLOBAL_PATH_LOCKS, PathLockRegistry
from .memory_store import MemoryPersistenceProvider

__all__ = [
    "PersistenceProvider",
    "DiskPersistenceProvider",
    "MemoryPersistenceProvider",
    "PathLockRegistry",
    "GLOBAL_PATH_LOCKS",
]

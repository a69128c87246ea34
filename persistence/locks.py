from __future__ import annotations

import threading
from pathlib import Path


class PathLockRegistry:
    """
    Hands out one lock per resolved file path so writes to different
    files never wait on each other.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.RLock] = {}

    @staticmethod
    def _key(path: Path) -> str:
        return str(Path(path).resolve())

    def lock_for(self, path: Path) -> threading.RLock:
        key = self._key(path)
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.RLock()
                self._locks[key] = lock
            return lock

    def discard(self, path: Path) -> None:
        with self._guard:
            self._locks.pop(self._key(path), None)


GLOBAL_PATH_LOCKS = PathLockRegistry()

from __future__ import annotations

from pathlib import Path
import sys


import pytest


# Ensure the repository root (parent of ./tests) is importable during pytest collection.
# This avoids ModuleNotFoundError for imports like `import persistence...` under pytest import modes
# that don't automatically prepend the cwd/rootdir to sys.path.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

ENCRYPTION_KEY = "0123456789abcdef0123456789abcdef"


@pytest.fixture
def sandbox_project(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """
    Point every DOTDB_* setting at a temp project directory so tests never touch real files.
    """
    monkeypatch.setenv("DOTDB_DATA_FILE", str(tmp_path / "database.json"))
    monkeypatch.setenv("DOTDB_COLLECTIONS_FOLDER", str(tmp_path / "collections"))
    monkeypatch.setenv("DOTDB_ENCRYPTION_KEY", ENCRYPTION_KEY)
    for name in ("DOTDB_AUTO_SAVE", "DOTDB_TAB_SIZE", "DOTDB_COLLECTION_TIMESTAMPS", "DOTDB_STRICT_PATHS"):
        monkeypatch.delenv(name, raising=False)
    return tmp_path


@pytest.fixture
def memory_provider():
    from persistence.memory_store import MemoryPersistenceProvider

    return MemoryPersistenceProvider()


@pytest.fixture
def memory_db(memory_provider):
    """Auto-saving database backed by an in-memory provider."""
    from dotdb import Database, DatabaseConfig

    return Database(DatabaseConfig(encryption_key=ENCRYPTION_KEY), provider=memory_provider)


@pytest.fixture
def disk_db(tmp_path: Path):
    from dotdb import Database, DatabaseConfig

    config = DatabaseConfig(
        data_file=tmp_path / "database.json",
        collections_folder=tmp_path / "collections",
        encryption_key=ENCRYPTION_KEY,
    )
    return Database(config)


@pytest.fixture
def frozen_clock(monkeypatch: pytest.MonkeyPatch) -> int:
    import dotdb.collection as collection_module

    now = 1_700_000_000_000
    monkeypatch.setattr(collection_module, "_now_ms", lambda: now)
    return now


@pytest.fixture
def reload_endpoints(sandbox_project: Path):
    """
    The router caches one Database per process; drop it after sandboxing paths.
    """
    from endpoints import data_endpoints

    data_endpoints.reset_database()
    yield
    data_endpoints.reset_database()

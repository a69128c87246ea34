from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotdb.config import DatabaseConfig


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return int(raw.strip())


@dataclass(frozen=True)
class Settings:
    # Files
    data_file: Path
    collections_folder: Path

    # Behaviour
    auto_save: bool
    tab_size: int
    collection_timestamps: bool
    strict_paths: bool

    # Optional 32-character key for encrypted values
    encryption_key: str | None

    # Logging
    log_level: int

    def to_config(self) -> DatabaseConfig:
        return DatabaseConfig(
            data_file=self.data_file,
            collections_folder=self.collections_folder,
            auto_save=self.auto_save,
            encryption_key=self.encryption_key,
            tab_size=self.tab_size,
            collection_timestamps=self.collection_timestamps,
            strict_paths=self.strict_paths,
        )


def get_settings() -> Settings:
    data_file = Path(os.getenv("DOTDB_DATA_FILE", "database.json"))
    collections_folder = Path(os.getenv("DOTDB_COLLECTIONS_FOLDER", "collections"))

    auto_save = _env_bool("DOTDB_AUTO_SAVE", True)
    tab_size = _env_int("DOTDB_TAB_SIZE", 2)
    collection_timestamps = _env_bool("DOTDB_COLLECTION_TIMESTAMPS", False)
    strict_paths = _env_bool("DOTDB_STRICT_PATHS", False)

    # Empty means "no encryption"; set DOTDB_ENCRYPTION_KEY in local.env, not in code.
    encryption_key = os.getenv("DOTDB_ENCRYPTION_KEY") or None

    level_name = os.getenv("DOTDB_LOG_LEVEL", "INFO").strip().upper()
    log_level = logging.getLevelName(level_name)
    if not isinstance(log_level, int):
        log_level = logging.INFO

    return Settings(
        data_file=data_file,
        collections_folder=collections_folder,
        auto_save=auto_save,
        tab_size=tab_size,
        collection_timestamps=collection_timestamps,
        strict_paths=strict_paths,
        encryption_key=encryption_key,
        log_level=log_level,
    )

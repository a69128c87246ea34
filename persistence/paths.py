from __future__ import annotations

from pathlib import Path

COLLECTION_SUFFIX = ".json"


def ensure_dir(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    return path


def collection_file(folder: Path, name: str) -> Path:
    # collections/<name>.json
    return Path(folder) / f"{name}{COLLECTION_SUFFIX}"

from __future__ import annotations

import json
from pathlib import Path
from typing import Any


def read_json(path: Path) -> Any | None:
    """
    Read JSON from disk.

    Returns None for empty files. Missing or unreadable files raise the
    underlying OSError; malformed JSON raises json.JSONDecodeError.
    """
    raw = path.read_text(encoding="utf-8")
    if not raw.strip():
        return None
    return json.loads(raw)


def atomic_write_json(path: Path, payload: Any, *, indent: int | None = 2, sort_keys: bool = False) -> None:
    """
    Atomically write JSON to disk by writing to a temp file then replacing.

    indent=0 (or None) writes compact JSON on a single line.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    try:
        with tmp_path.open("w", encoding="utf-8") as f:
            if indent:
                json.dump(payload, f, indent=indent, sort_keys=sort_keys, ensure_ascii=False)
            else:
                json.dump(payload, f, separators=(",", ":"), sort_keys=sort_keys, ensure_ascii=False)
            f.write("\n")
        tmp_path.replace(path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise

from __future__ import annotations
import json
import pathlib

def atomic_json(path: str | pathlib.Path, data) -> None:
    """Write JSON next to *path* as .tmp, then swap it into place."""
    path = pathlib.Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    with tmp.open("w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)
    tmp.replace(path)

"""
File helpers: JSON, JSONL and plain text writers plus SHA256 checksums.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any, Iterable

from tqdm import tqdm


def ensure_dir(path: Path) -> Path:
    """Create a directory (and parents) if it does not exist."""
    path.mkdir(parents=True, exist_ok=True)
    return path


def write_json(path: Path, data: Any) -> None:
    """Write pretty-printed JSON with a trailing newline."""
    ensure_dir(path.parent)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
        f.write("\n")


def read_json(path: Path) -> Any:
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def write_text(path: Path, content: str) -> None:
    ensure_dir(path.parent)
    with open(path, "w", encoding="utf-8") as f:
        f.write(content)


def write_jsonl(
    path: Path,
    rows: Iterable[dict[str, Any]],
    desc: str | None = None,
    progress: bool = False,
) -> int:
    """
    Write one JSON object per line.

    Rows are streamed, so the whole file is never held as one string.

    Returns:
        Number of rows written.
    """
    ensure_dir(path.parent)
    count = 0
    with open(path, "w", encoding="utf-8") as f:
        for row in tqdm(rows, desc=desc or path.name, disable=not progress):
            f.write(json.dumps(row, ensure_ascii=False) + "\n")
            count += 1
    return count


def hash_string(text: str) -> str:
    """Hex SHA256 of a UTF-8 string."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def sha256_file(path: Path) -> str:
    """Hex SHA256 of a file, read in chunks."""
    sha256_hash = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(4096), b""):
            sha256_hash.update(chunk)
    return sha256_hash.hexdigest()

"""
Input fingerprints for up-to-date checks.

Files are tracked by path relative to their root directory plus a
SHA-256 of their content, so moving a whole repository elsewhere does
not invalidate a task but changing any member file does.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any, Iterable

_CHUNK = 1024 * 1024


def hash_file(path: Path) -> str:
    """SHA-256 hex digest of a file's content."""
    digest = hashlib.sha256()
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(_CHUNK), b""):
            digest.update(chunk)
    return digest.hexdigest()


def directory_entries(root: Path) -> list[tuple[str, str]]:
    """(relative posix path, content hash) for every file under ``root``.

    A missing directory is treated as empty.
    """
    if not root.is_dir():
        return []
    entries = []
    for path in sorted(p for p in root.rglob("*") if p.is_file()):
        entries.append((path.relative_to(root).as_posix(), hash_file(path)))
    return entries


def file_collection_entries(roots: Iterable[Path]) -> list[list[tuple[str, str]]]:
    """Entries for each root of a file collection, in collection order.

    Directories are flattened to their member files; a plain file is
    tracked by its name; a missing path contributes an empty list.
    """
    result = []
    for root in roots:
        if root.is_dir():
            result.append(directory_entries(root))
        elif root.is_file():
            result.append([(root.name, hash_file(root))])
        else:
            result.append([])
    return result


def combine(**parts: Any) -> str:
    """Stable hash over named, JSON-serializable fingerprint parts."""
    payload = json.dumps(parts, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()

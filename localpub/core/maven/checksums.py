"""
Checksum sidecar files (.md5, .sha1, .sha256, .sha512).
"""

from __future__ import annotations

import hashlib
from pathlib import Path

ALGORITHMS = ("md5", "sha1", "sha256", "sha512")


def digest_bytes(data: bytes, algorithm: str) -> str:
    return hashlib.new(algorithm, data).hexdigest()


def write_checksums(path: Path) -> list[Path]:
    """Write one sidecar per algorithm next to ``path``.

    Returns:
        The sidecar paths, in ALGORITHMS order.
    """
    data = path.read_bytes()
    written = []
    for algorithm in ALGORITHMS:
        sidecar = path.with_name(f"{path.name}.{algorithm}")
        sidecar.write_text(digest_bytes(data, algorithm), encoding="utf-8")
        written.append(sidecar)
    return written

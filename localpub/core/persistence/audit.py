"""
Build ledger.

``localpub run`` appends one JSON object per line to
``<build root>/.state/audit.ndjson``: the requested task paths, the
outcome counts and the messages of tasks that failed. Lines are only
ever appended.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from datetime import UTC, datetime
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

LEDGER_DIR_NAME = ".state"
LEDGER_FILE_NAME = "audit.ndjson"


def ledger_path(build_root: Path) -> Path:
    return build_root / LEDGER_DIR_NAME / LEDGER_FILE_NAME


class AuditEntry(BaseModel):
    """One build invocation as recorded in the ledger."""

    timestamp: str = Field(default_factory=lambda: datetime.now(UTC).isoformat())
    operation_id: str = ""
    operation_type: str = "run"
    requested: list[str] = Field(default_factory=list)
    projects_affected: list[str] = Field(default_factory=list)

    status: str = ""
    tasks_total: int = 0
    tasks_executed: int = 0
    tasks_up_to_date: int = 0
    tasks_failed: int = 0
    errors: list[str] = Field(default_factory=list)


class AuditWriter:
    """Appends to and reads back one ledger file.

    Pass either an explicit ``path`` or the ``build_root`` whose
    ``.state/audit.ndjson`` should be used.
    """

    def __init__(self, path: Path | None = None, build_root: Path | None = None):
        if path is None:
            path = ledger_path(build_root if build_root is not None else Path("."))
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def write(self, entry: AuditEntry) -> None:
        # Ledger failures are logged, never raised
        line = entry.model_dump_json() + "\n"
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open("a", encoding="utf-8") as fh:
                fh.write(line)
        except OSError as e:
            logger.error("Cannot append to ledger %s: %s", self._path, e)
            return
        logger.debug("Ledger: %s %s (%s)", entry.operation_id, entry.status, self._path)

    def read_all(self) -> list[AuditEntry]:
        """Every readable entry, oldest first."""
        return list(self._entries())

    def read_recent(self, n: int = 20) -> list[AuditEntry]:
        return self.read_all()[-n:]

    def _entries(self) -> Iterator[AuditEntry]:
        if not self._path.is_file():
            return
        with self._path.open(encoding="utf-8") as fh:
            for lineno, raw in enumerate(fh, start=1):
                if not raw.strip():
                    continue
                try:
                    yield AuditEntry.model_validate(json.loads(raw))
                except (ValueError, ValidationError) as e:
                    logger.warning("%s:%d: skipping unreadable ledger line (%s)", self._path, lineno, e)

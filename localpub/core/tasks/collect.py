"""
CollectTask — list the local repository and all resolved snapshot
repositories as one set of output directories.

Nothing is copied or merged: the result is simply "these directories,
together, hold every artifact". Order is local first, then externals in
resolution order, without de-duplication.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Callable

from localpub.core.errors import PropertyNotSetError
from localpub.core.files import FileCollection
from localpub.core.tasks.base import Task
from localpub.core.tasks.fingerprint import combine, directory_entries, file_collection_entries

if TYPE_CHECKING:
    from localpub.core.project import Project

logger = logging.getLogger(__name__)


class CollectTask(Task):
    """Cacheable aggregation of local and external repositories.

    ``local`` wins over ``local_convention``; the convention is read
    lazily so it follows later changes to the extension.
    """

    cacheable = True

    def __init__(self, name: str, project: Project):
        super().__init__(name, project)
        self.local: Path | None = None
        self.local_convention: Callable[[], Path] | None = None
        self.externals = FileCollection()
        self.repositories: list[Path] = []

    def local_directory(self) -> Path:
        if self.local is not None:
            return self.local
        if self.local_convention is not None:
            return self.local_convention()
        raise PropertyNotSetError(self.path, "local")

    def fingerprint_inputs(self) -> str | None:
        # Locations are inputs too: a moved repository must be re-collected
        local = self.local_directory()
        externals = self.externals.files()
        return combine(
            local_path=str(local),
            external_paths=[str(p) for p in externals],
            local=directory_entries(local),
            externals=file_collection_entries(externals),
        )

    def outputs(self) -> list[Path]:
        return list(self.repositories)

    def restore_outputs(self, outputs: list[Path]) -> None:
        self.repositories = list(outputs)

    def run(self) -> str | None:
        self.repositories = []
        self.repositories.append(self.local_directory())
        self.repositories.extend(self.externals.files())
        logger.info(
            "%s collected %d repositories", self.path, len(self.repositories)
        )
        return "\n".join(str(p) for p in self.repositories)

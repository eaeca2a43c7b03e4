"""
PublishToMavenRepository — write one publication to one repository.

Cacheable: the fingerprint covers the target repository directory,
the coordinates, every artifact's content and the rendered POM, so an
unchanged publication is not rewritten (and maven-metadata.xml keeps
its lastUpdated stamp).
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from localpub.core.maven import layout
from localpub.core.maven.pom import render_pom
from localpub.core.maven.publisher import publish_to_repository
from localpub.core.models.publication import MavenPublication
from localpub.core.tasks.base import Task
from localpub.core.tasks.fingerprint import combine, hash_file

if TYPE_CHECKING:
    from localpub.core.project import Project
    from localpub.core.publishing import MavenRepository, PublicationContainer


class PublishToMavenRepository(Task):
    cacheable = True

    def __init__(
        self,
        name: str,
        project: Project,
        publication: MavenPublication,
        repository: MavenRepository,
        publications: PublicationContainer,
    ):
        super().__init__(name, project)
        self.publication = publication
        self.repository = repository
        self._publications = publications

    def finalized_publication(self) -> MavenPublication:
        return self._publications.finalize(self.publication)

    def fingerprint_inputs(self) -> str | None:
        pub = self.finalized_publication()
        artifacts = [
            (a.classifier, a.effective_extension, hash_file(a.file) if a.file.is_file() else "")
            for a in pub.artifacts
        ]
        return combine(
            repository=str(self.repository.path()),
            coordinates=pub.coordinates,
            artifacts=artifacts,
            pom=render_pom(pub),
        )

    def outputs(self) -> list[Path]:
        pub = self.finalized_publication()
        return [
            layout.version_dir(
                self.repository.path(), pub.group_id, pub.artifact_id, pub.version
            )
        ]

    def run(self) -> str | None:
        pub = self.finalized_publication()
        result = publish_to_repository(pub, self.repository.path())
        return f"{pub.coordinates} → {result.version_dir}"

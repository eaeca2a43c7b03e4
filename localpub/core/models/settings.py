"""
Build settings — the schema of build.yml.

This is the declarative way to describe a multi-project build. The
loader validates YAML against these models and then materializes
Project objects with the local publishing plugin applied.

    name: linter
    projects:
      - name: core
        path: core
        publication:
          group_id: org.example
          artifact_id: core
          version: 1.0.0
          artifacts:
            - file: dist/core.jar
        local_publication:
          metadata:
            group_id: org.example
      - name: cli
        path: cli
        snapshots: [core]
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from localpub.core.constants import LOCAL_ARTIFACT_KEY
from localpub.core.models.metadata import (
    PublicationDeveloper,
    PublicationLicense,
    PublicationMetadata,
    PublicationSourceControlManagement,
)


class ArtifactSettings(BaseModel):
    """An artifact file, relative to the project directory."""

    file: str
    classifier: str = ""
    extension: str = ""


class PublicationSettings(BaseModel):
    """A Maven publication declared for a project."""

    name: str = "maven"
    group_id: str = ""
    artifact_id: str = ""
    version: str = ""
    pom_name: str | None = None
    packaging: str = ""
    artifacts: list[ArtifactSettings] = Field(default_factory=list)


class LocalPublicationSettings(BaseModel):
    """The ``local_publication`` block, mirroring the extension."""

    artifact_key: str = LOCAL_ARTIFACT_KEY
    repository_path: str | None = None  # relative to the project directory

    metadata: PublicationMetadata = Field(default_factory=PublicationMetadata)
    license: PublicationLicense = Field(default_factory=PublicationLicense)
    developer: PublicationDeveloper = Field(default_factory=PublicationDeveloper)
    scm: PublicationSourceControlManagement = Field(
        default_factory=PublicationSourceControlManagement
    )


class ProjectSettings(BaseModel):
    """A build unit declared in build.yml."""

    name: str
    path: str = ""                   # directory relative to the build root
    build_dir: str | None = None     # relative to the project directory
    description: str = ""

    publications: list[PublicationSettings] = Field(default_factory=list)
    publication: PublicationSettings | None = None
    local_publication: LocalPublicationSettings = Field(
        default_factory=LocalPublicationSettings
    )
    snapshots: list[str] = Field(default_factory=list)  # project names

    @property
    def all_publications(self) -> list[PublicationSettings]:
        """Single ``publication`` shorthand plus the ``publications`` list."""
        pubs = list(self.publications)
        if self.publication is not None:
            pubs.insert(0, self.publication)
        return pubs

    @property
    def directory(self) -> str:
        return self.path or self.name


class BuildSettings(BaseModel):
    """Root of build.yml."""

    version: int = 1

    name: str
    description: str = ""
    projects: list[ProjectSettings] = Field(default_factory=list)

    def get_project(self, name: str) -> ProjectSettings | None:
        """Look up a project declaration by name."""
        for proj in self.projects:
            if proj.name == name:
                return proj
        return None

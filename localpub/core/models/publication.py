"""
Maven publication models — coordinates, artifacts and the POM descriptor.

A publication is what the publish step writes into a repository: a
set of artifact files plus a POM. The POM descriptor is filled by the
metadata attachment step before it is serialized.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field


class PublicationArtifact(BaseModel):
    """A file published under the publication's coordinates."""

    file: Path
    classifier: str = ""
    extension: str = ""

    @property
    def effective_extension(self) -> str:
        """Explicit extension, or the file suffix without the dot."""
        return self.extension or self.file.suffix.lstrip(".") or "jar"


class PomLicense(BaseModel):
    name: str = ""
    url: str = ""
    distribution: str = ""


class PomDeveloper(BaseModel):
    id: str = ""
    name: str = ""
    organization: str = ""
    organization_url: str = ""


class PomScm(BaseModel):
    connection: str = ""
    developer_connection: str = ""
    url: str = ""


class PomDescriptor(BaseModel):
    """The ``<project>`` descriptive fields of a POM.

    ``name`` is None until something sets it, which is how "already
    present" is detected. No default is derived from the publication or
    project name: an unnamed publication takes ``metadata.name`` at
    finalization, which is ``""`` unless configured. The other fields
    are plain strings.
    """

    name: str | None = None
    description: str = ""
    url: str = ""
    packaging: str = ""

    licenses: list[PomLicense] = Field(default_factory=list)
    developers: list[PomDeveloper] = Field(default_factory=list)
    scm: PomScm | None = None

    @property
    def has_name(self) -> bool:
        return self.name is not None


class MavenPublication(BaseModel):
    """A named Maven publication with its coordinates."""

    name: str
    group_id: str = ""
    artifact_id: str = ""
    version: str = ""

    artifacts: list[PublicationArtifact] = Field(default_factory=list)
    pom: PomDescriptor = Field(default_factory=PomDescriptor)

    @property
    def coordinates(self) -> str:
        return f"{self.group_id}:{self.artifact_id}:{self.version}"

    def artifact(self, file: Path | str, classifier: str = "", extension: str = "") -> PublicationArtifact:
        """Add an artifact file to this publication."""
        artifact = PublicationArtifact(file=Path(file), classifier=classifier, extension=extension)
        self.artifacts.append(artifact)
        return artifact

"""
Repository writer — materialize a publication in a Maven layout.

The writer copies artifact files, writes the POM, adds checksum
sidecars for every file and merges the artifact's maven-metadata.xml.
It does no locking: the build graph guarantees a single writer per
repository directory.
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path

from localpub.core.errors import PublicationValidationError
from localpub.core.maven import layout
from localpub.core.maven.checksums import write_checksums
from localpub.core.maven.pom import render_pom
from localpub.core.maven.repository_metadata import merge_metadata
from localpub.core.models.publication import MavenPublication

logger = logging.getLogger(__name__)


@dataclass
class PublishResult:
    """Files written by one publish."""

    coordinates: str = ""
    version_dir: Path | None = None
    files: list[Path] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "coordinates": self.coordinates,
            "version_dir": str(self.version_dir) if self.version_dir else None,
            "files": [str(f) for f in self.files],
        }


def validate_publication(publication: MavenPublication) -> None:
    """Check that coordinates and artifact files are usable.

    Raises:
        PublicationValidationError: On the first problem found.
    """
    for label, value in (
        ("groupId", publication.group_id),
        ("artifactId", publication.artifact_id),
        ("version", publication.version),
    ):
        if not value.strip():
            raise PublicationValidationError(
                f"Publication '{publication.name}': {label} cannot be empty"
            )

    seen: set[tuple[str, str]] = set()
    for artifact in publication.artifacts:
        if not artifact.file.is_file():
            raise PublicationValidationError(
                f"Publication '{publication.name}': artifact file not found: {artifact.file}"
            )
        key = (artifact.classifier, artifact.effective_extension)
        if key in seen:
            raise PublicationValidationError(
                f"Publication '{publication.name}': multiple artifacts with "
                f"classifier '{artifact.classifier}' and extension '{artifact.effective_extension}'"
            )
        seen.add(key)


def publish_to_repository(publication: MavenPublication, repository: Path) -> PublishResult:
    """Write ``publication`` under ``repository``.

    The POM must already be finalized; it is serialized as-is.
    """
    validate_publication(publication)

    group, artifact_id, version = (
        publication.group_id, publication.artifact_id, publication.version,
    )
    target = layout.version_dir(repository, group, artifact_id, version)
    target.mkdir(parents=True, exist_ok=True)
    result = PublishResult(coordinates=publication.coordinates, version_dir=target)

    for artifact in publication.artifacts:
        dest = target / layout.artifact_file_name(
            artifact_id, version, artifact.effective_extension, artifact.classifier
        )
        shutil.copyfile(artifact.file, dest)
        result.files.append(dest)
        result.files.extend(write_checksums(dest))

    pom_path = target / layout.pom_file_name(artifact_id, version)
    pom_path.write_text(render_pom(publication), encoding="utf-8")
    result.files.append(pom_path)
    result.files.extend(write_checksums(pom_path))

    meta_path = layout.metadata_path(repository, group, artifact_id)
    merge_metadata(meta_path, group, artifact_id, version)
    result.files.append(meta_path)
    result.files.extend(write_checksums(meta_path))

    logger.info("Published %s to %s", publication.coordinates, repository)
    return result

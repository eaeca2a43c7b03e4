"""
maven-metadata.xml — the per-artifact version index.

Each publish merges its version into the existing index: the versions
list keeps first-seen order, ``latest`` is the version just published
and ``release`` is updated for non-SNAPSHOT versions only.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path

logger = logging.getLogger(__name__)

SNAPSHOT_SUFFIX = "-SNAPSHOT"


@dataclass
class ArtifactMetadata:
    """Parsed content of a maven-metadata.xml file."""

    group_id: str
    artifact_id: str
    versions: list[str] = field(default_factory=list)
    latest: str = ""
    release: str = ""
    last_updated: str = ""

    def add_version(self, version: str) -> None:
        if version not in self.versions:
            self.versions.append(version)
        self.latest = version
        if not version.endswith(SNAPSHOT_SUFFIX):
            self.release = version
        self.last_updated = datetime.now(UTC).strftime("%Y%m%d%H%M%S")


def read_metadata(path: Path, group_id: str, artifact_id: str) -> ArtifactMetadata:
    """Read an existing index, or return an empty one.

    A corrupt file is replaced rather than failing the publish.
    """
    meta = ArtifactMetadata(group_id=group_id, artifact_id=artifact_id)
    if not path.is_file():
        return meta
    try:
        root = ET.parse(path).getroot()
    except ET.ParseError as e:
        logger.warning("Corrupt %s: %s — rewriting", path, e)
        return meta

    versioning = root.find("versioning")
    if versioning is None:
        return meta
    meta.latest = versioning.findtext("latest", default="")
    meta.release = versioning.findtext("release", default="")
    meta.last_updated = versioning.findtext("lastUpdated", default="")
    meta.versions = [
        v.text for v in versioning.findall("versions/version") if v.text
    ]
    return meta


def render_metadata(meta: ArtifactMetadata) -> str:
    root = ET.Element("metadata")
    ET.SubElement(root, "groupId").text = meta.group_id
    ET.SubElement(root, "artifactId").text = meta.artifact_id
    versioning = ET.SubElement(root, "versioning")
    if meta.latest:
        ET.SubElement(versioning, "latest").text = meta.latest
    if meta.release:
        ET.SubElement(versioning, "release").text = meta.release
    versions = ET.SubElement(versioning, "versions")
    for version in meta.versions:
        ET.SubElement(versions, "version").text = version
    ET.SubElement(versioning, "lastUpdated").text = meta.last_updated
    ET.indent(root, space="  ")
    body = ET.tostring(root, encoding="unicode")
    return f'<?xml version="1.0" encoding="UTF-8"?>\n{body}\n'


def merge_metadata(path: Path, group_id: str, artifact_id: str, version: str) -> ArtifactMetadata:
    """Add ``version`` to the index at ``path`` and write it back."""
    meta = read_metadata(path, group_id, artifact_id)
    meta.add_version(version)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_metadata(meta), encoding="utf-8")
    return meta

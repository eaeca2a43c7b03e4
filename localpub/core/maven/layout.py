"""
Standard Maven repository layout.

    <root>/<group as dirs>/<artifactId>/<version>/<artifactId>-<version>[-<classifier>].<ext>
    <root>/<group as dirs>/<artifactId>/maven-metadata.xml
"""

from __future__ import annotations

from pathlib import Path

METADATA_FILE = "maven-metadata.xml"


def group_path(group_id: str) -> Path:
    """``org.example.tools`` → ``org/example/tools``."""
    return Path(*[part for part in group_id.split(".") if part])


def artifact_dir(root: Path, group_id: str, artifact_id: str) -> Path:
    return root / group_path(group_id) / artifact_id


def version_dir(root: Path, group_id: str, artifact_id: str, version: str) -> Path:
    return artifact_dir(root, group_id, artifact_id) / version


def artifact_file_name(
    artifact_id: str,
    version: str,
    extension: str,
    classifier: str = "",
) -> str:
    """File name of one artifact inside the version directory."""
    suffix = f"-{classifier}" if classifier else ""
    return f"{artifact_id}-{version}{suffix}.{extension}"


def pom_file_name(artifact_id: str, version: str) -> str:
    return artifact_file_name(artifact_id, version, "pom")


def metadata_path(root: Path, group_id: str, artifact_id: str) -> Path:
    return artifact_dir(root, group_id, artifact_id) / METADATA_FILE

"""
Configuration loader — reads build.yml into a BuildGraph.

Reading is two steps: YAML is validated against the BuildSettings
schema, then the settings are materialized into projects with the
local publishing plugin applied, publications declared and snapshot
dependencies wired.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel

from localpub.core.constants import SNAPSHOT_RELEASE_NAME
from localpub.core.models.extension import LocalPublicationExtension
from localpub.core.models.settings import BuildSettings, ProjectSettings
from localpub.core.plugin import LocalPublishingPlugin
from localpub.core.project import BuildGraph, Project
from localpub.core.publishing import PublishingExtension

logger = logging.getLogger(__name__)

# Default config filename
BUILD_CONFIG_FILE = "build.yml"


class ConfigError(Exception):
    """Raised when build configuration is invalid or missing."""


def find_build_file(start_dir: Path | None = None) -> Path | None:
    """Search for build.yml starting from the given directory, walking up.

    Returns:
        Path to build.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / BUILD_CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break
        current = parent

    return None


def load_settings(path: Path | None = None) -> BuildSettings:
    """Load and validate build.yml.

    Raises:
        ConfigError: If the file is missing or invalid.
    """
    if path is None:
        path = find_build_file()

    if path is None:
        raise ConfigError(
            f"No {BUILD_CONFIG_FILE} found. Create one, or specify --config."
        )

    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading build config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    try:
        settings = BuildSettings.model_validate(data)
    except Exception as e:
        raise ConfigError(f"Invalid build configuration: {e}") from e

    logger.info("Loaded build '%s' with %d projects", settings.name, len(settings.projects))
    return settings


def build_graph(settings: BuildSettings, root_dir: Path) -> BuildGraph:
    """Materialize settings into a configured BuildGraph.

    Raises:
        ConfigError: On duplicate project names or unknown snapshot projects.
    """
    graph = BuildGraph(root_dir, name=settings.name)

    for proj in settings.projects:
        if graph.find_project(proj.name) is not None:
            raise ConfigError(f"Duplicate project name: '{proj.name}'")
        project_dir = root_dir / proj.directory
        build_dir = project_dir / proj.build_dir if proj.build_dir else None
        project = graph.create_project(
            proj.name,
            project_dir=project_dir,
            build_dir=build_dir,
            description=proj.description,
        )
        project.plugins.apply(LocalPublishingPlugin)
        _configure_project(project, proj)

    for proj in settings.projects:
        project = graph.project(proj.name)
        for name in proj.snapshots:
            if graph.find_project(name) is None:
                raise ConfigError(
                    f"Project '{proj.name}' declares snapshots from unknown project '{name}'"
                )
            project.dependencies.add(SNAPSHOT_RELEASE_NAME, name)

    return graph


def _configure_project(project: Project, proj: ProjectSettings) -> None:
    local = proj.local_publication
    ext = project.extensions.get_by_type(LocalPublicationExtension)
    ext.artifact_key = local.artifact_key
    if local.repository_path:
        ext.repository_path = project.file(local.repository_path)
    ext.configure_metadata(lambda group: _assign(group, local.metadata))
    ext.configure_license(lambda group: _assign(group, local.license))
    ext.configure_developer(lambda group: _assign(group, local.developer))
    ext.configure_scm(lambda group: _assign(group, local.scm))

    publishing = project.extensions.get_by_type(PublishingExtension)
    for pub in proj.all_publications:
        publication = publishing.publications.create(
            pub.name,
            group_id=pub.group_id,
            artifact_id=pub.artifact_id or project.name,
            version=pub.version,
        )
        publication.pom.name = pub.pom_name
        publication.pom.packaging = pub.packaging
        for art in pub.artifacts:
            publication.artifact(project.file(art.file), art.classifier, art.extension)


def _assign(target: BaseModel, source: BaseModel) -> None:
    for name, value in source:
        setattr(target, name, value)


def load_build(path: Path | None = None) -> BuildGraph:
    """Find, load and materialize a build in one step."""
    if path is None:
        path = find_build_file()
    settings = load_settings(path)
    assert path is not None
    return build_graph(settings, build_root(path))


def build_root(config_path: Path) -> Path:
    """Get the build root directory from a config file path."""
    return config_path.parent.resolve()

"""
Shared test fixtures and configuration.
"""

import textwrap
from pathlib import Path
from typing import Callable

import pytest

from localpub.core.models.extension import LocalPublicationExtension
from localpub.core.plugin import LocalPublishingPlugin
from localpub.core.project import BuildGraph, Project
from localpub.core.publishing import PublishingExtension


@pytest.fixture
def graph(tmp_path: Path) -> BuildGraph:
    """An empty build graph rooted in a temp directory."""
    return BuildGraph(tmp_path, name="demo")


def add_project(
    graph: BuildGraph,
    name: str,
    group_id: str = "org.example",
    version: str = "1.0.0",
    publish: bool = True,
) -> Project:
    """Create a project with the local publishing plugin applied.

    With ``publish`` the project gets a ``maven`` publication with one
    jar artifact on disk.
    """
    project = graph.create_project(name)
    project.plugins.apply(LocalPublishingPlugin)
    ext = project.extensions.get_by_type(LocalPublicationExtension)
    ext.metadata.group_id = group_id
    ext.metadata.name = f"{name} library"

    if publish:
        jar = project.project_dir / "dist" / f"{name}.jar"
        jar.parent.mkdir(parents=True, exist_ok=True)
        jar.write_bytes(f"jar:{name}".encode())
        publishing = project.extensions.get_by_type(PublishingExtension)
        pub = publishing.publications.create("maven", artifact_id=name, version=version)
        pub.artifact(jar)
    return project


@pytest.fixture
def make_project(graph: BuildGraph) -> Callable[..., Project]:
    def _make(name: str, **kwargs) -> Project:
        return add_project(graph, name, **kwargs)

    return _make


@pytest.fixture
def write_build(tmp_path: Path) -> Callable[[str], Path]:
    """Write a dedented build.yml into the temp directory."""

    def _write(content: str) -> Path:
        path = tmp_path / "build.yml"
        path.write_text(textwrap.dedent(content))
        return path

    return _write


@pytest.fixture
def two_project_build(tmp_path: Path, write_build) -> Path:
    """A producer ``core`` and a consumer ``cli`` that snapshots it."""
    for name in ("core", "cli"):
        jar = tmp_path / name / "dist" / f"{name}.jar"
        jar.parent.mkdir(parents=True)
        jar.write_bytes(f"jar:{name}".encode())

    return write_build("""\
        version: 1
        name: linter
        projects:
          - name: core
            publication:
              version: 1.0.0-SNAPSHOT
              artifacts:
                - file: dist/core.jar
            local_publication:
              metadata:
                name: Core
                group_id: org.example
                description: Core rules
              license:
                name: MIT
          - name: cli
            publication:
              version: 1.0.0-SNAPSHOT
              artifacts:
                - file: dist/cli.jar
            local_publication:
              metadata:
                group_id: org.example
            snapshots: [core]
    """)

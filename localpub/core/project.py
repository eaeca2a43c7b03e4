"""
Projects and the multi-project build graph.

A BuildGraph owns a set of projects (build units). Each project has
its own extensions, configurations, tasks and dependency declarations;
the graph ties them together for cross-project resolution and task
lookup by path.

    graph = BuildGraph(root_dir)
    core = graph.create_project("core")
    core.plugins.apply(LocalPublishingPlugin)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterator, TypeVar

from localpub.core.constants import DEFAULT_BUILD_DIR
from localpub.core.errors import ConfigurationError, UnknownProjectError, UnknownTaskError
from localpub.core.graph.configuration import (
    Configuration,
    ConfigurationContainer,
    ProjectDependency,
)
from localpub.core.graph.resolver import ResolvedConfiguration, resolve_configuration
from localpub.core.tasks.base import Task, TaskContainer

logger = logging.getLogger(__name__)

E = TypeVar("E")


class ExtensionContainer:
    """Named extension objects attached to a project."""

    def __init__(self, owner: Project):
        self._owner = owner
        self._extensions: dict[str, Any] = {}

    def create(self, name: str, extension: E) -> E:
        if name in self._extensions:
            raise ConfigurationError(
                f"Extension '{name}' already exists in {self._owner.path}"
            )
        self._extensions[name] = extension
        return extension

    def find(self, name: str) -> Any | None:
        return self._extensions.get(name)

    def get_by_name(self, name: str) -> Any:
        ext = self._extensions.get(name)
        if ext is None:
            raise ConfigurationError(
                f"Extension '{name}' not found in {self._owner.path}"
            )
        return ext

    def get_by_type(self, ext_type: type[E]) -> E:
        for ext in self._extensions.values():
            if isinstance(ext, ext_type):
                return ext
        raise ConfigurationError(
            f"No extension of type {ext_type.__name__} in {self._owner.path}"
        )

    def names(self) -> list[str]:
        return list(self._extensions.keys())


class DependencyHandler:
    """Declares project dependencies on a project's configurations."""

    def __init__(self, owner: Project):
        self._owner = owner

    def add(self, configuration: str, project: str | Project) -> ProjectDependency:
        """Add a dependency on another project to a named configuration."""
        conf = self._owner.configurations.get_by_name(configuration)
        path = project.path if isinstance(project, Project) else _normalize_path(project)
        dep = ProjectDependency(path)
        if dep not in conf.dependencies:
            conf.dependencies.append(dep)
        logger.debug("%s: %s → %s", self._owner.path, configuration, dep)
        return dep


class PluginManager:
    """Applies plugins at most once per project."""

    def __init__(self, owner: Project):
        self._owner = owner
        self._applied: dict[type, Any] = {}

    def apply(self, plugin_type: type) -> Any:
        if plugin_type in self._applied:
            return self._applied[plugin_type]
        plugin = plugin_type()
        self._applied[plugin_type] = plugin
        plugin.apply(self._owner)
        logger.debug("Applied %s to %s", plugin_type.__name__, self._owner.path)
        return plugin

    def has_plugin(self, plugin_type: type) -> bool:
        return plugin_type in self._applied


class Project:
    """A build unit within a BuildGraph."""

    def __init__(
        self,
        graph: BuildGraph,
        name: str,
        project_dir: Path,
        build_dir: Path | None = None,
        description: str = "",
    ):
        self.graph = graph
        self.name = name
        self.project_dir = project_dir
        self.build_dir = build_dir or project_dir / DEFAULT_BUILD_DIR
        self.description = description

        self.extensions = ExtensionContainer(self)
        self.configurations = ConfigurationContainer(self)
        self.tasks = TaskContainer(self)
        self.dependencies = DependencyHandler(self)
        self.plugins = PluginManager(self)

    @property
    def path(self) -> str:
        return f":{self.name}"

    def task_path(self, name: str) -> str:
        return f"{self.path}:{name}"

    def file(self, relative: str | Path) -> Path:
        """Resolve a path relative to the project directory."""
        path = Path(relative)
        return path if path.is_absolute() else self.project_dir / path

    def __repr__(self) -> str:
        return f"<Project {self.path}>"


class BuildGraph:
    """All projects of one build, keyed by path."""

    def __init__(self, root_dir: Path, name: str = ""):
        self.root_dir = root_dir
        self.name = name or root_dir.name
        self._projects: dict[str, Project] = {}

    def create_project(
        self,
        name: str,
        project_dir: Path | None = None,
        build_dir: Path | None = None,
        description: str = "",
    ) -> Project:
        path = _normalize_path(name)
        if path in self._projects:
            raise ConfigurationError(f"Project {path} already exists")
        project = Project(
            self,
            name,
            project_dir or self.root_dir / name,
            build_dir=build_dir,
            description=description,
        )
        self._projects[path] = project
        return project

    def project(self, path: str) -> Project:
        """Look up a project by path (``:core``) or bare name (``core``)."""
        project = self._projects.get(_normalize_path(path))
        if project is None:
            raise UnknownProjectError(f"Project '{path}' not found in build '{self.name}'")
        return project

    def find_project(self, path: str) -> Project | None:
        return self._projects.get(_normalize_path(path))

    @property
    def projects(self) -> list[Project]:
        return list(self._projects.values())

    def __iter__(self) -> Iterator[Project]:
        return iter(self.projects)

    # ── Tasks ────────────────────────────────────────────────────

    def task(self, path: str) -> Task:
        """Look up a task by full path (``:core:collectRepository``)."""
        project_path, _, name = path.rpartition(":")
        if not project_path or not name:
            raise UnknownTaskError(f"Not a task path: '{path}'")
        return self.project(project_path).tasks.named(name)

    def select_tasks(self, selector: str) -> list[Task]:
        """Select tasks by path, or by name across every project.

        Raises:
            UnknownTaskError: If nothing matches.
        """
        if selector.startswith(":"):
            return [self.task(selector)]
        tasks = [p.tasks.find(selector) for p in self.projects]
        selected = [t for t in tasks if t is not None]
        if not selected:
            raise UnknownTaskError(f"Task '{selector}' not found in any project")
        return selected

    # ── Resolution ───────────────────────────────────────────────

    def resolve(self, project: Project, configuration: Configuration | str) -> ResolvedConfiguration:
        if isinstance(configuration, str):
            configuration = project.configurations.get_by_name(configuration)
        return resolve_configuration(self, project, configuration)


def _normalize_path(path: str) -> str:
    return path if path.startswith(":") else f":{path}"

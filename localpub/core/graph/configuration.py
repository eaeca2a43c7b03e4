"""
Configuration nodes — named, attributed nodes of the dependency graph.

A configuration can be consumable (other projects select it as a
producer), resolvable (it can be resolved into files), both or
neither. Dependencies are project dependencies only; resolving remote
coordinates is out of scope.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Iterator, Union

from localpub.core.errors import ConfigurationError
from localpub.core.graph.attributes import AttributeContainer

if TYPE_CHECKING:
    from localpub.core.graph.resolver import ResolvedConfiguration
    from localpub.core.project import Project

logger = logging.getLogger(__name__)

FileSource = Union[Path, str, Callable[[], Path]]


@dataclass(frozen=True)
class ProjectDependency:
    """A dependency on another project in the same build graph."""

    path: str  # project path, e.g. ":core"

    def __str__(self) -> str:
        return f"project({self.path})"


class PublishArtifact:
    """An outgoing artifact of a configuration.

    ``file`` may be a callable so the location is read when the
    configuration is resolved rather than when it is wired.
    """

    def __init__(self, file: FileSource, built_by: tuple[Any, ...] = ()):
        self._file = file
        self.built_by: list[Any] = list(built_by)

    def builds(self, *items: Any) -> PublishArtifact:
        """Declare tasks (or task collections) that produce this file."""
        self.built_by.extend(items)
        return self

    def resolve_file(self) -> Path:
        source = self._file() if callable(self._file) else self._file
        return Path(source)

    def __repr__(self) -> str:
        return f"<PublishArtifact file={self._file!r}>"


class Configuration:
    """A named node in a project's dependency graph."""

    def __init__(
        self,
        name: str,
        owner: Project,
        can_be_resolved: bool = True,
        can_be_consumed: bool = True,
        description: str = "",
    ):
        self.name = name
        self.owner = owner
        self.can_be_resolved = can_be_resolved
        self.can_be_consumed = can_be_consumed
        self.description = description

        self.attributes = AttributeContainer()
        self.dependencies: list[ProjectDependency] = []
        self.outgoing: list[PublishArtifact] = []
        self._extends_from: list[Configuration] = []

    @property
    def path(self) -> str:
        """Display path, e.g. ``:core:snapshots``."""
        return self.owner.task_path(self.name)

    # ── Hierarchy ────────────────────────────────────────────────

    def extends_from(self, *configurations: Configuration) -> Configuration:
        """Inherit the dependency set of other configurations."""
        for conf in configurations:
            if conf is self or self in conf.hierarchy():
                raise ConfigurationError(
                    f"Cyclic extendsFrom: {self.path} and {conf.path}"
                )
            if conf not in self._extends_from:
                self._extends_from.append(conf)
        return self

    @property
    def extended(self) -> list[Configuration]:
        return list(self._extends_from)

    def hierarchy(self) -> list[Configuration]:
        """This configuration followed by everything it extends."""
        seen: list[Configuration] = []
        stack = [self]
        while stack:
            conf = stack.pop(0)
            if conf in seen:
                continue
            seen.append(conf)
            stack.extend(conf._extends_from)
        return seen

    def all_dependencies(self) -> list[ProjectDependency]:
        """Own and inherited dependencies, de-duplicated in order."""
        result: list[ProjectDependency] = []
        for conf in self.hierarchy():
            for dep in conf.dependencies:
                if dep not in result:
                    result.append(dep)
        return result

    # ── Outgoing ─────────────────────────────────────────────────

    def outgoing_artifact(self, file: FileSource, built_by: tuple[Any, ...] = ()) -> PublishArtifact:
        """Add an outgoing artifact produced by ``built_by``."""
        artifact = PublishArtifact(file, built_by=built_by)
        self.outgoing.append(artifact)
        return artifact

    # ── Resolution ───────────────────────────────────────────────

    def resolve(self) -> ResolvedConfiguration:
        """Resolve through the owning project's build graph."""
        return self.owner.graph.resolve(self.owner, self)

    def files(self) -> list[Path]:
        return self.resolve().files

    def build_dependencies(self) -> list[Any]:
        """Tasks that must run before this configuration's files exist."""
        return self.resolve().build_dependencies

    def __repr__(self) -> str:
        flags = []
        if self.can_be_resolved:
            flags.append("resolvable")
        if self.can_be_consumed:
            flags.append("consumable")
        return f"<Configuration {self.path} {'/'.join(flags) or 'declarable'}>"


class ConfigurationContainer:
    """Per-project registry of configurations, in creation order."""

    def __init__(self, owner: Project):
        self._owner = owner
        self._configurations: dict[str, Configuration] = {}

    def create(
        self,
        name: str,
        configure: Callable[[Configuration], None] | None = None,
    ) -> Configuration:
        """Create and optionally configure a new configuration."""
        if name in self._configurations:
            raise ConfigurationError(
                f"Configuration '{name}' already exists in {self._owner.path}"
            )
        conf = Configuration(name, self._owner)
        self._configurations[name] = conf
        if configure is not None:
            configure(conf)
        logger.debug("Created configuration %s", conf.path)
        return conf

    def find(self, name: str) -> Configuration | None:
        return self._configurations.get(name)

    def get_by_name(self, name: str) -> Configuration:
        conf = self._configurations.get(name)
        if conf is None:
            raise ConfigurationError(
                f"Configuration '{name}' not found in {self._owner.path}"
            )
        return conf

    def names(self) -> list[str]:
        return list(self._configurations.keys())

    def __iter__(self) -> Iterator[Configuration]:
        return iter(list(self._configurations.values()))

    def __contains__(self, name: object) -> bool:
        return name in self._configurations

    def __len__(self) -> int:
        return len(self._configurations)

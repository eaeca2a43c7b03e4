"""
Configuration resolver — attribute-based producer selection.

Flow:
    resolvable configuration → declared project dependencies (own and
    inherited) → consumable configurations of each target project whose
    attributes match → outgoing artifact files + the tasks that build them

Dependencies declared on a selected producer are followed
transitively; each project is visited once. A dependency whose project
offers no matching producer contributes nothing, silently.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from localpub.core.errors import ConfigurationError
from localpub.core.graph.attributes import attributes_match
from localpub.core.graph.configuration import Configuration, ProjectDependency

if TYPE_CHECKING:
    from localpub.core.project import BuildGraph, Project

logger = logging.getLogger(__name__)


@dataclass
class ResolvedConfiguration:
    """Result of resolving one configuration."""

    configuration: str = ""
    requested: dict[str, str] = field(default_factory=dict)
    files: list[Path] = field(default_factory=list)
    build_dependencies: list[Any] = field(default_factory=list)
    selected: list[str] = field(default_factory=list)    # producer configuration paths
    unmatched: list[str] = field(default_factory=list)   # project paths with no match

    @property
    def is_empty(self) -> bool:
        return not self.files

    def to_dict(self) -> dict:
        return {
            "configuration": self.configuration,
            "requested": self.requested,
            "files": [str(f) for f in self.files],
            "selected": self.selected,
            "unmatched": self.unmatched,
        }


def select_producers(
    project: Project,
    requested: dict[str, str],
) -> list[Configuration]:
    """Consumable configurations of ``project`` matching ``requested``."""
    return [
        conf
        for conf in project.configurations
        if conf.can_be_consumed and attributes_match(requested, conf.attributes.as_dict())
    ]


def resolve_configuration(
    graph: BuildGraph,
    project: Project,
    configuration: Configuration,
) -> ResolvedConfiguration:
    """Resolve a configuration into files and build dependencies.

    Raises:
        ConfigurationError: If the configuration is not resolvable.
        PropertyNotSetError: If a selected producer's artifact location
            was never set.
    """
    if not configuration.can_be_resolved:
        raise ConfigurationError(
            f"Configuration {configuration.path} cannot be resolved directly"
        )

    requested = configuration.attributes.as_dict()
    result = ResolvedConfiguration(
        configuration=configuration.path,
        requested=requested,
    )

    visited: set[str] = {project.path}
    queue: list[ProjectDependency] = list(configuration.all_dependencies())

    while queue:
        dep = queue.pop(0)
        if dep.path in visited:
            continue
        visited.add(dep.path)

        target = graph.project(dep.path)
        producers = select_producers(target, requested)
        if not producers:
            logger.debug(
                "No producer in %s matches %s for %s",
                target.path, requested, configuration.path,
            )
            result.unmatched.append(target.path)
            continue

        for producer in producers:
            result.selected.append(producer.path)
            for artifact in producer.outgoing:
                path = artifact.resolve_file()
                if path not in result.files:
                    result.files.append(path)
                for item in artifact.built_by:
                    if item not in result.build_dependencies:
                        result.build_dependencies.append(item)
            queue.extend(producer.all_dependencies())

    logger.debug(
        "Resolved %s → %d file(s) from %d producer(s)",
        configuration.path, len(result.files), len(result.selected),
    )
    return result

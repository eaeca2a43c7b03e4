"""
Resolve use case — show what a project's ``snapshots`` configuration
pulls in from other projects.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from localpub.core.config.loader import ConfigError, find_build_file, load_build
from localpub.core.constants import SNAPSHOTS_NAME
from localpub.core.errors import LocalPubError
from localpub.core.graph.resolver import ResolvedConfiguration
from localpub.core.project import BuildGraph


@dataclass
class ResolveResult:
    project: str = ""
    resolved: ResolvedConfiguration | None = None
    error: str | None = None

    def to_dict(self) -> dict:
        if self.error:
            return {"project": self.project, "error": self.error}
        return {
            "project": self.project,
            **(self.resolved.to_dict() if self.resolved else {}),
        }


def resolve_snapshots(
    project: str,
    config_path: Path | None = None,
    graph: BuildGraph | None = None,
    configuration: str = SNAPSHOTS_NAME,
) -> ResolveResult:
    """Resolve a project's snapshots (or another resolvable configuration)."""
    result = ResolveResult(project=project)
    try:
        if graph is None:
            if config_path is None:
                config_path = find_build_file()
            if config_path is None:
                result.error = "No build.yml found."
                return result
            graph = load_build(config_path)
        target = graph.project(project)
        result.project = target.path
        result.resolved = graph.resolve(target, configuration)
    except (ConfigError, LocalPubError) as e:
        result.error = str(e)
    return result

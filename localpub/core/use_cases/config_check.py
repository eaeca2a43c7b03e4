"""
Config check use case — validate build.yml and report issues.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path

from localpub.core.config.loader import ConfigError, build_graph, build_root, find_build_file, load_settings
from localpub.core.constants import LOCAL_ARTIFACT_KEY
from localpub.core.errors import LocalPubError
from localpub.core.models.settings import BuildSettings


@dataclass
class ConfigCheckResult:
    """Result of configuration validation."""

    valid: bool = False
    settings: BuildSettings | None = None
    config_path: Path | None = None
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "config_path": str(self.config_path) if self.config_path else None,
            "errors": self.errors,
            "warnings": self.warnings,
            "build_name": self.settings.name if self.settings else None,
            "project_count": len(self.settings.projects) if self.settings else 0,
        }


def check_config(config_path: Path | None = None) -> ConfigCheckResult:
    """Validate build configuration and report issues."""
    result = ConfigCheckResult()

    if config_path is None:
        config_path = find_build_file()
    if config_path is None:
        result.errors.append("No build.yml found.")
        return result
    result.config_path = config_path

    try:
        settings = load_settings(config_path)
    except ConfigError as e:
        result.errors.append(str(e))
        return result
    result.settings = settings

    # ── Semantic checks ──────────────────────────────────────────
    if not settings.projects:
        result.warnings.append("No projects defined. The build has nothing to publish.")

    names = Counter(p.name for p in settings.projects)
    dupes = sorted(n for n, count in names.items() if count > 1)
    if dupes:
        result.errors.append(f"Duplicate project names: {', '.join(dupes)}")

    known = set(names)
    for proj in settings.projects:
        for dep in proj.snapshots:
            if dep not in known:
                result.errors.append(
                    f"Project '{proj.name}' declares snapshots from unknown project '{dep}'"
                )
            elif dep == proj.name:
                result.warnings.append(f"Project '{proj.name}' lists itself in snapshots")
            else:
                producer = settings.get_project(dep)
                if producer and producer.local_publication.artifact_key != proj.local_publication.artifact_key:
                    result.warnings.append(
                        f"Project '{proj.name}' and '{dep}' use different artifact keys; "
                        f"'{dep}' will not be selected"
                    )

        if proj.local_publication.artifact_key != LOCAL_ARTIFACT_KEY:
            result.warnings.append(
                f"Project '{proj.name}' overrides the artifact key "
                f"('{proj.local_publication.artifact_key}')"
            )

        for pub in proj.all_publications:
            if not proj.local_publication.metadata.group_id:
                result.warnings.append(
                    f"Project '{proj.name}': metadata.group_id is empty; "
                    f"publication '{pub.name}' cannot be published"
                )
            if not pub.version:
                result.errors.append(
                    f"Project '{proj.name}': publication '{pub.name}' has no version"
                )

    if not result.errors:
        try:
            build_graph(settings, build_root(config_path))
        except (ConfigError, LocalPubError) as e:
            result.errors.append(str(e))

    result.valid = not result.errors
    return result

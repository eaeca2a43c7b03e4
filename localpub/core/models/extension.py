"""
LocalPublicationExtension — the user-facing configuration block.

One instance lives on each project under the name ``localPublication``.
It is mutated during configuration and only read afterwards, by the
configuration resolver, the publish step and the collect task.

    ext = project.extensions.get_by_type(LocalPublicationExtension)
    ext.configure_license(lambda lic: setattr(lic, "name", "MIT"))
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from localpub.core.constants import LOCAL_ARTIFACT_KEY, LOCAL_PUBLICATION_NAME
from localpub.core.errors import PropertyNotSetError
from localpub.core.models.metadata import (
    PublicationDeveloper,
    PublicationLicense,
    PublicationMetadata,
    PublicationSourceControlManagement,
)

G = TypeVar("G", bound=BaseModel)


class LocalPublicationExtension(BaseModel):
    """Aggregate root for local publication settings.

    The nested groups are created eagerly with the extension, so they
    can be mutated directly or through the ``configure_*`` callbacks.
    """

    model_config = ConfigDict(validate_assignment=True)

    artifact_key: str = LOCAL_ARTIFACT_KEY
    repository_path: Path | None = None

    metadata: PublicationMetadata = Field(default_factory=PublicationMetadata)
    license: PublicationLicense = Field(default_factory=PublicationLicense)
    developer: PublicationDeveloper = Field(default_factory=PublicationDeveloper)
    scm: PublicationSourceControlManagement = Field(
        default_factory=PublicationSourceControlManagement
    )

    # ── Scoped configuration callbacks ───────────────────────────

    def configure_metadata(self, action: Callable[[PublicationMetadata], None]) -> PublicationMetadata:
        return _apply(self.metadata, action)

    def configure_license(self, action: Callable[[PublicationLicense], None]) -> PublicationLicense:
        return _apply(self.license, action)

    def configure_developer(self, action: Callable[[PublicationDeveloper], None]) -> PublicationDeveloper:
        return _apply(self.developer, action)

    def configure_scm(
        self, action: Callable[[PublicationSourceControlManagement], None]
    ) -> PublicationSourceControlManagement:
        return _apply(self.scm, action)

    # ── Required reads ───────────────────────────────────────────

    def require_repository_path(self) -> Path:
        """Return the repository path, failing if it was never set."""
        if self.repository_path is None:
            raise PropertyNotSetError(LOCAL_PUBLICATION_NAME, "repository_path")
        return self.repository_path


def _apply(group: G, action: Callable[[G], None]) -> G:
    action(group)
    return group

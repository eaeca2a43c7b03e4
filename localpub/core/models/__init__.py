"""
Domain models — Pydantic types for local publication.

All models are re-exported here for convenient access:

    from localpub.core.models import LocalPublicationExtension, MavenPublication
"""

from localpub.core.models.extension import LocalPublicationExtension
from localpub.core.models.metadata import (
    PublicationDeveloper,
    PublicationLicense,
    PublicationMetadata,
    PublicationSourceControlManagement,
)
from localpub.core.models.publication import (
    MavenPublication,
    PomDescriptor,
    PomDeveloper,
    PomLicense,
    PomScm,
    PublicationArtifact,
)
from localpub.core.models.receipt import Receipt
from localpub.core.models.settings import (
    ArtifactSettings,
    BuildSettings,
    LocalPublicationSettings,
    ProjectSettings,
    PublicationSettings,
)
from localpub.core.models.state import BuildState, OperationRecord, TaskState

__all__ = [
    # settings.py
    "ArtifactSettings",
    "BuildSettings",
    # state.py
    "BuildState",
    # extension.py
    "LocalPublicationExtension",
    "LocalPublicationSettings",
    # publication.py
    "MavenPublication",
    "OperationRecord",
    "PomDescriptor",
    "PomDeveloper",
    "PomLicense",
    "PomScm",
    "ProjectSettings",
    "PublicationArtifact",
    # metadata.py
    "PublicationDeveloper",
    "PublicationLicense",
    "PublicationMetadata",
    "PublicationSettings",
    "PublicationSourceControlManagement",
    # receipt.py
    "Receipt",
    "TaskState",
]

"""
Shared names and defaults for local publication.

Other build units attach to these names, so they are part of the
public contract. Override points are the extension fields
(``artifact_key``, ``repository_path``), not these constants.
"""

from __future__ import annotations

# ── Extension / configuration names ─────────────────────────────
LOCAL_PUBLICATION_NAME = "localPublication"
SNAPSHOTS_NAME = "snapshots"
SNAPSHOT_RELEASE_NAME = "snapshotRelease"
PUBLISHING_EXTENSION_NAME = "publishing"

# ── Task names ──────────────────────────────────────────────────
COLLECT_REPOSITORY_NAME = "collectRepository"
PUBLISH_LIFECYCLE_NAME = "publish"
PUBLICATIONS_TO_LOCAL_REPOSITORY = "publishAllPublicationsToLocalRepository"

# ── Attribute contract ──────────────────────────────────────────
LOCAL_ARTIFACT_KEY = "local.published.gradle-plugin"
LOCAL_REPOSITORY_NAME = "local-repository"

# ── Local repository ────────────────────────────────────────────
LOCAL_MAVEN_DIR = ".m2"
LOCAL_MAVEN_NAME = "local"
DEFAULT_BUILD_DIR = "build"

# ── Task groups (informational, shown by `localpub tasks`) ──────
PUBLISHING_GROUP = "publishing"

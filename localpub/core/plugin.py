"""
Local publishing plugin — wire a project for local Maven publication.

Applying the plugin to a project:

    1. applies MavenPublishPlugin (the ``publishing`` extension)
    2. creates the ``localPublication`` extension, with
       repository_path defaulting to <build_dir>/.m2
    3. registers the producer configuration ``localPublication``
    4. registers ``snapshotRelease`` and ``snapshots``
    5. registers the ``collectRepository`` task
    6. declares the ``local`` Maven repository at repository_path
    7. attaches the extension's metadata to every publication

Other projects pull this project's local repository with:

    consumer.dependencies.add(SNAPSHOT_RELEASE_NAME, producer)
"""

from __future__ import annotations

import logging
from typing import Callable

from localpub.core.constants import (
    COLLECT_REPOSITORY_NAME,
    LOCAL_MAVEN_DIR,
    LOCAL_MAVEN_NAME,
    LOCAL_PUBLICATION_NAME,
    LOCAL_REPOSITORY_NAME,
    PUBLICATIONS_TO_LOCAL_REPOSITORY,
    PUBLISHING_GROUP,
    SNAPSHOT_RELEASE_NAME,
    SNAPSHOTS_NAME,
)
from localpub.core.graph.configuration import Configuration
from localpub.core.models.extension import LocalPublicationExtension
from localpub.core.models.publication import MavenPublication, PomDeveloper, PomLicense, PomScm
from localpub.core.project import Project
from localpub.core.publishing import MavenPublishPlugin, PublishingExtension
from localpub.core.tasks.base import TaskCollection
from localpub.core.tasks.collect import CollectTask

logger = logging.getLogger(__name__)


class LocalPublishingPlugin:
    """Plugin entry point. Apply with ``project.plugins.apply(LocalPublishingPlugin)``."""

    def apply(self, project: Project) -> None:
        project.plugins.apply(MavenPublishPlugin)

        local_publication = project.extensions.create(
            LOCAL_PUBLICATION_NAME, LocalPublicationExtension()
        )
        local_publication.repository_path = project.build_dir / LOCAL_MAVEN_DIR

        publication = configure_publication_task(project, local_publication)

        snapshot_release = configure_snapshot_release(project)
        snapshots = configure_snapshots(project, local_publication, snapshot_release)

        def configure_collect(task: CollectTask) -> None:
            task.depends_on(publication)
            task.depends_on(snapshots)
            task.local_convention = local_publication.require_repository_path
            task.externals.from_(snapshots)

        create_collect_task(project, configure_collect)

        publishing = project.extensions.get_by_type(PublishingExtension)
        publishing.repositories.maven(LOCAL_MAVEN_NAME, local_publication.require_repository_path)
        publishing.publications.configure_each(
            lambda pub: add_metadata(pub, local_publication)
        )

        logger.debug("Local publishing configured for %s", project.path)


def local_artifact_attribute(extension: LocalPublicationExtension) -> Callable[[], str]:
    """Lazy attribute key: the extension's artifact key at resolution time."""
    return lambda: extension.artifact_key


def add_metadata(publication: MavenPublication, extension: LocalPublicationExtension) -> None:
    """Copy the extension's metadata into a publication's POM.

    Only ``name`` respects a value the publication already has;
    group id, description and url are always overwritten. Exactly one
    license and one developer are written.
    """
    pom = publication.pom
    if not pom.has_name:
        pom.name = extension.metadata.name
    publication.group_id = extension.metadata.group_id
    pom.description = extension.metadata.description
    pom.url = extension.metadata.url

    pom.licenses = [
        PomLicense(
            name=extension.license.name,
            url=extension.license.url,
            distribution=extension.license.distribution,
        )
    ]
    pom.developers = [
        PomDeveloper(
            id=extension.developer.id,
            name=extension.developer.name,
            organization=extension.developer.organization,
            organization_url=extension.developer.organization_url,
        )
    ]
    pom.scm = PomScm(
        connection=extension.scm.connection,
        developer_connection=extension.scm.developer_connection,
        url=extension.scm.url,
    )


def create_collect_task(
    project: Project,
    configure: Callable[[CollectTask], None],
) -> CollectTask:
    task = project.tasks.register(COLLECT_REPOSITORY_NAME, CollectTask, configure)
    task.group = PUBLISHING_GROUP
    task.description = "Lists the local repository and all resolved snapshot repositories."
    return task


def configure_publication_task(
    project: Project,
    local_publication: LocalPublicationExtension,
) -> TaskCollection:
    """Register the producer configuration exposing the local repository.

    Returns:
        The live collection of tasks that publish to the local repository.
    """
    publication = project.tasks.matching(
        lambda task: task.name == PUBLICATIONS_TO_LOCAL_REPOSITORY
    )

    def configure(conf: Configuration) -> None:
        conf.can_be_resolved = False
        conf.can_be_consumed = True
        conf.description = "Local Maven repository produced by this project."
        conf.attributes.attribute(
            local_artifact_attribute(local_publication), LOCAL_REPOSITORY_NAME
        )
        conf.outgoing_artifact(
            local_publication.require_repository_path, built_by=(publication,)
        )

    project.configurations.create(LOCAL_PUBLICATION_NAME, configure)
    return publication


def configure_snapshot_release(project: Project) -> Configuration:
    def configure(conf: Configuration) -> None:
        conf.can_be_resolved = False
        conf.can_be_consumed = False
        conf.description = "Projects whose local repositories this project consumes."

    return project.configurations.create(SNAPSHOT_RELEASE_NAME, configure)


def configure_snapshots(
    project: Project,
    local_publication: LocalPublicationExtension,
    release: Configuration,
) -> Configuration:
    def configure(conf: Configuration) -> None:
        conf.can_be_resolved = True
        conf.can_be_consumed = False
        conf.description = "Resolved local repositories of snapshotRelease projects."
        conf.attributes.attribute(
            local_artifact_attribute(local_publication), LOCAL_REPOSITORY_NAME
        )
        conf.extends_from(release)

    snapshots = project.configurations.create(SNAPSHOTS_NAME, configure)
    project.configurations.get_by_name(LOCAL_PUBLICATION_NAME).extends_from(release)
    return snapshots

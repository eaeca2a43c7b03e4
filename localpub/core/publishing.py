"""
Publishing — Maven repositories, publications and their publish tasks.

MavenPublishPlugin adds a ``publishing`` extension to a project. Each
(publication, repository) pair gets a publish task, each repository an
aggregate task, and the ``publish`` lifecycle task depends on all of
them:

    publish
      └─ publishAllPublicationsTo<Repo>Repository
           └─ publish<Pub>PublicationTo<Repo>Repository

Actions registered with ``publications.configure_each`` run once per
publication, when its descriptor is finalized just before it is
serialized.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Iterator, Union

from localpub.core.constants import (
    PUBLISH_LIFECYCLE_NAME,
    PUBLISHING_EXTENSION_NAME,
    PUBLISHING_GROUP,
)
from localpub.core.errors import ConfigurationError
from localpub.core.models.publication import MavenPublication
from localpub.core.tasks.publish import PublishToMavenRepository

if TYPE_CHECKING:
    from localpub.core.project import Project

logger = logging.getLogger(__name__)

UrlSource = Union[Path, str, Callable[[], Path]]


def _capitalize(name: str) -> str:
    return name[:1].upper() + name[1:]


def publish_task_name(publication: str, repository: str) -> str:
    return f"publish{_capitalize(publication)}PublicationTo{_capitalize(repository)}Repository"


def publish_all_task_name(repository: str) -> str:
    return f"publishAllPublicationsTo{_capitalize(repository)}Repository"


class MavenRepository:
    """A filesystem Maven repository. The URL may be lazy."""

    def __init__(self, name: str, url: UrlSource):
        self.name = name
        self._url = url

    def path(self) -> Path:
        source = self._url() if callable(self._url) else self._url
        return Path(source)

    def __repr__(self) -> str:
        return f"<MavenRepository name={self.name!r}>"


class RepositoryContainer:
    def __init__(self) -> None:
        self._repos: dict[str, MavenRepository] = {}
        self._on_added: list[Callable[[MavenRepository], None]] = []

    def maven(self, name: str, url: UrlSource) -> MavenRepository:
        """Declare a filesystem Maven repository."""
        if name in self._repos:
            raise ConfigurationError(f"Repository '{name}' already declared")
        repo = MavenRepository(name, url)
        self._repos[name] = repo
        for hook in list(self._on_added):
            hook(repo)
        return repo

    def when_added(self, action: Callable[[MavenRepository], None]) -> None:
        self._on_added.append(action)
        for repo in list(self._repos.values()):
            action(repo)

    def find(self, name: str) -> MavenRepository | None:
        return self._repos.get(name)

    def __iter__(self) -> Iterator[MavenRepository]:
        return iter(list(self._repos.values()))

    def __len__(self) -> int:
        return len(self._repos)


class PublicationContainer:
    def __init__(self) -> None:
        self._pubs: dict[str, MavenPublication] = {}
        self._on_added: list[Callable[[MavenPublication], None]] = []
        self._configure_each: list[Callable[[MavenPublication], None]] = []
        self._finalized: set[str] = set()

    def create(
        self,
        name: str,
        configure: Callable[[MavenPublication], None] | None = None,
        **fields: object,
    ) -> MavenPublication:
        """Create a Maven publication."""
        if name in self._pubs:
            raise ConfigurationError(f"Publication '{name}' already declared")
        pub = MavenPublication(name=name, **fields)
        if configure is not None:
            configure(pub)
        self._pubs[name] = pub
        for hook in list(self._on_added):
            hook(pub)
        return pub

    def configure_each(self, action: Callable[[MavenPublication], None]) -> None:
        """Register an action applied to every publication at finalization."""
        self._configure_each.append(action)

    def finalize(self, publication: MavenPublication) -> MavenPublication:
        """Apply configure_each actions once, before serialization."""
        if publication.name not in self._finalized:
            for action in self._configure_each:
                action(publication)
            self._finalized.add(publication.name)
            logger.debug("Finalized publication '%s'", publication.name)
        return publication

    def when_added(self, action: Callable[[MavenPublication], None]) -> None:
        self._on_added.append(action)
        for pub in list(self._pubs.values()):
            action(pub)

    def find(self, name: str) -> MavenPublication | None:
        return self._pubs.get(name)

    def __iter__(self) -> Iterator[MavenPublication]:
        return iter(list(self._pubs.values()))

    def __len__(self) -> int:
        return len(self._pubs)


class PublishingExtension:
    """The ``publishing`` extension block."""

    def __init__(self) -> None:
        self.repositories = RepositoryContainer()
        self.publications = PublicationContainer()


class MavenPublishPlugin:
    """Adds the publishing extension and keeps publish tasks in sync."""

    def apply(self, project: Project) -> None:
        publishing = project.extensions.create(PUBLISHING_EXTENSION_NAME, PublishingExtension())
        lifecycle = project.tasks.register(PUBLISH_LIFECYCLE_NAME)
        lifecycle.group = PUBLISHING_GROUP
        lifecycle.description = "Publishes all publications produced by this project."

        def on_repository(repo: MavenRepository) -> None:
            aggregate = project.tasks.register(publish_all_task_name(repo.name))
            aggregate.group = PUBLISHING_GROUP
            aggregate.description = f"Publishes all publications to the {repo.name} repository."
            aggregate.depends_on(
                project.tasks.with_type(PublishToMavenRepository).matching(
                    lambda t: t.repository is repo  # type: ignore[attr-defined]
                )
            )
            lifecycle.depends_on(aggregate)
            for pub in publishing.publications:
                _register_publish_task(project, publishing, pub, repo)

        def on_publication(pub: MavenPublication) -> None:
            for repo in publishing.repositories:
                _register_publish_task(project, publishing, pub, repo)

        publishing.repositories.when_added(on_repository)
        publishing.publications.when_added(on_publication)


def _register_publish_task(
    project: Project,
    publishing: PublishingExtension,
    publication: MavenPublication,
    repository: MavenRepository,
) -> None:
    name = publish_task_name(publication.name, repository.name)
    if name in project.tasks:
        return
    task = project.tasks.register(
        name,
        PublishToMavenRepository,
        publication=publication,
        repository=repository,
        publications=publishing.publications,
    )
    task.group = PUBLISHING_GROUP
    task.description = (
        f"Publishes publication '{publication.name}' to the {repository.name} repository."
    )

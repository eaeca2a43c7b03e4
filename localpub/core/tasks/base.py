"""
Task base — the unit of work the executor schedules.

Tasks are registered in a project's TaskContainer and declare their
dependencies with depends_on(). A dependency may be:

    - a Task
    - a task name (same project) or task path (":other:name")
    - a TaskCollection (evaluated when the graph is planned)
    - a Configuration (its build dependencies)
    - a callable returning any of the above

Cacheable tasks describe their inputs with fingerprint_inputs() and
their outputs with outputs(); the executor uses both for up-to-date
checks.

To create a new task type:
    1. Subclass Task
    2. Implement run()
    3. Optionally set cacheable = True and implement
       fingerprint_inputs(), outputs() and restore_outputs()
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, ClassVar, Iterator, TypeVar

from localpub.core.errors import DuplicateTaskError, UnknownTaskError
from localpub.core.graph.configuration import Configuration

if TYPE_CHECKING:
    from localpub.core.project import Project

logger = logging.getLogger(__name__)

T = TypeVar("T", bound="Task")


class Task(ABC):
    """Abstract base class for all tasks."""

    cacheable: ClassVar[bool] = False

    def __init__(self, name: str, project: Project):
        self.name = name
        self.project = project
        self.group = ""
        self.description = ""
        self.enabled = True
        self._dependencies: list[Any] = []

    @property
    def path(self) -> str:
        return self.project.task_path(self.name)

    def depends_on(self, *items: Any) -> Task:
        """Add dependencies. Returns self for chaining."""
        self._dependencies.extend(items)
        return self

    @property
    def dependencies(self) -> list[Any]:
        return list(self._dependencies)

    def task_dependencies(self) -> list[Task]:
        """Expand declared dependencies into concrete tasks."""
        result: list[Task] = []
        for item in self._dependencies:
            for task in expand_dependency(item, self.project):
                if task is not self and task not in result:
                    result.append(task)
        return result

    # ── Caching contract ─────────────────────────────────────────

    def fingerprint_inputs(self) -> str | None:
        """Hash of everything the task reads. None disables caching."""
        return None

    def outputs(self) -> list[Path]:
        """Paths the task produces."""
        return []

    def restore_outputs(self, outputs: list[Path]) -> None:
        """Rebuild in-memory results when the task is up to date."""

    # ── Action ───────────────────────────────────────────────────

    @abstractmethod
    def run(self) -> str | None:
        """Perform the task's work. May return a short summary line."""

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} path={self.path!r}>"


class LifecycleTask(Task):
    """A task with no action of its own; it only aggregates dependencies."""

    def run(self) -> str | None:
        return None


class TaskCollection:
    """A live, filtered view over a TaskContainer.

    Iterating re-evaluates the filter, so tasks registered after the
    collection was created are included.
    """

    def __init__(self, container: TaskContainer, predicate: Callable[[Task], bool]):
        self._container = container
        self._predicate = predicate

    def matching(self, predicate: Callable[[Task], bool]) -> TaskCollection:
        """Narrow this collection further."""
        outer = self._predicate
        return TaskCollection(self._container, lambda t: outer(t) and predicate(t))

    def with_type(self, task_type: type[T]) -> TaskCollection:
        return self.matching(lambda t: isinstance(t, task_type))

    def configure_each(self, action: Callable[[Task], None]) -> None:
        """Apply ``action`` to current and future members."""
        self._container.when_task_added(lambda t: action(t) if self._predicate(t) else None)

    @property
    def names(self) -> list[str]:
        return [t.name for t in self]

    def __iter__(self) -> Iterator[Task]:
        return iter([t for t in self._container if self._predicate(t)])

    def __len__(self) -> int:
        return len(list(iter(self)))

    def __repr__(self) -> str:
        return f"<TaskCollection {self.names!r}>"


class TaskContainer:
    """Per-project task registry, in registration order."""

    def __init__(self, project: Project):
        self._project = project
        self._tasks: dict[str, Task] = {}
        self._on_added: list[Callable[[Task], None]] = []

    def register(
        self,
        name: str,
        task_type: type[T] | None = None,
        configure: Callable[[T], None] | None = None,
        **kwargs: Any,
    ) -> T:
        """Create, configure and register a task.

        Raises:
            DuplicateTaskError: If the name is already taken.
        """
        if name in self._tasks:
            raise DuplicateTaskError(
                f"Task '{name}' already exists in project {self._project.path}"
            )
        cls = task_type or LifecycleTask
        task = cls(name, self._project, **kwargs)
        self._tasks[name] = task
        if configure is not None:
            configure(task)  # type: ignore[arg-type]
        for hook in list(self._on_added):
            hook(task)
        logger.debug("Registered task %s (%s)", task.path, cls.__name__)
        return task  # type: ignore[return-value]

    def when_task_added(self, action: Callable[[Task], None]) -> None:
        """Run ``action`` for every existing and future task."""
        self._on_added.append(action)
        for task in list(self._tasks.values()):
            action(task)

    def find(self, name: str) -> Task | None:
        return self._tasks.get(name)

    def named(self, name: str) -> Task:
        task = self._tasks.get(name)
        if task is None:
            raise UnknownTaskError(
                f"Task '{name}' not found in project {self._project.path}"
            )
        return task

    def matching(self, predicate: Callable[[Task], bool]) -> TaskCollection:
        return TaskCollection(self, predicate)

    def with_type(self, task_type: type[T]) -> TaskCollection:
        return TaskCollection(self, lambda t: isinstance(t, task_type))

    def names(self) -> list[str]:
        return list(self._tasks.keys())

    def __iter__(self) -> Iterator[Task]:
        return iter(list(self._tasks.values()))

    def __contains__(self, name: object) -> bool:
        return name in self._tasks

    def __len__(self) -> int:
        return len(self._tasks)


def expand_dependency(item: Any, project: Project) -> list[Task]:
    """Turn one declared dependency into concrete tasks."""
    if isinstance(item, Task):
        return [item]
    if isinstance(item, str):
        if item.startswith(":"):
            return [project.graph.task(item)]
        return [project.tasks.named(item)]
    if isinstance(item, TaskCollection):
        return list(item)
    if isinstance(item, Configuration):
        tasks: list[Task] = []
        for dep in item.build_dependencies():
            tasks.extend(expand_dependency(dep, item.owner))
        return tasks
    if isinstance(item, (list, tuple, set)):
        tasks = []
        for sub in item:
            tasks.extend(expand_dependency(sub, project))
        return tasks
    if callable(item):
        return expand_dependency(item(), project)
    raise TypeError(f"Cannot use {item!r} as a task dependency")

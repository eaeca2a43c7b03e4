"""
FileCollection — a lazily evaluated, ordered set of paths.

Sources are kept as given and only turned into paths when files() is
called, so a collection built from a configuration reflects whatever
the configuration resolves to at that moment.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Iterator, Union

from localpub.core.graph.configuration import Configuration

FileSourceItem = Union[Path, str, Configuration, "FileCollection", Callable[[], Any]]


class FileCollection:
    """Ordered, de-duplicated union of file sources."""

    def __init__(self, *sources: FileSourceItem):
        self._sources: list[FileSourceItem] = list(sources)

    def from_(self, *sources: FileSourceItem) -> FileCollection:
        """Add sources. Returns self for chaining."""
        self._sources.extend(sources)
        return self

    @property
    def sources(self) -> list[FileSourceItem]:
        return list(self._sources)

    def files(self) -> list[Path]:
        result: list[Path] = []
        for source in self._sources:
            for path in _paths_of(source):
                if path not in result:
                    result.append(path)
        return result

    def build_dependencies(self) -> list[Any]:
        """Build dependencies contributed by configuration sources."""
        deps: list[Any] = []
        for source in self._sources:
            if isinstance(source, Configuration):
                deps.append(source)
            elif isinstance(source, FileCollection):
                deps.extend(source.build_dependencies())
        return deps

    def is_empty(self) -> bool:
        return not self.files()

    def __iter__(self) -> Iterator[Path]:
        return iter(self.files())

    def __len__(self) -> int:
        return len(self.files())


def _paths_of(source: Any) -> list[Path]:
    if isinstance(source, Configuration):
        return source.files()
    if isinstance(source, FileCollection):
        return source.files()
    if isinstance(source, (str, Path)):
        return [Path(source)]
    if isinstance(source, (list, tuple)):
        paths: list[Path] = []
        for item in source:
            paths.extend(_paths_of(item))
        return paths
    if callable(source):
        return _paths_of(source())
    raise TypeError(f"Cannot use {source!r} as a file source")

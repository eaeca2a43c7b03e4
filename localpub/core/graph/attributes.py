"""
Attributes — (key, value) selection tags on configuration nodes.

Resolution selects a producer when its attributes contain every
(key, value) pair the consumer requests. Keys may be given lazily as
callables so they follow later changes to the extension (the artifact
key is read at resolution time, not at wiring time).
"""

from __future__ import annotations

from typing import Callable, Iterator, Mapping, Union

AttributeKey = Union[str, Callable[[], str]]


class AttributeContainer:
    """Ordered set of attribute entries.

    Setting the same key twice keeps the last value, matching the
    behavior of a plain mapping.
    """

    def __init__(self) -> None:
        self._entries: list[tuple[AttributeKey, str]] = []

    def attribute(self, key: AttributeKey, value: str) -> AttributeContainer:
        """Add an attribute. Returns self for chaining."""
        self._entries.append((key, value))
        return self

    def as_dict(self) -> dict[str, str]:
        """Evaluate lazy keys and return the current attribute mapping."""
        result: dict[str, str] = {}
        for key, value in self._entries:
            resolved = key() if callable(key) else key
            result[resolved] = value
        return result

    def is_empty(self) -> bool:
        return not self._entries

    def __iter__(self) -> Iterator[tuple[str, str]]:
        return iter(self.as_dict().items())

    def __len__(self) -> int:
        return len(self.as_dict())

    def __repr__(self) -> str:
        return f"<AttributeContainer {self.as_dict()!r}>"


def attributes_match(requested: Mapping[str, str], offered: Mapping[str, str]) -> bool:
    """Whether ``offered`` carries every requested (key, value) pair.

    Values are compared with plain string equality.
    """
    return all(offered.get(key) == value for key, value in requested.items())

"""
Error types raised by the build layer.

Everything derives from LocalPubError so entry points can catch one
type. Attribute mismatches during resolution are NOT errors; they
simply yield nothing.
"""

from __future__ import annotations


class LocalPubError(Exception):
    """Base class for all localpub errors."""


class PropertyNotSetError(LocalPubError):
    """Raised when a required property is read before it was set."""

    def __init__(self, owner: str, prop: str):
        self.owner = owner
        self.prop = prop
        super().__init__(f"Property '{prop}' of {owner} has not been set")


class ConfigurationError(LocalPubError):
    """Raised for invalid use of a configuration node."""


class UnknownProjectError(LocalPubError):
    """Raised when a project path is not part of the build graph."""


class UnknownTaskError(LocalPubError):
    """Raised when a task name or path cannot be found."""


class DuplicateTaskError(LocalPubError):
    """Raised when a task name is registered twice in one project."""


class TaskGraphCycleError(LocalPubError):
    """Raised when task dependencies form a cycle."""


class PublicationValidationError(LocalPubError):
    """Raised when a publication cannot be written to a repository."""

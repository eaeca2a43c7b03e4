"""
BuildState — persisted task history.

Serialized to .state/task-history.json under the build root. It holds
what the executor needs for up-to-date checks: the input fingerprint
and the outputs of each task's last successful run.

The file is disposable: delete it and every cacheable task simply
runs again on the next invocation.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


class TaskState(BaseModel):
    """History of one task, keyed by task path."""

    path: str
    fingerprint: str | None = None
    outputs: list[str] = Field(default_factory=list)
    last_status: str | None = None  # ok, up_to_date, failed
    last_run_at: str | None = None


class OperationRecord(BaseModel):
    """Summary of the last build invocation."""

    operation_id: str = ""
    requested: list[str] = Field(default_factory=list)
    started_at: str = ""
    ended_at: str = ""
    status: str = ""  # ok, failed
    tasks_total: int = 0
    tasks_executed: int = 0
    tasks_up_to_date: int = 0
    tasks_failed: int = 0


class BuildState(BaseModel):
    """Root state model — serialized to .state/task-history.json."""

    # ── Schema ───────────────────────────────────────────────────
    schema_version: int = 1

    # ── Identity ─────────────────────────────────────────────────
    build_name: str = ""

    # ── Timestamps ───────────────────────────────────────────────
    created_at: str = Field(default_factory=_now_iso)
    updated_at: str = Field(default_factory=_now_iso)

    # ── Task history ─────────────────────────────────────────────
    tasks: dict[str, TaskState] = Field(default_factory=dict)

    # ── Last operation ───────────────────────────────────────────
    last_operation: OperationRecord = Field(default_factory=OperationRecord)

    def touch(self) -> None:
        """Update the updated_at timestamp."""
        self.updated_at = _now_iso()

    def get_task_state(self, path: str) -> TaskState | None:
        return self.tasks.get(path)

    def set_task_state(self, path: str, **kwargs: Any) -> None:
        """Update or create a task history entry."""
        if path in self.tasks:
            for key, value in kwargs.items():
                setattr(self.tasks[path], key, value)
        else:
            self.tasks[path] = TaskState(path=path, **kwargs)


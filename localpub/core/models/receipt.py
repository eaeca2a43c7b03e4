"""
Receipt model — the result of executing one task.

The executor never lets a task exception escape: failures are captured
in a Receipt with status ``failed`` and the invocation stops there.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


class Receipt(BaseModel):
    """Outcome of a single task execution.

    ``outputs`` lists the task's declared output paths after the run
    (or, for an up-to-date task, the outputs restored from history).
    """

    task: str                       # task path, e.g. ":core:collectRepository"
    status: Literal["ok", "up_to_date", "skipped", "failed"] = "ok"

    started_at: str = Field(default_factory=_now_iso)
    ended_at: str = Field(default_factory=_now_iso)
    duration_ms: int = 0

    output: str = ""
    error: str | None = None
    outputs: list[str] = Field(default_factory=list)

    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """Whether the task completed (ran or was up to date)."""
        return self.status in ("ok", "up_to_date")

    @property
    def failed(self) -> bool:
        return self.status == "failed"

    @property
    def up_to_date(self) -> bool:
        return self.status == "up_to_date"

    @classmethod
    def success(cls, task: str, output: str = "", **kwargs: Any) -> Receipt:
        """Create a success receipt."""
        return cls(task=task, status="ok", output=output, **kwargs)

    @classmethod
    def cached(cls, task: str, **kwargs: Any) -> Receipt:
        """Create an up-to-date receipt."""
        return cls(task=task, status="up_to_date", output="UP-TO-DATE", **kwargs)

    @classmethod
    def failure(cls, task: str, error: str, **kwargs: Any) -> Receipt:
        """Create a failure receipt."""
        return cls(task=task, status="failed", error=error, **kwargs)

    @classmethod
    def skip(cls, task: str, reason: str = "", **kwargs: Any) -> Receipt:
        """Create a skip receipt."""
        return cls(task=task, status="skipped", output=reason, **kwargs)

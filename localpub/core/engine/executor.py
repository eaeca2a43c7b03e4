"""
Engine executor — plan and run a task graph.

Flow:
    requested tasks → dependency closure → topological order
        → up-to-date check → run → receipts → persist history

Each task runs at most once per invocation. Task exceptions never
escape: they become a failed Receipt and the remaining tasks are not
run.
"""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path

from localpub.core.errors import TaskGraphCycleError
from localpub.core.models.receipt import Receipt
from localpub.core.models.state import BuildState
from localpub.core.persistence.audit import AuditEntry, AuditWriter
from localpub.core.project import BuildGraph
from localpub.core.tasks.base import Task

logger = logging.getLogger(__name__)


@dataclass
class ExecutionPlan:
    """Tasks to run, in execution order."""

    operation_id: str = ""
    requested: list[str] = field(default_factory=list)
    tasks: list[Task] = field(default_factory=list)

    @property
    def total_tasks(self) -> int:
        return len(self.tasks)

    @property
    def task_paths(self) -> list[str]:
        return [t.path for t in self.tasks]


@dataclass
class ExecutionReport:
    """Result of executing a plan."""

    operation_id: str = ""
    requested: list[str] = field(default_factory=list)
    receipts: list[Receipt] = field(default_factory=list)
    not_run: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.receipts)

    @property
    def executed(self) -> int:
        return sum(1 for r in self.receipts if r.status == "ok")

    @property
    def up_to_date(self) -> int:
        return sum(1 for r in self.receipts if r.up_to_date)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.receipts if r.failed)

    @property
    def skipped(self) -> int:
        return sum(1 for r in self.receipts if r.status == "skipped")

    @property
    def all_ok(self) -> bool:
        return self.failed == 0

    @property
    def status(self) -> str:
        return "ok" if self.failed == 0 else "failed"

    def receipt_for(self, task_path: str) -> Receipt | None:
        for receipt in self.receipts:
            if receipt.task == task_path:
                return receipt
        return None

    def to_dict(self) -> dict:
        return {
            "operation_id": self.operation_id,
            "requested": self.requested,
            "status": self.status,
            "total": self.total,
            "executed": self.executed,
            "up_to_date": self.up_to_date,
            "failed": self.failed,
            "skipped": self.skipped,
            "not_run": self.not_run,
            "receipts": [r.model_dump(mode="json") for r in self.receipts],
        }


def build_plan(
    graph: BuildGraph,
    requested: list[str | Task],
    operation_id: str = "",
) -> ExecutionPlan:
    """Compute the execution order for the requested tasks.

    Args:
        graph: The build graph.
        requested: Task objects, task paths, or task names (a bare name
            selects that task in every project).
        operation_id: Identifier carried into the report.

    Raises:
        UnknownTaskError: If a requested task does not exist.
        TaskGraphCycleError: If dependencies form a cycle.
    """
    roots: list[Task] = []
    labels: list[str] = []
    for item in requested:
        if isinstance(item, Task):
            roots.append(item)
            labels.append(item.path)
        else:
            roots.extend(graph.select_tasks(item))
            labels.append(item)

    ordered: list[Task] = []
    done: set[int] = set()
    visiting: list[Task] = []

    def visit(task: Task) -> None:
        if id(task) in done:
            return
        if task in visiting:
            cycle = visiting[visiting.index(task):] + [task]
            raise TaskGraphCycleError(
                "Circular dependency: " + " → ".join(t.path for t in cycle)
            )
        visiting.append(task)
        for dep in task.task_dependencies():
            visit(dep)
        visiting.pop()
        done.add(id(task))
        ordered.append(task)

    for root in roots:
        visit(root)

    return ExecutionPlan(operation_id=operation_id, requested=labels, tasks=ordered)


def _is_up_to_date(task: Task, fingerprint: str, state: BuildState) -> bool:
    previous = state.get_task_state(task.path)
    if previous is None or previous.fingerprint != fingerprint:
        return False
    if previous.last_status not in ("ok", "up_to_date"):
        return False
    return all(Path(p).exists() for p in previous.outputs)


def execute_task(task: Task, state: BuildState | None = None) -> Receipt:
    """Run one task (or skip it as up to date). Never raises."""
    start = time.monotonic()

    def elapsed() -> int:
        return int((time.monotonic() - start) * 1000)

    if not task.enabled:
        return Receipt.skip(task.path, reason="disabled")

    fingerprint: str | None = None
    try:
        if task.cacheable and state is not None:
            fingerprint = task.fingerprint_inputs()
            if fingerprint is not None and _is_up_to_date(task, fingerprint, state):
                previous = state.get_task_state(task.path)
                assert previous is not None
                task.restore_outputs([Path(p) for p in previous.outputs])
                state.set_task_state(task.path, last_status="up_to_date")
                return Receipt.cached(task.path, outputs=previous.outputs, duration_ms=elapsed())

        output = task.run() or ""
        outputs = [str(p) for p in task.outputs()]
    except Exception as e:
        logger.debug("Task %s raised", task.path, exc_info=True)
        if state is not None:
            state.set_task_state(task.path, last_status="failed", fingerprint=None)
        return Receipt.failure(task.path, f"{type(e).__name__}: {e}", duration_ms=elapsed())

    if state is not None and task.cacheable:
        state.set_task_state(
            task.path,
            fingerprint=fingerprint,
            outputs=outputs,
            last_status="ok",
            last_run_at=datetime.now(UTC).isoformat(),
        )
    return Receipt.success(task.path, output=output, outputs=outputs, duration_ms=elapsed())


def execute_plan(
    plan: ExecutionPlan,
    state: BuildState | None = None,
    dry_run: bool = False,
) -> ExecutionReport:
    """Execute all tasks in a plan, in order, stopping at the first failure.

    Args:
        plan: The execution plan.
        state: Task history for up-to-date checks. Updated in place.
        dry_run: If True, report every task as skipped without running it.

    Returns:
        ExecutionReport with one receipt per attempted task.
    """
    report = ExecutionReport(operation_id=plan.operation_id, requested=plan.requested)

    for index, task in enumerate(plan.tasks):
        if dry_run:
            receipt = Receipt.skip(task.path, reason="dry-run")
        else:
            receipt = execute_task(task, state)
        report.receipts.append(receipt)

        status_marker = "✓" if receipt.ok else "✗" if receipt.failed else "⊘"
        logger.info("%s %s → %s", status_marker, task.path, receipt.status)

        if receipt.failed:
            logger.error("Task %s failed: %s", task.path, receipt.error)
            report.not_run = [t.path for t in plan.tasks[index + 1:]]
            break

    return report


def update_state(state: BuildState, report: ExecutionReport) -> None:
    """Record the invocation summary in the build state."""
    op = state.last_operation
    op.operation_id = report.operation_id
    op.requested = list(report.requested)
    op.status = report.status
    op.tasks_total = report.total
    op.tasks_executed = report.executed
    op.tasks_up_to_date = report.up_to_date
    op.tasks_failed = report.failed
    if report.receipts:
        op.started_at = report.receipts[0].started_at
        op.ended_at = report.receipts[-1].ended_at


def write_audit_entries(
    report: ExecutionReport,
    audit_writer: AuditWriter,
) -> None:
    """Write execution results to the audit ledger."""
    entry = AuditEntry(
        operation_id=report.operation_id,
        operation_type="run",
        requested=report.requested,
        status=report.status,
        tasks_total=report.total,
        tasks_executed=report.executed,
        tasks_up_to_date=report.up_to_date,
        tasks_failed=report.failed,
        projects_affected=sorted({r.task.rsplit(":", 1)[0] for r in report.receipts}),
        errors=[r.error for r in report.receipts if r.error],
    )
    audit_writer.write(entry)


def generate_operation_id() -> str:
    """Generate a unique operation ID."""
    now = datetime.now(UTC).strftime("%Y%m%d-%H%M%S")
    short = uuid.uuid4().hex[:6]
    return f"op-{now}-{short}"

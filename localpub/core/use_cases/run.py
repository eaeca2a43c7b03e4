"""
Run use case — execute tasks of a build.

This is the top-level orchestrator: it loads build.yml, plans the
requested tasks, executes them against the persisted task history and
records the outcome. The full vertical slice from user intent to
audited execution.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from localpub.core.config.loader import ConfigError, find_build_file, load_build
from localpub.core.engine.executor import (
    ExecutionPlan,
    ExecutionReport,
    build_plan,
    execute_plan,
    generate_operation_id,
    update_state,
    write_audit_entries,
)
from localpub.core.errors import LocalPubError
from localpub.core.persistence.audit import AuditWriter
from localpub.core.persistence.state_file import default_state_path, load_state, save_state
from localpub.core.project import BuildGraph

logger = logging.getLogger(__name__)


@dataclass
class RunResult:
    """Result of running tasks."""

    report: ExecutionReport | None = None
    plan: ExecutionPlan | None = None
    graph: BuildGraph | None = None
    build_root: Path | None = None
    error: str | None = None

    def to_dict(self) -> dict:
        result: dict = {}
        if self.error:
            result["error"] = self.error
        if self.graph is not None:
            result["build_name"] = self.graph.name
            result["build_root"] = str(self.build_root)
        if self.plan is not None:
            result["planned"] = self.plan.task_paths
        if self.report is not None:
            result["report"] = self.report.to_dict()
        return result


def run_tasks(
    tasks: list[str],
    config_path: Path | None = None,
    graph: BuildGraph | None = None,
    dry_run: bool = False,
    persist: bool = True,
) -> RunResult:
    """Plan and execute tasks.

    Args:
        tasks: Task names (selected in every project) or task paths.
        config_path: Optional explicit path to build.yml.
        graph: Optional pre-built graph; build.yml is not read when given.
        dry_run: If True, plan but don't execute.
        persist: If False, skip task history and the audit ledger.

    Returns:
        RunResult with the execution report, or an error message.
    """
    result = RunResult()

    # ── Load build ───────────────────────────────────────────────
    if graph is None:
        try:
            if config_path is None:
                config_path = find_build_file()
            if config_path is None:
                result.error = "No build.yml found."
                return result
            graph = load_build(config_path)
        except (ConfigError, LocalPubError) as e:
            result.error = str(e)
            return result

    result.graph = graph
    result.build_root = graph.root_dir
    root = graph.root_dir

    # ── Plan ─────────────────────────────────────────────────────
    operation_id = generate_operation_id()
    try:
        plan = build_plan(graph, list(tasks), operation_id)
    except LocalPubError as e:
        result.error = str(e)
        return result
    result.plan = plan

    # ── Execute ──────────────────────────────────────────────────
    state_path = default_state_path(root)
    state = load_state(state_path) if persist else None
    if state is not None:
        state.build_name = graph.name

    report = execute_plan(plan, state=state, dry_run=dry_run)
    result.report = report

    if report.failed:
        failed = next(r for r in report.receipts if r.failed)
        result.error = f"Task {failed.task} failed: {failed.error}"

    # ── Persist ──────────────────────────────────────────────────
    if state is not None and not dry_run:
        update_state(state, report)
        save_state(state, state_path)
        write_audit_entries(report, AuditWriter(build_root=root))

    return result

"""
localpub — CLI entrypoint.

Usage:
    python -m localpub.main --help
    python -m localpub.main tasks
    python -m localpub.main collect --project cli
    python -m localpub.main config check
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from localpub import __version__
from localpub.core.observability.logging_config import (
    ENV_LOG_FILE,
    ENV_LOG_FILE_LEVEL,
    resolve_level,
    setup_logging,
)


@click.group()
@click.version_option(version=__version__, prog_name="localpub")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to build.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """localpub — publish to a local Maven repository and collect snapshots."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    setup_logging(
        level=resolve_level(debug=debug, verbose=verbose, quiet=quiet),
        log_file=os.environ.get(ENV_LOG_FILE),
        log_file_level=os.environ.get(ENV_LOG_FILE_LEVEL),
        quiet_third_party=not debug,
    )


def _load_graph_or_exit(ctx: click.Context):
    from localpub.core.config.loader import ConfigError, load_build
    from localpub.core.errors import LocalPubError

    try:
        return load_build(ctx.obj.get("config_path"))
    except (ConfigError, LocalPubError) as e:
        click.secho(f"❌ {e}", fg="red")
        sys.exit(1)


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.option("--all", "show_all", is_flag=True, help="Include per-publication tasks.")
@click.pass_context
def tasks(ctx: click.Context, as_json: bool, show_all: bool) -> None:
    """List tasks of every project."""
    from localpub.core.tasks.publish import PublishToMavenRepository

    graph = _load_graph_or_exit(ctx)

    rows = []
    for project in graph:
        for task in project.tasks:
            if isinstance(task, PublishToMavenRepository) and not show_all:
                continue
            rows.append({"path": task.path, "group": task.group, "description": task.description})

    if as_json:
        click.echo(json.dumps(rows, indent=2))
        return

    click.secho(f"\n📋 {graph.name}", fg="cyan", bold=True)
    for project in graph:
        click.secho(f"\n   {project.path}", fg="white", bold=True)
        for row in rows:
            if row["path"].rsplit(":", 1)[0] != project.path:
                continue
            name = row["path"].rsplit(":", 1)[1]
            desc = f" — {row['description']}" if row["description"] else ""
            click.echo(f"     • {name}{desc}")
    click.echo()


@cli.command()
@click.argument("task_names", nargs=-1, required=True)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.option("--dry-run", is_flag=True, help="Plan but don't execute.")
@click.pass_context
def run(ctx: click.Context, task_names: tuple[str, ...], as_json: bool, dry_run: bool) -> None:
    """Run tasks by name (every project) or by path (:project:task).

    Examples:

        localpub run publish

        localpub run :cli:collectRepository

        localpub run collectRepository --dry-run
    """
    _run_and_report(ctx, list(task_names), as_json=as_json, dry_run=dry_run)


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def publish(ctx: click.Context, as_json: bool) -> None:
    """Publish every project's publications to its local repository."""
    from localpub.core.constants import PUBLICATIONS_TO_LOCAL_REPOSITORY

    _run_and_report(ctx, [PUBLICATIONS_TO_LOCAL_REPOSITORY], as_json=as_json)


@cli.command()
@click.option("--project", "-p", "project", default=None, help="Collect for one project only.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def collect(ctx: click.Context, project: str | None, as_json: bool) -> None:
    """Publish locally and list local + snapshot repositories."""
    from localpub.core.constants import COLLECT_REPOSITORY_NAME

    target = COLLECT_REPOSITORY_NAME
    if project:
        target = f":{project.lstrip(':')}:{COLLECT_REPOSITORY_NAME}"
    result = _run_and_report(ctx, [target], as_json=as_json, summary=False)
    if as_json or result.report is None:
        return

    for receipt in result.report.receipts:
        if not receipt.task.endswith(f":{COLLECT_REPOSITORY_NAME}"):
            continue
        click.secho(f"   {receipt.task}", fg="cyan", bold=True)
        for repo in receipt.outputs:
            click.echo(f"     📦 {repo}")
    click.echo()


def _run_and_report(
    ctx: click.Context,
    task_names: list[str],
    as_json: bool = False,
    dry_run: bool = False,
    summary: bool = True,
):
    from localpub.core.use_cases.run import run_tasks

    result = run_tasks(
        tasks=task_names,
        config_path=ctx.obj.get("config_path"),
        dry_run=dry_run,
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        if result.error:
            sys.exit(1)
        return result

    if result.report is None:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    report = result.report
    mode_label = "[dry-run] " if dry_run else ""
    click.secho(f"\n⚡ {mode_label}{' '.join(task_names)}", fg="cyan", bold=True)
    click.echo()

    for receipt in report.receipts:
        timing = f" ({receipt.duration_ms}ms)" if receipt.duration_ms else ""
        if receipt.up_to_date:
            click.secho(f"   ✓ {receipt.task} ", fg="green", nl=False)
            click.echo("UP-TO-DATE")
        elif receipt.ok:
            click.secho(f"   ✓ {receipt.task}", fg="green", nl=False)
            click.echo(timing)
            if ctx.obj.get("verbose") and receipt.output:
                for line in receipt.output.split("\n")[:10]:
                    click.echo(f"     │ {line}")
        elif receipt.failed:
            click.secho(f"   ✗ {receipt.task}", fg="red", nl=False)
            click.echo(timing)
            if receipt.error:
                for line in receipt.error.split("\n")[:5]:
                    click.echo(f"     │ {line}")
        else:
            click.secho(f"   ⊘ {receipt.task} ", fg="yellow", nl=False)
            click.echo(f"({receipt.output})")

    for path in report.not_run:
        click.secho(f"   ⊘ {path} (not run)", fg="yellow")

    click.echo()
    if summary or report.failed:
        status_color = "green" if report.all_ok else "red"
        click.secho(
            f"   Result: {report.executed} executed, {report.up_to_date} up-to-date, "
            f"{report.failed} failed",
            fg=status_color,
            bold=True,
        )
        click.echo()

    if report.failed > 0:
        sys.exit(1)
    return result


@cli.command()
@click.argument("project")
@click.option("--configuration", default=None, help="Resolvable configuration (default: snapshots).")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def resolve(ctx: click.Context, project: str, configuration: str | None, as_json: bool) -> None:
    """Show the repositories a project's snapshots configuration resolves to."""
    from localpub.core.constants import SNAPSHOTS_NAME
    from localpub.core.use_cases.resolve import resolve_snapshots

    result = resolve_snapshots(
        project,
        config_path=ctx.obj.get("config_path"),
        configuration=configuration or SNAPSHOTS_NAME,
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(1 if result.error else 0)

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    resolved = result.resolved
    assert resolved is not None
    click.secho(f"\n🔗 {resolved.configuration}", fg="cyan", bold=True)
    for key, value in resolved.requested.items():
        click.echo(f"   {key} = {value}")
    click.echo()
    if resolved.is_empty:
        click.echo("   (no matching producers)")
    for path in resolved.files:
        click.echo(f"   📦 {path}")
    if resolved.unmatched and ctx.obj.get("verbose"):
        click.echo()
        click.secho("   Not selected:", fg="yellow")
        for path in resolved.unmatched:
            click.echo(f"     • {path}")
    click.echo()


@cli.group()
def config() -> None:
    """Build configuration commands."""


@config.command("check")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def config_check(ctx: click.Context, as_json: bool) -> None:
    """Validate build.yml configuration."""
    from localpub.core.use_cases.config_check import check_config

    result = check_config(config_path=ctx.obj.get("config_path"))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.valid else 1)

    if result.valid:
        assert result.settings is not None
        click.secho("✅ Configuration is valid", fg="green", bold=True)
        click.echo(f"   Build: {result.settings.name}")
        click.echo(f"   Projects: {len(result.settings.projects)}")
    else:
        click.secho("❌ Configuration errors:", fg="red", bold=True)
        for err in result.errors:
            click.echo(f"   • {err}")

    if result.warnings:
        click.echo()
        click.secho("⚠️  Warnings:", fg="yellow")
        for warn in result.warnings:
            click.echo(f"   • {warn}")

    if not result.valid:
        click.echo()
        sys.exit(1)

    click.echo()


if __name__ == "__main__":
    cli()

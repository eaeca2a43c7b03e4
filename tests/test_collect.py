"""
Tests for the collect task — local + snapshot repository aggregation.
"""

import shutil
from pathlib import Path

import pytest

from localpub.core.constants import COLLECT_REPOSITORY_NAME, SNAPSHOT_RELEASE_NAME
from localpub.core.engine.executor import execute_task
from localpub.core.errors import PropertyNotSetError
from localpub.core.models.extension import LocalPublicationExtension
from localpub.core.models.state import BuildState
from localpub.core.project import BuildGraph
from localpub.core.tasks.collect import CollectTask
from localpub.core.use_cases.run import run_tasks


def _collect(project) -> CollectTask:
    task = project.tasks.named(COLLECT_REPOSITORY_NAME)
    assert isinstance(task, CollectTask)
    return task


class TestCollectTaskUnit:
    def test_explicit_local_wins_over_convention(self, graph: BuildGraph, tmp_path: Path):
        project = graph.create_project("core")
        task = project.tasks.register("collect", CollectTask)
        task.local_convention = lambda: tmp_path / "convention"
        task.local = tmp_path / "explicit"
        assert task.local_directory() == tmp_path / "explicit"

    def test_unset_local_fails(self, graph: BuildGraph):
        project = graph.create_project("core")
        task = project.tasks.register("collect", CollectTask)
        with pytest.raises(PropertyNotSetError, match="local"):
            task.run()

    def test_local_then_externals_without_dedup(self, graph: BuildGraph, tmp_path: Path):
        project = graph.create_project("core")
        task = project.tasks.register("collect", CollectTask)
        task.local = tmp_path / "repo"
        task.externals.from_(tmp_path / "ext1", tmp_path / "repo")

        task.run()
        assert task.repositories == [tmp_path / "repo", tmp_path / "ext1", tmp_path / "repo"]

    def test_run_resets_previous_result(self, graph: BuildGraph, tmp_path: Path):
        project = graph.create_project("core")
        task = project.tasks.register("collect", CollectTask)
        task.local = tmp_path / "repo"
        task.run()
        task.run()
        assert task.repositories == [tmp_path / "repo"]

    def test_fingerprint_follows_local_content(self, graph: BuildGraph, tmp_path: Path):
        project = graph.create_project("core")
        task = project.tasks.register("collect", CollectTask)
        task.local = tmp_path / "repo"
        empty = task.fingerprint_inputs()

        (tmp_path / "repo").mkdir()
        (tmp_path / "repo" / "a.pom").write_text("<project/>")
        changed = task.fingerprint_inputs()
        assert changed != empty
        assert task.fingerprint_inputs() == changed


class TestCollectRepository:
    def test_no_producers_yields_local_only(self, make_project):
        app = make_project("app", publish=False)
        result = run_tasks([":app:collectRepository"], graph=app.graph, persist=False)

        assert result.error is None
        assert _collect(app).repositories == [app.build_dir / ".m2"]

    def test_local_then_snapshot_repository(self, make_project):
        core = make_project("core")
        app = make_project("app")
        app.dependencies.add(SNAPSHOT_RELEASE_NAME, core)

        result = run_tasks([":app:collectRepository"], graph=app.graph, persist=False)

        assert result.error is None
        assert _collect(app).repositories == [app.build_dir / ".m2", core.build_dir / ".m2"]
        assert (core.build_dir / ".m2" / "org" / "example" / "core" / "1.0.0").is_dir()

    def test_producer_publishes_before_consumer_collects(self, make_project):
        core = make_project("core")
        app = make_project("app")
        app.dependencies.add(SNAPSHOT_RELEASE_NAME, core)

        result = run_tasks([":app:collectRepository"], graph=app.graph, persist=False)

        paths = result.plan.task_paths
        producer_publish = paths.index(":core:publishMavenPublicationToLocalRepository")
        assert producer_publish < paths.index(":app:collectRepository")
        assert paths[-1] == ":app:collectRepository"

    def test_artifact_key_change_drops_producer(self, make_project):
        core = make_project("core")
        app = make_project("app")
        app.dependencies.add(SNAPSHOT_RELEASE_NAME, core)
        core.extensions.get_by_type(LocalPublicationExtension).artifact_key = "custom.key"

        run_tasks([":app:collectRepository"], graph=app.graph, persist=False)

        assert _collect(app).repositories == [app.build_dir / ".m2"]

    def test_repository_path_override_is_followed(self, make_project, tmp_path: Path):
        app = make_project("app")
        ext = app.extensions.get_by_type(LocalPublicationExtension)
        ext.repository_path = tmp_path / "shared-repo"

        run_tasks([":app:collectRepository"], graph=app.graph, persist=False)

        assert _collect(app).repositories == [tmp_path / "shared-repo"]
        assert (tmp_path / "shared-repo" / "org" / "example" / "app").is_dir()


class TestCollectCaching:
    def test_second_run_is_up_to_date(self, make_project):
        core = make_project("core")
        app = make_project("app")
        app.dependencies.add(SNAPSHOT_RELEASE_NAME, core)
        graph = app.graph

        first = run_tasks([":app:collectRepository"], graph=graph)
        second = run_tasks([":app:collectRepository"], graph=graph)

        assert first.report.receipt_for(":app:collectRepository").status == "ok"
        receipt = second.report.receipt_for(":app:collectRepository")
        assert receipt.up_to_date
        assert receipt.outputs == [str(app.build_dir / ".m2"), str(core.build_dir / ".m2")]
        assert second.report.receipt_for(":core:publishMavenPublicationToLocalRepository").up_to_date

    def test_up_to_date_restores_repositories(self, make_project):
        core = make_project("core")
        app = make_project("app")
        app.dependencies.add(SNAPSHOT_RELEASE_NAME, core)

        run_tasks([":app:collectRepository"], graph=app.graph)
        _collect(app).repositories = []
        run_tasks([":app:collectRepository"], graph=app.graph)

        assert _collect(app).repositories == [app.build_dir / ".m2", core.build_dir / ".m2"]

    def test_changed_snapshot_content_reruns(self, make_project):
        core = make_project("core")
        app = make_project("app")
        app.dependencies.add(SNAPSHOT_RELEASE_NAME, core)

        run_tasks([":app:collectRepository"], graph=app.graph)
        (core.project_dir / "dist" / "core.jar").write_bytes(b"jar:core:v2")
        second = run_tasks([":app:collectRepository"], graph=app.graph)

        assert second.report.receipt_for(":core:publishMavenPublicationToLocalRepository").status == "ok"
        assert second.report.receipt_for(":app:collectRepository").status == "ok"

    def test_deleted_output_reruns(self, make_project):
        app = make_project("app")
        run_tasks([":app:collectRepository"], graph=app.graph)
        shutil.rmtree(app.build_dir / ".m2")
        second = run_tasks([":app:collectRepository"], graph=app.graph)

        assert second.report.receipt_for(":app:publishMavenPublicationToLocalRepository").status == "ok"
        assert second.report.receipt_for(":app:collectRepository").ok
        assert (app.build_dir / ".m2").is_dir()

    def test_changed_repository_path_republishes(self, make_project, tmp_path: Path):
        app = make_project("app")
        ext = app.extensions.get_by_type(LocalPublicationExtension)
        ext.repository_path = tmp_path / "repo-a"
        run_tasks([":app:collectRepository"], graph=app.graph)

        ext.repository_path = tmp_path / "repo-b"
        second = run_tasks([":app:collectRepository"], graph=app.graph)

        assert second.report.receipt_for(":app:publishMavenPublicationToLocalRepository").status == "ok"
        assert (tmp_path / "repo-b" / "org" / "example" / "app" / "1.0.0").is_dir()
        assert second.report.receipt_for(":app:collectRepository").status == "ok"
        assert _collect(app).repositories == [tmp_path / "repo-b"]

    def test_relocated_repository_with_same_content_recollects(self, graph: BuildGraph, tmp_path: Path):
        project = graph.create_project("core")
        task = project.tasks.register("collect", CollectTask)
        (tmp_path / "repo-a" / "org").mkdir(parents=True)
        (tmp_path / "repo-a" / "org" / "a.jar").write_bytes(b"jar")
        state = BuildState()

        task.local = tmp_path / "repo-a"
        assert execute_task(task, state).status == "ok"

        shutil.copytree(tmp_path / "repo-a", tmp_path / "repo-b")
        task.local = tmp_path / "repo-b"
        receipt = execute_task(task, state)

        assert receipt.status == "ok"
        assert task.repositories == [tmp_path / "repo-b"]

    def test_relocated_external_recollects(self, graph: BuildGraph, tmp_path: Path):
        project = graph.create_project("core")
        task = project.tasks.register("collect", CollectTask)
        task.local = tmp_path / "local"
        for name in ("ext-a", "ext-b"):
            (tmp_path / name).mkdir()
            (tmp_path / name / "a.pom").write_text("<project/>")
        external = [tmp_path / "ext-a"]
        task.externals.from_(lambda: external)
        state = BuildState()

        execute_task(task, state)
        external[0] = tmp_path / "ext-b"
        receipt = execute_task(task, state)

        assert receipt.status == "ok"
        assert task.repositories == [tmp_path / "local", tmp_path / "ext-b"]

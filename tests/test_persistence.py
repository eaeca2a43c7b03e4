"""
Tests for persistence — task history file, audit ledger and logging setup.
"""

import json
import logging
from pathlib import Path

from localpub.core.models.state import BuildState
from localpub.core.observability.logging_config import ENV_LOG_LEVEL, resolve_level, setup_logging
from localpub.core.persistence.audit import AuditEntry, AuditWriter
from localpub.core.persistence.state_file import default_state_path, load_state, save_state
from localpub.core.use_cases.run import run_tasks


class TestStateFile:
    """Tests for task history persistence."""

    def test_save_and_load(self, tmp_path: Path):
        path = default_state_path(tmp_path)
        state = BuildState(build_name="demo")
        state.set_task_state(":core:collectRepository", fingerprint="abc", outputs=["/r"])

        save_state(state, path)
        assert path == tmp_path / ".state" / "task-history.json"

        loaded = load_state(path)
        assert loaded.build_name == "demo"
        assert loaded.tasks[":core:collectRepository"].outputs == ["/r"]

    def test_load_missing_returns_fresh(self, tmp_path: Path):
        state = load_state(tmp_path / "nonexistent.json")
        assert state.tasks == {}

    def test_load_corrupt_returns_fresh(self, tmp_path: Path):
        path = tmp_path / "corrupt.json"
        path.write_text("not json at all {{{")
        assert load_state(path).tasks == {}

    def test_load_wrong_shape_returns_fresh(self, tmp_path: Path):
        path = tmp_path / "wrong.json"
        path.write_text(json.dumps({"tasks": "nope"}))
        assert load_state(path).tasks == {}

    def test_no_temp_files_left(self, tmp_path: Path):
        path = tmp_path / "history.json"
        save_state(BuildState(), path)
        assert [p.name for p in tmp_path.iterdir()] == ["history.json"]


class TestAuditWriter:
    def test_append_and_read(self, tmp_path: Path):
        writer = AuditWriter(build_root=tmp_path)
        writer.write(AuditEntry(operation_id="op-1", operation_type="run"))
        writer.write(AuditEntry(operation_id="op-2", operation_type="run"))

        assert writer.path == tmp_path / ".state" / "audit.ndjson"
        assert [e.operation_id for e in writer.read_all()] == ["op-1", "op-2"]
        assert [e.operation_id for e in writer.read_recent(1)] == ["op-2"]

    def test_corrupt_line_skipped(self, tmp_path: Path):
        path = tmp_path / "audit.ndjson"
        writer = AuditWriter(path=path)
        writer.write(AuditEntry(operation_id="op-1"))
        with path.open("a") as f:
            f.write("garbage\n")
        writer.write(AuditEntry(operation_id="op-2"))

        assert [e.operation_id for e in writer.read_all()] == ["op-1", "op-2"]

    def test_read_missing(self, tmp_path: Path):
        assert AuditWriter(path=tmp_path / "none.ndjson").read_all() == []


class TestRunPersistence:
    def test_run_records_history_and_audit(self, make_project, tmp_path: Path):
        app = make_project("app")
        result = run_tasks([":app:collectRepository"], graph=app.graph)

        state = load_state(default_state_path(tmp_path))
        assert state.build_name == "demo"
        assert state.last_operation.operation_id == result.report.operation_id
        assert ":app:collectRepository" in state.tasks

        (entry,) = AuditWriter(build_root=tmp_path).read_all()
        assert entry.requested == [":app:collectRepository"]
        assert entry.status == "ok"

    def test_dry_run_persists_nothing(self, make_project, tmp_path: Path):
        app = make_project("app")
        run_tasks([":app:collectRepository"], graph=app.graph, dry_run=True)
        assert not (tmp_path / ".state").exists()

    def test_unknown_task_error(self, make_project):
        app = make_project("app")
        result = run_tasks(["nope"], graph=app.graph)
        assert result.report is None
        assert "not found" in result.error


class TestLoggingSetup:
    def teardown_method(self):
        setup_logging("WARNING")

    def test_level_from_name(self):
        setup_logging("DEBUG")
        assert logging.getLogger().level == logging.DEBUG

    def test_unknown_level_defaults_to_warning(self):
        setup_logging("LOUD")
        assert logging.getLogger().level == logging.WARNING

    def test_file_handler(self, tmp_path: Path):
        log_file = tmp_path / "localpub.log"
        setup_logging("WARNING", log_file=str(log_file), log_file_level="DEBUG")
        logging.getLogger("localpub.test").debug("to file only")
        for handler in logging.getLogger().handlers:
            handler.flush()
        assert "to file only" in log_file.read_text()
        for handler in list(logging.getLogger().handlers):
            handler.close()

    def test_third_party_quieted(self):
        setup_logging("INFO")
        assert logging.getLogger("yaml").level == logging.WARNING

    def test_package_prefix_shortened(self, capsys):
        setup_logging("INFO")
        logging.getLogger("localpub.core.tasks.collect").info("collected")
        err = capsys.readouterr().err
        assert "[tasks.collect] collected" in err


class TestResolveLevel:
    def test_flags_take_precedence(self):
        env = {ENV_LOG_LEVEL: "ERROR"}
        assert resolve_level(debug=True, verbose=True, environ=env) == "DEBUG"
        assert resolve_level(verbose=True, quiet=True, environ=env) == "INFO"
        assert resolve_level(quiet=True, environ={}) == "ERROR"

    def test_environment_then_default(self):
        assert resolve_level(environ={ENV_LOG_LEVEL: "INFO"}) == "INFO"
        assert resolve_level(environ={}) == "WARNING"

"""
Task history file.

Up-to-date checks compare a task's current input fingerprint with the
one recorded here after its last run. The history lives at
``<build root>/.state/task-history.json``. Losing it is harmless: every
cacheable task simply runs once more.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError

from localpub.core.models.state import BuildState

logger = logging.getLogger(__name__)

STATE_DIR_NAME = ".state"
HISTORY_FILE_NAME = "task-history.json"


def default_state_path(build_root: Path) -> Path:
    return build_root / STATE_DIR_NAME / HISTORY_FILE_NAME


def load_state(path: Path) -> BuildState:
    """Read the task history, or an empty one if the file is absent or unusable."""
    if not path.is_file():
        logger.info("No task history at %s, every cacheable task will run", path)
        return BuildState()

    try:
        state = BuildState.model_validate(json.loads(path.read_text(encoding="utf-8")))
    except (OSError, ValueError, ValidationError) as e:
        logger.warning("Ignoring unreadable task history %s: %s", path, e)
        return BuildState()

    logger.debug("Task history %s: %d task(s), updated %s", path, len(state.tasks), state.updated_at)
    return state


def save_state(state: BuildState, path: Path) -> None:
    """Stamp and persist the task history; replaces the file in one step."""
    state.touch()
    text = json.dumps(state.model_dump(mode="json"), indent=2, ensure_ascii=False) + "\n"
    try:
        _replace_file(path, text)
    except OSError as e:
        logger.error("Cannot write task history %s: %s", path, e)
        raise
    logger.debug("Task history written to %s", path)


def _replace_file(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.stem}.", suffix=".tmp")
    tmp = Path(name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(text)
        tmp.replace(path)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise

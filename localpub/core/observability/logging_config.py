"""
Logging setup for the localpub CLI.

    level = resolve_level(debug=False, verbose=True, quiet=False)
    setup_logging(level, log_file=os.environ.get(ENV_LOG_FILE))

Console output goes to stderr, so ``--json`` output on stdout stays
parseable. Level precedence:

    --debug  >  --verbose  >  --quiet  >  LOCALPUB_LOG_LEVEL  >  WARNING

A log file (LOCALPUB_LOG_FILE) gets full detail at its own level
(LOCALPUB_LOG_FILE_LEVEL, default: the console level).
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Mapping

ENV_LOG_LEVEL = "LOCALPUB_LOG_LEVEL"
ENV_LOG_FILE = "LOCALPUB_LOG_FILE"
ENV_LOG_FILE_LEVEL = "LOCALPUB_LOG_FILE_LEVEL"

# Console format per level; anything above INFO prints the bare message
_CONSOLE_FORMATS: dict[int, tuple[str, str | None]] = {
    logging.DEBUG: ("%(asctime)s %(levelname)-5s %(short_name)s:%(lineno)d  %(message)s", "%H:%M:%S"),
    logging.INFO: ("%(asctime)s [%(short_name)s] %(message)s", "%H:%M:%S"),
}
_PLAIN_FORMAT: tuple[str, str | None] = ("%(message)s", None)

_FILE_FORMAT = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d  %(message)s"
_FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"

_PACKAGE_PREFIX = "localpub.core."

_THIRD_PARTY_LOGGERS = ("pydantic", "yaml")


class _ShortNameFilter(logging.Filter):
    """Adds ``short_name``: ``localpub.core.tasks.collect`` → ``tasks.collect``."""

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        if name.startswith(_PACKAGE_PREFIX):
            name = name[len(_PACKAGE_PREFIX):]
        record.short_name = name
        return True


def resolve_level(
    debug: bool = False,
    verbose: bool = False,
    quiet: bool = False,
    environ: Mapping[str, str] | None = None,
) -> str:
    """Pick the console level name from CLI flags, then the environment."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    env = os.environ if environ is None else environ
    return env.get(ENV_LOG_LEVEL, "WARNING")


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
    quiet_third_party: bool = True,
) -> None:
    """Configure the root logger. Safe to call more than once.

    Args:
        level: Console level name. Unknown names fall back to WARNING.
        log_file: Optional log file path.
        log_file_level: Level for the log file (default: ``level``).
        quiet_third_party: Hold pydantic/yaml loggers at WARNING unless
            the console is at DEBUG.
    """
    console_level = _parse_level(level)
    fmt, datefmt = _CONSOLE_FORMATS.get(console_level, _PLAIN_FORMAT)
    if console_level < logging.DEBUG:
        fmt, datefmt = _CONSOLE_FORMATS[logging.DEBUG]

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.addFilter(_ShortNameFilter())
    console.setFormatter(logging.Formatter(fmt, datefmt=datefmt))

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    root.addHandler(console)

    root_level = console_level
    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else console_level
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(file_level)
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt=_FILE_DATEFMT))
        root.addHandler(file_handler)
        root_level = min(root_level, file_level)
    root.setLevel(root_level)

    third_party_level = logging.WARNING if quiet_third_party and console_level > logging.DEBUG else logging.NOTSET
    for name in _THIRD_PARTY_LOGGERS:
        logging.getLogger(name).setLevel(third_party_level)

    logging.raiseExceptions = False


def _parse_level(level: str | None) -> int:
    numeric = logging.getLevelName(level.upper()) if level else None
    return numeric if isinstance(numeric, int) else logging.WARNING

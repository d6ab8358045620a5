"""
Logging configuration — called once by the CLI entrypoint.

Every module logs through ``logging.getLogger(__name__)``.  Build output
(every line ``swift build`` prints) goes to its own logger,
``spm_backend.build_output``, at debug level: the terminal already shows
it through the progress reporter, so the console handler drops those
records.  A log file at DEBUG keeps the full transcript.

Console level precedence (see ``level_from_flags``):
    --debug  >  --verbose  >  --quiet  >  SPM_LOG_LEVEL  >  WARNING
"""

from __future__ import annotations

import logging
import sys

BUILD_OUTPUT_LOGGER = "spm_backend.build_output"

# Console format by threshold, most detailed first
_CONSOLE_FORMATS: tuple[tuple[int, str, str | None], ...] = (
    (logging.DEBUG, "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d: %(message)s", "%H:%M:%S"),
    (logging.INFO, "%(asctime)s [%(name)s] %(message)s", "%H:%M:%S"),
)
_CONSOLE_DEFAULT_FORMAT = "%(message)s"

# Build lines are written as-is; everything else carries its origin
_FILE_FORMAT = "%(asctime)s %(levelname)-5s %(name)s: %(message)s"
_FILE_BUILD_FORMAT = "%(asctime)s build| %(message)s"
_FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"


class _FileFormatter(logging.Formatter):
    def __init__(self) -> None:
        super().__init__(_FILE_FORMAT, datefmt=_FILE_DATEFMT)
        self._build = logging.Formatter(_FILE_BUILD_FORMAT, datefmt=_FILE_DATEFMT)

    def format(self, record: logging.LogRecord) -> str:
        if record.name == BUILD_OUTPUT_LOGGER:
            return self._build.format(record)
        return super().format(record)


def _not_build_output(record: logging.LogRecord) -> bool:
    return record.name != BUILD_OUTPUT_LOGGER


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> None:
    """Configure the root logger for the whole process.

    Args:
        level: Console level name.
        log_file: Optional log file; receives build output as well.
        log_file_level: Level for the file; defaults to ``level``.
    """
    console_level = _parse_level(level)
    fmt, datefmt = _CONSOLE_DEFAULT_FORMAT, None
    for threshold, candidate, candidate_datefmt in _CONSOLE_FORMATS:
        if console_level <= threshold:
            fmt, datefmt = candidate, candidate_datefmt
            break

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(logging.Formatter(fmt, datefmt=datefmt))
    console.addFilter(_not_build_output)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(console)
    root_level = console_level

    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else console_level
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(file_level)
        fh.setFormatter(_FileFormatter())
        root.addHandler(fh)
        root_level = min(root_level, file_level)

    root.setLevel(root_level)


def level_from_flags(
    *,
    debug: bool = False,
    verbose: bool = False,
    quiet: bool = False,
    env_level: str | None = None,
) -> str:
    """Pick the console level name from CLI flags, falling back to the env."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    return env_level or "WARNING"


def _parse_level(level: str | None) -> int:
    numeric = logging.getLevelName(level.upper()) if level else None
    return numeric if isinstance(numeric, int) else logging.WARNING

"""
Process runner — the single place where external commands are spawned.

Two flavours:

- ``run_command``     captures stdout/stderr (manifest dump, bin-path query,
                      git).  Never raises on a non-zero exit; callers
                      inspect ``CommandResult.ok``.
- ``stream_command``  merges stderr into stdout and hands each line to a
                      progress reporter as it arrives (long builds).
                      A reader thread feeds the lines so the timeout
                      holds even while the child is silent.

A missing executable is reported as a failed result with
``returncode=None`` instead of an exception, so every caller handles one
shape of failure.
"""

from __future__ import annotations

import logging
import queue
import subprocess
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Protocol

from spm_backend.core.observability.logging_config import BUILD_OUTPUT_LOGGER

logger = logging.getLogger(__name__)
build_output = logging.getLogger(BUILD_OUTPUT_LOGGER)

# How much of stdout/stderr is kept on a result (tail)
_OUTPUT_TAIL = 4000


class ProgressReporter(Protocol):
    """Receives build output lines for display."""

    def on_line(self, line: str) -> None: ...


@dataclass
class CommandResult:
    """Outcome of one external command."""

    cmd: list[str]
    returncode: int | None
    stdout: str = ""
    stderr: str = ""
    elapsed_ms: int = 0
    error: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def describe_failure(self) -> str:
        """Short human-readable reason, for error messages."""
        if self.error:
            return self.error
        detail = self.stderr.strip() or self.stdout.strip()
        if detail:
            return detail.splitlines()[-1]
        return f"exit code {self.returncode}"


def run_command(
    cmd: list[str],
    *,
    cwd: Path | None = None,
    timeout: int | None = None,
) -> CommandResult:
    """Run a command and capture its output.

    Args:
        cmd: Command list, e.g. ``["swift", "package", "dump-package"]``.
        cwd: Working directory for the command.
        timeout: Seconds before giving up; None waits forever.
    """
    logger.debug("Running: %s (cwd=%s)", " ".join(cmd), cwd)
    start = time.monotonic()
    try:
        result = subprocess.run(
            cmd,
            cwd=str(cwd) if cwd else None,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except FileNotFoundError:
        return CommandResult(cmd=cmd, returncode=None, error=f"{cmd[0]}: command not found")
    except subprocess.TimeoutExpired:
        return CommandResult(cmd=cmd, returncode=None, error=f"Command timed out ({timeout}s)")
    except OSError as e:
        return CommandResult(cmd=cmd, returncode=None, error=str(e))

    elapsed_ms = int((time.monotonic() - start) * 1000)
    if result.returncode != 0:
        logger.debug("Command failed (exit %s): %s", result.returncode, " ".join(cmd))
    return CommandResult(
        cmd=cmd,
        returncode=result.returncode,
        stdout=result.stdout or "",
        stderr=(result.stderr or "")[-_OUTPUT_TAIL:],
        elapsed_ms=elapsed_ms,
    )


def _pump_lines(stream: IO[str], lines: queue.Queue[str | None]) -> None:
    for raw in stream:
        lines.put(raw.rstrip())
    lines.put(None)


def stream_command(
    cmd: list[str],
    *,
    reporter: ProgressReporter | None = None,
    cwd: Path | None = None,
    timeout: int | None = None,
) -> CommandResult:
    """Run a command, forwarding each output line to ``reporter``.

    Every line is also logged to the build-output logger at debug level,
    so a log file keeps the full transcript.  ``timeout`` bounds the whole
    run, including a child that stays silent; on expiry the child is
    killed and a failed result is returned.
    """
    logger.debug("Streaming: %s (cwd=%s)", " ".join(cmd), cwd)
    start = time.monotonic()
    deadline = start + timeout if timeout is not None else None
    lines: list[str] = []
    try:
        proc = subprocess.Popen(
            cmd,
            cwd=str(cwd) if cwd else None,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
        )
    except FileNotFoundError:
        return CommandResult(cmd=cmd, returncode=None, error=f"{cmd[0]}: command not found")
    except OSError as e:
        return CommandResult(cmd=cmd, returncode=None, error=str(e))

    pending: queue.Queue[str | None] = queue.Queue()
    reader = threading.Thread(target=_pump_lines, args=(proc.stdout, pending), daemon=True)
    reader.start()

    while True:
        remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
        try:
            line = pending.get(timeout=remaining)
        except queue.Empty:
            proc.kill()
            proc.wait()
            reader.join(timeout=1)
            if proc.stdout and not reader.is_alive():
                proc.stdout.close()
            logger.debug("Killed after %ss: %s", timeout, " ".join(cmd))
            return CommandResult(
                cmd=cmd,
                returncode=None,
                stdout="\n".join(lines)[-_OUTPUT_TAIL:],
                elapsed_ms=int((time.monotonic() - start) * 1000),
                error=f"Command timed out ({timeout}s)",
            )
        if line is None:
            break
        lines.append(line)
        build_output.debug("%s", line)
        if reporter is not None:
            reporter.on_line(line)

    proc.wait()
    reader.join()
    if proc.stdout:
        proc.stdout.close()

    elapsed_ms = int((time.monotonic() - start) * 1000)
    return CommandResult(
        cmd=cmd,
        returncode=proc.returncode,
        stdout="\n".join(lines)[-_OUTPUT_TAIL:],
        elapsed_ms=elapsed_ms,
    )

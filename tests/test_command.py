"""
Tests for the process runner, using the current interpreter as the child.
"""

import logging
import sys
import time
from pathlib import Path

import pytest

from spm_backend.adapters.shell.command import CommandResult, run_command, stream_command
from tests.fakes import RecordingReporter

PY = sys.executable


class TestRunCommand:
    def test_captures_stdout(self):
        result = run_command([PY, "-c", "print('hello')"])
        assert result.ok
        assert result.stdout.strip() == "hello"

    def test_nonzero_exit(self):
        result = run_command([PY, "-c", "import sys; sys.stderr.write('bad thing\\n'); sys.exit(3)"])
        assert not result.ok
        assert result.returncode == 3
        assert result.describe_failure() == "bad thing"

    def test_missing_binary(self):
        result = run_command(["definitely-not-a-real-binary-xyz"])
        assert not result.ok
        assert result.returncode is None
        assert "command not found" in result.describe_failure()

    def test_cwd(self, tmp_path: Path):
        result = run_command([PY, "-c", "import os; print(os.getcwd())"], cwd=tmp_path)
        assert Path(result.stdout.strip()).resolve() == tmp_path.resolve()

    def test_timeout(self):
        result = run_command([PY, "-c", "import time; time.sleep(5)"], timeout=1)
        assert not result.ok
        assert "timed out" in result.error


class TestStreamCommand:
    def test_lines_reach_reporter(self):
        reporter = RecordingReporter()
        result = stream_command(
            [PY, "-c", "import sys; print('one'); sys.stderr.write('two\\n')"],
            reporter=reporter,
        )
        assert result.ok
        assert sorted(reporter.lines) == ["one", "two"]

    def test_without_reporter(self):
        result = stream_command([PY, "-c", "print('quiet')"])
        assert result.ok
        assert "quiet" in result.stdout

    def test_exit_status(self):
        result = stream_command([PY, "-c", "import sys; sys.exit(2)"])
        assert result.returncode == 2

    def test_missing_binary(self):
        result = stream_command(["definitely-not-a-real-binary-xyz"])
        assert result.returncode is None

    def test_timeout_kills_silent_child(self):
        start = time.monotonic()
        result = stream_command([PY, "-c", "import time; time.sleep(10)"], timeout=1)
        assert time.monotonic() - start < 8
        assert not result.ok
        assert result.returncode is None
        assert "timed out" in result.error

    def test_timeout_keeps_output_so_far(self):
        reporter = RecordingReporter()
        result = stream_command(
            [PY, "-c", "import time; print('compiling', flush=True); time.sleep(10)"],
            reporter=reporter,
            timeout=2,
        )
        assert "timed out" in result.error
        assert reporter.lines == ["compiling"]
        assert "compiling" in result.stdout

    def test_finishes_within_timeout(self):
        result = stream_command([PY, "-c", "print('done')"], timeout=30)
        assert result.ok
        assert "done" in result.stdout

    def test_lines_logged_as_build_output(self, caplog: pytest.LogCaptureFixture):
        with caplog.at_level(logging.DEBUG, logger="spm_backend.build_output"):
            stream_command([PY, "-c", "print('linking')"])
        assert any(
            r.name == "spm_backend.build_output" and r.getMessage() == "linking" for r in caplog.records
        )


class TestCommandResult:
    def test_describe_failure_fallback(self):
        assert CommandResult(cmd=["x"], returncode=4).describe_failure() == "exit code 4"

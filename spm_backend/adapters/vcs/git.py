"""
Git client — clone and checkout into one target directory.

Uses the git CLI through the shared process runner.  The target
directory is bound at construction; ``clone`` creates it.
"""

from __future__ import annotations

import logging
from pathlib import Path

from spm_backend.adapters.shell.command import CommandResult, run_command
from spm_backend.core.errors import CheckoutFailed, CloneFailed

logger = logging.getLogger(__name__)


class GitClient:
    """Git operations against a single working tree.

    Args:
        directory: Working tree the client operates on.
        git_bin: git executable.
        timeout: Per-command timeout in seconds (None = no limit).
    """

    def __init__(
        self,
        directory: Path,
        *,
        git_bin: str = "git",
        timeout: int | None = None,
    ) -> None:
        self.directory = Path(directory)
        self.git_bin = git_bin
        self.timeout = timeout

    def clone(self, url: str) -> None:
        """Clone ``url`` into the bound directory."""
        logger.debug("git clone %s %s", url, self.directory)
        result = run_command(
            [self.git_bin, "clone", "-q", url, str(self.directory)],
            timeout=self.timeout,
        )
        if not result.ok:
            raise CloneFailed(url, result.describe_failure())

    def checkout(self, revision: str) -> None:
        """Check out a tag, branch or commit exactly."""
        logger.debug("git checkout %s in %s", revision, self.directory)
        result = self._git("checkout", "-q", revision)
        if not result.ok:
            raise CheckoutFailed(revision, result.describe_failure())

    def current_revision(self) -> str:
        """Full SHA of HEAD, or empty string if it cannot be read."""
        result = self._git("rev-parse", "HEAD")
        return result.stdout.strip() if result.ok else ""

    def _git(self, *args: str) -> CommandResult:
        return run_command(
            [self.git_bin, "-C", str(self.directory), *args],
            timeout=self.timeout,
        )

    def __repr__(self) -> str:
        return f"<GitClient directory={str(self.directory)!r}>"

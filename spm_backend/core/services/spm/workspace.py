"""
Repository fetcher — check out one revision into a scratch workspace.

Workspace path::

    <scratch_root>/spm/<sanitized url>@<sanitized version>

The same (url, version) always maps to the same directory.  Any stale
directory left by an aborted attempt is removed before cloning, and the
workspace is removed again when the ``with`` block exits, whether or
not the install succeeded.

Two installs of the same (url, version) in one process are serialized
by a per-workspace lock.  Separate processes must coordinate themselves.
"""

from __future__ import annotations

import logging
import shutil
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from spm_backend.adapters.vcs.git import GitClient
from spm_backend.core.models.package import ResolvedRepository

logger = logging.getLogger(__name__)

WORKSPACE_DIRNAME = "spm"

# Replaced in this order; "://" must go before ":" and "/".
_SANITIZE_TOKENS = ("://", "/", "?", "&", ":")

# path -> (lock, number of holders and waiters); entries go when unused
_workspace_locks: dict[str, tuple[threading.Lock, int]] = {}
_workspace_locks_guard = threading.Lock()


@contextmanager
def _workspace_lock(path: Path) -> Iterator[None]:
    key = str(path)
    with _workspace_locks_guard:
        lock, users = _workspace_locks.get(key, (threading.Lock(), 0))
        _workspace_locks[key] = (lock, users + 1)
    try:
        with lock:
            yield
    finally:
        with _workspace_locks_guard:
            users = _workspace_locks[key][1] - 1
            if users:
                _workspace_locks[key] = (lock, users)
            else:
                del _workspace_locks[key]


def sanitize(url: str) -> str:
    """Make a repository URL (or a version) usable as a single directory name."""
    for token in _SANITIZE_TOKENS:
        url = url.replace(token, "_")
    return url


def workspace_path(url: str, version: str, scratch_root: Path) -> Path:
    return Path(scratch_root) / WORKSPACE_DIRNAME / f"{sanitize(url)}@{sanitize(version)}"


def remove_workspace(path: Path) -> None:
    """Delete a workspace directory if it exists."""
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    elif path.exists() or path.is_symlink():
        path.unlink()


@contextmanager
def fetch_package_repo(
    repo: ResolvedRepository,
    version: str,
    *,
    scratch_root: Path,
    git_bin: str = "git",
    timeout: int | None = None,
) -> Iterator[Path]:
    """Clone ``repo`` at ``version`` and yield the workspace path.

    Raises:
        CloneFailed: If ``git clone`` fails.
        CheckoutFailed: If ``version`` cannot be checked out.
    """
    path = workspace_path(repo.url, version, scratch_root)

    with _workspace_lock(path):
        remove_workspace(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        try:
            git = GitClient(path, git_bin=git_bin, timeout=timeout)
            git.clone(repo.url)
            git.checkout(version)
            logger.info("Checked out %s@%s (%s)", repo.url, version, git.current_revision()[:12])
            yield path
        finally:
            logger.debug("Cleaning up workspace %s", path)
            remove_workspace(path)

"""
Tests for the git client — command lines and error mapping.
"""

from pathlib import Path

import pytest

from spm_backend.adapters.vcs import git as git_module
from spm_backend.adapters.vcs.git import GitClient
from spm_backend.core.errors import CheckoutFailed, CloneFailed
from tests.fakes import failed, ok


@pytest.fixture
def recorded(monkeypatch) -> list[list[str]]:
    calls: list[list[str]] = []

    def fake_run(cmd, **kwargs):
        calls.append(cmd)
        if "rev-parse" in cmd:
            return ok(cmd, "abc123\n")
        return ok(cmd)

    monkeypatch.setattr(git_module, "run_command", fake_run)
    return calls


class TestGitClient:
    def test_clone(self, tmp_path: Path, recorded):
        GitClient(tmp_path / "ws").clone("https://github.com/o/r.git")
        assert recorded == [["git", "clone", "-q", "https://github.com/o/r.git", str(tmp_path / "ws")]]

    def test_checkout_runs_in_directory(self, tmp_path: Path, recorded):
        GitClient(tmp_path, git_bin="/usr/bin/git").checkout("1.2.3")
        assert recorded == [["/usr/bin/git", "-C", str(tmp_path), "checkout", "-q", "1.2.3"]]

    def test_current_revision(self, tmp_path: Path, recorded):
        assert GitClient(tmp_path).current_revision() == "abc123"

    def test_clone_failure(self, tmp_path: Path, monkeypatch):
        monkeypatch.setattr(
            git_module, "run_command",
            lambda cmd, **kw: failed(cmd, 128, "fatal: repository 'x' not found"),
        )
        with pytest.raises(CloneFailed) as exc:
            GitClient(tmp_path).clone("https://github.com/o/missing.git")
        assert "not found" in exc.value.detail

    def test_checkout_failure(self, tmp_path: Path, monkeypatch):
        monkeypatch.setattr(
            git_module, "run_command",
            lambda cmd, **kw: failed(cmd, 1, "error: pathspec 'v9' did not match"),
        )
        with pytest.raises(CheckoutFailed, match="pathspec"):
            GitClient(tmp_path).checkout("v9")

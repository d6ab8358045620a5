"""
Tests for the repository fetcher — workspace naming, clearing and cleanup.
"""

from pathlib import Path

import pytest

from spm_backend.core.errors import CheckoutFailed, CloneFailed
from spm_backend.core.services.spm.repo_resolver import resolve_repository
from spm_backend.core.services.spm.workspace import (
    _workspace_locks,
    fetch_package_repo,
    sanitize,
    workspace_path,
)


class TestSanitize:
    def test_https_url(self):
        assert sanitize("https://github.com/owner/repo.git") == "https_github.com_owner_repo.git"

    def test_query_characters(self):
        assert sanitize("https://h/a?b=1&c=2") == "https_h_a_b=1_c=2"

    def test_bare_colon(self):
        assert sanitize("host:path") == "host_path"


class TestWorkspacePath:
    def test_deterministic(self, tmp_path: Path):
        url = "https://github.com/owner/repo.git"
        assert workspace_path(url, "1.0.0", tmp_path) == workspace_path(url, "1.0.0", tmp_path)

    def test_layout(self, tmp_path: Path):
        path = workspace_path("https://github.com/owner/repo.git", "1.0.0", tmp_path)
        assert path == tmp_path / "spm" / "https_github.com_owner_repo.git@1.0.0"

    def test_version_changes_path(self, tmp_path: Path):
        url = "https://github.com/owner/repo.git"
        assert workspace_path(url, "1.0.0", tmp_path) != workspace_path(url, "1.1.0", tmp_path)

    def test_branch_with_slash_stays_one_directory(self, tmp_path: Path):
        path = workspace_path("https://github.com/owner/repo.git", "release/1.0", tmp_path)
        assert path.parent == tmp_path / "spm"
        assert path.name == "https_github.com_owner_repo.git@release_1.0"


class TestFetchPackageRepo:
    def test_clone_then_checkout(self, tmp_path: Path, fake_git):
        repo = resolve_repository("owner/repo")
        with fetch_package_repo(repo, "1.0.0", scratch_root=tmp_path) as ws:
            assert ws == workspace_path(repo.url, "1.0.0", tmp_path)
            assert (ws / "Package.swift").is_file()
        git = fake_git.instances[0]
        assert git.calls == [("clone", repo.url), ("checkout", "1.0.0")]

    def test_clears_stale_workspace(self, tmp_path: Path, fake_git):
        repo = resolve_repository("owner/repo")
        stale = workspace_path(repo.url, "1.0.0", tmp_path)
        stale.mkdir(parents=True)
        (stale / "leftover.txt").write_text("from an aborted run")

        with fetch_package_repo(repo, "1.0.0", scratch_root=tmp_path) as ws:
            assert not (ws / "leftover.txt").exists()
            assert (ws / "Package.swift").is_file()

    def test_removed_after_success(self, tmp_path: Path, fake_git):
        repo = resolve_repository("owner/repo")
        with fetch_package_repo(repo, "1.0.0", scratch_root=tmp_path) as ws:
            pass
        assert not ws.exists()

    def test_removed_after_error_in_body(self, tmp_path: Path, fake_git):
        repo = resolve_repository("owner/repo")
        with pytest.raises(RuntimeError):
            with fetch_package_repo(repo, "1.0.0", scratch_root=tmp_path) as ws:
                raise RuntimeError("build exploded")
        assert not ws.exists()

    def test_clone_failure(self, tmp_path: Path, fake_git):
        fake_git.fail_clone = True
        repo = resolve_repository("owner/repo")
        with pytest.raises(CloneFailed, match="repository not found"):
            with fetch_package_repo(repo, "1.0.0", scratch_root=tmp_path):
                pytest.fail("body must not run")
        assert not workspace_path(repo.url, "1.0.0", tmp_path).exists()

    def test_checkout_failure(self, tmp_path: Path, fake_git):
        fake_git.fail_checkout = True
        repo = resolve_repository("owner/repo")
        with pytest.raises(CheckoutFailed) as exc:
            with fetch_package_repo(repo, "9.9.9", scratch_root=tmp_path):
                pytest.fail("body must not run")
        assert exc.value.revision == "9.9.9"
        assert not workspace_path(repo.url, "9.9.9", tmp_path).exists()

    def test_branch_checkout_leaves_no_directories(self, tmp_path: Path, fake_git):
        repo = resolve_repository("owner/repo")
        with fetch_package_repo(repo, "release/1.0", scratch_root=tmp_path):
            pass
        assert fake_git.instances[0].calls[-1] == ("checkout", "release/1.0")
        assert list((tmp_path / "spm").iterdir()) == []

    def test_lock_registry_emptied_on_exit(self, tmp_path: Path, fake_git):
        repo = resolve_repository("owner/repo")
        with fetch_package_repo(repo, "1.0.0", scratch_root=tmp_path):
            assert len(_workspace_locks) == 1
        with pytest.raises(RuntimeError):
            with fetch_package_repo(repo, "1.1.0", scratch_root=tmp_path):
                raise RuntimeError("build exploded")
        assert _workspace_locks == {}

"""
Shared test fixtures.

External programs (git, swift) are never run; see ``tests/fakes.py``.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from spm_backend.core.config.loader import Settings
from tests.fakes import FakeGit


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings with the experimental gate open and every dir under tmp_path."""
    return Settings(
        experimental=True,
        cache_dir=tmp_path / "cache",
        scratch_dir=tmp_path / "scratch",
        data_dir=tmp_path / "data",
    )


@pytest.fixture
def fake_git(monkeypatch: pytest.MonkeyPatch) -> type[FakeGit]:
    """Replace the git client used by the workspace fetcher."""
    FakeGit.instances = []
    FakeGit.fail_clone = False
    FakeGit.fail_checkout = False
    monkeypatch.setattr("spm_backend.core.services.spm.workspace.GitClient", FakeGit)
    return FakeGit

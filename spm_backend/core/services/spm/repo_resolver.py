"""
Repository identifier resolver — package name → GitHub clone URL.

Accepted forms:
    owner/repo                          → https://github.com/owner/repo.git
    https://github.com/owner/repo.git   → used verbatim

Purely syntactic: no network access.
"""

from __future__ import annotations

import re
from urllib.parse import urlparse

from spm_backend.core.errors import InvalidRepositoryIdentifier
from spm_backend.core.models.package import ResolvedRepository

_SHORTHAND = re.compile(r"[A-Za-z0-9_-]+/[A-Za-z0-9_-]+")


def _is_github_git_url(value: str) -> bool:
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    return (
        parsed.scheme == "https"
        and parsed.hostname == "github.com"
        and parsed.path.endswith(".git")
    )


def resolve_repository(identifier: str) -> ResolvedRepository:
    """Resolve a package identifier to a clone URL.

    Raises:
        InvalidRepositoryIdentifier: For anything that is neither a GitHub
            ``.git`` URL nor an ``owner/repo`` shorthand.
    """
    if _is_github_git_url(identifier):
        return ResolvedRepository(url=identifier)
    if _SHORTHAND.fullmatch(identifier):
        return ResolvedRepository(url=f"https://github.com/{identifier}.git")
    raise InvalidRepositoryIdentifier(identifier)

"""
Remote version cache — ascending release tags per package, persisted.

The first request for a package lists its GitHub releases, reverses the
API's newest-first order and stores the result.  Later requests, in
this process or the next, read the stored list.  Only ``clear`` drops it.

"Latest" is the last element of that list.  It is positional, not a
semver maximum.
"""

from __future__ import annotations

import logging
from typing import Callable

from spm_backend.core.config.loader import Settings
from spm_backend.core.errors import NoStableVersionFound, RemoteVersionFetchFailed
from spm_backend.core.persistence.cache_store import CacheStore
from spm_backend.core.services.spm import github
from spm_backend.core.services.spm.github import GitHubError, Release
from spm_backend.core.services.spm.repo_resolver import resolve_repository

logger = logging.getLogger(__name__)

ReleaseLister = Callable[[str], list[Release]]


class RemoteVersionCache:
    """Memoized remote version lists, keyed by package identifier.

    Args:
        store: Durable cache store for the lists.
        list_releases: ``slug -> releases (newest first)``.
    """

    def __init__(self, store: CacheStore[list[str]], list_releases: ReleaseLister) -> None:
        self.store = store
        self._list_releases = list_releases

    @classmethod
    def from_settings(cls, settings: Settings) -> RemoteVersionCache:
        def _lister(slug: str) -> list[Release]:
            return github.list_releases(
                slug,
                api_url=settings.github_api_url,
                token=settings.github_token,
            )

        return cls(CacheStore(settings.cache_dir, "remote_versions"), _lister)

    def get_or_fetch(self, identifier: str) -> list[str]:
        """Ascending version tags for ``identifier``."""
        return self.store.get_or_try_init(identifier, lambda: self._fetch(identifier))

    def latest_stable_version(self, identifier: str) -> str:
        versions = self.get_or_fetch(identifier)
        if not versions:
            raise NoStableVersionFound(identifier)
        return versions[-1]

    def clear(self, identifier: str | None = None) -> int:
        return self.store.clear(identifier)

    def _fetch(self, identifier: str) -> list[str]:
        slug = resolve_repository(identifier).slug
        logger.debug("Listing remote versions of %s (%s)", identifier, slug)
        try:
            releases = self._list_releases(slug)
        except GitHubError as e:
            raise RemoteVersionFetchFailed(identifier, str(e)) from e
        return [r.tag_name for r in reversed(releases)]

"""
GitHub release listing.

Fetches every release of a repository from the REST API, newest first
(the API's own order), following page numbers until an empty page.
"""

from __future__ import annotations

import json
import logging
import urllib.error
import urllib.request

from pydantic import BaseModel, ValidationError

from spm_backend import __version__

logger = logging.getLogger(__name__)

_PER_PAGE = 100
_MAX_PAGES = 50


class Release(BaseModel):
    tag_name: str


class GitHubError(Exception):
    """Raised when the releases API cannot be read."""


def list_releases(
    slug: str,
    *,
    api_url: str = "https://api.github.com",
    token: str | None = None,
    timeout: int = 15,
) -> list[Release]:
    """List releases of ``owner/repo``, newest first.

    Raises:
        GitHubError: On HTTP, network or payload errors.
    """
    headers = {
        "Accept": "application/vnd.github+json",
        "User-Agent": f"spm-backend/{__version__}",
    }
    if token:
        headers["Authorization"] = f"Bearer {token}"

    releases: list[Release] = []
    for page in range(1, _MAX_PAGES + 1):
        url = f"{api_url.rstrip('/')}/repos/{slug}/releases?per_page={_PER_PAGE}&page={page}"
        logger.debug("GET %s", url)
        req = urllib.request.Request(url, headers=headers)
        try:
            with urllib.request.urlopen(req, timeout=timeout) as resp:
                data = json.loads(resp.read())
        except urllib.error.HTTPError as e:
            raise GitHubError(f"GitHub API returned HTTP {e.code} for {slug}") from e
        except (urllib.error.URLError, TimeoutError) as e:
            raise GitHubError(f"Cannot reach GitHub API: {e}") from e
        except json.JSONDecodeError as e:
            raise GitHubError(f"Malformed GitHub API response: {e}") from e

        if not isinstance(data, list):
            raise GitHubError(f"Unexpected GitHub API response for {slug}")
        if not data:
            break
        try:
            releases.extend(Release.model_validate(item) for item in data)
        except ValidationError as e:
            raise GitHubError(f"Malformed release entry for {slug}: {e}") from e
        if len(data) < _PER_PAGE:
            break

    logger.info("Found %d releases for %s", len(releases), slug)
    return releases

"""
Error taxonomy for the source-build pipeline.

Every failure is terminal for the current install attempt. Messages are
written to be shown verbatim to the end user, so each one names the
package, version, product or underlying tool error it relates to.
"""

from __future__ import annotations


class SpmError(Exception):
    """Base class for all pipeline errors."""


class ExperimentalFeatureDisabled(SpmError):
    """Raised when the backend is used without the experimental opt-in."""

    def __init__(self, feature: str) -> None:
        self.feature = feature
        super().__init__(
            f"{feature} is experimental. Enable it with 'experimental: true' "
            "in the config file or SPM_EXPERIMENTAL=1."
        )


class InvalidRepositoryIdentifier(SpmError):
    def __init__(self, identifier: str) -> None:
        self.identifier = identifier
        super().__init__(f"Invalid swift package repo: {identifier}")


class RemoteVersionFetchFailed(SpmError):
    def __init__(self, identifier: str, reason: str) -> None:
        self.identifier = identifier
        self.reason = reason
        super().__init__(f"Failed to list remote versions of {identifier}: {reason}")


class NoStableVersionFound(SpmError):
    def __init__(self, identifier: str) -> None:
        self.identifier = identifier
        super().__init__(f"No stable versions found for {identifier}")


class CloneFailed(SpmError):
    def __init__(self, url: str, detail: str) -> None:
        self.url = url
        self.detail = detail
        super().__init__(f"git clone of {url} failed: {detail}")


class CheckoutFailed(SpmError):
    def __init__(self, revision: str, detail: str) -> None:
        self.revision = revision
        self.detail = detail
        super().__init__(f"git checkout of {revision} failed: {detail}")


class ManifestDumpFailed(SpmError):
    def __init__(self, package_path: str, detail: str) -> None:
        self.package_path = package_path
        self.detail = detail
        super().__init__(f"swift package dump-package failed in {package_path}: {detail}")


class ManifestDecodeError(SpmError):
    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"Failed to parse package description. Details: {detail}")


class NoExecutablesFound(SpmError):
    def __init__(self, package_path: str) -> None:
        self.package_path = package_path
        super().__init__(f"No executables found in the package at {package_path}")


class BuildFailed(SpmError):
    def __init__(self, product: str, returncode: int | None, detail: str = "") -> None:
        self.product = product
        self.returncode = returncode
        self.detail = detail
        msg = f"swift build of product '{product}' failed"
        if returncode is not None:
            msg += f" (exit {returncode})"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


class CopyFailed(SpmError):
    def __init__(self, source: str, destination: str, detail: str) -> None:
        self.source = source
        self.destination = destination
        self.detail = detail
        super().__init__(f"Cannot copy {source} to {destination}: {detail}")

"""
Source-build install pipeline — the backend's public entry point.

    resolve repo → resolve "latest" → fetch workspace → list executables
        → (per executable, in manifest order) build → install artifacts

Every error is terminal.  Artifacts of executables processed before a
failure stay in the install directory; the scratch workspace is always
removed.
"""

from __future__ import annotations

import logging
from pathlib import Path

from spm_backend.adapters.shell.command import ProgressReporter
from spm_backend.core.config.loader import Settings
from spm_backend.core.models.build import BuildConfig, InstallReport
from spm_backend.core.services.spm.artifacts import install_artifacts
from spm_backend.core.services.spm.builder import build_product
from spm_backend.core.services.spm.manifest import list_executable_products
from spm_backend.core.services.spm.remote_versions import RemoteVersionCache
from spm_backend.core.services.spm.repo_resolver import resolve_repository
from spm_backend.core.services.spm.workspace import fetch_package_repo

logger = logging.getLogger(__name__)

LATEST = "latest"
FEATURE_NAME = "spm backend"


def resolve_version(
    package: str,
    requested_version: str,
    versions: RemoteVersionCache,
) -> str:
    """Turn the ``latest`` sentinel into a concrete tag; pass others through."""
    if requested_version != LATEST:
        return requested_version
    version = versions.latest_stable_version(package)
    logger.info("Resolved %s@latest to %s", package, version)
    return version


def install_version(
    package: str,
    requested_version: str,
    install_root: Path,
    *,
    settings: Settings,
    reporter: ProgressReporter | None = None,
    versions: RemoteVersionCache | None = None,
) -> InstallReport:
    """Build ``package`` at ``requested_version`` from source into ``install_root``.

    Binaries land in ``install_root / "bin"``.

    Args:
        package: ``owner/repo`` or ``https://github.com/owner/repo.git``.
        requested_version: Tag, branch, commit or ``"latest"``.
        install_root: Versioned install directory.
        settings: Backend settings (experimental gate, tool paths, dirs).
        reporter: Receives build output lines; optional.
        versions: Remote version cache; built from ``settings`` if omitted.

    Raises:
        SpmError: Any subclass, for the step that failed.
    """
    settings.ensure_experimental(FEATURE_NAME)

    repo = resolve_repository(package)
    if versions is None:
        versions = RemoteVersionCache.from_settings(settings)
    version = resolve_version(package, requested_version, versions)

    install_root = Path(install_root)
    install_bin_dir = install_root / "bin"
    report = InstallReport(
        package=package,
        requested_version=requested_version,
        version=version,
        repository_url=repo.url,
        install_path=str(install_root),
    )

    with fetch_package_repo(
        repo,
        version,
        scratch_root=settings.scratch_dir,
        git_bin=settings.git_bin,
        timeout=settings.command_timeout,
    ) as workspace:
        executables = list_executable_products(
            workspace,
            swift_bin=settings.swift_bin,
            timeout=settings.command_timeout,
        )
        report.executables = executables

        for executable in executables:
            config = BuildConfig(product=executable, package_path=workspace)
            bin_path = build_product(
                config,
                reporter=reporter,
                swift_bin=settings.swift_bin,
                timeout=settings.command_timeout,
            )
            installed = install_artifacts(
                bin_path,
                executable,
                install_bin_dir,
                settings.artifact_extensions,
            )
            report.installed.extend(str(p) for p in installed)

    logger.info("Installed %s@%s into %s", package, version, install_root)
    return report


def list_remote_versions(
    package: str,
    *,
    settings: Settings,
    versions: RemoteVersionCache | None = None,
) -> list[str]:
    """Ascending remote versions of ``package`` (cached)."""
    resolve_repository(package)
    if versions is None:
        versions = RemoteVersionCache.from_settings(settings)
    return versions.get_or_fetch(package)

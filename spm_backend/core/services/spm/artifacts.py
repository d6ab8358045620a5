"""
Artifact installer — copy a built executable and its runtime libraries.

Besides the executable itself, ``swift build`` leaves shared libraries
and resource bundles next to it that the binary loads at runtime.
Those are recognised by extension and copied with their relative
layout preserved.
"""

from __future__ import annotations

import logging
import os
import shutil
import sys
from pathlib import Path

from spm_backend.core.errors import CopyFailed

logger = logging.getLogger(__name__)

# sys.platform prefix → runtime artifact extensions found in the bin dir
ARTIFACT_EXTENSIONS: dict[str, tuple[str, ...]] = {
    "darwin": ("dylib", "bundle"),
    "linux": ("so", "resources"),
    "win32": ("dll", "resources"),
}


def artifact_extensions(platform: str | None = None) -> tuple[str, ...]:
    """Recognised artifact extensions for ``platform`` (default: this host)."""
    platform = platform or sys.platform
    for prefix, extensions in ARTIFACT_EXTENSIONS.items():
        if platform.startswith(prefix):
            return extensions
    return ()


def _copy_file(source: Path, destination: Path) -> None:
    try:
        shutil.copy2(source, destination)
    except OSError as e:
        raise CopyFailed(str(source), str(destination), str(e)) from e


def _copy_tree(source: Path, destination: Path) -> None:
    try:
        shutil.copytree(source, destination, symlinks=True, dirs_exist_ok=True)
    except (OSError, shutil.Error) as e:
        raise CopyFailed(str(source), str(destination), str(e)) from e


def install_artifacts(
    bin_path: Path,
    product: str,
    install_bin_dir: Path,
    extensions: tuple[str, ...] | list[str] | None = None,
) -> list[Path]:
    """Copy ``product`` and its runtime artifacts into ``install_bin_dir``.

    Args:
        bin_path: Build output directory reported by the toolchain.
        product: Executable name inside ``bin_path``.
        install_bin_dir: Destination ``bin/`` directory (created if absent).
        extensions: Artifact extensions to pick up, without the dot.
            Defaults to this platform's entry in ``ARTIFACT_EXTENSIONS``.

    Returns:
        Installed paths: the executable first, then artifacts in walk order.

    Raises:
        CopyFailed: If the executable is missing or anything cannot be copied.
    """
    bin_path = Path(bin_path)
    install_bin_dir = Path(install_bin_dir)
    wanted = {e.lstrip(".") for e in (artifact_extensions() if extensions is None else extensions)}

    logger.debug("Copying binaries to install path: %s", install_bin_dir)
    try:
        install_bin_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise CopyFailed(str(bin_path), str(install_bin_dir), str(e)) from e

    executable = bin_path / product
    if not executable.is_file():
        raise CopyFailed(str(executable), str(install_bin_dir), "executable not found")
    _copy_file(executable, install_bin_dir / product)
    installed = [install_bin_dir / product]

    for dirpath, dirnames, filenames in os.walk(bin_path):
        current = Path(dirpath)
        for name in sorted(dirnames):
            if Path(name).suffix.lstrip(".") in wanted:
                source = current / name
                target = install_bin_dir / source.relative_to(bin_path)
                target.parent.mkdir(parents=True, exist_ok=True)
                _copy_tree(source, target)
                installed.append(target)
                # copied as a whole; no need to descend
                dirnames.remove(name)
        for name in sorted(filenames):
            if Path(name).suffix.lstrip(".") in wanted:
                source = current / name
                target = install_bin_dir / source.relative_to(bin_path)
                target.parent.mkdir(parents=True, exist_ok=True)
                _copy_file(source, target)
                installed.append(target)

    logger.info("Installed %s (%d extra artifact(s))", product, len(installed) - 1)
    return installed

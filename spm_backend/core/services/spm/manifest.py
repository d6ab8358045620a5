"""
Manifest parser — which products of a package are executables.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from spm_backend.adapters.shell.command import run_command
from spm_backend.core.errors import ManifestDecodeError, ManifestDumpFailed, NoExecutablesFound
from spm_backend.core.models.package import PackageDescription

logger = logging.getLogger(__name__)


def dump_package(
    package_path: Path,
    *,
    swift_bin: str = "swift",
    timeout: int | None = None,
) -> str:
    """Return the JSON printed by ``swift package dump-package``."""
    result = run_command(
        [swift_bin, "package", "dump-package", "--package-path", str(package_path)],
        timeout=timeout,
    )
    if not result.ok:
        raise ManifestDumpFailed(str(package_path), result.describe_failure())
    return result.stdout


def parse_package_description(raw: str) -> PackageDescription:
    """Decode ``dump-package`` output.

    Raises:
        ManifestDecodeError: On invalid JSON or an unexpected shape.
    """
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ManifestDecodeError(f"invalid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ManifestDecodeError(f"expected a JSON object, got {type(data).__name__}")

    try:
        return PackageDescription.model_validate(data)
    except ValidationError as e:
        raise ManifestDecodeError(_summarize(e)) from e


def _summarize(error: ValidationError) -> str:
    parts = []
    for err in error.errors():
        loc = ".".join(str(p) for p in err["loc"]) or "<root>"
        parts.append(f"{loc}: {err['msg']}")
    return "; ".join(parts)


def list_executable_products(
    package_path: Path,
    *,
    swift_bin: str = "swift",
    timeout: int | None = None,
) -> list[str]:
    """Executable product names of the package, in manifest order.

    Raises:
        ManifestDumpFailed: If the toolchain cannot dump the manifest.
        ManifestDecodeError: If the dump cannot be decoded.
        NoExecutablesFound: If the package declares no executable product.
    """
    description = parse_package_description(
        dump_package(package_path, swift_bin=swift_bin, timeout=timeout)
    )
    executables = description.executable_names()
    logger.debug("Found executables: %s", executables)
    if not executables:
        raise NoExecutablesFound(str(package_path))
    return executables

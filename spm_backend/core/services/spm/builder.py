"""
Build orchestrator — ``swift build`` one product, then ask where it went.
"""

from __future__ import annotations

import logging
from pathlib import Path

from spm_backend.adapters.shell.command import ProgressReporter, run_command, stream_command
from spm_backend.core.errors import BuildFailed
from spm_backend.core.models.build import BuildConfig

logger = logging.getLogger(__name__)


def build_product(
    config: BuildConfig,
    *,
    reporter: ProgressReporter | None = None,
    swift_bin: str = "swift",
    timeout: int | None = None,
) -> Path:
    """Build ``config.product`` and return its output directory.

    Build output is streamed to ``reporter`` when one is given.

    Raises:
        BuildFailed: If the build or the bin-path query fails.
    """
    logger.info("Building swift product %s (%s)", config.product, config.configuration)
    result = stream_command(
        [swift_bin, *config.build_args()],
        reporter=reporter,
        timeout=timeout,
    )
    if not result.ok:
        raise BuildFailed(config.product, result.returncode, result.error)

    query = run_command([swift_bin, *config.bin_path_args()], timeout=timeout)
    if not query.ok:
        raise BuildFailed(
            config.product,
            query.returncode,
            f"cannot read bin path: {query.describe_failure()}",
        )

    bin_path = query.stdout.strip().splitlines()[-1] if query.stdout.strip() else ""
    if not bin_path:
        raise BuildFailed(config.product, query.returncode, "empty bin path")
    logger.debug("Bin path for %s: %s", config.product, bin_path)
    return Path(bin_path)

"""
Swift Package Manager source-build backend — package re-exports.

    from spm_backend.core.services.spm import install_version

Layers, leaf first:
    repo_resolver → remote_versions (github) → workspace → manifest
        → builder → artifacts → installer
"""

from spm_backend.core.services.spm.artifacts import (  # noqa: F401
    ARTIFACT_EXTENSIONS,
    artifact_extensions,
    install_artifacts,
)
from spm_backend.core.services.spm.builder import build_product  # noqa: F401
from spm_backend.core.services.spm.installer import (  # noqa: F401
    LATEST,
    install_version,
    list_remote_versions,
    resolve_version,
)
from spm_backend.core.services.spm.manifest import (  # noqa: F401
    list_executable_products,
    parse_package_description,
)
from spm_backend.core.services.spm.remote_versions import RemoteVersionCache  # noqa: F401
from spm_backend.core.services.spm.repo_resolver import resolve_repository  # noqa: F401
from spm_backend.core.services.spm.workspace import (  # noqa: F401
    fetch_package_repo,
    sanitize,
    workspace_path,
)

"""
Domain models — Pydantic types for the source-build backend.

All models are re-exported here for convenient access:

    from spm_backend.core.models import BuildConfig, PackageDescription, ResolvedRepository
"""

from spm_backend.core.models.build import BuildConfig, InstallReport
from spm_backend.core.models.package import (
    PackageDescription,
    Product,
    ProductKind,
    ResolvedRepository,
)

__all__ = [
    # build.py
    "BuildConfig",
    "InstallReport",
    # package.py
    "PackageDescription",
    "Product",
    "ProductKind",
    "ResolvedRepository",
]

"""
Build models — build configuration and the install summary.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class BuildConfig(BaseModel):
    """Everything that selects which artifacts ``swift build`` produces.

    The build and the ``--show-bin-path`` query are separate processes.
    Both derive their arguments from the same instance so the reported
    directory is the one the build wrote to.
    """

    model_config = ConfigDict(frozen=True)

    product: str
    package_path: Path
    configuration: str = "release"

    def build_args(self) -> list[str]:
        return [
            "build",
            "--configuration",
            self.configuration,
            "--product",
            self.product,
            "--package-path",
            str(self.package_path),
        ]

    def bin_path_args(self) -> list[str]:
        return [*self.build_args(), "--show-bin-path"]


class InstallReport(BaseModel):
    """Outcome of a successful ``install_version`` call."""

    package: str
    requested_version: str
    version: str
    repository_url: str
    install_path: str
    executables: list[str] = Field(default_factory=list)
    installed: list[str] = Field(default_factory=list)

    def to_dict(self) -> dict:
        return self.model_dump(mode="json")

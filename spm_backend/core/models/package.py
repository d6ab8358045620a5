"""
Package models — the resolved repository and the decoded package manifest.

``swift package dump-package`` describes each product's kind as a mapping
with a single key naming the variant and an undocumented payload::

    "type": {"executable": null}
    "type": {"library": ["automatic"]}

Only the key matters.  ``ProductKind`` is decoded from that key and the
payload is thrown away.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ResolvedRepository(BaseModel):
    """A fetchable GitHub repository URL."""

    model_config = ConfigDict(frozen=True)

    url: str  # https://github.com/owner/repo.git

    @property
    def slug(self) -> str:
        """``owner/repo`` part of the URL, for the GitHub API."""
        return urlparse(self.url).path.strip("/").removesuffix(".git")


class ProductKind(StrEnum):
    EXECUTABLE = "executable"
    OTHER = "other"

    @classmethod
    def from_type_field(cls, value: Any) -> ProductKind:
        """Decode the single-key ``type`` mapping of a manifest product."""
        if not isinstance(value, dict):
            raise ValueError(
                f"expected a map with a key 'executable' or other types, "
                f"got {type(value).__name__}"
            )
        if not value:
            raise ValueError("missing key")
        key = next(iter(value))
        if key == "executable":
            return cls.EXECUTABLE
        return cls.OTHER


class Product(BaseModel):
    """One product declared by a package manifest."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    kind: ProductKind = Field(alias="type")

    @field_validator("kind", mode="before")
    @classmethod
    def _decode_kind(cls, value: Any) -> ProductKind:
        if isinstance(value, ProductKind):
            return value
        return ProductKind.from_type_field(value)

    @property
    def is_executable(self) -> bool:
        return self.kind == ProductKind.EXECUTABLE


class PackageDescription(BaseModel):
    """Subset of the ``dump-package`` JSON the backend relies on.

    https://developer.apple.com/documentation/packagedescription
    """

    products: list[Product]

    def executable_names(self) -> list[str]:
        """Names of executable products, in manifest order."""
        return [p.name for p in self.products if p.is_executable]

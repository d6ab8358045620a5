"""
Configuration loader — reads the backend config file into a Settings model.

Lookup order for the file:
    explicit path  >  SPM_CONFIG env var  >  ~/.config/spm-backend/config.yml

A missing default file is not an error (defaults apply).  Environment
variables override whatever the file says.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError

from spm_backend.core.errors import ExperimentalFeatureDisabled

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = Path.home() / ".config" / "spm-backend" / "config.yml"

# env var → settings field
_ENV_OVERRIDES: dict[str, str] = {
    "SPM_EXPERIMENTAL": "experimental",
    "SPM_SWIFT_BIN": "swift_bin",
    "SPM_GIT_BIN": "git_bin",
    "SPM_CACHE_DIR": "cache_dir",
    "SPM_SCRATCH_DIR": "scratch_dir",
    "SPM_DATA_DIR": "data_dir",
    "GITHUB_TOKEN": "github_token",
}


class ConfigError(Exception):
    """Raised when the backend configuration is invalid or unreadable."""


class Settings(BaseModel):
    """Runtime settings for the source-build backend."""

    experimental: bool = False
    swift_bin: str = "swift"
    git_bin: str = "git"
    cache_dir: Path = Field(default_factory=lambda: Path.home() / ".cache" / "spm-backend")
    scratch_dir: Path = Field(default_factory=lambda: Path(tempfile.gettempdir()))
    data_dir: Path = Field(
        default_factory=lambda: Path.home() / ".local" / "share" / "spm-backend"
    )
    github_api_url: str = "https://api.github.com"
    github_token: str | None = None
    command_timeout: int | None = None      # None = wait forever
    artifact_extensions: list[str] | None = None  # None = per-platform table

    def ensure_experimental(self, feature: str) -> None:
        """Raise unless the experimental opt-in is set."""
        if not self.experimental:
            raise ExperimentalFeatureDisabled(feature)

    @property
    def installs_dir(self) -> Path:
        return self.data_dir / "installs"


def find_config_file(path: Path | None = None) -> Path | None:
    """Return the config file to load, or None to use defaults."""
    if path is not None:
        return path
    env_path = os.environ.get("SPM_CONFIG")
    if env_path:
        return Path(env_path)
    if DEFAULT_CONFIG_FILE.is_file():
        return DEFAULT_CONFIG_FILE
    return None


def load_settings(path: Path | None = None) -> Settings:
    """Load and validate settings.

    Args:
        path: Explicit config file. If None, falls back to SPM_CONFIG,
            then the default location.

    Returns:
        Validated Settings model.

    Raises:
        ConfigError: If the file is missing (when given explicitly) or invalid.
    """
    config_path = find_config_file(path)
    data: dict[str, Any] = {}

    if config_path is not None:
        data = _read_config_file(config_path)

    for env_name, field_name in _ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if value:
            data[field_name] = value

    try:
        settings = Settings.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e

    logger.debug("Settings loaded (config=%s, experimental=%s)", config_path, settings.experimental)
    return settings


def _read_config_file(path: Path) -> dict[str, Any]:
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading config from %s", path)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    # The file may wrap everything under an "spm" key or be flat
    section = data.get("spm", data)
    if not isinstance(section, dict):
        raise ConfigError(f"Expected 'spm' to be a mapping in {path}")
    return dict(section)

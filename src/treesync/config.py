"""Configuration management for Tree Sync."""

import json
import os
from pathlib import Path
from typing import Literal, get_args

from pydantic import BaseModel, Field

from . import CONFIG_FILE, TREESYNC_DIR
from .digest import DIGEST_FUNCTIONS, DigestFunction, get_digest_function
from .validation import CheckMode

LogLevel = Literal["debug", "info", "warning", "error"]


class SyncConfig(BaseModel):
    """Configuration for Tree Sync."""

    version: int = 1
    digest_algorithm: Literal["md5", "sha256"] = "md5"
    check_mode: CheckMode = CheckMode.FAIL_FAST
    check_duplicates: bool = True
    # Trees nested deeper than this are rejected before diffing
    max_depth: int = Field(default=64, ge=1)
    log_level: LogLevel = "warning"

    @property
    def digest(self) -> DigestFunction:
        return get_digest_function(self.digest_algorithm)


def get_treesync_dir(project_root: Path) -> Path:
    """Get the .treesync directory path."""
    return project_root / TREESYNC_DIR


def get_config_path(project_root: Path) -> Path:
    """Get the config file path."""
    return get_treesync_dir(project_root) / CONFIG_FILE


def load_config(project_root: Path) -> SyncConfig:
    """Load configuration from the project's config file.

    Falls back to defaults if file doesn't exist.
    Environment variables can override config values.
    """
    config_path = get_config_path(project_root)

    if config_path.exists():
        with open(config_path) as f:
            data = json.load(f)
        config = SyncConfig.model_validate(data)
    else:
        config = SyncConfig()

    # Apply environment variable overrides
    config = _apply_env_overrides(config)

    return config


def save_config(config: SyncConfig, project_root: Path) -> None:
    """Save configuration to the project's config file."""
    config_path = get_config_path(project_root)
    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "w") as f:
        json.dump(config.model_dump(mode="json"), f, indent=2)


def _apply_env_overrides(config: SyncConfig) -> SyncConfig:
    """Apply environment variable overrides to config."""
    data = config.model_dump()

    # TREESYNC_DIGEST
    if algorithm := os.environ.get("TREESYNC_DIGEST"):
        if algorithm in DIGEST_FUNCTIONS:
            data["digest_algorithm"] = algorithm

    # TREESYNC_LOG_LEVEL
    if level := os.environ.get("TREESYNC_LOG_LEVEL"):
        if level.lower() in get_args(LogLevel):
            data["log_level"] = level.lower()

    return SyncConfig.model_validate(data)

"""Shared application context for Homeshelf CLI commands and the HTTP API."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .config import ConfigPaths, GlobalConfig, load_global_config


@dataclass
class AppContext:
    """Container for resolved configuration."""

    paths: ConfigPaths
    global_config: GlobalConfig


def determine_paths(config_dir: Optional[Path]) -> ConfigPaths:
    """Resolve configuration paths based on optional override."""

    return ConfigPaths.from_base_dir(config_dir) if config_dir else ConfigPaths.default()


def load_context(paths: ConfigPaths) -> AppContext:
    """Load the global configuration from disk."""

    return AppContext(paths=paths, global_config=load_global_config(paths.global_config))

"""Configuration models and helpers for Homeshelf."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

DEFAULT_SERVER_PLACEHOLDER = "SET_ME"

CAROUSEL_FIELDS = [
    "PrimaryImageAspectRatio",
    "Path",
    "Tags",
    "Overview",
    "BackdropImageTags",
    "ParentBackdropItemId",
    "ParentBackdropImageTags",
    "ImageTags",
]
ROW_FIELDS = ["PrimaryImageAspectRatio", "Path"]


@dataclass(frozen=True)
class BootstrapReport:
    """Summary of files/directories created during initialisation."""

    base_created: bool
    global_config_created: bool
    global_config_overwritten: bool


class ConfigError(RuntimeError):
    """Raised when configuration files cannot be parsed or are invalid."""


@dataclass(frozen=True)
class ConfigPaths:
    """Resolved filesystem locations used by the application."""

    base_dir: Path
    global_config: Path

    @classmethod
    def default(cls) -> "ConfigPaths":
        """Return default locations under the user's home directory."""

        base = Path.home() / ".homeshelf"
        return cls.from_base_dir(base)

    @classmethod
    def from_base_dir(cls, base_dir: Path) -> "ConfigPaths":
        """Construct paths using ``base_dir`` as root."""

        base_dir = base_dir.expanduser()
        return cls(
            base_dir=base_dir,
            global_config=base_dir / "config.yml",
        )


class ServerSettings(BaseModel):
    """Media server location and credentials."""

    url: str
    api_key: str
    user_id: str
    timeout_seconds: float = Field(default=10.0, gt=0.0)

    model_config = ConfigDict(extra="forbid")

    @field_validator("url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


class CarouselSettings(BaseModel):
    """Hero carousel selection."""

    featured_tag: str = Field(default="Featured")
    max_slides: int = Field(default=10, ge=0)
    fields: List[str] = Field(default_factory=lambda: list(CAROUSEL_FIELDS))
    backdrop_max_width: Optional[int] = Field(default=1920, ge=1)
    backdrop_index: Optional[Union[Literal["random"], int]] = None
    latest_label: str = Field(default="Latest Media")

    model_config = ConfigDict(extra="forbid")

    @field_validator("backdrop_index", mode="before")
    @classmethod
    def _boolean_index_policy(cls, value: Any) -> Any:
        # true selects a random backdrop, false the first one
        if value is True:
            return "random"
        if value is False:
            return None
        return value


class FeaturedRowSettings(BaseModel):
    """Rows built from items carrying the featured-row tag."""

    tag: str = Field(default="FeaturedRow")
    pool_limit: int = Field(default=80, ge=0)
    max_rows: int = Field(default=6, ge=0)
    max_items_per_row: int = Field(default=16, ge=0)
    fields: List[str] = Field(default_factory=lambda: ROW_FIELDS + ["Tags"])

    model_config = ConfigDict(extra="forbid")


class GenreRowSettings(BaseModel):
    """Rows built from the server's genre list."""

    max_rows: int = Field(default=4, ge=0)
    items_per_row: int = Field(default=16, ge=0)
    sort_by: str = Field(default="Random")
    fields: List[str] = Field(default_factory=lambda: list(ROW_FIELDS))

    model_config = ConfigDict(extra="forbid")


class HomeSettings(BaseModel):
    """Everything that shapes the home screen."""

    include_item_types: List[str] = Field(default_factory=lambda: ["Movie", "Series"])
    carousel: CarouselSettings = Field(default_factory=CarouselSettings)
    featured_rows: FeaturedRowSettings = Field(default_factory=FeaturedRowSettings)
    genre_rows: GenreRowSettings = Field(default_factory=GenreRowSettings)

    model_config = ConfigDict(extra="forbid")


class RuntimeSettings(BaseModel):
    """Runtime-level defaults."""

    log_level: str = Field(default="INFO")

    model_config = ConfigDict(extra="forbid")


class GlobalConfig(BaseModel):
    """Top-level configuration file model."""

    server: ServerSettings
    home: HomeSettings = Field(default_factory=HomeSettings)
    runtime: RuntimeSettings = Field(default_factory=RuntimeSettings)

    model_config = ConfigDict(extra="forbid")


def _read_yaml(path: Path) -> Dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    except FileNotFoundError as exc:
        raise ConfigError(f"Configuration file not found: {path}") from exc
    except yaml.YAMLError as exc:  # pragma: no cover - depends on invalid input
        raise ConfigError(f"Failed to parse YAML file: {path}") from exc

    if not isinstance(data, dict):
        raise ConfigError(f"Expected mapping at top level of {path}")
    return data


def load_global_config(path: Path) -> GlobalConfig:
    """Load and validate the global configuration file."""

    payload = _read_yaml(path)
    try:
        return GlobalConfig.model_validate(payload)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration in {path}: {exc}") from exc


def _default_global_config() -> Dict[str, Any]:
    """Dictionary representing the starter global configuration."""

    return {
        "server": {
            "url": "http://localhost:8096",
            "api_key": DEFAULT_SERVER_PLACEHOLDER,
            "user_id": DEFAULT_SERVER_PLACEHOLDER,
            "timeout_seconds": 10,
        },
        "home": {
            "include_item_types": ["Movie", "Series"],
            "carousel": {
                "featured_tag": "Featured",
                "max_slides": 10,
                "backdrop_max_width": 1920,
                "backdrop_index": None,
            },
            "featured_rows": {
                "tag": "FeaturedRow",
                "pool_limit": 80,
                "max_rows": 6,
                "max_items_per_row": 16,
            },
            "genre_rows": {
                "max_rows": 4,
                "items_per_row": 16,
                "sort_by": "Random",
            },
        },
        "runtime": {
            "log_level": "INFO",
        },
    }


def _write_yaml(path: Path, data: Dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        yaml.safe_dump(data, handle, sort_keys=False)


def bootstrap(paths: ConfigPaths, overwrite: bool = False) -> BootstrapReport:
    """Ensure the configuration directory and starter file exist.

    Parameters
    ----------
    paths:
        Target filesystem layout.
    overwrite:
        When ``True`` the global config file is re-written even if it already exists.
    """

    base_created = False
    global_config_created = False
    global_config_overwritten = False

    if not paths.base_dir.exists():
        paths.base_dir.mkdir(parents=True, exist_ok=True)
        base_created = True

    existing_global = paths.global_config.exists()
    if not existing_global or overwrite:
        _write_yaml(paths.global_config, _default_global_config())
        global_config_created = True
        global_config_overwritten = existing_global and overwrite

    return BootstrapReport(
        base_created=base_created,
        global_config_created=global_config_created,
        global_config_overwritten=global_config_overwritten,
    )

"""FileDepot application configuration.

Settings are read from a single YAML file:
  * filedepot.settings.yaml  — non-secret configuration

The file is located through the ``FILEDEPOT_SETTINGS`` environment variable,
falling back to the current working directory. A missing file is not an
error; every section has usable defaults.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

SETTINGS_ENV_VAR = "FILEDEPOT_SETTINGS"
SETTINGS_FILE = Path("filedepot.settings.yaml")


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        logger.warning("Config file not found: %s", path)
        return {}
    with path.open(encoding="utf-8") as fh:
        return yaml.safe_load(fh) or {}


def _resolve_path(value: str, base_dir: Path) -> str:
    """Resolve *value* relative to *base_dir* unless it is already absolute."""
    path = Path(value).expanduser()
    if path.is_absolute():
        return str(path)
    return str((base_dir / path).resolve())


# ---------------------------------------------------------------------------
# Settings models
# ---------------------------------------------------------------------------


class ServerSettings(BaseModel):
    host:            str = "0.0.0.0"
    port:            int = 3000
    allowed_origins: List[str] = Field(default_factory=lambda: ["*"])


class StorageSettings(BaseModel):
    """Where blobs live on disk and how large a single upload may be."""
    uploads_dir:      str = "uploads"
    thumbnails_dir:   str = "thumbnails"
    max_file_size_mb: int = Field(default=100, gt=0)

    @property
    def max_file_size_bytes(self) -> int:
        return self.max_file_size_mb * 1024 * 1024


class CatalogSettings(BaseModel):
    """Metadata catalog (DuckDB) settings.

    ``recreate_on_start`` drops and recreates the files table at boot, so
    metadata does not survive a restart.
    """
    db_path:           str  = "file_catalog.duckdb"
    recreate_on_start: bool = True


class ThumbnailSettings(BaseModel):
    max_width:    int = Field(default=300, gt=0)
    max_height:   int = Field(default=300, gt=0)
    jpeg_quality: int = Field(default=85, ge=1, le=95)


# Names uvicorn accepts for --log-level; "trace" has no stdlib counterpart.
LOG_LEVELS = ("critical", "error", "warning", "info", "debug", "trace")


class LoggingSettings(BaseModel):
    level: str = "info"

    @field_validator("level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        if value.lower() not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {value} (expected one of {', '.join(LOG_LEVELS)})")
        return value.lower()


class AppConfig(BaseModel):
    server:     ServerSettings    = Field(default_factory=ServerSettings)
    storage:    StorageSettings   = Field(default_factory=StorageSettings)
    catalog:    CatalogSettings   = Field(default_factory=CatalogSettings)
    thumbnails: ThumbnailSettings = Field(default_factory=ThumbnailSettings)
    logging:    LoggingSettings   = Field(default_factory=LoggingSettings)


# ---------------------------------------------------------------------------
# Public loader
# ---------------------------------------------------------------------------


def _default_settings_path() -> Path:
    env_path = os.environ.get(SETTINGS_ENV_VAR)
    if env_path:
        return Path(env_path)
    return SETTINGS_FILE


def load_config(settings_path: Optional[Path] = None) -> AppConfig:
    """Load the settings file into an *AppConfig*.

    Relative storage and catalog paths are resolved against the directory
    that holds the settings file.
    """
    path = Path(settings_path) if settings_path else _default_settings_path()
    data = _load_yaml(path)
    config = AppConfig(**data)

    base_dir = path.resolve().parent
    config.storage.uploads_dir = _resolve_path(config.storage.uploads_dir, base_dir)
    config.storage.thumbnails_dir = _resolve_path(config.storage.thumbnails_dir, base_dir)
    config.catalog.db_path = _resolve_path(config.catalog.db_path, base_dir)

    logger.info(
        "Settings loaded (server=%s:%s, uploads=%s, catalog=%s)",
        config.server.host,
        config.server.port,
        config.storage.uploads_dir,
        config.catalog.db_path,
    )
    return config


_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """Return the process-wide configuration, loading it on first use."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reset_config() -> None:
    """Forget the cached configuration (for testing)."""
    global _config
    _config = None

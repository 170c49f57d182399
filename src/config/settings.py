from __future__ import annotations

from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.constants import (
    CATALOG_FETCH_TIMEOUT_SECONDS,
    CATALOG_REFRESH_TIMEOUT_SECONDS,
    CATALOG_STALENESS_SECONDS,
    DEFAULT_PROFILE_FILENAME,
)

# Load .env once at module import so every BaseSettings subclass sees the env vars
load_dotenv()


class CatalogSettings(BaseSettings):
    """Plugin repository catalog settings. Env vars prefixed with CATALOG_."""

    model_config = SettingsConfigDict(env_prefix="CATALOG_")

    url: str = "https://plugins.example.org/catalog.json"
    cache_path: Path = Path(".cache/plugin-catalog.json")
    staleness_seconds: float = Field(CATALOG_STALENESS_SECONDS, gt=0)
    # Watchdog for a refresh that neither completes nor fails.
    refresh_timeout_s: float = Field(CATALOG_REFRESH_TIMEOUT_SECONDS, gt=0)
    fetch_timeout_s: float = Field(CATALOG_FETCH_TIMEOUT_SECONDS, gt=0)

    @field_validator("url")
    @classmethod
    def _validate_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            msg = f"CATALOG_URL must be an http(s) URL (got '{v}')"
            raise ValueError(msg)
        return v


class WorkspaceSettings(BaseSettings):
    """Workspace and plugin layout. Env vars prefixed with WORKSPACE_."""

    model_config = SettingsConfigDict(env_prefix="WORKSPACE_")

    path: Path = Path("workspace")
    plugins_path: Path = Path("plugins")  # root of user-installed plugins
    profile_filename: str = DEFAULT_PROFILE_FILENAME

    @field_validator("profile_filename")
    @classmethod
    def _validate_profile_filename(cls, v: str) -> str:
        if not v or "/" in v or "\\" in v:
            msg = f"WORKSPACE_PROFILE_FILENAME must be a bare file name (got '{v}')"
            raise ValueError(msg)
        return v


class LoggingSettings(BaseSettings):
    """Logging settings. Env vars prefixed with LOG_."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: str = "INFO"
    json_output: bool = True

    @field_validator("level")
    @classmethod
    def _validate_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR"}
        upper = v.upper()
        if upper not in allowed:
            msg = f"LOG_LEVEL must be one of {sorted(allowed)} (got '{v}')"
            raise ValueError(msg)
        return upper


class Settings(BaseSettings):
    """Root settings composing all sub-configurations."""

    model_config = SettingsConfigDict(extra="ignore")

    catalog: CatalogSettings = Field(default_factory=CatalogSettings)
    workspace: WorkspaceSettings = Field(default_factory=WorkspaceSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


def get_settings() -> Settings:
    """Load and validate settings. Raises ValidationError on invalid values."""
    return Settings()

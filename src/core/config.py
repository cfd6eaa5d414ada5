"""Application configuration and .env loading."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from schemas.internal.reports import ThemeName

_PROJECT_ROOT = Path(__file__).resolve().parents[2]


class Settings(BaseSettings):
    """Centralized runtime configuration."""

    convex_url: str | None = Field(default=None, validation_alias="CONVEX_URL")
    convex_deploy_key: str | None = Field(
        default=None, validation_alias="CONVEX_DEPLOY_KEY"
    )
    convex_config_path: Path = Field(
        default=Path.home() / ".convex" / "config.json",
        validation_alias="CONVEX_CONFIG_PATH",
    )
    http_timeout: float = Field(default=30.0, validation_alias="HTTP_TIMEOUT")

    preview_host: str = Field(default="127.0.0.1", validation_alias="PREVIEW_HOST")
    preview_auto_close_minutes: float = Field(
        default=30.0, validation_alias="PREVIEW_AUTO_CLOSE_MINUTES"
    )
    preview_open_browser: bool = Field(
        default=True, validation_alias="PREVIEW_OPEN_BROWSER"
    )
    apps_dist_dir: Path = Field(
        default=_PROJECT_ROOT / "dist" / "apps", validation_alias="APPS_DIST_DIR"
    )
    apps_source_dir: Path = Field(
        default=_PROJECT_ROOT / "apps", validation_alias="APPS_SOURCE_DIR"
    )

    default_theme: ThemeName = Field(
        default="github-dark", validation_alias="DEFAULT_THEME"
    )
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def auto_close_seconds(self) -> float:
        return max(self.preview_auto_close_minutes, 0.0) * 60


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings once from .env/environment."""
    return Settings()


__all__ = ["Settings", "get_settings"]

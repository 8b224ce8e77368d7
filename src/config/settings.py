"""
Application configuration using Pydantic settings.

Configuration is loaded from environment variables with sensible defaults.
Using Pydantic's BaseSettings means we get:
- Type validation at startup (fail fast if config is wrong)
- Documentation of what's required vs optional
- Easy testing with different configurations

Drive credentials set here are only fallbacks. The values saved through
the settings endpoint (see ``infrastructure.config_store``) take precedence.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..core.media.models import DeliveryMode


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables.
    For lists (like cors_origins), use comma-separated values in env.
    """

    # API Configuration
    api_title: str = "Reelbox API"

    # Local library
    videos_dir: Path = Field(
        default=Path("videos"),
        description="Directory holding local videos and their subtitle files"
    )
    config_path: Path = Field(
        default=Path("config.json"),
        description="JSON document where the settings page persists Drive credentials"
    )
    stream_chunk_size: int = Field(
        default=1024 * 1024,
        gt=0,
        description="Bytes read from disk per chunk when streaming local media"
    )

    # Google Drive Configuration
    google_api_key: str = Field(
        default="",
        description="Drive API key. Used when config.json has none."
    )
    google_drive_folder_id: str = Field(
        default="",
        description="Drive folder listed by the library. Used when config.json has none."
    )
    drive_api_base_url: str = Field(
        default="https://www.googleapis.com/drive/v3",
        description="Drive REST endpoint"
    )
    drive_delivery_mode: DeliveryMode = Field(
        default=DeliveryMode.PROXY,
        description=(
            "proxy: relay bytes through this service. redirect: send the browser "
            "to Drive. Redirect URLs carry the API key, so the key becomes "
            "visible to the browser."
        )
    )
    drive_timeout_seconds: Optional[float] = Field(
        default=None,
        description="Timeout for Drive calls. None leaves long media streams unbounded."
    )
    drive_mock_mode: bool = Field(
        default=False,
        description="Use in-memory mock instead of real Drive. Enables local dev without credentials."
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    # CORS
    cors_origins: str = Field(
        default="http://localhost:3000",
        description="Comma-separated list of allowed CORS origins. Use * for development only."
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse comma-separated CORS origins into a list."""
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    def validate_required_fields(self) -> list[str]:
        """
        Report configuration that is missing for Drive playback.

        Nothing is strictly required: without Drive credentials the
        library serves local files only. Mock mode needs no credentials.
        """
        missing = []

        if not self.drive_mock_mode:
            if not self.google_api_key:
                missing.append("GOOGLE_API_KEY")
            if not self.google_drive_folder_id:
                missing.append("GOOGLE_DRIVE_FOLDER_ID")

        return missing


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache means we only load settings once per process.
    For tests, override the dependency or call get_settings.cache_clear().
    """
    return Settings()

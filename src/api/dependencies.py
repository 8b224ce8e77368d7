"""
FastAPI dependency injection.

Dependencies provide instances of services, clients, and configuration
to route handlers. Using dependency injection means:
- Routes don't instantiate their own dependencies (easier to test)
- Dependencies can be overridden in tests
- Configuration is centralized

Each dependency is a function that FastAPI calls when needed.
"""

import logging
from typing import Annotated

import httpx
from fastapi import Depends, Request

from ..config.settings import Settings, get_settings
from ..infrastructure.config_store import AppConfig, ConfigStore
from ..infrastructure.drive.client import DriveClient, DriveConfig, create_drive_client
from ..infrastructure.local.library import LocalMediaLibrary

logger = logging.getLogger(__name__)

# Global mock instance (shared across requests so added files persist)
_mock_drive_client = None


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

def get_config_store(
    settings: Annotated[Settings, Depends(get_settings)],
) -> ConfigStore:
    """Provide the store backing the settings page."""
    return ConfigStore(settings.config_path)


def get_effective_config(
    settings: Annotated[Settings, Depends(get_settings)],
    store: Annotated[ConfigStore, Depends(get_config_store)],
) -> AppConfig:
    """
    Drive credentials in effect for this request.

    Saved values win, environment values fill the gaps. Read on every
    request so a save is picked up immediately.
    """
    return store.load().with_fallbacks(
        api_key=settings.google_api_key,
        folder_id=settings.google_drive_folder_id,
    )


# ---------------------------------------------------------------------------
# Media Sources
# ---------------------------------------------------------------------------

def get_local_library(
    settings: Annotated[Settings, Depends(get_settings)],
) -> LocalMediaLibrary:
    """Provide the local video directory."""
    return LocalMediaLibrary(settings.videos_dir, chunk_size=settings.stream_chunk_size)


def get_http_client(request: Request) -> httpx.AsyncClient:
    """
    Provide the shared AsyncClient opened in the application lifespan.

    Shared rather than per-request because streamed responses outlive the
    route function, and pooled connections make seeking cheaper.
    """
    return request.app.state.http_client


def get_drive_client(
    settings: Annotated[Settings, Depends(get_settings)],
    config: Annotated[AppConfig, Depends(get_effective_config)],
    http_client: Annotated[httpx.AsyncClient, Depends(get_http_client)],
) -> DriveClient:
    """
    Provide a Drive client bound to the current API key.

    In mock mode, we reuse the same client across requests so that
    files added during a session persist.
    """
    global _mock_drive_client

    if settings.drive_mock_mode:
        if _mock_drive_client is None:
            _mock_drive_client = create_drive_client(mock_mode=True)
            logger.info("Created shared mock Drive client for session")
        return _mock_drive_client

    drive_config = DriveConfig(
        api_key=config.google_api_key or "",
        base_url=settings.drive_api_base_url,
        timeout_seconds=settings.drive_timeout_seconds,
    )
    return create_drive_client(config=drive_config, http_client=http_client)


# ---------------------------------------------------------------------------
# Convenience Type Aliases
# ---------------------------------------------------------------------------

# These type aliases make route signatures cleaner
SettingsDep = Annotated[Settings, Depends(get_settings)]
ConfigStoreDep = Annotated[ConfigStore, Depends(get_config_store)]
EffectiveConfigDep = Annotated[AppConfig, Depends(get_effective_config)]
LocalLibraryDep = Annotated[LocalMediaLibrary, Depends(get_local_library)]
HttpClientDep = Annotated[httpx.AsyncClient, Depends(get_http_client)]
DriveClientDep = Annotated[DriveClient, Depends(get_drive_client)]

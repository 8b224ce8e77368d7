"""
Google Drive integration for remote videos and subtitles.

Uses the Drive v3 REST API over httpx with API-key auth.
Includes mock mode for local development without credentials.
"""

from .client import (
    DriveClient,
    DriveConfig,
    DriveError,
    DriveNotFoundError,
    GoogleDriveClient,
    MockDriveClient,
    create_drive_client,
)

__all__ = [
    "DriveClient",
    "DriveConfig",
    "DriveError",
    "DriveNotFoundError",
    "GoogleDriveClient",
    "MockDriveClient",
    "create_drive_client",
]

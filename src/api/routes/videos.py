"""
Video library endpoint.

Lists local videos first, then Drive videos. Drive credentials can be
passed per request in headers (the settings page does this to preview a
folder before saving), otherwise the saved/environment config is used.
"""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Header, status
from pydantic import BaseModel, Field

from ...core.media.models import SourceKind, VideoEntry
from ...infrastructure.drive.client import DriveConfig, DriveError, create_drive_client
from ..dependencies import (
    DriveClientDep,
    EffectiveConfigDep,
    HttpClientDep,
    LocalLibraryDep,
    SettingsDep,
)

logger = logging.getLogger(__name__)

router = APIRouter()


class VideoItem(BaseModel):
    """One playable video."""
    id: str = Field(description="Filename (local) or Drive file id")
    name: str = Field(description="Display name")
    type: str = Field(description="local or drive")


class VideoListResponse(BaseModel):
    """All playable videos."""
    videos: list[VideoItem]


@router.get(
    "",
    response_model=VideoListResponse,
    status_code=status.HTTP_200_OK,
    summary="List videos",
    description="Local videos followed by videos in the configured Drive folder",
)
async def list_videos(
    x_google_api_key: Annotated[Optional[str], Header()] = None,
    x_google_drive_folder_id: Annotated[Optional[str], Header()] = None,
    settings: SettingsDep = None,
    config: EffectiveConfigDep = None,
    library: LocalLibraryDep = None,
    drive: DriveClientDep = None,
    http_client: HttpClientDep = None,
) -> VideoListResponse:
    """
    List the library.

    A Drive failure doesn't fail the request: it is logged and only the
    local videos are returned.
    """
    entries = [
        VideoEntry(id=name, name=name, source=SourceKind.LOCAL)
        for name in library.list_videos()
    ]

    folder_id = x_google_drive_folder_id or config.google_drive_folder_id
    api_key = x_google_api_key or config.google_api_key

    if x_google_api_key and not settings.drive_mock_mode:
        # Preview credentials from the settings page, not yet saved
        drive = create_drive_client(
            config=DriveConfig(
                api_key=x_google_api_key,
                base_url=settings.drive_api_base_url,
                timeout_seconds=settings.drive_timeout_seconds,
            ),
            http_client=http_client,
        )

    if folder_id and (api_key or settings.drive_mock_mode):
        try:
            remote_files = await drive.list_videos(folder_id)
            entries.extend(
                VideoEntry(id=f.id, name=f.name, source=SourceKind.DRIVE)
                for f in remote_files
            )
        except DriveError as e:
            logger.error(
                "Failed to fetch Drive videos",
                extra={"folder_id": folder_id, "error": str(e)}
            )

    return VideoListResponse(
        videos=[
            VideoItem(id=entry.id, name=entry.name, type=entry.source.value)
            for entry in entries
        ]
    )

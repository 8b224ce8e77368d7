"""
Subtitle endpoints.

Two steps for the player:
1. GET /subtitles lists the tracks available for a video
2. GET /subtitle-content returns one track as WebVTT, converting SRT on the fly

Local tracks are addressed by filename, Drive tracks by file id plus
file name (the name decides whether conversion is needed).
"""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, HTTPException, Query, status
from fastapi.responses import Response
from pydantic import BaseModel, Field

from ...core.media.models import InvalidMediaRequest, MediaNotFoundError, SourceKind
from ...core.media.subtitles import (
    UnsupportedSubtitleError,
    normalize_subtitle,
    subtitle_extension,
)
from ...infrastructure.drive.client import DriveError
from ..dependencies import (
    DriveClientDep,
    EffectiveConfigDep,
    LocalLibraryDep,
    SettingsDep,
)

logger = logging.getLogger(__name__)

router = APIRouter()

VTT_MEDIA_TYPE = "text/vtt; charset=utf-8"


# ---------------------------------------------------------------------------
# Response Models
# ---------------------------------------------------------------------------

class SubtitleItem(BaseModel):
    """One available subtitle track."""
    filename: str | None = Field(None, description="Local subtitle filename")
    id: str | None = Field(None, description="Drive file id")
    name: str | None = Field(None, description="Drive file name")
    language: str = Field(description="Language code, or 'default'")
    label: str = Field(description="Display label for the track menu")


class SubtitleListResponse(BaseModel):
    """Tracks available for a video."""
    subtitles: list[SubtitleItem]


def _parse_source(value: Optional[str]) -> SourceKind:
    try:
        return SourceKind.parse(value)
    except InvalidMediaRequest as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get(
    "/subtitles",
    response_model=SubtitleListResponse,
    response_model_exclude_none=True,
    summary="List subtitles for a video",
)
async def list_subtitles(
    video_id: Annotated[Optional[str], Query(alias="id", description="Video id")] = None,
    source: Annotated[Optional[str], Query(alias="type", description="local or drive")] = None,
    name: Annotated[Optional[str], Query(description="Video file name (Drive videos)")] = None,
    library: LocalLibraryDep = None,
    drive: DriveClientDep = None,
    config: EffectiveConfigDep = None,
    settings: SettingsDep = None,
) -> SubtitleListResponse:
    """
    List subtitle tracks that sit next to a video.

    Drive lookups need a configured folder; without one the list is empty.
    If several untagged files match, each is listed as 'default'.
    """
    if not video_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Video ID is required",
        )

    kind = _parse_source(source)

    if kind is SourceKind.LOCAL:
        try:
            tracks = library.list_subtitles(video_id)
        except MediaNotFoundError:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Video not found")
    else:
        folder_id = config.google_drive_folder_id
        has_key = settings.drive_mock_mode or bool(config.google_api_key)
        if not folder_id or not has_key:
            logger.info("Drive not configured, no subtitles listed")
            tracks = []
        else:
            try:
                tracks = await drive.list_subtitles(folder_id, name or video_id)
            except DriveError as e:
                logger.error(
                    "Error fetching Drive subtitles",
                    extra={"video_id": video_id, "error": str(e)}
                )
                raise HTTPException(
                    status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                    detail="Failed to fetch subtitles",
                )

    return SubtitleListResponse(
        subtitles=[SubtitleItem(**track.as_dict()) for track in tracks]
    )


@router.get(
    "/subtitle-content",
    response_class=Response,
    summary="Get subtitle content as WebVTT",
    responses={
        200: {"content": {"text/vtt": {}}},
        400: {"description": "Missing parameters or unsupported format"},
        404: {"description": "Subtitle not found"},
        500: {"description": "Drive error"},
    },
)
async def get_subtitle_content(
    source: Annotated[Optional[str], Query(alias="type", description="local or drive")] = None,
    filename: Annotated[Optional[str], Query(description="Local subtitle filename")] = None,
    file_id: Annotated[Optional[str], Query(alias="fileId", description="Drive file id")] = None,
    file_name: Annotated[Optional[str], Query(alias="fileName", description="Drive file name")] = None,
    library: LocalLibraryDep = None,
    drive: DriveClientDep = None,
) -> Response:
    """Return a subtitle track as WebVTT."""
    kind = _parse_source(source)

    try:
        if kind is SourceKind.LOCAL:
            if not filename:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Filename is required",
                )
            content = normalize_subtitle(library.read_subtitle(filename), filename)
        else:
            if not file_id or not file_name:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="File ID and name are required",
                )
            subtitle_extension(file_name)
            content = normalize_subtitle(await drive.read_text(file_id), file_name)
    except UnsupportedSubtitleError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except MediaNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Subtitle not found")
    except DriveError as e:
        logger.error(
            "Error fetching Drive subtitle",
            extra={"file_id": file_id, "error": str(e)}
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch subtitle content",
        )

    return Response(content=content, media_type=VTT_MEDIA_TYPE)

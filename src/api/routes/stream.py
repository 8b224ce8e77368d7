"""
Media streaming endpoint.

Serves local and Drive videos to a <video> element. Browsers seek by
sending Range headers, so this route answers 206 Partial Content for
ranged requests and 200 for whole-file requests.

Drive videos are either proxied (the Range is forwarded to Drive and the
stream relayed back) or redirected to Drive, depending on
DRIVE_DELIVERY_MODE.
"""

import logging
from typing import Annotated, Awaitable, Callable, Optional

from fastapi import APIRouter, Header, HTTPException, Query, status
from fastapi.responses import RedirectResponse, Response, StreamingResponse

from ...core.media.models import (
    DeliveryMode,
    InvalidMediaRequest,
    MediaNotFoundError,
    MediaRequest,
    SourceKind,
)
from ...core.media.ranges import InvalidRangeError, RangeNotSatisfiableError
from ...core.media.responder import MediaResponder
from ...infrastructure.drive.client import DriveError
from ..dependencies import DriveClientDep, LocalLibraryDep, SettingsDep

logger = logging.getLogger(__name__)

router = APIRouter()


class MediaStreamingResponse(StreamingResponse):
    """
    StreamingResponse that always releases the media body.

    The close callback runs after the response on every exit path:
    normal completion, client disconnect, and a body never iterated.
    """

    def __init__(
        self,
        content,
        close: Optional[Callable[[], Awaitable[None]]] = None,
        **kwargs,
    ) -> None:
        super().__init__(content, **kwargs)
        self._close = close

    async def __call__(self, scope, receive, send) -> None:
        try:
            await super().__call__(scope, receive, send)
        finally:
            if self._close is not None:
                await self._close()


@router.get(
    "",
    summary="Stream a video",
    description="Range-aware media fetch for local or Drive videos",
    responses={
        200: {"description": "Whole file"},
        206: {"description": "Requested byte range"},
        307: {"description": "Redirect to Drive (redirect delivery mode)"},
        400: {"description": "Missing id, unknown type, or malformed Range"},
        404: {"description": "Video not found"},
        416: {"description": "Range outside the file"},
        500: {"description": "Drive error"},
    },
)
async def stream_video(
    media_id: Annotated[Optional[str], Query(alias="id", description="Filename (local) or Drive file id")] = None,
    source: Annotated[Optional[str], Query(alias="type", description="local or drive")] = None,
    range_header: Annotated[Optional[str], Header(alias="range")] = None,
    settings: SettingsDep = None,
    library: LocalLibraryDep = None,
    drive: DriveClientDep = None,
) -> Response:
    """
    Stream a video, honoring a single-range Range header.

    Validation happens before either store is touched. Drive failures
    are terminal: they are logged and answered with 500, never retried.
    """
    try:
        media_request = MediaRequest.from_query(media_id, source, range_header)
    except InvalidMediaRequest as e:
        logger.warning("Rejected stream request", extra={"error": str(e)})
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    if media_request.source is SourceKind.DRIVE:
        responder = MediaResponder(drive, delivery_mode=settings.drive_delivery_mode)
    else:
        responder = MediaResponder(library, delivery_mode=DeliveryMode.PROXY)

    try:
        plan = await responder.respond(media_request)
    except InvalidRangeError as e:
        logger.warning("Malformed range", extra={"range": range_header, "error": str(e)})
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except RangeNotSatisfiableError as e:
        raise HTTPException(
            status_code=status.HTTP_416_REQUESTED_RANGE_NOT_SATISFIABLE,
            detail=str(e),
            headers={"Content-Range": f"bytes */{e.total_size}"},
        )
    except MediaNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Video not found")
    except DriveError as e:
        logger.error(
            "Drive stream error",
            extra={"media_id": media_request.media_id, "error": str(e)}
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error streaming from Drive",
        )

    if plan.is_redirect:
        return RedirectResponse(url=plan.redirect_url, status_code=plan.status_code)

    return MediaStreamingResponse(
        plan.body,
        close=plan.close,
        status_code=plan.status_code,
        headers=plan.headers,
        media_type=plan.headers.get("Content-Type"),
    )

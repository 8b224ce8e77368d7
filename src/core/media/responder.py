"""
Range-aware media delivery.

The responder turns a MediaRequest into a MediaPlan: a status code, the
headers, and a body iterator (or a redirect target). It doesn't know
about FastAPI; the stream route converts the plan into a response.

Order of work for every request:
1. Resolve the descriptor (size, MIME type). Failures propagate before
   any header is produced.
2. Parse the Range header against the resolved size.
3. Open exactly the bytes to be served.
"""

import logging
from dataclasses import dataclass, field
from typing import AsyncIterable, Iterator, Optional, Protocol, Union, runtime_checkable

from .models import (
    DeliveryMode,
    MediaRequest,
    RangeSpec,
    ResourceDescriptor,
)
from .ranges import parse_range_header

logger = logging.getLogger(__name__)

MediaBody = Union[Iterator[bytes], AsyncIterable[bytes]]


# ---------------------------------------------------------------------------
# Protocols (interfaces)
# ---------------------------------------------------------------------------

class MediaLocator(Protocol):
    """
    Interface for a byte-addressable media store.

    The local library and the Drive client both implement it, so the
    responder has one code path for either source.
    """

    async def describe(self, media_id: str) -> ResourceDescriptor:
        """Resolve size and MIME type. Raises MediaNotFoundError if absent."""
        ...

    async def open_media(
        self,
        media_id: str,
        byte_range: Optional[RangeSpec],
    ) -> MediaBody:
        """Open a body yielding the range (or the whole file when None)."""
        ...


@runtime_checkable
class RedirectingLocator(MediaLocator, Protocol):
    """A store whose files the browser can fetch directly."""

    def media_url(self, media_id: str) -> str:
        ...


# ---------------------------------------------------------------------------
# Responder
# ---------------------------------------------------------------------------

@dataclass
class MediaPlan:
    """Everything the HTTP layer needs to answer a /stream request."""
    status_code: int
    headers: dict[str, str] = field(default_factory=dict)
    body: Optional[MediaBody] = None
    redirect_url: Optional[str] = None

    @property
    def is_redirect(self) -> bool:
        return self.redirect_url is not None

    async def close(self) -> None:
        """
        Release the file handle or upstream connection behind the body.

        Safe to call more than once, and before or after the body was
        iterated.
        """
        if self.body is None:
            return

        aclose = getattr(self.body, "aclose", None)
        if aclose is not None:
            await aclose()
        elif hasattr(self.body, "close"):
            self.body.close()


class MediaResponder:
    """
    Serves full or partial content from a MediaLocator.

    Stateless: one instance per request is fine, and nothing is shared
    between requests.
    """

    def __init__(
        self,
        locator: MediaLocator,
        delivery_mode: DeliveryMode = DeliveryMode.PROXY,
    ) -> None:
        if delivery_mode is DeliveryMode.REDIRECT and not isinstance(locator, RedirectingLocator):
            raise ValueError("Redirect delivery needs a locator with media_url()")

        self._locator = locator
        self._delivery_mode = delivery_mode

    async def respond(self, request: MediaRequest) -> MediaPlan:
        descriptor = await self._locator.describe(request.media_id)

        if self._delivery_mode is DeliveryMode.REDIRECT:
            url = self._locator.media_url(request.media_id)
            logger.info(
                "Redirecting media request",
                extra={"media_id": request.media_id, "source": request.source.value}
            )
            return MediaPlan(status_code=307, headers={"Location": url}, redirect_url=url)

        byte_range = parse_range_header(request.range_header, descriptor.total_size)
        body = await self._locator.open_media(request.media_id, byte_range)

        if byte_range is None:
            logger.debug(
                "Serving full media",
                extra={"media_id": request.media_id, "size_bytes": descriptor.total_size}
            )
            return MediaPlan(
                status_code=200,
                headers=self._full_headers(descriptor),
                body=body,
            )

        logger.debug(
            "Serving media range",
            extra={
                "media_id": request.media_id,
                "start": byte_range.start,
                "end": byte_range.end,
                "size_bytes": descriptor.total_size,
            }
        )
        return MediaPlan(
            status_code=206,
            headers=self._partial_headers(descriptor, byte_range),
            body=body,
        )

    def _full_headers(self, descriptor: ResourceDescriptor) -> dict[str, str]:
        return {
            "Content-Type": descriptor.mime_type,
            "Content-Length": str(descriptor.total_size),
            "Accept-Ranges": "bytes",
        }

    def _partial_headers(
        self,
        descriptor: ResourceDescriptor,
        byte_range: RangeSpec,
    ) -> dict[str, str]:
        return {
            "Content-Type": descriptor.mime_type,
            "Content-Length": str(byte_range.length),
            "Content-Range": byte_range.content_range(descriptor.total_size),
            "Accept-Ranges": "bytes",
        }

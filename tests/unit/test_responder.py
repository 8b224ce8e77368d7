"""
Unit tests for the range-aware media responder.

Uses an in-memory locator so the tests exercise the responder's
status/header/body decisions without any I/O.
"""

import asyncio
from typing import AsyncIterator, Optional

import pytest

from src.core.media.models import (
    DeliveryMode,
    MediaNotFoundError,
    MediaRequest,
    RangeSpec,
    ResourceDescriptor,
    SourceKind,
)
from src.core.media.ranges import InvalidRangeError, RangeNotSatisfiableError
from src.core.media.responder import MediaPlan, MediaResponder

PAYLOAD = bytes(range(256)) * 4  # 1024 bytes


class InMemoryLocator:
    """Locator over a dict of files that records what it was asked for."""

    def __init__(self, files: dict[str, bytes]) -> None:
        self._files = files
        self.opened: list[Optional[RangeSpec]] = []

    async def describe(self, media_id: str) -> ResourceDescriptor:
        if media_id not in self._files:
            raise MediaNotFoundError(media_id)
        return ResourceDescriptor(
            name=media_id,
            total_size=len(self._files[media_id]),
            mime_type="video/webm",
        )

    async def open_media(
        self,
        media_id: str,
        byte_range: Optional[RangeSpec],
    ) -> AsyncIterator[bytes]:
        self.opened.append(byte_range)
        data = self._files[media_id]
        if byte_range is not None:
            data = data[byte_range.start:byte_range.end + 1]
        return self._chunks(data)

    def media_url(self, media_id: str) -> str:
        return f"https://store.test/{media_id}"

    async def _chunks(self, data: bytes) -> AsyncIterator[bytes]:
        for offset in range(0, len(data), 100):
            yield data[offset:offset + 100]


def respond(locator, request: MediaRequest, mode: DeliveryMode = DeliveryMode.PROXY):
    """Run the responder and drain the body."""
    async def _run():
        plan = await MediaResponder(locator, delivery_mode=mode).respond(request)
        body = b""
        if plan.body is not None:
            body = b"".join([chunk async for chunk in plan.body])
        return plan, body

    return asyncio.run(_run())


@pytest.fixture
def locator() -> InMemoryLocator:
    return InMemoryLocator({"clip.webm": PAYLOAD})


class TestFullContent:
    """Requests without a Range header."""

    def test_returns_200_with_whole_body(self, locator):
        plan, body = respond(locator, MediaRequest("clip.webm"))

        assert plan.status_code == 200
        assert plan.headers["Content-Length"] == str(len(PAYLOAD))
        assert plan.headers["Content-Type"] == "video/webm"
        assert "Content-Range" not in plan.headers
        assert body == PAYLOAD

    def test_opens_without_range(self, locator):
        respond(locator, MediaRequest("clip.webm"))
        assert locator.opened == [None]


class TestPartialContent:
    """Requests with a Range header."""

    @pytest.mark.parametrize("start,end", [(0, 0), (0, 99), (100, 555), (1023, 1023)])
    def test_valid_ranges_return_206(self, locator, start, end):
        request = MediaRequest("clip.webm", range_header=f"bytes={start}-{end}")

        plan, body = respond(locator, request)

        assert plan.status_code == 206
        assert plan.headers["Content-Length"] == str(end - start + 1)
        assert plan.headers["Content-Range"] == f"bytes {start}-{end}/{len(PAYLOAD)}"
        assert plan.headers["Accept-Ranges"] == "bytes"
        assert body == PAYLOAD[start:end + 1]

    def test_open_ended_range_reaches_eof(self, locator):
        plan, body = respond(locator, MediaRequest("clip.webm", range_header="bytes=1000-"))

        assert plan.headers["Content-Range"] == "bytes 1000-1023/1024"
        assert body == PAYLOAD[1000:]

    def test_range_is_passed_to_locator(self, locator):
        respond(locator, MediaRequest("clip.webm", range_header="bytes=10-20"))
        assert locator.opened == [RangeSpec(10, 20)]


class TestFailures:
    """Errors propagate before any body is opened."""

    def test_missing_media_raises_not_found(self, locator):
        with pytest.raises(MediaNotFoundError):
            respond(locator, MediaRequest("missing.mp4"))
        assert locator.opened == []

    def test_unsatisfiable_range_opens_nothing(self, locator):
        with pytest.raises(RangeNotSatisfiableError):
            respond(locator, MediaRequest("clip.webm", range_header="bytes=5000-"))
        assert locator.opened == []

    def test_malformed_range_opens_nothing(self, locator):
        with pytest.raises(InvalidRangeError):
            respond(locator, MediaRequest("clip.webm", range_header="bytes=x-y"))
        assert locator.opened == []


class TestRedirectDelivery:
    """Redirect mode sends the client to the store instead of proxying."""

    def test_redirects_after_resolving(self, locator):
        request = MediaRequest("clip.webm", SourceKind.DRIVE, "bytes=0-99")

        plan, body = respond(locator, request, DeliveryMode.REDIRECT)

        assert plan.is_redirect
        assert plan.status_code == 307
        assert plan.redirect_url == "https://store.test/clip.webm"
        assert body == b""
        assert locator.opened == []

    def test_redirect_still_reports_missing_media(self, locator):
        with pytest.raises(MediaNotFoundError):
            respond(locator, MediaRequest("missing.mp4"), DeliveryMode.REDIRECT)

    def test_redirect_needs_capable_locator(self):
        class DiskOnly:
            async def describe(self, media_id):
                ...

            async def open_media(self, media_id, byte_range):
                ...

        with pytest.raises(ValueError, match="media_url"):
            MediaResponder(DiskOnly(), delivery_mode=DeliveryMode.REDIRECT)


class TestClose:
    """MediaPlan.close releases whatever body the locator opened."""

    def test_closes_async_body_before_iteration(self, locator):
        async def _run():
            plan = await MediaResponder(locator).respond(MediaRequest("clip.webm"))
            await plan.close()
            return [chunk async for chunk in plan.body]

        assert asyncio.run(_run()) == []

    def test_closes_sync_body(self):
        closed = []

        def chunks():
            try:
                yield b"abc"
            finally:
                closed.append(True)

        body = chunks()
        next(body)
        plan = MediaPlan(status_code=200, body=body)

        asyncio.run(plan.close())

        assert closed == [True]

    def test_redirect_plan_has_nothing_to_close(self):
        asyncio.run(MediaPlan(status_code=307, redirect_url="https://x.test").close())

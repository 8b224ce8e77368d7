"""
Google Drive client for remote videos and subtitles.

Talks to the Drive v3 REST API with httpx, authenticated by an API key
(the folder must be shared as "anyone with the link"). Using the REST
API directly instead of the Google SDK because:
- Four endpoints are all we need
- httpx gives us streaming responses we can relay without buffering
- The same AsyncClient is shared across requests for connection reuse

Redirect delivery hands the browser a URL carrying the API key in its
query string. The key is then visible to anyone who can see that
response, unlike /api/config which always masks it. Use a key that is
restricted to the Drive API and to the referrers of this deployment.

Mock mode keeps files in memory, enabling the whole API to run without
Drive credentials.
"""

import logging
from dataclasses import dataclass
from typing import AsyncIterable, AsyncIterator, Optional, Protocol

import httpx

from ...core.media.mime import resolve_mime_type
from ...core.media.models import (
    MediaNotFoundError,
    RangeSpec,
    RemoteFile,
    ResourceDescriptor,
    SubtitleTrack,
)
from ...core.media.subtitles import is_subtitle_for, parse_subtitle_language

logger = logging.getLogger(__name__)

FILE_FIELDS = "id, name, mimeType, size"
PAGE_SIZE = 1000


class DriveError(Exception):
    """Raised when a Drive call fails (auth, network, unexpected status)."""
    pass


class DriveNotFoundError(DriveError, MediaNotFoundError):
    """Raised when Drive reports the file does not exist or is not visible."""
    pass


@dataclass
class DriveConfig:
    """
    Configuration for Drive access.

    api_key comes from the settings page or the environment and can change
    while the process runs, so a DriveConfig is built per request.
    """
    api_key: str
    base_url: str = "https://www.googleapis.com/drive/v3"
    timeout_seconds: Optional[float] = None


class DriveClient(Protocol):
    """
    Protocol for Drive operations.

    Also satisfies the responder's MediaLocator (describe/open_media),
    plus media_url() for redirect delivery.
    """

    async def get_file(self, file_id: str) -> RemoteFile:
        """Fetch metadata for one file."""
        ...

    async def list_videos(self, folder_id: str) -> list[RemoteFile]:
        """List video files in a folder, ordered by name."""
        ...

    async def list_subtitles(self, folder_id: str, video_name: str) -> list[SubtitleTrack]:
        """List subtitle files in a folder that belong to video_name."""
        ...

    async def read_text(self, file_id: str) -> str:
        """Download a small text file (subtitles)."""
        ...

    async def describe(self, media_id: str) -> ResourceDescriptor:
        ...

    async def open_media(
        self,
        media_id: str,
        byte_range: Optional[RangeSpec],
    ) -> AsyncIterable[bytes]:
        ...

    def media_url(self, media_id: str) -> str:
        """Keyed URL a browser can fetch (with ranges) directly."""
        ...


class DriveMediaStream:
    """
    Relays an open upstream media response.

    aclose() releases the upstream connection whether or not iteration
    ever started. A client that disconnects before the first chunk never
    runs the generator, so the response must be closed from outside.
    """

    def __init__(self, response: httpx.Response) -> None:
        self._response = response

    async def __aiter__(self) -> AsyncIterator[bytes]:
        try:
            async for chunk in self._response.aiter_bytes():
                yield chunk
        finally:
            await self.aclose()

    async def aclose(self) -> None:
        await self._response.aclose()


def _quote(value: str) -> str:
    """Escape a value for a Drive query string literal."""
    return value.replace("\\", "\\\\").replace("'", "\\'")


def _descriptor_for(remote: RemoteFile) -> ResourceDescriptor:
    if remote.size is None:
        raise DriveNotFoundError(f"Drive file has no downloadable content: {remote.id}")

    return ResourceDescriptor(
        name=remote.name,
        total_size=remote.size,
        mime_type=resolve_mime_type(remote.name, remote.mime_type),
    )


def _subtitle_tracks(files: list[RemoteFile], video_name: str) -> list[SubtitleTrack]:
    return [
        SubtitleTrack(id=f.id, name=f.name, **parse_subtitle_language(f.name))
        for f in sorted(files, key=lambda f: f.name)
        if is_subtitle_for(video_name, f.name)
    ]


class GoogleDriveClient:
    """
    Drive v3 REST client.

    Every call is a single attempt. Failures surface as DriveError (or
    DriveNotFoundError for 404) and are turned into HTTP errors by the
    routes; nothing here retries.
    """

    def __init__(self, config: DriveConfig, http_client: httpx.AsyncClient) -> None:
        self._config = config
        self._http = http_client
        self._base_url = config.base_url.rstrip("/")

    # -----------------------------------------------------------------------
    # Metadata
    # -----------------------------------------------------------------------

    async def get_file(self, file_id: str) -> RemoteFile:
        data = await self._get_json(f"/files/{file_id}", {"fields": FILE_FIELDS})
        try:
            return RemoteFile.from_api(data)
        except (TypeError, ValueError) as e:
            raise DriveError(f"Unexpected file metadata from Drive: {e}")

    async def list_videos(self, folder_id: str) -> list[RemoteFile]:
        query = (
            f"'{_quote(folder_id)}' in parents "
            "and mimeType contains 'video/' and trashed = false"
        )
        return await self._list_files(query, order_by="name")

    async def list_subtitles(self, folder_id: str, video_name: str) -> list[SubtitleTrack]:
        base = video_name.rsplit(".", 1)[0] if "." in video_name else video_name
        query = (
            f"'{_quote(folder_id)}' in parents "
            f"and name contains '{_quote(base)}.' and trashed = false"
        )
        files = await self._list_files(query)
        return _subtitle_tracks(files, video_name)

    async def read_text(self, file_id: str) -> str:
        response = await self._send("GET", f"/files/{file_id}", {"alt": "media"})
        return response.content.decode("utf-8-sig", errors="replace")

    # -----------------------------------------------------------------------
    # MediaLocator
    # -----------------------------------------------------------------------

    async def describe(self, media_id: str) -> ResourceDescriptor:
        return _descriptor_for(await self.get_file(media_id))

    async def open_media(
        self,
        media_id: str,
        byte_range: Optional[RangeSpec],
    ) -> DriveMediaStream:
        """
        Open the upstream media stream.

        The status is checked before returning, so a failure becomes an
        error response instead of a 200/206 with a broken body.
        """
        headers = {}
        if byte_range is not None:
            headers["Range"] = byte_range.header_value()

        request = self._http.build_request(
            "GET",
            self._url(f"/files/{media_id}"),
            params=self._params({"alt": "media"}),
            headers=headers,
            timeout=self._timeout(),
        )

        try:
            response = await self._http.send(request, stream=True)
        except httpx.HTTPError as e:
            logger.error(
                "Drive stream request failed",
                extra={"file_id": media_id, "error": str(e)}
            )
            raise DriveError(f"Drive stream failed: {e}")

        expected = (206,) if byte_range is not None else (200,)
        if response.status_code not in expected:
            await response.aclose()
            self._raise_for_status(response, context="stream")
            raise DriveError(
                f"Drive answered {response.status_code} for a "
                f"{'ranged' if byte_range else 'full'} media request"
            )

        logger.debug(
            "Opened Drive media stream",
            extra={
                "file_id": media_id,
                "status": response.status_code,
                "range": headers.get("Range"),
            }
        )
        return DriveMediaStream(response)

    def media_url(self, media_id: str) -> str:
        self._require_key()
        return str(httpx.URL(self._url(f"/files/{media_id}"), params=self._params({"alt": "media"})))

    # -----------------------------------------------------------------------
    # Helpers
    # -----------------------------------------------------------------------

    async def _list_files(self, query: str, order_by: Optional[str] = None) -> list[RemoteFile]:
        params = {
            "q": query,
            "fields": f"nextPageToken, files({FILE_FIELDS})",
            "pageSize": str(PAGE_SIZE),
        }
        if order_by:
            params["orderBy"] = order_by

        files: list[RemoteFile] = []
        while True:
            data = await self._get_json("/files", params)
            for entry in data.get("files") or []:
                try:
                    files.append(RemoteFile.from_api(entry))
                except (TypeError, ValueError) as e:
                    logger.warning("Skipping malformed Drive entry", extra={"error": str(e)})

            page_token = data.get("nextPageToken")
            if not page_token:
                return files
            params = {**params, "pageToken": page_token}

    async def _get_json(self, path: str, params: dict[str, str]) -> dict:
        response = await self._send("GET", path, params)
        try:
            return response.json()
        except ValueError as e:
            raise DriveError(f"Drive returned invalid JSON: {e}")

    async def _send(self, method: str, path: str, params: dict[str, str]) -> httpx.Response:
        try:
            response = await self._http.request(
                method,
                self._url(path),
                params=self._params(params),
                timeout=self._timeout(),
            )
        except httpx.HTTPError as e:
            logger.error(
                "Drive request failed",
                extra={"path": path, "error": str(e)}
            )
            raise DriveError(f"Drive request failed: {e}")

        self._raise_for_status(response, context=path)
        return response

    def _raise_for_status(self, response: httpx.Response, context: str) -> None:
        if response.is_success:
            return

        logger.error(
            "Drive returned an error",
            extra={"context": context, "status": response.status_code}
        )
        if response.status_code == 404:
            raise DriveNotFoundError(f"Drive file not found ({context})")
        raise DriveError(f"Drive returned HTTP {response.status_code} ({context})")

    def _require_key(self) -> str:
        if not self._config.api_key:
            raise DriveError("Drive API key is not configured")
        return self._config.api_key

    def _params(self, params: dict[str, str]) -> dict[str, str]:
        return {**params, "key": self._require_key()}

    def _url(self, path: str) -> str:
        return f"{self._base_url}{path}"

    def _timeout(self) -> httpx.Timeout:
        return httpx.Timeout(self._config.timeout_seconds)


# ---------------------------------------------------------------------------
# Mock Drive for Local Development
# ---------------------------------------------------------------------------

MOCK_FOLDER_ID = "mock-folder"


class MockDriveClient:
    """
    In-memory Drive for local development.

    Files are kept in a dictionary keyed by id. Not suitable for
    production, but enough to exercise listing, streaming and subtitles.
    """

    def __init__(self, chunk_size: int = 64 * 1024) -> None:
        self._files: dict[str, tuple[RemoteFile, str, bytes]] = {}
        self._chunk_size = chunk_size
        logger.info("Initialized mock Drive client (in-memory)")

    def add_file(
        self,
        name: str,
        data: bytes,
        mime_type: Optional[str] = None,
        folder_id: str = MOCK_FOLDER_ID,
        file_id: Optional[str] = None,
    ) -> RemoteFile:
        """Store a file and return its metadata."""
        file_id = file_id or f"mock-{len(self._files) + 1}"
        remote = RemoteFile(id=file_id, name=name, mime_type=mime_type, size=len(data))
        self._files[file_id] = (remote, folder_id, data)
        return remote

    async def get_file(self, file_id: str) -> RemoteFile:
        return self._lookup(file_id)[0]

    async def list_videos(self, folder_id: str) -> list[RemoteFile]:
        return sorted(
            (
                remote for remote, parent, _ in self._files.values()
                if parent == folder_id and (remote.mime_type or "").startswith("video/")
            ),
            key=lambda f: f.name,
        )

    async def list_subtitles(self, folder_id: str, video_name: str) -> list[SubtitleTrack]:
        files = [remote for remote, parent, _ in self._files.values() if parent == folder_id]
        return _subtitle_tracks(files, video_name)

    async def read_text(self, file_id: str) -> str:
        return self._lookup(file_id)[2].decode("utf-8-sig", errors="replace")

    async def describe(self, media_id: str) -> ResourceDescriptor:
        return _descriptor_for(self._lookup(media_id)[0])

    async def open_media(
        self,
        media_id: str,
        byte_range: Optional[RangeSpec],
    ) -> AsyncIterator[bytes]:
        data = self._lookup(media_id)[2]
        if byte_range is not None:
            data = data[byte_range.start:byte_range.end + 1]
        return self._iter_chunks(data)

    def media_url(self, media_id: str) -> str:
        self._lookup(media_id)
        return f"mock://drive/{media_id}"

    async def _iter_chunks(self, data: bytes) -> AsyncIterator[bytes]:
        for offset in range(0, len(data), self._chunk_size):
            yield data[offset:offset + self._chunk_size]

    def _lookup(self, file_id: str) -> tuple[RemoteFile, str, bytes]:
        if file_id not in self._files:
            raise DriveNotFoundError(f"Drive file not found: {file_id}")
        return self._files[file_id]


# ---------------------------------------------------------------------------
# Factory Function
# ---------------------------------------------------------------------------

def create_drive_client(
    config: Optional[DriveConfig] = None,
    http_client: Optional[httpx.AsyncClient] = None,
    mock_mode: bool = False,
) -> DriveClient:
    """
    Create Drive client based on configuration.

    Args:
        config: Drive configuration (required if not mock_mode)
        http_client: Shared AsyncClient (required if not mock_mode)
        mock_mode: If True, return mock client for testing

    Returns:
        DriveClient implementation (Google or Mock)
    """
    if mock_mode:
        return MockDriveClient()

    if config is None or http_client is None:
        raise ValueError("config and http_client are required when not in mock mode")

    return GoogleDriveClient(config, http_client)

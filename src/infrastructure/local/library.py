"""
Local video library.

Videos and their subtitle files live side by side in one directory.
A media id for a local video is its filename; only the basename is ever
used, so ids like ``../../etc/passwd`` cannot escape the directory.
"""

import logging
import os
from pathlib import Path
from typing import Iterator, Optional

from ...core.media.mime import guess_mime_type
from ...core.media.models import (
    MediaNotFoundError,
    RangeSpec,
    ResourceDescriptor,
    SubtitleTrack,
)
from ...core.media.subtitles import (
    is_subtitle_for,
    parse_subtitle_language,
    subtitle_extension,
)

logger = logging.getLogger(__name__)

LISTED_VIDEO_EXTENSIONS = (".mp4", ".mkv", ".webm", ".mov")

DEFAULT_CHUNK_SIZE = 1024 * 1024


class LocalMediaLibrary:
    """
    File-system MediaLocator rooted at one directory.

    Methods that touch the disk are cheap (stat, listdir) so they run
    inline. Byte streaming is a plain generator; Starlette iterates it
    in a worker thread.
    """

    def __init__(self, videos_dir: Path, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        self._videos_dir = Path(videos_dir)
        self._chunk_size = chunk_size

    @property
    def videos_dir(self) -> Path:
        return self._videos_dir

    def resolve(self, filename: str) -> Path:
        """Map a filename to a path inside the library directory."""
        safe_name = os.path.basename(filename.replace("\\", "/"))
        if not safe_name or safe_name in (".", ".."):
            raise MediaNotFoundError(f"Invalid filename: {filename}")
        return self._videos_dir / safe_name

    def list_videos(self) -> list[str]:
        """Filenames of playable videos, sorted. Empty if the directory is missing."""
        if not self._videos_dir.is_dir():
            return []

        return sorted(
            entry.name
            for entry in self._videos_dir.iterdir()
            if entry.is_file() and entry.suffix.lower() in LISTED_VIDEO_EXTENSIONS
        )

    # -----------------------------------------------------------------------
    # MediaLocator
    # -----------------------------------------------------------------------

    async def describe(self, media_id: str) -> ResourceDescriptor:
        path = self.resolve(media_id)
        if not path.is_file():
            logger.warning("Local video not found", extra={"media_id": media_id})
            raise MediaNotFoundError(f"Video not found: {media_id}")

        return ResourceDescriptor(
            name=path.name,
            total_size=path.stat().st_size,
            mime_type=guess_mime_type(path.name),
        )

    async def open_media(
        self,
        media_id: str,
        byte_range: Optional[RangeSpec],
    ) -> Iterator[bytes]:
        path = self.resolve(media_id)
        if byte_range is None:
            return self.iter_bytes(path)
        return self.iter_bytes(path, byte_range.start, byte_range.end)

    def iter_bytes(
        self,
        path: Path,
        start: int = 0,
        end: Optional[int] = None,
    ) -> Iterator[bytes]:
        """
        Yield bytes [start, end] of a file in chunks.

        The file is opened on first iteration and closed when the
        generator finishes or is closed (client disconnect).
        """
        with path.open("rb") as f:
            f.seek(start)
            remaining = None if end is None else end - start + 1
            while remaining is None or remaining > 0:
                read_size = self._chunk_size if remaining is None else min(self._chunk_size, remaining)
                chunk = f.read(read_size)
                if not chunk:
                    break
                if remaining is not None:
                    remaining -= len(chunk)
                yield chunk

    # -----------------------------------------------------------------------
    # Subtitles
    # -----------------------------------------------------------------------

    def list_subtitles(self, video_id: str) -> list[SubtitleTrack]:
        """Subtitle files in the library that belong to video_id."""
        if not self._videos_dir.is_dir():
            return []

        video_name = self.resolve(video_id).name
        tracks = []
        for entry in sorted(self._videos_dir.iterdir()):
            if not entry.is_file() or not is_subtitle_for(video_name, entry.name):
                continue
            language = parse_subtitle_language(entry.name)
            tracks.append(SubtitleTrack(filename=entry.name, **language))

        return tracks

    def read_subtitle(self, filename: str) -> str:
        """Read a subtitle file's text. BOMs are stripped, undecodable bytes replaced."""
        subtitle_extension(filename)
        path = self.resolve(filename)
        if not path.is_file():
            raise MediaNotFoundError(f"Subtitle not found: {filename}")

        return path.read_bytes().decode("utf-8-sig", errors="replace")

"""MIME type resolution for video files."""

from pathlib import PurePath
from typing import Optional

DEFAULT_VIDEO_MIME_TYPE = "video/mp4"

VIDEO_MIME_TYPES = {
    ".mp4": "video/mp4",
    ".webm": "video/webm",
    ".ogg": "video/ogg",
    ".ogv": "video/ogg",
    ".mkv": "video/x-matroska",
    ".avi": "video/x-msvideo",
    ".mov": "video/quicktime",
    ".wmv": "video/x-ms-wmv",
    ".flv": "video/x-flv",
    ".m4v": "video/x-m4v",
}


def guess_mime_type(filename: str) -> str:
    """Map a filename's extension to a video MIME type, video/mp4 if unknown."""
    ext = PurePath(filename).suffix.lower()
    return VIDEO_MIME_TYPES.get(ext, DEFAULT_VIDEO_MIME_TYPE)


def resolve_mime_type(filename: str, reported: Optional[str] = None) -> str:
    """Prefer the type reported by the store, fall back to the extension table."""
    if reported and reported.strip():
        return reported.strip()
    return guess_mime_type(filename)

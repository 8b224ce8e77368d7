"""
Domain models for media delivery.

These models describe what a request asks for and what the store knows
about a file. They carry no framework types: the API layer turns them
into HTTP responses, the infrastructure layer fills them in.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class MediaError(Exception):
    """Base class for media delivery failures."""
    pass


class InvalidMediaRequest(MediaError):
    """Raised when the request itself is unusable (missing id, bad source)."""
    pass


class MediaNotFoundError(MediaError):
    """Raised when the requested file does not exist in its store."""
    pass


class SourceKind(Enum):
    """Where a media id lives."""
    LOCAL = "local"
    DRIVE = "drive"

    @classmethod
    def parse(cls, value: Optional[str]) -> "SourceKind":
        """Parse the ``type`` query value. Absent means local."""
        if not value:
            return cls.LOCAL
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise InvalidMediaRequest(f"Unknown source type: {value}")


class DeliveryMode(Enum):
    """
    How remote media reaches the browser.

    One mode per deployment:
    - PROXY: bytes flow through this service with the range forwarded upstream
    - REDIRECT: the browser is sent to a keyed Drive URL and fetches ranges itself
    """
    PROXY = "proxy"
    REDIRECT = "redirect"


@dataclass(frozen=True)
class RangeSpec:
    """
    An inclusive byte span within a resource.

    Frozen because a range is a value: two ranges over the same bytes
    are the same range.
    """
    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 0:
            raise ValueError("Range start cannot be negative")
        if self.end < self.start:
            raise ValueError("Range end must not be before range start")

    @property
    def length(self) -> int:
        return self.end - self.start + 1

    def content_range(self, total_size: int) -> str:
        """Value for the Content-Range response header."""
        return f"bytes {self.start}-{self.end}/{total_size}"

    def header_value(self) -> str:
        """Value for an outbound Range request header."""
        return f"bytes={self.start}-{self.end}"


@dataclass(frozen=True)
class ResourceDescriptor:
    """What the store knows about a file before any bytes are read."""
    name: str
    total_size: int
    mime_type: str

    def __post_init__(self) -> None:
        if self.total_size < 0:
            raise ValueError("Resource size cannot be negative")


@dataclass(frozen=True)
class MediaRequest:
    """A single /stream call, discarded once the response is built."""
    media_id: str
    source: SourceKind = SourceKind.LOCAL
    range_header: Optional[str] = None

    @classmethod
    def from_query(
        cls,
        media_id: Optional[str],
        source: Optional[str] = None,
        range_header: Optional[str] = None,
    ) -> "MediaRequest":
        """Build a request from raw query values, validating before any store access."""
        if not media_id or not media_id.strip():
            raise InvalidMediaRequest("Missing video id")
        return cls(
            media_id=media_id,
            source=SourceKind.parse(source),
            range_header=range_header or None,
        )


@dataclass(frozen=True)
class RemoteFile:
    """
    A file entry returned by Drive.

    Drive answers with loosely typed JSON (size arrives as a string and may
    be absent for Google Docs). Converting at the boundary keeps that out
    of the rest of the code.
    """
    id: str
    name: str
    mime_type: Optional[str] = None
    size: Optional[int] = None

    @classmethod
    def from_api(cls, data: dict) -> "RemoteFile":
        file_id = data.get("id")
        if not file_id:
            raise ValueError("Drive file entry has no id")

        raw_size = data.get("size")
        return cls(
            id=str(file_id),
            name=str(data.get("name") or ""),
            mime_type=data.get("mimeType") or None,
            size=int(raw_size) if raw_size not in (None, "") else None,
        )


@dataclass(frozen=True)
class SubtitleTrack:
    """
    A subtitle file available for a video.

    Local tracks are addressed by filename, Drive tracks by id and name.
    """
    language: str
    label: str
    filename: Optional[str] = None
    id: Optional[str] = None
    name: Optional[str] = None

    def as_dict(self) -> dict[str, str]:
        data = {}
        if self.filename is not None:
            data["filename"] = self.filename
        if self.id is not None:
            data["id"] = self.id
        if self.name is not None:
            data["name"] = self.name
        data["language"] = self.language
        data["label"] = self.label
        return data


@dataclass(frozen=True)
class VideoEntry:
    """One row of the library listing."""
    id: str
    name: str
    source: SourceKind

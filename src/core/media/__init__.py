"""
Media delivery logic.

Contains the range-aware responder, range parsing, MIME resolution,
and subtitle normalization.
"""

from .models import (
    DeliveryMode,
    InvalidMediaRequest,
    MediaError,
    MediaNotFoundError,
    MediaRequest,
    RangeSpec,
    RemoteFile,
    ResourceDescriptor,
    SourceKind,
    SubtitleTrack,
    VideoEntry,
)
from .ranges import InvalidRangeError, RangeNotSatisfiableError, parse_range_header
from .responder import MediaLocator, MediaPlan, MediaResponder

__all__ = [
    "DeliveryMode",
    "InvalidMediaRequest",
    "MediaError",
    "MediaNotFoundError",
    "MediaRequest",
    "RangeSpec",
    "RemoteFile",
    "ResourceDescriptor",
    "SourceKind",
    "SubtitleTrack",
    "VideoEntry",
    "InvalidRangeError",
    "RangeNotSatisfiableError",
    "parse_range_header",
    "MediaLocator",
    "MediaPlan",
    "MediaResponder",
]

"""
HTTP Range header parsing.

Only the single-range ``bytes=<start>-<end>`` form is served. Browsers
seeking in a <video> element never send anything else, so a multi-range
header is answered with its first range rather than a multipart body.
"""

import logging
import re
from typing import Optional

from .models import MediaError, RangeSpec

logger = logging.getLogger(__name__)

_RANGE_PATTERN = re.compile(r"^\s*(\d+)\s*-\s*(\d*)\s*$")


class InvalidRangeError(MediaError):
    """Raised when a Range header is not in the bytes=<start>-<end> form."""
    pass


class RangeNotSatisfiableError(MediaError):
    """Raised when a well-formed range lies outside the resource."""

    def __init__(self, message: str, total_size: int) -> None:
        super().__init__(message)
        self.total_size = total_size


def parse_range_header(header: Optional[str], total_size: int) -> Optional[RangeSpec]:
    """
    Turn a Range header value into a RangeSpec for a resource of total_size bytes.

    Returns None when there is no header (serve the whole resource).
    An end past EOF is clamped to the last byte. A start at or past EOF
    raises RangeNotSatisfiableError.
    """
    if header is None or not header.strip():
        return None

    unit, sep, spec = header.strip().partition("=")
    if not sep or unit.strip().lower() != "bytes":
        raise InvalidRangeError(f"Unsupported range unit: {header}")

    first, _, rest = spec.partition(",")
    if rest:
        logger.debug(
            "Multi-range request, serving first range only",
            extra={"range": header}
        )

    match = _RANGE_PATTERN.match(first)
    if not match:
        raise InvalidRangeError(f"Malformed range: {header}")

    start = int(match.group(1))
    end = int(match.group(2)) if match.group(2) else total_size - 1

    if start >= total_size:
        raise RangeNotSatisfiableError(
            f"Range start {start} is beyond resource size {total_size}",
            total_size=total_size,
        )
    if end < start:
        raise RangeNotSatisfiableError(
            f"Range end {end} is before start {start}",
            total_size=total_size,
        )

    return RangeSpec(start=start, end=min(end, total_size - 1))

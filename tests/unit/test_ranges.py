"""
Unit tests for Range header parsing and MIME resolution.
"""

import pytest

from src.core.media.mime import guess_mime_type, resolve_mime_type
from src.core.media.models import RangeSpec
from src.core.media.ranges import (
    InvalidRangeError,
    RangeNotSatisfiableError,
    parse_range_header,
)


class TestParseRangeHeader:
    """Tests for parse_range_header."""

    def test_no_header_means_whole_resource(self):
        assert parse_range_header(None, 1000) is None
        assert parse_range_header("", 1000) is None

    def test_explicit_start_and_end(self):
        assert parse_range_header("bytes=0-499", 1000) == RangeSpec(0, 499)

    def test_open_ended_range_runs_to_last_byte(self):
        """Browsers usually send bytes=N- when seeking."""
        assert parse_range_header("bytes=500-", 1000) == RangeSpec(500, 999)

    def test_single_last_byte(self):
        assert parse_range_header("bytes=999-999", 1000) == RangeSpec(999, 999)

    def test_end_past_eof_is_clamped(self):
        assert parse_range_header("bytes=900-5000", 1000) == RangeSpec(900, 999)

    def test_multi_range_serves_first_range(self):
        assert parse_range_header("bytes=0-99,200-299", 1000) == RangeSpec(0, 99)

    def test_tolerates_whitespace(self):
        assert parse_range_header(" bytes = 10 - 20 ", 1000) == RangeSpec(10, 20)

    @pytest.mark.parametrize("header", [
        "bytes=abc-def",
        "bytes=-500",
        "items=0-10",
        "0-10",
        "bytes=",
    ])
    def test_malformed_headers_are_rejected(self, header):
        with pytest.raises(InvalidRangeError):
            parse_range_header(header, 1000)

    def test_start_at_eof_is_not_satisfiable(self):
        with pytest.raises(RangeNotSatisfiableError) as exc_info:
            parse_range_header("bytes=1000-", 1000)
        assert exc_info.value.total_size == 1000

    def test_inverted_range_is_not_satisfiable(self):
        with pytest.raises(RangeNotSatisfiableError):
            parse_range_header("bytes=500-100", 1000)

    def test_any_range_on_empty_file_is_not_satisfiable(self):
        with pytest.raises(RangeNotSatisfiableError):
            parse_range_header("bytes=0-", 0)

    def test_parsed_range_stays_inside_resource(self):
        """0 <= start <= end <= total - 1 for every accepted header."""
        total = 10
        for start in range(total):
            for end in range(start, total + 3):
                spec = parse_range_header(f"bytes={start}-{end}", total)
                assert 0 <= spec.start <= spec.end <= total - 1


class TestMimeTypes:
    """Tests for MIME resolution."""

    @pytest.mark.parametrize("filename,expected", [
        ("movie.mp4", "video/mp4"),
        ("movie.MKV", "video/x-matroska"),
        ("clip.webm", "video/webm"),
        ("old.ogv", "video/ogg"),
        ("home.mov", "video/quicktime"),
        ("phone.m4v", "video/x-m4v"),
    ])
    def test_known_extensions(self, filename, expected):
        assert guess_mime_type(filename) == expected

    def test_unknown_extension_defaults_to_mp4(self):
        assert guess_mime_type("stream.ts") == "video/mp4"
        assert guess_mime_type("noext") == "video/mp4"

    def test_store_reported_type_wins(self):
        assert resolve_mime_type("movie.mp4", "video/webm") == "video/webm"

    def test_blank_reported_type_falls_back(self):
        assert resolve_mime_type("movie.mkv", "") == "video/x-matroska"
        assert resolve_mime_type("movie.mkv", None) == "video/x-matroska"

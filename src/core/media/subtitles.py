"""
Subtitle naming and format conversion.

HTML5 <track> elements only accept WebVTT, while most downloaded
subtitles are SRT. The two formats differ in the header line and the
millisecond separator, so conversion is a text rewrite.

Subtitle files sit next to their video and are named
``<video base>.<language code>.<ext>``, e.g. ``movie.en.srt``.
"""

import re
from pathlib import PurePath

from .models import MediaError

SUBTITLE_EXTENSIONS = (".srt", ".vtt")

VTT_HEADER = "WEBVTT"

DEFAULT_LANGUAGE = "default"
DEFAULT_LABEL = "Default"

LANGUAGE_LABELS = {
    "en": "English",
    "vi": "Vietnamese",
    "es": "Spanish",
    "fr": "French",
    "de": "German",
    "ja": "Japanese",
    "ko": "Korean",
    "zh": "Chinese",
    "ru": "Russian",
}

_SRT_TIMESTAMP = re.compile(r"(\d{2}:\d{2}:\d{2}),(\d{3})")


class UnsupportedSubtitleError(MediaError):
    """Raised for files that are neither SRT nor WebVTT."""
    pass


def parse_subtitle_language(filename: str) -> dict[str, str]:
    """
    Read the language code out of a subtitle filename.

    movie.en.srt -> {"language": "en", "label": "English"}
    movie.srt    -> {"language": "default", "label": "Default"}
    """
    parts = filename.split(".")

    if len(parts) >= 3:
        code = parts[-2]
        if code in LANGUAGE_LABELS:
            return {"language": code, "label": LANGUAGE_LABELS[code]}

    return {"language": DEFAULT_LANGUAGE, "label": DEFAULT_LABEL}


def convert_srt_to_vtt(srt_content: str) -> str:
    """
    Convert SRT text to WebVTT.

    Adds the WEBVTT header and swaps the comma millisecond separator in
    every HH:MM:SS,mmm timestamp for a dot. Cue numbers, arrows and text
    are left alone. Running it on its own output changes nothing.
    """
    body = _SRT_TIMESTAMP.sub(r"\1.\2", srt_content)

    if body.startswith(VTT_HEADER):
        return body

    return f"{VTT_HEADER}\n\n{body}"


def subtitle_extension(filename: str) -> str:
    ext = PurePath(filename).suffix.lower()
    if ext not in SUBTITLE_EXTENSIONS:
        raise UnsupportedSubtitleError(f"Unsupported subtitle format: {filename}")
    return ext


def normalize_subtitle(content: str, filename: str) -> str:
    """Return WebVTT text for a subtitle file, converting SRT when needed."""
    if subtitle_extension(filename) == ".srt":
        return convert_srt_to_vtt(content)
    return content


def is_subtitle_for(video_name: str, subtitle_name: str) -> bool:
    """
    Whether subtitle_name belongs to video_name.

    The subtitle must be .srt or .vtt and its name without extension
    must start with the video's name without extension.
    """
    subtitle = PurePath(subtitle_name)
    if subtitle.suffix.lower() not in SUBTITLE_EXTENSIONS:
        return False

    video_base = PurePath(video_name).stem
    return subtitle.stem.startswith(video_base)

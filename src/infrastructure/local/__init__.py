"""
Local file-system media library.

Serves videos and subtitle files from a single directory.
"""

from .library import LocalMediaLibrary

__all__ = ["LocalMediaLibrary"]

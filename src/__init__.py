"""
Reelbox - a personal video-streaming back end.

This package contains the complete application:
- core: Framework-agnostic media logic
- infrastructure: Local disk, Google Drive, and config persistence
- api: FastAPI routes and dependencies
- config: Application configuration
"""

__version__ = "0.1.0"

"""
Infrastructure layer - external resource integrations.

Each module wraps something outside the process:
- local: the video directory on disk
- drive: Google Drive REST API
- config_store: the JSON document holding Drive credentials

These wrappers translate between external formats and our domain models.
"""

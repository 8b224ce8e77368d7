"""
Shared fixtures for API tests.

Each test gets its own videos directory and config file under tmp_path,
a fresh in-memory Drive, and an app whose dependencies point at them.
"""

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from src.api.dependencies import get_drive_client
from src.config.settings import Settings, get_settings
from src.infrastructure.drive.client import MockDriveClient
from src.main import create_app

VIDEO_BYTES = bytes(range(256)) * 8  # 2048 bytes
SRT_TEXT = "1\n00:00:01,000 --> 00:00:02,500\nHello\n"


@pytest.fixture
def videos_dir(tmp_path) -> Path:
    directory = tmp_path / "videos"
    directory.mkdir()
    (directory / "movie.mp4").write_bytes(VIDEO_BYTES)
    (directory / "movie.en.srt").write_text(SRT_TEXT)
    (directory / "movie.srt").write_text(SRT_TEXT)
    return directory


@pytest.fixture
def settings(tmp_path, videos_dir) -> Settings:
    return Settings(
        _env_file=None,
        videos_dir=videos_dir,
        config_path=tmp_path / "config.json",
        google_api_key="",
        google_drive_folder_id="",
        stream_chunk_size=500,
    )


@pytest.fixture
def drive() -> MockDriveClient:
    return MockDriveClient(chunk_size=300)


@pytest.fixture
def app(settings, drive):
    app = create_app(settings)
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_drive_client] = lambda: drive
    return app


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client

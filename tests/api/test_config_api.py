"""
API tests for the settings endpoints and the library listing.
"""

import json

from src.api.dependencies import get_drive_client
from src.config.settings import get_settings
from src.infrastructure.drive.client import MOCK_FOLDER_ID, DriveError


class TestConfigEndpoints:
    """GET/POST /api/config"""

    def test_round_trip_masks_key(self, client):
        saved = client.post(
            "/api/config",
            json={"googleApiKey": "X", "googleDriveFolderId": "Y"},
        )
        assert saved.json() == {"success": True}

        response = client.get("/api/config")

        assert response.json() == {"googleApiKey": "********", "googleDriveFolderId": "Y"}

    def test_masked_key_does_not_overwrite(self, client, settings):
        client.post("/api/config", json={"googleApiKey": "X", "googleDriveFolderId": "Y"})
        client.post("/api/config", json={"googleApiKey": "********", "googleDriveFolderId": "Z"})

        stored = json.loads(settings.config_path.read_text())
        assert stored == {"googleApiKey": "X", "googleDriveFolderId": "Z"}

    def test_empty_config_reads_blank(self, client):
        assert client.get("/api/config").json() == {"googleApiKey": "", "googleDriveFolderId": ""}

    def test_environment_fallback(self, app, client, settings):
        env_settings = settings.model_copy(update={
            "google_api_key": "env-key",
            "google_drive_folder_id": "env-folder",
        })
        app.dependency_overrides[get_settings] = lambda: env_settings

        response = client.get("/api/config")

        assert response.json() == {"googleApiKey": "********", "googleDriveFolderId": "env-folder"}

    def test_invalid_body_is_400(self, client):
        response = client.post(
            "/api/config",
            content="not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_unwritable_config_is_500(self, app, client, settings, tmp_path):
        broken = settings.model_copy(update={"config_path": tmp_path / "missing" / "config.json"})
        app.dependency_overrides[get_settings] = lambda: broken

        response = client.post("/api/config", json={"googleDriveFolderId": "Y"})

        assert response.status_code == 500
        assert response.json() == {"success": False, "message": "Failed to save config"}


class TestVideoListing:
    """GET /api/videos"""

    def test_lists_local_videos(self, client):
        response = client.get("/api/videos")

        assert response.json() == {"videos": [
            {"id": "movie.mp4", "name": "movie.mp4", "type": "local"},
        ]}

    def test_appends_drive_videos(self, app, client, settings, drive):
        configured = settings.model_copy(update={
            "google_api_key": "key",
            "google_drive_folder_id": MOCK_FOLDER_ID,
        })
        app.dependency_overrides[get_settings] = lambda: configured
        remote = drive.add_file("remote.mp4", b"data", mime_type="video/mp4")
        drive.add_file("remote.srt", b"1\n")

        videos = client.get("/api/videos").json()["videos"]

        assert videos == [
            {"id": "movie.mp4", "name": "movie.mp4", "type": "local"},
            {"id": remote.id, "name": "remote.mp4", "type": "drive"},
        ]

    def test_drive_failure_keeps_local_videos(self, app, client, settings):
        configured = settings.model_copy(update={
            "google_api_key": "key",
            "google_drive_folder_id": "folder",
        })

        class BrokenDrive:
            async def list_videos(self, folder_id):
                raise DriveError("network down")

        app.dependency_overrides[get_settings] = lambda: configured
        app.dependency_overrides[get_drive_client] = lambda: BrokenDrive()

        response = client.get("/api/videos")

        assert response.status_code == 200
        assert [v["type"] for v in response.json()["videos"]] == ["local"]


class TestHealth:
    """GET /health and /health/ready"""

    def test_liveness(self, client):
        assert client.get("/health").json()["status"] == "ok"

    def test_ready_with_library(self, client):
        response = client.get("/health/ready")
        assert response.status_code == 200
        assert response.json()["status"] == "ready"

    def test_not_ready_without_library(self, app, client, settings, tmp_path):
        missing = settings.model_copy(update={"videos_dir": tmp_path / "gone"})
        app.dependency_overrides[get_settings] = lambda: missing

        response = client.get("/health/ready")

        assert response.status_code == 503
        assert response.json()["status"] == "not_ready"

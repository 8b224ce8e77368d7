"""
Unit tests for the persisted Drive settings.
"""

import json

import pytest

from src.infrastructure.config_store import (
    MASKED_API_KEY,
    AppConfig,
    ConfigStore,
    ConfigStoreError,
)


class TestConfigStore:
    """Tests for load/save against a file."""

    def test_missing_file_loads_empty(self, tmp_path):
        config = ConfigStore(tmp_path / "config.json").load()
        assert config.google_api_key is None
        assert config.google_drive_folder_id is None

    def test_save_writes_camel_case_json(self, tmp_path):
        path = tmp_path / "config.json"
        ConfigStore(path).save(AppConfig(google_api_key="k", google_drive_folder_id="f"))

        assert json.loads(path.read_text()) == {
            "googleApiKey": "k",
            "googleDriveFolderId": "f",
        }

    def test_round_trip(self, tmp_path):
        store = ConfigStore(tmp_path / "config.json")
        store.save(AppConfig(google_api_key="k", google_drive_folder_id="f"))

        loaded = store.load()
        assert loaded.google_api_key == "k"
        assert loaded.google_drive_folder_id == "f"

    def test_corrupt_file_loads_empty(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{not json")
        assert ConfigStore(path).load() == AppConfig()

    def test_unwritable_path_raises(self, tmp_path):
        store = ConfigStore(tmp_path / "missing-dir" / "config.json")
        with pytest.raises(ConfigStoreError):
            store.save(AppConfig(google_drive_folder_id="f"))


class TestAppConfig:
    """Tests for masking, fallbacks and update rules."""

    def test_masks_present_key(self):
        config = AppConfig(google_api_key="secret", google_drive_folder_id="f")
        assert config.masked() == {"googleApiKey": MASKED_API_KEY, "googleDriveFolderId": "f"}

    def test_absent_key_masks_to_empty(self):
        assert AppConfig().masked() == {"googleApiKey": "", "googleDriveFolderId": ""}

    def test_environment_fills_gaps_only(self):
        config = AppConfig(google_drive_folder_id="saved")
        effective = config.with_fallbacks(api_key="env-key", folder_id="env-folder")

        assert effective.google_api_key == "env-key"
        assert effective.google_drive_folder_id == "saved"

    def test_masked_submission_keeps_key(self):
        config = AppConfig(google_api_key="real", google_drive_folder_id="old")
        updated = config.updated(api_key=MASKED_API_KEY, folder_id="new")

        assert updated.google_api_key == "real"
        assert updated.google_drive_folder_id == "new"

    def test_empty_submission_keeps_key(self):
        config = AppConfig(google_api_key="real")
        assert config.updated(api_key="", folder_id=None).google_api_key == "real"

    def test_new_key_replaces_old(self):
        config = AppConfig(google_api_key="real")
        assert config.updated(api_key="fresh", folder_id="f").google_api_key == "fresh"

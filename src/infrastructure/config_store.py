"""
Persisted Drive credentials.

The settings page saves the Drive API key and folder id to a small JSON
document on disk. Values there win over the environment fallbacks in
Settings, so credentials can be changed without restarting.

The API key is never sent back to the browser: reads return a fixed
placeholder, and submitting that placeholder leaves the stored key alone.
"""

import json
import logging
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)

MASKED_API_KEY = "********"


class ConfigStoreError(Exception):
    """Raised when the config document cannot be written."""
    pass


class AppConfig(BaseModel):
    """
    The persisted document.

    Stored with the camelCase keys the settings page uses, accepted
    by field name too.
    """
    model_config = ConfigDict(populate_by_name=True)

    google_api_key: Optional[str] = Field(default=None, alias="googleApiKey")
    google_drive_folder_id: Optional[str] = Field(default=None, alias="googleDriveFolderId")

    def with_fallbacks(self, api_key: str, folder_id: str) -> "AppConfig":
        """Fill empty values from the environment-backed settings."""
        return AppConfig(
            google_api_key=self.google_api_key or api_key or "",
            google_drive_folder_id=self.google_drive_folder_id or folder_id or "",
        )

    def masked(self) -> dict[str, str]:
        """Representation safe to send to the browser."""
        return {
            "googleApiKey": MASKED_API_KEY if self.google_api_key else "",
            "googleDriveFolderId": self.google_drive_folder_id or "",
        }

    def updated(
        self,
        api_key: Optional[str],
        folder_id: Optional[str],
    ) -> "AppConfig":
        """
        Apply a settings-page submission.

        The folder id is always replaced. The key is only replaced by a
        non-empty value other than the mask placeholder.
        """
        new_key = self.google_api_key
        if api_key and api_key != MASKED_API_KEY:
            new_key = api_key

        return AppConfig(google_api_key=new_key, google_drive_folder_id=folder_id)


class ConfigStore:
    """
    Reads and writes AppConfig at a caller-supplied path.

    No caching: every load() reads the file, so a save from one request
    is visible to the next.
    """

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> AppConfig:
        """Load the document. Missing or unreadable files give an empty config."""
        if not self._path.exists():
            return AppConfig()

        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
            return AppConfig.model_validate(data)
        except (OSError, ValueError, ValidationError) as e:
            logger.error(
                "Error reading config file",
                extra={"path": str(self._path), "error": str(e)}
            )
            return AppConfig()

    def save(self, config: AppConfig) -> None:
        """Write the document as indented JSON."""
        document = config.model_dump(by_alias=True, exclude_none=True)

        try:
            self._path.write_text(json.dumps(document, indent=2), encoding="utf-8")
        except OSError as e:
            logger.error(
                "Error writing config file",
                extra={"path": str(self._path), "error": str(e)}
            )
            raise ConfigStoreError(f"Failed to save config: {e}")

        logger.info("Saved config", extra={"path": str(self._path)})

"""
Settings endpoints.

Backs the settings page: read the Drive credentials in effect (with the
API key masked) and save new ones to the config document.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ...infrastructure.config_store import ConfigStoreError
from ..dependencies import ConfigStoreDep, EffectiveConfigDep

logger = logging.getLogger(__name__)

router = APIRouter()


class ConfigResponse(BaseModel):
    """Credentials as shown on the settings page."""
    googleApiKey: str = Field(description="'********' when a key is set, '' otherwise")
    googleDriveFolderId: str = Field(description="Drive folder listed by the library")


class ConfigUpdate(BaseModel):
    """A settings-page submission."""
    model_config = ConfigDict(extra="ignore")

    googleApiKey: Optional[str] = Field(
        default=None,
        description="New API key. Empty or '********' keeps the stored key."
    )
    googleDriveFolderId: Optional[str] = Field(
        default=None,
        description="Drive folder id. Always replaces the stored value."
    )


@router.get(
    "",
    response_model=ConfigResponse,
    summary="Get settings",
)
async def get_config(config: EffectiveConfigDep) -> ConfigResponse:
    """Return the effective Drive settings with the API key masked."""
    return ConfigResponse(**config.masked())


@router.post(
    "",
    summary="Save settings",
    responses={
        400: {"description": "Body is not a valid settings object"},
        500: {"description": "Config file could not be written"},
    },
)
async def save_config(request: Request, store: ConfigStoreDep) -> JSONResponse:
    """
    Save Drive settings.

    The body is parsed by hand so a malformed request gets the same
    {success, message} shape as a failed save.
    """
    try:
        update = ConfigUpdate.model_validate(await request.json())
    except (ValueError, ValidationError) as e:
        logger.warning("Invalid config submission", extra={"error": str(e)})
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"success": False, "message": "Invalid request"},
        )

    new_config = store.load().updated(
        api_key=update.googleApiKey,
        folder_id=update.googleDriveFolderId,
    )

    try:
        store.save(new_config)
    except ConfigStoreError:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"success": False, "message": "Failed to save config"},
        )

    return JSONResponse(content={"success": True})

"""
Health check endpoints.

We provide two endpoints:
- /health: Basic liveness check (is the process running?)
- /health/ready: Readiness check (can we serve the library?)

The distinction matters in orchestration systems where liveness and
readiness have different behaviors.
"""

import logging
from typing import Any

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ... import __version__
from ..dependencies import EffectiveConfigDep, LocalLibraryDep, SettingsDep

logger = logging.getLogger(__name__)

router = APIRouter()


class HealthResponse(BaseModel):
    """
    Health check response.

    Standardized format makes it easy for monitoring tools to parse.
    """
    status: str
    version: str
    details: dict[str, Any] = {}


class ReadinessCheck(BaseModel):
    """Individual readiness check result."""
    name: str
    status: str  # "ok" or "error"
    error: str | None = None


class ReadinessResponse(BaseModel):
    """Readiness check response with details."""
    status: str  # "ready" or "not_ready"
    version: str
    checks: list[ReadinessCheck]


@router.get(
    "",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Basic health check",
    description="Returns 200 if the service is running. Does not check dependencies.",
)
async def health_check(settings: SettingsDep) -> HealthResponse:
    """Liveness check - is the process alive?"""
    return HealthResponse(
        status="ok",
        version=__version__,
        details={
            "drive_mock_mode": settings.drive_mock_mode,
            "drive_delivery_mode": settings.drive_delivery_mode.value,
        }
    )


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    status_code=status.HTTP_200_OK,
    summary="Readiness check",
    description="Returns 200 if the service can serve the library.",
    responses={
        503: {
            "description": "Service not ready",
            "model": ReadinessResponse,
        }
    },
)
async def readiness_check(
    settings: SettingsDep,
    config: EffectiveConfigDep,
    library: LocalLibraryDep,
):
    """
    Readiness check - can we serve traffic?

    The local library directory must exist. Drive credentials are
    reported but optional: without them only local videos are listed.
    Returns 503 if the library directory is missing.
    """
    checks: list[ReadinessCheck] = []
    all_ok = True

    if library.videos_dir.is_dir():
        checks.append(ReadinessCheck(name="local_library", status="ok"))
    else:
        checks.append(ReadinessCheck(
            name="local_library",
            status="error",
            error=f"Videos directory not found: {library.videos_dir}"
        ))
        all_ok = False

    if settings.drive_mock_mode:
        checks.append(ReadinessCheck(name="drive", status="ok", error="mock mode"))
    elif config.google_api_key and config.google_drive_folder_id:
        checks.append(ReadinessCheck(name="drive", status="ok"))
    else:
        checks.append(ReadinessCheck(
            name="drive",
            status="ok",
            error="Drive credentials not configured, serving local videos only"
        ))

    response = ReadinessResponse(
        status="ready" if all_ok else "not_ready",
        version=__version__,
        checks=checks,
    )

    if not all_ok:
        logger.warning(
            "Readiness check failed",
            extra={
                "checks": [
                    {"name": c.name, "status": c.status, "error": c.error}
                    for c in checks
                ]
            }
        )
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=response.model_dump(),
        )

    return response

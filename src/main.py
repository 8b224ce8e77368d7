"""
FastAPI application entry point.

This module creates and configures the FastAPI application.
Using an application factory pattern (create_app function) because:
- Easier to test with different configurations
- Explicit about initialization order

For local development:
    uvicorn src.main:app --reload

For production:
    uvicorn src.main:app --host 0.0.0.0 --port 8000
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .api.routes import config, health, stream, subtitles, videos
from .config.settings import Settings, get_settings

# Configure logging
logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=logging.INFO,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Opens the shared httpx client used for Drive calls on startup and
    closes it on shutdown, after the last streamed response.
    """
    settings = app.state.settings

    logger.info(
        "Reelbox API starting",
        extra={
            "version": __version__,
            "videos_dir": str(settings.videos_dir),
            "drive_mock_mode": settings.drive_mock_mode,
            "drive_delivery_mode": settings.drive_delivery_mode.value,
        }
    )

    missing_fields = settings.validate_required_fields()
    if missing_fields:
        # Drive is optional; saved settings may still provide credentials
        logger.warning(
            "Drive credentials not set in environment",
            extra={"missing_fields": missing_fields}
        )

    app.state.http_client = httpx.AsyncClient(follow_redirects=True)

    yield

    await app.state.http_client.aclose()
    logger.info("Reelbox API shutting down")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Application factory.

    Creates and configures the FastAPI application. Tests pass their
    own Settings; they should also override get_settings so routes see
    the same instance.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.api_title,
        version=__version__,
        description="""
        Personal video streaming from a local folder and Google Drive.

        ## Workflow

        1. **Browse**: `GET /api/videos` lists local and Drive videos
        2. **Play**: point a `<video>` element at `GET /api/stream?id=...&type=local|drive`
           - Range requests are answered with 206 Partial Content
        3. **Subtitles**: `GET /api/subtitles?id=...` lists tracks,
           `GET /api/subtitle-content` returns one as WebVTT
        4. **Settings**: `GET/POST /api/config` manage Drive credentials
        """,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings

    # Range responses must be readable by a player on another origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Range", "Accept-Ranges", "Content-Length"],
    )

    # Include routers
    app.include_router(
        health.router,
        prefix="/health",
        tags=["Health"],
    )

    app.include_router(
        videos.router,
        prefix="/api/videos",
        tags=["Videos"],
    )

    app.include_router(
        stream.router,
        prefix="/api/stream",
        tags=["Stream"],
    )

    app.include_router(
        subtitles.router,
        prefix="/api",
        tags=["Subtitles"],
    )

    app.include_router(
        config.router,
        prefix="/api/config",
        tags=["Settings"],
    )

    @app.get("/", include_in_schema=False)
    async def root():
        return {
            "message": "Reelbox API",
            "version": __version__,
            "docs": "/docs",
            "health": "/health",
        }

    @app.exception_handler(Exception)
    async def global_exception_handler(request, exc):
        """
        Catch-all exception handler.

        Prevents stack traces from leaking to clients. We log the full
        error server-side but return a generic message.
        """
        logger.error(
            "Unhandled exception",
            extra={
                "path": request.url.path,
                "method": request.method,
                "error": str(exc),
            },
            exc_info=exc,
        )

        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error."}
        )

    logger.info(
        "FastAPI application created",
        extra={"title": settings.api_title, "version": __version__}
    )

    return app


# Create the application instance
# This is what uvicorn imports
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "src.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level=settings.log_level.lower(),
    )

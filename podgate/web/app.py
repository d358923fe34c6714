# Copyright 2025 podgate
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
FastAPI application factory for podgate web server.

This module creates and configures the FastAPI application with:
- Dependency injection for the catalog service (same as CLI)
- Route registration for the feed, listing, audio and health endpoints
- Middleware configuration
- Error handling

Usage:
    from podgate.web.app import create_app
    app = create_app()
"""

from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from structlog import get_logger

from .. import __version__
from ..core.metadata_loader import initialize_storage
from ..services import CatalogService
from ..services.catalog_service import Clock
from ..storage.audio_source import AudioSource, create_audio_source
from ..utils.config import Config, load_config
from .dependencies import AppState
from .middleware import LoggingMiddleware
from .routes import audio, episodes, feed, health

logger = get_logger(__name__)


def create_app(
    config: Optional[Config] = None,
    audio_source: Optional[AudioSource] = None,
    clock: Optional[Clock] = None,
    init_storage: bool = True,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config: Optional Config object. If not provided, loads from environment.
        audio_source: Optional audio source. If not provided, chosen by config.
        clock: Optional "now" provider for the release gate (tests freeze time here).
        init_storage: Create directories and example metadata on startup.

    Returns:
        Configured FastAPI application instance.
    """
    if config is None:
        config = load_config()
    if audio_source is None:
        audio_source = create_audio_source(config)

    catalog_service = CatalogService(config, audio_source, clock=clock or datetime.now)

    app_state = AppState(
        config=config,
        audio_source=audio_source,
        catalog_service=catalog_service,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager for startup/shutdown."""
        logger.info("Starting podgate web server...")
        logger.info("audio_source", source=config.audio_source, audio_dir=str(config.audio_dir))
        logger.info("metadata_path", path=str(config.metadata_path))
        if config.uses_default_token:
            logger.warning("SECRET_TOKEN is not set; using the default token")
        if init_storage and config.audio_source == "local":
            initialize_storage(config)

        yield

        logger.info("Shutting down podgate web server...")

    app = FastAPI(
        title="podgate",
        description="Token-gated, time-released podcast feed",
        version=__version__,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    # Set eagerly so the app works without running the lifespan
    app.state.app_state = app_state

    app.add_middleware(LoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_methods=["GET", "HEAD"],
        allow_headers=["*"],
    )

    @app.exception_handler(Exception)
    async def unhandled_exception(request: Request, exc: Exception) -> JSONResponse:
        logger.error("unhandled_exception", error_type=type(exc).__name__, exc_info=exc)
        return JSONResponse(status_code=500, content={"detail": "Server error"})

    app.include_router(health.router, tags=["health"])
    app.include_router(feed.router, tags=["feed"])
    app.include_router(episodes.router, tags=["episodes"])
    app.include_router(audio.router, prefix="/audio", tags=["audio"])

    logger.info("FastAPI application created successfully")

    return app

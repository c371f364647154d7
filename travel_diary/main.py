"""FastAPI application entry point.

This module initializes the FastAPI application with CORS,
middleware, storage services, templates and route registration.
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates

from travel_diary import __version__
from travel_diary.api.endpoints import ai, exif, health, pages, travels
from travel_diary.core.config import Settings, get_settings
from travel_diary.core.logging import log, setup_logging
from travel_diary.middleware.error_handler import ErrorHandlerMiddleware, setup_exception_handlers
from travel_diary.services.media_storage import MediaStorage
from travel_diary.services.title_generator import TitleGenerator
from travel_diary.services.travel_store import TravelStore

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Log startup and shutdown of the service."""
    settings: Settings = app.state.settings

    log.info("Starting Travel Diary...")
    log.info(f"Environment: {settings.APP_ENV}")
    log.info(f"Travel data: {settings.DATA_FILE}")
    log.info(f"Gemini API key: {'loaded' if settings.gemini_enabled else 'not set'}")

    yield

    log.info("Shutting down Travel Diary...")


def create_application(settings: Optional[Settings] = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Explicit settings, mainly for tests. Defaults to the
            cached environment settings.

    Returns:
        Configured FastAPI application instance.
    """
    settings = settings or get_settings()
    setup_logging(settings)

    app = FastAPI(
        title="Travel Diary",
        description=(
            "Upload travel photos and videos, pin them on a map, read GPS "
            "coordinates from EXIF metadata and get AI-written titles."
        ),
        version=__version__,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.travel_store = TravelStore(settings.DATA_FILE)
    app.state.media_storage = MediaStorage(settings.UPLOAD_DIR)
    app.state.title_generator = TitleGenerator(
        api_key=settings.GEMINI_API_KEY,
        model_name=settings.GEMINI_MODEL,
    )
    app.state.templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(ErrorHandlerMiddleware)
    setup_exception_handlers(app)

    # Stored media is served straight from the upload directory
    app.mount(
        "/uploads",
        StaticFiles(directory=str(settings.UPLOAD_DIR)),
        name="uploads",
    )

    app.include_router(health.router)
    app.include_router(pages.router)
    app.include_router(travels.router)
    app.include_router(exif.router)
    app.include_router(ai.router)

    logger.debug("Application configured")
    return app


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    uvicorn.run("travel_diary.main:app", host="0.0.0.0", port=3000)


app = create_application()

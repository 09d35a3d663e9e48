"""
Omondi AI - creative studio API: image, video and chat generation plus a
character library, for a single authenticated user.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from omondi.ai.provider import Provider
from omondi.api import router
from omondi.core.config import Settings
from omondi.core.errors import (
    CharacterExistsError,
    ConfigurationError,
    GenerationError,
    InvalidMediaError,
    QuotaExceededError,
)
from omondi.db import Database
from omondi.runners import FFmpegRunner

logger = logging.getLogger(__name__)

GENERATION_FAILED = "Generation failed. Please try again."


@asynccontextmanager
async def lifespan(app: FastAPI):
    database: Database = app.state.database
    database.init_db()
    database.seed_admin(app.state.settings.admin_username, app.state.settings.admin_password)
    if not app.state.runner.is_available():
        logger.warning("ffmpeg/ffprobe not found on PATH; video generation will fail")
    yield
    database.dispose()


def _register_error_handlers(app: FastAPI):
    @app.exception_handler(InvalidMediaError)
    async def invalid_media(request: Request, exc: InvalidMediaError):
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(CharacterExistsError)
    async def character_exists(request: Request, exc: CharacterExistsError):
        return JSONResponse(status_code=409, content={"detail": "A character with this name already exists."})

    @app.exception_handler(QuotaExceededError)
    async def quota_exceeded(request: Request, exc: QuotaExceededError):
        return JSONResponse(
            status_code=413,
            content={
                "detail": "Storage limit reached. Delete existing characters to add a new one.",
                "total_size": exc.used,
                "requested": exc.requested,
                "storage_limit": exc.limit,
            },
        )

    @app.exception_handler(GenerationError)
    async def generation_failed(request: Request, exc: GenerationError):
        logger.error(f"{request.method} {request.url.path} generation failed: {exc}")
        return JSONResponse(status_code=502, content={"detail": GENERATION_FAILED})

    @app.exception_handler(ConfigurationError)
    async def misconfigured(request: Request, exc: ConfigurationError):
        logger.error(f"{request.method} {request.url.path} misconfigured: {exc}")
        return JSONResponse(status_code=500, content={"detail": "An internal server error occurred."})


def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
    provider: Optional[Provider] = None,
    runner: Optional[FFmpegRunner] = None,
) -> FastAPI:
    """Build the API with explicitly constructed collaborators."""
    settings = settings or Settings.from_env()

    app = FastAPI(title="Omondi AI", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.database = database or Database(settings.database_url)
    app.state.provider = provider
    app.state.runner = runner or FFmpegRunner.from_settings(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router)
    _register_error_handlers(app)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app


def configure_logging(level: str = "INFO"):
    logging.basicConfig(
        level=level, format="%(asctime)s - %(levelname)s - %(message)s"
    )


_settings = Settings.from_env()
configure_logging(_settings.log_level)
app = create_app(_settings)

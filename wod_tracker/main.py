"""FastAPI application entrypoint for the WOD Tracker backend."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime
from datetime import timezone
import logging
import time

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi import Request
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

from wod_tracker.api.auth import router as auth_router
from wod_tracker.api.users import router as users_router
from wod_tracker.core.config import AppSettings
from wod_tracker.core.config import get_app_settings
from wod_tracker.core.config import settings_for_app
from wod_tracker.core.errors import register_error_handlers
from wod_tracker.core.observability import configure_logging
from wod_tracker.db import models as _models  # noqa: F401
from wod_tracker.schemas.envelope import ApiIndex
from wod_tracker.schemas.envelope import HealthStatus
from wod_tracker.schemas.envelope import SuccessResponse

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"
CORS_METHODS = ["GET", "POST", "PUT", "DELETE", "PATCH"]
CORS_HEADERS = ["Content-Type", "Authorization"]

_STARTED_AT = time.monotonic()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Configure logging and log startup and shutdown."""
    settings = settings_for_app(app)
    configure_logging(settings.log_level)
    logger.info("WOD Tracker API started with settings=%s", settings.safe_for_logging())
    yield
    logger.info("WOD Tracker API shutting down")


def create_app(settings: AppSettings | None = None) -> FastAPI:
    """Build the API application for the given settings."""
    settings = settings or get_app_settings()

    app = FastAPI(title="WOD Tracker API", version=API_VERSION, lifespan=lifespan)
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=CORS_METHODS,
        allow_headers=CORS_HEADERS,
    )

    if settings.is_development:

        @app.middleware("http")
        async def log_requests(request: Request, call_next):
            logger.info("%s %s", request.method, request.url.path)
            return await call_next(request)

    register_error_handlers(app)
    app.include_router(auth_router)
    app.include_router(users_router)

    @app.get("/health", response_model=SuccessResponse[HealthStatus], response_model_exclude_none=True)
    def health() -> SuccessResponse[HealthStatus]:
        """Health check endpoint for service readiness."""
        return SuccessResponse[HealthStatus](
            data=HealthStatus(
                timestamp=datetime.now(timezone.utc),
                uptime=round(time.monotonic() - _STARTED_AT, 3),
                environment=settings.environment,
            )
        )

    @app.get("/api", response_model=SuccessResponse[ApiIndex], response_model_exclude_none=True)
    def api_index() -> SuccessResponse[ApiIndex]:
        """Describe the API surface."""
        return SuccessResponse[ApiIndex](
            data=ApiIndex(
                message="WOD Tracker API",
                version=API_VERSION,
                endpoints={
                    "auth": "/api/auth",
                    "users": "/api/users",
                    "workouts": "/api/workouts",
                    "communities": "/api/communities",
                },
            )
        )

    return app


app = create_app()


def run() -> None:
    """Start the HTTP server with uvicorn."""
    load_dotenv()
    get_app_settings.cache_clear()
    settings = get_app_settings()
    configure_logging(settings.log_level)

    logger.info("Starting WOD Tracker backend on http://%s:%s", settings.host, settings.port)
    logger.info("Environment: %s", settings.environment)
    logger.info("Frontend URL: %s", settings.frontend_url)

    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    run()

"""Application configuration helpers."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
import os
from typing import Any

DEFAULT_ENVIRONMENT = "development"
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 3001
DEFAULT_FRONTEND_URL = "http://localhost:5173"
DEFAULT_LOG_LEVEL = "INFO"

PRODUCTION = "production"
DEVELOPMENT = "development"


def _get_int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    return int(raw)


@dataclass(frozen=True)
class AppSettings:
    """Runtime settings for the HTTP server and error rendering."""

    environment: str = DEFAULT_ENVIRONMENT
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    frontend_url: str = DEFAULT_FRONTEND_URL
    log_level: str = DEFAULT_LOG_LEVEL

    @property
    def is_production(self) -> bool:
        return self.environment == PRODUCTION

    @property
    def is_development(self) -> bool:
        return self.environment == DEVELOPMENT

    @property
    def expose_internal_errors(self) -> bool:
        """Whether internal fault text may appear in error responses."""
        return not self.is_production

    def safe_for_logging(self) -> dict[str, str | int]:
        """Return settings safe for logs."""
        return {
            "environment": self.environment,
            "host": self.host,
            "port": self.port,
            "frontend_url": self.frontend_url,
            "log_level": self.log_level,
        }


@lru_cache(maxsize=1)
def get_app_settings() -> AppSettings:
    """Load application settings from the environment."""
    return AppSettings(
        environment=os.getenv("WOD_ENVIRONMENT", DEFAULT_ENVIRONMENT).strip().lower(),
        host=os.getenv("WOD_HOST", DEFAULT_HOST),
        port=_get_int_env("WOD_PORT", DEFAULT_PORT),
        frontend_url=os.getenv("WOD_FRONTEND_URL", DEFAULT_FRONTEND_URL),
        log_level=os.getenv("WOD_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper(),
    )


def settings_for_app(app: Any) -> AppSettings:
    """Return settings bound to an app instance, falling back to the environment."""
    settings = getattr(app.state, "settings", None)
    if isinstance(settings, AppSettings):
        return settings
    return get_app_settings()

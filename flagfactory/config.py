"""
Service configuration for the feature flag service.

LaunchDarkly client settings are read through AppSettings (app_settings.py);
this module covers the service around it.
"""

import os
from functools import lru_cache

from pydantic_settings import BaseSettings


class Config:
    """Service configuration read from the environment."""

    @staticmethod
    def log_level() -> str:
        """Log level (DEBUG, INFO, WARNING, ERROR)."""
        return os.getenv("LOG_LEVEL", "INFO").upper()

    @staticmethod
    def app_env() -> str:
        """Deployment environment. Default: production."""
        return os.getenv("APP_ENV", "production").lower()

    @staticmethod
    def is_dev() -> bool:
        """Running outside production (local SDK key files allowed)."""
        return Config.app_env() in ("dev", "local")


class ServiceSettings(BaseSettings):
    """Flag service behavior, backed by FLAG_SERVICE_* env vars."""

    default_context_key: str = "anonymous"
    close_on_shutdown: bool = True

    model_config = {
        "env_prefix": "FLAG_SERVICE_",
        "case_sensitive": False,
    }


@lru_cache()
def get_service_settings() -> ServiceSettings:
    """Cached singleton. Use FastAPI Depends() for injection."""
    return ServiceSettings()

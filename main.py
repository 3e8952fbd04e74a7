"""
Feature Flag Service

FastAPI service exposing LaunchDarkly flag evaluation. Builds the flag
provider once at startup.

Usage:
    uvicorn main:app --reload
"""

# Load environment variables from .env file FIRST
from dotenv import load_dotenv
load_dotenv()

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from flagfactory.config import Config, get_service_settings
from flagfactory.errors import ProviderConfigurationError
from flagfactory.factory import ProviderFactory, get_shared_provider, reset_shared_provider

# Configure logging from environment
logging.basicConfig(
    level=getattr(logging, Config.log_level(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)
logger.info(f"Starting with LOG_LEVEL={Config.log_level()}, DEV_MODE={Config.is_dev()}")

from flagfactory.routes import flags_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown."""
    app.state.flag_provider = None
    try:
        app.state.flag_provider = ProviderFactory().create()
        logger.info("Feature flag provider ready")
    except ProviderConfigurationError as e:
        logger.error(f"Feature flag provider unavailable: {e}")
    yield
    provider = app.state.flag_provider
    app.state.flag_provider = None
    if provider is None or not get_service_settings().close_on_shutdown:
        return
    if provider is get_shared_provider().provider:
        reset_shared_provider(close=True)
    else:
        provider.close()


app = FastAPI(
    title="Feature Flag Service",
    description="LaunchDarkly feature flag evaluation",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(flags_router, tags=["flags"])


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": "Feature Flag Service",
        "version": "0.1.0",
        "docs": "/docs",
    }


@app.get("/health")
async def health(request: Request):
    """Health check with SDK initialization state."""
    provider = getattr(request.app.state, "flag_provider", None)
    return {
        "status": "ok",
        "provider_ready": provider is not None,
        "sdk_initialized": provider.is_initialized() if provider is not None else False,
    }

"""
/flags endpoints.

Evaluate feature flags through the provider built at startup.
"""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel

from ..config import ServiceSettings, get_service_settings
from ..provider import FeatureFlagProvider

logger = logging.getLogger(__name__)
router = APIRouter()


# === Models ===


class FlagValueResponse(BaseModel):
    """Boolean flag evaluation result."""
    flag_key: str
    context_key: str
    enabled: bool


class AllFlagsResponse(BaseModel):
    """All flag values for one context."""
    context_key: str
    flags: dict[str, Any]


# === Dependencies ===


def get_flag_provider(request: Request) -> FeatureFlagProvider:
    """Provider created in the app lifespan. 503 if construction failed."""
    provider = getattr(request.app.state, "flag_provider", None)
    if provider is None:
        raise HTTPException(status_code=503, detail="Feature flag provider unavailable")
    return provider


# === Endpoints ===


@router.get("/flags/{flag_key}", response_model=FlagValueResponse)
async def get_flag(
    flag_key: str,
    context_key: Optional[str] = None,
    default: bool = False,
    provider: FeatureFlagProvider = Depends(get_flag_provider),
    settings: ServiceSettings = Depends(get_service_settings),
) -> FlagValueResponse:
    """Evaluate a boolean flag for a context key."""
    context_key = context_key or settings.default_context_key
    enabled = provider.is_enabled(flag_key, context_key, default)
    return FlagValueResponse(flag_key=flag_key, context_key=context_key, enabled=enabled)


@router.get("/flags", response_model=AllFlagsResponse)
async def get_all_flags(
    context_key: Optional[str] = None,
    provider: FeatureFlagProvider = Depends(get_flag_provider),
    settings: ServiceSettings = Depends(get_service_settings),
) -> AllFlagsResponse:
    """Get every flag value for a context key."""
    context_key = context_key or settings.default_context_key
    return AllFlagsResponse(context_key=context_key, flags=provider.all_flags(context_key))

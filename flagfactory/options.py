"""
Tunable LaunchDarkly client parameters.

Raw string settings are parsed with a default on failure and clamped into
a safe range, so the SDK never sees an unhealthy value.
"""

import logging
import re
from typing import Any, Optional

from pydantic import BaseModel, field_validator

from .app_settings import (
    POLLING_INTERVAL_KEY,
    REPORT_USAGE_BUFFER_KEY,
    REPORT_USAGE_INTERVAL_KEY,
    AppSettings,
)

logger = logging.getLogger(__name__)

# === Defaults and Bounds ===
DEFAULT_POLLING_INTERVAL = 60       # seconds
MIN_POLLING_INTERVAL = 5
DEFAULT_REPORT_USAGE_INTERVAL = 2   # seconds between event flushes
MIN_REPORT_USAGE_INTERVAL = 1
MAX_REPORT_USAGE_INTERVAL = 9
DEFAULT_REPORT_USAGE_BUFFER = 500   # pending events kept before dropping
MIN_REPORT_USAGE_BUFFER = 100

INT32_MIN = -(2 ** 31)
INT32_MAX = 2 ** 31 - 1

_INTEGER_PATTERN = re.compile(r"^\s*[+-]?[0-9]+\s*$")


def parse_setting_int(raw: Any, default: int) -> int:
    """
    Parse a 32-bit integer setting, returning default when it can't be parsed.

    Accepts an optional sign and ASCII digits with surrounding whitespace.
    Decimals, underscores and out-of-range values count as malformed.
    """
    if isinstance(raw, bool):
        value = None
    elif isinstance(raw, int):
        value = raw
    elif isinstance(raw, str) and _INTEGER_PATTERN.match(raw):
        value = int(raw)
    else:
        value = None

    if value is None or not INT32_MIN <= value <= INT32_MAX:
        if raw is not None:
            logger.debug(f"Malformed integer setting {raw!r}, using default {default}")
        return default
    return value


def clamp(value: int, floor: int, ceiling: Optional[int] = None) -> int:
    """Clamp to [floor, ceiling]. Floor is applied first."""
    value = max(value, floor)
    if ceiling is not None:
        value = min(value, ceiling)
    return value


class ProviderOptions(BaseModel):
    """Effective numeric parameters passed to the SDK configuration."""

    polling_interval: int = DEFAULT_POLLING_INTERVAL
    report_usage_interval: int = DEFAULT_REPORT_USAGE_INTERVAL
    report_usage_buffer: int = DEFAULT_REPORT_USAGE_BUFFER

    @field_validator("polling_interval", mode="before")
    @classmethod
    def _healthy_polling_interval(cls, value: Any) -> int:
        value = parse_setting_int(value, DEFAULT_POLLING_INTERVAL)
        return clamp(value, MIN_POLLING_INTERVAL)

    @field_validator("report_usage_interval", mode="before")
    @classmethod
    def _healthy_report_usage_interval(cls, value: Any) -> int:
        value = parse_setting_int(value, DEFAULT_REPORT_USAGE_INTERVAL)
        return clamp(value, MIN_REPORT_USAGE_INTERVAL, MAX_REPORT_USAGE_INTERVAL)

    @field_validator("report_usage_buffer", mode="before")
    @classmethod
    def _healthy_report_usage_buffer(cls, value: Any) -> int:
        value = parse_setting_int(value, DEFAULT_REPORT_USAGE_BUFFER)
        return clamp(value, MIN_REPORT_USAGE_BUFFER)

    @classmethod
    def from_app_settings(cls, settings: AppSettings) -> "ProviderOptions":
        """Read and sanitize all tunables from application settings."""
        return cls(
            polling_interval=settings.get_value(POLLING_INTERVAL_KEY),
            report_usage_interval=settings.get_value(REPORT_USAGE_INTERVAL_KEY),
            report_usage_buffer=settings.get_value(REPORT_USAGE_BUFFER_KEY),
        )

"""
Key/value application settings.

Keys use the LaunchDarkly namespace, e.g. ``LaunchDarkly:SdkKey``.
When no explicit mapping is given the process environment is used, with
``:`` mapped to ``__`` and the name upper-cased (``LAUNCHDARKLY__SDKKEY``).
"""

import os
from typing import Mapping, Optional

from .errors import MissingConfigurationKey

# === Setting Keys ===
STRATEGY_KEY = "LaunchDarkly:Strategy"
SDK_KEY_KEY = "LaunchDarkly:SdkKey"
LOCAL_KEY_PATH_KEY = "LaunchDarkly:LocalKeyPath"
POLLING_INTERVAL_KEY = "LaunchDarkly:PollingIntervalSeconds"
REPORT_USAGE_INTERVAL_KEY = "LaunchDarkly:ReportUsageInterval"
REPORT_USAGE_BUFFER_KEY = "LaunchDarkly:ReportUsageBufferSize"


class AppSettings:
    """String settings lookup with ``&amp;`` unescaping."""

    def __init__(self, values: Optional[Mapping[str, str]] = None):
        """
        Args:
            values: Explicit settings keyed by full name. Defaults to the
                process environment, read on every lookup.
        """
        self._values = values

    @staticmethod
    def env_name(key: str) -> str:
        """Environment variable name for a settings key."""
        return key.replace(":", "__").upper()

    def _lookup(self, key: str) -> Optional[str]:
        if self._values is not None:
            return self._values.get(key)
        return os.environ.get(self.env_name(key))

    def get_value(self, key: str, allow_blank: bool = False) -> Optional[str]:
        """Get a setting, or None when it is absent.

        Blank values count as absent unless allow_blank is set.
        """
        if not key or not key.strip():
            raise ValueError("Settings key must not be blank")

        value = self._lookup(key)
        if value is None:
            return None
        if not value.strip():
            return value if allow_blank else None
        return value.replace("&amp;", "&")

    def get_required_value(self, key: str) -> str:
        """Get a setting that must be present. Raises MissingConfigurationKey."""
        value = self.get_value(key)
        if value is None:
            raise MissingConfigurationKey(key)
        return value

"""
Feature flag provider factory.

Builds a FeatureFlagProvider from LaunchDarkly settings. With
``LaunchDarkly:Strategy=STATIC`` one provider is shared for the life of
the process; any other strategy builds a fresh provider per call.

A ``LaunchDarkly:SdkKey`` of ``LOCAL`` reads the real SDK key from a file,
so developers can keep their key out of shared configuration.
"""

import logging
import threading
from pathlib import Path
from typing import Callable, Optional

from ldclient.config import Config as LDConfig

from .app_settings import (
    LOCAL_KEY_PATH_KEY,
    SDK_KEY_KEY,
    STRATEGY_KEY,
    AppSettings,
)
from .errors import ConfigurationFileNotFound, ConfigurationFileUnreadable, MissingArgument
from .options import ProviderOptions
from .provider import FeatureFlagProvider

logger = logging.getLogger(__name__)

STATIC_STRATEGY = "STATIC"
LOCAL_SDK_KEY = "LOCAL"


class SharedProvider:
    """Lazily-created provider shared between callers. Thread-safe."""

    def __init__(self):
        self._provider: Optional[FeatureFlagProvider] = None
        self._lock = threading.Lock()

    @property
    def provider(self) -> Optional[FeatureFlagProvider]:
        return self._provider

    def get_or_create(
        self, create: Callable[[], FeatureFlagProvider]
    ) -> FeatureFlagProvider:
        """Return the shared provider, creating it on first use.

        The provider is stored only if ``create`` returns; an exception
        leaves the holder empty.
        """
        provider = self._provider
        if provider is not None:
            return provider

        with self._lock:
            if self._provider is None:
                self._provider = create()
                logger.info("Shared feature flag provider created")
            return self._provider

    def reset(self, close: bool = False) -> None:
        """Drop the shared provider, optionally closing it."""
        with self._lock:
            provider, self._provider = self._provider, None
        if close and provider is not None:
            provider.close()


# Process-wide holder used when the caller doesn't supply one
_shared_provider = SharedProvider()


def get_shared_provider() -> SharedProvider:
    """Get the process-wide shared provider holder."""
    return _shared_provider


def reset_shared_provider(close: bool = False) -> None:
    """Reset the process-wide shared provider (for testing and shutdown)."""
    _shared_provider.reset(close=close)


class ProviderFactory:
    """Creates feature flag providers from application settings."""

    def __init__(
        self,
        settings: Optional[AppSettings] = None,
        shared: Optional[SharedProvider] = None,
        client_class: Optional[type] = None,
    ):
        """
        Args:
            settings: Settings source. Defaults to the process environment.
            shared: Holder for the STATIC strategy. Defaults to the
                process-wide holder.
            client_class: LDClient-compatible class passed to providers
        """
        self.settings = settings or AppSettings()
        self.shared = shared or get_shared_provider()
        self.client_class = client_class

    def create(
        self,
        local_key_path: Optional[str] = None,
        log_handler: Optional[logging.Handler] = None,
    ) -> FeatureFlagProvider:
        """
        Get a provider according to the configured strategy.

        Under STATIC the first successfully built provider is returned on
        every later call, even if arguments or settings have changed.

        Args:
            local_key_path: SDK key file used when the SDK key is LOCAL.
                Overrides LaunchDarkly:LocalKeyPath.
            log_handler: Handler that receives SDK log records

        Raises:
            MissingConfigurationKey: LaunchDarkly:SdkKey is not set
            MissingArgument: SDK key is LOCAL but no key path is known
            ConfigurationFileNotFound: the key file does not exist
            ConfigurationFileUnreadable: the key file could not be read
        """
        strategy = self.settings.get_value(STRATEGY_KEY)
        if strategy is not None and strategy.upper() == STATIC_STRATEGY:
            return self.shared.get_or_create(
                lambda: self.create_new(local_key_path, log_handler)
            )
        return self.create_new(local_key_path, log_handler)

    def create_new(
        self,
        local_key_path: Optional[str] = None,
        log_handler: Optional[logging.Handler] = None,
    ) -> FeatureFlagProvider:
        """Build a new provider, ignoring the strategy."""
        sdk_key = self.resolve_sdk_key(local_key_path)
        options = ProviderOptions.from_app_settings(self.settings)
        config = self.build_config(sdk_key, options)

        logger.info(
            f"Creating feature flag provider: polling={options.polling_interval}s "
            f"report_interval={options.report_usage_interval}s "
            f"report_buffer={options.report_usage_buffer}"
        )
        return FeatureFlagProvider(
            config, client_class=self.client_class, log_handler=log_handler
        )

    def resolve_sdk_key(self, local_key_path: Optional[str] = None) -> str:
        """Get the SDK key, reading it from the local key file for LOCAL."""
        sdk_key = self.settings.get_required_value(SDK_KEY_KEY)
        if sdk_key.upper() != LOCAL_SDK_KEY:
            return sdk_key

        if local_key_path is None:
            # A configured blank path is kept and fails the file check below
            local_key_path = self.settings.get_value(LOCAL_KEY_PATH_KEY, allow_blank=True)

        if local_key_path is None:
            raise MissingArgument(
                "local_key_path",
                "To run locally you need to provide a local_key_path, either by "
                f"parameter or by value in config {LOCAL_KEY_PATH_KEY}",
            )

        path = Path(local_key_path)
        if not path.is_file():
            raise ConfigurationFileNotFound(local_key_path)

        logger.info(f"Using local SDK key from {path}")
        try:
            # Undecodable bytes become U+FFFD rather than failing construction
            return path.read_text(encoding="utf-8-sig", errors="replace").strip()
        except OSError as e:
            raise ConfigurationFileUnreadable(local_key_path, str(e)) from e

    @staticmethod
    def build_config(sdk_key: str, options: ProviderOptions) -> LDConfig:
        """Build the SDK configuration from a key and sanitized options."""
        return LDConfig(
            sdk_key,
            poll_interval=options.polling_interval,
            flush_interval=options.report_usage_interval,
            events_max_pending=options.report_usage_buffer,
        )

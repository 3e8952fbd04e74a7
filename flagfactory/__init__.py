from .app_settings import AppSettings
from .errors import (
    ConfigurationFileNotFound,
    ConfigurationFileUnreadable,
    MissingArgument,
    MissingConfigurationKey,
    ProviderConfigurationError,
)
from .factory import (
    ProviderFactory,
    SharedProvider,
    get_shared_provider,
    reset_shared_provider,
)
from .options import ProviderOptions
from .provider import FeatureFlagProvider

__all__ = [
    "AppSettings",
    "ConfigurationFileNotFound",
    "ConfigurationFileUnreadable",
    "MissingArgument",
    "MissingConfigurationKey",
    "ProviderConfigurationError",
    "ProviderFactory",
    "SharedProvider",
    "get_shared_provider",
    "reset_shared_provider",
    "ProviderOptions",
    "FeatureFlagProvider",
]

"""
Errors raised while constructing a feature flag provider.

Malformed numeric settings are not errors: they fall back to defaults
(see options.py). Everything here aborts provider construction.
"""


class ProviderConfigurationError(Exception):
    """Base class for provider construction failures."""


class MissingConfigurationKey(ProviderConfigurationError, KeyError):
    """A mandatory setting is absent or blank."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"The key '{key}' is not found in the config file.")

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message
        return self.args[0]


class MissingArgument(ProviderConfigurationError, ValueError):
    """The LOCAL sentinel was used without a resolvable key path."""

    def __init__(self, argument: str, message: str):
        self.argument = argument
        super().__init__(message)


class ConfigurationFileNotFound(ProviderConfigurationError):
    """The resolved local SDK key file does not exist."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(
            f"To run locally you need to have a file '{path}' "
            "that contains your LaunchDarkly SDK key."
        )


class ConfigurationFileUnreadable(ProviderConfigurationError):
    """The local SDK key file exists but could not be read."""

    def __init__(self, path: str, reason: str):
        self.path = path
        super().__init__(f"Could not read LaunchDarkly SDK key file '{path}': {reason}")

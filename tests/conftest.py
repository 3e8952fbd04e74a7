"""
Pytest configuration for the feature flag service tests.
"""

from unittest.mock import MagicMock

import pytest

from flagfactory.app_settings import AppSettings
from flagfactory.factory import reset_shared_provider


@pytest.fixture(autouse=True)
def clean_shared_provider():
    """Each test starts without a shared provider."""
    reset_shared_provider()
    yield
    reset_shared_provider()


@pytest.fixture
def client_class():
    """LDClient stand-in returning a distinct mock client per provider."""
    return MagicMock(side_effect=lambda **kwargs: MagicMock())


def make_settings(**overrides) -> AppSettings:
    """AppSettings with a valid SDK key unless overridden.

    Keyword names are the part after ``LaunchDarkly:``. None removes a key.
    """
    values = {"SdkKey": "sdk-test-key"}
    values.update(overrides)
    return AppSettings({
        f"LaunchDarkly:{name}": value
        for name, value in values.items()
        if value is not None
    })

"""
Tests for ProviderFactory: strategy selection, LOCAL SDK key files,
and the SDK configuration handed to LDClient.
"""

import logging
import threading
import time
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from flagfactory.errors import (
    ConfigurationFileNotFound,
    ConfigurationFileUnreadable,
    MissingArgument,
    MissingConfigurationKey,
)
from flagfactory.factory import (
    ProviderFactory,
    SharedProvider,
    get_shared_provider,
)

from conftest import make_settings


def make_factory(client_class, shared=None, **overrides) -> ProviderFactory:
    return ProviderFactory(
        settings=make_settings(**overrides),
        shared=shared,
        client_class=client_class,
    )


class TestStrategy:
    """STATIC shares one provider, anything else builds a new one."""

    def test_static_returns_same_provider(self, client_class):
        factory = make_factory(client_class, Strategy="STATIC")
        first = factory.create()
        second = factory.create()
        assert first is second
        assert client_class.call_count == 1

    def test_static_is_case_insensitive(self, client_class):
        factory = make_factory(client_class, Strategy="static")
        assert factory.create() is factory.create()

    def test_padded_static_is_not_static(self, client_class):
        factory = make_factory(client_class, Strategy=" STATIC ")
        assert factory.create() is not factory.create()
        assert get_shared_provider().provider is None

    def test_static_stored_in_process_wide_holder(self, client_class):
        provider = make_factory(client_class, Strategy="Static").create()
        assert get_shared_provider().provider is provider

    @pytest.mark.parametrize("strategy", [None, "DYNAMIC", "", "per-call"])
    def test_other_strategies_return_new_providers(self, client_class, strategy):
        factory = make_factory(client_class, Strategy=strategy)
        first = factory.create()
        second = factory.create()
        assert first is not second
        assert first.client is not second.client
        assert get_shared_provider().provider is None

    def test_static_ignores_later_configuration_changes(self, client_class):
        shared = SharedProvider()
        first = make_factory(client_class, shared=shared, Strategy="STATIC").create()
        changed = make_factory(
            client_class,
            shared=shared,
            Strategy="STATIC",
            SdkKey="another-key",
            PollingIntervalSeconds="300",
        )
        assert changed.create() is first
        assert first.config.sdk_key == "sdk-test-key"

    def test_failed_construction_not_cached(self, client_class):
        shared = SharedProvider()
        failing = make_factory(client_class, shared=shared, Strategy="STATIC", SdkKey=None)
        with pytest.raises(MissingConfigurationKey):
            failing.create()
        assert shared.provider is None

        provider = make_factory(client_class, shared=shared, Strategy="STATIC").create()
        assert shared.provider is provider

    def test_concurrent_first_calls_build_one_provider(self):
        def slow_client(**kwargs):
            time.sleep(0.05)
            return MagicMock()

        client_class = MagicMock(side_effect=slow_client)
        factory = make_factory(client_class, shared=SharedProvider(), Strategy="STATIC")
        barrier = threading.Barrier(8)
        results = []

        def worker():
            barrier.wait()
            results.append(factory.create())

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert client_class.call_count == 1
        assert len(results) == 8
        assert all(result is results[0] for result in results)

    def test_shared_reset_closes_provider(self, client_class):
        shared = SharedProvider()
        provider = make_factory(client_class, shared=shared, Strategy="STATIC").create()
        shared.reset(close=True)
        assert shared.provider is None
        provider.client.close.assert_called_once()


class TestSdkKey:
    def test_missing_sdk_key(self, client_class):
        factory = make_factory(client_class, SdkKey=None)
        with pytest.raises(MissingConfigurationKey) as exc_info:
            factory.create()
        assert exc_info.value.key == "LaunchDarkly:SdkKey"
        assert "LaunchDarkly:SdkKey" in str(exc_info.value)

    def test_blank_sdk_key(self, client_class):
        with pytest.raises(MissingConfigurationKey):
            make_factory(client_class, SdkKey="  ").create()

    def test_sdk_key_used_directly(self, client_class):
        provider = make_factory(client_class, SdkKey="sdk-direct-123").create()
        assert provider.config.sdk_key == "sdk-direct-123"


class TestLocalSdkKey:
    """SdkKey=LOCAL reads the real key from a file."""

    def test_no_path_raises_missing_argument(self, client_class):
        factory = make_factory(client_class, SdkKey="LOCAL")
        with pytest.raises(MissingArgument) as exc_info:
            factory.create()
        assert exc_info.value.argument == "local_key_path"
        assert "LaunchDarkly:LocalKeyPath" in str(exc_info.value)

    def test_override_to_missing_file(self, client_class, tmp_path):
        missing = tmp_path / "nope.key"
        factory = make_factory(client_class, SdkKey="LOCAL")
        with pytest.raises(ConfigurationFileNotFound) as exc_info:
            factory.create(local_key_path=str(missing))
        assert exc_info.value.path == str(missing)
        assert str(missing) in str(exc_info.value)

    def test_directory_is_not_a_key_file(self, client_class, tmp_path):
        factory = make_factory(client_class, SdkKey="LOCAL")
        with pytest.raises(ConfigurationFileNotFound):
            factory.create(local_key_path=str(tmp_path))

    def test_override_file_contents_trimmed(self, client_class, tmp_path):
        key_file = tmp_path / "sdk.key"
        key_file.write_text("  abc123\n", encoding="utf-8")
        provider = make_factory(client_class, SdkKey="local").create(
            local_key_path=str(key_file)
        )
        assert provider.config.sdk_key == "abc123"

    def test_configured_path_used_without_override(self, client_class, tmp_path):
        key_file = tmp_path / "sdk.key"
        key_file.write_text("configured-key\n", encoding="utf-8")
        factory = make_factory(client_class, SdkKey="LOCAL", LocalKeyPath=str(key_file))
        assert factory.create().config.sdk_key == "configured-key"

    def test_override_wins_over_configured_path(self, client_class, tmp_path):
        configured = tmp_path / "configured.key"
        configured.write_text("configured-key", encoding="utf-8")
        override = tmp_path / "override.key"
        override.write_text("override-key", encoding="utf-8")
        factory = make_factory(client_class, SdkKey="LOCAL", LocalKeyPath=str(configured))
        provider = factory.create(local_key_path=str(override))
        assert provider.config.sdk_key == "override-key"

    def test_byte_order_mark_ignored(self, client_class, tmp_path):
        key_file = tmp_path / "sdk.key"
        key_file.write_bytes(b"\xef\xbb\xbfbom-key\r\n")
        provider = make_factory(client_class, SdkKey="LOCAL").create(
            local_key_path=str(key_file)
        )
        assert provider.config.sdk_key == "bom-key"

    def test_blank_configured_path_is_not_found(self, client_class):
        factory = make_factory(client_class, SdkKey="LOCAL", LocalKeyPath="   ")
        with pytest.raises(ConfigurationFileNotFound) as exc_info:
            factory.create()
        assert exc_info.value.path == "   "

    def test_undecodable_bytes_replaced(self, client_class, tmp_path):
        key_file = tmp_path / "sdk.key"
        key_file.write_bytes(b"\xff\xfeabc\n")
        factory = make_factory(client_class, SdkKey="LOCAL")

        assert factory.resolve_sdk_key(str(key_file)) == "\ufffd\ufffdabc"
        assert factory.create(local_key_path=str(key_file)) is not None

    def test_unreadable_file(self, client_class, tmp_path, monkeypatch):
        key_file = tmp_path / "sdk.key"
        key_file.write_text("abc123", encoding="utf-8")

        def deny(self, *args, **kwargs):
            raise PermissionError("permission denied")

        monkeypatch.setattr(Path, "read_text", deny)
        factory = make_factory(client_class, SdkKey="LOCAL")
        with pytest.raises(ConfigurationFileUnreadable) as exc_info:
            factory.create(local_key_path=str(key_file))
        assert exc_info.value.path == str(key_file)
        assert "permission denied" in str(exc_info.value)


class TestSdkConfig:
    def test_defaults_passed_to_sdk(self, client_class):
        provider = make_factory(client_class).create()
        assert provider.config.poll_interval == 60
        assert provider.config.flush_interval == 2
        assert provider.config.events_max_pending == 500

    def test_clamped_values_passed_to_sdk(self, client_class):
        provider = make_factory(
            client_class,
            ReportUsageInterval="15",
            ReportUsageBufferSize="20",
        ).create()
        assert provider.config.flush_interval == 9
        assert provider.config.events_max_pending == 100

    def test_client_built_from_config(self, client_class):
        provider = make_factory(client_class).create()
        client_class.assert_called_once()
        assert client_class.call_args.kwargs["config"] is provider.config

    def test_log_handler_attached_to_sdk_logger(self, client_class):
        handler = logging.NullHandler()
        sdk_logger = logging.getLogger("ldclient")
        first = make_factory(client_class).create(log_handler=handler)
        second = make_factory(client_class).create(log_handler=handler)
        assert sdk_logger.handlers.count(handler) == 1

        first.close()
        assert handler in sdk_logger.handlers

        second.close()
        assert handler not in sdk_logger.handlers

"""
Feature flag provider handle.

Wraps a LaunchDarkly LDClient. Flag evaluation, polling and event delivery
all happen inside the SDK.
"""

import logging
import threading
from typing import Any, Optional

from ldclient import Context, LDClient
from ldclient.config import Config as LDConfig

logger = logging.getLogger(__name__)

DEFAULT_START_WAIT = 5  # seconds to block for the first flag payload
SDK_LOGGER_NAME = "ldclient"

# Handler -> number of open providers using it
_handler_users: dict[logging.Handler, int] = {}
_handler_lock = threading.Lock()


def attach_log_handler(handler: logging.Handler) -> None:
    """Route LaunchDarkly SDK log records to handler."""
    with _handler_lock:
        count = _handler_users.get(handler, 0)
        if count == 0:
            logging.getLogger(SDK_LOGGER_NAME).addHandler(handler)
        _handler_users[handler] = count + 1


def detach_log_handler(handler: logging.Handler) -> None:
    """Release one use of handler; removed from the SDK logger on the last."""
    with _handler_lock:
        count = _handler_users.get(handler, 0)
        if count <= 1:
            _handler_users.pop(handler, None)
            logging.getLogger(SDK_LOGGER_NAME).removeHandler(handler)
        else:
            _handler_users[handler] = count - 1


class FeatureFlagProvider:
    """
    Live connection to LaunchDarkly.

    Evaluation never raises: SDK errors are logged and the caller's
    default is returned.
    """

    def __init__(
        self,
        config: LDConfig,
        client_class: Optional[type] = None,
        start_wait: float = DEFAULT_START_WAIT,
        log_handler: Optional[logging.Handler] = None,
    ):
        """
        Args:
            config: SDK configuration built by ProviderFactory
            client_class: LDClient-compatible class (override in tests)
            start_wait: Seconds to wait for the client to initialize
            log_handler: Receives SDK log records until close()
        """
        self.config = config
        self._log_handler = log_handler
        if log_handler is not None:
            attach_log_handler(log_handler)
        client_class = client_class or LDClient
        try:
            self._client = client_class(config=config, start_wait=start_wait)
        except Exception:
            if log_handler is not None:
                detach_log_handler(log_handler)
            raise

    @property
    def client(self):
        """Underlying SDK client."""
        return self._client

    def is_initialized(self) -> bool:
        return bool(self._client.is_initialized())

    def variation(self, flag_key: str, context_key: str, default: Any) -> Any:
        """Evaluate a flag of any type for a context key."""
        try:
            return self._client.variation(flag_key, Context.create(context_key), default)
        except Exception as e:
            logger.error(f"Error evaluating flag {flag_key}: {e}", exc_info=True)
            return default

    def is_enabled(
        self,
        flag_key: str,
        context_key: str = "anonymous",
        default: bool = False,
    ) -> bool:
        """Evaluate a boolean flag."""
        return bool(self.variation(flag_key, context_key, default))

    def all_flags(self, context_key: str) -> dict[str, Any]:
        """All flag values for a context key. Empty if the SDK can't evaluate."""
        try:
            state = self._client.all_flags_state(Context.create(context_key))
            return dict(state.to_values_map())
        except Exception as e:
            logger.error(f"Error evaluating all flags: {e}", exc_info=True)
            return {}

    def flush(self) -> None:
        """Send pending usage events now."""
        self._client.flush()

    def close(self) -> None:
        """Flush events and shut down the SDK client."""
        self._client.close()
        if self._log_handler is not None:
            detach_log_handler(self._log_handler)
            self._log_handler = None
        logger.info("Feature flag provider closed")

    def __enter__(self) -> "FeatureFlagProvider":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

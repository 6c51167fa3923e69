"""
Unit tests for settings and logging configuration.
"""

import io
import logging

import pytest
import structlog

from retry_middleware.config import Settings
from retry_middleware.logging_config import (
    LOGGER_NAMESPACE,
    add_app_context,
    configure_logging,
    configure_logging_from_settings,
)


def test_default_settings(monkeypatch):
    for name in ("RETRY_MAX_RETRIES", "RETRY_FALLBACK_INTERVAL", "RETRY_STATUS_CODES"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings(_env_file=None)

    assert settings.RETRY_MAX_RETRIES == 3
    assert settings.RETRY_FALLBACK_INTERVAL == 1
    assert settings.RETRY_STATUS_CODES == [429, 408]
    assert settings.BACKOFF_MAX_N_RETRIES == 3


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("RETRY_MAX_RETRIES", "5")
    monkeypatch.setenv("retry_fallback_interval", "2")
    monkeypatch.setenv("RETRY_STATUS_CODES", "[429, 503]")
    monkeypatch.setenv("BACKOFF_JITTER", "false")

    settings = Settings(_env_file=None)

    assert settings.RETRY_MAX_RETRIES == 5
    assert settings.RETRY_FALLBACK_INTERVAL == 2
    assert settings.RETRY_STATUS_CODES == [429, 503]
    assert settings.BACKOFF_JITTER is False


def test_add_app_context():
    event = add_app_context(None, "info", {"event": "Retrying request"})

    assert event == {"event": "Retrying request", "app": "retry-middleware"}


# ============================================================================
# configure_logging
# ============================================================================


@pytest.fixture
def restore_logging():
    """Put root, namespace and httpx loggers back the way they were."""
    root = logging.getLogger()
    namespace = logging.getLogger(LOGGER_NAMESPACE)
    saved = (
        root.handlers[:],
        root.level,
        namespace.handlers[:],
        namespace.level,
        namespace.propagate,
    )
    yield
    root.handlers[:], namespace.handlers[:] = saved[0], saved[2]
    root.setLevel(saved[1])
    namespace.setLevel(saved[3])
    namespace.propagate = saved[4]
    logging.getLogger("httpx").setLevel(logging.NOTSET)
    logging.getLogger("httpcore").setLevel(logging.NOTSET)
    structlog.reset_defaults()


def test_configure_logging_targets_library_namespace(restore_logging):
    root_logger = logging.getLogger()
    root_handlers = root_logger.handlers[:]
    root_level = root_logger.level

    handler = configure_logging(log_level="DEBUG", environment="production")

    namespace = logging.getLogger(LOGGER_NAMESPACE)
    assert handler in namespace.handlers
    assert namespace.level == logging.DEBUG
    assert namespace.propagate is False
    assert root_logger.handlers == root_handlers
    assert root_logger.level == root_level
    assert logging.getLogger("httpx").level == logging.NOTSET


def test_configure_logging_twice_does_not_stack_handlers(restore_logging):
    first = configure_logging()
    second = configure_logging()

    namespace = logging.getLogger(LOGGER_NAMESPACE)
    assert second in namespace.handlers
    assert first not in namespace.handlers


def test_configure_logging_keeps_foreign_namespace_handlers(restore_logging):
    namespace = logging.getLogger(LOGGER_NAMESPACE)
    foreign = logging.NullHandler()
    namespace.addHandler(foreign)

    configure_logging()
    configure_logging()

    assert foreign in namespace.handlers
    assert len(namespace.handlers) == 2


def test_configure_logging_take_over_root(restore_logging):
    handler = configure_logging(log_level="WARNING", take_over_root=True)

    root_logger = logging.getLogger()
    assert root_logger.handlers == [handler]
    assert root_logger.level == logging.WARNING
    assert logging.getLogger("httpx").level == logging.WARNING
    assert logging.getLogger("httpcore").level == logging.WARNING


def test_configured_events_render_as_json(restore_logging):
    stream = io.StringIO()
    configure_logging(log_level="INFO", environment="production", stream=stream)

    structlog.get_logger("retry_middleware.retry.middleware").info(
        "Retrying request", attempt=1, delay_seconds=2
    )

    output = stream.getvalue()
    assert '"event": "Retrying request"' in output
    assert '"app": "retry-middleware"' in output
    assert '"delay_seconds": 2' in output


def test_events_below_configured_level_are_dropped(restore_logging):
    stream = io.StringIO()
    configure_logging(log_level="WARNING", stream=stream)

    structlog.get_logger("retry_middleware.retry.delay").info("Ignoring unusable Retry-After header")

    assert stream.getvalue() == ""


def test_configure_logging_from_settings(restore_logging):
    settings = Settings(_env_file=None, LOG_LEVEL="ERROR", ENVIRONMENT="production")

    configure_logging_from_settings(settings)

    assert logging.getLogger(LOGGER_NAMESPACE).level == logging.ERROR

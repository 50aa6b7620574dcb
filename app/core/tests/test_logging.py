"""Tests for logging configuration."""

import json
import logging

import pytest
import structlog

from app.core.config import get_settings
from app.core.logging import (
    NOISY_LOGGERS,
    add_request_id,
    configure_logging,
    get_logger,
    request_id_ctx,
)


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    get_settings.cache_clear()
    configure_logging()


def _returning_logger(level: str):
    """Configure logging, then make log calls return the rendered event."""
    configure_logging(level)
    structlog.configure(logger_factory=structlog.ReturnLoggerFactory())
    return get_logger("test")


def test_add_request_id_only_when_set():
    assert add_request_id(None, "info", {"event": "x"}) == {"event": "x"}

    token = request_id_ctx.set("req-123")
    try:
        assert add_request_id(None, "info", {"event": "x"})["request_id"] == "req-123"
    finally:
        request_id_ctx.reset(token)


def test_level_override_filters_lower_levels():
    logger = _returning_logger("WARNING")

    assert logger.info("test.info.emitted") is None
    assert "test.warning.emitted" in logger.warning("test.warning.emitted")


def test_json_events_include_bound_context(monkeypatch):
    monkeypatch.setenv("LOG_FORMAT", "json")
    get_settings.cache_clear()
    logger = _returning_logger("INFO")

    token = request_id_ctx.set("req-9")
    try:
        with structlog.contextvars.bound_contextvars(seed=42):
            rendered = logger.info("seeder.run.started", trace_volume=10)
    finally:
        request_id_ctx.reset(token)

    event = json.loads(rendered)
    assert event["event"] == "seeder.run.started"
    assert event["seed"] == 42
    assert event["trace_volume"] == 10
    assert event["request_id"] == "req-9"
    assert event["level"] == "info"
    assert "timestamp" in event


def test_library_loggers_kept_quiet_at_debug():
    configure_logging("DEBUG")

    assert logging.getLogger().level == logging.DEBUG
    for name in NOISY_LOGGERS:
        assert logging.getLogger(name).level == logging.WARNING

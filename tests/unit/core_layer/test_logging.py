"""
Unit Tests for Logging Module

Tests logger creation, request context and the custom structlog processors.
"""

from unittest.mock import MagicMock

import pytest

from eventcache.core.config.constants import Stage
from eventcache.core.logging.logger import (
    add_log_level_name,
    add_request_id,
    add_timestamp,
    clear_request_id,
    get_logger,
    get_request_id,
    log_stage,
    redact_pii,
    set_request_id,
    setup_logging,
)


@pytest.mark.unit
class TestLoggerCreation:
    """Test logger creation and configuration."""

    def test_get_logger_returns_logger_instance(self):
        logger = get_logger(__name__)

        assert logger is not None
        assert hasattr(logger, "info")

    @pytest.mark.parametrize("log_format", ["json", "console"])
    def test_setup_logging_accepts_both_formats(self, log_format):
        setup_logging(log_level="INFO", log_format=log_format)

        get_logger("setup-test").info("configured")


@pytest.mark.unit
class TestRequestContext:
    """Test request ID context management."""

    def test_set_and_clear_request_id(self):
        set_request_id("req-123")
        assert get_request_id() == "req-123"

        clear_request_id()
        assert get_request_id() is None

    def test_request_id_added_to_event(self):
        set_request_id("req-abc")
        try:
            event = add_request_id(None, "info", {"event": "hello"})
        finally:
            clear_request_id()

        assert event["request_id"] == "req-abc"

    def test_no_request_id_when_unset(self):
        clear_request_id()

        event = add_request_id(None, "info", {"event": "hello"})

        assert "request_id" not in event


@pytest.mark.unit
class TestProcessors:
    """Test the custom structlog processors."""

    def test_timestamp_is_utc_iso(self):
        event = add_timestamp(None, "info", {"event": "x"})

        assert event["timestamp"].endswith("Z")

    def test_level_is_upper_cased(self):
        assert add_log_level_name(None, "info", {"level": "warning"})["level"] == "WARNING"

    def test_email_and_phone_redacted(self):
        event = redact_pii(None, "info", {"event": "Contact jane.doe@college.edu or 555-123-4567"})

        assert event["event"] == "Contact [EMAIL] or [PHONE]"

    def test_non_string_event_left_alone(self):
        event = redact_pii(None, "info", {"event": {"nested": True}})

        assert event["event"] == {"nested": True}


@pytest.mark.unit
class TestLogStage:
    """Test the stage logging helper."""

    def test_log_stage_uses_enum_value(self):
        logger = MagicMock()

        log_stage(logger, Stage.CACHE_READ, "Cache hit", level="debug", cache_key="event:1")

        logger.debug.assert_called_once_with("Cache hit", stage="C.1_CACHE_READ", cache_key="event:1")

    def test_log_stage_accepts_plain_string(self):
        logger = MagicMock()

        log_stage(logger, "custom", "message")

        logger.info.assert_called_once_with("message", stage="custom")

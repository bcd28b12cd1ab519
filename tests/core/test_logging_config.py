"""Tests for logging configuration."""

from __future__ import annotations

import json
import logging

from fintrack.core.logging_config import (
    LoggingConfig,
    StructuredFormatter,
    setup_logging,
)


def _record(**extra: object) -> logging.LogRecord:
    record = logging.LogRecord(
        name="fintrack.services.gemini",
        level=logging.WARNING,
        pathname=__file__,
        lineno=10,
        msg="AI extraction failed: %s",
        args=("timeout",),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_structured_formatter_outputs_json() -> None:
    """Test records are rendered as JSON with extra fields."""
    formatter = StructuredFormatter()
    data = json.loads(formatter.format(_record(source="offline")))

    assert data["level"] == "WARNING"
    assert data["logger"] == "fintrack.services.gemini"
    assert data["message"] == "AI extraction failed: timeout"
    assert data["source"] == "offline"


def test_structured_formatter_redacts_sensitive_fields() -> None:
    """Test API keys are masked, including nested ones."""
    formatter = StructuredFormatter()
    data = json.loads(
        formatter.format(
            _record(gemini_api_key="secret", config={"api_key": "secret"})
        )
    )

    assert data["gemini_api_key"] == "***REDACTED***"
    assert data["config"]["api_key"] == "***REDACTED***"


def test_short_sensitive_terms_use_word_boundaries() -> None:
    """Test "otp" does not redact "output"."""
    formatter = StructuredFormatter()
    data = json.loads(formatter.format(_record(output="text", otp="123456")))

    assert data["output"] == "text"
    assert data["otp"] == "***REDACTED***"


def test_sanitization_can_be_disabled() -> None:
    """Test raw values pass through when sanitization is off."""
    formatter = StructuredFormatter(sanitize_sensitive=False)
    data = json.loads(formatter.format(_record(api_key="secret")))

    assert data["api_key"] == "secret"


def test_setup_logging_text_format() -> None:
    """Test a single plain-text console handler is installed."""
    logger = setup_logging(LoggingConfig(log_level="debug"))
    setup_logging(LoggingConfig(log_level="debug"))

    assert logger.name == "fintrack"
    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 1
    assert not isinstance(logger.handlers[0].formatter, StructuredFormatter)
    assert logger.propagate is False


def test_setup_logging_json_format() -> None:
    """Test the JSON formatter is used when requested."""
    logger = setup_logging(LoggingConfig(log_format="json"))

    assert isinstance(logger.handlers[0].formatter, StructuredFormatter)

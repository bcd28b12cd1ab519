"""Logging configuration."""

from __future__ import annotations

import json
import logging
import re
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Attributes every LogRecord carries; anything else came in through `extra`.
_RESERVED_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "stack_info",
        "exc_info",
        "exc_text",
        "message",
    }
)


class LoggingConfig(BaseModel):
    """Console logging configuration."""

    log_level: str = Field(default="INFO", description="Log level")
    log_format: str = Field(default="text", description="Log format (json or text)")
    sanitize_sensitive_data: bool = Field(
        default=True, description="Remove sensitive data from logs"
    )


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def __init__(self, *, sanitize_sensitive: bool = True) -> None:
        """Initialize formatter with sanitization option."""
        super().__init__()
        self.sanitize_sensitive = sanitize_sensitive
        self.sensitive_fields = {
            "api_key",
            "password",
            "secret_key",
            "access_token",
            "otp",
        }

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as structured JSON."""
        log_entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName if record.funcName else "<unknown>",
            "line": record.lineno,
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        extra_fields = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RESERVED_ATTRS
        }
        if extra_fields:
            if self.sanitize_sensitive:
                extra_fields = self._sanitize_data(extra_fields)
            log_entry.update(extra_fields)

        return json.dumps(log_entry, default=self._json_serializer, ensure_ascii=False)

    def _sanitize_data(self, data: dict[str, Any]) -> dict[str, Any]:
        """Mask sensitive values, recursing into nested dicts."""
        sanitized: dict[str, Any] = {}
        for key, value in data.items():
            if self._is_sensitive_key(key):
                sanitized[key] = "***REDACTED***"
            elif isinstance(value, dict):
                sanitized[key] = self._sanitize_data(value)
            else:
                sanitized[key] = value
        return sanitized

    def _is_sensitive_key(self, key: str) -> bool:
        """Check if a key should be considered sensitive."""
        key_lower = key.lower()
        short_term_length = 3

        for sensitive in self.sensitive_fields:
            if len(sensitive) <= short_term_length:
                # word boundary for short terms so "otp" doesn't hit "output"
                if re.search(r"\b" + re.escape(sensitive) + r"\b", key_lower):
                    return True
            elif sensitive in key_lower:
                return True
        return False

    def _json_serializer(self, obj: Any) -> str:  # noqa: ANN401
        """JSON serializer for non-standard types."""
        if isinstance(obj, datetime):
            return obj.isoformat()
        if isinstance(obj, Path):
            return str(obj)
        return str(obj)


def setup_logging(config: LoggingConfig) -> logging.Logger:
    """Attach a console handler to the ``fintrack`` logger."""
    app_logger = logging.getLogger("fintrack")
    app_logger.setLevel(getattr(logging, config.log_level.upper(), logging.INFO))

    # Clear existing handlers to avoid duplicates
    app_logger.handlers.clear()

    handler = logging.StreamHandler()
    if config.log_format.lower() == "json":
        handler.setFormatter(
            StructuredFormatter(sanitize_sensitive=config.sanitize_sensitive_data)
        )
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))
    app_logger.addHandler(handler)

    # Prevent duplicate lines through the root logger
    app_logger.propagate = False

    return app_logger

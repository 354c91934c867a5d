"""
Structured Logging Utilities

This module centralizes logging setup for the Maven downloader. It installs a
console handler for humans and, when a log directory is supplied, a rotating
JSON-lines file handler whose records have repository credentials masked.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Dict, Optional

from .settings import LoggingSettings

LOGGER_NAME = "ArtifactKit.MavenDownload"

_SENSITIVE_KEYS = {"authorization", "password", "token", "secret", "username"}
_STRUCTURED_FIELDS = (
    "stage",
    "artifact",
    "url",
    "path",
    "status",
    "error",
    "expected",
    "actual",
    "count",
    "elapsed_ms",
)


def mask_sensitive_data(payload: Dict[str, object]) -> Dict[str, object]:
    """Remove secrets from structured payloads prior to logging.

    Args:
        payload: Arbitrary key-value pairs that may contain credentials.

    Returns:
        Copy of the payload where credential fields are replaced with
        `***masked***`.

    Examples:
        >>> mask_sensitive_data({"password": "secret", "status": 200})
        {'password': '***masked***', 'status': 200}
    """
    masked: Dict[str, object] = {}
    for key, value in payload.items():
        lower = key.lower()
        if lower in _SENSITIVE_KEYS:
            masked[key] = "***masked***"
        elif isinstance(value, str) and value.lower().startswith("basic "):
            masked[key] = "***masked***"
        else:
            masked[key] = value
    return masked


class JSONFormatter(logging.Formatter):
    """Formatter emitting one JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        now = datetime.now(timezone.utc)
        log_obj: Dict[str, object] = {
            "timestamp": now.isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for name in _STRUCTURED_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                log_obj[name] = value
        if record.exc_info:
            log_obj["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(mask_sensitive_data(log_obj), default=str)


def setup_logging(config: LoggingSettings, log_dir: Optional[Path] = None) -> logging.Logger:
    """Configure logging handlers for the Maven downloader.

    Args:
        config: Logging settings containing the level and JSON toggle.
        log_dir: Optional directory for the rotating ``mvnfetch.jsonl`` file.

    Returns:
        The package logger.

    Examples:
        >>> logger = setup_logging(LoggingSettings(level="INFO"))
        >>> logger.name
        'ArtifactKit.MavenDownload'
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(config.level_int())

    for handler in list(logger.handlers):
        if getattr(handler, "_mvnfetch_managed", False):
            logger.removeHandler(handler)
            handler.close()

    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    stream_handler._mvnfetch_managed = True  # type: ignore[attr-defined]
    logger.addHandler(stream_handler)

    if log_dir is not None and config.emit_json_logs:
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_dir / "mvnfetch.jsonl",
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
        )
        file_handler.setFormatter(JSONFormatter())
        file_handler._mvnfetch_managed = True  # type: ignore[attr-defined]
        logger.addHandler(file_handler)

    logger.propagate = True
    return logger


__all__ = ["LOGGER_NAME", "JSONFormatter", "setup_logging", "mask_sensitive_data"]

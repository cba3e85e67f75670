"""Logging setup for the coopreg service.

All components log under the ``coopreg`` logger. Records carry the id of
the HTTP request that produced them (``-`` outside a request) and pass
through a redaction filter so identity provider credentials never reach
a handler.
"""

from __future__ import annotations

import logging
import re
from contextvars import ContextVar, Token
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from coopreg.config import LoggingConfig

LOG_FILE = "coopreg.log"
MAX_BYTES = 10 * 1024 * 1024  # 10MB
BACKUP_COUNT = 5

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(request_id)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_REDACTIONS = [
    (re.compile(r"Bearer [a-zA-Z0-9._-]+"), "Bearer [REDACTED]"),
    (re.compile(r"(?i)(x-api-key['\"]?\s*[:=]\s*['\"]?)[^'\",\s}]+"), r"\1[REDACTED]"),
    (re.compile(r"(?i)(password['\"]?\s*[:=]\s*['\"]?)[^'\",\s}]+"), r"\1[REDACTED]"),
    (re.compile(r"token=[a-zA-Z0-9._-]+"), "token=[REDACTED]"),
]

_request_id: ContextVar[str] = ContextVar("coopreg_request_id", default="-")


def bind_request_id(request_id: str) -> Token[str]:
    """Tag records logged in the current context with a request id."""
    return _request_id.set(request_id)


def reset_request_id(token: Token[str]) -> None:
    _request_id.reset(token)


def current_request_id() -> str:
    return _request_id.get()


def sanitize_for_log(text: str) -> str:
    """Remove bearer tokens, API keys and passwords from text."""
    for pattern, replacement in _REDACTIONS:
        text = pattern.sub(replacement, text)
    return text


class RequestContextFilter(logging.Filter):
    """Adds ``request_id`` to every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = _request_id.get()
        return True


class RedactingFilter(logging.Filter):
    """Renders the record message and strips credentials from it."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = sanitize_for_log(message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


def _level(name: str) -> int:
    level = logging.getLevelName(name.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {name!r}")
    return level


def _add_handler(logger: logging.Logger, handler: logging.Handler) -> None:
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    handler.addFilter(RequestContextFilter())
    handler.addFilter(RedactingFilter())
    logger.addHandler(handler)


def setup_logging(
    config: LoggingConfig,
    max_bytes: int = MAX_BYTES,
    backup_count: int = BACKUP_COUNT,
) -> logging.Logger:
    """Configure the coopreg logger from the service settings.

    The ``coopreg`` logger gets ``config.level``; each entry of
    ``config.levels`` sets the level of one component logger, e.g.
    ``{"identity": "DEBUG"}`` for ``coopreg.identity``. Handlers from a
    previous call are closed and replaced.

    Args:
        config: The ``logging`` section of the service settings.
        max_bytes: Size at which the log file is rotated.
        backup_count: Number of rotated files to keep.

    Returns:
        The ``coopreg`` logger.
    """
    log_dir = Path(config.log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger("coopreg")
    logger.setLevel(_level(config.level))
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    for component, level in config.levels.items():
        get_logger(component).setLevel(_level(level))

    log_path = log_dir / LOG_FILE
    _add_handler(
        logger,
        RotatingFileHandler(
            log_path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        ),
    )
    if config.console:
        _add_handler(logger, logging.StreamHandler())

    logger.info("Logging to %s (level=%s)", log_path, config.level.upper())
    return logger


def get_logger(name: str) -> logging.Logger:
    """Get the logger for a component, e.g. ``registration`` -> ``coopreg.registration``."""
    if not name.startswith("coopreg."):
        name = f"coopreg.{name}"
    return logging.getLogger(name)

"""
Logging setup for the journal backend.

Application code logs through loguru; the access log is emitted through
structlog so each request becomes one key/value event. Standard-library
loggers (uvicorn, SQLAlchemy, the API routers) are forwarded into loguru.
Configured once, on import.
"""

import logging
import sys
from pathlib import Path
from typing import Any

import structlog
from loguru import logger
from structlog.typing import EventDict, WrappedLogger

from tradejournal.config import settings

# Substrings of event keys whose values never reach the log
SECRET_KEY_PARTS = (
    "email", "password", "token", "apikey", "api_key", "secret",
    "auth", "bearer", "anon_key", "service_role",
)

TEXT_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> | <level>{message}</level>"
)


def redact_secrets(_logger: WrappedLogger, _method: str, event_dict: EventDict) -> EventDict:
    """Blank out credentials and user emails in structlog events."""
    for key in event_dict:
        if any(part in key.lower() for part in SECRET_KEY_PARTS):
            event_dict[key] = "[REDACTED]"
    return event_dict


class InterceptHandler(logging.Handler):
    """Forward stdlib log records to loguru, keeping the caller's location."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def _sink_options() -> dict:
    as_json = settings.log_format == "json"
    return {
        "format": "{message}" if as_json else TEXT_FORMAT,
        "serialize": as_json,
        "level": settings.log_level,
        "diagnose": settings.is_development,
    }


def configure_logging() -> None:
    logger.remove()
    logger.add(sys.stderr, **_sink_options())

    if settings.log_file:
        Path(settings.log_file).parent.mkdir(parents=True, exist_ok=True)
        logger.add(settings.log_file, **_sink_options())

    renderer = (
        structlog.processors.JSONRenderer()
        if settings.log_format == "json"
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.add_log_level,
            redact_secrets,
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(settings.log_level.upper())),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for noisy in ("httpx", "httpcore", "sqlalchemy.engine"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logger.info(f"Logging ready: level={settings.log_level} format={settings.log_format} env={settings.app_env}")


def get_logger(name: str) -> Any:
    """structlog logger bound to ``name``; used for the access log."""
    return structlog.get_logger(name)


configure_logging()

"""Logging for the marketplace backend.

structlog sits on top of stdlib logging. Records go to stdout and to two
rotating files under ``logs/``. Production and staging render JSON; every
other environment renders for a terminal, with rich tracebacks.

Bearer tokens, webhook signatures and gateway keys never reach a handler:
``redact_secrets`` masks them before rendering.
"""

import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Any

import structlog

from shared.config import Settings

REDACTED = "***"

_LEVELS = {
    "production": "INFO",
    "staging": "INFO",
    "development": "DEBUG",
    "test": "WARNING",
}
_JSON_ENVIRONMENTS = frozenset({"production", "staging"})
_QUIET_LOGGERS = ("urllib3", "stripe", "sqlalchemy.engine", "uvicorn.access")
_SECRET_KEYS = frozenset({"authorization", "token", "api_key", "secret", "signature", "stripe_signature"})

_MAX_BYTES = 10 * 1024 * 1024


def _environment() -> str:
    return (os.getenv("ENVIRONMENT") or "development").lower()


def get_log_level(environment: str | None = None) -> str:
    """Level for ``environment``; ``LOG_LEVEL`` wins when set."""
    environment = environment or _environment()
    return os.getenv("LOG_LEVEL", _LEVELS.get(environment, "INFO")).upper()


def redact_secrets(logger: Any, method_name: str, event_dict: dict) -> dict:  # noqa: ARG001
    for key in event_dict.keys() & _SECRET_KEYS:
        event_dict[key] = REDACTED
    return event_dict


def _rotating_handler(path: Path, level: str | int) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        filename=path,
        maxBytes=_MAX_BYTES,
        backupCount=5,
        encoding="utf-8",
    )
    handler.setLevel(level)
    return handler


def setup_stdlib_logging(level: str, log_dir: Path = Path("logs")) -> None:
    """Route stdlib records to stdout, ``nepify.log`` and ``nepify_error.log``."""
    log_dir.mkdir(exist_ok=True)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = [
        console_handler,
        _rotating_handler(log_dir / "nepify.log", level),
        _rotating_handler(log_dir / "nepify_error.log", logging.ERROR),
    ]

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def _renderers(environment: str) -> list:
    if environment in _JSON_ENVIRONMENTS:
        return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    return [
        structlog.dev.ConsoleRenderer(
            colors=sys.stdout.isatty(),
            exception_formatter=structlog.dev.RichTracebackFormatter(show_locals=False, max_frames=4),
        )
    ]


def setup_structlog(environment: str) -> None:
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            redact_secrets,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.UnicodeDecoder(),
            *_renderers(environment),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # Tests swap processors with structlog.testing.capture_logs
        cache_logger_on_first_use=environment != "test",
    )


def configure_logging(settings: Settings | None = None) -> None:
    """Configure stdlib and structlog for ``settings.environment``."""
    environment = settings.environment if settings else _environment()
    setup_stdlib_logging(get_log_level(environment))
    setup_structlog(environment)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def bind_request(request_id: str, method: str, path: str) -> None:
    """Start a fresh logging context for one HTTP request."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(request_id=request_id, method=method, path=path)


def add_context(**kwargs: Any) -> None:
    """Add context variables that will be included in all subsequent log messages."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()

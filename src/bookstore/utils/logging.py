"""Logging configuration for the bookstore.

stdlib logging owns the handlers: stdout plus two size-rotated files, one of
them errors only. structlog sits in front and renders JSON in production and
staging, and colored console output with Rich tracebacks everywhere else.
"""

import logging
import logging.handlers
import sys
from pathlib import Path

import structlog

from bookstore.config import Settings, get_settings

_LEVEL_BY_ENVIRONMENT = {
    "production": "INFO",
    "staging": "INFO",
    "development": "DEBUG",
    "test": "WARNING",
}

_MAX_BYTES = 10 * 1024 * 1024
_BACKUPS = 5

# Third-party loggers that are only interesting when something breaks
_QUIET_LOGGERS = ("urllib3", "asyncio", "protean", "redis")


def log_level_for(settings: Settings) -> str:
    """LOG_LEVEL wins; otherwise the environment decides."""
    return settings.log_level or _LEVEL_BY_ENVIRONMENT.get(settings.environment, "INFO")


def _rotating(path: Path, level) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        filename=path, maxBytes=_MAX_BYTES, backupCount=_BACKUPS, encoding="utf-8"
    )
    handler.setLevel(level)
    return handler


def _handlers(log_dir: Path, level: str) -> list[logging.Handler]:
    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    return [
        console,
        _rotating(log_dir / "bookstore.log", level),
        _rotating(log_dir / "bookstore_error.log", logging.ERROR),
    ]


def _renderer(settings: Settings):
    if settings.environment in ("production", "staging"):
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(
        colors=True,
        exception_formatter=structlog.dev.RichTracebackFormatter(show_locals=True, max_frames=2),
    )


def configure_logging(settings: Settings | None = None) -> None:
    """Install handlers on the root logger and point structlog at it."""
    settings = settings or get_settings()
    level = log_level_for(settings)

    log_dir = Path(settings.log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers = _handlers(log_dir, level)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.CallsiteParameterAdder(
                parameters=[
                    structlog.processors.CallsiteParameter.FILENAME,
                    structlog.processors.CallsiteParameter.LINENO,
                    structlog.processors.CallsiteParameter.FUNC_NAME,
                ]
            ),
            _renderer(settings),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def bind_request(**kwargs) -> None:
    """Attach request-scoped values (request id, path, caller) to every log line that follows."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_request() -> None:
    structlog.contextvars.clear_contextvars()

# backend/filevault/logging_config.py
"""Structured logging setup shared by the API and the worker threads."""

from logging import (
    CRITICAL,
    DEBUG,
    ERROR,
    INFO,
    WARNING,
    Handler,
    Logger,
    StreamHandler,
    getLogger,
)
from typing import cast

import structlog
from structlog import dev, stdlib
from structlog.processors import JSONRenderer, TimeStamper, dict_tracebacks
from structlog.stdlib import BoundLogger

from . import config

LOG_LEVELS: dict[str, int] = {
    "debug": DEBUG,
    "info": INFO,
    "warning": WARNING,
    "error": ERROR,
    "critical": CRITICAL,
}


def configure_logging(testing: bool = False) -> None:
    """Configure structlog on top of the stdlib root logger.

    Args:
        testing: Render human-readable lines and skip logger caching so
            ``structlog.testing.capture_logs`` keeps working.
    """
    level = LOG_LEVELS.get(config.LOG_LEVEL, INFO)
    console = testing or config.LOG_FORMAT == "console"

    root_logger: Logger = getLogger()
    root_logger.setLevel(level)

    handler: Handler = StreamHandler()
    handler.setLevel(level)

    shared_processors = [
        stdlib.add_logger_name,
        stdlib.add_log_level,
        stdlib.PositionalArgumentsFormatter(),
        TimeStamper(fmt="iso", utc=True),
        dict_tracebacks,
    ]

    structlog.configure(
        processors=[
            stdlib.filter_by_level,
            *shared_processors,
            stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=stdlib.LoggerFactory(),
        wrapper_class=stdlib.BoundLogger,
        cache_logger_on_first_use=not testing,
    )

    formatter = stdlib.ProcessorFormatter(
        processor=dev.ConsoleRenderer() if console else JSONRenderer(),
        foreign_pre_chain=shared_processors,
    )
    handler.setFormatter(formatter)

    # Clear existing handlers to prevent duplicates on reload
    root_logger.handlers = [handler]

    # uvicorn's access log is noisy next to the worker events
    getLogger("uvicorn.access").setLevel(WARNING)


def get_logger(name: str | None = None) -> BoundLogger:
    return cast(BoundLogger, structlog.get_logger(name))

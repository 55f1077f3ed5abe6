"""
Application logging configuration.

Provides structured JSON logging in production and human-readable
console output in development using structlog.

Usage:
    from config.logging import configure_structlog, get_logging_config

    configure_structlog(debug=True)

    logging.config.dictConfig(get_logging_config(debug=True))
"""

import sys
from typing import Any

import structlog

ENGINE_LOGGERS = ("allocation_engine", "allocation_engine.services")


def configure_structlog(debug: bool = False) -> None:
    """
    Configure structlog for the application.

    Must be called before any logging occurs.

    Args:
        debug: If True, use pretty console output with colors.
               If False, use JSON output for log aggregation.
    """
    shared_processors = [
        structlog.stdlib.filter_by_level,
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]

    if debug:
        # Development: Pretty console output with colors
        processors = shared_processors + [structlog.dev.ConsoleRenderer(colors=True)]
    else:
        # Production: JSON output for log aggregation
        processors = shared_processors + [
            structlog.processors.format_exc_info,
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ]

    structlog.configure(
        processors=processors,  # type: ignore
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logging_config(debug: bool = False, level: str | None = None) -> dict[str, Any]:
    """
    Return a ``logging.config.dictConfig`` dictionary.

    Args:
        debug: If True, render with the colored console renderer.
               If False, render JSON lines.
        level: Level for the ``allocation_engine`` logger. Defaults to
               DEBUG in development and INFO otherwise.

    Returns:
        Logging configuration dict ready for ``dictConfig``.
    """
    engine_level = level or ("DEBUG" if debug else "INFO")
    renderer = (
        structlog.dev.ConsoleRenderer(colors=True) if debug else structlog.processors.JSONRenderer()
    )
    logger_config = {"handlers": ["engine"], "level": engine_level, "propagate": False}

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "engine": {
                "()": structlog.stdlib.ProcessorFormatter,
                "processor": renderer,
                "foreign_pre_chain": [
                    structlog.stdlib.add_log_level,
                    structlog.stdlib.add_logger_name,
                    structlog.processors.TimeStamper(fmt="iso", utc=True),
                ],
            },
        },
        "handlers": {
            "engine": {
                "class": "logging.StreamHandler",
                "formatter": "engine",
                "stream": sys.stdout,
            },
        },
        "root": {"handlers": ["engine"], "level": "WARNING"},
        "loggers": {name: dict(logger_config) for name in ENGINE_LOGGERS},
    }

"""Structured logging setup.

Standard ``logging`` writes plain lines to stderr (which Lambda forwards to
CloudWatch Logs) and structlog renders each event as one JSON object on top of
it, so modules only ever call ``structlog.get_logger(__name__)``.
"""

from __future__ import annotations

import logging
from logging.config import dictConfig

import structlog

_CONFIGURED = False


def setup_logging(level: str = "INFO", *, json_logs: bool = True, force: bool = False) -> None:
    """Configure stdlib logging and structlog once per process."""

    global _CONFIGURED
    if _CONFIGURED and not force:
        return

    numeric_level = logging.getLevelName(str(level).upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"plain": {"format": "%(message)s"}},
            "handlers": {
                "default": {
                    "class": "logging.StreamHandler",
                    "formatter": "plain",
                }
            },
            "root": {"handlers": ["default"], "level": numeric_level},
            # botocore is chatty at DEBUG and logs request bodies.
            "loggers": {"botocore": {"level": "WARNING"}, "urllib3": {"level": "WARNING"}},
        }
    )

    renderer = structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer()
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _CONFIGURED = True

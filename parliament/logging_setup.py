"""Structured logging configuration shared by the engine and the CLI."""

from __future__ import annotations

import logging
import sys

import structlog


def setup_logging(level: str = "WARNING", *, json: bool = False) -> None:
    """Configure stdlib logging and structlog processors.

    Console output is rendered for humans unless ``json`` is requested.
    """

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=level.upper(),
    )

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if json:
        processors = shared_processors + [structlog.processors.JSONRenderer()]
    else:
        processors = shared_processors + [structlog.dev.ConsoleRenderer()]

    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a logger bound with the module name."""

    return structlog.get_logger(name)


__all__ = ["get_logger", "setup_logging"]

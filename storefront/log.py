"""
Logging configuration — structlog over stdlib logging.

    from storefront.log import configure_logging, get_logger

    configure_logging()
    logger = get_logger(__name__)
    logger.info("Cart fetched", items=3)
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any

import structlog

# ═══════════════════════════════════════════════════════════════════════════════
# Levels
# ═══════════════════════════════════════════════════════════════════════════════

_LEVELS = {
    "production": "INFO",
    "staging": "INFO",
    "development": "DEBUG",
    "test": "WARNING",
}


def get_environment() -> str:
    return (os.getenv("ENVIRONMENT") or os.getenv("ENV") or "development").lower()


def get_log_level(environment: str | None = None) -> str:
    """LOG_LEVEL wins; otherwise derived from the environment name."""
    env = (environment or get_environment()).lower()
    return os.getenv("LOG_LEVEL", _LEVELS.get(env, "INFO")).upper()


# ═══════════════════════════════════════════════════════════════════════════════
# Setup
# ═══════════════════════════════════════════════════════════════════════════════


def setup_stdlib_logging(level: str) -> None:
    """Route stdlib logging (aiohttp, asyncio) to stdout."""
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = []

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    root_logger.addHandler(console_handler)

    logging.getLogger("aiohttp").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)


def setup_structlog(environment: str) -> None:
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if environment in ("production", "staging"):
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_logging(environment: str | None = None) -> None:
    """Configure all logging for the process. Call once at start-up."""
    env = (environment or get_environment()).lower()
    setup_stdlib_logging(get_log_level(env))
    setup_structlog(env)


# ═══════════════════════════════════════════════════════════════════════════════
# Access
# ═══════════════════════════════════════════════════════════════════════════════


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Bind values included in every subsequent log line of this task."""
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    structlog.contextvars.unbind_contextvars(*keys)


__all__ = (
    "configure_logging",
    "get_environment",
    "get_log_level",
    "get_logger",
    "bind_context",
    "unbind_context",
)

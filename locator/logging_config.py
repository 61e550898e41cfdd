"""Structlog configuration shared by the service modules."""

import logging
import os

import structlog

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def resolve_level(name: str) -> int:
    """Map a level name to its number, falling back to INFO when unknown."""
    return logging.getLevelNamesMapping().get(name.upper(), logging.INFO)


structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(),
    ],
    wrapper_class=structlog.make_filtering_bound_logger(resolve_level(LOG_LEVEL)),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()

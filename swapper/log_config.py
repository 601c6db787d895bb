"""structlog setup shared by the CLI and the HTTP server."""

import logging

import structlog


def configure_logging(level: int | str = logging.INFO) -> None:
    """Configure structlog with console output filtered at ``level``."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
    )

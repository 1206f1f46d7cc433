import logging
import sys

import structlog

LOGGER_NAME = "todo_api"


def setup_logger(mode: str = "release", *, stream=None) -> structlog.stdlib.BoundLogger:
    """Configure structlog over the stdlib ``todo_api`` logger.

    Release mode renders one JSON object per line at INFO level.
    Any other mode renders colourless console output at DEBUG level.

    Args:
        mode: The application mode, ``release`` or ``debug``.
        stream: Where records are written, defaults to stdout.

    Returns:
        The bound logger for the application.
    """
    release = mode == "release"
    level = logging.INFO if release else logging.DEBUG

    renderer = (
        structlog.processors.JSONRenderer()
        if release
        else structlog.dev.ConsoleRenderer(colors=False)
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    stdlib_logger = logging.getLogger(LOGGER_NAME)
    stdlib_logger.handlers.clear()
    stdlib_logger.setLevel(level)
    stdlib_logger.propagate = False

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(message)s"))
    stdlib_logger.addHandler(handler)

    return structlog.get_logger(LOGGER_NAME)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)

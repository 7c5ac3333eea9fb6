"""
Structured logging for argosy.

Loggers are stdlib `logging` loggers wrapped by structlog, so events carry key/value
context while host applications keep full control over handlers and levels. Nothing is
configured on import: a library must stay silent unless the host opts in.

Usage:
    from argosy.logs import get_logger

    logger = get_logger(__name__)
    logger.debug("command_matched", key="build", args=2)

Hosts that want to see traversal events can call configure_logging() once at startup.
"""
import logging
import sys

import structlog


def get_logger(name):
    """Return a structlog logger bound to the stdlib logger `name`.

    Args:
        name: Logger name, typically __name__ of the calling module.

    Returns:
        A structlog.stdlib.BoundLogger whose events are dropped early when the
        underlying stdlib logger is not enabled for the level.
    """
    return structlog.wrap_logger(
        logging.getLogger(name),
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.KeyValueRenderer(key_order=["event", "logger", "level"]),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
    )


def configure_logging(level="INFO", *, stream=None):
    """Attach a plain stream handler to the "argosy" logger hierarchy.

    Args:
        level: Level name or number (DEBUG, INFO, WARNING, ...).
        stream: Target stream, defaults to stderr.

    Returns:
        The configured stdlib logger for the package.
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger("argosy")
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(logging.Formatter("%(message)s"))

    # Replace earlier handlers so repeated calls do not duplicate output
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
    logger.addHandler(handler)
    logger.setLevel(level)
    return logger


__all__ = (
    "get_logger",
    "configure_logging",
)

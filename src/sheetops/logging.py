"""Logging configuration using loguru.

Logs go to stderr; stdout carries the JSON result of a command.
"""

import sys

from loguru import logger

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)


def setup_logging(json_logs: bool = False, log_level: str = "WARNING") -> None:
    """Configure loguru for the command line.

    Args:
        json_logs: If True, output logs as JSON lines
        log_level: Minimum log level to output
    """
    # Remove default handler
    logger.remove()

    if json_logs:
        logger.add(
            sys.stderr,
            format="{message}",
            level=log_level.upper(),
            serialize=True,
        )
    else:
        logger.add(
            sys.stderr,
            format=LOG_FORMAT,
            level=log_level.upper(),
            colorize=True,
        )


# Re-export logger for convenience
__all__ = [
    "logger",
    "setup_logging",
]

"""
Logging Setup
=============

All output goes through loguru. Modules keep using
``logging.getLogger(__name__)``; ``InterceptHandler`` forwards those
records (and uvicorn's) to loguru so there is a single sink.

- production: one JSON object per line on stderr
- anything else: coloured, human-readable lines
"""

import logging
import sys

from loguru import logger

from travel_diary.core.config import Settings

DEV_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)

INTERCEPTED_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access", "fastapi")


class InterceptHandler(logging.Handler):
    """Forward stdlib log records to loguru, keeping the caller's location."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Skip frames inside the logging package
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(settings: Settings) -> None:
    """Install the loguru sink for ``settings.APP_ENV`` and route stdlib logging into it."""
    logger.remove()

    if settings.APP_ENV == "production":
        logger.add(sys.stderr, serialize=True, level="INFO", backtrace=False, diagnose=False)
    else:
        logger.add(
            sys.stderr,
            format=DEV_FORMAT,
            level="DEBUG" if settings.DEBUG else "INFO",
            colorize=True,
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in INTERCEPTED_LOGGERS:
        stdlib_logger = logging.getLogger(name)
        stdlib_logger.handlers = [InterceptHandler()]
        stdlib_logger.propagate = False


log = logger

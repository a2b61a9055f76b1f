"""
Thin wrapper around Loguru so every module can simply:

    from loguru import logger

Uvicorn and httpx log through the standard library; their records are
forwarded to the same sinks.
"""

import logging
import sys

from loguru import logger

from collabrixo.core.config import Settings, settings as default_settings

__all__ = ["configure_logging", "logger"]

_FORWARDED = ("uvicorn", "uvicorn.error", "uvicorn.access", "httpx")


class InterceptHandler(logging.Handler):
    """Route stdlib log records into loguru, keeping the caller's location."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def configure_logging(settings: Settings = default_settings) -> None:
    # Remove existing handlers (FastAPI / Uvicorn adds its own)
    logger.remove()

    logger.add(
        sys.stderr,
        level=settings.LOG_LEVEL,
        diagnose=False,  # pretty tracebacks off in prod
        backtrace=settings.ENV == "development",
        format="<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> "
               "| <level>{level: <8}</level> "
               "| <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> "
               "- <level>{message}</level>",
    )

    for name in _FORWARDED:
        std_logger = logging.getLogger(name)
        std_logger.handlers = [InterceptHandler()]
        std_logger.propagate = False

    if not settings.LOG_FILE:
        return

    logger.add(
        settings.LOG_FILE,
        rotation="00:00",  # midnight
        retention="7 days",
        compression="zip",
        level="DEBUG",      # keep everything for post-mortem
        enqueue=True,
        backtrace=False,
    )

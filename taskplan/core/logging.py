"""Loguru configuration."""

import sys

from loguru import logger

from taskplan.core.config import Settings, get_settings

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)


def configure_logging(settings: Settings | None = None) -> None:
    """Configure loguru sinks based on settings.

    Replaces the default handler with a colorized stderr sink and, when
    ``taskplan_log_file`` is set, a daily rotating file sink.
    """
    settings = settings or get_settings()
    level = "DEBUG" if settings.taskplan_debug else settings.taskplan_log_level

    logger.remove()  # Remove default handler

    logger.add(
        lambda msg: print(msg, end="", file=sys.stderr),
        level=level,
        format=LOG_FORMAT,
        colorize=True,
    )

    if settings.taskplan_log_file:
        logger.add(
            settings.taskplan_log_file,
            rotation="1 day",
            retention="7 days",
            level=settings.taskplan_log_level,
            format=LOG_FORMAT,
        )

"""
Logging configuration for vinime-bot.

Provides centralized logging setup using the application settings.
"""
import logging
from logging import handlers

from .config import CommonSettings, settings as default_settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(settings: CommonSettings = default_settings) -> None:
    """Configure the logging system based on application settings."""
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    formatter = logging.Formatter(LOG_FORMAT)

    file_handler = handlers.RotatingFileHandler(
        settings.log_file, maxBytes=1024 * 1024, backupCount=3, encoding="utf-8"
    )
    file_handler.setFormatter(formatter)
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)

    logging.basicConfig(
        level=level,
        handlers=[file_handler, stream_handler],
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)

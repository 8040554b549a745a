"""
File cleanup module for vinime-bot.

Provides a background task that deletes downloaded episode files left behind
in the download directory once they are older than the retention period.
"""
import asyncio
import logging
import os
import time
from typing import Optional

from .config import Settings, settings as default_settings
from .constants import CLEANUP_INTERVAL_SECONDS

logger = logging.getLogger(__name__)


def remove_expired_files(download_dir: str, retention_seconds: float, now: Optional[float] = None) -> int:
    """Delete files under ``download_dir`` older than ``retention_seconds``.

    Returns:
        Number of files removed.
    """
    now = time.time() if now is None else now
    removed = 0
    for root, _dirs, files in os.walk(download_dir):
        for fname in files:
            fpath = os.path.join(root, fname)
            try:
                mtime = os.path.getmtime(fpath)
            except OSError:
                continue
            if now - mtime < retention_seconds:
                continue
            try:
                os.remove(fpath)
                logger.info("Deleted %s", fpath)
                removed += 1
            except OSError:
                logger.exception("Failed to remove old file %s", fpath)
    return removed


async def cleanup_loop(
    stop_event: asyncio.Event,
    settings: Settings = default_settings,
    interval: float = CLEANUP_INTERVAL_SECONDS,
) -> None:
    """Background task that periodically cleans up old downloaded files.

    Args:
        stop_event: Event to signal when the cleanup loop should stop.
        settings: Provides ``download_dir`` and ``file_retention_seconds``.
        interval: Seconds between sweeps.
    """
    download_dir = settings.download_dir
    os.makedirs(download_dir, exist_ok=True)

    while not stop_event.is_set():
        try:
            remove_expired_files(download_dir, settings.file_retention_seconds)
        except OSError:
            logger.exception("Error during cleanup")
        try:
            await asyncio.wait_for(stop_event.wait(), timeout=interval)
        except asyncio.TimeoutError:
            continue

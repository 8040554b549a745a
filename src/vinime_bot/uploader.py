"""
File uploader module for vinime-bot.

Provides asynchronous file upload functionality to Telegram with
concurrency control.
"""
import asyncio
import logging
from typing import Any, Callable, Optional

from telethon import TelegramClient
from telethon.tl.custom.message import Message

logger = logging.getLogger(__name__)


class Uploader:
    """Handles file uploads to Telegram with concurrency control.

    Uses a semaphore to limit the number of concurrent uploads to avoid
    overwhelming the Telegram API.

    Args:
        client: The Telegram client instance.
        concurrency: Maximum number of concurrent uploads (default: 2).
    """

    def __init__(self, client: TelegramClient, concurrency: int = 2) -> None:
        """Initialize the uploader with concurrency control."""
        self.client = client
        self.semaphore = asyncio.Semaphore(concurrency)

    async def upload_file(
        self,
        dest_chat: int,
        file_path: str,
        caption: Optional[str] = None,
        buttons: Any = None,
        as_document: bool = False,
        progress_callback: Optional[Callable] = None,
    ) -> Message:
        """Upload a file to a Telegram chat.

        Args:
            dest_chat: The destination chat ID.
            file_path: Path to the file to upload.
            caption: Optional HTML caption for the file.
            buttons: Optional inline keyboard.
            as_document: Send as a plain document instead of a streamable video.
            progress_callback: Optional callback for upload progress.

        Returns:
            The sent message containing the uploaded file.
        """
        async with self.semaphore:
            msg = await self.client.send_file(
                dest_chat,
                file_path,
                caption=caption,
                buttons=buttons,
                parse_mode="html",
                progress_callback=progress_callback,
                supports_streaming=not as_document,
                force_document=as_document,
            )
            return msg

    async def upload_media(self, dest_chat: int, file_path: str, caption: str, buttons: Any = None) -> Message:
        """Upload a video, falling back to a document when Telegram rejects it."""
        try:
            return await self.upload_file(dest_chat, file_path, caption=caption, buttons=buttons)
        except Exception:
            logger.exception("Video upload error, retrying as document")
            return await self.upload_file(
                dest_chat,
                file_path,
                caption=caption + "\n<i>Dikirim sebagai file</i>",
                buttons=buttons,
                as_document=True,
            )

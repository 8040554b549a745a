import logging
import os
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from .constants import MAX_LINK_LINES
from .helpers import format_link_lines
from .media import MediaRelay, pick_direct_stream
from .models import VideoInfo
from .uploader import Uploader
from .utils import escape_html, format_size

logger = logging.getLogger(__name__)

MirrorResolver = Callable[[Dict[str, Any]], Awaitable[Optional[str]]]


class EpisodeDeliveryTask:
    """Deliver one episode to a chat.

    Picks a direct stream, checks its size, downloads it and re-uploads it to
    Telegram. Whenever that is not possible the status message ends up holding
    download or mirror links instead.
    """

    def __init__(
        self,
        relay: MediaRelay,
        uploader: Uploader,
        chat_id: int,
        video: VideoInfo,
        title: str,
        file_stem: str,
        buttons: Any = None,
        max_upload_mb: int = 2000,
        delete_after_upload: bool = True,
        mirror_resolver: Optional[MirrorResolver] = None,
    ):
        self.relay = relay
        self.uploader = uploader
        self.chat_id = chat_id
        self.video = video
        self.title = title
        self.file_stem = file_stem
        self.buttons = buttons
        self.max_bytes = max_upload_mb * 1024 * 1024
        self.max_upload_mb = max_upload_mb
        self.delete_after_upload = delete_after_upload
        self.mirror_resolver = mirror_resolver

    async def run(self, status_callback: Optional[Callable[[str], Awaitable[Any]]] = None) -> bool:
        """Run the delivery.

        Returns:
            True when the video was uploaded; False when the status message
            was left with links or an error instead.
        """
        async def status(msg: str):
            if status_callback is not None:
                try:
                    await status_callback(msg)
                except Exception:
                    logger.debug("status callback failed")

        choice = pick_direct_stream(self.video)
        if choice is None:
            await status(await self._links_text())
            return False
        entry, link = choice
        quality = escape_html(entry.resolution)
        link_html = f'🔗 <a href="{escape_html(link)}">📥 Download / Tonton di Browser</a>'

        size = await self.relay.probe_size(link)
        size_str = format_size(size) if size > 0 else "Unknown"
        if size > self.max_bytes:
            await status(
                f"{self.title} | {quality} | {size_str}\n\n"
                f"⚠️ File terlalu besar untuk Telegram (max {self.max_upload_mb}MB).\n\n{link_html}"
            )
            return False

        await status(f"⏳ Mendownload {self.title} ({quality}, {size_str})...")
        result = await self.relay.download(link, f"{self.file_stem}_{entry.resolution}.mp4", self.max_bytes)
        if not result.success:
            if result.too_large:
                await status(f"⚠️ File terlalu besar untuk Telegram (max {self.max_upload_mb}MB).\n\n{link_html}")
            else:
                await status(f"😔 Gagal mendownload {self.title}.\n\n{link_html}")
            return False

        size_str = format_size(result.size)
        try:
            await status(f"⏳ Upload {self.title} ({quality}, {size_str})...")
            await self.uploader.upload_media(
                self.chat_id,
                result.filepath,
                caption=f"{self.title} | {quality} | {size_str}",
                buttons=self.buttons,
            )
            return True
        except Exception:
            logger.exception("Upload failed for %s", self.file_stem)
            await status(f"{self.title} | {quality}\n\n⚠️ Gagal upload.\n{link_html}")
            return False
        finally:
            # optionally delete local file if configured
            if self.delete_after_upload and result.filepath and os.path.exists(result.filepath):
                try:
                    os.remove(result.filepath)
                except OSError:
                    logger.exception("Failed to delete file %s", result.filepath)

    async def _links_text(self) -> str:
        direct = [(s.provider_label, s.resolution, s.direct_link) for s in self.video.streams
                  if s.direct_link and not s.is_embedded_mirror]
        if direct:
            return (
                f"{self.title}\n\n📥 <b>Link Download:</b>\n{format_link_lines(direct[:MAX_LINK_LINES])}\n\n"
                "<i>Buka di browser untuk download.</i>"
            )
        mirrors = await self._resolve_mirrors()
        if mirrors:
            return (
                f"{self.title}\n\n▶️ <b>Link Streaming:</b>\n{format_link_lines(mirrors)}\n\n"
                "<i>Buka di browser untuk menonton.</i>"
            )
        return f"😔 Tidak ada link video untuk {self.title}."

    async def _resolve_mirrors(self) -> List[Tuple[str, str, str]]:
        if self.mirror_resolver is None:
            return []
        lines = []
        for entry in self.video.streams:
            if not entry.is_embedded_mirror or not entry.embed_payload:
                continue
            url = await self.mirror_resolver(entry.embed_payload)
            if url:
                lines.append((entry.provider_label, entry.resolution, url))
            if len(lines) >= MAX_LINK_LINES:
                break
        return lines

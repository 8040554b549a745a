"""
Detail, episode list and episode delivery handlers.
"""
import logging
import os

from telethon import TelegramClient, events
from telethon.errors import RPCError

from ..constants import MAX_CAPTION_LENGTH
from ..helpers import (
    detail_keyboard,
    episode_keyboard,
    episode_nav_keyboard,
    format_detail,
    format_episode_list,
    menu_row,
)
from ..services import Services
from ..tasks import EpisodeDeliveryTask
from ..uploader import Uploader
from ..utils import escape_html
from .common import EXPIRED_MESSAGE, answer, guarded, spawn

logger = logging.getLogger(__name__)

COVER_MAX_BYTES = 10 * 1024 * 1024


def register(client: TelegramClient, services: Services) -> None:
    api = services.api
    links = services.links
    settings = services.settings
    uploader = Uploader(client, concurrency=settings.max_upload_concurrency)

    async def resolve_key(event):
        url = links.value_for(event.pattern_match.group(1).decode())
        if url is None:
            await answer(event, EXPIRED_MESSAGE, alert=True)
        else:
            await answer(event)
        return url

    async def delete_quietly(message) -> None:
        try:
            await message.delete()
        except RPCError:
            logger.debug("Could not delete message")

    async def send_cover(chat_id: int, key: str, cover_url: str, caption: str, buttons) -> bool:
        """Send the cover with ``caption``; download first since the CDN rejects Telegram."""
        result = await services.relay.download(cover_url, f"cover_{key}.jpg", COVER_MAX_BYTES)
        try:
            if result.success:
                await client.send_file(chat_id, result.filepath, caption=caption, buttons=buttons, parse_mode="html")
                return True
            await client.send_file(chat_id, cover_url, caption=caption, buttons=buttons, parse_mode="html")
            return True
        except RPCError as exc:
            logger.error("Photo upload error: %s", exc)
            return False
        finally:
            if result.filepath and os.path.exists(result.filepath):
                os.remove(result.filepath)

    @client.on(events.CallbackQuery(pattern=rb"^DETAIL\|(\w+)$"))
    @guarded
    async def detail_callback(event: events.CallbackQuery.Event) -> None:
        """Show the anime detail, with its cover when possible."""
        url = await resolve_key(event)
        if url is None:
            return
        await delete_quietly(event)
        loading = await event.respond("⏳ Memuat detail anime...")
        detail = await api.get_detail(url)
        if detail is None:
            await loading.edit("😔 Gagal memuat detail anime. Silakan coba lagi.")
            return

        key = links.key_for(url)
        text = format_detail(detail)
        buttons = detail_keyboard(key, bool(detail.episodes))
        await delete_quietly(loading)
        if detail.cover_url and len(text) <= MAX_CAPTION_LENGTH:
            if await send_cover(event.chat_id, key, detail.cover_url, text, buttons):
                return
        await event.respond(text, buttons=buttons, parse_mode="html")

    @client.on(events.CallbackQuery(pattern=rb"^EPS\|(\w+)$"))
    @guarded
    async def episodes_callback(event: events.CallbackQuery.Event) -> None:
        url = await resolve_key(event)
        if url is None:
            return
        await delete_quietly(event)
        loading = await event.respond("⏳ Memuat daftar episode...")
        detail = await api.get_detail(url)
        if detail is None or not detail.episodes:
            await loading.edit("😔 Tidak ada episode tersedia untuk anime ini.", buttons=[menu_row()])
            return
        key = links.key_for(url)
        await loading.edit(format_episode_list(detail), buttons=episode_keyboard(detail.episodes, key), parse_mode="html")

    @client.on(events.CallbackQuery(pattern=rb"^EPNAV\|(\w+)\|(\d+)$"))
    @guarded
    async def episode_callback(event: events.CallbackQuery.Event) -> None:
        """Fetch an episode's streams and hand them to the delivery task."""
        url = await resolve_key(event)
        if url is None:
            return
        idx = int(event.pattern_match.group(2))
        await delete_quietly(event)
        loading = await event.respond("⏳ Memuat episode...")

        detail = await api.get_detail(url)
        if detail is None or not detail.episodes:
            await loading.edit("😔 Gagal memuat data episode. Silakan coba lagi.", buttons=[menu_row()])
            return
        key = links.key_for(url)
        total = len(detail.episodes)
        idx = max(0, min(idx, total - 1))
        episode = detail.episodes[idx]
        ep_title = escape_html(episode.label or f"Episode {idx + 1}")
        nav = episode_nav_keyboard(key, idx, total)

        await loading.edit(f"⏳ Memuat <b>{ep_title}</b>...", parse_mode="html")
        video = await api.get_video(episode.url)
        if video is None:
            await loading.edit(
                f"😔 Gagal mengambil video untuk <b>{ep_title}</b>.\n\nCoba episode lain.",
                buttons=nav,
                parse_mode="html",
            )
            return
        if not video.streams:
            await loading.edit(f"😔 Belum ada video untuk <b>{ep_title}</b>.", buttons=nav, parse_mode="html")
            return

        task = EpisodeDeliveryTask(
            services.relay,
            uploader,
            event.chat_id,
            video,
            title=f"📺 <b>{escape_html(detail.title)}</b>\n▶️ <b>{ep_title}</b>",
            file_stem=f"{detail.title or 'anime'}_{episode.label or idx}",
            buttons=nav,
            max_upload_mb=settings.max_upload_mb,
            delete_after_upload=settings.delete_after_upload,
            mirror_resolver=api.resolve_mirror,
        )

        async def status(text: str):
            return await loading.edit(text, buttons=nav, parse_mode="html", link_preview=False)

        async def deliver() -> None:
            if await task.run(status_callback=status):
                await delete_quietly(loading)

        spawn(deliver())

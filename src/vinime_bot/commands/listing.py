"""
Listing handlers: latest, recommended, movies, search and the A-Z catalog.
"""
import logging
from typing import List

from telethon import TelegramClient, events

from ..helpers import (
    CARI_USAGE,
    EMPTY_AZ_MESSAGE,
    LISTINGS,
    anime_list_keyboard,
    az_keyboard,
    format_anime_list,
    format_az_list,
    menu_row,
)
from ..models import ListItem
from ..services import Services
from ..utils import escape_html
from .common import EXPIRED_MESSAGE, answer, edit_or_respond, guarded

logger = logging.getLogger(__name__)

LOAD_FAILED = "😔 Gagal memuat data. Silakan coba lagi nanti."


def register(client: TelegramClient, services: Services) -> None:
    api = services.api
    links = services.links

    async def fetch_listing(prefix: str) -> List[ListItem]:
        if prefix == "latest":
            return await api.get_latest()
        if prefix == "rec":
            return await api.get_recommended()
        return await api.get_movies()

    def render_listing(prefix: str, items: List[ListItem], page: int):
        header, emoji = LISTINGS[prefix]
        text = f"{header}\n\n{format_anime_list(items, page, emoji)}"
        return text, anime_list_keyboard(items, page, prefix, links)

    def render_search(query: str, items: List[ListItem], page: int):
        key = links.key_for(query)
        text = f"🔍 <b>Hasil Pencarian:</b> <i>{escape_html(query)}</i>\n\n{format_anime_list(items, page, '🔍')}"
        return text, anime_list_keyboard(items, page, "search", links, search_key=key)

    def render_az(page: int):
        entries = api.get_all_anime_az()
        if not entries:
            return EMPTY_AZ_MESSAGE, [menu_row()]
        return format_az_list(entries, page), az_keyboard(entries, page, links)

    async def reply_listing(event, prefix: str) -> None:
        loading = await event.reply("⏳ Memuat data...")
        items = await fetch_listing(prefix)
        if not items:
            await loading.edit(LOAD_FAILED)
            return
        text, buttons = render_listing(prefix, items, 0)
        await loading.edit(text, buttons=buttons, parse_mode="html")

    @client.on(events.NewMessage(pattern=r"^/terbaru(?:@\w+)?$"))
    @guarded
    async def latest_command(event: events.NewMessage.Event) -> None:
        await reply_listing(event, "latest")

    @client.on(events.NewMessage(pattern=r"^/rekomendasi(?:@\w+)?$"))
    @guarded
    async def recommended_command(event: events.NewMessage.Event) -> None:
        await reply_listing(event, "rec")

    @client.on(events.NewMessage(pattern=r"^/movie(?:@\w+)?$"))
    @guarded
    async def movie_command(event: events.NewMessage.Event) -> None:
        await reply_listing(event, "movie")

    @client.on(events.NewMessage(pattern=r"^/list(?:@\w+)?$"))
    @guarded
    async def az_command(event: events.NewMessage.Event) -> None:
        text, buttons = render_az(0)
        await event.reply(text, buttons=buttons, parse_mode="html")

    @client.on(events.NewMessage(pattern=r"^/cari(?:@\w+)?(?:\s+(.*))?$"))
    @guarded
    async def search_command(event: events.NewMessage.Event) -> None:
        """Handle /cari <query>."""
        query = (event.pattern_match.group(1) or "").strip()
        if not query:
            await event.reply(CARI_USAGE, parse_mode="html")
            return
        loading = await event.reply(f"⏳ Mencari \"{query}\"...")
        items = await api.search_anime(query)
        if not items:
            await loading.edit(f"😔 Tidak ditemukan anime dengan judul \"{query}\".")
            return
        text, buttons = render_search(query, items, 0)
        await loading.edit(text, buttons=buttons, parse_mode="html")

    @client.on(events.CallbackQuery(pattern=rb"^CMD\|(latest|rec|movie)$"))
    @client.on(events.CallbackQuery(pattern=rb"^PAGE\|(latest|rec|movie)\|(\d+)$"))
    @guarded
    async def listing_callback(event: events.CallbackQuery.Event) -> None:
        await answer(event)
        groups = event.pattern_match.groups()
        prefix = groups[0].decode()
        page = int(groups[1]) if len(groups) > 1 else 0
        items = await fetch_listing(prefix)
        if not items:
            await edit_or_respond(event, LOAD_FAILED, [menu_row()])
            return
        text, buttons = render_listing(prefix, items, page)
        await edit_or_respond(event, text, buttons)

    @client.on(events.CallbackQuery(pattern=rb"^SEARCH\|(\d+)\|(\w+)$"))
    @guarded
    async def search_page_callback(event: events.CallbackQuery.Event) -> None:
        page = int(event.pattern_match.group(1))
        query = links.value_for(event.pattern_match.group(2).decode())
        if query is None:
            await answer(event, EXPIRED_MESSAGE, alert=True)
            return
        await answer(event)
        items = await api.search_anime(query)
        if not items:
            await edit_or_respond(event, f"😔 Tidak ditemukan anime dengan judul \"{escape_html(query)}\".", [menu_row()])
            return
        text, buttons = render_search(query, items, page)
        await edit_or_respond(event, text, buttons)

    @client.on(events.CallbackQuery(pattern=rb"^CMD\|az$"))
    @client.on(events.CallbackQuery(pattern=rb"^AZ\|(\d+)$"))
    @guarded
    async def az_callback(event: events.CallbackQuery.Event) -> None:
        await answer(event)
        groups = event.pattern_match.groups()
        page = int(groups[0]) if groups else 0
        text, buttons = render_az(page)
        await edit_or_respond(event, text, buttons)

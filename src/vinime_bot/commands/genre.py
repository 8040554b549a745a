"""
Genre handlers: the genre picker and paginated genre listings.
"""
from telethon import TelegramClient, events

from ..helpers import format_genre_listing, genre_keyboard, genre_listing_keyboard, menu_row
from ..services import Services
from .common import answer, edit_or_respond, guarded

GENRE_HEADER = "<b>🎭 Pilih Genre</b>\n\nPilih genre anime yang ingin kamu jelajahi:"
GENRE_FAILED = "😔 Gagal memuat genre. Coba lagi nanti."


def register(client: TelegramClient, services: Services) -> None:
    api = services.api

    @client.on(events.NewMessage(pattern=r"^/genre(?:@\w+)?$"))
    @guarded
    async def genre_command(event: events.NewMessage.Event) -> None:
        loading = await event.reply("⏳ Memuat daftar genre...")
        genres = await api.get_genre_list()
        if not genres:
            await loading.edit(GENRE_FAILED)
            return
        await loading.edit(GENRE_HEADER, buttons=genre_keyboard(genres), parse_mode="html")

    @client.on(events.CallbackQuery(pattern=rb"^CMD\|genre$"))
    @guarded
    async def genre_list_callback(event: events.CallbackQuery.Event) -> None:
        await answer(event)
        genres = await api.get_genre_list()
        if not genres:
            await edit_or_respond(event, GENRE_FAILED, [menu_row()])
            return
        await edit_or_respond(event, GENRE_HEADER, genre_keyboard(genres))

    @client.on(events.CallbackQuery(pattern=rb"^GENRE\|([\w-]+)\|(\d+)$"))
    @guarded
    async def genre_page_callback(event: events.CallbackQuery.Event) -> None:
        """Handle GENRE|<slug>|<page> (1-based)."""
        await answer(event)
        slug = event.pattern_match.group(1).decode()
        page = int(event.pattern_match.group(2))
        result = await api.get_anime_by_genre(slug, page)
        text = format_genre_listing(result.items, slug, result.current_page, result.total_pages)
        buttons = genre_listing_keyboard(
            result.items, slug, result.current_page, result.total_pages, services.links
        )
        await edit_or_respond(event, text, buttons)

"""
Start, ping and main-menu handlers.
"""
from telethon import TelegramClient, events

from ..helpers import CARI_USAGE, main_menu_keyboard, menu_row, welcome_message
from ..services import Services
from .common import answer, edit_or_respond, guarded


def register(client: TelegramClient, services: Services) -> None:
    @client.on(events.NewMessage(pattern=r"^/start(?:@\w+)?(?:\s|$)"))
    @guarded
    async def start_handler(event: events.NewMessage.Event) -> None:
        """Handle the /start command."""
        await event.reply(welcome_message(), buttons=main_menu_keyboard(), parse_mode="html")

    @client.on(events.NewMessage(pattern=r"^/ping"))
    async def ping_handler(event: events.NewMessage.Event) -> None:
        """Handle the /ping command to check bot responsiveness."""
        await event.reply("PONG")

    @client.on(events.CallbackQuery(pattern=rb"^MENU$"))
    @guarded
    async def menu_callback(event: events.CallbackQuery.Event) -> None:
        await answer(event)
        await edit_or_respond(event, welcome_message(), main_menu_keyboard())

    @client.on(events.CallbackQuery(pattern=rb"^CMD\|search$"))
    @guarded
    async def search_hint_callback(event: events.CallbackQuery.Event) -> None:
        await answer(event)
        await edit_or_respond(event, CARI_USAGE, [menu_row()])

    @client.on(events.CallbackQuery(pattern=rb"^NOOP$"))
    async def noop_callback(event: events.CallbackQuery.Event) -> None:
        await answer(event)

"""
Telegram command and callback handlers.

Each module exposes ``register(client, services)``.
"""
from telethon import TelegramClient

from ..services import Services
from . import detail, genre, listing, start


def register_all(client: TelegramClient, services: Services) -> None:
    for module in (start, listing, genre, detail):
        module.register(client, services)

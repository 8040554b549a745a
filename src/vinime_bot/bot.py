"""
Main bot module for vinime-bot.

Builds the Telegram client and the shared services, registers the handlers
and runs until disconnected.
"""
import asyncio
import logging
import sys

from telethon import TelegramClient

from .cleanup import cleanup_loop
from .commands import register_all
from .config import Settings, settings as default_settings
from .logging_config import configure_logging
from .services import Services, build_services, close_services

logger = logging.getLogger(__name__)


def build_client(settings: Settings) -> TelegramClient:
    return TelegramClient(settings.session_name, settings.tg_api_id, settings.tg_api_hash)


async def on_startup(client: TelegramClient, services: Services) -> asyncio.Task:
    """Load the catalog, schedule seeding and start the Telegram client.

    Returns:
        The background seeding task.
    """
    services.catalog.load()
    seed_task = asyncio.ensure_future(
        services.catalog.seed_later(services.api, services.settings.seed_start_delay_seconds)
    )
    await client.start(bot_token=services.settings.tg_bot_token)
    logger.info("Bot started")
    return seed_task


async def main(settings: Settings = default_settings) -> None:
    """Main entry point for the bot application."""
    services = build_services(settings)
    client = build_client(settings)
    register_all(client, services)

    stop_event = asyncio.Event()
    seed_task = await on_startup(client, services)
    cleanup_task = asyncio.ensure_future(cleanup_loop(stop_event, settings))
    try:
        await client.run_until_disconnected()
    finally:
        stop_event.set()
        seed_task.cancel()
        await cleanup_task
        await close_services(services)


def run() -> None:
    """Console entry point."""
    configure_logging()
    if not default_settings.has_telegram_credentials():
        logger.error("TG_API_ID, TG_API_HASH and TG_BOT_TOKEN must be set")
        sys.exit(1)
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Bot stopped")


if __name__ == "__main__":
    run()

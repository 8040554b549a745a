"""
Shared plumbing for command and callback handlers.
"""
import asyncio
import functools
import logging
from typing import Any, Awaitable, Callable, Optional, Set

from telethon.errors import MessageNotModifiedError, RPCError

logger = logging.getLogger(__name__)

ERROR_MESSAGE = "❌ Terjadi kesalahan. Silakan coba lagi."
EXPIRED_MESSAGE = "Sesi tombol sudah kedaluwarsa. Silakan ulangi dari menu."

_background: Set[asyncio.Task] = set()


def guarded(handler: Callable[..., Awaitable[Any]]) -> Callable[..., Awaitable[Any]]:
    """Log handler errors and tell the user something went wrong."""

    @functools.wraps(handler)
    async def wrapper(event) -> None:
        try:
            await handler(event)
        except Exception:
            logger.exception("Handler %s failed", handler.__name__)
            try:
                await event.respond(ERROR_MESSAGE)
            except RPCError:
                logger.debug("Could not send error message")

    return wrapper


async def edit_or_respond(event, text: str, buttons: Any = None) -> None:
    """Edit the callback's message, or send a new one when it cannot be edited."""
    try:
        await event.edit(text, buttons=buttons, parse_mode="html", link_preview=False)
    except MessageNotModifiedError:
        pass
    except RPCError as exc:
        logger.debug("Edit failed (%s), sending a new message", exc)
        await event.respond(text, buttons=buttons, parse_mode="html", link_preview=False)


async def answer(event, text: Optional[str] = None, alert: bool = False) -> None:
    try:
        await event.answer(text, alert=alert)
    except RPCError:
        logger.debug("Callback answer failed")


def spawn(coro: Awaitable[Any]) -> asyncio.Task:
    """Run ``coro`` in the background, holding a reference until it is done."""
    task = asyncio.ensure_future(coro)
    _background.add(task)
    task.add_done_callback(_background.discard)
    return task

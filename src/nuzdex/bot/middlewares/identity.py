"""Identity middleware - resolves the caller's user id."""

from collections.abc import Awaitable, Callable
from typing import Any

import structlog
from aiogram import BaseMiddleware
from aiogram.types import CallbackQuery, Message, TelegramObject

from nuzdex.core.identity import resolve_user_id


class IdentityMiddleware(BaseMiddleware):
    """Attach ``user_id`` (Telegram id as a string, or None) to handler data."""

    async def __call__(
        self,
        handler: Callable[[TelegramObject, dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: dict[str, Any],
    ) -> Any:
        """Resolve the sender and bind it to the log context."""
        sender = None
        if isinstance(event, (Message, CallbackQuery)) and event.from_user:
            sender = event.from_user

        # Bots and channel posts have no usable identity
        user_id = resolve_user_id(sender.id) if sender and not sender.is_bot else None
        data["user_id"] = user_id

        with structlog.contextvars.bound_contextvars(user_id=user_id):
            return await handler(event, data)

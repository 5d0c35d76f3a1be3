"""Per-update database session."""

from collections.abc import Awaitable, Callable
from typing import Any

from aiogram import BaseMiddleware
from aiogram.types import CallbackQuery, Message, TelegramObject
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from nuzdex.database import async_session_factory
from nuzdex.logging import get_logger

logger = get_logger(__name__)

STORAGE_ERROR = "Could not save that right now. Please try again."


class DatabaseMiddleware(BaseMiddleware):
    """Open one session per update and pass it to handlers as ``session``.

    Core operations commit their own work. A database error rolls the
    session back, tells the user and is re-raised for the dispatcher.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession] = async_session_factory) -> None:
        self.session_factory = session_factory

    async def __call__(
        self,
        handler: Callable[[TelegramObject, dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: dict[str, Any],
    ) -> Any:
        async with self.session_factory() as session:
            data["session"] = session
            try:
                return await handler(event, data)
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error("Database error", update=type(event).__name__, error=str(e))
                await notify_failure(event)
                raise


async def notify_failure(event: TelegramObject) -> None:
    if isinstance(event, Message):
        await event.answer(STORAGE_ERROR)
    elif isinstance(event, CallbackQuery):
        await event.answer(STORAGE_ERROR, show_alert=True)

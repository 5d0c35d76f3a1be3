"""Middleware registration and implementations."""

from aiogram import Dispatcher

from nuzdex.bot.middlewares.database import DatabaseMiddleware
from nuzdex.bot.middlewares.identity import IdentityMiddleware


def register_all_middlewares(dp: Dispatcher) -> None:
    """Register all middlewares with the dispatcher."""
    # Database session middleware (must be first)
    dp.message.middleware(DatabaseMiddleware())
    dp.callback_query.middleware(DatabaseMiddleware())

    # Caller identity
    dp.message.middleware(IdentityMiddleware())
    dp.callback_query.middleware(IdentityMiddleware())


__all__ = ["register_all_middlewares"]

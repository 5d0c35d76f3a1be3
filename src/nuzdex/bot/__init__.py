"""Bot and dispatcher factories."""

from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode
from aiogram.fsm.storage.base import DefaultKeyBuilder
from aiogram.fsm.storage.redis import RedisStorage
from redis.asyncio import Redis

from nuzdex.config import settings
from nuzdex.logging import get_logger

logger = get_logger(__name__)


def create_bot() -> Bot:
    """Create the Telegram bot; replies are HTML without link previews."""
    return Bot(
        token=settings.bot_token,
        default=DefaultBotProperties(
            parse_mode=ParseMode.HTML,
            link_preview_is_disabled=True,
        ),
    )


def create_storage() -> RedisStorage:
    """Redis storage for guided flows such as step-by-step /addparty.

    Abandoned flows expire after ``fsm_ttl_seconds``.
    """
    return RedisStorage(
        redis=Redis.from_url(settings.redis_url),
        key_builder=DefaultKeyBuilder(prefix="nuzdex"),
        state_ttl=settings.fsm_ttl_seconds,
        data_ttl=settings.fsm_ttl_seconds,
    )


async def create_dispatcher() -> Dispatcher:
    """Create the dispatcher with routers and middlewares attached."""
    dp = Dispatcher(storage=create_storage())

    from nuzdex.bot.handlers import register_all_handlers
    from nuzdex.bot.middlewares import register_all_middlewares

    register_all_handlers(dp)
    register_all_middlewares(dp)

    logger.debug("Dispatcher ready", fsm_ttl=settings.fsm_ttl_seconds)
    return dp


__all__ = ["create_bot", "create_dispatcher", "create_storage"]

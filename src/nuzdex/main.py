"""Main entry point for the Nuzdex bot."""

import asyncio
import sys

from nuzdex.bot import create_bot, create_dispatcher
from nuzdex.config import settings
from nuzdex.database import close_db, init_db
from nuzdex.logging import get_logger, setup_logging

logger = get_logger(__name__)


async def main() -> None:
    """Main function to run the bot."""
    setup_logging()
    logger.info("Starting Nuzdex bot...")

    if not settings.bot_token:
        logger.error("BOT_TOKEN is not set")
        sys.exit(1)

    # Initialize database
    try:
        await init_db()
        logger.info("Database connection established")
    except Exception as e:
        logger.error("Failed to connect to database", error=str(e))
        sys.exit(1)

    bot = create_bot()
    dp = await create_dispatcher()

    try:
        bot_info = await bot.get_me()
        logger.info(
            "Bot started",
            username=bot_info.username,
            bot_id=bot_info.id,
        )

        await dp.start_polling(bot, allowed_updates=dp.resolve_used_update_types())

    except Exception as e:
        logger.error("Bot error", error=str(e))
        raise
    finally:
        await bot.session.close()
        await dp.storage.close()
        await close_db()
        logger.info("Bot stopped")


def run() -> None:
    """Entry point for the application."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()

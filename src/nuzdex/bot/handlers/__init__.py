"""Handler registration."""

from aiogram import Dispatcher

from nuzdex.bot.handlers import browse, party, pokedex, runs, start


def register_all_handlers(dp: Dispatcher) -> None:
    """Register all handlers with the dispatcher."""
    # Core handlers
    dp.include_router(start.router)
    dp.include_router(runs.router)

    # Per-run handlers
    dp.include_router(pokedex.router)
    dp.include_router(party.router)

    # Species browser
    dp.include_router(browse.router)


__all__ = ["register_all_handlers"]

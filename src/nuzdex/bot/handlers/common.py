"""Helpers shared by the command handlers."""

from __future__ import annotations

from aiogram.types import Message
from sqlalchemy.ext.asyncio import AsyncSession

from nuzdex.core.constants import PARTY_SIZE
from nuzdex.core.runs import get_active_run
from nuzdex.database.models import Run

NO_ACTIVE_RUN = (
    "You have no active run.\n\n"
    "Start one with /newrun [game] [name] --active\n"
    "or pick one from /runs."
)


def command_args(message: Message) -> str:
    """Text after the command, stripped."""
    parts = (message.text or "").split(maxsplit=1)
    return parts[1].strip() if len(parts) > 1 else ""


def parse_slot(token: str) -> int | None:
    """Convert a 1-6 slot typed by the user into a 0-5 position."""
    if not token.isdigit():
        return None
    slot = int(token)
    if not 1 <= slot <= PARTY_SIZE:
        return None
    return slot - 1


async def active_run_or_reply(message: Message, session: AsyncSession, user_id: str | None) -> Run | None:
    """Return the active run, or tell the user they have none."""
    run = await get_active_run(session, user_id)
    if run is None:
        await message.answer(NO_ACTIVE_RUN)
    return run

"""Pokedex handlers for the active run."""

from __future__ import annotations

from html import escape

from aiogram import Router
from aiogram.filters import Command, CommandObject
from aiogram.types import Message
from sqlalchemy.ext.asyncio import AsyncSession

from nuzdex.bot.handlers.common import active_run_or_reply, command_args
from nuzdex.core.constants import DEX_STATUSES
from nuzdex.core.errors import NuzdexError
from nuzdex.core.pokedex import delete_entry, get_entry, get_stats, list_entries, upsert_entry
from nuzdex.logging import get_logger
from nuzdex.utils.formatting import format_dex_line

router = Router(name="pokedex")
logger = get_logger(__name__)

# Telegram messages are capped at 4096 characters
MAX_LISTED_ENTRIES = 80


def parse_dex_args(text: str) -> tuple[int, str, str | None, str | None] | None:
    """Parse ``[dex#] [name...] [@ location...] [| notes...]``.

    Returns (pokemon_id, name, location, notes) or None when malformed.
    """
    text, _, notes = text.partition("|")
    head, _, location = text.partition("@")
    parts = head.split()
    if len(parts) < 2 or not parts[0].lstrip("#").isdigit():
        return None
    pokemon_id = int(parts[0].lstrip("#"))
    if pokemon_id <= 0:
        return None
    name = " ".join(parts[1:]).lower()
    return pokemon_id, name, location.strip() or None, notes.strip() or None


@router.message(Command("dex", "pokedex"))
async def cmd_dex(message: Message, session: AsyncSession, user_id: str | None) -> None:
    """Show Pokedex progress of the active run."""
    run = await active_run_or_reply(message, session, user_id)
    if run is None:
        return

    stats = await get_stats(session, user_id, run.id) or {"total": 0, "seen": 0, "caught": 0, "owned": 0}
    await message.answer(
        f"<b>Pokédex — {escape(run.name)}</b>\n\n"
        f"Total entries: {stats['total']}\n"
        f"👁 Seen: {stats['seen']}\n"
        f"🔴 Caught: {stats['caught']}\n"
        f"⭐ Owned: {stats['owned']}\n\n"
        "<i>/dexlist to see entries</i>"
    )


@router.message(Command("dexlist"))
async def cmd_dex_list(message: Message, session: AsyncSession, user_id: str | None) -> None:
    """List entries of the active run, optionally by status."""
    run = await active_run_or_reply(message, session, user_id)
    if run is None:
        return

    status = command_args(message).lower() or None
    if status is not None and status not in DEX_STATUSES:
        await message.answer(f"Filter must be one of: {', '.join(DEX_STATUSES)}")
        return

    entries = await list_entries(session, user_id, run.id)
    if status is not None:
        entries = [e for e in entries if e.status == status]
    if not entries:
        await message.answer("No Pokédex entries yet. Log one with /seen or /caught.")
        return

    lines = [f"<b>Pokédex — {escape(run.name)}</b> ({len(entries)})\n"]
    lines.extend(format_dex_line(e) for e in entries[:MAX_LISTED_ENTRIES])
    if len(entries) > MAX_LISTED_ENTRIES:
        lines.append(f"\n<i>…and {len(entries) - MAX_LISTED_ENTRIES} more</i>")
    await message.answer("\n".join(lines))


@router.message(Command(*DEX_STATUSES))
async def cmd_mark(
    message: Message,
    command: CommandObject,
    session: AsyncSession,
    user_id: str | None,
) -> None:
    """Record a species as seen/caught/owned in the active run."""
    status = command.command.lower()
    parsed = parse_dex_args(command.args or "")
    if parsed is None:
        await message.answer(f"Usage: /{status} [dex#] [name] [@ location] [| notes]")
        return

    run = await active_run_or_reply(message, session, user_id)
    if run is None:
        return

    pokemon_id, name, location, notes = parsed
    try:
        await upsert_entry(
            session,
            user_id,
            run.id,
            pokemon_id=pokemon_id,
            pokemon_name=name,
            status=status,
            location=location,
            notes=notes,
        )
    except NuzdexError as e:
        logger.info("Pokedex mark refused", status=status, pokemon_id=pokemon_id, error=e.message)
        await message.answer(e.message)
        return

    entry = await get_entry(session, user_id, run.id, pokemon_id)
    await message.answer(f"Logged: {format_dex_line(entry)}" if entry else "Logged.")


@router.message(Command("dexdel"))
async def cmd_dex_delete(message: Message, session: AsyncSession, user_id: str | None) -> None:
    """Remove a species from the active run's Pokedex."""
    arg = command_args(message).lstrip("#")
    if not arg.isdigit():
        await message.answer("Usage: /dexdel [dex#]")
        return

    run = await active_run_or_reply(message, session, user_id)
    if run is None:
        return

    entry = await get_entry(session, user_id, run.id, int(arg))
    if entry is None:
        await message.answer(f"#{arg} is not in this run's Pokédex.")
        return

    try:
        await delete_entry(session, user_id, entry.id)
    except NuzdexError as e:
        await message.answer(e.message)
        return
    await message.answer(f"Removed #{entry.pokemon_id:04d} {escape(entry.pokemon_name.title())}.")

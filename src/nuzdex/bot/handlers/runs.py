"""Run management handlers."""

from __future__ import annotations

from html import escape

from aiogram import F, Router
from aiogram.filters import Command
from aiogram.types import CallbackQuery, Message
from aiogram.utils.keyboard import InlineKeyboardBuilder
from sqlalchemy.ext.asyncio import AsyncSession

from nuzdex.bot.handlers.common import active_run_or_reply, command_args
from nuzdex.core.constants import GAMES
from nuzdex.core.errors import NuzdexError
from nuzdex.core.party import list_party
from nuzdex.core.pokedex import get_stats
from nuzdex.core.runs import create_run, delete_run, list_runs, set_active_run, update_run
from nuzdex.logging import get_logger
from nuzdex.utils.formatting import format_run_details, format_run_line

router = Router(name="runs")
logger = get_logger(__name__)

ACTIVE_FLAGS = ("--active", "-a")
EDITABLE = {"name": "name", "desc": "description", "description": "description", "game": "game"}


def parse_new_run_args(text: str) -> tuple[str | None, str, bool]:
    """Parse ``[game] [name...] [--active]``.

    Returns (game, name, set_active); game is None when unknown.
    """
    parts = text.split()
    set_active = any(p.lower() in ACTIVE_FLAGS for p in parts)
    parts = [p for p in parts if p.lower() not in ACTIVE_FLAGS]
    if not parts:
        return None, "", set_active

    game = parts[0].lower()
    name = " ".join(parts[1:])
    return (game if game in GAMES else None), name, set_active


# ---------------------------------------------------------------------------
# /runs list with activate/delete buttons
# ---------------------------------------------------------------------------

async def _build_runs_page(
    session: AsyncSession, user_id: str | None
) -> tuple[str, InlineKeyboardBuilder | None]:
    runs = await list_runs(session, user_id)
    if not runs:
        return "<b>Your Runs</b>\n\nNo runs yet.\nCreate one with /newrun [game] [name]", None

    lines = ["<b>Your Runs</b>\n"]
    builder = InlineKeyboardBuilder()
    for i, run in enumerate(runs, start=1):
        lines.append(format_run_line(i, run))
        if not run.is_active:
            builder.button(text=f"▶️ {i}", callback_data=f"rn:act:{run.id}")
        builder.button(text=f"🗑 {i}", callback_data=f"rn:del:{run.id}")
    builder.adjust(4)

    lines.append("\n<i>▶️ activates a run, 🗑 deletes it.</i>")
    return "\n".join(lines), builder


@router.message(Command("runs"))
async def cmd_runs(message: Message, session: AsyncSession, user_id: str | None) -> None:
    """List the user's runs, newest first."""
    text, kb = await _build_runs_page(session, user_id)
    await message.answer(text, reply_markup=kb.as_markup() if kb else None)


@router.callback_query(F.data.startswith("rn:"))
async def callback_runs(callback: CallbackQuery, session: AsyncSession, user_id: str | None) -> None:
    """Handle activate / delete / confirm-delete buttons."""
    parts = (callback.data or "").split(":", 2)
    if len(parts) < 3:
        await callback.answer()
        return
    action, run_id = parts[1], parts[2]

    if action == "del":
        builder = InlineKeyboardBuilder()
        builder.button(text="Yes, delete everything", callback_data=f"rn:delok:{run_id}")
        builder.button(text="Cancel", callback_data="rn:list:-")
        await callback.message.edit_text(
            "Delete this run with its whole Pokédex and party?",
            reply_markup=builder.as_markup(),
        )
        await callback.answer()
        return

    try:
        if action == "act":
            await set_active_run(session, user_id, run_id)
            notice = "Run activated."
        elif action == "delok":
            await delete_run(session, user_id, run_id)
            notice = "Run deleted."
        else:
            notice = None
    except NuzdexError as e:
        logger.info("Run action refused", action=action, run_id=run_id, error=e.message)
        await callback.answer(e.message, show_alert=True)
        return

    text, kb = await _build_runs_page(session, user_id)
    await callback.message.edit_text(text, reply_markup=kb.as_markup() if kb else None)
    await callback.answer(notice)


# ---------------------------------------------------------------------------
# /newrun, /active, /editrun, /games
# ---------------------------------------------------------------------------

@router.message(Command("newrun"))
async def cmd_new_run(message: Message, session: AsyncSession, user_id: str | None) -> None:
    """Create a run: /newrun [game] [name] [--active]."""
    game, name, set_active = parse_new_run_args(command_args(message))
    if game is None:
        await message.answer("Unknown game. See /games for the list of ids.")
        return
    if not name:
        await message.answer("Give your run a name: /newrun [game] [name]")
        return

    try:
        await create_run(session, user_id, name=name, game=game, set_active=set_active)
    except NuzdexError as e:
        await message.answer(e.message)
        return

    suffix = " It is now your active run." if set_active else " Activate it from /runs."
    await message.answer(f"Run <b>{escape(name)}</b> created ({GAMES[game]}).{suffix}")


@router.message(Command("active"))
async def cmd_active(message: Message, session: AsyncSession, user_id: str | None) -> None:
    """Show the active run with Pokedex and party summary."""
    run = await active_run_or_reply(message, session, user_id)
    if run is None:
        return
    stats = await get_stats(session, user_id, run.id)
    party = await list_party(session, user_id, run.id)
    await message.answer(format_run_details(run, stats, len(party)))


@router.message(Command("editrun"))
async def cmd_edit_run(message: Message, session: AsyncSession, user_id: str | None) -> None:
    """Edit a run: /editrun [n] name|desc|game [value]."""
    parts = command_args(message).split(maxsplit=2)
    if len(parts) < 3 or not parts[0].isdigit() or parts[1].lower() not in EDITABLE:
        await message.answer("Usage: /editrun [n] name|desc|game [value]")
        return

    runs = await list_runs(session, user_id)
    index = int(parts[0])
    if not 1 <= index <= len(runs):
        await message.answer("No run with that number. See /runs.")
        return

    field, value = EDITABLE[parts[1].lower()], parts[2].strip()
    if field == "game" and value.lower() not in GAMES:
        await message.answer("Unknown game. See /games for the list of ids.")
        return
    if field == "game":
        value = value.lower()

    try:
        await update_run(session, user_id, runs[index - 1].id, **{field: value})
    except NuzdexError as e:
        await message.answer(e.message)
        return
    await message.answer("Run updated.")


@router.message(Command("games"))
async def cmd_games(message: Message) -> None:
    """List game ids accepted by /newrun."""
    lines = ["<b>Games</b>\n"]
    lines.extend(f"<code>{game_id}</code> — {name}" for game_id, name in GAMES.items())
    await message.answer("\n".join(lines))

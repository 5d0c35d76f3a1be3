"""Species browser and detail-section preferences."""

from __future__ import annotations

from aiogram import F, Router
from aiogram.filters import Command
from aiogram.types import CallbackQuery, Message
from aiogram.utils.keyboard import InlineKeyboardBuilder
from sqlalchemy.ext.asyncio import AsyncSession

from nuzdex.bot.handlers.common import command_args
from nuzdex.core.constants import GAMES, game_name
from nuzdex.core.errors import NuzdexError
from nuzdex.core.pokeapi import PokeAPIClient
from nuzdex.core.preferences import get_preferences, get_sections, save_preferences, toggle_section
from nuzdex.logging import get_logger
from nuzdex.utils.formatting import format_sections_menu, format_species_summary

router = Router(name="browse")
logger = get_logger(__name__)


@router.message(Command("poke", "dexinfo"))
async def cmd_poke(message: Message, session: AsyncSession, user_id: str | None) -> None:
    """Look up a Pokemon on PokeAPI and show the chosen sections."""
    query = command_args(message)
    if not query:
        await message.answer("Usage: /poke [name or dex#]")
        return

    sections = await get_sections(session, user_id)
    prefs = await get_preferences(session, user_id)
    game = prefs.selected_game if prefs and prefs.selected_game else None

    try:
        async with PokeAPIClient() as client:
            summary = await client.browse(query, sections, game=game)
    except NuzdexError as e:
        logger.info("Species lookup failed", query=query, error=e.message)
        await message.answer(e.message)
        return

    text = format_species_summary(summary)
    if game:
        text += f"\n\n<i>Moves filtered to {game_name(game)}. /game all to reset.</i>"
    await message.answer(text)


def _sections_keyboard(selected: list[str]) -> InlineKeyboardBuilder:
    builder = InlineKeyboardBuilder()
    for section, label in format_sections_menu(selected):
        builder.button(text=label, callback_data=f"sec:{section}")
    builder.adjust(2)
    return builder


@router.message(Command("sections"))
async def cmd_sections(message: Message, session: AsyncSession, user_id: str | None) -> None:
    """Show the detail-section toggles."""
    selected = await get_sections(session, user_id)
    await message.answer(
        "<b>Detail sections</b>\nTap to show or hide a section in /poke.",
        reply_markup=_sections_keyboard(selected).as_markup(),
    )


@router.callback_query(F.data.startswith("sec:"))
async def callback_toggle_section(callback: CallbackQuery, session: AsyncSession, user_id: str | None) -> None:
    """Toggle one section and refresh the keyboard."""
    section = (callback.data or "").split(":", 1)[-1]
    try:
        selected = await toggle_section(session, user_id, section)
    except NuzdexError as e:
        await callback.answer(e.message, show_alert=True)
        return

    await callback.message.edit_reply_markup(reply_markup=_sections_keyboard(selected).as_markup())
    await callback.answer()


@router.message(Command("game"))
async def cmd_game_filter(message: Message, session: AsyncSession, user_id: str | None) -> None:
    """Set the game used to filter moves in /poke."""
    arg = command_args(message).lower()
    if arg not in GAMES and arg != "all":
        await message.answer("Usage: /game [id|all] — see /games for ids")
        return

    game = "" if arg == "all" else arg
    try:
        await save_preferences(session, user_id, game, await get_sections(session, user_id))
    except NuzdexError as e:
        await message.answer(e.message)
        return

    await message.answer(f"Game filter set to {game_name(game)}." if game else "Game filter cleared.")

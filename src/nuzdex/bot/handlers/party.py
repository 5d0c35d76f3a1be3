"""Party handlers for the active run."""

from __future__ import annotations

from html import escape
from typing import Any

from aiogram import F, Router
from aiogram.filters import Command, CommandObject
from aiogram.fsm.context import FSMContext
from aiogram.fsm.state import State, StatesGroup
from aiogram.types import Message
from sqlalchemy.ext.asyncio import AsyncSession

from nuzdex.bot.handlers.common import active_run_or_reply, parse_slot
from nuzdex.core.constants import GENDERS, MAX_LEVEL, MAX_MOVES, PARTY_SIZE, STAT_KEYS
from nuzdex.core.errors import NuzdexError
from nuzdex.core.party import (
    add_member,
    get_member_at,
    list_party,
    remove_member,
    reorder,
    update_member,
)
from nuzdex.logging import get_logger
from nuzdex.utils.formatting import format_party_line, format_stat_block

router = Router(name="party")
logger = get_logger(__name__)

# /setinfo field -> party column
INFO_FIELDS = {
    "nature": "nature",
    "ability": "ability",
    "item": "held_item",
    "gender": "gender",
    "shiny": "is_shiny",
    "notes": "notes",
}
GENDER_ALIASES = {"m": "male", "f": "female"}
CLEAR_WORDS = ("-", "none", "clear")
YES_WORDS = ("yes", "y", "on", "true", "1")
NO_WORDS = ("no", "n", "off", "false", "0")


class AddPartyForm(StatesGroup):
    """Guided /addparty without arguments."""

    species = State()
    level = State()
    slot = State()


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------

def parse_species(text: str) -> tuple[int, str] | None:
    """Parse ``[dex#] [name...]`` into (pokemon_id, lowercased name)."""
    parts = text.split()
    if len(parts) < 2 or not parts[0].lstrip("#").isdigit():
        return None
    pokemon_id = int(parts[0].lstrip("#"))
    if pokemon_id <= 0:
        return None
    return pokemon_id, " ".join(parts[1:]).lower()


def parse_level(token: str) -> int | None:
    """A level between 1 and 100, or None."""
    token = token.strip()
    if not token.isdigit():
        return None
    level = int(token)
    return level if 1 <= level <= MAX_LEVEL else None


def parse_add_args(text: str) -> dict[str, Any] | None:
    """Parse ``[dex#] [name] [level] [slot]`` for /addparty."""
    parts = text.split()
    if len(parts) < 3 or not parts[0].isdigit() or not parts[2].isdigit():
        return None

    level = parse_level(parts[2])
    if level is None:
        return None

    args: dict[str, Any] = {
        "pokemon_id": int(parts[0]),
        "pokemon_name": parts[1].lower(),
        "level": level,
        "position": None,
    }
    if len(parts) > 3:
        position = parse_slot(parts[3])
        if position is None:
            return None
        args["position"] = position
    return args


def parse_moves(text: str) -> list[str] | None:
    """Comma-separated move names, one to four, as PokeAPI-style keys."""
    moves = [m.strip().lower().replace(" ", "-") for m in text.split(",")]
    moves = [m for m in moves if m]
    if not 1 <= len(moves) <= MAX_MOVES:
        return None
    return moves


def parse_stat_values(text: str) -> dict[str, int] | None:
    """Six numbers in HP/Atk/Def/SpA/SpD/Spe order, keyed by stat name."""
    parts = text.replace("/", " ").split()
    if len(parts) != len(STAT_KEYS) or not all(p.isdigit() for p in parts):
        return None
    return dict(zip(STAT_KEYS, (int(p) for p in parts)))


def parse_info(field: str, value: str) -> dict[str, Any] | None:
    """Map a /setinfo field and raw value to update_member keyword arguments."""
    column = INFO_FIELDS.get(field.lower())
    value = value.strip()
    if column is None or not value:
        return None

    lowered = value.lower()
    if column == "is_shiny":
        if lowered in YES_WORDS:
            return {column: True}
        if lowered in NO_WORDS:
            return {column: False}
        return None
    if lowered in CLEAR_WORDS:
        return {column: None}
    if column == "gender":
        gender = GENDER_ALIASES.get(lowered, lowered)
        return {column: gender} if gender in GENDERS else None
    if column == "notes":
        return {column: value[:500]}
    return {column: value[:50]}


# ---------------------------------------------------------------------------
# /party, /addparty
# ---------------------------------------------------------------------------

@router.message(Command("party"))
async def cmd_party(message: Message, session: AsyncSession, user_id: str | None) -> None:
    """Show the active run's party."""
    run = await active_run_or_reply(message, session, user_id)
    if run is None:
        return

    party = await list_party(session, user_id, run.id)
    if not party:
        await message.answer("Your party is empty. Add a Pokémon with /addparty [dex#] [name] [level]")
        return

    lines = [f"<b>Party — {escape(run.name)}</b> ({len(party)}/{PARTY_SIZE})\n"]
    for member in party:
        lines.append(format_party_line(member))
        details = [
            escape(v) for v in (member.nature, member.ability, member.held_item) if v
        ]
        if details:
            lines.append(f"    {' · '.join(details)}")
        if member.moves:
            lines.append(f"    Moves: {escape(', '.join(member.moves))}")
        if member.ivs:
            lines.append(f"    IVs: {format_stat_block(member.ivs)}")
        if member.evs:
            lines.append(f"    EVs: {format_stat_block(member.evs)}")
        if member.notes:
            lines.append(f"    <i>{escape(member.notes)}</i>")
    await message.answer("\n".join(lines))


async def _add_and_reply(
    message: Message,
    session: AsyncSession,
    user_id: str | None,
    args: dict[str, Any],
) -> None:
    run = await active_run_or_reply(message, session, user_id)
    if run is None:
        return

    try:
        await add_member(session, user_id, run.id, **args)
    except NuzdexError as e:
        await message.answer(e.message)
        return
    await message.answer(f"{escape(args['pokemon_name'].title())} joined the party!")


@router.message(Command("addparty"))
async def cmd_add_party(
    message: Message,
    command: CommandObject,
    session: AsyncSession,
    user_id: str | None,
    state: FSMContext,
) -> None:
    """Add a Pokemon to the party: /addparty [dex#] [name] [level] [slot].

    Without arguments the bot asks for each value in turn.
    """
    if not command.args:
        if await active_run_or_reply(message, session, user_id) is None:
            return
        await state.set_state(AddPartyForm.species)
        await message.answer("Which Pokémon? Send its dex number and name, e.g. <code>25 pikachu</code>.\n/cancel to stop.")
        return

    args = parse_add_args(command.args)
    if args is None:
        await message.answer(f"Usage: /addparty [dex#] [name] [level 1-{MAX_LEVEL}] [slot 1-{PARTY_SIZE}]")
        return
    await _add_and_reply(message, session, user_id, args)


@router.message(Command("cancel"))
async def cmd_cancel(message: Message, state: FSMContext) -> None:
    """Abort a guided flow."""
    if await state.get_state() is None:
        await message.answer("Nothing to cancel.")
        return
    await state.clear()
    await message.answer("Cancelled.")


# ---------------------------------------------------------------------------
# /swap and per-slot actions
# ---------------------------------------------------------------------------

@router.message(Command("swap"))
async def cmd_swap(
    message: Message,
    command: CommandObject,
    session: AsyncSession,
    user_id: str | None,
) -> None:
    """Swap two party slots, or move a Pokemon to an empty slot."""
    parts = (command.args or "").split()
    slots = [parse_slot(p) for p in parts]
    if len(slots) != 2 or None in slots or slots[0] == slots[1]:
        await message.answer(f"Usage: /swap [slot] [slot] (1-{PARTY_SIZE})")
        return

    run = await active_run_or_reply(message, session, user_id)
    if run is None:
        return

    first = await get_member_at(session, user_id, run.id, slots[0])
    second = await get_member_at(session, user_id, run.id, slots[1])
    try:
        if first and second:
            await reorder(session, user_id, first.id, second.id)
        elif first or second:
            mover = first or second
            target = slots[1] if first else slots[0]
            await update_member(session, user_id, mover.id, position=target)
        else:
            await message.answer("Both slots are empty.")
            return
    except NuzdexError as e:
        await message.answer(e.message)
        return
    await message.answer("Party reordered. /party to view.")


SLOT_USAGE = {
    "faint": "/faint [slot]",
    "revive": "/revive [slot]",
    "release": "/release [slot]",
    "level": "/level [slot] [1-100]",
    "nick": "/nick [slot] [name]",
    "moves": f"/moves [slot] [move, move, ...] (up to {MAX_MOVES})",
    "ivs": "/ivs [slot] [hp atk def spa spd spe]",
    "evs": "/evs [slot] [hp atk def spa spd spe]",
    "setinfo": "/setinfo [slot] nature|ability|item|gender|shiny|notes [value]",
}


def slot_changes(action: str, value: str) -> dict[str, Any] | None:
    """update_member arguments for a per-slot command, or None if malformed."""
    if action == "faint":
        return {"is_fainted": True}
    if action == "revive":
        return {"is_fainted": False}
    if not value:
        return None
    if action == "level":
        level = parse_level(value)
        return {"level": level} if level is not None else None
    if action == "nick":
        return {"nickname": value[:50]}
    if action == "moves":
        moves = parse_moves(value)
        return {"moves": moves} if moves is not None else None
    if action in ("ivs", "evs"):
        block = parse_stat_values(value)
        return {action: block} if block is not None else None
    if action == "setinfo":
        field, _, rest = value.partition(" ")
        return parse_info(field, rest)
    return None


@router.message(Command(*SLOT_USAGE))
async def cmd_slot_action(
    message: Message,
    command: CommandObject,
    session: AsyncSession,
    user_id: str | None,
) -> None:
    """Per-slot actions: release, faint/revive and detail edits."""
    action = command.command.lower()
    parts = (command.args or "").split(maxsplit=1)
    position = parse_slot(parts[0]) if parts else None
    value = parts[1].strip() if len(parts) > 1 else ""

    changes = None if action == "release" else slot_changes(action, value)
    if position is None or (action != "release" and changes is None):
        await message.answer(f"Usage: {SLOT_USAGE[action]}")
        return

    run = await active_run_or_reply(message, session, user_id)
    if run is None:
        return

    member = await get_member_at(session, user_id, run.id, position)
    if member is None:
        await message.answer(f"Slot {position + 1} is empty.")
        return
    name = escape(member.display_name)

    try:
        if action == "release":
            await remove_member(session, user_id, member.id)
            reply = f"{name} was released."
        else:
            await update_member(session, user_id, member.id, **changes)
            reply = {
                "faint": f"{name} fainted. 💀",
                "revive": f"{name} is back on its feet.",
            }.get(action, f"{name} updated. /party to view.")
    except NuzdexError as e:
        await message.answer(e.message)
        return

    logger.debug("Party slot action", action=action, position=position, run_id=run.id)
    await message.answer(reply)


# ---------------------------------------------------------------------------
# Guided /addparty steps
# ---------------------------------------------------------------------------

@router.message(AddPartyForm.species, F.text, ~F.text.startswith("/"))
async def form_species(message: Message, state: FSMContext) -> None:
    parsed = parse_species(message.text)
    if parsed is None:
        await message.answer("Send the dex number and name, e.g. <code>25 pikachu</code>.")
        return
    pokemon_id, name = parsed
    await state.update_data(pokemon_id=pokemon_id, pokemon_name=name)
    await state.set_state(AddPartyForm.level)
    await message.answer(f"Level of {escape(name.title())}? (1-{MAX_LEVEL})")


@router.message(AddPartyForm.level, F.text, ~F.text.startswith("/"))
async def form_level(message: Message, state: FSMContext) -> None:
    level = parse_level(message.text)
    if level is None:
        await message.answer(f"Send a level between 1 and {MAX_LEVEL}.")
        return
    await state.update_data(level=level)
    await state.set_state(AddPartyForm.slot)
    await message.answer(f"Which slot (1-{PARTY_SIZE})? Send <code>auto</code> for the first free one.")


@router.message(AddPartyForm.slot, F.text, ~F.text.startswith("/"))
async def form_slot(
    message: Message,
    state: FSMContext,
    session: AsyncSession,
    user_id: str | None,
) -> None:
    token = message.text.strip().lower()
    position = None if token == "auto" else parse_slot(token)
    if token != "auto" and position is None:
        await message.answer(f"Send a slot between 1 and {PARTY_SIZE}, or <code>auto</code>.")
        return

    data = await state.get_data()
    await state.clear()
    await _add_and_reply(
        message,
        session,
        user_id,
        {
            "pokemon_id": data["pokemon_id"],
            "pokemon_name": data["pokemon_name"],
            "level": data["level"],
            "position": position,
        },
    )

"""Party roster - up to six slotted Pokemon per run."""

from __future__ import annotations

from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from nuzdex.core.constants import PARTY_POSITIONS, PARTY_SIZE
from nuzdex.core.errors import (
    CrossRunMismatch,
    InvalidInput,
    InvalidPosition,
    PartyFull,
    PositionOccupied,
    Unauthorized,
)
from nuzdex.core.identity import owns, require_user
from nuzdex.core.runs import get_run, owned_run
from nuzdex.core.schemas import NON_NULLABLE_PARTY_FIELDS, PartyFields, validate
from nuzdex.database.models import PartyPokemon, now_ms
from nuzdex.logging import get_logger

logger = get_logger(__name__)

_MEMBER_NOT_FOUND = "Pokémon not found or unauthorized."


# ---------------------------------------------------------------------------
# Slot helpers
# ---------------------------------------------------------------------------

def first_free_position(occupied: set[int]) -> int | None:
    """Lowest slot in 0-5 not in ``occupied``, or None."""
    for position in PARTY_POSITIONS:
        if position not in occupied:
            return position
    return None


def check_position(position: int | None) -> int:
    """Validate a slot index."""
    if position is None or position not in PARTY_POSITIONS:
        raise InvalidPosition()
    return position


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------

async def add_member(
    session: AsyncSession,
    user_id: str | None,
    run_id: str,
    pokemon_id: int,
    pokemon_name: str,
    level: int,
    position: int | None = None,
    **fields: Any,
) -> str:
    """Add a Pokemon to a run's party and return its id.

    Without ``position`` the lowest free slot is used. Optional keyword
    fields: nickname, gender, is_shiny, nature, ability, held_item, moves,
    stats, ivs, evs, notes.
    """
    user_id = require_user(user_id)
    run = await owned_run(session, user_id, run_id)
    extra = validate(PartyFields, {"level": level, **fields}).supplied()
    extra.pop("is_fainted", None)
    if extra.get("level") is None:
        raise InvalidInput("Level is required.")

    party = await _load_party(session, run.id)

    if position is None and len(party) >= PARTY_SIZE:
        raise PartyFull()

    occupied = {member.position for member in party}
    if position is None:
        position = first_free_position(occupied)
    check_position(position)

    if position in occupied:
        raise PositionOccupied(position)

    now = now_ms()
    member = PartyPokemon(
        run_id=run.id,
        user_id=user_id,
        pokemon_id=pokemon_id,
        pokemon_name=pokemon_name,
        position=position,
        is_fainted=False,
        created_at=now,
        updated_at=now,
        **extra,
    )
    session.add(member)
    await session.commit()

    logger.info("Party member added", run_id=run.id, member_id=member.id, pokemon_id=pokemon_id, position=position)
    return member.id


async def update_member(
    session: AsyncSession,
    user_id: str | None,
    member_id: str,
    **fields: Any,
) -> str:
    """Apply the supplied fields to a party member.

    A new ``position`` must be free among the other members of the run.
    """
    user_id = require_user(user_id)
    member = await _owned_member(session, user_id, member_id)
    changes = validate(PartyFields, fields).supplied()

    cleared = NON_NULLABLE_PARTY_FIELDS.intersection(
        key for key, value in changes.items() if value is None
    )
    if cleared:
        raise InvalidInput(f"Cannot clear: {', '.join(sorted(cleared))}.")

    new_position = changes.get("position")
    if new_position is not None and new_position != member.position:
        check_position(new_position)
        others = await _load_party(session, member.run_id)
        if any(o.position == new_position and o.id != member.id for o in others):
            raise PositionOccupied(new_position)

    for key, value in changes.items():
        setattr(member, key, value)
    member.updated_at = now_ms()
    await session.commit()

    logger.info("Party member updated", member_id=member.id, fields=sorted(changes))
    return member.id


async def remove_member(session: AsyncSession, user_id: str | None, member_id: str) -> dict[str, bool]:
    """Remove a Pokemon from the party."""
    user_id = require_user(user_id)
    member = await _owned_member(session, user_id, member_id)

    await session.delete(member)
    await session.commit()
    logger.info("Party member removed", member_id=member_id, run_id=member.run_id)
    return {"success": True}


async def reorder(
    session: AsyncSession,
    user_id: str | None,
    member_id_1: str,
    member_id_2: str,
) -> dict[str, bool]:
    """Swap the slots of two party members of the same run."""
    user_id = require_user(user_id)
    first = await session.get(PartyPokemon, member_id_1)
    second = await session.get(PartyPokemon, member_id_2)

    if not owns(first, user_id) or not owns(second, user_id):
        raise Unauthorized(_MEMBER_NOT_FOUND)
    if first.run_id != second.run_id:
        raise CrossRunMismatch()

    now = now_ms()
    first.position, second.position = second.position, first.position
    first.updated_at = now
    second.updated_at = now
    await session.commit()

    logger.info(
        "Party reordered",
        run_id=first.run_id,
        swapped=[(first.id, first.position), (second.id, second.position)],
    )
    return {"success": True}


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

async def list_party(session: AsyncSession, user_id: str | None, run_id: str) -> list[PartyPokemon]:
    """The run's party sorted by slot; empty for unknown or foreign runs."""
    run = await get_run(session, user_id, run_id)
    if run is None:
        return []
    return sorted(await _load_party(session, run.id), key=lambda m: m.position)


async def get_member(session: AsyncSession, user_id: str | None, member_id: str) -> PartyPokemon | None:
    """A single party member owned by the user, or None."""
    if not user_id or not member_id:
        return None
    member = await session.get(PartyPokemon, member_id)
    return member if owns(member, user_id) else None


async def get_member_at(
    session: AsyncSession,
    user_id: str | None,
    run_id: str,
    position: int,
) -> PartyPokemon | None:
    """The member holding ``position`` in a run, or None."""
    run = await get_run(session, user_id, run_id)
    if run is None:
        return None
    result = await session.execute(
        select(PartyPokemon)
        .where(PartyPokemon.run_id == run.id, PartyPokemon.position == position)
        .limit(1)
    )
    return result.scalars().first()


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

async def _load_party(session: AsyncSession, run_id: str) -> list[PartyPokemon]:
    result = await session.execute(select(PartyPokemon).where(PartyPokemon.run_id == run_id))
    return list(result.scalars().all())


async def _owned_member(session: AsyncSession, user_id: str, member_id: str) -> PartyPokemon:
    member = await get_member(session, user_id, member_id)
    if member is None:
        raise Unauthorized(_MEMBER_NOT_FOUND)
    return member

"""Pokedex ledger - per-run seen/caught/owned status of each species."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from nuzdex.core.constants import CAPTURED_STATUSES, DEX_STATUSES
from nuzdex.core.errors import InvalidInput, Unauthorized
from nuzdex.core.identity import owns, require_user
from nuzdex.core.runs import get_run, owned_run
from nuzdex.core.schemas import DexEntryInput, validate
from nuzdex.database.models import PokedexEntry, now_ms
from nuzdex.logging import get_logger

logger = get_logger(__name__)


def _check_status(status: str) -> str:
    if status not in DEX_STATUSES:
        raise InvalidInput(f"Status must be one of: {', '.join(DEX_STATUSES)}.")
    return status


def _initial_caught_at(status: str, now: int) -> int | None:
    return now if status in CAPTURED_STATUSES else None


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------

async def upsert_entry(
    session: AsyncSession,
    user_id: str | None,
    run_id: str,
    pokemon_id: int,
    pokemon_name: str,
    status: str,
    location: str | None = None,
    notes: str | None = None,
) -> str:
    """Insert or update the entry for (run, species) and return its id.

    On update, status is overwritten and location/notes only when given.
    ``caught_at`` is stamped the first time the species reaches caught or
    owned and is never changed afterwards.
    """
    user_id = require_user(user_id)
    _check_status(status)
    run = await owned_run(session, user_id, run_id)

    existing = await _find_entry(session, run.id, pokemon_id)
    now = now_ms()

    if existing is not None:
        existing.status = status
        if location is not None:
            existing.location = location
        if notes is not None:
            existing.notes = notes
        if status in CAPTURED_STATUSES and existing.caught_at is None:
            existing.caught_at = now
        await session.commit()
        logger.info("Pokedex entry updated", run_id=run.id, pokemon_id=pokemon_id, status=status)
        return existing.id

    entry = PokedexEntry(
        run_id=run.id,
        user_id=user_id,
        pokemon_id=pokemon_id,
        pokemon_name=pokemon_name,
        status=status,
        caught_at=_initial_caught_at(status, now),
        location=location,
        notes=notes,
    )
    session.add(entry)
    await session.commit()
    logger.info("Pokedex entry created", run_id=run.id, pokemon_id=pokemon_id, status=status)
    return entry.id


async def bulk_add(
    session: AsyncSession,
    user_id: str | None,
    run_id: str,
    entries: Iterable[DexEntryInput | dict[str, Any]],
) -> dict[str, int]:
    """Insert entries for species not yet in the run.

    Unlike :func:`upsert_entry`, species already present are skipped and
    left untouched. Returns ``{"created": <count>}``.
    """
    user_id = require_user(user_id)
    run = await owned_run(session, user_id, run_id)
    items = [
        item if isinstance(item, DexEntryInput) else validate(DexEntryInput, item)
        for item in entries
    ]

    now = now_ms()
    created = 0
    for item in items:
        if await _find_entry(session, run.id, item.pokemon_id) is not None:
            continue
        session.add(PokedexEntry(
            run_id=run.id,
            user_id=user_id,
            pokemon_id=item.pokemon_id,
            pokemon_name=item.pokemon_name,
            status=item.status,
            caught_at=_initial_caught_at(item.status, now),
            location=item.location,
            notes=item.notes,
        ))
        # Flush so a duplicate species later in the same batch is seen
        await session.flush()
        created += 1

    await session.commit()
    logger.info("Pokedex bulk add", run_id=run.id, requested=len(items), created=created)
    return {"created": created}


async def delete_entry(session: AsyncSession, user_id: str | None, entry_id: str) -> dict[str, bool]:
    """Delete a single entry owned by the user."""
    user_id = require_user(user_id)
    entry = await session.get(PokedexEntry, entry_id)
    if not owns(entry, user_id):
        raise Unauthorized("Entry not found or unauthorized.")

    await session.delete(entry)
    await session.commit()
    logger.info("Pokedex entry deleted", entry_id=entry_id, user_id=user_id)
    return {"success": True}


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

async def list_entries(session: AsyncSession, user_id: str | None, run_id: str) -> list[PokedexEntry]:
    """All entries of a run, by dex number; empty for unknown or foreign runs."""
    run = await get_run(session, user_id, run_id)
    if run is None:
        return []
    result = await session.execute(
        select(PokedexEntry)
        .where(PokedexEntry.run_id == run.id)
        .order_by(PokedexEntry.pokemon_id)
    )
    return list(result.scalars().all())


async def get_stats(session: AsyncSession, user_id: str | None, run_id: str) -> dict[str, int] | None:
    """Count entries per status by scanning the run's entries."""
    run = await get_run(session, user_id, run_id)
    if run is None:
        return None

    entries = await list_entries(session, user_id, run.id)
    stats = {"total": len(entries)}
    for status in DEX_STATUSES:
        stats[status] = sum(1 for e in entries if e.status == status)
    return stats


async def get_entry(
    session: AsyncSession,
    user_id: str | None,
    run_id: str,
    pokemon_id: int,
) -> PokedexEntry | None:
    """The entry for one species in a run, or None."""
    run = await get_run(session, user_id, run_id)
    if run is None:
        return None
    return await _find_entry(session, run.id, pokemon_id)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

async def _find_entry(session: AsyncSession, run_id: str, pokemon_id: int) -> PokedexEntry | None:
    result = await session.execute(
        select(PokedexEntry)
        .where(PokedexEntry.run_id == run_id, PokedexEntry.pokemon_id == pokemon_id)
        .limit(1)
    )
    return result.scalars().first()

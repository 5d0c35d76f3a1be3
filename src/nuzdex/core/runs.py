"""Run registry - create, list, activate, update and delete playthroughs."""

from __future__ import annotations

from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from nuzdex.core.errors import InvalidInput, RunNotFound
from nuzdex.core.identity import owns, require_user
from nuzdex.database.models import PartyPokemon, PokedexEntry, Run, now_ms
from nuzdex.logging import get_logger

logger = get_logger(__name__)

# Child tables removed when their run is deleted, in deletion order
RUN_CHILDREN = (PokedexEntry, PartyPokemon)

_UPDATABLE_FIELDS = ("name", "game", "description", "is_active")
_REQUIRED_FIELDS = frozenset({"name", "game", "is_active"})


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------

async def create_run(
    session: AsyncSession,
    user_id: str | None,
    name: str,
    game: str,
    description: str | None = None,
    set_active: bool = False,
) -> str:
    """Create a new run and return its id.

    With ``set_active`` any currently active run of the user is deactivated
    first. The scan and the insert are separate statements, so two concurrent
    calls may both leave an active run behind.
    """
    user_id = require_user(user_id)
    name = name.strip()
    if not name or not game:
        raise InvalidInput("A run needs a name and a game.")

    now = now_ms()
    if set_active:
        await _deactivate_runs(session, user_id, now)

    run = Run(
        user_id=user_id,
        name=name,
        game=game,
        description=description,
        is_active=bool(set_active),
        created_at=now,
        updated_at=now,
    )
    session.add(run)
    await session.commit()

    logger.info("Run created", run_id=run.id, user_id=user_id, game=game, active=run.is_active)
    return run.id


async def update_run(
    session: AsyncSession,
    user_id: str | None,
    run_id: str,
    **fields: Any,
) -> str:
    """Patch a run with the supplied fields only.

    Setting ``is_active=True`` deactivates the user's other runs first.
    """
    user_id = require_user(user_id)
    unknown = set(fields) - set(_UPDATABLE_FIELDS)
    if unknown:
        raise InvalidInput(f"Unknown run field(s): {', '.join(sorted(unknown))}")

    cleared = _REQUIRED_FIELDS.intersection(k for k, v in fields.items() if v is None)
    if cleared:
        raise InvalidInput(f"Cannot clear: {', '.join(sorted(cleared))}.")
    if "name" in fields:
        fields["name"] = fields["name"].strip()
        if not fields["name"]:
            raise InvalidInput("A run needs a name and a game.")
    if "game" in fields and not fields["game"]:
        raise InvalidInput("A run needs a name and a game.")

    run = await owned_run(session, user_id, run_id)
    now = now_ms()

    if fields.get("is_active"):
        await _deactivate_runs(session, user_id, now, exclude_id=run.id)

    for key, value in fields.items():
        setattr(run, key, value)
    run.updated_at = now
    await session.commit()

    logger.info("Run updated", run_id=run.id, user_id=user_id, fields=sorted(fields))
    return run.id


async def set_active_run(session: AsyncSession, user_id: str | None, run_id: str) -> str:
    """Make ``run_id`` the user's only active run."""
    return await update_run(session, user_id, run_id, is_active=True)


async def delete_run(session: AsyncSession, user_id: str | None, run_id: str) -> dict[str, bool]:
    """Delete a run with all of its Pokedex entries and party members.

    Each step commits on its own: a failure midway leaves the earlier
    deletions applied and the run still present.
    """
    user_id = require_user(user_id)
    run = await owned_run(session, user_id, run_id)

    for child in RUN_CHILDREN:
        result = await session.execute(delete(child).where(child.run_id == run.id))
        await session.commit()
        logger.debug("Run children deleted", run_id=run.id, table=child.__tablename__, count=result.rowcount)

    await session.delete(run)
    await session.commit()

    logger.info("Run deleted", run_id=run_id, user_id=user_id)
    return {"success": True}


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

async def list_runs(session: AsyncSession, user_id: str | None) -> list[Run]:
    """All runs of the user, newest first."""
    if not user_id:
        return []
    result = await session.execute(
        select(Run)
        .where(Run.user_id == user_id)
        .order_by(Run.created_at.desc(), Run.id.desc())
    )
    return list(result.scalars().all())


async def get_active_run(session: AsyncSession, user_id: str | None) -> Run | None:
    """The user's active run, or None.

    If a concurrent race left several active rows, the most recently
    updated one wins until the next activation settles it.
    """
    if not user_id:
        return None
    result = await session.execute(
        select(Run)
        .where(Run.user_id == user_id, Run.is_active.is_(True))
        .order_by(Run.updated_at.desc())
        .limit(1)
    )
    return result.scalars().first()


async def get_run(session: AsyncSession, user_id: str | None, run_id: str) -> Run | None:
    """A run owned by the user, or None for missing and foreign runs alike."""
    if not user_id or not run_id:
        return None
    run = await session.get(Run, run_id)
    return run if owns(run, user_id) else None


async def owned_run(session: AsyncSession, user_id: str | None, run_id: str) -> Run:
    """Load a run for a mutation, raising RunNotFound unless the user owns it."""
    run = await get_run(session, require_user(user_id), run_id)
    if run is None:
        raise RunNotFound()
    return run


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

async def _deactivate_runs(
    session: AsyncSession,
    user_id: str,
    now: int,
    exclude_id: str | None = None,
) -> int:
    """Flip every active run of the user (except ``exclude_id``) to inactive."""
    result = await session.execute(select(Run).where(Run.user_id == user_id))
    flipped = 0
    for run in result.scalars().all():
        if run.id != exclude_id and run.is_active:
            run.is_active = False
            run.updated_at = now
            flipped += 1
    if flipped:
        await session.flush()
    return flipped

"""Per-user browsing preferences (game filter and detail sections)."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from nuzdex.config import settings
from nuzdex.core.constants import DETAIL_SECTIONS
from nuzdex.core.errors import InvalidInput
from nuzdex.core.identity import require_user
from nuzdex.database.models import UserPreferences
from nuzdex.logging import get_logger

logger = get_logger(__name__)


def default_sections() -> list[str]:
    """Sections shown to users without saved preferences."""
    return [s for s in settings.default_sections if s in DETAIL_SECTIONS]


async def save_preferences(
    session: AsyncSession,
    user_id: str | None,
    selected_game: str,
    selected_sections: list[str],
) -> str:
    """Create or replace the user's preferences row and return its id."""
    user_id = require_user(user_id)
    unknown = [s for s in selected_sections if s not in DETAIL_SECTIONS]
    if unknown:
        raise InvalidInput(f"Unknown section(s): {', '.join(unknown)}")

    # Keep catalog order, drop duplicates
    chosen = set(selected_sections)
    sections = [s for s in DETAIL_SECTIONS if s in chosen]

    prefs = await get_preferences(session, user_id)
    if prefs is None:
        prefs = UserPreferences(
            user_id=user_id,
            selected_game=selected_game,
            selected_sections=sections,
        )
        session.add(prefs)
    else:
        prefs.selected_game = selected_game
        prefs.selected_sections = sections
    await session.commit()

    logger.info("Preferences saved", user_id=user_id, game=selected_game, sections=len(sections))
    return prefs.id


async def get_preferences(session: AsyncSession, user_id: str | None) -> UserPreferences | None:
    """The user's preferences row, or None."""
    if not user_id:
        return None
    result = await session.execute(
        select(UserPreferences).where(UserPreferences.user_id == user_id).limit(1)
    )
    return result.scalars().first()


async def get_sections(session: AsyncSession, user_id: str | None) -> list[str]:
    """Saved sections, falling back to the defaults."""
    prefs = await get_preferences(session, user_id)
    if prefs is None:
        return default_sections()
    return list(prefs.selected_sections)


async def toggle_section(session: AsyncSession, user_id: str | None, section: str) -> list[str]:
    """Add or remove one section and return the resulting selection."""
    user_id = require_user(user_id)
    if section not in DETAIL_SECTIONS:
        raise InvalidInput(f"Unknown section: {section}")

    prefs = await get_preferences(session, user_id)
    current = list(prefs.selected_sections) if prefs else default_sections()
    if section in current:
        current.remove(section)
    else:
        current.append(section)

    game = prefs.selected_game if prefs else ""
    await save_preferences(session, user_id, game, current)
    return [s for s in DETAIL_SECTIONS if s in current]

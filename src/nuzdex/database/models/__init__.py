"""Database models package."""

from nuzdex.database.models.base import Base, IdMixin, TimestampMixin, new_id, now_ms
from nuzdex.database.models.party import PartyPokemon
from nuzdex.database.models.pokedex import PokedexEntry
from nuzdex.database.models.preferences import UserPreferences
from nuzdex.database.models.run import Run

__all__ = [
    # Base
    "Base",
    "IdMixin",
    "TimestampMixin",
    "new_id",
    "now_ms",
    # Runs and their children
    "Run",
    "PokedexEntry",
    "PartyPokemon",
    # Preferences
    "UserPreferences",
]

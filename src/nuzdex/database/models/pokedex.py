"""Pokedex entry model for tracking seen/caught Pokemon per run."""

from sqlalchemy import BigInteger, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from nuzdex.database.models.base import Base, IdMixin


class PokedexEntry(Base, IdMixin):
    """Encounter/capture status of one species within one run."""

    __tablename__ = "pokedex_entries"
    __table_args__ = (
        Index("ix_pokedex_entries_run", "run_id"),
        Index("ix_pokedex_entries_user", "user_id"),
        # Not unique: one entry per pair is kept by upsert
        Index("ix_pokedex_entries_run_pokemon", "run_id", "pokemon_id"),
    )

    run_id: Mapped[str] = mapped_column(String(36), ForeignKey("runs.id"), nullable=False)

    # Denormalized copy of the run owner
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)

    # Species (national dex number, caller supplied)
    pokemon_id: Mapped[int] = mapped_column(Integer, nullable=False)
    pokemon_name: Mapped[str] = mapped_column(String(100), nullable=False)

    # seen | caught | owned
    status: Mapped[str] = mapped_column(String(10), nullable=False)

    # First transition into caught/owned, never overwritten
    caught_at: Mapped[int | None] = mapped_column(BigInteger, nullable=True)

    location: Mapped[str | None] = mapped_column(String(100), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<PokedexEntry run={self.run_id} #{self.pokemon_id} {self.status}>"

    @property
    def is_captured(self) -> bool:
        """Whether the species has been caught at some point in the run."""
        return self.caught_at is not None

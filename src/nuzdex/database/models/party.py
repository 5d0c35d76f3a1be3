"""Party Pokemon model - up to six active slots per run."""

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from nuzdex.database.models.base import Base, IdMixin, JSONType, TimestampMixin


class PartyPokemon(Base, IdMixin, TimestampMixin):
    """One Pokemon slotted in a run's party."""

    __tablename__ = "party_pokemon"
    __table_args__ = (
        Index("ix_party_pokemon_run", "run_id"),
        Index("ix_party_pokemon_user", "user_id"),
        Index("ix_party_pokemon_run_position", "run_id", "position"),
    )

    run_id: Mapped[str] = mapped_column(String(36), ForeignKey("runs.id"), nullable=False)

    # Denormalized copy of the run owner
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)

    # Species reference
    pokemon_id: Mapped[int] = mapped_column(Integer, nullable=False)
    pokemon_name: Mapped[str] = mapped_column(String(100), nullable=False)

    nickname: Mapped[str | None] = mapped_column(String(50), nullable=True)
    level: Mapped[int] = mapped_column(Integer, nullable=False)

    # Party slot, 0-5, unique within a run
    position: Mapped[int] = mapped_column(Integer, nullable=False)

    # Gender (male, female, genderless or None)
    gender: Mapped[str | None] = mapped_column(String(10), nullable=True)
    is_shiny: Mapped[bool | None] = mapped_column(Boolean, nullable=True)

    nature: Mapped[str | None] = mapped_column(String(20), nullable=True)
    ability: Mapped[str | None] = mapped_column(String(50), nullable=True)
    held_item: Mapped[str | None] = mapped_column(String(50), nullable=True)

    # Moves (up to 4)
    moves: Mapped[list | None] = mapped_column(JSONType, nullable=True)

    # Stat blocks keyed by hp/attack/defense/specialAttack/specialDefense/speed
    stats: Mapped[dict | None] = mapped_column(JSONType, nullable=True)
    ivs: Mapped[dict | None] = mapped_column(JSONType, nullable=True)
    evs: Mapped[dict | None] = mapped_column(JSONType, nullable=True)

    is_fainted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<PartyPokemon {self.id} slot={self.position} {self.display_name} Lv.{self.level}>"

    @property
    def display_name(self) -> str:
        """Get display name (nickname or species name)."""
        return self.nickname or self.pokemon_name

    @property
    def iv_total(self) -> int | None:
        """Get total IV sum, if IVs were recorded."""
        if not self.ivs:
            return None
        return sum(self.ivs.values())

    @property
    def ev_total(self) -> int | None:
        """Get total EV sum, if EVs were recorded."""
        if not self.evs:
            return None
        return sum(self.evs.values())

"""Run model - one tracked playthrough of a game."""

from sqlalchemy import Boolean, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from nuzdex.database.models.base import Base, IdMixin, TimestampMixin


class Run(Base, IdMixin, TimestampMixin):
    """A user's playthrough of a single game."""

    __tablename__ = "runs"
    __table_args__ = (
        Index("ix_runs_user", "user_id"),
        Index("ix_runs_user_active", "user_id", "is_active"),
    )

    # Owner (opaque identity-provider id)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)

    # Display info
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    game: Mapped[str] = mapped_column(String(64), nullable=False)  # see core.constants.GAMES
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # At most one active run per user, maintained by scan-and-flip
    is_active: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    def __repr__(self) -> str:
        flag = " *" if self.is_active else ""
        return f"<Run {self.id} {self.name!r} ({self.game}){flag}>"

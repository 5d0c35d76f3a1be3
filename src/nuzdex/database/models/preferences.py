"""Per-user browsing preferences."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from nuzdex.database.models.base import Base, IdMixin, JSONType


class UserPreferences(Base, IdMixin):
    """Last selected game filter and visible detail sections."""

    __tablename__ = "user_preferences"

    user_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, index=True)
    selected_game: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    selected_sections: Mapped[list] = mapped_column(JSONType, nullable=False, default=list)

    def __repr__(self) -> str:
        return f"<UserPreferences {self.user_id} game={self.selected_game!r}>"

"""Identity gate shared by all core operations.

The caller is represented by an opaque user id string, or ``None`` when no
identity could be resolved. Queries treat ``None`` as "nothing to show";
mutations refuse with :class:`Unauthenticated`.
"""

from nuzdex.core.errors import Unauthenticated


def resolve_user_id(raw_id: int | str | None) -> str | None:
    """Normalize an identity-provider id (e.g. a Telegram user id)."""
    if raw_id is None:
        return None
    value = str(raw_id).strip()
    return value or None


def require_user(user_id: str | None) -> str:
    """Return the caller id or raise for anonymous mutations."""
    if not user_id:
        raise Unauthenticated()
    return user_id


def owns(record: object | None, user_id: str | None) -> bool:
    """Whether ``record`` exists and carries ``user_id`` as its owner."""
    return record is not None and user_id is not None and getattr(record, "user_id", None) == user_id

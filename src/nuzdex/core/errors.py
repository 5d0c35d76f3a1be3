"""Named errors raised by core operations.

Every error carries a human-readable ``message`` that the bot shows as-is.
Reads on missing or foreign records return ``None``/``[]`` instead of raising.
"""


class NuzdexError(Exception):
    """Base class for all Nuzdex errors."""

    default_message = "Something went wrong."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthenticated(NuzdexError):
    """No caller identity could be resolved."""

    default_message = "Not authenticated."


class Unauthorized(NuzdexError):
    """Record does not exist or belongs to someone else.

    Both cases raise the same error.
    """

    default_message = "Not found or unauthorized."


class RunNotFound(Unauthorized):
    """Run id does not resolve to a run owned by the caller."""

    default_message = "Run not found or unauthorized."


class PartyFull(NuzdexError):
    """Party already holds six Pokemon and no slot was given."""

    default_message = "Party is full (max 6 Pokémon)."


class InvalidPosition(NuzdexError):
    """Party slot outside 0-5, or no free slot left."""

    default_message = "Invalid position."


class PositionOccupied(NuzdexError):
    """Party slot already held by another Pokemon of the run."""

    def __init__(self, position: int) -> None:
        self.position = position
        super().__init__(f"Position {position} is already occupied.")


class CrossRunMismatch(NuzdexError):
    """Reorder across two different runs."""

    default_message = "Pokémon must be in the same run."


class InvalidInput(NuzdexError):
    """Field value rejected by validation."""

    default_message = "Invalid input."


class SpeciesLookupError(NuzdexError):
    """PokeAPI request failed."""

    default_message = "Could not fetch Pokémon data."

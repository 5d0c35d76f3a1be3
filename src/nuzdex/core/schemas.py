"""Input validation models for core operations."""

from __future__ import annotations

from typing import Any, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from nuzdex.core.constants import MAX_LEVEL, MAX_MOVES
from nuzdex.core.errors import InvalidInput

DexStatus = Literal["seen", "caught", "owned"]
Gender = Literal["male", "female", "genderless"]

ModelT = TypeVar("ModelT", bound=BaseModel)


class StatBlock(BaseModel):
    """Six named stat values (base stats, IVs or EVs)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    hp: float
    attack: float
    defense: float
    special_attack: float
    special_defense: float
    speed: float

    def as_record(self) -> dict[str, int | float]:
        """Dump with camelCase keys, keeping integral values as ints."""
        return {
            key: int(value) if float(value).is_integer() else value
            for key, value in self.model_dump(by_alias=True).items()
        }


class DexEntryInput(BaseModel):
    """One item of a bulk Pokedex import."""

    model_config = ConfigDict(extra="forbid")

    pokemon_id: int
    pokemon_name: str = Field(min_length=1)
    status: DexStatus
    location: str | None = None
    notes: str | None = None


class PartyFields(BaseModel):
    """Optional party member fields, shared by add and update."""

    model_config = ConfigDict(extra="forbid")

    nickname: str | None = None
    level: int | None = Field(default=None, ge=1, le=MAX_LEVEL)
    position: int | None = None
    gender: Gender | None = None
    is_shiny: bool | None = None
    nature: str | None = None
    ability: str | None = None
    held_item: str | None = None
    moves: list[str] | None = None
    stats: StatBlock | None = None
    ivs: StatBlock | None = None
    evs: StatBlock | None = None
    is_fainted: bool | None = None
    notes: str | None = None

    @field_validator("moves")
    @classmethod
    def _max_four_moves(cls, moves: list[str] | None) -> list[str] | None:
        if moves is not None and len(moves) > MAX_MOVES:
            raise ValueError(f"a Pokémon knows at most {MAX_MOVES} moves")
        return moves

    def supplied(self) -> dict[str, Any]:
        """Only the fields the caller actually passed, ready for the row."""
        data: dict[str, Any] = {}
        for name in self.model_fields_set:
            value = getattr(self, name)
            if isinstance(value, StatBlock):
                value = value.as_record()
            data[name] = value
        return data


# Columns that may be omitted but never cleared
NON_NULLABLE_PARTY_FIELDS = frozenset({"level", "position", "is_fainted"})


def validate(model: type[ModelT], data: Any) -> ModelT:
    """Validate ``data`` against ``model``, raising InvalidInput on failure."""
    try:
        return model.model_validate(data)
    except ValidationError as e:
        first = e.errors()[0]
        where = ".".join(str(part) for part in first["loc"]) or model.__name__
        raise InvalidInput(f"Invalid {where}: {first['msg']}") from e

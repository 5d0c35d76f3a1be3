"""PokeAPI client for the species browser.

Only the /poke browser uses this module; runs, Pokedex entries and party
members never validate species against it.
"""

from __future__ import annotations

import re
from typing import Any

import httpx

from nuzdex.config import settings
from nuzdex.core.errors import SpeciesLookupError
from nuzdex.logging import get_logger

logger = get_logger(__name__)

_ID_IN_URL = re.compile(r"/(\d+)/?$")

# Sections that need the species resource in addition to /pokemon
_SPECIES_SECTIONS = {"description", "evolution", "eggGroups", "captureInfo"}

MAX_LISTED_MOVES = 12
MAX_LISTED_LOCATIONS = 10


class PokeAPIClient:
    """Thin async wrapper around the PokeAPI REST endpoints."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=(base_url or settings.pokeapi_base_url).rstrip("/"),
            timeout=timeout or settings.pokeapi_timeout_seconds,
            headers={"User-Agent": "nuzdex"},
            transport=transport,
        )

    async def __aenter__(self) -> PokeAPIClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _get(self, path: str, what: str, params: dict[str, Any] | None = None) -> Any:
        try:
            resp = await self._client.get(path, params=params)
        except httpx.HTTPError as e:
            logger.warning("PokeAPI request failed", path=path, error=str(e))
            raise SpeciesLookupError(f"Failed to fetch {what}.") from e

        if not resp.is_success:
            logger.info("PokeAPI non-OK response", path=path, status=resp.status_code)
            raise SpeciesLookupError(f"Failed to fetch {what}.")
        return resp.json()

    # -- resources -------------------------------------------------------

    async def list_pokemon(self, limit: int = 1000, offset: int = 0) -> dict[str, Any]:
        return await self._get("/pokemon", "Pokémon list", params={"limit": limit, "offset": offset})

    async def get_pokemon(self, name_or_id: str | int) -> dict[str, Any]:
        key = normalize_key(name_or_id)
        return await self._get(f"/pokemon/{key}", f"Pokémon details for {key}")

    async def get_species(self, name_or_id: str | int) -> dict[str, Any]:
        key = normalize_key(name_or_id)
        return await self._get(f"/pokemon-species/{key}", f"Pokémon species for {key}")

    async def get_evolution_chain(self, chain_id: int) -> dict[str, Any]:
        return await self._get(f"/evolution-chain/{chain_id}", f"evolution chain {chain_id}")

    async def get_type(self, name_or_id: str | int) -> dict[str, Any]:
        key = normalize_key(name_or_id)
        return await self._get(f"/type/{key}", f"type {key}")

    async def get_move(self, name_or_id: str | int) -> dict[str, Any]:
        key = normalize_key(name_or_id)
        return await self._get(f"/move/{key}", f"move {key}")

    async def get_encounters(self, pokemon_id: int) -> list[dict[str, Any]]:
        return await self._get(f"/pokemon/{pokemon_id}/encounters", f"location encounters for {pokemon_id}")

    # -- composite -------------------------------------------------------

    async def browse(
        self,
        name_or_id: str | int,
        sections: list[str],
        game: str | None = None,
    ) -> dict[str, Any]:
        """Fetch what ``sections`` need and summarize it."""
        pokemon = await self.get_pokemon(name_or_id)

        species = None
        evolution = None
        if _SPECIES_SECTIONS.intersection(sections):
            species = await self.get_species(pokemon["species"]["name"])
            if "evolution" in sections and species.get("evolution_chain"):
                chain_id = extract_id_from_url(species["evolution_chain"]["url"])
                evolution = await self.get_evolution_chain(chain_id)

        type_details = None
        if "typeEffectiveness" in sections:
            type_details = [await self.get_type(t["type"]["name"]) for t in pokemon["types"]]

        encounters = None
        if "locations" in sections:
            encounters = await self.get_encounters(pokemon["id"])

        return summarize_pokemon(
            pokemon,
            sections,
            species=species,
            evolution=evolution,
            type_details=type_details,
            encounters=encounters,
            game=game,
        )


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------

def normalize_key(name_or_id: str | int) -> str:
    """PokeAPI keys are lowercase names with dashes, or numeric ids."""
    return str(name_or_id).strip().lower().replace(" ", "-")


def extract_id_from_url(url: str) -> int:
    """Trailing numeric id of a PokeAPI resource URL, or 0."""
    match = _ID_IN_URL.search(url or "")
    return int(match.group(1)) if match else 0


def pretty(name: str) -> str:
    return name.replace("-", " ").title()


def _english(entries: list[dict[str, Any]], field: str) -> str | None:
    for entry in entries:
        if entry.get("language", {}).get("name") == "en":
            return " ".join(entry[field].split())
    return None


def _evolution_names(chain: dict[str, Any]) -> list[str]:
    names = [pretty(chain["species"]["name"])]
    for child in chain.get("evolves_to", []):
        names.extend(_evolution_names(child))
    return names


def type_multipliers(type_details: list[dict[str, Any]]) -> dict[str, float]:
    """Damage multiplier per attacking type against a (dual) typing.

    Neutral (1x) matchups are omitted.
    """
    multipliers: dict[str, float] = {}
    factors = (
        ("double_damage_from", 2.0),
        ("half_damage_from", 0.5),
        ("no_damage_from", 0.0),
    )
    for detail in type_details:
        relations = detail.get("damage_relations", {})
        for key, factor in factors:
            for attacker in relations.get(key, []):
                name = attacker["name"]
                multipliers[name] = multipliers.get(name, 1.0) * factor
    return {name: m for name, m in sorted(multipliers.items()) if m != 1.0}


def summarize_pokemon(
    pokemon: dict[str, Any],
    sections: list[str],
    species: dict[str, Any] | None = None,
    evolution: dict[str, Any] | None = None,
    type_details: list[dict[str, Any]] | None = None,
    encounters: list[dict[str, Any]] | None = None,
    game: str | None = None,
) -> dict[str, Any]:
    """Reduce raw PokeAPI payloads to the requested sections."""
    summary: dict[str, Any] = {
        "id": pokemon["id"],
        "name": pretty(pokemon["name"]),
        "sections": {},
    }
    out = summary["sections"]

    for section in sections:
        if section == "types":
            out[section] = [t["type"]["name"] for t in pokemon["types"]]
        elif section == "stats":
            out[section] = {s["stat"]["name"]: s["base_stat"] for s in pokemon["stats"]}
        elif section == "abilities":
            out[section] = [
                pretty(a["ability"]["name"]) + (" (hidden)" if a.get("is_hidden") else "")
                for a in pokemon["abilities"]
            ]
        elif section == "physicalStats":
            # PokeAPI uses decimetres and hectograms
            out[section] = {
                "height_m": pokemon.get("height", 0) / 10,
                "weight_kg": pokemon.get("weight", 0) / 10,
            }
        elif section == "heldItems":
            out[section] = [pretty(h["item"]["name"]) for h in pokemon.get("held_items", [])]
        elif section == "moves":
            moves = pokemon.get("moves", [])
            if game:
                moves = [
                    m for m in moves
                    if any(d["version_group"]["name"] == game for d in m.get("version_group_details", []))
                ]
            out[section] = [pretty(m["move"]["name"]) for m in moves[:MAX_LISTED_MOVES]]
        elif section == "description" and species is not None:
            out[section] = _english(species.get("flavor_text_entries", []), "flavor_text")
        elif section == "eggGroups" and species is not None:
            out[section] = {
                "groups": [pretty(g["name"]) for g in species.get("egg_groups", [])],
                "hatch_counter": species.get("hatch_counter"),
            }
        elif section == "captureInfo" and species is not None:
            growth = species.get("growth_rate") or {}
            out[section] = {
                "capture_rate": species.get("capture_rate"),
                "base_happiness": species.get("base_happiness"),
                "growth_rate": pretty(growth["name"]) if growth.get("name") else None,
            }
        elif section == "evolution" and evolution is not None:
            out[section] = _evolution_names(evolution["chain"])
        elif section == "typeEffectiveness" and type_details is not None:
            out[section] = type_multipliers(type_details)
        elif section == "locations" and encounters is not None:
            areas = [pretty(e["location_area"]["name"]) for e in encounters]
            out[section] = areas[:MAX_LISTED_LOCATIONS]

    return summary

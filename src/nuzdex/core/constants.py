"""Centralized constants for Nuzdex.

Game catalog, party rules and detail-section ids live here.
Import from this module instead of hardcoding values in handlers.
"""

# ------------------------------------------------------------------ #
# Game catalog (id -> display name), oldest first
# ------------------------------------------------------------------ #
GAMES: dict[str, str] = {
    "red-blue": "Red/Blue",
    "yellow": "Yellow",
    "gold-silver": "Gold/Silver",
    "crystal": "Crystal",
    "ruby-sapphire": "Ruby/Sapphire",
    "emerald": "Emerald",
    "firered-leafgreen": "FireRed/LeafGreen",
    "diamond-pearl": "Diamond/Pearl",
    "platinum": "Platinum",
    "heartgold-soulsilver": "HeartGold/SoulSilver",
    "black-white": "Black/White",
    "black-2-white-2": "Black 2/White 2",
    "x-y": "X/Y",
    "omega-ruby-alpha-sapphire": "Omega Ruby/Alpha Sapphire",
    "sun-moon": "Sun/Moon",
    "ultra-sun-ultra-moon": "Ultra Sun/Ultra Moon",
    "lets-go-pikachu-lets-go-eevee": "Let's Go Pikachu/Eevee",
    "sword-shield": "Sword/Shield",
    "brilliant-diamond-shining-pearl": "Brilliant Diamond/Shining Pearl",
    "legends-arceus": "Legends: Arceus",
    "scarlet-violet": "Scarlet/Violet",
}


def game_name(game_id: str) -> str:
    """Display name for a game id, falling back to the raw id."""
    return GAMES.get(game_id, game_id)


# ------------------------------------------------------------------ #
# Pokedex
# ------------------------------------------------------------------ #
# seen = encountered, caught = in boxes, owned = currently have
DEX_STATUSES: tuple[str, ...] = ("seen", "caught", "owned")
CAPTURED_STATUSES: frozenset[str] = frozenset({"caught", "owned"})

# ------------------------------------------------------------------ #
# Party
# ------------------------------------------------------------------ #
PARTY_SIZE: int = 6
PARTY_POSITIONS: range = range(PARTY_SIZE)
MAX_MOVES: int = 4
MAX_LEVEL: int = 100
GENDERS: tuple[str, ...] = ("male", "female", "genderless")
STAT_KEYS: tuple[str, ...] = (
    "hp",
    "attack",
    "defense",
    "specialAttack",
    "specialDefense",
    "speed",
)

# ------------------------------------------------------------------ #
# Browsing detail sections (id -> label), in display order
# ------------------------------------------------------------------ #
DETAIL_SECTIONS: dict[str, str] = {
    "types": "Types",
    "stats": "Base Stats",
    "abilities": "Abilities",
    "physicalStats": "Physical Stats",
    "typeEffectiveness": "Type Effectiveness",
    "description": "Description",
    "evolution": "Evolution Chain",
    "moves": "Moves",
    "eggGroups": "Egg Groups & Breeding",
    "locations": "Catch Locations",
    "heldItems": "Held Items",
    "captureInfo": "Capture Info",
}

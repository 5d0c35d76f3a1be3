"""Core operations: runs, Pokedex ledger, party roster and preferences."""

from nuzdex.core.errors import (
    CrossRunMismatch,
    InvalidInput,
    InvalidPosition,
    NuzdexError,
    PartyFull,
    PositionOccupied,
    RunNotFound,
    SpeciesLookupError,
    Unauthenticated,
    Unauthorized,
)
from nuzdex.core.party import (
    add_member,
    get_member,
    get_member_at,
    list_party,
    remove_member,
    reorder,
    update_member,
)
from nuzdex.core.pokedex import (
    bulk_add,
    delete_entry,
    get_entry,
    get_stats,
    list_entries,
    upsert_entry,
)
from nuzdex.core.preferences import get_preferences, get_sections, save_preferences, toggle_section
from nuzdex.core.runs import (
    create_run,
    delete_run,
    get_active_run,
    get_run,
    list_runs,
    set_active_run,
    update_run,
)

__all__ = [
    # Errors
    "NuzdexError",
    "Unauthenticated",
    "Unauthorized",
    "RunNotFound",
    "PartyFull",
    "InvalidPosition",
    "PositionOccupied",
    "CrossRunMismatch",
    "InvalidInput",
    "SpeciesLookupError",
    # Runs
    "create_run",
    "list_runs",
    "get_active_run",
    "get_run",
    "update_run",
    "set_active_run",
    "delete_run",
    # Pokedex
    "upsert_entry",
    "list_entries",
    "get_stats",
    "get_entry",
    "delete_entry",
    "bulk_add",
    # Party
    "add_member",
    "list_party",
    "get_member",
    "get_member_at",
    "update_member",
    "remove_member",
    "reorder",
    # Preferences
    "save_preferences",
    "get_preferences",
    "get_sections",
    "toggle_section",
]

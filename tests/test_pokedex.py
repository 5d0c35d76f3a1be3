"""Tests for the per-run Pokedex ledger."""
import pytest

from nuzdex.core.errors import InvalidInput, RunNotFound, Unauthenticated, Unauthorized
from nuzdex.core.pokedex import (
    bulk_add,
    delete_entry,
    get_entry,
    get_stats,
    list_entries,
    upsert_entry,
)
from nuzdex.core.runs import create_run
from nuzdex.core.schemas import DexEntryInput

from .conftest import ASH, MISTY


class TestUpsertEntry:
    async def test_creates_seen_entry_without_caught_at(self, session, run_id):
        entry_id = await upsert_entry(session, ASH, run_id, 25, "pikachu", "seen", location="Route 1")

        entry = await get_entry(session, ASH, run_id, 25)
        assert entry.id == entry_id
        assert entry.status == "seen"
        assert entry.location == "Route 1"
        assert entry.caught_at is None
        assert entry.is_captured is False

    @pytest.mark.parametrize("status", ["caught", "owned"])
    async def test_captured_status_stamps_caught_at(self, session, run_id, clock, status):
        await upsert_entry(session, ASH, run_id, 1, "bulbasaur", status)

        entry = await get_entry(session, ASH, run_id, 1)
        assert entry.caught_at == clock.now
        assert entry.is_captured is True

    async def test_caught_at_is_set_once(self, session, run_id):
        await upsert_entry(session, ASH, run_id, 25, "pikachu", "seen")
        await upsert_entry(session, ASH, run_id, 25, "pikachu", "caught")
        first_catch = (await get_entry(session, ASH, run_id, 25)).caught_at
        assert first_catch is not None

        await upsert_entry(session, ASH, run_id, 25, "pikachu", "seen")
        await upsert_entry(session, ASH, run_id, 25, "pikachu", "owned")

        entry = await get_entry(session, ASH, run_id, 25)
        assert entry.status == "owned"
        assert entry.caught_at == first_catch

    async def test_update_keeps_one_row_per_species(self, session, run_id):
        first = await upsert_entry(session, ASH, run_id, 133, "eevee", "seen")
        second = await upsert_entry(session, ASH, run_id, 133, "eevee", "caught")

        assert first == second
        assert len(await list_entries(session, ASH, run_id)) == 1

    async def test_omitted_location_and_notes_are_kept(self, session, run_id):
        await upsert_entry(session, ASH, run_id, 7, "squirtle", "seen", location="Route 25", notes="gift")
        await upsert_entry(session, ASH, run_id, 7, "squirtle", "caught")

        entry = await get_entry(session, ASH, run_id, 7)
        assert entry.location == "Route 25"
        assert entry.notes == "gift"

    async def test_invalid_status_rejected(self, session, run_id):
        with pytest.raises(InvalidInput):
            await upsert_entry(session, ASH, run_id, 25, "pikachu", "fainted")
        assert await list_entries(session, ASH, run_id) == []

    async def test_foreign_run_refused(self, session, other_run_id):
        with pytest.raises(RunNotFound):
            await upsert_entry(session, ASH, other_run_id, 25, "pikachu", "seen")

    async def test_requires_identity(self, session, run_id):
        with pytest.raises(Unauthenticated):
            await upsert_entry(session, None, run_id, 25, "pikachu", "seen")

    async def test_same_species_in_two_runs_is_independent(self, session, run_id):
        other = await create_run(session, ASH, name="Second", game="emerald")
        await upsert_entry(session, ASH, run_id, 25, "pikachu", "owned")
        await upsert_entry(session, ASH, other, 25, "pikachu", "seen")

        assert (await get_entry(session, ASH, run_id, 25)).status == "owned"
        assert (await get_entry(session, ASH, other, 25)).status == "seen"


class TestBulkAdd:
    async def test_skips_existing_species(self, session, run_id):
        await upsert_entry(session, ASH, run_id, 4, "charmander", "owned", location="Starter")

        result = await bulk_add(session, ASH, run_id, [
            {"pokemon_id": 4, "pokemon_name": "charmander", "status": "seen", "location": "Elsewhere"},
            {"pokemon_id": 16, "pokemon_name": "pidgey", "status": "seen"},
            DexEntryInput(pokemon_id=19, pokemon_name="rattata", status="caught"),
        ])

        assert result == {"created": 2}
        existing = await get_entry(session, ASH, run_id, 4)
        assert existing.status == "owned"
        assert existing.location == "Starter"
        assert [e.pokemon_id for e in await list_entries(session, ASH, run_id)] == [4, 16, 19]
        assert (await get_entry(session, ASH, run_id, 19)).caught_at is not None
        assert (await get_entry(session, ASH, run_id, 16)).caught_at is None

    async def test_duplicates_within_batch_added_once(self, session, run_id):
        result = await bulk_add(session, ASH, run_id, [
            {"pokemon_id": 10, "pokemon_name": "caterpie", "status": "seen"},
            {"pokemon_id": 10, "pokemon_name": "caterpie", "status": "caught"},
        ])

        assert result == {"created": 1}
        assert (await get_entry(session, ASH, run_id, 10)).status == "seen"

    async def test_invalid_item_rejects_whole_batch(self, session, run_id):
        with pytest.raises(InvalidInput):
            await bulk_add(session, ASH, run_id, [
                {"pokemon_id": 10, "pokemon_name": "caterpie", "status": "seen"},
                {"pokemon_id": 13, "pokemon_name": "weedle", "status": "boxed"},
            ])
        assert await list_entries(session, ASH, run_id) == []

    async def test_empty_batch(self, session, run_id):
        assert await bulk_add(session, ASH, run_id, []) == {"created": 0}


class TestDeleteEntry:
    async def test_deletes_own_entry(self, session, run_id):
        entry_id = await upsert_entry(session, ASH, run_id, 25, "pikachu", "seen")

        assert await delete_entry(session, ASH, entry_id) == {"success": True}
        assert await get_entry(session, ASH, run_id, 25) is None

    async def test_foreign_entry_refused(self, session, other_run_id):
        entry_id = await upsert_entry(session, MISTY, other_run_id, 120, "staryu", "owned")

        with pytest.raises(Unauthorized) as exc:
            await delete_entry(session, ASH, entry_id)
        assert exc.value.message == "Entry not found or unauthorized."
        assert await get_entry(session, MISTY, other_run_id, 120) is not None

    async def test_missing_entry_refused(self, session):
        with pytest.raises(Unauthorized):
            await delete_entry(session, ASH, "missing")


class TestQueries:
    async def test_list_sorted_by_dex_number(self, session, run_id):
        for pokemon_id, name in [(150, "mewtwo"), (1, "bulbasaur"), (25, "pikachu")]:
            await upsert_entry(session, ASH, run_id, pokemon_id, name, "seen")

        entries = await list_entries(session, ASH, run_id)
        assert [e.pokemon_id for e in entries] == [1, 25, 150]

    async def test_stats_count_each_status(self, session, run_id):
        await upsert_entry(session, ASH, run_id, 1, "bulbasaur", "seen")
        await upsert_entry(session, ASH, run_id, 4, "charmander", "seen")
        await upsert_entry(session, ASH, run_id, 7, "squirtle", "caught")
        await upsert_entry(session, ASH, run_id, 25, "pikachu", "owned")

        stats = await get_stats(session, ASH, run_id)
        assert stats == {"total": 4, "seen": 2, "caught": 1, "owned": 1}
        assert stats["total"] == stats["seen"] + stats["caught"] + stats["owned"]

    async def test_stats_for_empty_run(self, session, run_id):
        assert await get_stats(session, ASH, run_id) == {"total": 0, "seen": 0, "caught": 0, "owned": 0}

    async def test_foreign_and_anonymous_reads_are_empty(self, session, other_run_id):
        await upsert_entry(session, MISTY, other_run_id, 120, "staryu", "owned")

        assert await list_entries(session, ASH, other_run_id) == []
        assert await get_stats(session, ASH, other_run_id) is None
        assert await get_entry(session, ASH, other_run_id, 120) is None
        assert await list_entries(session, None, other_run_id) == []
        assert await get_stats(session, None, other_run_id) is None

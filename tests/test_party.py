"""Tests for the party roster."""
import pytest

from nuzdex.bot.handlers.party import slot_changes
from nuzdex.core.errors import (
    CrossRunMismatch,
    InvalidInput,
    InvalidPosition,
    PartyFull,
    PositionOccupied,
    RunNotFound,
    Unauthenticated,
    Unauthorized,
)
from nuzdex.core.party import (
    add_member,
    check_position,
    first_free_position,
    get_member,
    get_member_at,
    list_party,
    remove_member,
    reorder,
    update_member,
)
from nuzdex.core.runs import create_run

from .conftest import ASH, MISTY

STARTERS = [
    (1, "bulbasaur"),
    (4, "charmander"),
    (7, "squirtle"),
    (25, "pikachu"),
    (133, "eevee"),
    (143, "snorlax"),
]


async def fill_party(session, run_id, count=6):
    return [
        await add_member(session, ASH, run_id, pokemon_id, name, level=10)
        for pokemon_id, name in STARTERS[:count]
    ]


class TestSlotHelpers:
    def test_first_free_position(self):
        assert first_free_position(set()) == 0
        assert first_free_position({0, 1, 3}) == 2
        assert first_free_position({0, 1, 2, 3, 4, 5}) is None

    @pytest.mark.parametrize("position", [-1, 6, None])
    def test_check_position_rejects(self, position):
        with pytest.raises(InvalidPosition):
            check_position(position)

    def test_check_position_accepts(self):
        assert check_position(5) == 5


class TestAddMember:
    async def test_auto_assigns_lowest_free_slot(self, session, run_id):
        ids = await fill_party(session, run_id, count=3)
        await remove_member(session, ASH, ids[1])

        new_id = await add_member(session, ASH, run_id, 16, "pidgey", level=3)

        assert (await get_member(session, ASH, new_id)).position == 1

    async def test_explicit_position(self, session, run_id):
        member_id = await add_member(session, ASH, run_id, 25, "pikachu", level=12, position=4)

        member = await get_member_at(session, ASH, run_id, 4)
        assert member.id == member_id

    async def test_optional_fields_stored(self, session, run_id):
        member_id = await add_member(
            session, ASH, run_id, 25, "pikachu",
            level=12,
            nickname="Sparky",
            gender="female",
            is_shiny=True,
            nature="Timid",
            moves=["thunder-shock", "growl"],
            ivs={"hp": 31, "attack": 0, "defense": 31, "specialAttack": 31, "specialDefense": 31, "speed": 31},
        )

        member = await get_member(session, ASH, member_id)
        assert member.nickname == "Sparky"
        assert member.display_name == "Sparky"
        assert member.gender == "female"
        assert member.is_shiny is True
        assert member.moves == ["thunder-shock", "growl"]
        assert member.ivs["specialAttack"] == 31
        assert member.iv_total == 155
        assert member.is_fainted is False

    async def test_seventh_member_is_refused(self, session, run_id):
        await fill_party(session, run_id)

        with pytest.raises(PartyFull) as exc:
            await add_member(session, ASH, run_id, 150, "mewtwo", level=70)
        assert exc.value.message == "Party is full (max 6 Pokémon)."
        assert len(await list_party(session, ASH, run_id)) == 6

    async def test_occupied_position_refused(self, session, run_id):
        await add_member(session, ASH, run_id, 1, "bulbasaur", level=5, position=2)

        with pytest.raises(PositionOccupied) as exc:
            await add_member(session, ASH, run_id, 4, "charmander", level=5, position=2)
        assert exc.value.position == 2
        assert exc.value.message == "Position 2 is already occupied."

    async def test_occupied_position_in_full_party(self, session, run_id):
        await fill_party(session, run_id)

        with pytest.raises(PositionOccupied):
            await add_member(session, ASH, run_id, 150, "mewtwo", level=70, position=3)

    @pytest.mark.parametrize("position", [-1, 6, 42])
    async def test_out_of_range_position_refused(self, session, run_id, position):
        with pytest.raises(InvalidPosition):
            await add_member(session, ASH, run_id, 1, "bulbasaur", level=5, position=position)

    @pytest.mark.parametrize("fields", [
        {"level": 0},
        {"level": 101},
        {"level": 5, "moves": ["tackle", "growl", "ember", "scratch", "smokescreen"]},
        {"level": 5, "gender": "unknown"},
        {"level": 5, "stats": {"hp": 45}},
        {"level": 5, "friendship": 70},
    ])
    async def test_invalid_fields_refused(self, session, run_id, fields):
        with pytest.raises(InvalidInput):
            await add_member(session, ASH, run_id, 4, "charmander", **fields)
        assert await list_party(session, ASH, run_id) == []

    async def test_new_member_is_never_fainted(self, session, run_id):
        member_id = await add_member(session, ASH, run_id, 4, "charmander", level=5, is_fainted=True)
        assert (await get_member(session, ASH, member_id)).is_fainted is False

    async def test_foreign_run_refused(self, session, other_run_id):
        with pytest.raises(RunNotFound):
            await add_member(session, ASH, other_run_id, 4, "charmander", level=5)

    async def test_requires_identity(self, session, run_id):
        with pytest.raises(Unauthenticated):
            await add_member(session, None, run_id, 4, "charmander", level=5)


class TestUpdateMember:
    async def test_partial_update(self, session, run_id):
        member_id = await add_member(session, ASH, run_id, 4, "charmander", level=5, nickname="Ember")
        before = (await get_member(session, ASH, member_id)).updated_at

        await update_member(session, ASH, member_id, level=16, is_fainted=True)

        member = await get_member(session, ASH, member_id)
        assert member.level == 16
        assert member.is_fainted is True
        assert member.nickname == "Ember"
        assert member.updated_at > before

    async def test_clear_optional_field(self, session, run_id):
        member_id = await add_member(session, ASH, run_id, 4, "charmander", level=5, nickname="Ember")

        await update_member(session, ASH, member_id, nickname=None)

        member = await get_member(session, ASH, member_id)
        assert member.nickname is None
        assert member.display_name == "charmander"

    @pytest.mark.parametrize("field", ["level", "position", "is_fainted"])
    async def test_required_fields_cannot_be_cleared(self, session, run_id, field):
        member_id = await add_member(session, ASH, run_id, 4, "charmander", level=5)

        with pytest.raises(InvalidInput):
            await update_member(session, ASH, member_id, **{field: None})

    async def test_detail_commands_apply(self, session, run_id):
        """Arguments built by the per-slot bot commands are accepted as-is."""
        member_id = await add_member(session, ASH, run_id, 25, "pikachu", level=12)

        for action, value in [
            ("moves", "Thunderbolt, Quick Attack"),
            ("ivs", "31 0 31 31 31 31"),
            ("evs", "0 0 4 252 0 252"),
            ("setinfo", "nature Timid"),
            ("setinfo", "item Light Ball"),
            ("setinfo", "gender f"),
            ("setinfo", "shiny yes"),
            ("setinfo", "notes Carried the Misty fight"),
        ]:
            await update_member(session, ASH, member_id, **slot_changes(action, value))

        member = await get_member(session, ASH, member_id)
        assert member.moves == ["thunderbolt", "quick-attack"]
        assert member.ivs["attack"] == 0
        assert member.iv_total == 155
        assert member.evs["specialAttack"] == 252
        assert member.nature == "Timid"
        assert member.held_item == "Light Ball"
        assert member.gender == "female"
        assert member.is_shiny is True
        assert member.notes == "Carried the Misty fight"

        await update_member(session, ASH, member_id, **slot_changes("setinfo", "item none"))
        assert (await get_member(session, ASH, member_id)).held_item is None

    async def test_move_to_free_slot(self, session, run_id):
        member_id = await add_member(session, ASH, run_id, 4, "charmander", level=5)

        await update_member(session, ASH, member_id, position=5)

        assert (await get_member_at(session, ASH, run_id, 5)).id == member_id
        assert await get_member_at(session, ASH, run_id, 0) is None

    async def test_move_to_occupied_slot_refused(self, session, run_id):
        _, second = await fill_party(session, run_id, count=2)

        with pytest.raises(PositionOccupied):
            await update_member(session, ASH, second, position=0)
        assert (await get_member(session, ASH, second)).position == 1

    async def test_same_position_is_allowed(self, session, run_id):
        member_id = await add_member(session, ASH, run_id, 4, "charmander", level=5, position=3)

        await update_member(session, ASH, member_id, position=3, level=6)

        assert (await get_member(session, ASH, member_id)).level == 6

    async def test_out_of_range_position_refused(self, session, run_id):
        member_id = await add_member(session, ASH, run_id, 4, "charmander", level=5)

        with pytest.raises(InvalidPosition):
            await update_member(session, ASH, member_id, position=6)

    async def test_foreign_member_refused(self, session, other_run_id):
        member_id = await add_member(session, MISTY, other_run_id, 120, "staryu", level=18)

        with pytest.raises(Unauthorized) as exc:
            await update_member(session, ASH, member_id, level=50)
        assert exc.value.message == "Pokémon not found or unauthorized."
        assert (await get_member(session, MISTY, member_id)).level == 18


class TestRemoveMember:
    async def test_frees_slot(self, session, run_id):
        ids = await fill_party(session, run_id)

        assert await remove_member(session, ASH, ids[0]) == {"success": True}

        assert len(await list_party(session, ASH, run_id)) == 5
        assert await get_member_at(session, ASH, run_id, 0) is None

    async def test_foreign_member_refused(self, session, other_run_id):
        member_id = await add_member(session, MISTY, other_run_id, 120, "staryu", level=18)

        with pytest.raises(Unauthorized):
            await remove_member(session, ASH, member_id)


class TestReorder:
    async def test_swaps_positions_only(self, session, run_id):
        ids = await fill_party(session, run_id, count=4)

        assert await reorder(session, ASH, ids[0], ids[3]) == {"success": True}

        party = await list_party(session, ASH, run_id)
        assert [m.id for m in party] == [ids[3], ids[1], ids[2], ids[0]]
        assert [m.position for m in party] == [0, 1, 2, 3]

    async def test_cross_run_refused(self, session, run_id):
        other = await create_run(session, ASH, name="Second", game="emerald")
        mine = await add_member(session, ASH, run_id, 4, "charmander", level=5)
        theirs = await add_member(session, ASH, other, 252, "treecko", level=5, position=3)

        with pytest.raises(CrossRunMismatch) as exc:
            await reorder(session, ASH, mine, theirs)
        assert exc.value.message == "Pokémon must be in the same run."
        assert (await get_member(session, ASH, mine)).position == 0
        assert (await get_member(session, ASH, theirs)).position == 3

    async def test_foreign_member_refused(self, session, run_id, other_run_id):
        mine = await add_member(session, ASH, run_id, 4, "charmander", level=5)
        theirs = await add_member(session, MISTY, other_run_id, 120, "staryu", level=18, position=2)

        with pytest.raises(Unauthorized):
            await reorder(session, ASH, mine, theirs)
        assert (await get_member(session, MISTY, theirs)).position == 2

    async def test_missing_member_refused(self, session, run_id):
        mine = await add_member(session, ASH, run_id, 4, "charmander", level=5)

        with pytest.raises(Unauthorized):
            await reorder(session, ASH, mine, "missing")


class TestQueries:
    async def test_list_sorted_by_position(self, session, run_id):
        for position, (pokemon_id, name) in zip([4, 0, 2], STARTERS):
            await add_member(session, ASH, run_id, pokemon_id, name, level=10, position=position)

        party = await list_party(session, ASH, run_id)
        assert [m.position for m in party] == [0, 2, 4]

    async def test_foreign_and_anonymous_reads_are_empty(self, session, other_run_id):
        member_id = await add_member(session, MISTY, other_run_id, 120, "staryu", level=18)

        assert await list_party(session, ASH, other_run_id) == []
        assert await get_member(session, ASH, member_id) is None
        assert await get_member_at(session, ASH, other_run_id, 0) is None
        assert await list_party(session, None, other_run_id) == []

"""Tests for the routine model and the stored routine library.

Covers: derived total duration across every structural edit, block
validation, save validation, serialization, library persistence and the
seed routines.
"""

import json
from datetime import datetime

import pytest

from cronos.errors import InvalidRoutine
from cronos.routines.library import ROUTINES_KEY, RoutineLibrary, default_routines
from cronos.routines.models import (
    Block, BlockKind, Routine, new_block, validate_for_save,
    DEFAULT_BLOCK_DURATION,
)

from helpers import make_routine, prep_work_routine


def _sum(routine: Routine) -> int:
    return sum(b.duration for b in routine.blocks)


# ═══════════════════════════════════════════════════════════════════════════
#  BLOCKS
# ═══════════════════════════════════════════════════════════════════════════


class TestBlock:

    def test_defaults(self):
        b = Block("Squats", 45)
        assert b.kind == BlockKind.WORK
        assert b.id

    def test_ids_are_unique(self):
        assert Block("a", 1).id != Block("a", 1).id

    @pytest.mark.parametrize("duration", [0, -5])
    def test_non_positive_duration_rejected(self, duration):
        with pytest.raises(ValueError):
            Block("Bad", duration)

    def test_non_integer_duration_rejected(self):
        with pytest.raises(ValueError):
            Block("Bad", 1.5)

    def test_new_block_matches_editor_default(self):
        b = new_block()
        assert b.name == "New block"
        assert b.duration == DEFAULT_BLOCK_DURATION == 60
        assert b.kind == BlockKind.WORK

    def test_blocks_are_immutable(self):
        b = Block("Squats", 45)
        with pytest.raises(AttributeError):
            b.duration = 10


# ═══════════════════════════════════════════════════════════════════════════
#  TOTAL DURATION INVARIANT
# ═══════════════════════════════════════════════════════════════════════════


class TestTotalDuration:

    def test_empty_routine_is_zero(self):
        assert Routine("Empty").total_duration == 0

    def test_sum_of_blocks(self):
        assert prep_work_routine().total_duration == 80

    def test_list_of_blocks_stored_as_tuple(self):
        r = Routine("R", blocks=[Block("a", 5)])
        assert isinstance(r.blocks, tuple)

    def test_invariant_holds_after_every_edit(self):
        r = prep_work_routine()
        first, second = r.blocks

        edits = [
            lambda x: x.with_block_added(Block("Rest", 15, BlockKind.REST)),
            lambda x: x.with_block_inserted(0, Block("Prep", 5, BlockKind.PREP)),
            lambda x: x.with_block_updated(first.id, duration=90),
            lambda x: x.with_block_duplicated(second.id),
            lambda x: x.with_block_moved(0, 1),
            lambda x: x.with_block_removed(first.id),
            lambda x: x.renamed("Renamed"),
        ]
        for edit in edits:
            r = edit(r)
            assert r.total_duration == _sum(r)

    def test_edits_leave_original_untouched(self):
        r = prep_work_routine()
        r.with_block_added(Block("Extra", 100))
        assert r.total_duration == 80
        assert r.block_count == 2


# ═══════════════════════════════════════════════════════════════════════════
#  STRUCTURAL EDITS
# ═══════════════════════════════════════════════════════════════════════════


class TestEdits:

    def test_move_down_swaps(self):
        r = prep_work_routine()
        moved = r.with_block_moved(0, 1)
        assert [b.name for b in moved.blocks] == ["Sprint", "Warm-up"]

    def test_move_first_up_is_noop(self):
        r = prep_work_routine()
        assert r.with_block_moved(0, -1) is r

    def test_move_last_down_is_noop(self):
        r = prep_work_routine()
        assert r.with_block_moved(1, 1) is r

    def test_move_out_of_range_index_is_noop(self):
        r = prep_work_routine()
        assert r.with_block_moved(7, -1) is r

    def test_duplicate_inserts_copy_after_original(self):
        r = prep_work_routine()
        original = r.blocks[0]
        dup = r.with_block_duplicated(original.id)
        assert dup.block_count == 3
        copy = dup.blocks[1]
        assert copy.name == original.name
        assert copy.duration == original.duration
        assert copy.id != original.id

    def test_update_changes_fields_but_not_id(self):
        r = prep_work_routine()
        target = r.blocks[1]
        updated = r.with_block_updated(
            target.id, name="Row", duration=30, kind=BlockKind.OTHER, id="hijack",
        )
        block = updated.blocks[1]
        assert (block.name, block.duration, block.kind) == ("Row", 30, BlockKind.OTHER)
        assert block.id == target.id

    def test_update_unknown_block_raises(self):
        with pytest.raises(KeyError):
            prep_work_routine().with_block_updated("missing", duration=5)

    def test_remove_unknown_block_is_harmless(self):
        r = prep_work_routine()
        assert r.with_block_removed("missing").blocks == r.blocks


# ═══════════════════════════════════════════════════════════════════════════
#  VALIDATION & SERIALIZATION
# ═══════════════════════════════════════════════════════════════════════════


class TestValidation:

    def test_valid_routine_passes(self):
        validate_for_save(prep_work_routine())

    @pytest.mark.parametrize("name", ["", "   "])
    def test_blank_name_rejected(self, name):
        with pytest.raises(InvalidRoutine):
            validate_for_save(prep_work_routine().renamed(name))

    def test_no_blocks_rejected(self):
        with pytest.raises(InvalidRoutine):
            validate_for_save(Routine("Empty"))


class TestSerialization:

    def test_round_trip_keeps_blocks_and_last_played(self):
        when = datetime(2026, 3, 1, 7, 30)
        r = prep_work_routine().played_at(when)
        restored = Routine.from_dict(json.loads(json.dumps(r.to_dict())))
        assert restored == r

    def test_stored_total_is_ignored(self):
        data = prep_work_routine().to_dict()
        data["total_duration"] = 99999
        assert Routine.from_dict(data).total_duration == 80


# ═══════════════════════════════════════════════════════════════════════════
#  LIBRARY
# ═══════════════════════════════════════════════════════════════════════════


class TestLibrary:

    def test_empty_store_uses_seed_routines(self, store):
        lib = RoutineLibrary(store)
        assert [r.name for r in lib.routines] == [r.name for r in default_routines()]

    def test_seed_totals(self):
        tabata, study = default_routines()
        assert tabata.total_duration == 210
        assert study.total_duration == 1800

    def test_save_appends_and_persists(self, store):
        lib = RoutineLibrary(store)
        r = make_routine(("Plank", 30, BlockKind.WORK), name="Core")
        lib.save(r)

        reloaded = RoutineLibrary(store)
        assert reloaded.get(r.id) == r
        assert len(reloaded) == len(default_routines()) + 1

    def test_save_replaces_by_id(self, store):
        lib = RoutineLibrary(store)
        tabata = lib.get("tabata")
        lib.save(tabata.renamed("Tabata v2"))
        assert lib.get("tabata").name == "Tabata v2"
        assert len(lib) == len(default_routines())

    def test_invalid_routine_not_persisted(self, store):
        lib = RoutineLibrary(store)
        with pytest.raises(InvalidRoutine):
            lib.save(Routine("No blocks"))
        assert store.load(ROUTINES_KEY) is None

    def test_delete(self, store):
        lib = RoutineLibrary(store)
        assert lib.delete("study") is True
        assert lib.get("study") is None
        assert RoutineLibrary(store).get("study") is None

    def test_delete_unknown_returns_false(self, store):
        assert RoutineLibrary(store).delete("nope") is False

    def test_deleting_everything_persists_empty_list(self, store):
        lib = RoutineLibrary(store)
        for r in lib.routines:
            lib.delete(r.id)
        assert len(RoutineLibrary(store)) == 0

    def test_mark_played(self, store):
        lib = RoutineLibrary(store)
        when = datetime(2026, 5, 4, 18, 0)
        lib.mark_played("tabata", when)
        assert RoutineLibrary(store).get("tabata").last_played == when

    def test_unreadable_store_falls_back_to_defaults(self, store):
        store.save(ROUTINES_KEY, "{not json")
        lib = RoutineLibrary(store)
        assert len(lib) == len(default_routines())

    def test_without_store(self):
        lib = RoutineLibrary()
        lib.save(make_routine(("x", 5, BlockKind.OTHER), name="Mem"))
        assert len(lib) == len(default_routines()) + 1

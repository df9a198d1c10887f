"""
ProgressStore tests.

Covers initialization, sequential unlocking, phase rollover, the
development alias and recovery from unreadable records.
"""

import random
import sqlite3

import pytest

from phasenav.classroom import DEFAULT_CURRICULUM, ProgressStore
from phasenav.schemas import ProgressState


def complete_phase(store: ProgressStore, phase: str):
    for module in DEFAULT_CURRICULUM.module_order(phase):
        store.complete_module(phase, module)


def snapshot(store: ProgressStore) -> tuple[set, dict]:
    progress = store.get_progress()
    return (
        set(progress.unlocked_phases),
        {phase: set(mods) for phase, mods in progress.unlocked_modules.items()},
    )


def slot_rows(store: ProgressStore) -> list[tuple]:
    conn = sqlite3.connect(str(store.db_path))
    try:
        return conn.execute("SELECT key, value, updated_at FROM progress_slots").fetchall()
    finally:
        conn.close()


class TestInitialization:
    """Test default state and idempotent initialization."""

    def test_fresh_store_has_initial_state(self, store):
        progress = store.get_progress()
        assert progress == ProgressState.initial()
        assert progress.current_phase == "brd"
        assert progress.unlocked_phases == ["brd"]
        assert progress.unlocked_modules["brd"] == ["overview"]
        assert progress.unlocked_modules["uiux"] == []
        assert all(mods == [] for mods in progress.completed_modules.values())

    def test_initialize_twice_is_idempotent(self, store):
        first = store.get_progress()
        rows_before = slot_rows(store)

        store.initialize()
        store.initialize()

        assert store.get_progress() == first
        assert slot_rows(store) == rows_before
        assert len(rows_before) == 1

    def test_record_uses_camel_case_keys(self, store):
        raw = store.read_raw()
        assert '"currentPhase"' in raw
        assert '"unlockedPhases"' in raw
        assert '"unlockedModules"' in raw
        assert '"completedModules"' in raw

    def test_state_survives_reopen(self, tmp_path):
        db = tmp_path / "progress.db"
        ProgressStore(db_path=db).complete_module("brd", "overview")

        reopened = ProgressStore(db_path=db)
        assert reopened.is_module_completed("brd", "overview")
        assert reopened.is_module_unlocked("brd", "functional-requirements")

    def test_storage_keys_are_independent(self, tmp_path):
        db = tmp_path / "progress.db"
        ProgressStore(db_path=db, storage_key="a").complete_module("brd", "overview")

        other = ProgressStore(db_path=db, storage_key="b")
        assert not other.is_module_completed("brd", "overview")

    def test_get_progress_returns_copy(self, store):
        copy = store.get_progress()
        copy.unlocked_phases.append("deployment")
        assert not store.is_phase_unlocked("deployment")


class TestCorruptedStorage:
    """Unreadable records are replaced by the initial state."""

    def test_unparseable_json_resets(self, store):
        store.write_raw("{not json")
        store.initialize()
        assert store.get_progress() == ProgressState.initial()

    def test_wrong_shape_resets(self, store):
        store.write_raw("[1, 2]")
        store.initialize()
        assert store.get_progress() == ProgressState.initial()

    def test_corrupt_slot_rewritten(self, store):
        store.write_raw("{not json")
        store.initialize()
        assert ProgressState.model_validate_json(store.read_raw()) == ProgressState.initial()

    def test_new_store_on_corrupt_slot(self, tmp_path):
        db = tmp_path / "progress.db"
        ProgressStore(db_path=db).write_raw("{not json")

        store = ProgressStore(db_path=db)
        assert store.get_progress() == ProgressState.initial()


class TestSequentialUnlock:
    """Completing module i unlocks exactly module i+1."""

    def test_linear_happy_path(self, store):
        store.complete_module("brd", "overview")
        assert store.is_module_unlocked("brd", "functional-requirements")
        assert not store.is_module_unlocked("brd", "non-functional-requirements")

    def test_unlocks_only_next_index(self, store):
        order = DEFAULT_CURRICULUM.module_order("brd")
        for i, module in enumerate(order[:-1]):
            store.complete_module("brd", module)
            for later in order[i + 2:]:
                assert not store.is_module_unlocked("brd", later)
            assert store.is_module_unlocked("brd", order[i + 1])

    def test_result_reports_unlocked_module(self, store):
        result = store.complete_module("brd", "overview")
        assert result.completed
        assert result.unlocked_module == "functional-requirements"
        assert result.unlocked_phases == []

    def test_locked_module_cannot_be_completed(self, store):
        result = store.complete_module("brd", "user-stories")
        assert not result.completed
        assert not store.is_module_completed("brd", "user-stories")
        assert not store.is_module_unlocked("brd", "conclusion")

    def test_completion_is_idempotent(self, store):
        store.complete_module("brd", "overview")
        once = store.read_raw()

        result = store.complete_module("brd", "overview")
        assert not result.completed
        assert store.read_raw() == once
        assert store.get_progress().completed_modules["brd"] == ["overview"]
        assert store.get_progress().unlocked_modules["brd"] == ["overview", "functional-requirements"]


class TestPhaseRollover:
    """Completing a terminal module unlocks the next phase."""

    def test_full_brd_unlocks_uiux(self, store):
        complete_phase(store, "brd")
        assert store.is_phase_unlocked("uiux")
        assert store.is_module_unlocked("uiux", "overview")
        assert not store.is_module_unlocked("uiux", "design-system")

    def test_rollover_moves_current_phase(self, store):
        complete_phase(store, "brd")
        assert store.get_progress().current_phase == "uiux"

    def test_rollover_result(self, store):
        order = DEFAULT_CURRICULUM.module_order("brd")
        for module in order[:-1]:
            store.complete_module("brd", module)
        result = store.complete_module("brd", "conclusion")
        assert result.unlocked_module is None
        assert result.unlocked_phases == ["uiux"]
        assert result.next_phase_module == "overview"

    def test_non_terminal_module_does_not_roll_over(self, store):
        order = DEFAULT_CURRICULUM.module_order("brd")
        for module in order[:-1]:
            store.complete_module("brd", module)
        assert not store.is_phase_unlocked("uiux")

    def test_development_unlocks_alias(self, store):
        for phase in ("brd", "uiux", "architectural"):
            complete_phase(store, phase)
        assert store.is_phase_unlocked("development")
        assert store.is_phase_unlocked("code-development")
        assert store.is_phase_accessible("code-development")
        assert store.is_module_unlocked("development", "overview")

    def test_development_terminal_keeps_alias(self, store):
        for phase in ("brd", "uiux", "architectural", "development"):
            complete_phase(store, phase)
        assert store.is_phase_unlocked("development")
        assert store.is_phase_accessible("code-development")
        assert store.is_phase_unlocked("testing")

    def test_alias_phase_name_is_canonicalized(self, store):
        for phase in ("brd", "uiux", "architectural"):
            complete_phase(store, phase)
        store.complete_module("code-development", "overview")
        assert store.is_module_completed("development", "overview")
        assert store.is_module_unlocked("development", "frontend-development")

    def test_deployment_has_no_successor(self, store):
        for phase in DEFAULT_CURRICULUM.phase_ids[:-1]:
            complete_phase(store, phase)
        order = DEFAULT_CURRICULUM.module_order("deployment")
        for module in order[:-1]:
            store.complete_module("deployment", module)
        phases_before = list(store.get_progress().unlocked_phases)

        result = store.complete_module("deployment", "final-steps")
        assert result.completed
        assert result.unlocked_phases == []
        assert store.get_progress().unlocked_phases == phases_before
        assert store.get_progress().current_phase == "deployment"


class TestInvariants:
    """Properties that hold for any completion sequence."""

    @pytest.mark.parametrize("seed", [1, 7, 42])
    def test_unlocks_only_grow(self, store, seed):
        rng = random.Random(seed)
        pairs = [
            (phase.id, module)
            for phase in DEFAULT_CURRICULUM.phases
            for module in phase.module_ids
        ]
        phases, modules = snapshot(store)
        for _ in range(400):
            store.complete_module(*rng.choice(pairs))
            new_phases, new_modules = snapshot(store)
            assert phases <= new_phases
            for phase, mods in modules.items():
                assert mods <= new_modules.get(phase, set())
            phases, modules = new_phases, new_modules

    @pytest.mark.parametrize("seed", [3, 11])
    def test_completion_implies_unlock(self, store, seed):
        rng = random.Random(seed)
        pairs = [
            (phase.id, module)
            for phase in DEFAULT_CURRICULUM.phases
            for module in phase.module_ids
        ]
        for _ in range(400):
            store.complete_module(*rng.choice(pairs))
        progress = store.get_progress()
        for phase, completed in progress.completed_modules.items():
            for module in completed:
                assert store.is_module_unlocked(phase, module)

    def test_no_duplicate_entries(self, store):
        for phase in DEFAULT_CURRICULUM.phase_ids:
            complete_phase(store, phase)
            complete_phase(store, phase)
        progress = store.get_progress()
        assert len(progress.unlocked_phases) == len(set(progress.unlocked_phases))
        for mods in progress.unlocked_modules.values():
            assert len(mods) == len(set(mods))


class TestResetAndStats:
    """Test reset and completion statistics."""

    def test_reset(self, store):
        complete_phase(store, "brd")
        store.reset()
        assert store.get_progress() == ProgressState.initial()
        assert ProgressState.model_validate_json(store.read_raw()) == ProgressState.initial()

    def test_stats_fresh(self, store):
        stats = store.get_completion_stats()
        assert stats["current_phase"] == "brd"
        assert stats["total_modules"] == 33
        assert stats["completed"] == 0
        assert stats["completion_percent"] == 0
        assert [p["id"] for p in stats["phases"]] == DEFAULT_CURRICULUM.phase_ids
        assert stats["phases"][0]["unlocked"] is True
        assert stats["phases"][1]["unlocked"] is False

    def test_stats_after_phase(self, store):
        complete_phase(store, "brd")
        stats = store.get_completion_stats()
        assert stats["completed"] == 5
        assert stats["completion_percent"] == round(5 / 33 * 100, 1)
        assert stats["phases"][0]["completed"] == 5
        assert stats["phases"][1]["unlocked"] is True

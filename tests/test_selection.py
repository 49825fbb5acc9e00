"""
Tests for selection.py - bounded team selection with persistence.
"""

import json

import pytest

from hiresmart.logger import StructuredLogger
from hiresmart.selection import (
    CAPACITY_EXCEEDED,
    DUPLICATE,
    INCOMPLETE_TEAM,
    MAX_TEAM_SIZE,
    NOT_FOUND,
    PERSISTENCE_READ_INVALID,
    PERSISTENCE_WRITE_FAILED,
    STORAGE_KEY,
    SelectionManager,
    parse_stored_selection,
)
from hiresmart.storage import InMemoryStorage, StorageError


class FailingStorage(InMemoryStorage):
    """Reads work, writes always fail."""

    def set_item(self, key, value):
        raise StorageError("disk full")


@pytest.fixture
def manager(storage, repository):
    return SelectionManager(storage, repository=repository)


@pytest.fixture
def full_manager(manager, diverse_pool):
    for c in diverse_pool[:5]:
        assert manager.add(c).success
    return manager


def stored_ids(storage):
    return [c["id"] for c in json.loads(storage.get_item(STORAGE_KEY))]


class TestAdd:
    """Test adding candidates."""

    def test_add_appends_and_persists(self, manager, storage, diverse_pool):
        result = manager.add(diverse_pool[0])

        assert result.success
        assert result.message == "Priya Raman has been added to your team."
        assert [c.id for c in manager.selected] == ["1"]
        assert stored_ids(storage) == ["1"]

    def test_add_sixth_fails_with_capacity_exceeded(self, full_manager, storage, diverse_pool):
        before = full_manager.selected

        result = full_manager.add(diverse_pool[5])

        assert not result.success
        assert result.code == CAPACITY_EXCEEDED
        assert "up to 5" in result.message
        assert full_manager.selected == before
        assert len(full_manager) == MAX_TEAM_SIZE
        assert stored_ids(storage) == ["1", "2", "3", "4", "5"]

    def test_capacity_checked_before_duplicate(self, full_manager, diverse_pool):
        result = full_manager.add(diverse_pool[0])
        assert result.code == CAPACITY_EXCEEDED

    def test_add_duplicate_fails(self, manager, diverse_pool):
        manager.add(diverse_pool[0])

        result = manager.add(diverse_pool[0])

        assert not result.success
        assert result.code == DUPLICATE
        assert len(manager) == 1

    def test_add_outside_pool_fails(self, manager, candidate_factory):
        result = manager.add(candidate_factory("99"))
        assert result.code == NOT_FOUND
        assert len(manager) == 0

    def test_add_without_repository_accepts_any_candidate(self, storage, candidate_factory):
        manager = SelectionManager(storage)
        assert manager.add(candidate_factory("99")).success


class TestRemoveAndClear:
    """Test removing candidates and clearing the team."""

    def test_remove_preserves_order(self, full_manager, storage):
        result = full_manager.remove("3")

        assert result.success
        assert result.message == "Lena Okafor has been removed from your team."
        assert [c.id for c in full_manager.selected] == ["1", "2", "4", "5"]
        assert stored_ids(storage) == ["1", "2", "4", "5"]

    def test_remove_missing_fails(self, manager, diverse_pool):
        manager.add(diverse_pool[0])

        result = manager.remove("42")

        assert not result.success
        assert result.code == NOT_FOUND
        assert [c.id for c in manager.selected] == ["1"]

    def test_clear(self, full_manager, storage):
        result = full_manager.clear()

        assert result.success
        assert len(full_manager) == 0
        assert stored_ids(storage) == []

    def test_clear_empty_succeeds(self, manager):
        assert manager.clear().success

    def test_clear_zeroes_stats(self, full_manager):
        full_manager.clear()
        stats = full_manager.get_selection_stats()

        assert stats["gender_counts"] == {}
        assert stats["skill_counts"] == {}
        assert stats["location_counts"] == {}
        assert stats["experience_range"] == {"min": 0, "max": 0, "avg": 0}
        assert stats["total_selected"] == 0
        assert stats["max_size"] == 5


class TestQueries:
    """Test selection predicates and stats."""

    def test_is_selected(self, manager, diverse_pool):
        manager.add(diverse_pool[0])
        assert manager.is_selected("1")
        assert not manager.is_selected("2")

    def test_is_disabled_only_when_full(self, full_manager):
        assert full_manager.is_disabled("6")
        assert not full_manager.is_disabled("1")

    def test_not_disabled_below_capacity(self, manager, diverse_pool):
        manager.add(diverse_pool[0])
        assert not manager.is_disabled("6")

    def test_can_finalize(self, manager, diverse_pool):
        for c in diverse_pool[:4]:
            manager.add(c)
        assert not manager.can_finalize()
        manager.add(diverse_pool[4])
        assert manager.can_finalize()

    def test_stats(self, full_manager):
        stats = full_manager.get_selection_stats()

        assert stats["gender_counts"] == {"Female": 2, "Male": 2, "Other": 1}
        assert stats["skill_counts"]["Python"] == 1
        assert stats["location_counts"]["Austin"] == 1
        # 3 + 6 + 2 + 4 + 8 = 23, avg 4.6
        assert stats["experience_range"] == {"min": 2, "max": 8, "avg": 5}
        assert stats["total_selected"] == 5

    def test_stats_reflect_latest_state(self, full_manager):
        full_manager.remove("5")
        stats = full_manager.get_selection_stats()
        assert "Other" not in stats["gender_counts"]
        assert stats["experience_range"]["max"] == 6

    def test_score_against_selection_excludes_self(self, full_manager):
        """A selected candidate is scored against the other four."""
        scores = full_manager.candidate_scores()
        assert set(scores) == {"1", "2", "3", "4", "5"}
        # Sam is the only Other and only in Remote
        assert scores["5"].diversity == 20

    def test_score_pool_candidate(self, full_manager, diverse_pool):
        # Tom: Male in Austin, both already present; Vue.js is new
        score = full_manager.score_against_selection(diverse_pool[6])
        assert score.diversity == 0
        assert score.bonus == 10


class TestFinalize:
    """Test finalize gating."""

    def test_finalize_incomplete(self, manager, diverse_pool):
        manager.add(diverse_pool[0])
        result = manager.finalize()
        assert not result.success
        assert result.code == INCOMPLETE_TEAM

    def test_finalize_full(self, full_manager):
        result = full_manager.finalize()
        assert result.success
        assert len(result.data["team"]) == 5
        assert "summary" in result.data["analysis"]


class TestPersistence:
    """Test restore and write-through behaviour."""

    def test_restore_round_trip(self, storage, repository, diverse_pool):
        first = SelectionManager(storage, repository=repository)
        first.add(diverse_pool[2])
        first.add(diverse_pool[0])

        second = SelectionManager(storage, repository=repository)

        assert [c.id for c in second.selected] == ["3", "1"]
        assert second.selected[0] == diverse_pool[2]

    def test_missing_key_starts_empty(self, storage):
        assert len(SelectionManager(storage)) == 0

    def test_six_stored_candidates_restore_empty(self, diverse_pool, quiet_logger):
        raw = json.dumps([c.to_dict() for c in diverse_pool[:6]])
        storage = InMemoryStorage({STORAGE_KEY: raw})

        manager = SelectionManager(storage)

        assert len(manager) == 0
        assert quiet_logger.metrics["persistence_failures"][PERSISTENCE_READ_INVALID] == 1

    @pytest.mark.parametrize(
        "raw",
        [
            "not json",
            "{}",
            '"a string"',
            '[{"id": "1"}]',
            "[1, 2]",
        ],
    )
    def test_malformed_value_restores_empty(self, raw):
        manager = SelectionManager(InMemoryStorage({STORAGE_KEY: raw}))
        assert len(manager) == 0

    def test_one_bad_member_discards_everything(self, diverse_pool):
        payload = [c.to_dict() for c in diverse_pool[:3]]
        payload[1]["gender"] = "Unknown"
        manager = SelectionManager(InMemoryStorage({STORAGE_KEY: json.dumps(payload)}))
        assert len(manager) == 0

    def test_duplicate_ids_restore_empty(self, diverse_pool):
        payload = [diverse_pool[0].to_dict(), diverse_pool[0].to_dict()]
        manager = SelectionManager(InMemoryStorage({STORAGE_KEY: json.dumps(payload)}))
        assert len(manager) == 0

    def test_write_failure_keeps_in_memory_state(self, diverse_pool, tmp_path):
        logger = StructuredLogger(name="test-write", log_dir=tmp_path, enable_console=False)
        manager = SelectionManager(FailingStorage(), logger=logger)

        result = manager.add(diverse_pool[0])

        assert result.success
        assert manager.is_selected("1")
        assert logger.metrics["persistence_failures"][PERSISTENCE_WRITE_FAILED] == 1

    def test_rejections_are_counted(self, full_manager, diverse_pool, quiet_logger):
        full_manager.add(diverse_pool[6])
        full_manager.remove("42")
        rejections = quiet_logger.get_metrics()["selection_rejections"]
        assert rejections == {CAPACITY_EXCEEDED: 1, NOT_FOUND: 1}


class TestParseStoredSelection:
    """Test decoding of persisted values."""

    def test_none_is_empty(self):
        assert parse_stored_selection(None) == []

    def test_valid(self, diverse_pool):
        raw = json.dumps([c.to_dict() for c in diverse_pool[:2]])
        assert parse_stored_selection(raw) == diverse_pool[:2]

    def test_too_many(self, diverse_pool):
        raw = json.dumps([c.to_dict() for c in diverse_pool[:6]])
        with pytest.raises(ValueError, match="exceeds"):
            parse_stored_selection(raw)

from __future__ import annotations

import json
from pathlib import Path
from typing import List

import pytest

from shadowcoach.config import Settings
from shadowcoach.curriculum import story_mode_curriculum
from shadowcoach.learner_state import LearnerState, UnitProgress, dumps_learner_state, fresh_state, progress_for
from shadowcoach.progression import NextAction
from shadowcoach.repositories import InMemoryLearnerProgressStore, JsonFileLearnerProgressStore
from shadowcoach.story_mode import StoryModeController
from shadowcoach.telemetry import TelemetryEvent


class _ExplodingStore(InMemoryLearnerProgressStore):
    def load(self) -> LearnerState:
        raise OSError("disk unavailable")

    def clear(self) -> None:
        super().clear()
        raise OSError("still unavailable")


class _ReadOnlyStore(InMemoryLearnerProgressStore):
    def save(self, state: LearnerState) -> None:
        raise OSError("read-only volume")


def test_init_without_saved_state_starts_fresh(captured_events: List[TelemetryEvent]) -> None:
    store = InMemoryLearnerProgressStore()
    controller = StoryModeController(store)
    assert not controller.is_initialized

    state = controller.init()

    assert controller.is_initialized
    assert state == fresh_state()
    assert controller.next_action == NextAction.drill(1)
    assert store.save_count == 0
    assert [event.name for event in captured_events] == ["story_mode_initialized"]
    assert captured_events[0].payload["next_action"] == {"type": "drill", "unit_id": 1}


def test_init_migrates_and_persists_outdated_state(captured_events: List[TelemetryEvent]) -> None:
    saved = LearnerState(progress=(UnitProgress(unit_id=1, is_unlocked=True), UnitProgress(unit_id=500)))
    store = InMemoryLearnerProgressStore(dumps_learner_state(saved))
    controller = StoryModeController(store)

    state = controller.init()

    assert len(state.progress) == len(story_mode_curriculum)
    assert progress_for(state, 1).is_unlocked
    assert 500 not in state.unit_ids()
    assert store.save_count == 1
    assert store.load() == state
    assert "learner_state_migrated" in [event.name for event in captured_events]


def test_init_keeps_matching_state_without_saving() -> None:
    store = InMemoryLearnerProgressStore()
    store.save(fresh_state())
    controller = StoryModeController(store)
    controller.init()
    assert store.save_count == 1


def test_init_recovers_from_corrupt_store(captured_events: List[TelemetryEvent]) -> None:
    store = InMemoryLearnerProgressStore("{definitely not json")
    controller = StoryModeController(store)

    state = controller.init()

    assert state == fresh_state()
    assert store.raw is None
    assert store.clear_count == 1
    assert controller.is_initialized
    reset = [event for event in captured_events if event.name == "learner_state_reset"]
    assert reset and reset[0].payload["reason"] == "load_failed"


def test_init_survives_failing_clear() -> None:
    controller = StoryModeController(_ExplodingStore())
    assert controller.init() == fresh_state()
    assert controller.is_initialized


def test_init_recovers_from_corrupt_file(tmp_path: Path) -> None:
    path = tmp_path / "progress.json"
    path.write_text("garbage", encoding="utf-8")
    controller = StoryModeController(JsonFileLearnerProgressStore(path))

    assert controller.init() == fresh_state()
    assert not path.exists()

    controller.mark_drill_done()
    assert json.loads(path.read_text(encoding="utf-8"))["learning_state_v1"]["unitProgress"][0]["drillDone"] is True


def test_transitions_persist_then_notify(captured_events: List[TelemetryEvent]) -> None:
    store = InMemoryLearnerProgressStore()
    controller = StoryModeController(store)
    controller.init()
    seen: List[LearnerState] = []

    def listener(state: LearnerState) -> None:
        assert store.load() == state
        seen.append(state)

    controller.add_listener(listener)
    controller.mark_drill_done()
    controller.mark_add_to_arsenal_done(1)

    assert len(seen) == 2
    assert progress_for(seen[-1], 1).is_unlocked
    assert controller.current_unit.id == 2  # type: ignore[union-attr]
    changes = [event.payload for event in captured_events if event.name == "learner_state_changed"]
    assert changes == [
        {"action": "drill_done", "unit_id": 1},
        {"action": "add_to_arsenal_done", "unit_id": 1},
    ]

    controller.remove_listener(listener)
    controller.mark_progression_session_done()
    assert len(seen) == 2


def test_exam_unlock_rule_requires_passing_exam() -> None:
    controller = StoryModeController(InMemoryLearnerProgressStore(), unlock_rule="exam")
    controller.init()

    controller.mark_drill_done()
    controller.mark_add_to_arsenal_done(1)
    assert controller.next_action == NextAction.progression(1)

    controller.mark_progression_session_done()
    assert controller.next_action == NextAction.exam(1)

    controller.mark_exam_passed()
    assert progress_for(controller.state, 1).is_unlocked
    assert progress_for(controller.state, 2).is_unlocked
    assert controller.current_unit.id == 3  # type: ignore[union-attr]


def test_unlock_move_and_reset() -> None:
    store = InMemoryLearnerProgressStore()
    controller = StoryModeController(store)
    controller.init()

    controller.unlock_move(1)
    assert progress_for(controller.state, 1).is_unlocked

    controller.reset()
    assert controller.state == fresh_state()
    assert store.raw is None


def test_failing_listener_does_not_break_transition() -> None:
    controller = StoryModeController(InMemoryLearnerProgressStore())
    controller.init()

    def broken(_: LearnerState) -> None:
        raise RuntimeError("boom")

    controller.add_listener(broken)
    controller.mark_drill_done()
    assert progress_for(controller.state, 1).drill_done


def test_from_settings_uses_configured_store(tmp_path: Path) -> None:
    settings = Settings(
        SHADOWCOACH_PROGRESS_PATH=tmp_path / "state.json",
        SHADOWCOACH_STORAGE_KEY="custom",
        SHADOWCOACH_UNLOCK_RULE="exam",
    )
    controller = StoryModeController.from_settings(settings)
    controller.init()
    controller.unlock_move(2)

    assert controller.unlock_rule == "exam"
    document = json.loads((tmp_path / "state.json").read_text(encoding="utf-8"))
    assert "custom" in document


@pytest.mark.parametrize("unit_id", [1, 5, 18])
def test_unlock_move_covers_any_unit(unit_id: int) -> None:
    controller = StoryModeController(InMemoryLearnerProgressStore())
    controller.init()
    controller.unlock_move(unit_id)
    assert progress_for(controller.state, unit_id).exam_passed


def test_init_keeps_migrated_state_when_resave_fails(captured_events: List[TelemetryEvent]) -> None:
    unlocked = tuple(UnitProgress(unit_id=unit_id, is_unlocked=True, exam_passed=True) for unit_id in range(1, 11))
    pending = tuple(UnitProgress(unit_id=unit_id) for unit_id in range(11, 18))
    raw = dumps_learner_state(LearnerState(progress=unlocked + pending))
    store = _ReadOnlyStore(raw)
    controller = StoryModeController(store)

    state = controller.init()

    assert len(state.progress) == len(story_mode_curriculum)
    assert sum(record.is_unlocked for record in state.progress) == 10
    assert store.raw == raw
    assert store.clear_count == 0
    assert controller.current_unit.id == 11  # type: ignore[union-attr]
    assert "learner_state_reset" not in [event.name for event in captured_events]


def test_failing_save_leaves_state_unchanged(captured_events: List[TelemetryEvent]) -> None:
    store = _ReadOnlyStore()
    controller = StoryModeController(store)
    controller.init()
    seen: List[LearnerState] = []
    controller.add_listener(seen.append)

    with pytest.raises(OSError):
        controller.mark_drill_done()

    assert controller.state == fresh_state()
    assert not progress_for(controller.state, 1).drill_done
    assert store.raw is None
    assert seen == []
    assert "learner_state_changed" not in [event.name for event in captured_events]

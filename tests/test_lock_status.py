from __future__ import annotations

from typing import List

from shadowcoach.curriculum import LearningUnit
from shadowcoach.learner_state import UnitProgress, fresh_state, with_progress
from shadowcoach.lock_status import (
    MoveLockStatus,
    arsenal_allowed_codes,
    is_move_unlocked,
    resolve_lock_status,
    unlocked_move_codes,
)
from shadowcoach.progression import unlock_move


def _units() -> List[LearningUnit]:
    return [
        LearningUnit(id=1, level=1, display_name="Jab", move_codes=("1",)),
        LearningUnit(id=2, level=1, display_name="Jab cross", move_codes=("1", "2")),
        LearningUnit(id=3, level=2, display_name="Slips", move_codes=("A", "B")),
    ]


def test_everything_is_locked_on_a_fresh_state() -> None:
    state = fresh_state(_units())
    assert resolve_lock_status("1", state, _units()) == MoveLockStatus(is_unlocked=False, is_in_learning_path=True)
    assert unlocked_move_codes(state, _units()) == []


def test_codes_outside_the_curriculum_are_locked() -> None:
    state = fresh_state(_units())
    assert resolve_lock_status("ZZ", state, _units()) == MoveLockStatus.locked()
    assert not is_move_unlocked("ZZ", state, _units())


def test_first_unit_listing_a_code_decides() -> None:
    units = _units()
    state = with_progress(fresh_state(units), UnitProgress(unit_id=2, is_unlocked=True))

    # "1" first appears in unit 1, which is still locked.
    assert not is_move_unlocked("1", state, units)
    assert is_move_unlocked("2", state, units)


def test_unlocked_codes_follow_unlock_order_without_duplicates() -> None:
    units = _units()
    state = fresh_state(units)
    for unit_id in (3, 1, 2):
        state = with_progress(state, UnitProgress(unit_id=unit_id, is_unlocked=True))
    assert unlocked_move_codes(state, units) == ["1", "2", "A", "B"]


def test_arsenal_allow_list_adds_the_units_own_codes() -> None:
    units = _units()
    state = with_progress(fresh_state(units), UnitProgress(unit_id=1, is_unlocked=True))
    assert arsenal_allowed_codes(state, 3, units) == ["1", "A", "B"]
    assert arsenal_allowed_codes(state, 2, units) == ["1", "2"]
    assert arsenal_allowed_codes(state, 99, units) == ["1"]


def test_story_mode_defaults() -> None:
    state = unlock_move(fresh_state(), 1)
    assert is_move_unlocked("1", state)
    assert unlocked_move_codes(state) == ["1"]
    assert arsenal_allowed_codes(state, 2) == ["1", "N"]

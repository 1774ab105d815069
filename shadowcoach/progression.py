"""Story-mode progression rules.

Every function here is pure: it takes a :class:`LearnerState` and returns a new
one (or the same instance when nothing applies). ``isUnlocked`` only ever moves
from ``False`` to ``True``.
"""

from __future__ import annotations

import logging
from typing import Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, model_validator

from .config import UnlockRule
from .curriculum import CurriculumLike, resolve_curriculum
from .learner_state import (
    LearnerState,
    current_unit,
    progress_for,
    with_progress,
)

logger = logging.getLogger(__name__)

NextActionType = Literal["drill", "add_to_arsenal", "progression", "exam", "complete"]

# Product configuration: progression sessions required per curriculum level.
PROGRESSION_SESSIONS_BY_LEVEL: Dict[int, int] = {
    1: 1,
    2: 2,
    3: 2,
    4: 3,
    5: 3,
    6: 3,
}
MAX_PROGRESSION_SESSIONS = max(PROGRESSION_SESSIONS_BY_LEVEL.values())


class NextAction(BaseModel):
    """What the learner should do next, and for which unit."""

    model_config = ConfigDict(frozen=True)

    type: NextActionType
    unit_id: Optional[int] = None

    @model_validator(mode="after")
    def _check_unit(self) -> "NextAction":
        if self.type == "complete" and self.unit_id is not None:
            raise ValueError("A complete action does not reference a unit.")
        if self.type != "complete" and self.unit_id is None:
            raise ValueError(f"A {self.type} action requires a unit id.")
        return self

    @classmethod
    def drill(cls, unit_id: int) -> "NextAction":
        return cls(type="drill", unit_id=unit_id)

    @classmethod
    def add_to_arsenal(cls, unit_id: int) -> "NextAction":
        return cls(type="add_to_arsenal", unit_id=unit_id)

    @classmethod
    def progression(cls, unit_id: int) -> "NextAction":
        return cls(type="progression", unit_id=unit_id)

    @classmethod
    def exam(cls, unit_id: int) -> "NextAction":
        return cls(type="exam", unit_id=unit_id)

    @classmethod
    def complete(cls) -> "NextAction":
        return cls(type="complete")

    @property
    def is_complete(self) -> bool:
        return self.type == "complete"


def required_progression_sessions(level: Optional[int]) -> int:
    """Sessions required at ``level``; unknown levels use the highest tier."""
    if level is None:
        return MAX_PROGRESSION_SESSIONS
    return PROGRESSION_SESSIONS_BY_LEVEL.get(level, MAX_PROGRESSION_SESSIONS)


def compute_next_action(state: LearnerState, curriculum: Optional[CurriculumLike] = None) -> NextAction:
    unit = current_unit(state, curriculum)
    if unit is None:
        return NextAction.complete()

    progress = progress_for(state, unit.id)
    if not progress.drill_done:
        return NextAction.drill(unit.id)
    if not progress.add_to_arsenal_done:
        return NextAction.add_to_arsenal(unit.id)
    if progress.progression_sessions_done < required_progression_sessions(unit.level):
        return NextAction.progression(unit.id)
    if not progress.exam_passed:
        return NextAction.exam(unit.id)

    # Every stage is done but the unit is still locked; the exam is the step
    # that unlocks it under either rule.
    logger.debug("Unit %s has all stages complete but is locked", unit.id)
    return NextAction.exam(unit.id)


def complete_drill(state: LearnerState, curriculum: Optional[CurriculumLike] = None) -> LearnerState:
    unit = current_unit(state, curriculum)
    if unit is None:
        return state
    progress = progress_for(state, unit.id)
    return with_progress(state, progress.model_copy(update={"drill_done": True}))


def complete_add_to_arsenal(
    state: LearnerState,
    unit_id: int,
    *,
    unlock_rule: UnlockRule = "arsenal",
) -> LearnerState:
    """Record the Add-to-Arsenal session for ``unit_id``.

    Under the ``"arsenal"`` rule this also unlocks the unit. Under ``"exam"``
    the unit stays locked until :func:`pass_exam` or :func:`unlock_move`.
    """
    progress = progress_for(state, unit_id)
    update: Dict[str, bool] = {"add_to_arsenal_done": True}
    if unlock_rule == "arsenal":
        update["is_unlocked"] = True
    return with_progress(state, progress.model_copy(update=update))


def complete_progression_session(
    state: LearnerState,
    curriculum: Optional[CurriculumLike] = None,
) -> LearnerState:
    unit = current_unit(state, curriculum)
    if unit is None:
        return state
    progress = progress_for(state, unit.id)
    return with_progress(
        state,
        progress.model_copy(update={"progression_sessions_done": progress.progression_sessions_done + 1}),
    )


def pass_exam(state: LearnerState, curriculum: Optional[CurriculumLike] = None) -> LearnerState:
    """Pass the current unit's exam, unlocking it and pre-exposing the next unit."""
    catalog = resolve_curriculum(curriculum)
    unit = current_unit(state, catalog)
    if unit is None:
        return state

    progress = progress_for(state, unit.id)
    updated = with_progress(state, progress.model_copy(update={"exam_passed": True, "is_unlocked": True}))

    following = catalog.next_unit(unit.id)
    if following is not None:
        next_progress = progress_for(updated, following.id)
        if not next_progress.is_unlocked:
            updated = with_progress(updated, next_progress.model_copy(update={"is_unlocked": True}))
    return updated


def unlock_move(
    state: LearnerState,
    unit_id: int,
    curriculum: Optional[CurriculumLike] = None,
) -> LearnerState:
    """Instantly complete and unlock ``unit_id`` (manual override)."""
    unit = resolve_curriculum(curriculum).get_by_id(unit_id)
    required = required_progression_sessions(unit.level if unit else None)
    progress = progress_for(state, unit_id)
    return with_progress(
        state,
        progress.model_copy(
            update={
                "drill_done": True,
                "exam_passed": True,
                "progression_sessions_done": required,
                "is_unlocked": True,
            }
        ),
    )


__all__ = [
    "MAX_PROGRESSION_SESSIONS",
    "NextAction",
    "NextActionType",
    "PROGRESSION_SESSIONS_BY_LEVEL",
    "complete_add_to_arsenal",
    "complete_drill",
    "complete_progression_session",
    "compute_next_action",
    "pass_exam",
    "required_progression_sessions",
    "unlock_move",
]

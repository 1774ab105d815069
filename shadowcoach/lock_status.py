"""Derive per-move availability from story-mode progress."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from .curriculum import CurriculumLike, resolve_curriculum
from .learner_state import LearnerState, progress_for


class MoveLockStatus(BaseModel):
    model_config = ConfigDict(frozen=True)

    is_unlocked: bool = False
    is_in_learning_path: bool = False

    @classmethod
    def locked(cls) -> "MoveLockStatus":
        return cls()


def resolve_lock_status(
    move_code: str,
    state: LearnerState,
    curriculum: Optional[CurriculumLike] = None,
) -> MoveLockStatus:
    """Lock status of ``move_code``.

    The first unit (in unlock order) that lists the code decides. Codes that no
    unit teaches are locked and outside the learning path.
    """
    for unit in resolve_curriculum(curriculum):
        if move_code in unit.move_codes:
            return MoveLockStatus(
                is_unlocked=progress_for(state, unit.id).is_unlocked,
                is_in_learning_path=True,
            )
    return MoveLockStatus.locked()


def is_move_unlocked(
    move_code: str,
    state: LearnerState,
    curriculum: Optional[CurriculumLike] = None,
) -> bool:
    return resolve_lock_status(move_code, state, curriculum).is_unlocked


def unlocked_move_codes(state: LearnerState, curriculum: Optional[CurriculumLike] = None) -> List[str]:
    """Codes taught by unlocked units, in unlock order, without duplicates."""
    codes: List[str] = []
    for unit in resolve_curriculum(curriculum):
        if not progress_for(state, unit.id).is_unlocked:
            continue
        for code in unit.move_codes:
            if code not in codes:
                codes.append(code)
    return codes


def arsenal_allowed_codes(
    state: LearnerState,
    unit_id: int,
    curriculum: Optional[CurriculumLike] = None,
) -> List[str]:
    """Allow-list for an Add-to-Arsenal session on ``unit_id``.

    The learner's unlocked codes plus the codes the unit itself teaches, which
    are still locked at that point.
    """
    catalog = resolve_curriculum(curriculum)
    codes = unlocked_move_codes(state, catalog)
    unit = catalog.get_by_id(unit_id)
    if unit is not None:
        for code in unit.move_codes:
            if code not in codes:
                codes.append(code)
    return codes


__all__ = [
    "MoveLockStatus",
    "arsenal_allowed_codes",
    "is_move_unlocked",
    "resolve_lock_status",
    "unlocked_move_codes",
]

"""The fixed, ordered story-mode curriculum.

Units are unlocked strictly in ascending ``id`` order. Each unit references one
or more move codes from :mod:`shadowcoach.moves`; the curriculum treats those
codes as opaque strings.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from .moves import CatalogError

LEVEL_NAMES: Dict[int, str] = {
    1: "Basics",
    2: "Basic angles",
    3: "Defense",
    4: "Intermediate punches",
    5: "Advanced footwork",
    6: "Extras",
}


class LearningUnit(BaseModel):
    """One curriculum step mapping to the move codes it teaches."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(ge=1)
    level: int = Field(ge=1)
    order_within_level: int = Field(default=0, ge=0)
    display_name: str
    description: str = ""
    move_codes: Tuple[str, ...] = Field(min_length=1)

    @property
    def level_name(self) -> str:
        return LEVEL_NAMES.get(self.level, "Unknown")


class CurriculumCatalog:
    """Read-only view over an ordered list of learning units."""

    def __init__(self, units: Iterable[LearningUnit]) -> None:
        ordered = sorted(units, key=lambda unit: unit.id)
        for expected, unit in enumerate(ordered, start=1):
            if unit.id != expected:
                raise CatalogError(
                    f"Curriculum unit ids must be contiguous from 1; expected {expected}, found {unit.id}."
                )
        self._units: Tuple[LearningUnit, ...] = tuple(ordered)
        self._index: Dict[int, int] = {unit.id: position for position, unit in enumerate(self._units)}

    def __len__(self) -> int:
        return len(self._units)

    def __iter__(self):
        return iter(self._units)

    def get_all(self) -> List[LearningUnit]:
        return list(self._units)

    def get_by_id(self, unit_id: int) -> Optional[LearningUnit]:
        position = self._index.get(unit_id)
        return self._units[position] if position is not None else None

    def get_by_level(self, level: int) -> List[LearningUnit]:
        return [unit for unit in self._units if unit.level == level]

    def unlock_index_of(self, unit: Union[LearningUnit, int]) -> int:
        """Return the 0-based position of ``unit`` in unlock order, or -1."""
        unit_id = unit.id if isinstance(unit, LearningUnit) else unit
        return self._index.get(unit_id, -1)

    def next_unit(self, unit_id: int) -> Optional[LearningUnit]:
        position = self._index.get(unit_id)
        if position is None or position + 1 >= len(self._units):
            return None
        return self._units[position + 1]

    def units_teaching(self, move_code: str) -> List[LearningUnit]:
        return [unit for unit in self._units if move_code in unit.move_codes]

    @property
    def levels(self) -> List[int]:
        return sorted({unit.level for unit in self._units})


def _unit(
    unit_id: int,
    level: int,
    order: int,
    name: str,
    description: str,
    *codes: str,
) -> LearningUnit:
    return LearningUnit(
        id=unit_id,
        level=level,
        order_within_level=order,
        display_name=name,
        description=description,
        move_codes=codes,
    )


STORY_MODE_UNITS: Tuple[LearningUnit, ...] = (
    _unit(1, 1, 0, "Jab", "Quick straight lead-hand punch for measuring distance and opening combinations.", "1"),
    _unit(2, 1, 1, "Step forward", "Close distance by stepping with the lead foot, then the rear foot.", "N"),
    _unit(3, 1, 2, "Step backward", "Create space by stepping with the rear foot, then the lead foot.", "O"),
    _unit(4, 1, 3, "Cross", "Rear-hand straight punch powered by hip and shoulder rotation.", "2"),
    _unit(5, 2, 0, "Step left", "Lateral movement to the left to circle and create angles.", "P"),
    _unit(6, 2, 1, "Step right", "Lateral movement to the right for ring generalship.", "Q"),
    _unit(7, 3, 0, "Slip left", "Move the head outside an incoming punch while staying in range.", "A"),
    _unit(8, 3, 1, "Slip right", "Move the head inside an incoming punch, loading the lead hook.", "B"),
    _unit(9, 3, 2, "Roll", "Rotate under hooks and wide punches and come up ready to counter.", "C"),
    _unit(10, 3, 3, "Block", "Take straight punches on the gloves with a tight guard.", "G"),
    _unit(11, 4, 0, "Lead hook", "Lead-hand horizontal arc with the elbow at shoulder height.", "3"),
    _unit(12, 4, 1, "Rear hook", "Rear-hand hook driven by a full pivot of the rear foot.", "4"),
    _unit(13, 4, 2, "Lead uppercut", "Close-range upward lead-hand punch driven by the legs.", "5"),
    _unit(14, 4, 3, "Rear uppercut", "Close-range upward rear-hand punch from a loaded rear knee.", "6"),
    _unit(15, 5, 0, "Pivot left", "Turn on the lead foot to reposition at an angle.", "R"),
    _unit(16, 5, 1, "Pivot right", "Turn on the rear foot to escape pressure.", "S"),
    _unit(17, 6, 0, "Feints", "Fake the start of a strike to draw a reaction, then attack the opening.", "F"),
    _unit(18, 6, 1, "Rhythm variations", "Mix speeds and bursts to stay unpredictable.", "T", "U"),
)

story_mode_curriculum = CurriculumCatalog(STORY_MODE_UNITS)

CurriculumLike = Union[CurriculumCatalog, Iterable[LearningUnit]]


def resolve_curriculum(curriculum: Optional[CurriculumLike] = None) -> CurriculumCatalog:
    """Return ``curriculum`` as a catalog, defaulting to the story-mode one."""
    if curriculum is None:
        return story_mode_curriculum
    if isinstance(curriculum, CurriculumCatalog):
        return curriculum
    return CurriculumCatalog(curriculum)


__all__ = [
    "CurriculumCatalog",
    "CurriculumLike",
    "LEVEL_NAMES",
    "LearningUnit",
    "STORY_MODE_UNITS",
    "resolve_curriculum",
    "story_mode_curriculum",
]

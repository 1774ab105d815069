"""Per-learner story-mode progress, its persisted form, and curriculum migration."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Mapping, NamedTuple, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .curriculum import CurriculumCatalog, CurriculumLike, LearningUnit, story_mode_curriculum

logger = logging.getLogger(__name__)

# Schema history for the persisted document:
#   1 - initial release. Document key "moveProgress"; records carry "moveId",
#       "drillDone", "progressionSessionsDone", "examPassed", "isUnlocked".
#   2 - records renamed "moveId" -> "unitId" and gained "addToArsenalDone";
#       document key became "unitProgress".
SCHEMA_VERSION = 2

_V1_PROGRESS_KEY = "moveProgress"
_PROGRESS_KEY = "unitProgress"


class LearnerStateDecodeError(ValueError):
    """Persisted learner state could not be decoded."""


class UnitProgress(BaseModel):
    """Completion flags for a single curriculum unit."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    unit_id: int = Field(alias="unitId")
    drill_done: bool = Field(default=False, alias="drillDone")
    add_to_arsenal_done: bool = Field(default=False, alias="addToArsenalDone")
    progression_sessions_done: int = Field(default=0, ge=0, alias="progressionSessionsDone")
    exam_passed: bool = Field(default=False, alias="examPassed")
    is_unlocked: bool = Field(default=False, alias="isUnlocked")

    @model_validator(mode="before")
    @classmethod
    def _upgrade_legacy_record(cls, data: Any) -> Any:
        # v1 records identify the unit as "moveId"; every field added since
        # then falls back to its declared default when absent.
        if isinstance(data, dict) and "unitId" not in data and "unit_id" not in data and "moveId" in data:
            upgraded = dict(data)
            upgraded["unitId"] = upgraded.pop("moveId")
            return upgraded
        return data

    @classmethod
    def initial(cls, unit_id: int) -> "UnitProgress":
        return cls(unit_id=unit_id)


class LearnerState(BaseModel):
    """Ordered progress records, one per curriculum unit once migrated."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    progress: Tuple[UnitProgress, ...] = Field(default=(), alias=_PROGRESS_KEY)

    def unit_ids(self) -> List[int]:
        return [record.unit_id for record in self.progress]


class MigrationResult(NamedTuple):
    state: LearnerState
    changed: bool


def _units(curriculum: Optional[CurriculumLike]) -> List[LearningUnit]:
    if curriculum is None:
        return story_mode_curriculum.get_all()
    if isinstance(curriculum, CurriculumCatalog):
        return curriculum.get_all()
    return sorted(curriculum, key=lambda unit: unit.id)


def fresh_state(curriculum: Optional[CurriculumLike] = None) -> LearnerState:
    """Build a state with one locked, untouched record per unit."""
    return LearnerState(progress=tuple(UnitProgress.initial(unit.id) for unit in _units(curriculum)))


def progress_for(state: LearnerState, unit_id: int) -> UnitProgress:
    """Return the record for ``unit_id`` or a fresh one when it is absent."""
    for record in state.progress:
        if record.unit_id == unit_id:
            return record
    return UnitProgress.initial(unit_id)


def with_progress(state: LearnerState, record: UnitProgress) -> LearnerState:
    """Return a new state where ``record`` replaces the entry for its unit."""
    replaced = False
    updated: List[UnitProgress] = []
    for existing in state.progress:
        if existing.unit_id == record.unit_id and not replaced:
            updated.append(record)
            replaced = True
        else:
            updated.append(existing)
    if not replaced:
        updated.append(record)
    return LearnerState(progress=tuple(updated))


def current_unit(state: LearnerState, curriculum: Optional[CurriculumLike] = None) -> Optional[LearningUnit]:
    """Earliest unit in unlock order that is still locked, or ``None``."""
    for unit in _units(curriculum):
        if not progress_for(state, unit.id).is_unlocked:
            return unit
    return None


def is_learning_complete(state: LearnerState, curriculum: Optional[CurriculumLike] = None) -> bool:
    return current_unit(state, curriculum) is None


def is_valid_for_curriculum(state: LearnerState, curriculum: Optional[CurriculumLike] = None) -> bool:
    units = _units(curriculum)
    if len(state.progress) != len(units):
        return False
    present = set(state.unit_ids())
    return all(unit.id in present for unit in units)


def migrate(persisted: LearnerState, curriculum: Optional[CurriculumLike] = None) -> MigrationResult:
    """Reconcile a saved snapshot against the current curriculum.

    Records for units that still exist are carried over untouched, units new to
    the curriculum get a fresh record, and records for removed units are
    dropped. A snapshot that already matches is returned as-is with
    ``changed=False``, so applying ``migrate`` twice never reports a change the
    second time.
    """
    units = _units(curriculum)
    by_unit_id: Dict[int, UnitProgress] = {record.unit_id: record for record in persisted.progress}

    changed = len(persisted.progress) != len(units)
    if changed:
        logger.debug(
            "Learner state has %d records but curriculum has %d units",
            len(persisted.progress),
            len(units),
        )
    else:
        missing = [unit.id for unit in units if unit.id not in by_unit_id]
        if missing:
            changed = True
            logger.debug("Learner state missing progress for units %s", missing)

    if not changed:
        return MigrationResult(persisted, False)

    rebuilt: List[UnitProgress] = []
    for unit in units:
        record = by_unit_id.get(unit.id)
        if record is None:
            record = UnitProgress.initial(unit.id)
        rebuilt.append(record)

    dropped = sorted(set(by_unit_id) - {unit.id for unit in units})
    logger.debug(
        "Migrated learner state to %d units (dropped %s)",
        len(rebuilt),
        dropped or "none",
    )
    return MigrationResult(LearnerState(progress=tuple(rebuilt)), True)


def encode_learner_state(state: LearnerState) -> Dict[str, Any]:
    return {
        "schemaVersion": SCHEMA_VERSION,
        _PROGRESS_KEY: [record.model_dump(mode="json", by_alias=True) for record in state.progress],
    }


def dumps_learner_state(state: LearnerState) -> str:
    return json.dumps(encode_learner_state(state))


def decode_learner_state(raw: Union[str, bytes, Mapping[str, Any]]) -> LearnerState:
    """Decode any supported schema version into a current :class:`LearnerState`."""
    if isinstance(raw, (str, bytes)):
        try:
            document: Any = json.loads(raw)
        except ValueError as exc:
            raise LearnerStateDecodeError(f"Learner state is not valid JSON: {exc}") from exc
    else:
        document = raw

    if not isinstance(document, Mapping):
        raise LearnerStateDecodeError("Learner state root must be a JSON object.")

    version = document.get("schemaVersion", 1)
    if isinstance(version, bool) or not isinstance(version, int) or version < 1:
        raise LearnerStateDecodeError(f"Learner state has invalid schemaVersion: {version!r}")
    if version > SCHEMA_VERSION:
        raise LearnerStateDecodeError(
            f"Learner state schema version {version} is newer than supported {SCHEMA_VERSION}."
        )

    records = document.get(_PROGRESS_KEY)
    if records is None:
        records = document.get(_V1_PROGRESS_KEY)
    if not isinstance(records, list):
        raise LearnerStateDecodeError("Learner state is missing its progress list.")

    try:
        progress = tuple(UnitProgress.model_validate(record) for record in records)
    except ValidationError as exc:
        raise LearnerStateDecodeError(f"Learner state contains an invalid progress record: {exc}") from exc
    return LearnerState(progress=progress)


__all__ = [
    "LearnerState",
    "LearnerStateDecodeError",
    "MigrationResult",
    "SCHEMA_VERSION",
    "UnitProgress",
    "current_unit",
    "decode_learner_state",
    "dumps_learner_state",
    "encode_learner_state",
    "fresh_state",
    "is_learning_complete",
    "is_valid_for_curriculum",
    "migrate",
    "progress_for",
    "with_progress",
]

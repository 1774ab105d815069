"""Which unlocked moves the learner wants in free training sessions."""

from __future__ import annotations

from typing import Any, Dict, FrozenSet, Iterable, List, Sequence

from pydantic import BaseModel, ConfigDict, Field, field_serializer


class TrainingPreferences(BaseModel):
    """Immutable set of move codes included in training combos.

    Serialized as ``{"includedMoveCodes": [...]}`` with codes sorted so the
    persisted form is stable.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    included_move_codes: FrozenSet[str] = Field(default_factory=frozenset, alias="includedMoveCodes")

    @field_serializer("included_move_codes")
    def _serialize_codes(self, codes: FrozenSet[str]) -> List[str]:
        return sorted(codes)

    @classmethod
    def default_with(cls, unlocked_codes: Iterable[str]) -> "TrainingPreferences":
        return cls(included_move_codes=frozenset(unlocked_codes))

    @classmethod
    def empty(cls) -> "TrainingPreferences":
        return cls()

    @classmethod
    def from_json(cls, payload: Dict[str, Any]) -> "TrainingPreferences":
        codes = payload.get("includedMoveCodes") or []
        return cls(included_move_codes=frozenset(str(code) for code in codes))

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)

    @property
    def included_count(self) -> int:
        return len(self.included_move_codes)

    def is_included(self, code: str) -> bool:
        return code in self.included_move_codes

    def toggle(self, code: str) -> "TrainingPreferences":
        return TrainingPreferences(included_move_codes=self.included_move_codes ^ {code})

    def include(self, code: str) -> "TrainingPreferences":
        if code in self.included_move_codes:
            return self
        return TrainingPreferences(included_move_codes=self.included_move_codes | {code})

    def include_all(self, codes: Iterable[str]) -> "TrainingPreferences":
        return TrainingPreferences(included_move_codes=self.included_move_codes.union(codes))

    def allowed_codes(self, unlocked_codes: Sequence[str]) -> List[str]:
        """Included codes that are also unlocked, in the given unlock order.

        Locked codes never reach a training combo even if they were included
        earlier.
        """
        return [code for code in unlocked_codes if code in self.included_move_codes]


__all__ = ["TrainingPreferences"]

"""Procedural combo generation for shadow-boxing rounds.

A combo is built from a hand-authored category pattern (e.g. punch, punch,
defense) by drawing one move per slot, then repaired so that it is never empty
when anything is allowed, always carries a punch when one is allowed, and never
repeats a code more than twice in a row.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Protocol, Sequence, Tuple, Union

from pydantic import BaseModel, ConfigDict

from .config import Settings
from .moves import MoveCatalog, MoveCategory, boxing_catalog

logger = logging.getLogger(__name__)


class Difficulty(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"

    @property
    def label(self) -> str:
        return self.value.title()


class Combo(BaseModel):
    """Ordered move codes to execute as one drill."""

    model_config = ConfigDict(frozen=True)

    move_codes: Tuple[str, ...]
    difficulty: Optional[Difficulty] = None
    name: Optional[str] = None
    description: Optional[str] = None
    sequence_id: Optional[int] = None

    def __str__(self) -> str:
        label = f' "{self.name}"' if self.name else ""
        tier = f" [{self.difficulty.label}]" if self.difficulty else ""
        return f"Combo({'-'.join(self.move_codes)}{label}{tier})"

    def __len__(self) -> int:
        return len(self.move_codes)


class ComboGenerator(Protocol):
    def generate(
        self,
        difficulty: Union[Difficulty, str],
        previous: Optional[Combo] = None,
        allowed_codes: Optional[Sequence[str]] = None,
    ) -> Combo: ...

    def generate_weighted(
        self,
        difficulty: Union[Difficulty, str],
        target_code: str,
        allowed_codes: Sequence[str],
        previous: Optional[Combo] = None,
    ) -> Combo: ...


CategoryPattern = Tuple[MoveCategory, ...]

_P = MoveCategory.PUNCH
_D = MoveCategory.DEFENSE
_F = MoveCategory.FOOTWORK

# Beginner patterns are 2-3 slots, intermediate 3-5, advanced 4-7. Duplicate
# entries skew the uniform pick towards those shapes.
COMBO_PATTERNS: Dict[Difficulty, Tuple[CategoryPattern, ...]] = {
    Difficulty.BEGINNER: (
        (_P, _P),
        (_P, _P),
        (_P, _P, _P),
        (_P, _P, _D),
        (_P, _D),
    ),
    Difficulty.INTERMEDIATE: (
        (_P, _P, _D),
        (_P, _D, _P),
        (_D, _P, _P),
        (_P, _P, _D, _P),
        (_F, _P, _P),
        (_P, _P, _F),
        (_P, _P, _P, _D),
        (_F, _P, _P, _D),
        (_P, _P, _D, _P, _P),
    ),
    Difficulty.ADVANCED: (
        (_F, _P, _P, _D, _P),
        (_P, _D, _P, _P, _F),
        (_D, _P, _P, _D, _P),
        (_F, _P, _P, _D, _P, _P),
        (_P, _P, _D, _F, _P, _P),
        (_D, _F, _P, _P, _P, _D),
        (_F, _P, _D, _P, _P, _F, _P),
    ),
}

DEFAULT_FALLBACK_CODES: Tuple[str, ...] = ("1", "2")
ARSENAL_WEIGHT_RANGE: Tuple[int, int] = (6, 10)
MAX_CONSECUTIVE_REPEATS = 2


@dataclass(frozen=True)
class GenerationFilter:
    """Per-call restrictions; never persisted."""

    allowed_codes: Optional[Tuple[str, ...]] = None
    target_code: Optional[str] = None
    weight_range: Tuple[int, int] = ARSENAL_WEIGHT_RANGE

    @classmethod
    def build(
        cls,
        allowed_codes: Optional[Sequence[str]] = None,
        target_code: Optional[str] = None,
        weight_range: Tuple[int, int] = ARSENAL_WEIGHT_RANGE,
    ) -> "GenerationFilter":
        if allowed_codes is None:
            return cls(target_code=target_code, weight_range=weight_range)
        deduped = tuple(dict.fromkeys(allowed_codes))
        return cls(allowed_codes=deduped, target_code=target_code, weight_range=weight_range)

    @property
    def is_restricted(self) -> bool:
        return self.allowed_codes is not None

    def allows(self, code: str) -> bool:
        return self.allowed_codes is None or code in self.allowed_codes


def limit_consecutive_repeats(codes: Sequence[str], limit: int = MAX_CONSECUTIVE_REPEATS) -> List[str]:
    """Trim every run of identical codes to at most ``limit`` in one pass."""
    result: List[str] = []
    run = 0
    for code in codes:
        if result and result[-1] == code:
            run += 1
        else:
            run = 1
        if run <= limit:
            result.append(code)
    return result


class BoxingComboGenerator:
    """Default :class:`ComboGenerator` over the boxing move catalog.

    The pseudo-random source is owned by the instance; pass a seeded
    :class:`random.Random` for reproducible output.
    """

    def __init__(
        self,
        catalog: Optional[MoveCatalog] = None,
        rng: Optional[random.Random] = None,
        *,
        patterns: Optional[Dict[Difficulty, Tuple[CategoryPattern, ...]]] = None,
        fallback_codes: Sequence[str] = DEFAULT_FALLBACK_CODES,
    ) -> None:
        self._catalog = catalog if catalog is not None else boxing_catalog
        self._random = rng if rng is not None else random.Random()
        self._patterns = patterns if patterns is not None else COMBO_PATTERNS
        self._fallback_codes = tuple(fallback_codes)

    @classmethod
    def from_settings(cls, settings: Settings, catalog: Optional[MoveCatalog] = None) -> "BoxingComboGenerator":
        return cls(catalog=catalog, rng=random.Random(settings.combo_seed))

    @property
    def catalog(self) -> MoveCatalog:
        return self._catalog

    def generate(
        self,
        difficulty: Union[Difficulty, str],
        previous: Optional[Combo] = None,
        allowed_codes: Optional[Sequence[str]] = None,
    ) -> Combo:
        tier = Difficulty(difficulty)
        generation_filter = GenerationFilter.build(allowed_codes)

        codes = self._build(tier, generation_filter)
        if previous is not None and tuple(codes) == tuple(previous.move_codes):
            logger.debug("Combo %s repeats the previous one; regenerating once", codes)
            codes = self._build(tier, generation_filter)

        return Combo(move_codes=tuple(codes), difficulty=tier)

    def generate_weighted(
        self,
        difficulty: Union[Difficulty, str],
        target_code: str,
        allowed_codes: Sequence[str],
        previous: Optional[Combo] = None,
        weight_range: Tuple[int, int] = ARSENAL_WEIGHT_RANGE,
    ) -> Combo:
        """Generate an Add-to-Arsenal combo biased towards ``target_code``.

        Whenever a slot's category contains the target, the target is drawn
        from a pool where it appears ``W`` times (``W`` uniform in
        ``weight_range`` per slot) against one entry for each other allowed
        code. The target is forced into the result if sampling missed it.
        """
        low, high = weight_range
        if low < 1 or high < low:
            raise ValueError(f"Invalid weight range: {weight_range!r}")

        tier = Difficulty(difficulty)
        generation_filter = GenerationFilter.build(allowed_codes, target_code=target_code, weight_range=weight_range)

        codes = self._build(tier, generation_filter)
        if previous is not None and tuple(codes) == tuple(previous.move_codes):
            logger.debug("Arsenal combo %s repeats the previous one; regenerating once", codes)
            codes = self._build(tier, generation_filter)

        if target_code not in codes:
            codes = self._force_target(codes, target_code)

        return Combo(move_codes=tuple(codes), difficulty=tier)

    def _build(self, difficulty: Difficulty, generation_filter: GenerationFilter) -> List[str]:
        pattern = self._random.choice(self._patterns[difficulty])
        codes: List[str] = []
        for category in pattern:
            code = self._pick(category, generation_filter)
            if code is not None:
                codes.append(code)
        return self._repair(codes, generation_filter)

    def _eligible(self, category: MoveCategory, generation_filter: GenerationFilter) -> List[str]:
        return [code for code in self._catalog.codes_in_category(category) if generation_filter.allows(code)]

    def _pick(self, category: MoveCategory, generation_filter: GenerationFilter) -> Optional[str]:
        eligible = self._eligible(category, generation_filter)
        if not eligible:
            return None

        target = generation_filter.target_code
        if target is None or target not in eligible:
            return self._random.choice(eligible)

        low, high = generation_filter.weight_range
        weight = self._random.randint(low, high)
        pool: List[str] = []
        for code in eligible:
            pool.extend([code] * (weight if code == target else 1))
        return self._random.choice(pool)

    def _repair(self, codes: List[str], generation_filter: GenerationFilter) -> List[str]:
        if not codes:
            codes = self._fallback(generation_filter)
            logger.debug("Empty combo; falling back to %s", codes)

        if codes and not self._contains_punch(codes):
            punches = self._eligible(MoveCategory.PUNCH, generation_filter)
            if punches:
                position = self._random.randint(0, len(codes))
                codes.insert(position, self._random.choice(punches))

        return limit_consecutive_repeats(codes)

    def _fallback(self, generation_filter: GenerationFilter) -> List[str]:
        punches = self._eligible(MoveCategory.PUNCH, generation_filter)
        if punches:
            return self._random.sample(punches, min(2, len(punches)))
        if generation_filter.is_restricted:
            allowed = list(generation_filter.allowed_codes or ())
            return self._random.sample(allowed, min(2, len(allowed)))
        return list(self._fallback_codes)

    def _contains_punch(self, codes: Sequence[str]) -> bool:
        return any(self._catalog.category_of(code) == MoveCategory.PUNCH for code in codes)

    def _force_target(self, codes: List[str], target_code: str) -> List[str]:
        forced = list(codes)
        if self._catalog.category_of(target_code) == MoveCategory.PUNCH:
            punch_slots = [
                index
                for index, code in enumerate(forced)
                if self._catalog.category_of(code) == MoveCategory.PUNCH
            ]
            if punch_slots:
                forced[self._random.choice(punch_slots)] = target_code
                return forced
        forced.insert(self._random.randint(0, len(forced)), target_code)
        return forced


__all__ = [
    "ARSENAL_WEIGHT_RANGE",
    "BoxingComboGenerator",
    "COMBO_PATTERNS",
    "CategoryPattern",
    "Combo",
    "ComboGenerator",
    "DEFAULT_FALLBACK_CODES",
    "Difficulty",
    "GenerationFilter",
    "MAX_CONSECUTIVE_REPEATS",
    "limit_consecutive_repeats",
]

"""Academy exam: code-to-move recognition questions and scoring."""

from __future__ import annotations

import logging
import random
import re
from typing import List, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .moves import Move

logger = logging.getLogger(__name__)

TARGET_WEIGHT = 6
MAX_CONSECUTIVE_TARGET = 3
DISTRACTOR_COUNT = 2
PLACEHOLDER_DISTRACTORS: Tuple[str, ...] = ("Unknown Move A", "Unknown Move B")

PASS_ACCURACY = 0.85
PASS_STREAK = 8

_SIDE = re.compile(r"\b(left|right)\b", re.IGNORECASE)


class ExamQuestion(BaseModel):
    """Show ``code``; the learner picks ``correct_move_name`` among ``options``."""

    model_config = ConfigDict(frozen=True)

    code: str
    correct_move_name: str
    options: Tuple[str, ...]

    @model_validator(mode="after")
    def _check_options(self) -> "ExamQuestion":
        if self.correct_move_name not in self.options:
            raise ValueError("Exam question options must contain the correct answer.")
        return self

    def is_correct(self, answer: str) -> bool:
        return answer == self.correct_move_name


def _side_neutral(name: str) -> str:
    return " ".join(_SIDE.sub("", name.lower()).split())


def find_counterpart(move: Move, candidates: Sequence[Move]) -> Optional[Move]:
    """Left/right mirror of ``move`` among ``candidates`` (e.g. Slip left and Slip right)."""
    match = _SIDE.search(move.name)
    if match is None:
        return None
    opposite = "right" if match.group(1).lower() == "left" else "left"
    base = _side_neutral(move.name)
    for candidate in candidates:
        if opposite in candidate.name.lower() and _side_neutral(candidate.name) == base:
            return candidate
    return None


class ExamQuestionGenerator:
    """Build exam questions biased towards the move being unlocked.

    The target move is drawn ``TARGET_WEIGHT`` times as often as each
    previously unlocked move, but never more than ``MAX_CONSECUTIVE_TARGET``
    times in a row when other moves exist.
    """

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self._random = rng if rng is not None else random.Random()

    def generate(self, target: Move, unlocked: Sequence[Move], count: int) -> List[ExamQuestion]:
        if count < 0:
            raise ValueError("Question count must be non-negative.")

        others = [move for move in unlocked if move.code != target.code]
        everyone = [target, *others]
        questions: List[ExamQuestion] = []
        streak = 0

        for _ in range(count):
            correct = self._pick_correct(target, others, streak)
            streak = streak + 1 if correct.code == target.code else 0

            options = [correct.name, *self._distractors(correct, everyone)]
            self._random.shuffle(options)
            questions.append(ExamQuestion(code=correct.code, correct_move_name=correct.name, options=tuple(options)))

        logger.debug("Generated %d exam questions for %s", len(questions), target.code)
        return questions

    def _pick_correct(self, target: Move, others: List[Move], streak: int) -> Move:
        if streak >= MAX_CONSECUTIVE_TARGET and others:
            return self._random.choice(others)
        pool = [target] * TARGET_WEIGHT + others
        return self._random.choice(pool)

    def _distractors(self, correct: Move, everyone: List[Move]) -> List[str]:
        available = [move for move in everyone if move.code != correct.code]
        if not available:
            return list(PLACEHOLDER_DISTRACTORS)

        chosen: List[str] = []
        counterpart = find_counterpart(correct, available)
        if counterpart is not None:
            chosen.append(counterpart.name)

        same_category = [
            move for move in available if move.category == correct.category and move.name not in chosen
        ]
        while len(chosen) < DISTRACTOR_COUNT and same_category:
            chosen.append(same_category.pop(self._random.randrange(len(same_category))).name)

        remaining = [move for move in available if move.name not in chosen]
        while len(chosen) < DISTRACTOR_COUNT and remaining:
            chosen.append(remaining.pop(self._random.randrange(len(remaining))).name)

        # Only one alternative exists; pad with placeholders so the question
        # still offers three options.
        for placeholder in PLACEHOLDER_DISTRACTORS:
            if len(chosen) >= DISTRACTOR_COUNT:
                break
            chosen.append(placeholder)
        return chosen


class ExamScorecard(BaseModel):
    """Running tally for one exam attempt."""

    model_config = ConfigDict(frozen=True)

    correct: int = Field(default=0, ge=0)
    wrong: int = Field(default=0, ge=0)
    current_streak: int = Field(default=0, ge=0)
    longest_streak: int = Field(default=0, ge=0)

    def record(self, was_correct: bool) -> "ExamScorecard":
        if not was_correct:
            return self.model_copy(update={"wrong": self.wrong + 1, "current_streak": 0})
        streak = self.current_streak + 1
        return self.model_copy(
            update={
                "correct": self.correct + 1,
                "current_streak": streak,
                "longest_streak": max(self.longest_streak, streak),
            }
        )

    @property
    def answered(self) -> int:
        return self.correct + self.wrong

    @property
    def accuracy(self) -> float:
        return self.correct / self.answered if self.answered else 0.0

    @property
    def passed(self) -> bool:
        return self.accuracy >= PASS_ACCURACY and self.longest_streak >= PASS_STREAK


__all__ = [
    "DISTRACTOR_COUNT",
    "ExamQuestion",
    "ExamQuestionGenerator",
    "ExamScorecard",
    "MAX_CONSECUTIVE_TARGET",
    "PASS_ACCURACY",
    "PASS_STREAK",
    "PLACEHOLDER_DISTRACTORS",
    "TARGET_WEIGHT",
    "find_counterpart",
]

"""Atomic boxing techniques and the read-only catalog that serves them."""

from __future__ import annotations

from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class CatalogError(ValueError):
    """Static catalog data violates a uniqueness or ordering rule."""


class MoveCategory(str, Enum):
    PUNCH = "punch"
    DEFENSE = "defense"
    FOOTWORK = "footwork"
    DECEPTION = "deception"

    @property
    def label(self) -> str:
        return self.value.title()


class Move(BaseModel):
    """Single technique referenced by combos and curriculum units by its code."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(ge=1)
    code: str = Field(min_length=1)
    category: MoveCategory
    name: str
    description: Optional[str] = None
    tips: Tuple[str, ...] = ()


class MoveCatalog:
    """Immutable lookup table over a fixed set of moves."""

    def __init__(self, moves: Iterable[Move]) -> None:
        self._moves: Tuple[Move, ...] = tuple(moves)
        self._by_id: Dict[int, Move] = {}
        self._by_code: Dict[str, Move] = {}
        for move in self._moves:
            if move.id in self._by_id:
                raise CatalogError(f"Duplicate move id: {move.id}")
            if move.code in self._by_code:
                raise CatalogError(f"Duplicate move code: {move.code!r}")
            self._by_id[move.id] = move
            self._by_code[move.code] = move

    def __len__(self) -> int:
        return len(self._moves)

    def __contains__(self, code: object) -> bool:
        return code in self._by_code

    def get_all(self) -> List[Move]:
        return list(self._moves)

    def get_by_id(self, move_id: int) -> Optional[Move]:
        return self._by_id.get(move_id)

    def get_by_code(self, code: str) -> Optional[Move]:
        return self._by_code.get(code)

    def get_by_category(self, category: MoveCategory) -> List[Move]:
        return [move for move in self._moves if move.category == category]

    def codes_in_category(self, category: MoveCategory) -> List[str]:
        return [move.code for move in self._moves if move.category == category]

    def category_of(self, code: str) -> Optional[MoveCategory]:
        move = self._by_code.get(code)
        return move.category if move else None


def _move(
    move_id: int,
    code: str,
    category: MoveCategory,
    name: str,
    description: str,
    *tips: str,
) -> Move:
    return Move(id=move_id, code=code, category=category, name=name, description=description, tips=tips)


_P = MoveCategory.PUNCH
_D = MoveCategory.DEFENSE
_F = MoveCategory.FOOTWORK

# Punches use numeric codes 1-14, defense letters A-M (F is reserved for the
# feint), footwork letters N-X.
BOXING_MOVES: Tuple[Move, ...] = (
    _move(
        1, "1", _P, "Left straight",
        "Quick straight punch with the lead hand (jab), used to range and set up combinations.",
        "Keep your rear hand up to protect your chin",
        "Snap the punch out and back quickly",
    ),
    _move(
        2, "2", _P, "Right straight",
        "Straight punch with the rear hand (cross), powered by hip and shoulder rotation.",
        "Pivot on the ball of your rear foot",
        "Keep your chin tucked behind your lead shoulder",
    ),
    _move(
        3, "3", _P, "Left hook",
        "Lead-hand punch travelling in a horizontal arc to the side of the head or body.",
        "Keep your elbow up at shoulder level",
    ),
    _move(
        4, "4", _P, "Right hook",
        "Rear-hand hook thrown with a full pivot of the rear foot.",
        "Use your legs and core, not just your arm",
    ),
    _move(
        5, "5", _P, "Left uppercut",
        "Vertical lead-hand punch that slips under the guard at close range.",
        "Dip slightly before throwing for more power",
    ),
    _move(
        6, "6", _P, "Right uppercut",
        "Vertical rear-hand punch driven up from a loaded rear leg.",
        "Load your rear leg before exploding upward",
    ),
    _move(7, "7", _P, "Left body hook", "Lead-hand hook to the liver or ribs."),
    _move(8, "8", _P, "Right body hook", "Rear-hand hook to the midsection."),
    _move(9, "9", _P, "Left straight to body", "Jab aimed at the midsection while keeping distance."),
    _move(10, "10", _P, "Right straight to body", "Cross aimed at the midsection, dropping levels with the legs."),
    _move(11, "11", _P, "Right overhand", "Looping rear-hand punch arcing over the opponent's guard."),
    _move(12, "12", _P, "Check hook", "Lead hook thrown while pivoting away from an advancing opponent."),
    _move(13, "13", _P, "Left shovel hook", "Half hook, half uppercut with the lead hand at close range."),
    _move(14, "14", _P, "Right shovel hook", "Half hook, half uppercut with the rear hand at close range."),
    _move(
        15, "A", _D, "Slip left",
        "Shift the head to the outside of an incoming punch while staying in range.",
        "Move your head just enough to avoid the punch",
    ),
    _move(16, "B", _D, "Slip right", "Shift the head to the inside of an incoming punch."),
    _move(17, "C", _D, "Roll left", "Bend the knees and roll the upper body under a hook to the left."),
    _move(18, "D", _D, "Roll right", "Bend the knees and roll the upper body under a hook to the right."),
    _move(19, "E", _D, "Duck", "Drop the level straight down under a punch by bending the knees."),
    _move(20, "G", _D, "Block straight left", "Absorb a jab on the rear glove."),
    _move(21, "H", _D, "Pull back", "Lean the upper body back out of range of a straight punch."),
    _move(22, "I", _D, "Block straight right", "Absorb a cross on the lead glove."),
    _move(23, "J", _D, "Block left hook", "Raise the rear arm to cover the side of the head."),
    _move(24, "K", _D, "Block right hook", "Raise the lead arm to cover the side of the head."),
    _move(25, "L", _D, "Catch jab", "Catch the incoming jab in the rear palm."),
    _move(26, "M", _D, "Parry", "Redirect a straight punch with a small slap of the glove."),
    _move(
        27, "N", _F, "Step in",
        "Step forward with the lead foot first, then follow with the rear foot.",
        "Keep your stance width as you move",
    ),
    _move(28, "O", _F, "Step back", "Step back with the rear foot first, then follow with the lead foot."),
    _move(29, "P", _F, "Step left", "Lateral step to the left, lead foot first."),
    _move(30, "Q", _F, "Step right", "Lateral step to the right, rear foot first."),
    _move(31, "R", _F, "Pivot left", "Rotate on the lead foot, swinging the rear leg around to change angle."),
    _move(32, "S", _F, "Pivot right", "Rotate on the rear foot to turn right away from pressure."),
    _move(33, "T", _F, "Shuffle forward", "Quick burst forward on the balls of the feet."),
    _move(34, "U", _F, "Shuffle backward", "Quick burst backward on the balls of the feet."),
    _move(35, "V", _F, "Circle left", "Continuous lateral movement around the opponent to the left."),
    _move(36, "W", _F, "Circle right", "Continuous lateral movement around the opponent to the right."),
    _move(37, "X", _F, "Switch stance", "Small hop that swaps the lead and rear foot."),
    _move(
        38, "F", MoveCategory.DECEPTION, "Feint",
        "Start the motion of a strike and pull it back to draw a reaction. Written before a punch code, e.g. F1.",
    ),
)

boxing_catalog = MoveCatalog(BOXING_MOVES)


__all__ = [
    "BOXING_MOVES",
    "CatalogError",
    "Move",
    "MoveCatalog",
    "MoveCategory",
    "boxing_catalog",
]

from __future__ import annotations

import pytest

from shadowcoach.moves import BOXING_MOVES, CatalogError, Move, MoveCatalog, MoveCategory, boxing_catalog


def test_boxing_catalog_codes_and_ids_are_unique() -> None:
    codes = [move.code for move in BOXING_MOVES]
    ids = [move.id for move in BOXING_MOVES]
    assert len(codes) == len(set(codes))
    assert len(ids) == len(set(ids))
    assert len(boxing_catalog) == len(BOXING_MOVES)


def test_lookup_by_code_and_category() -> None:
    jab = boxing_catalog.get_by_code("1")
    assert jab is not None
    assert jab.category is MoveCategory.PUNCH
    assert boxing_catalog.category_of("A") is MoveCategory.DEFENSE
    assert boxing_catalog.category_of("N") is MoveCategory.FOOTWORK
    assert boxing_catalog.category_of("F") is MoveCategory.DECEPTION
    assert boxing_catalog.category_of("ZZ") is None
    assert "2" in boxing_catalog
    assert "ZZ" not in boxing_catalog


def test_codes_in_category_preserve_catalog_order() -> None:
    punches = boxing_catalog.codes_in_category(MoveCategory.PUNCH)
    assert punches[:3] == ["1", "2", "3"]
    assert all(boxing_catalog.category_of(code) is MoveCategory.PUNCH for code in punches)
    assert [move.code for move in boxing_catalog.get_by_category(MoveCategory.DECEPTION)] == ["F"]


def test_duplicate_code_is_rejected() -> None:
    moves = [
        Move(id=1, code="1", category=MoveCategory.PUNCH, name="Jab"),
        Move(id=2, code="1", category=MoveCategory.PUNCH, name="Cross"),
    ]
    with pytest.raises(CatalogError):
        MoveCatalog(moves)


def test_duplicate_id_is_rejected() -> None:
    moves = [
        Move(id=1, code="1", category=MoveCategory.PUNCH, name="Jab"),
        Move(id=1, code="2", category=MoveCategory.PUNCH, name="Cross"),
    ]
    with pytest.raises(CatalogError):
        MoveCatalog(moves)


def test_moves_are_immutable() -> None:
    move = boxing_catalog.get_by_id(1)
    assert move is not None
    with pytest.raises(Exception):
        move.name = "Changed"  # type: ignore[misc]

"""Unit tests for /src/checkers/pieces.py"""

import pytest

from src.checkers.pieces import PROMOTION_ROW, Piece
from src.core.exceptions import GameStateError
from src.core.shared_types import Rank, Side


@pytest.mark.parametrize(
    "character, side, rank",
    [
        ("w", Side.WHITE, Rank.MAN),
        ("W", Side.WHITE, Rank.KING),
        ("b", Side.BLACK, Rank.MAN),
        ("B", Side.BLACK, Rank.KING),
    ],
)
def test_diagram_characters(character: str, side: Side, rank: Rank) -> None:
    piece = Piece.from_diagram(character)
    assert piece == Piece(side, rank)
    assert piece.to_diagram() == character


def test_new_piece_is_a_man() -> None:
    piece = Piece(Side.BLACK)
    assert piece.rank == Rank.MAN
    assert not piece.is_king


def test_promote_is_permanent() -> None:
    piece = Piece(Side.WHITE)
    piece.promote()
    assert piece.is_king
    # promoting a king keeps it a king
    piece.promote()
    assert piece.rank == Rank.KING


def test_envelope_encoding() -> None:
    assert Piece(Side.WHITE).to_dict() == {"color": "white", "isKing": False}
    assert Piece(Side.BLACK, Rank.KING).to_dict() == {"color": "black", "isKing": True}
    assert Piece.from_dict({"color": "black", "isKing": True}) == Piece(
        Side.BLACK, Rank.KING
    )
    # isKing may be left out
    assert Piece.from_dict({"color": "white"}) == Piece(Side.WHITE)


@pytest.mark.parametrize("data", [{}, {"color": "red"}, {"isKing": True}])
def test_invalid_envelope_piece(data: dict) -> None:
    with pytest.raises(GameStateError):
        Piece.from_dict(data)


def test_promotion_rows() -> None:
    """White starts on rows 0-2 and crowns on row 7, black the other way around"""
    assert PROMOTION_ROW[Side.WHITE] == 7
    assert PROMOTION_ROW[Side.BLACK] == 0

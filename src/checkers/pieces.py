"""Defines the checkers pieces and their encodings"""

from dataclasses import dataclass
from typing import Any, Self

from src.core.exceptions import GameStateError
from src.core.shared_types import Rank, Side

# Characters used in board diagrams. Lower case: men, upper case: kings.
DIAGRAM_TO_SIDE: dict[str, Side] = {
    "w": Side.WHITE,
    "b": Side.BLACK,
}

SIDE_TO_DIAGRAM: dict[Side, str] = {value: key for key, value in DIAGRAM_TO_SIDE.items()}

# Row a man has to reach to be crowned
PROMOTION_ROW: dict[Side, int] = {
    Side.WHITE: 7,
    Side.BLACK: 0,
}


@dataclass
class Piece:
    side: Side
    rank: Rank = Rank.MAN

    @property
    def is_king(self) -> bool:
        return self.rank == Rank.KING

    @classmethod
    def from_diagram(cls, character: str) -> Self:
        side = DIAGRAM_TO_SIDE[character.lower()]
        rank = Rank.KING if character.isupper() else Rank.MAN
        return cls(side, rank)

    def to_diagram(self) -> str:
        character = SIDE_TO_DIAGRAM[self.side]
        return character.upper() if self.is_king else character

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Envelope encoding: {"color": "white", "isKing": false}"""
        try:
            side = Side(data["color"])
        except (KeyError, ValueError) as e:
            raise GameStateError(f"Cannot interpret piece: {data!r}") from e
        rank = Rank.KING if data.get("isKing", False) else Rank.MAN
        return cls(side, rank)

    def to_dict(self) -> dict[str, str | bool]:
        return {"color": self.side.value, "isKing": self.is_king}

    def promote(self) -> None:
        """Kings never go back to being men."""
        self.rank = Rank.KING

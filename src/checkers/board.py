"""The Game board: which piece stands on which square, plus the bookkeeping the rules engine needs."""

from dataclasses import dataclass
from typing import Any, Optional, Self

from src.checkers.moves import Move, side_moves
from src.checkers.pieces import DIAGRAM_TO_SIDE, Piece
from src.checkers.square import BOARD_DIMENSIONS, Square, all_squares
from src.core.exceptions import GameStateError
from src.core.shared_types import Side

EMPTY_CHAR = "."

# Home rows of each side at the start of a game
HOME_ROWS: dict[Side, range] = {
    Side.WHITE: range(0, 3),
    Side.BLACK: range(5, 8),
}


@dataclass
class Board:
    """
    8x8 mapping of squares to (optional) pieces.

    Every square is a key, so no two pieces can ever share a coordinate.
    Light squares are kept empty by construction: only `initial()`, `from_diagram()` and `from_rows()`
    create pieces and all three refuse light squares.
    """

    position: dict[Square, Optional[Piece]]

    def __repr__(self) -> str:
        return f"Board({self.to_diagram()!r})"

    @classmethod
    def empty(cls) -> Self:
        return cls({square: None for square in all_squares()})

    @classmethod
    def initial(cls) -> Self:
        """12 men per side on the dark squares of their three home rows"""
        board = cls.empty()
        for side, rows in HOME_ROWS.items():
            for square in all_squares():
                if square.row in rows and square.is_dark():
                    board.position[square] = Piece(side)
        return board

    @classmethod
    def from_diagram(cls, diagram: str) -> Self:
        """Construct a board from a text diagram.

        Rows are separated by slashes and read from row 0 to row 7, columns from left (0) to right (7):
        * '.' is an empty square
        * 'w' / 'b' are white / black men
        * 'W' / 'B' are white / black kings

        ex. the starting position:
        .w.w.w.w/w.w.w.w./.w.w.w.w/......../......../b.b.b.b./.b.b.b.b/b.b.b.b.
        """
        rows = diagram.split("/")
        if len(rows) != BOARD_DIMENSIONS[0] or any(
            len(row) != BOARD_DIMENSIONS[1] for row in rows
        ):
            raise GameStateError(f"Board diagram must be 8 rows of 8 squares: {diagram!r}")

        board = cls.empty()
        for row_idx, row in enumerate(rows):
            for col_idx, character in enumerate(row):
                if character == EMPTY_CHAR:
                    continue
                if character.lower() not in DIAGRAM_TO_SIDE:
                    raise GameStateError(f"Unknown piece character {character!r}")
                board._place_on_dark(Square(row_idx, col_idx), Piece.from_diagram(character))
        return board

    def to_diagram(self) -> str:
        return "/".join(
            "".join(self._square_to_diagram(Square(row, col)) for col in range(BOARD_DIMENSIONS[1]))
            for row in range(BOARD_DIMENSIONS[0])
        )

    def _square_to_diagram(self, square: Square) -> str:
        piece = self.position[square]
        return piece.to_diagram() if piece else EMPTY_CHAR

    @classmethod
    def from_rows(cls, rows: list[list[Optional[dict[str, Any]]]]) -> Self:
        """Envelope encoding: 8x8 nested lists of null | {"color", "isKing"}"""
        if len(rows) != BOARD_DIMENSIONS[0] or any(
            len(row) != BOARD_DIMENSIONS[1] for row in rows
        ):
            raise GameStateError("Board must be an 8x8 array.")

        board = cls.empty()
        for row_idx, row in enumerate(rows):
            for col_idx, cell in enumerate(row):
                if cell is None:
                    continue
                board._place_on_dark(Square(row_idx, col_idx), Piece.from_dict(cell))
        return board

    def to_rows(self) -> list[list[Optional[dict[str, str | bool]]]]:
        rows: list[list[Optional[dict[str, str | bool]]]] = []
        for row in range(BOARD_DIMENSIONS[0]):
            cells: list[Optional[dict[str, str | bool]]] = []
            for col in range(BOARD_DIMENSIONS[1]):
                piece = self.position[Square(row, col)]
                cells.append(piece.to_dict() if piece else None)
            rows.append(cells)
        return rows

    def _place_on_dark(self, square: Square, piece: Piece) -> None:
        if not square.is_dark():
            raise GameStateError(
                f"Pieces can only stand on dark squares, found one on ({square.row}, {square.col})."
            )
        self.position[square] = piece

    # --- ACCESS ---
    def piece(self, square: Square) -> Optional[Piece]:
        return self.position[square.validate()]

    def place_piece(self, square: Square, piece: Optional[Piece]) -> None:
        self.position[square.validate()] = piece

    def remove_piece(self, square: Square) -> None:
        self.place_piece(square, None)

    def is_empty(self, square: Square) -> bool:
        return self.piece(square) is None

    def locate_side(self, side: Side) -> list[Square]:
        return [
            square
            for square, piece in self.position.items()
            if piece is not None and piece.side == side
        ]

    def count_pieces(self) -> dict[Side, int]:
        return {side: len(self.locate_side(side)) for side in Side}

    # --- MOVES ---
    def generate_moves(self, side: Side) -> list[Move]:
        """All single-step and single-capture moves of every piece of a side."""
        return side_moves(self, side)

    def move_piece(self, move: Move) -> None:
        """Relocate the piece. The origin is cleared, the piece object itself travels along."""
        piece_that_moved = self.piece(move.from_square)
        self.place_piece(move.from_square, None)
        self.place_piece(move.to_square, piece_that_moved)

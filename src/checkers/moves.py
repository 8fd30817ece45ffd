"""
Geometry/Base movement and capturing rules

Key idea: Use strategy pattern to define the directions each piece rank may travel in.

A single generation call only looks one diagonal step ahead (or one jump for a capture).
Captures are not chained: after a jump, the turn passes to the opponent.
"""

from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from src.checkers.pieces import Piece
from src.checkers.square import Square
from src.core.shared_types import Rank, Side


class Board(Protocol):
    """Just the parts the movement strategies need"""

    def piece(self, square: Square) -> Optional[Piece]: ...
    def locate_side(self, side: Side) -> list[Square]: ...


Vector = tuple[int, int]


@dataclass(frozen=True)
class MoveCandidate:
    """Where the selected piece may go, and whether getting there jumps an opposing piece."""

    to_square: Square
    is_capture: bool = False


@dataclass(frozen=True)
class Move:
    """A candidate bound to the square it starts from."""

    from_square: Square
    to_square: Square
    is_capture: bool = False

    @classmethod
    def from_candidate(cls, from_square: Square, candidate: MoveCandidate) -> "Move":
        return cls(from_square, candidate.to_square, candidate.is_capture)

    def to_notation(self) -> str:
        """ex. '(2,1)-(3,0)' for a step, '(3,0)x(5,2)' for a capture"""
        sep = "x" if self.is_capture else "-"
        return f"({self.from_square.row},{self.from_square.col}){sep}({self.to_square.row},{self.to_square.col})"


# --- MOVEMENT RULES ---
def man_directions(side: Side) -> list[Vector]:
    """Men only move forward: white travels down the rows (towards 7), black up (towards 0)"""
    forward = 1 if side == Side.WHITE else -1
    return [(forward, -1), (forward, 1)]


def king_directions(side: Side) -> list[Vector]:
    """Kings move along all four diagonals, regardless of their side"""
    return [(-1, -1), (-1, 1), (1, -1), (1, 1)]


DirectionsFn = Callable[[Side], list[Vector]]
MOVEMENT_RULES: dict[Rank, DirectionsFn] = {
    Rank.MAN: man_directions,
    Rank.KING: king_directions,
}


def single_step_or_jump(
    square: Square, board: Board, directions: list[Vector]
) -> list[MoveCandidate]:
    """
    For every direction, look at the adjacent square:
    * empty --> a simple step
    * opposing piece and the square behind it on the board and empty --> a capture landing behind it
    * anything else (own piece, edge of the board, blocked landing square) --> nothing
    """
    piece = board.piece(square)
    if piece is None:
        return []

    candidates: list[MoveCandidate] = []
    for d_row, d_col in directions:
        adjacent = square.step(d_row, d_col)
        if not adjacent.is_within_bounds():
            continue

        neighbour = board.piece(adjacent)
        if neighbour is None:
            candidates.append(MoveCandidate(adjacent))
            continue

        if neighbour.side == piece.side:
            continue

        landing = adjacent.step(d_row, d_col)
        if landing.is_within_bounds() and board.piece(landing) is None:
            candidates.append(MoveCandidate(landing, is_capture=True))

    return candidates


def legal_moves(board: Board, square: Square) -> list[MoveCandidate]:
    """Candidates for the piece on the given square (empty list for an empty square). Pure query."""
    piece = board.piece(square)
    if piece is None:
        return []
    directions = MOVEMENT_RULES[piece.rank](piece.side)
    return single_step_or_jump(square, board, directions)


def side_moves(board: Board, side: Side) -> list[Move]:
    """Every move available to every piece of one side"""
    moves: list[Move] = []
    for from_square in board.locate_side(side):
        moves.extend(
            Move.from_candidate(from_square, candidate)
            for candidate in legal_moves(board, from_square)
        )
    return moves


def captures_only(moves: list[Move]) -> list[Move]:
    return [move for move in moves if move.is_capture]

"""
A square on the board

(placed in its own module as multiple other modules need to import it)
"""

from __future__ import annotations

from dataclasses import dataclass

from src.core.exceptions import OutOfRangeError

# Checkers board is always 8x8 (rows, cols)
BOARD_DIMENSIONS = (8, 8)


@dataclass(frozen=True)
class Square:
    row: int
    col: int

    def is_within_bounds(self) -> bool:
        return (0 <= self.row < BOARD_DIMENSIONS[0]) and (
            0 <= self.col < BOARD_DIMENSIONS[1]
        )

    def is_dark(self) -> bool:
        """Only the dark squares are playable: (row + col) is odd"""
        return (self.row + self.col) % 2 == 1

    def validate(self) -> Square:
        """Fail fast on coordinates that can never come from the rendered board."""
        if not self.is_within_bounds():
            raise OutOfRangeError(
                f"Square ({self.row}, {self.col}) is outside of the {BOARD_DIMENSIONS[0]}x{BOARD_DIMENSIONS[1]} board."
            )
        return self

    def step(self, d_row: int, d_col: int) -> Square:
        return Square(self.row + d_row, self.col + d_col)

    def midpoint(self, other: Square) -> Square:
        """Square jumped over when moving from self to other (a capture is always two diagonal steps)."""
        return Square((self.row + other.row) // 2, (self.col + other.col) // 2)


def all_squares() -> list[Square]:
    return [
        Square(row, col)
        for row in range(BOARD_DIMENSIONS[0])
        for col in range(BOARD_DIMENSIONS[1])
    ]

"""
The Session owns the game that is being played on one client, and is the only way to change it.

States
----
* SELECTION_IDLE: no piece selected
* PIECE_SELECTED: a piece of the side to move is selected, its candidates are cached
* TERMINAL: the game is over (only a reset or a newer remote state leaves it)

Listeners (the renderer) are called after every change. `revision` increases with every change, so timers
(bot delay, remote polling) can tell whether the session they were scheduled for has been superseded.
"""

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, Iterable, Optional

from src.checkers.game import Game
from src.checkers.moves import Move, MoveCandidate
from src.checkers.square import Square
from src.core.exceptions import InvalidMoveError
from src.core.shared_types import Side

logger = logging.getLogger(__name__)


class SessionState(Enum):
    SELECTION_IDLE = auto()
    PIECE_SELECTED = auto()
    TERMINAL = auto()


@dataclass(frozen=True)
class Selection:
    square: Square
    candidates: tuple[MoveCandidate, ...]

    def candidate_for(self, square: Square) -> Optional[MoveCandidate]:
        return next((c for c in self.candidates if c.to_square == square), None)

    def targets(self) -> list[Square]:
        return [candidate.to_square for candidate in self.candidates]


Listener = Callable[["Session"], None]


class Session:
    def __init__(
        self,
        game: Optional[Game] = None,
        controlled_sides: Iterable[Side] = (Side.WHITE, Side.BLACK),
    ) -> None:
        self.game = game if game is not None else Game.new_game()
        # sides the player(s) on this client may move for
        self.controlled_sides = frozenset(controlled_sides)
        self.selection: Optional[Selection] = None
        self.revision = 0
        self._listeners: list[Listener] = []

    @property
    def state(self) -> SessionState:
        if self.game.terminal:
            return SessionState.TERMINAL
        if self.selection is not None:
            return SessionState.PIECE_SELECTED
        return SessionState.SELECTION_IDLE

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def is_local_turn(self) -> bool:
        return self.game.side_to_move in self.controlled_sides

    # --- TRANSITIONS ---
    def select(self, square: Square) -> Selection:
        """Select a piece of the side to move and cache its candidates (possibly none)."""
        if self.game.terminal:
            raise InvalidMoveError("Game is over.")
        if not self.is_local_turn():
            raise InvalidMoveError(f"Not your turn. Waiting for {self.game.side_to_move}.")

        piece = self.game.board.piece(square)
        if piece is None or piece.side != self.game.side_to_move:
            raise InvalidMoveError(
                f"No piece of {self.game.side_to_move} on ({square.row}, {square.col})."
            )

        self.selection = Selection(square, tuple(self.game.legal_moves(square)))
        self._changed()
        return self.selection

    def move(self, square: Square) -> Move:
        """Move the selected piece to one of its cached candidates."""
        if self.state != SessionState.PIECE_SELECTED:
            raise InvalidMoveError("Select a piece before moving.")
        # for the type checker
        assert self.selection is not None
        candidate = self.selection.candidate_for(square)
        if candidate is None:
            raise InvalidMoveError(f"({square.row}, {square.col}) is not a legal destination.")

        from_square = self.selection.square
        self.game = self.game.apply_move(from_square, square, list(self.selection.candidates))
        self.selection = None
        self._changed()
        return Move.from_candidate(from_square, candidate)

    def click(self, square: Square) -> bool:
        """
        A click forwarded by the renderer. Returns True if the session changed.
        ---

        1. game over / not our turn --> ignored
        2. a piece is selected and the square is one of its candidates --> move
        3. a piece of the side to move --> (re)select it
        4. anywhere else --> deselect (nothing happens if nothing was selected)
        """
        square.validate()
        if self.game.terminal or not self.is_local_turn():
            logger.debug("Ignoring click on (%d, %d)", square.row, square.col)
            return False

        if self.selection is not None and self.selection.candidate_for(square):
            self.move(square)
            return True

        piece = self.game.board.piece(square)
        if piece is not None and piece.side == self.game.side_to_move:
            self.select(square)
            return True

        return self.deselect()

    def deselect(self) -> bool:
        if self.selection is None:
            return False
        self.selection = None
        self._changed()
        return True

    def apply_move(self, move: Move) -> None:
        """Entry point for moves that do not come from clicks (the bot). Turn ownership is checked by the Game."""
        self.game = self.game.apply_move(move.from_square, move.to_square)
        self.selection = None
        self._changed()

    def reset(self) -> None:
        self.game = Game.new_game()
        self.selection = None
        self._changed()

    def adopt(self, game: Game) -> None:
        """Replace the whole game with one received from the other client."""
        self.game = game
        self.selection = None
        self._changed()

    def _changed(self) -> None:
        self.revision += 1
        for listener in self._listeners:
            listener(self)

"""
The Game class is the entrypoint into the rules for the session and service layers.
It is responsible for orchestrating the business logic required to play a single move:
relocating the piece, removing a captured piece, promotion, passing the turn and detecting the end of the game.
"""

import logging
from copy import deepcopy
from dataclasses import dataclass
from typing import Optional, Self

from src.checkers.board import Board
from src.checkers.moves import Move, MoveCandidate, legal_moves
from src.checkers.pieces import PROMOTION_ROW
from src.checkers.square import Square
from src.core.exceptions import GameStateError, InvalidMoveError
from src.core.models import GameModel
from src.core.shared_types import Side

logger = logging.getLogger(__name__)


@dataclass
class Game:
    # --- DOMAIN LAYER API CALLED BY SESSION / SERVICE ---

    board: Board
    side_to_move: Side
    terminal: bool = False

    @classmethod
    def new_game(cls) -> Self:
        """Standard starting position. White always makes the first move."""
        return cls(board=Board.initial(), side_to_move=Side.WHITE, terminal=False)

    @classmethod
    def from_model(cls, model: GameModel) -> Self:
        """Define how to construct a Game from the information the boundary layers actually have"""

        # Validation
        if model.current_player not in {side.value for side in Side}:
            raise GameStateError(
                f"Invalid current player: {model.current_player!r}. \nPick one from {','.join(side.value for side in Side)}"
            )

        return cls(
            board=Board.from_rows(model.board),
            side_to_move=Side(model.current_player),
            terminal=model.game_over,
        )

    def to_model(self, timestamp: Optional[int] = None) -> GameModel:
        """Encode back into a format the boundary layers use"""
        return GameModel(
            board=self.board.to_rows(),
            current_player=self.side_to_move.value,
            game_over=self.terminal,
            timestamp=timestamp,
        )

    @property
    def winner(self) -> Optional[Side]:
        """Once the game is over, the side that would be next to move has run out of pieces."""
        if not self.terminal:
            return None
        counts = self.board.count_pieces()
        if counts[Side.WHITE] == 0:
            return Side.BLACK
        if counts[Side.BLACK] == 0:
            return Side.WHITE
        return self.side_to_move.opponent

    def same_position(self, other: "Game") -> bool:
        """Board, turn and terminal flag all equal."""
        return (
            self.board == other.board
            and self.side_to_move == other.side_to_move
            and self.terminal == other.terminal
        )

    def legal_moves(self, square: Square) -> list[MoveCandidate]:
        """Candidates for the piece on the square. Does not check whose turn it is."""
        return legal_moves(self.board, square)

    def all_moves(self, side: Optional[Side] = None) -> list[Move]:
        return self.board.generate_moves(side or self.side_to_move)

    def apply_move(
        self,
        from_square: Square,
        to_square: Square,
        candidates: Optional[list[MoveCandidate]] = None,
    ) -> Self:
        """
        Attempt to make a move
        -----

        Returns the Game after the move. This instance is never touched, so a rejected move leaves nothing half-done.

        `candidates` is the set that was cached when the piece got selected. When left out, it is generated now.

        1. relocate the piece (origin cleared)
        2. capture? --> clear the jumped square (midpoint of origin and destination)
        3. far row reached? --> crown the piece
        4. pass the turn
        5. game over if either side has no pieces left
        """
        # make sure the game is (still) in progress
        if self.terminal:
            raise InvalidMoveError("Game is over. No more moves can be made.")

        # make sure the piece belongs to the side that is to move
        piece = self.board.piece(from_square)
        if piece is None or piece.side != self.side_to_move:
            raise InvalidMoveError(
                f"No piece of {self.side_to_move} on ({from_square.row}, {from_square.col})."
            )

        # check if the move is among the candidates
        if candidates is None:
            candidates = self.legal_moves(from_square)
        to_square.validate()
        candidate = next((c for c in candidates if c.to_square == to_square), None)
        if candidate is None:
            raise InvalidMoveError(
                f"Move not allowed: ({from_square.row}, {from_square.col}) -> ({to_square.row}, {to_square.col})"
            )
        move = Move.from_candidate(from_square, candidate)
        self._assert_still_playable(move)

        next_game = deepcopy(self)
        next_game._update_board(move)
        next_game._switch_turn()
        next_game._update_terminal()
        logger.debug(
            "Moved %s for %s, %s to move", move.to_notation(), self.side_to_move, next_game.side_to_move
        )
        return next_game

    # -- PRIVATE HELPERS ---
    def _assert_still_playable(self, move: Move) -> None:
        """A cached candidate may be stale: the landing square must be empty and a jumped square must hold an opponent."""
        if not self.board.is_empty(move.to_square):
            raise InvalidMoveError(
                f"Target square ({move.to_square.row}, {move.to_square.col}) is occupied."
            )
        if move.is_capture:
            jumped = self.board.piece(move.from_square.midpoint(move.to_square))
            if jumped is None or jumped.side == self.side_to_move:
                raise InvalidMoveError(
                    f"Capture {move.to_notation()} does not jump an opposing piece."
                )

    def _update_board(self, move: Move) -> None:
        self.board.move_piece(move)

        if move.is_capture:
            self.board.remove_piece(move.from_square.midpoint(move.to_square))
            logger.debug("Jump move executed")

        moved_piece = self.board.piece(move.to_square)
        # for the type checker: the piece was just placed there
        assert moved_piece is not None
        if not moved_piece.is_king and move.to_square.row == PROMOTION_ROW[moved_piece.side]:
            moved_piece.promote()
            logger.debug("Piece promoted to king on (%d, %d)", move.to_square.row, move.to_square.col)

    def _switch_turn(self) -> None:
        self.side_to_move = self.side_to_move.opponent

    def _update_terminal(self) -> None:
        """Only running out of pieces ends the game. A side without legal moves simply cannot move."""
        counts = self.board.count_pieces()
        self.terminal = any(count == 0 for count in counts.values())
        if self.terminal:
            logger.info("Game over - %s wins", self.winner)

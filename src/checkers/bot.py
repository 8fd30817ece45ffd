"""
Automated opponent.

Captures are preferred: if any capture exists, only captures are considered. The pick within the pool is left to a
strategy (a plain function from the pool to one move), random by default so test doubles can replace it.
"""

import logging
import random
from typing import Callable, Optional

from src.checkers.game import Game
from src.checkers.moves import Move, captures_only
from src.checkers.session import Session
from src.core.shared_types import Side

logger = logging.getLogger(__name__)

MoveStrategy = Callable[[list[Move]], Move]


def random_strategy(rng: Optional[random.Random] = None) -> MoveStrategy:
    """Uniform choice from the pool, using its own RNG when one is given (seeded games)."""
    generator = rng or random.Random()

    def _choose(pool: list[Move]) -> Move:
        return generator.choice(pool)

    return _choose


class Bot:
    def __init__(self, side: Side, strategy: Optional[MoveStrategy] = None) -> None:
        self.side = side
        self.strategy = strategy or random_strategy()

    def candidate_pool(self, game: Game) -> list[Move]:
        all_moves = game.all_moves(self.side)
        jumps = captures_only(all_moves)
        return jumps or all_moves

    def choose_move(self, game: Game) -> Optional[Move]:
        """None when it is not the bot's turn, the game is over, or the bot has nothing to play."""
        if game.terminal or game.side_to_move != self.side:
            return None
        pool = self.candidate_pool(game)
        if not pool:
            logger.debug("Bot (%s) has no legal move", self.side)
            return None
        return self.strategy(pool)

    def play(self, session: Session) -> Optional[Move]:
        """Choose and apply a move on the session. Leaves the session untouched if there is nothing to play."""
        move = self.choose_move(session.game)
        if move is None:
            return None
        session.apply_move(move)
        logger.debug("Bot (%s) played %s", self.side, move.to_notation())
        return move

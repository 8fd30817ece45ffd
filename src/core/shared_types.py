"""
Type definitions used across layers
"""

from enum import StrEnum


class Side(StrEnum):
    """The two sides of a game. Values are the strings used in the stored/shared envelope."""

    WHITE = "white"
    BLACK = "black"

    @property
    def opponent(self) -> "Side":
        return Side.BLACK if self == Side.WHITE else Side.WHITE


class Rank(StrEnum):
    MAN = "man"
    KING = "king"


class GameMode(StrEnum):
    LOCAL = "local"
    BOT = "bot"
    REMOTE = "remote"

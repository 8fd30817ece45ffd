"""
Boundary layer data model(s).

These objects are used to communicate between the domain (Game) and the layers around it:
the synchronization coordinator, the store, and the API models.
(Decouples the JSON envelope shape and the DB layer from the domain objects.)
"""

from dataclasses import dataclass
from typing import Optional

# Type aliases to make GameModel easier to read
SideName = str
CellData = Optional[dict[str, str | bool]]


@dataclass
class GameModel:
    """Transport-safe representation of a checkers game used between Game, Sync, and API layers."""

    board: list[list[CellData]]
    current_player: SideName
    game_over: bool
    timestamp: Optional[int] = None

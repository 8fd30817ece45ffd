"""Models for the data that crosses the client boundary: the shared game envelope, clicks, and what gets rendered"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.checkers.square import BOARD_DIMENSIONS
from src.core.exceptions import InvalidRequestError
from src.core.models import GameModel
from src.core.shared_types import Side


# --- SHARED STATE ---
class CellModel(BaseModel):
    color: Side
    isKing: bool = False


class GameEnvelope(BaseModel):
    """
    JSON written to / read from the key-value store.

    {"board": [[null | {"color": "white", "isKing": false}, ...] x8] x8,
     "currentPlayer": "white", "gameOver": false, "timestamp": 1700000000000}
    """

    model_config = ConfigDict(populate_by_name=True)

    board: list[list[Optional[CellModel]]]
    current_player: Side = Field(alias="currentPlayer")
    game_over: bool = Field(alias="gameOver")
    timestamp: Optional[int] = None

    @field_validator("board")
    @classmethod
    def validate_board(
        cls, value: list[list[Optional[CellModel]]]
    ) -> list[list[Optional[CellModel]]]:
        if len(value) != BOARD_DIMENSIONS[0] or any(
            len(row) != BOARD_DIMENSIONS[1] for row in value
        ):
            raise InvalidRequestError("Board must be an 8x8 array.")
        return value

    @classmethod
    def from_model(cls, model: GameModel) -> "GameEnvelope":
        return cls.model_validate(
            {
                "board": model.board,
                "currentPlayer": model.current_player,
                "gameOver": model.game_over,
                "timestamp": model.timestamp,
            }
        )

    def to_model(self) -> GameModel:
        return GameModel(
            board=[
                [cell.model_dump(mode="json") if cell else None for cell in row]
                for row in self.board
            ],
            current_player=self.current_player.value,
            game_over=self.game_over,
            timestamp=self.timestamp,
        )

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=False)


class SharedGameState(GameEnvelope):
    """Copy of the envelope handed to the host platform for sharing, tagged with the game it belongs to."""

    game_id: str = Field(alias="gameId")


# --- CLICKS ---
class SquareClick(BaseModel):
    row: int
    col: int

    @field_validator(*["row", "col"])
    @classmethod
    def validate_coordinate(cls, value: int) -> int:
        if not 0 <= value < BOARD_DIMENSIONS[0]:
            raise InvalidRequestError(f"Coordinate {value} is outside of the board.")
        return value


# --- RENDERING ---
class GameView(BaseModel):
    """Everything the renderer needs to draw the current state"""

    board: list[list[Optional[CellModel]]]
    current_player: Side
    game_over: bool
    winner: Optional[Side]
    selected: Optional[tuple[int, int]]
    highlights: list[tuple[int, int]]
    turn_text: str
    status_text: str
    game_id: Optional[str] = None

    def dump(self) -> dict[str, Any]:
        return self.model_dump(mode="json")

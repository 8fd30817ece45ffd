"""Orchestration of communication between the client shell (renderer, host platform) and the game, bot, and sync layers."""

import asyncio
import contextlib
import logging
from typing import Optional, Protocol

from src.api.models import GameEnvelope, GameView, SharedGameState, SquareClick
from src.checkers.bot import Bot, MoveStrategy
from src.checkers.session import Session
from src.checkers.square import Square
from src.core.config import Settings
from src.core.exceptions import GameStateError
from src.core.shared_types import GameMode, Side
from src.db.store import KeyValueStore
from src.sync.coordinator import Clock, SyncCoordinator, now_ms
from src.sync.game_id import join_link, new_game_id, parse_start_param

logger = logging.getLogger(__name__)

# The side that creates a remote game always moves first, the side that joins always moves second
CREATOR_SIDE = Side.WHITE
JOINER_SIDE = Side.BLACK


class Renderer(Protocol):
    """Draws the board. Receives a fresh view after every change."""

    def render(self, view: GameView) -> None: ...


class HostPlatform(Protocol):
    """The chat platform the mini-app runs in: just the capabilities the game needs"""

    def show_alert(self, message: str) -> None: ...
    def share(self, text: str) -> None: ...


class CheckersService:
    """Orchestration of layers for one client's checkers game."""

    def __init__(
        self,
        store: KeyValueStore,
        renderer: Renderer,
        host: HostPlatform,
        settings: Optional[Settings] = None,
        clock: Clock = now_ms,
        bot_strategy: Optional[MoveStrategy] = None,
    ) -> None:
        self.store = store
        self.renderer = renderer
        self.host = host
        self.settings = settings or Settings()
        self.clock = clock
        self.bot_strategy = bot_strategy

        self.mode = GameMode.LOCAL
        self.session: Optional[Session] = None
        self.bot: Optional[Bot] = None
        self.sync: Optional[SyncCoordinator] = None
        self.game_id: Optional[str] = None
        self.player_side: Optional[Side] = None
        self._bot_task: Optional[asyncio.Task[None]] = None

    # -- Client entry points ---
    async def launch(self, start_param: Optional[str] = None) -> Optional[GameView]:
        """
        Called once when the mini-app opens.
        ----
        A start parameter carrying a game identifier joins that game. Otherwise nothing starts (the shell shows the mode selection).
        """
        if parse_start_param(start_param) is None:
            return None
        return await self.join_game(start_param)

    async def start_local_game(self) -> GameView:
        """Two players taking turns on the same device."""
        await self.close()
        self.mode = GameMode.LOCAL
        self._new_session(controlled_sides=(Side.WHITE, Side.BLACK))
        return self.view()

    async def start_bot_game(self) -> GameView:
        """Play against the bot. When the bot's side opens the game, it moves right away."""
        await self.close()
        self.mode = GameMode.BOT
        bot_side = self.settings.bot_side
        self.bot = Bot(bot_side, self.bot_strategy)
        self.player_side = bot_side.opponent
        session = self._new_session(controlled_sides=(self.player_side,))
        if session.game.side_to_move == bot_side:
            self.bot.play(session)
        return self.view()

    async def create_remote_game(self) -> str:
        """Start a game against a friend. Returns the join link to hand to them."""
        await self.close()
        self.mode = GameMode.REMOTE
        self.game_id = new_game_id()
        self.player_side = CREATOR_SIDE
        session = self._new_session(controlled_sides=(CREATOR_SIDE,))
        self.sync = self._new_coordinator(session, self.game_id)

        # save initial game state
        await self.sync.publish()
        self.sync.start()
        link = join_link(self.game_id, self.settings.bot_username)
        logger.info("Created remote game %s", self.game_id)
        return link

    async def join_game(self, start_param: str) -> GameView:
        """Second player joins through the shared link's start parameter."""
        game_id = parse_start_param(start_param)
        if game_id is None:
            raise GameStateError(f"Start parameter {start_param!r} does not identify a game.")

        await self.close()
        self.mode = GameMode.REMOTE
        self.game_id = game_id
        self.player_side = JOINER_SIDE
        session = self._new_session(controlled_sides=(JOINER_SIDE,))
        self.sync = self._new_coordinator(session, game_id)
        logger.debug("Joining game with ID from start_param: %s", game_id)

        await self.sync.poll_once()
        self.sync.start()
        return self.view()

    async def handle_click(self, row: int, col: int) -> GameView:
        """A click on the board, forwarded by the renderer."""
        click = SquareClick(row=row, col=col)
        session = self._require_session()

        game_before = session.game
        session.click(Square(click.row, click.col))
        if session.game is game_before:
            return self.view()

        # a move was made
        if self.mode == GameMode.BOT and not session.game.terminal:
            self._schedule_bot_move(session)
        elif self.mode == GameMode.REMOTE and self.sync is not None:
            await self.sync.publish()
        return self.view()

    async def restart(self) -> GameView:
        """Same mode, fresh board. Pending bot moves for the old game are dropped."""
        session = self._require_session()
        await self._cancel_bot_move()
        session.reset()

        if self.mode == GameMode.BOT and self.bot is not None:
            if session.game.side_to_move == self.bot.side:
                self.bot.play(session)
        elif self.mode == GameMode.REMOTE and self.sync is not None:
            await self.sync.publish()
        return self.view()

    async def request_state(self) -> bool:
        """Fetch the shared state right now instead of waiting for the next poll."""
        if self.sync is None:
            return False
        return await self.sync.poll_once()

    def share_game_state(self) -> Optional[str]:
        """Hand a copy of the current state, tagged with the game identifier, to the host platform's share dialog."""
        if self.mode != GameMode.REMOTE or self.game_id is None or self.session is None:
            return None
        envelope = GameEnvelope.from_model(self.session.game.to_model(self.clock()))
        shared = SharedGameState.model_validate(
            {**envelope.model_dump(by_alias=True), "gameId": self.game_id}
        )
        payload = shared.model_dump_json(by_alias=True)
        self.host.share(payload)
        return payload

    def join_link(self) -> Optional[str]:
        if self.game_id is None or self.player_side != CREATOR_SIDE:
            return None
        return join_link(self.game_id, self.settings.bot_username)

    async def close(self) -> None:
        """Stop every timer that belongs to the current game (bot delay, polling)."""
        await self._cancel_bot_move()
        if self.sync is not None:
            await self.sync.stop()
        self.sync = None
        self.bot = None
        self.game_id = None
        self.player_side = None

    def view(self) -> GameView:
        session = self._require_session()
        game = session.game
        selection = session.selection
        return GameView(
            board=game.board.to_rows(),
            current_player=game.side_to_move,
            game_over=game.terminal,
            winner=game.winner,
            selected=(selection.square.row, selection.square.col) if selection else None,
            highlights=[(s.row, s.col) for s in selection.targets()] if selection else [],
            turn_text=self._turn_text(session),
            status_text=self._status_text(session),
            game_id=self.game_id,
        )

    # -- Internal helpers --
    def _new_session(self, controlled_sides: tuple[Side, ...]) -> Session:
        self.session = Session(controlled_sides=controlled_sides)
        self.session.subscribe(self._on_session_changed)
        return self.session

    def _new_coordinator(self, session: Session, game_id: str) -> SyncCoordinator:
        return SyncCoordinator(
            session=session,
            store=self.store,
            game_id=game_id,
            clock=self.clock,
            notifier=self.host.show_alert,
            poll_interval=self.settings.poll_interval,
        )

    def _require_session(self) -> Session:
        if self.session is None:
            raise GameStateError("No game has been started.")
        return self.session

    def _on_session_changed(self, session: Session) -> None:
        if session is self.session:
            self.renderer.render(self.view())

    def _schedule_bot_move(self, session: Session) -> None:
        self._bot_task = asyncio.get_running_loop().create_task(
            self._bot_move_after_delay(session, session.revision)
        )

    async def _bot_move_after_delay(self, session: Session, revision: int) -> None:
        await asyncio.sleep(self.settings.bot_delay)
        # the game may have been restarted or replaced while waiting
        if session is not self.session or session.revision != revision or self.bot is None:
            logger.debug("Dropping bot move scheduled for a superseded game")
            return
        self.bot.play(session)

    async def _cancel_bot_move(self) -> None:
        if self._bot_task is None:
            return
        self._bot_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._bot_task
        self._bot_task = None

    def _turn_text(self, session: Session) -> str:
        side = session.game.side_to_move
        suffix = " (Bot)" if self.bot is not None and self.bot.side == side else ""
        return f"Current Player: {side}{suffix}"

    def _status_text(self, session: Session) -> str:
        game = session.game
        if game.terminal and game.winner is not None:
            return f"Game Over! {game.winner.value.capitalize()} wins!"
        if self.mode != GameMode.REMOTE:
            return ""
        return "Your turn!" if session.is_local_turn() else "Share your move!"

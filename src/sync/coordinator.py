"""
Keeps the sessions of two remote clients on the same game through a shared key-value store.
----

* After every local move the client writes the whole game (the envelope) under the game's key.
* Both clients read that key on a fixed interval. An envelope that is newer than anything seen or written here,
  and that differs from the local game, replaces the local game entirely (last write wins, no merging).

Polling is kept behind `publish()` / `poll_once()` so a push-based transport can call `receive()` instead.
"""

import asyncio
import contextlib
import logging
import time
from typing import Callable, Optional

from pydantic import ValidationError

from src.api.models import GameEnvelope
from src.checkers.game import Game
from src.checkers.session import Session
from src.core.exceptions import GameError, SyncReadError, SyncWriteError
from src.db.store import KeyValueStore
from src.sync.game_id import state_key

logger = logging.getLogger(__name__)

WRITE_FAILURE_NOTICE = "Failed to save game state. Please try again."

Clock = Callable[[], int]
Notifier = Callable[[str], None]


def now_ms() -> int:
    return int(time.time() * 1000)


class SyncCoordinator:
    def __init__(
        self,
        session: Session,
        store: KeyValueStore,
        game_id: str,
        clock: Clock = now_ms,
        notifier: Optional[Notifier] = None,
        poll_interval: float = 2.0,
    ) -> None:
        self.session = session
        self.store = store
        self.game_id = game_id
        self.clock = clock
        self.notifier = notifier
        self.poll_interval = poll_interval
        # newest envelope timestamp written or adopted by this client
        self.last_timestamp: Optional[int] = None
        self._task: Optional[asyncio.Task[None]] = None

    @property
    def key(self) -> str:
        return state_key(self.game_id)

    @property
    def is_polling(self) -> bool:
        return self._task is not None and not self._task.done()

    # --- WRITING ---
    async def publish(self) -> bool:
        """Write the current game. Failures are reported once and not retried."""
        timestamp = self._next_timestamp()
        envelope = GameEnvelope.from_model(self.session.game.to_model(timestamp))
        logger.debug(
            "Saving game state: currentPlayer=%s, timestamp=%d",
            envelope.current_player,
            timestamp,
        )
        try:
            if not await self.store.write(self.key, envelope.to_json()):
                raise SyncWriteError(f"Store refused to save {self.key!r}")
        except SyncWriteError as e:
            logger.error("Error saving game state: %s", e)
            if self.notifier is not None:
                self.notifier(WRITE_FAILURE_NOTICE)
            return False

        self.last_timestamp = timestamp
        logger.debug("Game state saved successfully")
        return True

    # --- READING ---
    async def poll_once(self) -> bool:
        """Read the shared state once. Returns True if the local game got replaced."""
        revision = self.session.revision
        try:
            raw = await self.store.read(self.key)
        except SyncReadError as e:
            # treated as 'no update', the next tick tries again
            logger.warning("Reading game state failed: %s", e)
            return False

        if raw is None:
            return False

        if self.session.revision != revision:
            logger.debug("Local game changed while reading, dropping the result")
            return False

        return self.receive(raw)

    def receive(self, raw: str) -> bool:
        """Reconcile a serialized envelope with the local session."""
        try:
            envelope = GameEnvelope.model_validate_json(raw)
            remote = Game.from_model(envelope.to_model())
        except (ValidationError, GameError) as e:
            logger.warning("Ignoring malformed game state: %s", e)
            return False

        if not self._is_newer(envelope.timestamp):
            logger.debug(
                "Ignoring stale game state (timestamp=%s, last=%s)",
                envelope.timestamp,
                self.last_timestamp,
            )
            return False

        if envelope.timestamp is not None:
            self.last_timestamp = envelope.timestamp

        if remote.same_position(self.session.game):
            return False

        logger.info(
            "Adopting remote game state: currentPlayer=%s, gameOver=%s",
            remote.side_to_move,
            remote.terminal,
        )
        self.session.adopt(remote)
        return True

    def _next_timestamp(self) -> int:
        """The local clock, unless it is behind a timestamp already written or adopted here (clocks of two devices differ)."""
        if self.last_timestamp is None:
            return self.clock()
        return max(self.clock(), self.last_timestamp + 1)

    def _is_newer(self, timestamp: Optional[int]) -> bool:
        """Envelopes without a timestamp are compared by content only."""
        if timestamp is None or self.last_timestamp is None:
            return True
        return timestamp > self.last_timestamp

    # --- POLLING LOOP ---
    def start(self) -> None:
        """Start polling on the running event loop (no-op if already polling)."""
        if self.is_polling:
            return
        self._task = asyncio.get_running_loop().create_task(self._poll_forever())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None

    async def _poll_forever(self) -> None:
        while True:
            await asyncio.sleep(self.poll_interval)
            await self.poll_once()

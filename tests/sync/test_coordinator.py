"""Unit tests for src/sync/coordinator.py"""

import asyncio
import json
from typing import Callable, Optional

import pytest

from src.api.models import GameEnvelope
from src.checkers.game import Game
from src.checkers.session import Session
from src.checkers.square import Square
from src.core.exceptions import SyncReadError, SyncWriteError
from src.core.shared_types import Side
from src.sync.coordinator import WRITE_FAILURE_NOTICE, SyncCoordinator

GAME_ID = "abc123"
KEY = "game_abc123_state"


# --- MOCK DEPENDENCIES ----
class MockStore:
    """Mock the KeyValueStore using a dictionary."""

    def __init__(self) -> None:
        self.entries: dict[str, str] = {}
        self.refuse_writes = False
        self.raise_on_write = False
        self.raise_on_read = False
        # called while a read is 'in flight'
        self.during_read: Optional[Callable[[], None]] = None

    async def write(self, key: str, value: str) -> bool:
        if self.raise_on_write:
            raise SyncWriteError("store offline")
        if self.refuse_writes:
            return False
        self.entries[key] = value
        return True

    async def read(self, key: str) -> Optional[str]:
        if self.raise_on_read:
            raise SyncReadError("store offline")
        if self.during_read is not None:
            self.during_read()
        return self.entries.get(key)


class FakeClock:
    def __init__(self, now: int = 100) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now


def envelope_json(game: Game, timestamp: Optional[int]) -> str:
    return GameEnvelope.from_model(game.to_model(timestamp)).to_json()


@pytest.fixture
def store() -> MockStore:
    return MockStore()


@pytest.fixture
def notices() -> list[str]:
    return []


@pytest.fixture
def coordinator(store: MockStore, notices: list[str]) -> SyncCoordinator:
    return SyncCoordinator(
        session=Session(controlled_sides=(Side.WHITE,)),
        store=store,
        game_id=GAME_ID,
        clock=FakeClock(100),
        notifier=notices.append,
        poll_interval=0.01,
    )


# --- PUBLISHING ---
@pytest.mark.asyncio
async def test_publish_writes_envelope(coordinator: SyncCoordinator, store: MockStore) -> None:
    assert await coordinator.publish()
    data = json.loads(store.entries[KEY])
    assert data["currentPlayer"] == "white"
    assert data["gameOver"] is False
    assert data["timestamp"] == 100
    assert len(data["board"]) == 8
    assert coordinator.last_timestamp == 100


@pytest.mark.asyncio
async def test_refused_write_is_reported(
    coordinator: SyncCoordinator, store: MockStore, notices: list[str]
) -> None:
    store.refuse_writes = True
    assert not await coordinator.publish()
    assert notices == [WRITE_FAILURE_NOTICE]
    assert coordinator.last_timestamp is None
    assert KEY not in store.entries


@pytest.mark.asyncio
async def test_failing_write_is_reported_once(
    coordinator: SyncCoordinator, store: MockStore, notices: list[str]
) -> None:
    """No automatic retry: one attempt, one notice"""
    store.raise_on_write = True
    assert not await coordinator.publish()
    assert notices == [WRITE_FAILURE_NOTICE]


# --- POLLING ---
@pytest.mark.asyncio
async def test_stale_then_newer_remote_state(
    coordinator: SyncCoordinator, store: MockStore
) -> None:
    """Local write at 100. A remote state stamped 90 is ignored, one stamped 110 replaces the local game."""
    await coordinator.publish()
    local = coordinator.session.game

    stale = Game.new_game().apply_move(Square(2, 1), Square(3, 0))
    store.entries[KEY] = envelope_json(stale, 90)
    assert not await coordinator.poll_once()
    assert coordinator.session.game is local

    newer = Game.new_game().apply_move(Square(2, 5), Square(3, 6))
    store.entries[KEY] = envelope_json(newer, 110)
    assert await coordinator.poll_once()
    assert coordinator.session.game.same_position(newer)
    assert coordinator.session.game.side_to_move == Side.BLACK
    assert coordinator.last_timestamp == 110


@pytest.mark.asyncio
async def test_own_write_is_not_adopted(coordinator: SyncCoordinator) -> None:
    await coordinator.publish()
    revision = coordinator.session.revision
    assert not await coordinator.poll_once()
    assert coordinator.session.revision == revision


@pytest.mark.asyncio
async def test_newer_identical_state_only_moves_the_clock(
    coordinator: SyncCoordinator, store: MockStore
) -> None:
    store.entries[KEY] = envelope_json(Game.new_game(), 500)
    revision = coordinator.session.revision
    assert not await coordinator.poll_once()
    assert coordinator.session.revision == revision
    assert coordinator.last_timestamp == 500


@pytest.mark.asyncio
async def test_state_without_timestamp_compared_by_content(
    coordinator: SyncCoordinator, store: MockStore
) -> None:
    remote = Game.new_game().apply_move(Square(2, 3), Square(3, 4))
    store.entries[KEY] = envelope_json(remote, None)
    assert await coordinator.poll_once()
    assert coordinator.session.game.same_position(remote)


@pytest.mark.asyncio
async def test_read_failure_is_no_update(
    coordinator: SyncCoordinator, store: MockStore, notices: list[str]
) -> None:
    store.raise_on_read = True
    assert not await coordinator.poll_once()
    assert notices == []


@pytest.mark.asyncio
async def test_nothing_stored_yet(coordinator: SyncCoordinator) -> None:
    assert not await coordinator.poll_once()


@pytest.mark.parametrize(
    "raw",
    [
        "not json",
        json.dumps({"board": [], "currentPlayer": "white", "gameOver": False}),
        json.dumps({"board": [[None] * 8] * 8, "currentPlayer": "red", "gameOver": False}),
        json.dumps(
            {
                "board": [[{"color": "white", "isKing": False}] * 8] * 8,
                "currentPlayer": "white",
                "gameOver": False,
            }
        ),
    ],
)
@pytest.mark.asyncio
async def test_malformed_state_is_ignored(
    coordinator: SyncCoordinator, store: MockStore, raw: str
) -> None:
    store.entries[KEY] = raw
    game_before = coordinator.session.game
    assert not await coordinator.poll_once()
    assert coordinator.session.game is game_before


@pytest.mark.asyncio
async def test_result_overlapping_a_local_move_is_dropped(
    coordinator: SyncCoordinator, store: MockStore
) -> None:
    """The local player moved while the read was in flight: the fetched state is already outdated"""
    remote = Game.new_game().apply_move(Square(2, 7), Square(3, 6))
    store.entries[KEY] = envelope_json(remote, 200)

    def local_move() -> None:
        coordinator.session.click(Square(2, 1))
        coordinator.session.click(Square(3, 0))

    store.during_read = local_move
    assert not await coordinator.poll_once()
    assert coordinator.session.game.board.piece(Square(3, 0)) is not None
    assert coordinator.session.game.board.piece(Square(3, 6)) is None


# --- TWO CLIENTS ---
@pytest.mark.asyncio
async def test_two_clients_converge(store: MockStore) -> None:
    clock = FakeClock(1000)
    creator = SyncCoordinator(Session(controlled_sides=(Side.WHITE,)), store, GAME_ID, clock)
    joiner = SyncCoordinator(Session(controlled_sides=(Side.BLACK,)), store, GAME_ID, clock)
    await creator.publish()
    await joiner.poll_once()

    # creator moves
    creator.session.click(Square(2, 1))
    creator.session.click(Square(3, 0))
    clock.now = 2000
    await creator.publish()

    assert await joiner.poll_once()
    assert joiner.session.game.same_position(creator.session.game)
    assert joiner.session.is_local_turn()

    # joiner answers
    joiner.session.click(Square(5, 2))
    joiner.session.click(Square(4, 1))
    clock.now = 3000
    await joiner.publish()

    assert await creator.poll_once()
    assert creator.session.game.same_position(joiner.session.game)
    assert creator.session.game.side_to_move == Side.WHITE


# --- POLLING LOOP ---
@pytest.mark.asyncio
async def test_polling_loop(coordinator: SyncCoordinator, store: MockStore) -> None:
    remote = Game.new_game().apply_move(Square(2, 1), Square(3, 2))
    store.entries[KEY] = envelope_json(remote, 300)

    coordinator.start()
    coordinator.start()  # already running, no second task
    assert coordinator.is_polling
    for _ in range(50):
        await asyncio.sleep(0.01)
        if coordinator.session.game.same_position(remote):
            break
    await coordinator.stop()

    assert coordinator.session.game.same_position(remote)
    assert not coordinator.is_polling


@pytest.mark.asyncio
async def test_clients_with_skewed_clocks_converge(store: MockStore) -> None:
    """The joiner's clock runs far behind the creator's: its writes must still be newer than what it adopted"""
    creator_clock = FakeClock(10000)
    joiner_clock = FakeClock(5000)
    creator = SyncCoordinator(Session(controlled_sides=(Side.WHITE,)), store, GAME_ID, creator_clock)
    joiner = SyncCoordinator(Session(controlled_sides=(Side.BLACK,)), store, GAME_ID, joiner_clock)
    await creator.publish()
    await joiner.poll_once()

    creator.session.click(Square(2, 1))
    creator.session.click(Square(3, 0))
    creator_clock.now = 11000
    await creator.publish()
    assert await joiner.poll_once()

    joiner.session.click(Square(5, 2))
    joiner.session.click(Square(4, 1))
    joiner_clock.now = 6000
    await joiner.publish()
    assert joiner.last_timestamp == 11001

    assert await creator.poll_once()
    assert creator.session.game.same_position(joiner.session.game)
    assert creator.session.game.side_to_move == Side.WHITE


@pytest.mark.asyncio
async def test_publish_never_moves_the_clock_backwards(
    coordinator: SyncCoordinator, store: MockStore
) -> None:
    remote = Game.new_game().apply_move(Square(2, 1), Square(3, 0))
    store.entries[KEY] = envelope_json(remote, 900)
    assert await coordinator.poll_once()

    # local clock still at 100
    assert await coordinator.publish()
    assert coordinator.last_timestamp == 901
    assert json.loads(store.entries[KEY])["timestamp"] == 901

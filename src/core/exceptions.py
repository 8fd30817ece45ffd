"""Custom exceptions. Every layer raises a subclass of GameError so callers can catch one top-level type."""


class GameError(Exception):
    """Base class for all errors raised by this application."""


# --- DOMAIN ---
class OutOfRangeError(GameError):
    """A coordinate outside of the 8x8 grid was used."""


class InvalidMoveError(GameError):
    """Selection/move violates turn ownership, candidate membership or the terminal state."""


class GameStateError(GameError):
    """Game state received across a boundary cannot be interpreted."""


# --- BOUNDARY ---
class InvalidRequestError(GameError):
    """Validation failure of incoming data (raised from the pydantic validators)."""


# --- SYNCHRONIZATION ---
class SyncError(GameError):
    """The external key-value store could not be used."""


class SyncWriteError(SyncError):
    pass


class SyncReadError(SyncError):
    pass

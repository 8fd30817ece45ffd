"""
Settings and logging setup.

Values can be overridden through environment variables prefixed with CHECKERS_ (e.g. CHECKERS_POLL_INTERVAL=5).
"""

import logging
import os
from dataclasses import dataclass
from typing import Self

from src.core.shared_types import Side

LOG_FORMAT = "[checkers] %(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True)
class Settings:
    # seconds the bot waits after the human moved
    bot_delay: float = 0.5
    # seconds between two reads of the shared game state
    poll_interval: float = 2.0
    bot_side: Side = Side.WHITE
    bot_username: str = "webxdragtestbot"
    database_url: str = "sqlite:///checkers.db"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> Self:
        defaults = cls()
        return cls(
            bot_delay=float(os.environ.get("CHECKERS_BOT_DELAY", defaults.bot_delay)),
            poll_interval=float(
                os.environ.get("CHECKERS_POLL_INTERVAL", defaults.poll_interval)
            ),
            bot_side=Side(os.environ.get("CHECKERS_BOT_SIDE", defaults.bot_side)),
            bot_username=os.environ.get("CHECKERS_BOT_USERNAME", defaults.bot_username),
            database_url=os.environ.get("CHECKERS_DATABASE_URL", defaults.database_url),
            log_level=os.environ.get("CHECKERS_LOG_LEVEL", defaults.log_level),
        )


def configure_logging(level: str = "INFO") -> None:
    """Attach a single stream handler to the package logger ('src'). Safe to call more than once."""
    logger = logging.getLogger("src")
    logger.setLevel(getattr(logging, level.upper()))
    logger.handlers.clear()
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)

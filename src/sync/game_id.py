"""Game identifiers and the strings derived from them (join links, start parameters, store keys)"""

import re
from typing import Optional
from uuid import uuid4

START_PARAM_PREFIX = "game_"
STATE_KEY_TEMPLATE = "game_{game_id}_state"
JOIN_LINK_TEMPLATE = "https://t.me/{bot_username}/app?startapp={start_param}"

# what uuid4().hex produces, plus anything else that survives a URL untouched
_URL_SAFE = re.compile(r"^[A-Za-z0-9_-]+$")


def new_game_id() -> str:
    """Opaque, random, URL-safe"""
    return uuid4().hex


def state_key(game_id: str) -> str:
    return STATE_KEY_TEMPLATE.format(game_id=game_id)


def start_param(game_id: str) -> str:
    return f"{START_PARAM_PREFIX}{game_id}"


def join_link(game_id: str, bot_username: str) -> str:
    return JOIN_LINK_TEMPLATE.format(
        bot_username=bot_username, start_param=start_param(game_id)
    )


def parse_start_param(param: Optional[str]) -> Optional[str]:
    """The game identifier carried by a start parameter ('game_<id>'), or None if it does not carry one."""
    if not param or not param.startswith(START_PARAM_PREFIX):
        return None
    game_id = param[len(START_PARAM_PREFIX) :]
    if not _URL_SAFE.match(game_id):
        return None
    return game_id

"""Wiring of one client: settings from the environment, logging, the SQL-backed store and the service."""

import logging
from typing import Optional

from src.core.config import Settings, configure_logging
from src.db.database import make_session_factory
from src.db.sql_store import SQLKeyValueStore
from src.services.checkers_service import CheckersService, HostPlatform, Renderer

logger = logging.getLogger(__name__)


def create_service(
    renderer: Renderer, host: HostPlatform, settings: Optional[Settings] = None
) -> CheckersService:
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)

    session_factory = make_session_factory(settings)
    store = SQLKeyValueStore(session_factory())
    logger.info("Checkers client ready (store: %s)", settings.database_url)
    return CheckersService(store=store, renderer=renderer, host=host, settings=settings)

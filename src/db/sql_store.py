"""Implementation of KeyValueStore using SQLAlchemy"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.core.exceptions import SyncReadError, SyncWriteError
from src.db.schema import DBEntry

logger = logging.getLogger(__name__)


class SQLKeyValueStore:
    """Entries stored in a single SQL table / methods implemented using SQLAlchemy.

    NOTE the session is synchronous. Calls are short and run to completion on the event loop.
    """

    def __init__(self, db_session: Session) -> None:
        self.db = db_session

    async def write(self, key: str, value: str) -> bool:
        """Insert or overwrite the value stored under the key."""
        try:
            entry = self._fetch_entry(key)
            if entry is None:
                self.db.add(DBEntry(key=key, value=value))
            else:
                entry.value = value
            self.db.commit()
            logger.debug("Stored %s", key)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise SyncWriteError(f"Could not store {key!r}") from e
        return True

    async def read(self, key: str) -> Optional[str]:
        try:
            entry = self._fetch_entry(key)
        except SQLAlchemyError as e:
            raise SyncReadError(f"Could not read {key!r}") from e
        return entry.value if entry else None

    def _fetch_entry(self, key: str) -> DBEntry | None:
        query = select(DBEntry).where(DBEntry.key == key)
        return self.db.scalar(query)

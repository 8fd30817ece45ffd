"""
Fixtures shared by the storage tests: key-value stores backed by an in-memory SQLite database.

Every test gets freshly created tables, which are dropped again at teardown.
"""

from typing import Generator

import pytest
from sqlalchemy import StaticPool, create_engine
from sqlalchemy.orm import sessionmaker

from src.db.schema import Base
from src.db.sql_store import SQLKeyValueStore

# one in-memory database kept alive by a single shared connection
memory_engine = create_engine(
    "sqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
MemorySession = sessionmaker(autoflush=False, bind=memory_engine)


@pytest.fixture
def memory_tables() -> Generator[None, None, None]:
    Base.metadata.create_all(bind=memory_engine)
    yield
    Base.metadata.drop_all(bind=memory_engine)


@pytest.fixture
def sql_store(memory_tables: None) -> Generator[SQLKeyValueStore, None, None]:
    """A single client's store."""
    store = SQLKeyValueStore(MemorySession())
    yield store
    store.db.close()


@pytest.fixture
def peer_stores(
    memory_tables: None,
) -> Generator[tuple[SQLKeyValueStore, SQLKeyValueStore], None, None]:
    """Creator and joiner, each with their own database session on the same tables."""
    creator, joiner = SQLKeyValueStore(MemorySession()), SQLKeyValueStore(MemorySession())
    yield creator, joiner
    creator.db.close()
    joiner.db.close()

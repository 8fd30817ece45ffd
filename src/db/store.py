"""Protocol for the external key-value store (the host platform's cloud storage, a database table, ...)"""

from typing import Optional, Protocol


class KeyValueStore(Protocol):
    """Persistence of serialized game envelopes, keyed by a string derived from the game identifier."""

    async def write(self, key: str, value: str) -> bool:
        """Store the value under the key. Returns False (or raises SyncWriteError) when the store is unavailable."""
        ...

    async def read(self, key: str) -> Optional[str]:
        """Value stored under the key, if any. Raises SyncReadError when the store is unavailable."""
        ...

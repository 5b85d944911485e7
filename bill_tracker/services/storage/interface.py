"""
Abstract Storage Interfaces

DESIGN DECISION: Storage is split in two layers:
1. KeyValueStorage - the persistence medium (string values under string
   keys, the shape of browser local storage)
2. BillStoreInterface - the API the BillManager talks to (fetch and save
   the whole snapshot)

This allows us to:
1. Use an in-memory medium for tests
2. Swap the simulated API for a real backend later
3. Keep business logic decoupled from storage implementation

The store only ever exchanges full snapshots. There is no merge or
patch logic.
"""

from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStorage(ABC):
    """
    Abstract key-value persistence medium.

    Values are opaque strings; serialization is the caller's job.
    """

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """
        Read the value stored under a key.

        Returns:
            The stored string, or None if the key is absent
        """
        pass

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """
        Store a value under a key, replacing any previous value.

        Raises:
            StorageError: If the medium cannot be written
        """
        pass

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Remove a key. Removing an absent key is a no-op."""
        pass


class BillStoreInterface(ABC):
    """
    Abstract interface for the bills API.

    Any implementation (simulated, HTTP, database) must implement these
    methods.
    """

    @abstractmethod
    async def fetch_all(self) -> list[dict]:
        """
        Fetch the persisted snapshot.

        Returns:
            List of plain bill records; empty if nothing was saved yet.
            Never raises for missing or unreadable snapshots.
        """
        pass

    @abstractmethod
    async def save_all(self, records: list[dict]) -> None:
        """
        Replace the persisted snapshot with the given records.

        Args:
            records: Plain bill records (the full collection)

        Raises:
            PersistenceError: If the save fails; the previous snapshot
                is left untouched
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class PersistenceError(StorageError):
    """Saving the bills snapshot failed."""
    pass

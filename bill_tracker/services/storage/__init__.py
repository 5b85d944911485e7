"""
Storage Services Package

Provides the storage interfaces, the key-value media, and the simulated
bills API built on top of them.
"""

from bill_tracker.services.storage.interface import (
    BillStoreInterface,
    KeyValueStorage,
    PersistenceError,
    StorageError,
)
from bill_tracker.services.storage.local_storage import (
    InMemoryKeyValueStorage,
    JsonFileKeyValueStorage,
)
from bill_tracker.services.storage.simulated_api import SimulatedApiStore

__all__ = [
    # Interfaces
    "BillStoreInterface",
    "KeyValueStorage",
    # Exceptions
    "PersistenceError",
    "StorageError",
    # Implementations
    "InMemoryKeyValueStorage",
    "JsonFileKeyValueStorage",
    "SimulatedApiStore",
]

"""Services package."""

from bill_tracker.services.storage import (
    BillStoreInterface,
    InMemoryKeyValueStorage,
    JsonFileKeyValueStorage,
    KeyValueStorage,
    PersistenceError,
    SimulatedApiStore,
    StorageError,
)

__all__ = [
    "BillStoreInterface",
    "InMemoryKeyValueStorage",
    "JsonFileKeyValueStorage",
    "KeyValueStorage",
    "PersistenceError",
    "SimulatedApiStore",
    "StorageError",
]

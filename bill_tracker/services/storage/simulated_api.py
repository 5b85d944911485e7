"""
Simulated Bills API

DESIGN DECISION: There is no backend. This store pretends to be one:
every call waits a fixed delay (asyncio.sleep) before touching the
key-value medium, and saves can be forced to fail so the UI's error path
can be exercised.

The snapshot is the whole collection serialized as one JSON array under a
single key. Every save replaces it.
"""

import asyncio
import json
from typing import Optional

import structlog

from bill_tracker.config import get_settings
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


logger = structlog.get_logger(__name__)


class SimulatedApiStore(BillStoreInterface):
    """
    Simulated remote API over a key-value medium.

    Anything not passed explicitly comes from StoreSettings.
    """

    def __init__(
        self,
        storage: Optional[KeyValueStorage] = None,
        delay_seconds: Optional[float] = None,
        storage_key: Optional[str] = None,
        should_fail: Optional[bool] = None,
    ):
        settings = get_settings().store
        self._storage = storage if storage is not None else self._default_storage(settings)
        self._delay = settings.delay_seconds if delay_seconds is None else delay_seconds
        self._key = storage_key or settings.storage_key
        self._should_fail = settings.simulate_failure if should_fail is None else should_fail

    @staticmethod
    def _default_storage(settings) -> KeyValueStorage:
        if settings.use_file_storage:
            return JsonFileKeyValueStorage(settings.data_file)
        return InMemoryKeyValueStorage()

    @property
    def storage_key(self) -> str:
        return self._key

    @property
    def delay_seconds(self) -> float:
        return self._delay

    @property
    def forced_failure(self) -> bool:
        return self._should_fail

    async def _simulate_latency(self) -> None:
        if self._delay > 0:
            await asyncio.sleep(self._delay)

    async def fetch_all(self) -> list[dict]:
        """Fetch the bills snapshot (simulated)."""
        await self._simulate_latency()

        try:
            raw = self._storage.get_item(self._key)
        except StorageError as e:
            logger.error("snapshot_unreadable", key=self._key, error=str(e))
            return []

        if raw is None:
            logger.info("snapshot_fetched", key=self._key, count=0)
            return []

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.error("snapshot_unreadable", key=self._key, error=str(e))
            return []

        if not isinstance(data, list):
            logger.error(
                "snapshot_unreadable",
                key=self._key,
                error=f"expected a list, got {type(data).__name__}",
            )
            return []

        records = [entry for entry in data if isinstance(entry, dict)]
        if len(records) != len(data):
            logger.warning(
                "snapshot_entries_dropped",
                key=self._key,
                dropped=len(data) - len(records),
            )

        logger.info("snapshot_fetched", key=self._key, count=len(records))
        return records

    async def save_all(self, records: list[dict]) -> None:
        """Save the bills snapshot (simulated)."""
        await self._simulate_latency()

        if self._should_fail:
            logger.error("snapshot_save_failed", key=self._key, reason="simulated")
            raise PersistenceError("Simulated network error during save")

        try:
            payload = json.dumps(records)
            self._storage.set_item(self._key, payload)
        except (TypeError, ValueError) as e:
            raise PersistenceError(f"Bills are not serializable: {e}") from e
        except StorageError as e:
            raise PersistenceError(f"Failed to save bills: {e}") from e

        logger.info("snapshot_saved", key=self._key, count=len(records))

    def set_forced_failure(self, flag: bool) -> None:
        """Switch simulated save failures on or off."""
        self._should_fail = bool(flag)
        logger.warning("failure_mode_changed", enabled=self._should_fail)

    def toggle_failure(self, state: Optional[bool] = None) -> bool:
        """Flip the failure flag (or set it when a state is given)."""
        self.set_forced_failure(not self._should_fail if state is None else state)
        return self._should_fail

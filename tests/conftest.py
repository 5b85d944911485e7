"""
Shared fixtures for the Bill Tracker tests.

Every test runs with a zero store delay and its own data file, so nothing
sleeps and nothing touches the project's data/ directory.
"""

import asyncio
from unittest.mock import AsyncMock

import pytest

from bill_tracker.audit import AuditLogger
from bill_tracker.config import get_settings
from bill_tracker.manager import BillManager
from bill_tracker.models.bill import Bill
from bill_tracker.services.storage import InMemoryKeyValueStorage, SimulatedApiStore


def _run_async(coro):
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


class CountingStore(SimulatedApiStore):
    """SimulatedApiStore that counts fetches and saves."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.save_calls = 0
        self.fetch_calls = 0

    async def fetch_all(self) -> list[dict]:
        self.fetch_calls += 1
        return await super().fetch_all()

    async def save_all(self, records: list[dict]) -> None:
        self.save_calls += 1
        await super().save_all(records)


@pytest.fixture(autouse=True)
def _isolate_settings(tmp_path, monkeypatch):
    """Point settings at a per-test data file and drop the delay."""
    monkeypatch.setenv("BILL_STORE_DATA_FILE", str(tmp_path / "local_storage.json"))
    monkeypatch.setenv("BILL_STORE_DELAY_SECONDS", "0")
    monkeypatch.delenv("BILL_STORE_SIMULATE_FAILURE", raising=False)
    monkeypatch.delenv("BILL_STORE_STORAGE_KEY", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def run_async():
    """Run a coroutine to completion on a fresh event loop."""
    return _run_async


@pytest.fixture
def medium():
    return InMemoryKeyValueStorage()


@pytest.fixture
def store(medium):
    return CountingStore(storage=medium, delay_seconds=0, storage_key="myBills")


@pytest.fixture
def audit_logger():
    return AsyncMock(spec=AuditLogger)


@pytest.fixture
def manager(store, audit_logger):
    return BillManager(store=store, audit_logger=audit_logger)


@pytest.fixture
def netflix_bill():
    return Bill(
        id="mock-123",
        category="Streaming",
        display_name="Netflix",
        payment_method="Credit Card",
        status="Pending",
        amount=15.99,
        currency="EUR",
    )

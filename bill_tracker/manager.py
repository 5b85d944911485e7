"""
Bill Manager

This module owns the bill collection and defines every operation the
presentation layer can perform on it:
1. CRUD (add/create, update, delete, lookup)
2. View state (filter and sort selections)
3. Derived views (display list, totals by status)

DESIGN DECISION: Changes are optimistic. The in-memory collection is
mutated first, then the full snapshot is saved. If the save fails the
PersistenceError reaches the caller, but the in-memory change stays, so
the UI must re-render either way.

There is no global instance. create_bill_manager() builds one and the
caller owns it.
"""

import locale
import unicodedata
from collections.abc import Mapping
from typing import Optional, Union

import structlog
from pydantic import ValidationError

from bill_tracker.audit import AuditLogger
from bill_tracker.config import get_settings
from bill_tracker.models.bill import (
    DEFAULT_CURRENCY,
    Bill,
    BillFilter,
    BillFormInput,
    BillSort,
    BillStatus,
    BillUpdate,
)
from bill_tracker.services.storage import (
    BillStoreInterface,
    PersistenceError,
    SimulatedApiStore,
)


logger = structlog.get_logger(__name__)


def configure_collation() -> bool:
    """
    Switch string collation to the user's locale.

    Called once by entrypoints. Returns False (and keeps the current
    collation) when the environment names a locale that is not installed.
    """
    try:
        locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error as e:
        logger.warning("collation_locale_unavailable", error=str(e))
        return False
    return True


def _fold_label(label: str) -> str:
    decomposed = unicodedata.normalize("NFKD", label.casefold())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def _name_sort_key(bill: Bill) -> tuple[str, str, str]:
    # Collated on the accent-stripped, casefolded label.
    label = bill.display_label
    folded = _fold_label(label)
    try:
        collated = locale.strxfrm(folded)
    except ValueError:
        collated = folded
    return collated, folded, label


class BillManager:
    """
    Single source of truth for bill state.

    Flow for every mutation:
    1. Change the in-memory collection
    2. Audit the change
    3. Save the full snapshot through the store
    """

    def __init__(
        self,
        store: BillStoreInterface,
        audit_logger: Optional[AuditLogger] = None,
        default_currency: str = DEFAULT_CURRENCY,
    ):
        self._store = store
        self._audit_logger = audit_logger
        self._default_currency = default_currency

        self._bills: list[Bill] = []
        # Stored entries that failed validation; written back unchanged
        self._unreadable: list[dict] = []
        self._current_filter = BillFilter.ALL
        self._current_sort = BillSort.DEFAULT
        self._initialized = False

    # -------------------------------------------------------------------------
    # State accessors
    # -------------------------------------------------------------------------

    @property
    def bills(self) -> tuple[Bill, ...]:
        """All bills in insertion order (read-only view)."""
        return tuple(self._bills)

    @property
    def current_filter(self) -> BillFilter:
        return self._current_filter

    @property
    def current_sort(self) -> BillSort:
        return self._current_sort

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def store(self) -> BillStoreInterface:
        return self._store

    def get_bill(self, bill_id: str) -> Optional[Bill]:
        """Find a bill by id."""
        for bill in self._bills:
            if bill.id == bill_id:
                return bill
        return None

    def _index_of(self, bill_id: str) -> Optional[int]:
        for idx, bill in enumerate(self._bills):
            if bill.id == bill_id:
                return idx
        return None

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    async def _save(self, operation: str) -> None:
        """Save the full collection; audit and re-raise on failure."""
        snapshot = [bill.to_snapshot() for bill in self._bills]
        snapshot.extend(self._unreadable)
        try:
            await self._store.save_all(snapshot)
        except PersistenceError as e:
            if self._audit_logger:
                await self._audit_logger.log_save_failed(operation, str(e))
            raise

    async def initialize(self) -> None:
        """
        Load bills from the store and replace the collection.

        Must be awaited before the first render, otherwise the UI shows
        an empty list. Entries that cannot be rehydrated are left out of the
        collection but kept in every later save, so they are never lost.
        """
        records = await self._store.fetch_all()

        bills = []
        unreadable = []
        for record in records:
            try:
                bills.append(Bill.from_snapshot(record))
            except ValidationError as e:
                unreadable.append(record)
                logger.warning(
                    "snapshot_entry_skipped",
                    bill_id=record.get("id"),
                    error=str(e),
                )
                if self._audit_logger:
                    await self._audit_logger.log_error(
                        error_type="invalid_snapshot_entry",
                        error_message=str(e),
                        details={"bill_id": record.get("id")},
                    )

        self._bills = bills
        self._unreadable = unreadable
        self._initialized = True

        if self._audit_logger:
            await self._audit_logger.log_bills_loaded(len(bills))

    # -------------------------------------------------------------------------
    # CRUD
    # -------------------------------------------------------------------------

    async def add_bill(self, bill: Bill) -> Bill:
        """
        Append a bill and save.

        Raises:
            PersistenceError: If the save fails (the bill stays in memory)
        """
        self._bills.append(bill)

        if self._audit_logger:
            await self._audit_logger.log_bill_created(
                bill_id=bill.id,
                label=bill.display_label,
                amount=f"{bill.amount.value:.2f} {bill.amount.currency}",
            )

        await self._save("create")
        return bill

    async def create_bill(
        self,
        form: Union[BillFormInput, Mapping],
    ) -> Bill:
        """
        Build a bill from the add-bill form and add it.

        Args:
            form: A BillFormInput or the raw form fields
        """
        if not isinstance(form, BillFormInput):
            form = BillFormInput.model_validate(dict(form))
        bill = form.to_bill(default_currency=self._default_currency)
        return await self.add_bill(bill)

    async def delete_bill(self, bill_id: str) -> bool:
        """
        Remove the first bill with this id and save.

        The snapshot is saved even when no bill matched.

        Returns:
            True if a bill was removed
        """
        idx = self._index_of(bill_id)
        removed = idx is not None

        if removed:
            del self._bills[idx]
            if self._audit_logger:
                await self._audit_logger.log_bill_deleted(bill_id)
        elif self._audit_logger:
            await self._audit_logger.log_bill_not_found(bill_id, "delete")

        await self._save("delete")
        return removed

    async def update_bill(
        self,
        update: Union[BillUpdate, Mapping],
    ) -> Optional[Bill]:
        """
        Replace the amount value and/or status of a bill and save.

        Every other field (id, category, name, payment method, currency)
        is kept. The snapshot is saved even when no bill matched.

        Returns:
            The updated bill, or None if no bill has this id
        """
        if not isinstance(update, BillUpdate):
            update = BillUpdate.model_validate(dict(update))

        idx = self._index_of(update.id)
        updated = None

        if idx is None:
            if self._audit_logger:
                await self._audit_logger.log_bill_not_found(update.id, "update")
        else:
            current = self._bills[idx]
            changes = {}
            fields = {}

            if update.amount is not None:
                fields["amount"] = current.amount.model_copy(
                    update={"value": update.amount}
                )
                changes["amount"] = update.amount
            if update.status is not None:
                fields["status"] = update.status
                changes["status"] = update.status.value

            updated = current.model_copy(update=fields)
            self._bills[idx] = updated

            if self._audit_logger:
                await self._audit_logger.log_bill_updated(update.id, changes)

        await self._save("update")
        return updated

    # -------------------------------------------------------------------------
    # View state
    # -------------------------------------------------------------------------

    def set_filter(self, new_filter: Union[BillFilter, str]) -> None:
        """Set the status filter. No persistence."""
        self._current_filter = BillFilter(new_filter)
        logger.debug("filter_changed", filter=self._current_filter.value)

    def set_sort(self, new_sort: Union[BillSort, str]) -> None:
        """Set the sort order. No persistence."""
        self._current_sort = BillSort(new_sort)
        logger.debug("sort_changed", sort=self._current_sort.value)

    async def set_forced_failure(self, flag: bool) -> None:
        """Switch simulated save failures on the store."""
        set_flag = getattr(self._store, "set_forced_failure", None)
        if set_flag is None:
            raise TypeError(
                f"{type(self._store).__name__} does not support simulated failures"
            )
        set_flag(flag)
        if self._audit_logger:
            await self._audit_logger.log_failure_mode_changed(bool(flag))

    # -------------------------------------------------------------------------
    # Derived views
    # -------------------------------------------------------------------------

    def get_display_bills(self) -> list[Bill]:
        """
        Bills filtered by the current filter, then sorted by the current sort.

        Returns a new list; the collection itself is never reordered.
        Sorting is stable, so equal amounts keep their collection order.
        """
        if self._current_filter == BillFilter.ALL:
            bills = list(self._bills)
        else:
            bills = [
                bill for bill in self._bills
                if bill.status.value == self._current_filter.value
            ]

        if self._current_sort == BillSort.AMOUNT_HIGH_LOW:
            bills.sort(key=lambda b: b.amount.value, reverse=True)
        elif self._current_sort == BillSort.AMOUNT_LOW_HIGH:
            bills.sort(key=lambda b: b.amount.value)
        elif self._current_sort == BillSort.NAME_AZ:
            bills.sort(key=_name_sort_key)

        return bills

    def get_totals_by_status(self) -> dict[BillStatus, float]:
        """Sum of amount values per status (Paid, Unpaid, Pending)."""
        totals = {status: 0.0 for status in BillStatus}
        for bill in self._bills:
            if bill.status in totals:
                totals[bill.status] += bill.amount.value
        return totals


def create_bill_manager(
    store: Optional[BillStoreInterface] = None,
    audit_logger: Optional[AuditLogger] = None,
) -> BillManager:
    """
    Factory function to create a BillManager wired from settings.

    Args:
        store: Store to use; defaults to a SimulatedApiStore built from
            StoreSettings
        audit_logger: Audit logger; defaults to a new AuditLogger

    Returns:
        An uninitialized manager (await initialize() before rendering)
    """
    settings = get_settings()
    return BillManager(
        store=store if store is not None else SimulatedApiStore(),
        audit_logger=audit_logger if audit_logger is not None else AuditLogger(),
        default_currency=settings.app.default_currency,
    )

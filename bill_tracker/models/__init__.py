"""
Data Models Package

This package contains all Pydantic models used in the Bill Tracker.
"""

from bill_tracker.models.bill import (
    DEFAULT_CURRENCY,
    Amount,
    Bill,
    BillFilter,
    BillFormInput,
    BillSort,
    BillStatus,
    BillUpdate,
    coerce_amount_value,
    generate_bill_id,
    parse_status,
    strip_control_chars,
)
from bill_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Bill models
    "DEFAULT_CURRENCY",
    "Amount",
    "Bill",
    "BillFilter",
    "BillFormInput",
    "BillSort",
    "BillStatus",
    "BillUpdate",
    "coerce_amount_value",
    "generate_bill_id",
    "parse_status",
    "strip_control_chars",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]

"""
Audit Models for the Bill Tracker

Every mutation, load and save of the bill collection is recorded as an
audit event. Events are rendered through structlog by the AuditLogger.

DESIGN DECISION: Events carry plain, JSON-friendly details so they can be
logged as-is.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Collection lifecycle
    BILLS_LOADED = "bills_loaded"
    BILL_CREATED = "bill_created"
    BILL_UPDATED = "bill_updated"
    BILL_DELETED = "bill_deleted"
    BILL_NOT_FOUND = "bill_not_found"

    # Persistence
    SAVE_FAILED = "save_failed"
    FAILURE_MODE_CHANGED = "failure_mode_changed"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """A single audit event."""

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # Which bill this is about, if any
    bill_id: Optional[str] = None

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "bill_id": self.bill_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.bill_created(bill_id, label, amount)
        event = AuditEventBuilder.save_failed(operation, error_message)
    """

    @staticmethod
    def bills_loaded(count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BILLS_LOADED,
            description=f"Loaded {count} bills from storage",
            details={"count": count},
        )

    @staticmethod
    def bill_created(bill_id: str, label: str, amount: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BILL_CREATED,
            bill_id=bill_id,
            description=f"Bill added: {label} - {amount}",
            details={"label": label, "amount": amount},
        )

    @staticmethod
    def bill_updated(bill_id: str, changes: dict[str, Any]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BILL_UPDATED,
            bill_id=bill_id,
            description=f"Bill updated: {', '.join(sorted(changes)) or 'no changes'}",
            details={"changes": changes},
        )

    @staticmethod
    def bill_deleted(bill_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BILL_DELETED,
            bill_id=bill_id,
            description="Bill deleted",
        )

    @staticmethod
    def bill_not_found(bill_id: str, operation: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BILL_NOT_FOUND,
            severity=AuditSeverity.WARNING,
            bill_id=bill_id,
            description=f"No bill with this id for {operation}",
            details={"operation": operation},
        )

    @staticmethod
    def save_failed(operation: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            description=f"Saving bills failed after {operation}",
            error_message=error_message,
            details={"operation": operation},
        )

    @staticmethod
    def failure_mode_changed(enabled: bool) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.FAILURE_MODE_CHANGED,
            severity=AuditSeverity.WARNING,
            description=f"Simulated save failure is now {'ON' if enabled else 'OFF'}",
            details={"enabled": enabled},
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
        )

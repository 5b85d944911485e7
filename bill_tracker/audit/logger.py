"""
Audit Logger

DESIGN DECISION: Every change to the bill collection is logged.
This provides:
1. Traceability of what the user did
2. Debugging capability when a save fails
3. A record of optimistic changes that never reached storage

The audit logger:
- Is async so it can sit next to the store calls in the manager
- Never raises (logging must not break the main flow)
"""

import logging
from typing import Any, Optional

import structlog

from bill_tracker.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """
    Attach a stream handler to the stdlib root logger.

    structlog filters by the stdlib level, so entrypoints call this once
    at startup.
    """
    logging.basicConfig(format="%(message)s", level=getattr(logging, level.upper()))


class AuditLogger:
    """Central audit logging service."""

    def __init__(self, name: str = "bill_tracker.audit"):
        self._logger = structlog.get_logger(name)

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event at the level matching its severity.

        Returns False if logging itself failed.
        """
        log_dict = event.to_log_dict()

        try:
            if event.severity == AuditSeverity.ERROR:
                self._logger.error("audit_event", **log_dict)
            elif event.severity == AuditSeverity.WARNING:
                self._logger.warning("audit_event", **log_dict)
            elif event.severity == AuditSeverity.DEBUG:
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception as e:
            logging.getLogger(__name__).error("audit logging failed: %s", e)
            return False

        return True

    async def log_bills_loaded(self, count: int) -> None:
        await self.log(AuditEventBuilder.bills_loaded(count))

    async def log_bill_created(self, bill_id: str, label: str, amount: str) -> None:
        await self.log(AuditEventBuilder.bill_created(bill_id, label, amount))

    async def log_bill_updated(self, bill_id: str, changes: dict[str, Any]) -> None:
        await self.log(AuditEventBuilder.bill_updated(bill_id, changes))

    async def log_bill_deleted(self, bill_id: str) -> None:
        await self.log(AuditEventBuilder.bill_deleted(bill_id))

    async def log_bill_not_found(self, bill_id: str, operation: str) -> None:
        await self.log(AuditEventBuilder.bill_not_found(bill_id, operation))

    async def log_save_failed(self, operation: str, error_message: str) -> None:
        """Log a snapshot save that failed after an in-memory change."""
        await self.log(AuditEventBuilder.save_failed(operation, error_message))

    async def log_failure_mode_changed(self, enabled: bool) -> None:
        await self.log(AuditEventBuilder.failure_mode_changed(enabled))

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> None:
        """Log an error."""
        await self.log(AuditEventBuilder.system_error(error_type, error_message, details))

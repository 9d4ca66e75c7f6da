"""
Audit Logger

Every mutation and every summary request passes through AuditLogger.log:
- A structured JSON line is always written locally
- The event is appended to audit storage when one is configured
- A failing audit sink is logged and reported as False, never raised
"""

import logging
from typing import Optional
from uuid import UUID

import structlog

from expense_tracker.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from expense_tracker.services.storage import AuditStorageInterface


# JSON lines through stdlib logging; the level is set by configure_log_level
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


def configure_log_level(level: str) -> None:
    """Route structlog output through stdlib logging at the given level."""
    numeric_level = getattr(logging, level.upper())
    logging.basicConfig(format="%(message)s", level=numeric_level)
    # basicConfig is a no-op once the root logger has handlers
    logging.getLogger().setLevel(numeric_level)


class AuditLogger:
    """Writes each AuditEvent to the local log and, if configured, to storage."""

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        self._storage = storage
        self._logger = structlog.get_logger("expense_tracker.audit")

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Returns False only when a configured storage rejected the event.
        """
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    def log_user_registered(self, user_id: UUID, email: str) -> None:
        self.log(AuditEventBuilder.user_registered(user_id=user_id, email=email))

    def log_budget_updated(self, user_id: UUID, old_budget: str, new_budget: str) -> None:
        self.log(AuditEventBuilder.budget_updated(
            user_id=user_id,
            old_budget=old_budget,
            new_budget=new_budget,
        ))

    def log_expense_created(
        self,
        owner_id: UUID,
        expense_id: UUID,
        category: str,
        amount: str,
    ) -> None:
        self.log(AuditEventBuilder.expense_created(
            owner_id=owner_id,
            expense_id=expense_id,
            category=category,
            amount=amount,
        ))

    def log_expense_updated(
        self,
        owner_id: UUID,
        expense_id: UUID,
        changed_fields: list[str],
    ) -> None:
        self.log(AuditEventBuilder.expense_updated(
            owner_id=owner_id,
            expense_id=expense_id,
            changed_fields=changed_fields,
        ))

    def log_expense_deleted(self, owner_id: UUID, expense_id: UUID) -> None:
        self.log(AuditEventBuilder.expense_deleted(owner_id=owner_id, expense_id=expense_id))

    def log_expense_not_found(self, owner_id: UUID, expense_id: UUID, operation: str) -> None:
        self.log(AuditEventBuilder.expense_not_found(
            owner_id=owner_id,
            expense_id=expense_id,
            operation=operation,
        ))

    def log_summary_computed(
        self,
        owner_id: UUID,
        month: int,
        year: int,
        expense_count: int,
        percentage_used: str,
    ) -> None:
        self.log(AuditEventBuilder.summary_computed(
            owner_id=owner_id,
            month=month,
            year=year,
            expense_count=expense_count,
            percentage_used=percentage_used,
        ))

    def log_validation_failed(
        self,
        owner_id: Optional[UUID],
        operation: str,
        issues: list[dict],
    ) -> None:
        self.log(AuditEventBuilder.validation_failed(
            owner_id=owner_id,
            operation=operation,
            issues=issues,
        ))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        owner_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            owner_id=owner_id,
        ))

"""
Audit Models for Expense Tracker

An AuditEvent records one user registration, budget change, expense
mutation, failed lookup, rejected input or computed summary, tagged with
the owner it was performed for.

Audit logs are append-only. Events are never updated or deleted.
"""

import json
from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from expense_tracker.clock import utc_now


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Users
    USER_REGISTERED = "user_registered"
    BUDGET_UPDATED = "budget_updated"

    # Expenses
    EXPENSE_CREATED = "expense_created"
    EXPENSE_UPDATED = "expense_updated"
    EXPENSE_DELETED = "expense_deleted"
    EXPENSE_NOT_FOUND = "expense_not_found"

    # Reporting
    SUMMARY_COMPUTED = "summary_computed"

    # Failures
    VALIDATION_FAILED = "validation_failed"
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    One entry in the audit trail.

    owner_id is the user the action was performed for; entity_type and
    entity_id point at the expense, user or summary involved.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=utc_now,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Who
    owner_id: Optional[UUID] = Field(
        default=None,
        description="Authenticated user the event was performed for"
    )

    # What entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'expense', 'user', 'summary')"
    )
    entity_id: Optional[UUID] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """Flat mapping passed to structlog as keyword arguments."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "owner_id": str(self.owner_id) if self.owner_id else None,
            "entity_type": self.entity_type,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }

    def to_sheets_row(self) -> list:
        """
        Row for the AuditLog worksheet.

        Returns columns in order:
        [event_id, timestamp, event_type, severity, owner_id, entity_type,
         entity_id, description, details_json, error_message, is_user_action]
        """
        return [
            str(self.event_id),
            self.timestamp.isoformat(),
            self.event_type.value,
            self.severity.value,
            str(self.owner_id) if self.owner_id else "",
            self.entity_type or "",
            str(self.entity_id) if self.entity_id else "",
            self.description,
            json.dumps(self.details) if self.details else "",
            self.error_message or "",
            str(self.is_user_action),
        ]


class AuditEventBuilder:
    """
    One constructor per audited action, so event wording stays uniform.

    Usage:
        event = AuditEventBuilder.expense_created(owner_id, expense_id, "Food", "120.50")
        event = AuditEventBuilder.summary_computed(owner_id, 10, 2026, 14, "87.25")
    """

    @staticmethod
    def user_registered(user_id: UUID, email: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_REGISTERED,
            owner_id=user_id,
            entity_type="user",
            entity_id=user_id,
            description=f"User registered: {email}",
            details={"email": email},
            is_user_action=True,
        )

    @staticmethod
    def budget_updated(
        user_id: UUID,
        old_budget: str,
        new_budget: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BUDGET_UPDATED,
            owner_id=user_id,
            entity_type="user",
            entity_id=user_id,
            description=f"Monthly budget changed from {old_budget} to {new_budget}",
            details={
                "old_budget": old_budget,
                "new_budget": new_budget,
            },
            is_user_action=True,
        )

    @staticmethod
    def expense_created(
        owner_id: UUID,
        expense_id: UUID,
        category: str,
        amount: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_CREATED,
            owner_id=owner_id,
            entity_type="expense",
            entity_id=expense_id,
            description=f"Expense recorded: {category} - {amount}",
            details={
                "category": category,
                "amount": amount,
            },
            is_user_action=True,
        )

    @staticmethod
    def expense_updated(
        owner_id: UUID,
        expense_id: UUID,
        changed_fields: list[str],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_UPDATED,
            owner_id=owner_id,
            entity_type="expense",
            entity_id=expense_id,
            description=f"Expense updated: {', '.join(changed_fields) or 'no changes'}",
            details={"changed_fields": changed_fields},
            is_user_action=True,
        )

    @staticmethod
    def expense_deleted(owner_id: UUID, expense_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_DELETED,
            owner_id=owner_id,
            entity_type="expense",
            entity_id=expense_id,
            description="Expense deleted",
            is_user_action=True,
        )

    @staticmethod
    def expense_not_found(
        owner_id: UUID,
        expense_id: UUID,
        operation: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_NOT_FOUND,
            severity=AuditSeverity.WARNING,
            owner_id=owner_id,
            entity_type="expense",
            entity_id=expense_id,
            description=f"Expense not found during {operation}",
            details={"operation": operation},
        )

    @staticmethod
    def summary_computed(
        owner_id: UUID,
        month: int,
        year: int,
        expense_count: int,
        percentage_used: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SUMMARY_COMPUTED,
            owner_id=owner_id,
            entity_type="summary",
            description=(
                f"Summary for {year}-{month:02d}: {expense_count} expenses, "
                f"{percentage_used}% of budget"
            ),
            details={
                "month": month,
                "year": year,
                "expense_count": expense_count,
                "percentage_used": percentage_used,
            },
        )

    @staticmethod
    def validation_failed(
        owner_id: Optional[UUID],
        operation: str,
        issues: list[dict],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            owner_id=owner_id,
            description=f"Validation failed during {operation} with {len(issues)} issues",
            details={
                "operation": operation,
                "issues": issues,
            },
            is_user_action=True,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        owner_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            owner_id=owner_id,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
        )

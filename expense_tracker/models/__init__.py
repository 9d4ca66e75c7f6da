"""
Data Models Package

This package contains all Pydantic models used in the Expense Tracker.
All data flowing through the system must conform to these schemas.
"""

from expense_tracker.models.expense import (
    NOTE_MAX_LENGTH,
    UNCLASSIFIED_CATEGORY,
    Expense,
    ExpenseCategory,
    ExpenseCreate,
    ExpenseFilter,
    ExpenseUpdate,
    ValidationIssue,
    category_label,
)
from expense_tracker.models.user import User
from expense_tracker.models.report import (
    BudgetBand,
    BudgetStatus,
    CategoryShare,
    MonthlySummary,
)
from expense_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Expense models
    "NOTE_MAX_LENGTH",
    "UNCLASSIFIED_CATEGORY",
    "Expense",
    "ExpenseCategory",
    "ExpenseCreate",
    "ExpenseFilter",
    "ExpenseUpdate",
    "ValidationIssue",
    "category_label",
    # User model
    "User",
    # Report models
    "BudgetBand",
    "BudgetStatus",
    "CategoryShare",
    "MonthlySummary",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]

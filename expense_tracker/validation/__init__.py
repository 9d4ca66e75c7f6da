"""Validation package."""

from expense_tracker.validation.validator import (
    ExpenseValidator,
    ValidationError,
    issues_from_pydantic,
)

__all__ = ["ExpenseValidator", "ValidationError", "issues_from_pydantic"]

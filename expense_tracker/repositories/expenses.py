"""
Expense Repository

Typed, owner-scoped access to expense records.

GUARANTEES:
- Every call takes the owner id and never returns another owner's data
- A foreign expense id fails exactly like a missing one (NotFoundError,
  same message), so one user cannot learn which ids another user owns
- find() returns a list, possibly empty, newest occurrence first
"""

from datetime import datetime
from typing import Any, Mapping, Optional, Union
from uuid import UUID

import structlog

from expense_tracker.clock import Clock, utc_now
from expense_tracker.models.expense import (
    Expense,
    ExpenseCategory,
    ExpenseCreate,
    ExpenseFilter,
    ExpenseUpdate,
)
from expense_tracker.reports.aggregator import month_bounds
from expense_tracker.services.storage import ExpenseStorageInterface, NotFoundError
from expense_tracker.validation import ExpenseValidator


logger = structlog.get_logger(__name__)


class ExpenseRepository:
    """
    CRUD and filtered listing of one user's expenses.

    Filter precedence: an explicit start/end range wins over a month/year
    pair when both are supplied.
    """

    def __init__(
        self,
        storage: ExpenseStorageInterface,
        validator: Optional[ExpenseValidator] = None,
        clock: Clock = utc_now,
    ):
        self._storage = storage
        self._clock = clock
        self._validator = validator or ExpenseValidator(clock=clock)

    def create(
        self,
        owner_id: UUID,
        amount: Any,
        category: Union[ExpenseCategory, str],
        note: Optional[str] = None,
        date: Optional[Any] = None,
    ) -> Expense:
        """
        Record a new expense.

        date defaults to now (from the clock), note to "".

        Raises:
            ValidationError: negative amount, unknown category, note too
                long, or unparseable date
        """
        payload = {"amount": amount, "category": category}
        if note is not None:
            payload["note"] = note
        if date is not None:
            payload["date"] = date
        return self.create_from(owner_id, payload)

    def create_from(
        self,
        owner_id: UUID,
        payload: Union[ExpenseCreate, Mapping[str, Any]],
    ) -> Expense:
        """
        Record a new expense from a request payload.

        Unknown keys are rejected along with the other validation errors.
        """
        data = self._validator.validate_create(payload)

        now = self._clock()
        expense = Expense(
            owner_id=owner_id,
            amount=data.amount,
            category=data.category,
            note=data.note or "",
            date=data.date or now,
            created_at=now,
            updated_at=now,
        )
        self._storage.save_expense(expense)

        logger.info(
            "expense_created",
            owner_id=str(owner_id),
            expense_id=str(expense.id),
            category=expense.category.value,
        )
        return expense

    def _date_range(
        self,
        expense_filter: ExpenseFilter,
    ) -> tuple[Optional[datetime], Optional[datetime]]:
        if expense_filter.has_range:
            if expense_filter.has_period:
                logger.warning(
                    "filter_range_overrides_period",
                    start_date=str(expense_filter.start_date),
                    end_date=str(expense_filter.end_date),
                    month=expense_filter.month,
                    year=expense_filter.year,
                )
            return expense_filter.start_date, expense_filter.end_date

        if expense_filter.has_period:
            return month_bounds(expense_filter.year, expense_filter.month)

        return None, None

    def find(
        self,
        owner_id: UUID,
        expense_filter: Union[ExpenseFilter, Mapping[str, Any], None] = None,
    ) -> list[Expense]:
        """
        List an owner's expenses matching the filter, newest first.

        Raises:
            ValidationError: malformed filter (bad month, month without
                year, end before start)
        """
        expense_filter = self._validator.validate_filter(expense_filter)
        date_from, date_to = self._date_range(expense_filter)

        return self._storage.list_expenses(
            owner_id,
            category=expense_filter.category,
            date_from=date_from,
            date_to=date_to,
        )

    def find_one(self, owner_id: UUID, expense_id: UUID) -> Expense:
        """
        Fetch a single owned expense.

        Raises:
            NotFoundError: missing, or owned by someone else
        """
        expense = self._storage.get_expense(owner_id, expense_id)
        if expense is None:
            raise NotFoundError(f"Expense not found: {expense_id}")
        return expense

    def update(
        self,
        owner_id: UUID,
        expense_id: UUID,
        fields: Union[ExpenseUpdate, Mapping[str, Any]],
    ) -> Expense:
        """
        Apply a partial update; fields that are absent stay as they were.

        Raises:
            ValidationError: a supplied field is malformed
            NotFoundError: missing, or owned by someone else
        """
        changes = self._validator.validate_update(fields).changes()
        expense = self.find_one(owner_id, expense_id)

        if changes:
            changes["updated_at"] = self._clock()
            expense = expense.model_copy(update=changes)
            self._storage.save_expense(expense)

        logger.info(
            "expense_updated",
            owner_id=str(owner_id),
            expense_id=str(expense_id),
            fields=sorted(k for k in changes if k != "updated_at"),
        )
        return expense

    def delete(self, owner_id: UUID, expense_id: UUID) -> None:
        """
        Remove an owned expense.

        Raises:
            NotFoundError: missing, or owned by someone else
        """
        if not self._storage.delete_expense(owner_id, expense_id):
            raise NotFoundError(f"Expense not found: {expense_id}")

        logger.info(
            "expense_deleted",
            owner_id=str(owner_id),
            expense_id=str(expense_id),
        )

"""
In-Memory Storage Implementation

Backs the test suite and the default "memory" backend. Records are kept in
dicts keyed by id and deep-copied on the way in and out.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from expense_tracker.models.audit import AuditEvent
from expense_tracker.models.expense import Expense, ExpenseCategory
from expense_tracker.models.user import User
from expense_tracker.services.storage.interface import (
    AuditStorageInterface,
    ExpenseStorageInterface,
    UserStorageInterface,
    sort_newest_first,
)


class InMemoryExpenseStorage(ExpenseStorageInterface):
    """Expense storage held in a dict."""

    def __init__(self):
        self._expenses: dict[UUID, Expense] = {}

    def save_expense(self, expense: Expense) -> Expense:
        self._expenses[expense.id] = expense.model_copy(deep=True)
        return expense

    def get_expense(self, owner_id: UUID, expense_id: UUID) -> Optional[Expense]:
        expense = self._expenses.get(expense_id)
        if expense is None or expense.owner_id != owner_id:
            return None
        return expense.model_copy(deep=True)

    def delete_expense(self, owner_id: UUID, expense_id: UUID) -> bool:
        expense = self._expenses.get(expense_id)
        if expense is None or expense.owner_id != owner_id:
            return False
        del self._expenses[expense_id]
        return True

    def list_expenses(
        self,
        owner_id: UUID,
        category: Optional[ExpenseCategory] = None,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
    ) -> list[Expense]:
        matches = []
        for expense in self._expenses.values():
            if expense.owner_id != owner_id:
                continue
            if category and expense.category != category:
                continue
            if date_from and expense.date < date_from:
                continue
            if date_to and expense.date > date_to:
                continue
            matches.append(expense.model_copy(deep=True))

        return sort_newest_first(matches)


class InMemoryUserStorage(UserStorageInterface):
    """User storage held in a dict."""

    def __init__(self):
        self._users: dict[UUID, User] = {}

    def save_user(self, user: User) -> User:
        self._users[user.id] = user.model_copy(deep=True)
        return user

    def get_user(self, user_id: UUID) -> Optional[User]:
        user = self._users.get(user_id)
        return user.model_copy(deep=True) if user else None

    def get_user_by_email(self, email: str) -> Optional[User]:
        email = email.strip().lower()
        for user in self._users.values():
            if user.email == email:
                return user.model_copy(deep=True)
        return None


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only audit log held in a list."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: UUID,
    ) -> list[AuditEvent]:
        events = [
            e for e in self._events
            if e.entity_type == entity_type and e.entity_id == entity_id
        ]
        events.sort(key=lambda e: e.timestamp)
        return events

    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        # Reverse first so same-timestamp events keep newest-first order
        events = sorted(reversed(self._events), key=lambda e: e.timestamp, reverse=True)
        return events[:limit]

"""
Abstract Storage Interface

Three record stores: expenses, users and the audit log. Implementations
live in memory.py (dict-backed) and google_sheets.py.

Operations are filtered range queries plus single-record upsert and
delete. Every expense method takes the owner id; a record owned by someone
else behaves exactly like a missing one.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional
from uuid import UUID

from expense_tracker.models.audit import AuditEvent
from expense_tracker.models.expense import Expense, ExpenseCategory
from expense_tracker.models.user import User


class ExpenseStorageInterface(ABC):
    """
    Abstract interface for expense storage operations.

    Any storage implementation (Google Sheets, PostgreSQL, etc.)
    must implement these methods.
    """

    @abstractmethod
    def save_expense(self, expense: Expense) -> Expense:
        """
        Insert or replace an expense (matched on id).

        Args:
            expense: The expense to persist

        Returns:
            The stored expense

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    def get_expense(self, owner_id: UUID, expense_id: UUID) -> Optional[Expense]:
        """
        Retrieve an expense by ID, only if it belongs to owner_id.

        Returns:
            The expense if found and owned, None otherwise
        """
        pass

    @abstractmethod
    def delete_expense(self, owner_id: UUID, expense_id: UUID) -> bool:
        """
        Delete an expense owned by owner_id.

        Returns:
            True if a record was deleted, False if none matched
        """
        pass

    @abstractmethod
    def list_expenses(
        self,
        owner_id: UUID,
        category: Optional[ExpenseCategory] = None,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
    ) -> list[Expense]:
        """
        List an owner's expenses with optional filters.

        Args:
            owner_id: Only this owner's expenses are returned
            category: Exact category match
            date_from: Expenses on or after this instant
            date_to: Expenses on or before this instant

        Returns:
            Matching expenses, newest occurrence date first
        """
        pass


class UserStorageInterface(ABC):
    """Abstract interface for user storage."""

    @abstractmethod
    def save_user(self, user: User) -> User:
        """Insert or replace a user (matched on id)."""
        pass

    @abstractmethod
    def get_user(self, user_id: UUID) -> Optional[User]:
        """Retrieve a user by ID, or None."""
        pass

    @abstractmethod
    def get_user_by_email(self, email: str) -> Optional[User]:
        """Retrieve a user by (lowercased) email, or None."""
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: UUID,
    ) -> list[AuditEvent]:
        """
        Get all events for a specific entity.

        Returns:
            List of events in chronological order
        """
        pass

    @abstractmethod
    def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Returns:
            List of recent events (newest first)
        """
        pass


def sort_newest_first(expenses: list[Expense]) -> list[Expense]:
    """Newest occurrence first; ties broken by newest created_at."""
    return sorted(
        expenses,
        key=lambda e: (e.date, e.created_at),
        reverse=True,
    )


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage (or not visible to the caller)."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass

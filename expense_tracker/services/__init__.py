"""Services package."""

from expense_tracker.services.storage import (
    AuditStorageInterface,
    ConnectionError,
    DuplicateError,
    ExpenseStorageInterface,
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsExpenseStorage,
    GoogleSheetsUserStorage,
    InMemoryAuditStorage,
    InMemoryExpenseStorage,
    InMemoryUserStorage,
    NotFoundError,
    StorageError,
    UserStorageInterface,
)

__all__ = [
    "AuditStorageInterface",
    "ConnectionError",
    "DuplicateError",
    "ExpenseStorageInterface",
    "GoogleSheetsAuditStorage",
    "GoogleSheetsClient",
    "GoogleSheetsExpenseStorage",
    "GoogleSheetsUserStorage",
    "InMemoryAuditStorage",
    "InMemoryExpenseStorage",
    "InMemoryUserStorage",
    "NotFoundError",
    "StorageError",
    "UserStorageInterface",
]

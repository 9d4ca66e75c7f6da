"""Repository package: typed, owner-scoped record access."""

from expense_tracker.repositories.expenses import ExpenseRepository
from expense_tracker.repositories.users import UserRepository

__all__ = ["ExpenseRepository", "UserRepository"]

"""
User Repository

Registration, profile lookup and monthly-budget updates. Password and
token handling belong to the identity provider and never reach this layer.
"""

from typing import Any, Optional
from uuid import UUID

import structlog

from expense_tracker.models.user import User
from expense_tracker.services.storage import (
    DuplicateError,
    NotFoundError,
    UserStorageInterface,
)
from expense_tracker.validation import ExpenseValidator


logger = structlog.get_logger(__name__)


class UserRepository:
    """Typed access to user records."""

    def __init__(
        self,
        storage: UserStorageInterface,
        validator: Optional[ExpenseValidator] = None,
    ):
        self._storage = storage
        self._validator = validator or ExpenseValidator()

    def register(self, email: str, name: str, monthly_budget: Any = 0) -> User:
        """
        Create a user. Emails are unique regardless of case.

        Raises:
            ValidationError: malformed email/name or negative budget
            DuplicateError: email already registered
        """
        user = self._validator.validate_user(email, name, monthly_budget)

        if self._storage.get_user_by_email(user.email) is not None:
            raise DuplicateError("User already exists with this email")

        self._storage.save_user(user)
        logger.info("user_registered", user_id=str(user.id))
        return user

    def get(self, user_id: UUID) -> User:
        """
        Raises:
            NotFoundError: no such user
        """
        user = self._storage.get_user(user_id)
        if user is None:
            raise NotFoundError(f"User not found: {user_id}")
        return user

    def update_budget(self, user_id: UUID, monthly_budget: Any) -> User:
        """
        Replace the user's monthly budget.

        Raises:
            ValidationError: negative or non-numeric budget
            NotFoundError: no such user
        """
        budget = self._validator.validate_budget(monthly_budget)
        user = self.get(user_id).model_copy(update={"monthly_budget": budget})
        self._storage.save_user(user)

        logger.info("budget_updated", user_id=str(user_id), monthly_budget=str(budget))
        return user

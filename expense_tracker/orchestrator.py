"""
Main Orchestrator for Expense Tracker

This module ties together all the components and defines the request-level
entry points:
1. User profile (register, fetch, change budget)
2. Expense records (add, list, fetch, update, delete)
3. Reports (monthly summary, budget status, ranked categories)

DESIGN DECISION: The orchestrator enforces the boundaries:
- Every call carries the authenticated owner id and is scoped to it
- Summaries are recomputed from storage on every request
- Every step is audited; errors are audited and then re-raised

The owner id comes from the identity provider and is trusted as-is.
"""

from contextlib import contextmanager
from typing import Any, Iterator, Mapping, Optional, Union
from uuid import UUID

import structlog

from expense_tracker.audit import AuditLogger, configure_log_level
from expense_tracker.clock import Clock, utc_now
from expense_tracker.config import Settings, get_settings
from expense_tracker.models.expense import Expense, ExpenseFilter, ExpenseUpdate
from expense_tracker.models.report import BudgetStatus, CategoryShare, MonthlySummary
from expense_tracker.models.user import User
from expense_tracker.reports import BudgetAggregator, ReportFormatter, month_bounds
from expense_tracker.repositories import ExpenseRepository, UserRepository
from expense_tracker.services.storage import (
    AuditStorageInterface,
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
from expense_tracker.validation import ExpenseValidator, ValidationError


logger = structlog.get_logger(__name__)


class ExpenseTracker:
    """
    Request-level facade over repositories, aggregator and formatter.

    Flow for a summary:
    1. Load the owner's budget
    2. Resolve month/year (clock fills the gaps)
    3. Load that month's expenses
    4. Reduce them into a MonthlySummary
    """

    def __init__(
        self,
        expense_storage: ExpenseStorageInterface,
        user_storage: UserStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
        validator: Optional[ExpenseValidator] = None,
        formatter: Optional[ReportFormatter] = None,
        clock: Clock = utc_now,
    ):
        validator = validator or ExpenseValidator(clock=clock)
        self._expenses = ExpenseRepository(expense_storage, validator, clock)
        self._users = UserRepository(user_storage, validator)
        self._aggregator = BudgetAggregator(clock)
        self._formatter = formatter or ReportFormatter(clock=clock)
        self._audit_logger = audit_logger or AuditLogger()

    @property
    def formatter(self) -> ReportFormatter:
        return self._formatter

    def _audit_validation(
        self,
        owner_id: Optional[UUID],
        operation: str,
        error: ValidationError,
    ) -> None:
        self._audit_logger.log_validation_failed(
            owner_id=owner_id,
            operation=operation,
            issues=[issue.model_dump() for issue in error.issues],
        )

    @contextmanager
    def _audit_failures(self, owner_id: Optional[UUID], operation: str) -> Iterator[None]:
        """Audit storage failures as system errors, then re-raise them."""
        try:
            yield
        except (NotFoundError, DuplicateError):
            raise
        except StorageError as e:
            self._audit_logger.log_error(
                error_type=type(e).__name__,
                error_message=str(e),
                details={"operation": operation},
                owner_id=owner_id,
            )
            raise

    # -------------------------------------------------------------------------
    # Users
    # -------------------------------------------------------------------------

    def register_user(self, email: str, name: str, monthly_budget: Any = 0) -> User:
        with self._audit_failures(None, "register_user"):
            try:
                user = self._users.register(email, name, monthly_budget)
            except ValidationError as e:
                self._audit_validation(None, "register_user", e)
                raise

        self._audit_logger.log_user_registered(user.id, user.email)
        return user

    def get_profile(self, owner_id: UUID) -> User:
        with self._audit_failures(owner_id, "get_profile"):
            return self._users.get(owner_id)

    def update_budget(self, owner_id: UUID, monthly_budget: Any) -> User:
        with self._audit_failures(owner_id, "update_budget"):
            previous = self._users.get(owner_id)
            try:
                user = self._users.update_budget(owner_id, monthly_budget)
            except ValidationError as e:
                self._audit_validation(owner_id, "update_budget", e)
                raise

        self._audit_logger.log_budget_updated(
            owner_id,
            old_budget=str(previous.monthly_budget),
            new_budget=str(user.monthly_budget),
        )
        return user

    # -------------------------------------------------------------------------
    # Expenses
    # -------------------------------------------------------------------------

    def add_expense(self, owner_id: UUID, payload: Mapping[str, Any]) -> Expense:
        """Record an expense from a request payload (amount, category, note?, date?)."""
        with self._audit_failures(owner_id, "add_expense"):
            try:
                expense = self._expenses.create_from(owner_id, payload)
            except ValidationError as e:
                self._audit_validation(owner_id, "add_expense", e)
                raise

        self._audit_logger.log_expense_created(
            owner_id,
            expense.id,
            category=expense.category.value,
            amount=str(expense.amount),
        )
        return expense

    def list_expenses(
        self,
        owner_id: UUID,
        filters: Union[ExpenseFilter, Mapping[str, Any], None] = None,
    ) -> list[Expense]:
        with self._audit_failures(owner_id, "list_expenses"):
            try:
                return self._expenses.find(owner_id, filters)
            except ValidationError as e:
                self._audit_validation(owner_id, "list_expenses", e)
                raise

    def get_expense(self, owner_id: UUID, expense_id: UUID) -> Expense:
        with self._audit_failures(owner_id, "get_expense"):
            try:
                return self._expenses.find_one(owner_id, expense_id)
            except NotFoundError:
                self._audit_logger.log_expense_not_found(owner_id, expense_id, "get")
                raise

    def update_expense(
        self,
        owner_id: UUID,
        expense_id: UUID,
        fields: Union[ExpenseUpdate, Mapping[str, Any]],
    ) -> Expense:
        with self._audit_failures(owner_id, "update_expense"):
            try:
                changed = self._expenses.update(owner_id, expense_id, fields)
            except ValidationError as e:
                self._audit_validation(owner_id, "update_expense", e)
                raise
            except NotFoundError:
                self._audit_logger.log_expense_not_found(owner_id, expense_id, "update")
                raise

        self._audit_logger.log_expense_updated(
            owner_id, expense_id, _changed_fields(fields)
        )
        return changed

    def delete_expense(self, owner_id: UUID, expense_id: UUID) -> None:
        with self._audit_failures(owner_id, "delete_expense"):
            try:
                self._expenses.delete(owner_id, expense_id)
            except NotFoundError:
                self._audit_logger.log_expense_not_found(owner_id, expense_id, "delete")
                raise

        self._audit_logger.log_expense_deleted(owner_id, expense_id)

    # -------------------------------------------------------------------------
    # Reports
    # -------------------------------------------------------------------------

    def monthly_summary(
        self,
        owner_id: UUID,
        month: Optional[int] = None,
        year: Optional[int] = None,
    ) -> MonthlySummary:
        """
        Summarize one calendar month for the owner.

        Missing month/year default to the clock's current month/year.
        """
        with self._audit_failures(owner_id, "monthly_summary"):
            user = self._users.get(owner_id)
            try:
                month, year = self._aggregator.resolve_period(month, year)
            except ValueError as e:
                raise ValidationError(str(e)) from e

            start, end = month_bounds(year, month)
            expenses = self._expenses.find(
                owner_id,
                ExpenseFilter(start_date=start, end_date=end),
            )
        summary = self._aggregator.summarize(expenses, user.monthly_budget, month, year)

        self._audit_logger.log_summary_computed(
            owner_id,
            month=summary.month,
            year=summary.year,
            expense_count=summary.expense_count,
            percentage_used=str(summary.percentage_used),
        )
        return summary

    def budget_status(
        self,
        owner_id: UUID,
        month: Optional[int] = None,
        year: Optional[int] = None,
    ) -> BudgetStatus:
        return self._formatter.budget_status(self.monthly_summary(owner_id, month, year))

    def category_report(
        self,
        owner_id: UUID,
        month: Optional[int] = None,
        year: Optional[int] = None,
    ) -> list[CategoryShare]:
        return self._formatter.rank_categories(self.monthly_summary(owner_id, month, year))


def _changed_fields(fields: Union[ExpenseUpdate, Mapping[str, Any]]) -> list[str]:
    """Names of the fields an accepted update set; None counts as absent."""
    if isinstance(fields, ExpenseUpdate):
        return sorted(fields.changes())
    return sorted(name for name, value in fields.items() if value is not None)


def create_app_components(
    settings: Optional[Settings] = None,
    clock: Clock = utc_now,
) -> ExpenseTracker:
    """
    Factory function to wire the tracker from configuration.

    This is the only place settings are read. Everything below receives
    its configuration through constructors.

    Args:
        settings: Loaded settings; defaults to get_settings()
        clock: Time source for default dates and summary months

    Returns:
        A ready ExpenseTracker
    """
    settings = settings or get_settings()
    app_settings = settings.app
    configure_log_level("DEBUG" if app_settings.debug_mode else app_settings.log_level)

    expense_storage: ExpenseStorageInterface
    user_storage: UserStorageInterface
    audit_storage: AuditStorageInterface

    if app_settings.storage_backend == "google_sheets":
        sheets_client = GoogleSheetsClient(settings.google_sheets)
        expense_storage = GoogleSheetsExpenseStorage(sheets_client)
        user_storage = GoogleSheetsUserStorage(sheets_client)
        audit_storage = GoogleSheetsAuditStorage(sheets_client)
    else:
        expense_storage = InMemoryExpenseStorage()
        user_storage = InMemoryUserStorage()
        audit_storage = InMemoryAuditStorage()

    logger.info(
        "app_components_created",
        environment=app_settings.app_environment,
        storage_backend=app_settings.storage_backend,
    )

    return ExpenseTracker(
        expense_storage=expense_storage,
        user_storage=user_storage,
        audit_logger=AuditLogger(audit_storage),
        validator=ExpenseValidator.from_settings(app_settings, clock=clock),
        formatter=ReportFormatter.from_settings(app_settings, clock=clock),
        clock=clock,
    )

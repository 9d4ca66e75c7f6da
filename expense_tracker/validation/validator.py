"""
Input Validation

DESIGN DECISION: Validation happens in two distinct stages:

STAGE 1 - SCHEMA VALIDATION:
- Type checking, required fields, closed category set
- Non-negative amounts, note length, parseable dates
- Any failure here raises ValidationError

STAGE 2 - SEMANTIC CHECKS:
- Dates far in the future
- Unusually large amounts
- These are logged as warnings and never block the write

IMPORTANT: Validation NEVER silently fixes issues.
"""

from datetime import datetime, timedelta
from decimal import Decimal
from typing import Annotated, Any, Mapping, Optional, Union

import structlog
from pydantic import Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from expense_tracker.clock import Clock, utc_now
from expense_tracker.config import AppSettings
from expense_tracker.models.expense import (
    ExpenseCreate,
    ExpenseFilter,
    ExpenseUpdate,
    ValidationIssue,
)
from expense_tracker.models.user import User


logger = structlog.get_logger(__name__)

_budget_adapter = TypeAdapter(Annotated[Decimal, Field(ge=0)])


class ValidationError(Exception):
    """
    Malformed input to a create/update/filter operation.

    Carries every error-level issue found, not just the first one.
    """

    def __init__(self, message: str, issues: Optional[list[ValidationIssue]] = None):
        super().__init__(message)
        self.message = message
        self.issues = issues or []

    def to_dict(self) -> dict:
        return {
            "message": self.message,
            "issues": [issue.model_dump() for issue in self.issues],
        }


def issues_from_pydantic(error: PydanticValidationError) -> list[ValidationIssue]:
    """Translate pydantic's error list into ValidationIssues."""
    issues = []
    for err in error.errors():
        field = ".".join(str(part) for part in err.get("loc", ())) or "__root__"
        issues.append(ValidationIssue(
            field=field,
            issue_type=err.get("type", "invalid_value"),
            message=err.get("msg", "Invalid value"),
            severity="error",
        ))
    return issues


def _raise_for(operation: str, error: PydanticValidationError) -> None:
    issues = issues_from_pydantic(error)
    summary = "; ".join(f"{issue.field}: {issue.message}" for issue in issues)
    raise ValidationError(f"Invalid {operation} input: {summary}", issues) from error


class ExpenseValidator:
    """
    Validates expense, filter, budget and user input.

    Stage 1 raises ValidationError. Stage 2 only logs warnings.
    """

    def __init__(
        self,
        future_date_tolerance_days: int = 7,
        max_expense_amount: Decimal = Decimal("1000000"),
        clock: Clock = utc_now,
    ):
        self._future_tolerance = timedelta(days=future_date_tolerance_days)
        self._max_amount = max_expense_amount
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: AppSettings, clock: Clock = utc_now) -> "ExpenseValidator":
        return cls(
            future_date_tolerance_days=settings.future_date_tolerance_days,
            max_expense_amount=settings.max_expense_amount,
            clock=clock,
        )

    def _semantic_warnings(
        self,
        amount: Optional[Decimal],
        occurred: Optional[datetime],
    ) -> list[ValidationIssue]:
        """Stage 2: suspicious-but-valid values."""
        issues = []

        if occurred and occurred > self._clock() + self._future_tolerance:
            issues.append(ValidationIssue(
                field="date",
                issue_type="future_date",
                message=f"Expense date ({occurred.date()}) is in the future",
                severity="warning",
            ))

        if amount is not None and amount > self._max_amount:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="suspicious_value",
                message=f"Amount ({amount:,.2f}) seems unusually high",
                severity="warning",
            ))

        for issue in issues:
            logger.warning(
                "expense_validation_warning",
                field=issue.field,
                issue_type=issue.issue_type,
                message=issue.message,
            )

        return issues

    def validate_create(self, data: Union[Mapping[str, Any], ExpenseCreate]) -> ExpenseCreate:
        """Validate input for a new expense."""
        if isinstance(data, ExpenseCreate):
            payload = data
        else:
            try:
                payload = ExpenseCreate.model_validate(dict(data))
            except PydanticValidationError as e:
                _raise_for("expense", e)

        self._semantic_warnings(payload.amount, payload.date)
        return payload

    def validate_update(self, data: Union[Mapping[str, Any], ExpenseUpdate]) -> ExpenseUpdate:
        """Validate a partial update; absent fields stay absent."""
        # Built models already passed stage 1 but still get stage 2
        if isinstance(data, ExpenseUpdate):
            payload = data
        else:
            try:
                payload = ExpenseUpdate.model_validate(dict(data))
            except PydanticValidationError as e:
                _raise_for("expense update", e)

        self._semantic_warnings(payload.amount, payload.date)
        return payload

    def validate_filter(
        self,
        data: Union[Mapping[str, Any], ExpenseFilter, None],
    ) -> ExpenseFilter:
        """Validate listing filters. None means no filter."""
        if data is None:
            return ExpenseFilter()
        if isinstance(data, ExpenseFilter):
            return data
        try:
            return ExpenseFilter.model_validate(dict(data))
        except PydanticValidationError as e:
            _raise_for("filter", e)

    def validate_budget(self, value: Any) -> Decimal:
        """A monthly budget must be a non-negative number."""
        try:
            return _budget_adapter.validate_python(value)
        except PydanticValidationError as e:
            issues = issues_from_pydantic(e)
            for issue in issues:
                issue.field = "monthly_budget"
            raise ValidationError(
                "Budget cannot be negative or non-numeric", issues
            ) from e

    def validate_user(self, email: str, name: str, monthly_budget: Any = 0) -> User:
        """Build a new User, raising ValidationError on malformed fields."""
        try:
            return User(email=email, name=name, monthly_budget=monthly_budget)
        except PydanticValidationError as e:
            _raise_for("user", e)

"""
Core Data Models for Expense Tracker

Strict schemas for expense data flowing through the system: the stored
Expense, the create/update inputs, and the listing filter.

Amounts are Decimal end to end. Occurrence dates are stored as naive UTC
datetimes; plain calendar dates are accepted on input and mean midnight of
that day.
"""

from datetime import date, datetime, time, timezone
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Optional
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from expense_tracker.clock import utc_now


NOTE_MAX_LENGTH = 200

# Bucket for records whose category is outside the fixed set
UNCLASSIFIED_CATEGORY = "Unclassified"


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class ExpenseCategory(str, Enum):
    """Supported expense categories. Values double as breakdown labels."""
    FOOD = "Food"
    TRAVEL = "Travel"
    ENTERTAINMENT = "Entertainment"
    SHOPPING = "Shopping"
    BILLS = "Bills"
    EDUCATION = "Education"
    HEALTH = "Health"
    MISC = "Misc"


def category_label(category: Any) -> str:
    """
    Map a stored category to its breakdown label.

    Anything outside the enumeration lands in UNCLASSIFIED_CATEGORY
    instead of raising.
    """
    if isinstance(category, ExpenseCategory):
        return category.value
    if isinstance(category, str):
        try:
            return ExpenseCategory(category).value
        except ValueError:
            pass
    return UNCLASSIFIED_CATEGORY


# =============================================================================
# DATE HELPERS
# =============================================================================

def _coerce_start_of_day(value: Any) -> Any:
    """Turn a bare date (or YYYY-MM-DD string) into midnight of that day."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if isinstance(value, str) and len(value) == 10:
        try:
            return datetime.combine(date.fromisoformat(value), time.min)
        except ValueError:
            return value
    return value


def _coerce_end_of_day(value: Any) -> Any:
    """Turn a bare date (or YYYY-MM-DD string) into the last instant of that day."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.max)
    if isinstance(value, str) and len(value) == 10:
        try:
            return datetime.combine(date.fromisoformat(value), time.max)
        except ValueError:
            return value
    return value


def _to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


# =============================================================================
# CORE EXPENSE MODEL
# =============================================================================

class Expense(BaseModel):
    """
    A single expense owned by exactly one user.

    CRITICAL: owner_id is set at creation and never changes. Every read
    and write goes through it.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    # Identity
    id: UUID = Field(
        default_factory=uuid4,
        description="Unique expense ID"
    )
    owner_id: UUID = Field(
        ...,
        description="User this expense belongs to"
    )

    amount: Annotated[
        Decimal,
        Field(ge=0, description="Amount spent (non-negative)")
    ]
    category: ExpenseCategory = Field(
        ...,
        description="Expense category"
    )
    note: str = Field(
        default="",
        max_length=NOTE_MAX_LENGTH,
        description="Free-text note"
    )
    date: datetime = Field(
        ...,
        description="When the expense occurred (naive UTC)"
    )

    # Timestamps
    created_at: datetime = Field(
        default_factory=utc_now,
        description="When the expense was recorded"
    )
    updated_at: datetime = Field(
        default_factory=utc_now,
        description="Last update timestamp"
    )

    @field_validator('date', mode='before')
    @classmethod
    def accept_plain_dates(cls, v: Any) -> Any:
        return _coerce_start_of_day(v)

    @field_validator('date', 'created_at', 'updated_at')
    @classmethod
    def normalize_timezone(cls, v: datetime) -> datetime:
        return _to_naive_utc(v)


class ExpenseCreate(BaseModel):
    """
    Input for recording a new expense.

    note and date are optional; the repository fills in "" and the
    current time.
    """
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    amount: Decimal = Field(
        ...,
        ge=0,
        description="Amount spent (non-negative)"
    )
    category: ExpenseCategory
    note: Optional[str] = Field(
        default=None,
        max_length=NOTE_MAX_LENGTH
    )
    date: Optional[datetime] = None

    @field_validator('date', mode='before')
    @classmethod
    def accept_plain_dates(cls, v: Any) -> Any:
        return _coerce_start_of_day(v)

    @field_validator('date')
    @classmethod
    def normalize_timezone(cls, v: Optional[datetime]) -> Optional[datetime]:
        return _to_naive_utc(v)


class ExpenseUpdate(BaseModel):
    """
    Partial update of an expense.

    Only fields that were supplied (and are not None) are applied.
    Unknown fields, owner_id included, are rejected.
    """
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    amount: Optional[Decimal] = Field(default=None, ge=0)
    category: Optional[ExpenseCategory] = None
    note: Optional[str] = Field(default=None, max_length=NOTE_MAX_LENGTH)
    date: Optional[datetime] = None

    @field_validator('date', mode='before')
    @classmethod
    def accept_plain_dates(cls, v: Any) -> Any:
        return _coerce_start_of_day(v)

    @field_validator('date')
    @classmethod
    def normalize_timezone(cls, v: Optional[datetime]) -> Optional[datetime]:
        return _to_naive_utc(v)

    def changes(self) -> dict[str, Any]:
        """The fields to apply, keyed by field name."""
        return self.model_dump(exclude_unset=True, exclude_none=True)


# =============================================================================
# QUERY MODELS
# =============================================================================

class ExpenseFilter(BaseModel):
    """
    Optional filters for listing expenses.

    start_date/end_date are inclusive. A bare date as end_date covers the
    whole day. month and year must be given together; when a range is
    also given, the range wins.
    """
    model_config = ConfigDict(extra="forbid")

    category: Optional[ExpenseCategory] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    month: Optional[int] = Field(default=None, ge=1, le=12)
    year: Optional[int] = Field(default=None, ge=1, le=9999)

    @field_validator('start_date', mode='before')
    @classmethod
    def start_of_day(cls, v: Any) -> Any:
        return _coerce_start_of_day(v)

    @field_validator('end_date', mode='before')
    @classmethod
    def end_of_day(cls, v: Any) -> Any:
        return _coerce_end_of_day(v)

    @field_validator('start_date', 'end_date')
    @classmethod
    def normalize_timezone(cls, v: Optional[datetime]) -> Optional[datetime]:
        return _to_naive_utc(v)

    @model_validator(mode='after')
    def validate_combination(self) -> 'ExpenseFilter':
        """Validate month/year pairing and range ordering."""
        if (self.month is None) != (self.year is None):
            raise ValueError("month and year must be given together")

        if self.start_date and self.end_date:
            if self.end_date < self.start_date:
                raise ValueError("end_date cannot be before start_date")

        return self

    @property
    def has_range(self) -> bool:
        return self.start_date is not None or self.end_date is not None

    @property
    def has_period(self) -> bool:
        return self.month is not None and self.year is not None


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value', 'suspicious_value')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )

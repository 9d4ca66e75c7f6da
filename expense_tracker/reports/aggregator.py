"""
Monthly Budget Aggregation

DESIGN DECISION: Aggregation is a PURE reduction. It takes a list of
expenses and a budget, and returns a MonthlySummary. No storage access,
no logging, no clock reads beyond the injected one. The same inputs always
produce the same summary.

All arithmetic is Decimal. Percentages are rounded half-up to 2 places;
a zero budget yields 0% instead of a division error.
"""

import calendar
from datetime import date, datetime, time
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Any, Iterable, Optional

from expense_tracker.clock import Clock, utc_now
from expense_tracker.models.expense import category_label
from expense_tracker.models.report import MonthlySummary


HUNDRED = Decimal("100")
TWO_PLACES = Decimal("0.01")
ZERO = Decimal("0")


def as_decimal(value: Any) -> Decimal:
    """Coerce a money value to Decimal without going through binary float."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def percentage_of(part: Decimal, whole: Decimal) -> Decimal:
    """part / whole * 100, rounded half-up to 2 places; 0 when whole is not positive."""
    if whole <= ZERO:
        return ZERO
    ratio = part * HUNDRED / whole
    with localcontext() as ctx:
        # Room for every integer digit, a rounding carry and the two decimals
        ctx.prec = max(ctx.prec, ratio.adjusted() + 4)
        return ratio.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def month_bounds(year: int, month: int) -> tuple[datetime, datetime]:
    """First and last instant of a calendar month."""
    last_day = calendar.monthrange(year, month)[1]
    start = datetime(year, month, 1)
    end = datetime.combine(date(year, month, last_day), time.max)
    return start, end


def resolve_period(
    month: Optional[int],
    year: Optional[int],
    clock: Clock = utc_now,
) -> tuple[int, int]:
    """
    Fill in a missing month and/or year from the clock.

    Each one defaults independently.
    """
    if month is None or year is None:
        now = clock()
        month = now.month if month is None else month
        year = now.year if year is None else year

    if not 1 <= month <= 12:
        raise ValueError(f"month must be between 1 and 12, got {month}")
    if not 1 <= year <= 9999:
        raise ValueError(f"year must be between 1 and 9999, got {year}")

    return month, year


def summarize_expenses(
    expenses: Iterable[Any],
    budget: Any,
    month: int,
    year: int,
) -> MonthlySummary:
    """
    Reduce expenses and a budget into a MonthlySummary.

    Expenses only need `amount` and `category` attributes. Categories
    outside the fixed set are summed under "Unclassified".
    """
    budget = as_decimal(budget)

    total_spent = ZERO
    breakdown: dict[str, Decimal] = {}
    count = 0

    for expense in expenses:
        amount = as_decimal(expense.amount)
        label = category_label(expense.category)

        total_spent += amount
        breakdown[label] = breakdown.get(label, ZERO) + amount
        count += 1

    return MonthlySummary(
        month=month,
        year=year,
        total_spent=total_spent,
        budget=budget,
        remaining=budget - total_spent,
        percentage_used=percentage_of(total_spent, budget),
        # Sorted so the output does not depend on input order
        category_breakdown=dict(sorted(breakdown.items())),
        expense_count=count,
    )


class BudgetAggregator:
    """
    Computes monthly summaries with an injectable clock.

    The clock is only consulted when the caller leaves month or year out.
    """

    def __init__(self, clock: Clock = utc_now):
        self._clock = clock

    def resolve_period(
        self,
        month: Optional[int] = None,
        year: Optional[int] = None,
    ) -> tuple[int, int]:
        return resolve_period(month, year, self._clock)

    def summarize(
        self,
        expenses: Iterable[Any],
        budget: Any,
        month: Optional[int] = None,
        year: Optional[int] = None,
    ) -> MonthlySummary:
        month, year = self.resolve_period(month, year)
        return summarize_expenses(expenses, budget, month, year)

"""
Report Formatting

Turns a MonthlySummary into what a report screen shows: the budget band
and its warning, a progress value, the ranked category breakdown, and
display labels for amounts, months and days.
"""

import calendar
from datetime import date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Any, Iterable, Optional, Union

from expense_tracker.clock import Clock, utc_now
from expense_tracker.config import AppSettings
from expense_tracker.models.expense import Expense
from expense_tracker.models.report import (
    BudgetBand,
    BudgetStatus,
    CategoryShare,
    MonthlySummary,
)
from expense_tracker.reports.aggregator import (
    HUNDRED,
    ZERO,
    as_decimal,
    percentage_of,
)


OVER_BUDGET_WARNING = "You've exceeded your budget!"
NEAR_BUDGET_WARNING = "You're near your budget limit"


class ReportFormatter:
    """
    Derives display state from summaries.

    Bands are checked in precedence order: over, then near, then normal.
    """

    def __init__(
        self,
        near_threshold: Decimal = Decimal("80"),
        over_threshold: Decimal = Decimal("100"),
        currency_symbol: str = "₹",
        clock: Clock = utc_now,
    ):
        if near_threshold > over_threshold:
            raise ValueError("near_threshold cannot exceed over_threshold")
        self._near = as_decimal(near_threshold)
        self._over = as_decimal(over_threshold)
        self._currency = currency_symbol
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: AppSettings, clock: Clock = utc_now) -> "ReportFormatter":
        return cls(
            near_threshold=settings.near_budget_threshold,
            over_threshold=settings.over_budget_threshold,
            currency_symbol=settings.currency_symbol,
            clock=clock,
        )

    # -------------------------------------------------------------------------
    # Budget bands
    # -------------------------------------------------------------------------

    def classify(self, percentage_used: Any) -> BudgetBand:
        """over: > 100, near: > 80 and <= 100, normal: everything else."""
        percentage = as_decimal(percentage_used)
        if percentage > self._over:
            return BudgetBand.OVER_BUDGET
        if percentage > self._near:
            return BudgetBand.NEAR_BUDGET
        return BudgetBand.NORMAL

    def budget_status(self, summary: MonthlySummary) -> BudgetStatus:
        band = self.classify(summary.percentage_used)

        warning = None
        if band == BudgetBand.OVER_BUDGET:
            warning = OVER_BUDGET_WARNING
        elif band == BudgetBand.NEAR_BUDGET:
            warning = NEAR_BUDGET_WARNING

        return BudgetStatus(
            band=band,
            percentage_used=summary.percentage_used,
            progress_percent=min(max(summary.percentage_used, ZERO), HUNDRED),
            warning=warning,
        )

    # -------------------------------------------------------------------------
    # Category ranking
    # -------------------------------------------------------------------------

    def rank_categories(self, summary: MonthlySummary) -> list[CategoryShare]:
        """
        Breakdown entries sorted by amount, largest first.

        Each share is a percentage of total_spent (0 when nothing was
        spent). Equal amounts are ordered by category label.
        """
        entries = sorted(
            summary.category_breakdown.items(),
            key=lambda item: (-item[1], item[0]),
        )
        return [
            CategoryShare(
                category=category,
                amount=amount,
                percentage=percentage_of(amount, summary.total_spent),
            )
            for category, amount in entries
        ]

    def expense_shares(self, expenses: Iterable[Expense]) -> list[tuple[Expense, Decimal]]:
        """Pair each listed expense with its share of the listed total."""
        expenses = list(expenses)
        total = sum((expense.amount for expense in expenses), ZERO)
        return [(expense, percentage_of(expense.amount, total)) for expense in expenses]

    # -------------------------------------------------------------------------
    # Labels
    # -------------------------------------------------------------------------

    def format_amount(self, amount: Any, places: int = 2) -> str:
        """Currency-prefixed amount with thousands separators, e.g. -₹1,250.00."""
        value = as_decimal(amount)
        quantum = Decimal(1).scaleb(-places)
        with localcontext() as ctx:
            ctx.prec = max(ctx.prec, value.adjusted() + places + 2)
            value = value.quantize(quantum, rounding=ROUND_HALF_UP)
        sign = "-" if value < 0 else ""
        return f"{sign}{self._currency}{abs(value):,.{places}f}"

    @staticmethod
    def format_percentage(percentage: Any, places: int = 1) -> str:
        value = as_decimal(percentage)
        return f"{value:.{places}f}%"

    @staticmethod
    def period_label(month: int, year: int, short: bool = False) -> str:
        """'October 2026', or 'Oct 2026' when short."""
        names = calendar.month_abbr if short else calendar.month_name
        return f"{names[month]} {year}"

    def relative_day_label(
        self,
        when: Union[datetime, date],
        today: Optional[date] = None,
    ) -> str:
        """
        'Today', 'Yesterday', or a short month/day label like 'Oct 5'.

        today defaults to the clock's current date.
        """
        day = when.date() if isinstance(when, datetime) else when
        today = today or self._clock().date()

        if day == today:
            return "Today"
        if day == today - timedelta(days=1):
            return "Yesterday"
        return f"{calendar.month_abbr[day.month]} {day.day}"

"""Reporting package: monthly aggregation and presentation."""

from expense_tracker.reports.aggregator import (
    BudgetAggregator,
    month_bounds,
    percentage_of,
    resolve_period,
    summarize_expenses,
)
from expense_tracker.reports.formatter import (
    NEAR_BUDGET_WARNING,
    OVER_BUDGET_WARNING,
    ReportFormatter,
)

__all__ = [
    "BudgetAggregator",
    "NEAR_BUDGET_WARNING",
    "OVER_BUDGET_WARNING",
    "ReportFormatter",
    "month_bounds",
    "percentage_of",
    "resolve_period",
    "summarize_expenses",
]

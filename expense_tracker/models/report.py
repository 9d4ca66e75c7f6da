"""
Report Models

Derived, never persisted. A MonthlySummary is rebuilt from the current
expense records on every request.
"""

from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class BudgetBand(str, Enum):
    """Classification of budget usage, checked over -> near -> normal."""
    NORMAL = "normal"
    NEAR_BUDGET = "near_budget"
    OVER_BUDGET = "over_budget"


class MonthlySummary(BaseModel):
    """
    Spending for one owner and one calendar month.

    remaining may be negative. percentage_used is 0 when the budget is 0
    and is otherwise rounded half-up to 2 decimal places.
    """
    model_config = ConfigDict(frozen=True)

    month: int = Field(..., ge=1, le=12)
    year: int = Field(..., ge=1, le=9999)
    total_spent: Decimal
    budget: Decimal
    remaining: Decimal
    percentage_used: Decimal
    category_breakdown: dict[str, Decimal] = Field(
        default_factory=dict,
        description="Category label -> summed amount, only categories present"
    )
    expense_count: int = Field(..., ge=0)

    def to_wire(self) -> dict:
        """
        Flat mapping handed to presentation layers.

        Amounts become floats here and nowhere earlier.
        """
        return {
            "month": self.month,
            "year": self.year,
            "totalSpent": float(self.total_spent),
            "budget": float(self.budget),
            "remaining": float(self.remaining),
            "percentageUsed": float(self.percentage_used),
            "categoryBreakdown": {
                category: float(amount)
                for category, amount in self.category_breakdown.items()
            },
            "expenseCount": self.expense_count,
        }


class CategoryShare(BaseModel):
    """One row of the ranked category breakdown."""
    model_config = ConfigDict(frozen=True)

    category: str
    amount: Decimal
    percentage: Decimal = Field(
        ...,
        description="Share of total spent, rounded to 2 places"
    )


class BudgetStatus(BaseModel):
    """Display state of a summary: band, progress and warning text."""
    model_config = ConfigDict(frozen=True)

    band: BudgetBand
    percentage_used: Decimal
    progress_percent: Decimal = Field(
        ...,
        ge=0,
        le=100,
        description="percentage_used capped at 100, for progress bars"
    )
    warning: Optional[str] = None

    @property
    def is_over_budget(self) -> bool:
        return self.band == BudgetBand.OVER_BUDGET

    @property
    def is_near_budget(self) -> bool:
        return self.band == BudgetBand.NEAR_BUDGET

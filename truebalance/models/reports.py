"""
Report Models

Output records of the aggregators and the metrics calculator. All are plain
serializable records; model_dump(by_alias=True) gives the dashboard payload.
"""

from typing import Optional

from pydantic import Field

from truebalance.models.finance import Bill, CamelModel, CreditCard, Invoice


class AggregationBucket(CamelModel):
    """
    Spending of one calendar month, split by source.

    Buckets are created lazily, so a month without records has no bucket.
    """

    key: str = Field(..., description="YYYY-MM")
    year: int
    month: int = Field(..., ge=1, le=12)
    month_name: str = Field(..., description="pt-BR month name")
    bills: float = 0.0
    credit_cards: float = 0.0
    total: float = 0.0


class CategoryExpense(CamelModel):
    """Spending share of one category."""

    category: str
    amount: float
    percentage: float
    count: int = Field(ge=0)


class MonthAmount(CamelModel):
    """A month label with its total. Empty label means no data."""

    month: str = ""
    amount: float = 0.0


class PeriodComparison(CamelModel):
    current: float = 0.0
    previous: float = 0.0
    percentage_change: float = 0.0


class ExpenseMetrics(CamelModel):
    """
    Dashboard metrics derived from monthly buckets.

    An empty input yields all-zero metrics with empty month labels.
    """

    total_expenses: float = 0.0
    average_monthly: float = 0.0
    highest_month: MonthAmount = Field(default_factory=MonthAmount)
    lowest_month: MonthAmount = Field(default_factory=MonthAmount)
    period_comparison: PeriodComparison = Field(default_factory=PeriodComparison)


class ConsolidatedSummary(CamelModel):
    """Raw records behind the dashboard, fetched in one pass."""

    bills: list[Bill] = Field(default_factory=list)
    invoices: list[Invoice] = Field(default_factory=list)
    credit_cards: list[CreditCard] = Field(default_factory=list)
    degraded_card_ids: list[Optional[int]] = Field(
        default_factory=list,
        description="Cards whose invoices could not be fetched"
    )

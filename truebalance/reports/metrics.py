"""
Metrics Calculator

Dashboard metrics over chronologically ordered monthly buckets.
"""

from typing import Optional, Sequence

from truebalance.config import ReportSettings
from truebalance.models.reports import (
    AggregationBucket,
    ExpenseMetrics,
    MonthAmount,
    PeriodComparison,
)


def compute_metrics(
    monthly: Sequence[AggregationBucket],
    settings: Optional[ReportSettings] = None,
) -> ExpenseMetrics:
    """
    Compute totals, extremes and the period comparison.

    Args:
        monthly: Buckets in ascending (year, month) order
        settings: Supplies the comparison window (default 6 months)

    Returns:
        ExpenseMetrics. Highest/lowest month labels are bucket keys
        ("YYYY-MM"). The comparison puts the last N buckets against the N
        before them; a previous total of zero gives a 0% change.
    """
    if not monthly:
        return ExpenseMetrics()

    settings = settings or ReportSettings()
    window = settings.comparison_window_months

    total = sum(b.total for b in monthly)

    # max/min keep the first bucket on ties
    highest = max(monthly, key=lambda b: b.total)
    lowest = min(monthly, key=lambda b: b.total)

    current = sum(b.total for b in monthly[-window:])
    previous = sum(b.total for b in monthly[-2 * window:-window])
    change = (current - previous) / previous * 100 if previous > 0 else 0.0

    return ExpenseMetrics(
        total_expenses=total,
        average_monthly=total / len(monthly),
        highest_month=MonthAmount(month=highest.key, amount=highest.total),
        lowest_month=MonthAmount(month=lowest.key, amount=lowest.total),
        period_comparison=PeriodComparison(
            current=current,
            previous=previous,
            percentage_change=change,
        ),
    )

"""
Reports package.

Pure aggregators (monthly, category, metrics) plus the service that feeds
them from the backend.
"""

from truebalance.reports.categories import aggregate_by_category
from truebalance.reports.metrics import compute_metrics
from truebalance.reports.monthly import (
    aggregate_monthly,
    filter_invoices_by_period,
    sort_buckets,
)
from truebalance.reports.service import ReportsService

__all__ = [
    "ReportsService",
    "aggregate_by_category",
    "aggregate_monthly",
    "compute_metrics",
    "filter_invoices_by_period",
    "sort_buckets",
]

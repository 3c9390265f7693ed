"""
Monthly Aggregator

Bucket bills and invoices by calendar month.

DESIGN DECISION: A bill contributes ONE installment (total / N) to the month
of its execution date. It is not spread across the following months; the
dashboard shows what was committed in each month.

Records that cannot be placed (missing date, malformed reference month,
non-finite amount) are skipped and reported to the audit logger. The
aggregator never raises on bad records.
"""

import math
from datetime import date, datetime
from typing import Iterable, Optional, Union

from truebalance.audit import AuditLogger
from truebalance.models.finance import Bill, Invoice
from truebalance.models.reports import AggregationBucket
from truebalance.parsing.normalizers import month_key, month_name


def aggregate_monthly(
    bills: Iterable[Bill],
    invoices: Iterable[Invoice],
    audit: Optional[AuditLogger] = None,
) -> dict[str, AggregationBucket]:
    """
    Sum bill installments and invoice totals per month.

    Args:
        bills: Bills with a normalized execution date
        invoices: Invoices with a reference month
        audit: Receives one RECORD_SKIPPED event per record left out

    Returns:
        Sparse map of "YYYY-MM" -> bucket. Months without records are absent.
    """
    buckets: dict[str, AggregationBucket] = {}

    for bill in bills:
        if bill.execution_date is None:
            _skip(audit, "bill", bill.id, "missing or invalid date")
            continue

        installments = max(bill.number_of_installments, 1)
        value = (bill.total_amount or 0.0) / installments
        if not math.isfinite(value):
            _skip(audit, "bill", bill.id, "non-finite amount")
            continue

        bucket = _bucket_for(buckets, bill.execution_date.year, bill.execution_date.month)
        bucket.bills += value
        bucket.total += value

    for invoice in invoices:
        year_month = invoice.year_month
        if year_month is None:
            _skip(audit, "invoice", invoice.id, "malformed reference month")
            continue

        value = invoice.total_amount or 0.0
        if not math.isfinite(value):
            _skip(audit, "invoice", invoice.id, "non-finite amount")
            continue

        bucket = _bucket_for(buckets, *year_month)
        bucket.credit_cards += value
        bucket.total += value

    return buckets


def sort_buckets(
    buckets: Union[dict[str, AggregationBucket], Iterable[AggregationBucket]],
    descending: bool = False,
) -> list[AggregationBucket]:
    """Order buckets chronologically by (year, month), or the reverse."""
    values = buckets.values() if isinstance(buckets, dict) else buckets
    return sorted(values, key=lambda b: (b.year, b.month), reverse=descending)


def filter_invoices_by_period(
    invoices: Iterable[Invoice],
    start: Union[date, datetime],
    end: Union[date, datetime],
) -> list[Invoice]:
    """
    Keep invoices whose reference month starts within [start, end].

    Invoices with a malformed reference month are dropped.
    """
    start_dt = _as_datetime(start)
    end_dt = _as_datetime(end)

    kept = []
    for invoice in invoices:
        year_month = invoice.year_month
        if year_month is None:
            continue
        first_day = datetime(year_month[0], year_month[1], 1)
        if start_dt <= first_day <= end_dt:
            kept.append(invoice)
    return kept


def _bucket_for(
    buckets: dict[str, AggregationBucket],
    year: int,
    month: int,
) -> AggregationBucket:
    key = month_key(year, month)
    if key not in buckets:
        buckets[key] = AggregationBucket(
            key=key,
            year=year,
            month=month,
            month_name=month_name(month),
        )
    return buckets[key]


def _as_datetime(value: Union[date, datetime]) -> datetime:
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    return datetime(value.year, value.month, value.day)


def _skip(
    audit: Optional[AuditLogger],
    entity: str,
    record_id: Optional[int],
    reason: str,
) -> None:
    if audit is not None:
        audit.log_record_skipped(entity, record_id, reason)

"""
Category Aggregator

Breaks spending down by category for the report pie chart. Bills count one
installment (total / N) under their own category or the default bill
category; every invoice counts under the credit card category.
"""

import math
from typing import Iterable, Optional

from truebalance.audit import AuditLogger
from truebalance.config import ReportSettings
from truebalance.models.finance import Bill, Invoice
from truebalance.models.reports import CategoryExpense


def aggregate_by_category(
    bills: Iterable[Bill],
    invoices: Iterable[Invoice],
    settings: Optional[ReportSettings] = None,
    audit: Optional[AuditLogger] = None,
) -> list[CategoryExpense]:
    """
    Sum amounts and record counts per category.

    Returns categories sorted by amount, largest first, with percentages of
    the overall total. An overall total of zero yields an empty list.
    """
    settings = settings or ReportSettings()

    # category -> [amount, count]
    totals: dict[str, list] = {}
    grand_total = 0.0

    for bill in bills:
        value = (bill.total_amount or 0.0) / max(bill.number_of_installments, 1)
        if not math.isfinite(value):
            if audit is not None:
                audit.log_record_skipped("bill", bill.id, "non-finite amount")
            continue

        category = bill.category or settings.default_bill_category
        entry = totals.setdefault(category, [0.0, 0])
        entry[0] += value
        entry[1] += 1
        grand_total += value

    for invoice in invoices:
        value = invoice.total_amount or 0.0
        if not math.isfinite(value):
            if audit is not None:
                audit.log_record_skipped("invoice", invoice.id, "non-finite amount")
            continue

        entry = totals.setdefault(settings.credit_card_category, [0.0, 0])
        entry[0] += value
        entry[1] += 1
        grand_total += value

    if grand_total == 0:
        return []

    expenses = [
        CategoryExpense(
            category=category,
            amount=amount,
            percentage=amount / grand_total * 100,
            count=count,
        )
        for category, (amount, count) in totals.items()
    ]
    expenses.sort(key=lambda e: e.amount, reverse=True)
    return expenses

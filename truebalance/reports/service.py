"""
Reports Service

Fetches raw records through the reader collaborator and runs the
aggregators over them. This is what the dashboard and report pages call.

DESIGN DECISION: Invoices are fetched per credit card, concurrently. A card
whose invoices cannot be fetched contributes nothing (logged as
FETCH_DEGRADED) instead of failing the whole report. Failures listing bills
or credit cards still propagate; without them there is no report.

The invoices API has no date filter, so invoices are filtered by reference
month after fetching.
"""

import asyncio
from datetime import date, datetime
from typing import Optional

import structlog

from truebalance.audit import AuditLogger
from truebalance.config import ReportSettings, get_settings
from truebalance.models.finance import CreditCard, Invoice
from truebalance.models.reports import (
    AggregationBucket,
    CategoryExpense,
    ConsolidatedSummary,
    ExpenseMetrics,
)
from truebalance.reports.categories import aggregate_by_category
from truebalance.reports.metrics import compute_metrics
from truebalance.reports.monthly import (
    aggregate_monthly,
    filter_invoices_by_period,
    sort_buckets,
)
from truebalance.services.backend.interface import FinanceReaderInterface


logger = structlog.get_logger(__name__)

EPOCH = datetime(1970, 1, 1)


class ReportsService:
    """
    Report computations over backend data.

    GUARANTEES:
    - Bad records are skipped, never raised
    - One unreachable card never hides the other cards' invoices
    """

    def __init__(
        self,
        reader: FinanceReaderInterface,
        settings: Optional[ReportSettings] = None,
        audit: Optional[AuditLogger] = None,
    ):
        self._reader = reader
        self._settings = settings or get_settings().reports
        self._audit = audit or AuditLogger()

    @property
    def audit(self) -> AuditLogger:
        return self._audit

    async def get_monthly_expenses(
        self,
        year: int,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[AggregationBucket]:
        """
        Monthly buckets for a year, or for an explicit range.

        Returns:
            Buckets in ascending (year, month) order
        """
        start = start or datetime(year, 1, 1)
        end = end or datetime(year, 12, 31, 23, 59, 59)
        return await self._monthly_between(start, end)

    async def get_monthly_expenses_by_period(
        self,
        months: int,
        today: Optional[date] = None,
    ) -> list[AggregationBucket]:
        """
        Monthly buckets from the first day of the month `months` months ago
        through the end of today, most recent month first.
        """
        today = today or date.today()
        year, month = today.year, today.month - months
        while month < 1:
            month += 12
            year -= 1

        start = datetime(year, month, 1)
        end = datetime(today.year, today.month, today.day, 23, 59, 59, 999999)
        return await self._monthly_between(start, end, descending=True)

    async def get_category_breakdown(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[CategoryExpense]:
        """
        Spending per category. Without a range, every invoice counts.
        """
        bills = await self._reader.list_bills(start, end)
        _, invoices, _ = await self._fetch_invoices()

        if start or end:
            invoices = filter_invoices_by_period(
                invoices,
                start or EPOCH,
                end or datetime.now(),
            )

        return aggregate_by_category(bills, invoices, self._settings, self._audit)

    async def get_expense_metrics(self, year: int) -> ExpenseMetrics:
        """Metrics over the year's monthly buckets."""
        monthly = await self.get_monthly_expenses(year)
        return compute_metrics(monthly, self._settings)

    async def get_consolidated_summary(self) -> ConsolidatedSummary:
        """Every bill, credit card and invoice, fetched in one pass."""
        bills = await self._reader.list_bills()
        cards, invoices, degraded = await self._fetch_invoices()
        return ConsolidatedSummary(
            bills=bills,
            invoices=invoices,
            credit_cards=cards,
            degraded_card_ids=degraded,
        )

    # =========================================================================
    # HELPERS
    # =========================================================================

    async def _monthly_between(
        self,
        start: datetime,
        end: datetime,
        descending: bool = False,
    ) -> list[AggregationBucket]:
        bills = await self._reader.list_bills(start, end)
        _, invoices, _ = await self._fetch_invoices()
        invoices = filter_invoices_by_period(invoices, start, end)

        buckets = aggregate_monthly(bills, invoices, self._audit)
        logger.info(
            "monthly_expenses_computed",
            start=start.isoformat(),
            end=end.isoformat(),
            months=len(buckets),
        )
        return sort_buckets(buckets, descending=descending)

    async def _fetch_invoices(
        self,
    ) -> tuple[list[CreditCard], list[Invoice], list[Optional[int]]]:
        """
        List cards, then fetch each card's invoices concurrently.

        Returns:
            (cards, flattened invoices, IDs of cards whose fetch failed)
        """
        cards = await self._reader.list_credit_cards()
        results = await asyncio.gather(*(self._invoices_of(card) for card in cards))

        invoices: list[Invoice] = []
        degraded: list[Optional[int]] = []
        for card, card_invoices in zip(cards, results):
            if card_invoices is None:
                degraded.append(card.id)
            else:
                invoices.extend(card_invoices)
        return cards, invoices, degraded

    async def _invoices_of(self, card: CreditCard) -> Optional[list[Invoice]]:
        """None signals a failed fetch; the card then contributes nothing."""
        try:
            return await self._reader.list_invoices_by_credit_card(card.id)
        except Exception as e:
            self._audit.log_fetch_degraded(card.id, str(e))
            return None

"""
Tests for the reports service

Test strategy:
1. Run the service over the demo dataset in the in-memory backend
2. Check period filtering of bills and invoices
3. Check that one failing card degrades instead of failing the report
"""

from datetime import date, datetime

import pytest

from truebalance.config import ReportSettings
from truebalance.exceptions import BackendUnavailableError
from truebalance.models.audit import AuditEventType
from truebalance.reports import ReportsService
from truebalance.services.backend import InMemoryFinanceBackend


JANUARY_2025_BILLS = 2500.0 / 12 + 99.90 + 650.0 / 12 + 55.90
JANUARY_2025_INVOICES = 3850.0 + 1200.0 + 980.0


class FlakyCardBackend(InMemoryFinanceBackend):
    """Demo backend whose invoices endpoint fails for card 2."""

    async def list_invoices_by_credit_card(self, credit_card_id: int):
        if credit_card_id == 2:
            raise BackendUnavailableError("Backend timeout after 10s on GET /invoices")
        return await super().list_invoices_by_credit_card(credit_card_id)


class DownBackend(InMemoryFinanceBackend):
    async def list_credit_cards(self):
        raise BackendUnavailableError("Backend unreachable on GET /credit-cards")


@pytest.fixture
def reports(demo_backend, audit) -> ReportsService:
    return ReportsService(demo_backend, ReportSettings(), audit)


class TestMonthlyExpenses:
    """Tests for get_monthly_expenses and get_monthly_expenses_by_period."""

    async def test_year_2025(self, reports):
        monthly = await reports.get_monthly_expenses(2025)

        assert [b.key for b in monthly] == ["2025-01"]
        january = monthly[0]
        assert january.bills == pytest.approx(JANUARY_2025_BILLS)
        assert january.credit_cards == pytest.approx(JANUARY_2025_INVOICES)
        assert january.total == pytest.approx(JANUARY_2025_BILLS + JANUARY_2025_INVOICES)

    async def test_year_2024_ascending(self, reports):
        """Test buckets come back oldest first."""
        monthly = await reports.get_monthly_expenses(2024)

        assert [b.key for b in monthly] == ["2024-11", "2024-12"]
        assert monthly[0].bills == pytest.approx(599.90 / 6)
        assert monthly[1].bills == pytest.approx(400.0)
        assert monthly[1].credit_cards == pytest.approx(2150.0)

    async def test_explicit_range(self, reports):
        monthly = await reports.get_monthly_expenses(
            2024, start=datetime(2024, 12, 1), end=datetime(2025, 1, 31, 23, 59, 59),
        )
        assert [b.key for b in monthly] == ["2024-12", "2025-01"]

    async def test_last_months_most_recent_first(self, reports):
        """Test the last-N-months view is ordered newest first."""
        monthly = await reports.get_monthly_expenses_by_period(2, today=date(2025, 1, 20))
        assert [b.key for b in monthly] == ["2025-01", "2024-12", "2024-11"]

    async def test_last_months_across_year_boundary(self, reports):
        monthly = await reports.get_monthly_expenses_by_period(14, today=date(2025, 1, 20))
        assert monthly[0].key == "2025-01"
        assert monthly[-1].key == "2024-11"

    async def test_last_months_window_excludes_older(self, reports):
        monthly = await reports.get_monthly_expenses_by_period(1, today=date(2025, 1, 20))
        assert [b.key for b in monthly] == ["2025-01", "2024-12"]

    async def test_year_without_data(self, reports):
        assert await reports.get_monthly_expenses(2020) == []


class TestCategoryBreakdown:
    """Tests for get_category_breakdown."""

    async def test_all_time(self, reports):
        breakdown = await reports.get_category_breakdown()

        assert [e.category for e in breakdown] == ["Cartão de Crédito", "Contas"]
        assert breakdown[0].amount == pytest.approx(3850.0 + 2150.0 + 1200.0 + 980.0)
        assert breakdown[0].count == 4
        assert breakdown[1].count == 6
        assert sum(e.percentage for e in breakdown) == pytest.approx(100.0)

    async def test_january_only(self, reports):
        breakdown = await reports.get_category_breakdown(
            datetime(2025, 1, 1), datetime(2025, 1, 31, 23, 59, 59),
        )
        amounts = {e.category: e.amount for e in breakdown}

        assert amounts["Cartão de Crédito"] == pytest.approx(JANUARY_2025_INVOICES)
        assert amounts["Contas"] == pytest.approx(JANUARY_2025_BILLS)


class TestMetricsAndSummary:
    """Tests for get_expense_metrics and get_consolidated_summary."""

    async def test_expense_metrics(self, reports):
        metrics = await reports.get_expense_metrics(2024)

        assert metrics.total_expenses == pytest.approx(599.90 / 6 + 400.0 + 2150.0)
        assert metrics.highest_month.month == "2024-12"
        assert metrics.lowest_month.month == "2024-11"
        assert metrics.average_monthly == pytest.approx(metrics.total_expenses / 2)

    async def test_expense_metrics_empty_year(self, reports):
        metrics = await reports.get_expense_metrics(2020)
        assert metrics.total_expenses == 0.0
        assert metrics.highest_month.month == ""

    async def test_consolidated_summary(self, reports):
        summary = await reports.get_consolidated_summary()

        assert len(summary.bills) == 6
        assert len(summary.credit_cards) == 3
        assert len(summary.invoices) == 4
        assert summary.degraded_card_ids == []


class TestDegradedFetches:
    """Tests for per-card invoice failures."""

    async def test_failing_card_contributes_nothing(self, audit):
        reports = ReportsService(FlakyCardBackend.with_demo_data(), ReportSettings(), audit)

        monthly = await reports.get_monthly_expenses(2025)

        assert monthly[0].credit_cards == pytest.approx(3850.0 + 980.0)
        assert audit.count(AuditEventType.FETCH_DEGRADED) == 1

    async def test_summary_lists_degraded_cards(self, audit):
        reports = ReportsService(FlakyCardBackend.with_demo_data(), ReportSettings(), audit)

        summary = await reports.get_consolidated_summary()

        assert summary.degraded_card_ids == [2]
        assert len(summary.invoices) == 3

    async def test_card_listing_failure_propagates(self, audit):
        reports = ReportsService(DownBackend.with_demo_data(), ReportSettings(), audit)

        with pytest.raises(BackendUnavailableError):
            await reports.get_monthly_expenses(2025)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

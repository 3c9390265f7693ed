"""Shared fixtures for the TrueBalance test suite."""

from datetime import datetime

import pytest

from truebalance.audit import AuditLogger
from truebalance.config import ImportSettings, ReportSettings
from truebalance.models.finance import Bill, CreditCard, Invoice
from truebalance.services.backend import InMemoryFinanceBackend


def make_bill(
    name: str = "Aluguel",
    when: datetime = datetime(2025, 1, 5),
    total: float = 2500.0,
    installments: int = 1,
    **extra,
) -> Bill:
    return Bill(
        name=name,
        execution_date=when,
        total_amount=total,
        number_of_installments=installments,
        **extra,
    )


def make_invoice(
    reference_month: str = "2025-01-01",
    total: float = 1000.0,
    credit_card_id: int = 1,
    **extra,
) -> Invoice:
    return Invoice(
        credit_card_id=credit_card_id,
        reference_month=reference_month,
        total_amount=total,
        **extra,
    )


@pytest.fixture
def audit() -> AuditLogger:
    return AuditLogger()


@pytest.fixture
def import_settings() -> ImportSettings:
    return ImportSettings()


@pytest.fixture
def report_settings() -> ReportSettings:
    return ReportSettings()


@pytest.fixture
def nubank() -> CreditCard:
    return CreditCard(
        id=1,
        name="Nubank Ultravioleta",
        credit_limit=10000.0,
        closing_day=10,
        due_day=17,
    )


@pytest.fixture
def backend(nubank) -> InMemoryFinanceBackend:
    """In-memory backend holding a single credit card (ID 1)."""
    return InMemoryFinanceBackend(credit_cards=[nubank])


@pytest.fixture
def demo_backend() -> InMemoryFinanceBackend:
    return InMemoryFinanceBackend.with_demo_data()

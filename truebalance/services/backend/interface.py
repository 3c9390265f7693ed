"""
Abstract Backend Interface

DESIGN DECISION: The core never talks to persistence directly. Reports and
imports go through these collaborator interfaces. This allows us to:
1. Talk to the TrueBalance REST API in production
2. Use in-memory storage for tests and demo mode
3. Keep aggregation and reconciliation decoupled from transport

Reads and writes are separate interfaces; the reconciler only needs the
writer, the report service only needs the reader.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from truebalance.models.finance import Bill, CreditCard, Invoice
from truebalance.models.imports import (
    BillImportItem,
    CreditCardImportItem,
    InvoiceImportItem,
)


class FinanceReaderInterface(ABC):
    """Read access to bills, credit cards and invoices."""

    @abstractmethod
    async def list_bills(
        self,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
    ) -> list[Bill]:
        """
        List bills, optionally restricted to an execution date range.

        Args:
            date_from: Bills executed on or after this moment
            date_to: Bills executed on or before this moment

        Returns:
            All matching bills (every page)

        Raises:
            BackendError: If the listing fails
        """
        pass

    @abstractmethod
    async def list_credit_cards(self) -> list[CreditCard]:
        """
        List all credit cards.

        Raises:
            BackendError: If the listing fails
        """
        pass

    @abstractmethod
    async def list_invoices_by_credit_card(self, credit_card_id: int) -> list[Invoice]:
        """
        List every invoice of one credit card.

        Raises:
            NotFoundError: If the card does not exist
            BackendError: If the listing fails
        """
        pass


class FinanceWriterInterface(ABC):
    """
    Record creation. Each call succeeds or fails on its own; there is no
    batch transaction.
    """

    @abstractmethod
    async def create_bill(self, item: BillImportItem) -> Bill:
        """
        Create a bill from a validated import row.

        Returns:
            The created bill, with its backend ID

        Raises:
            BackendError: If creation fails
        """
        pass

    @abstractmethod
    async def create_invoice(self, item: InvoiceImportItem) -> Invoice:
        """
        Create an invoice from a validated import row.

        Raises:
            NotFoundError: If the referenced credit card does not exist
            BackendError: If creation fails
        """
        pass

    @abstractmethod
    async def create_credit_card(self, item: CreditCardImportItem) -> CreditCard:
        """
        Create a credit card from a validated import row.

        Raises:
            BackendError: If creation fails
        """
        pass


class FinanceBackendInterface(FinanceReaderInterface, FinanceWriterInterface):
    """Full backend: both collaborators in one object."""
    pass

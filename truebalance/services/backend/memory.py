"""
In-Memory Backend Implementation

Dict-backed collaborator used by tests and by demo mode. It enforces the one
referential rule imports depend on: invoices (and card-linked bills) must
reference an existing credit card.
"""

from datetime import datetime
from typing import Iterable, Optional

from truebalance.exceptions import NotFoundError
from truebalance.models.finance import Bill, CreditCard, Invoice
from truebalance.models.imports import (
    BillImportItem,
    CreditCardImportItem,
    InvoiceImportItem,
)
from truebalance.services.backend.demo_data import (
    DEMO_BILLS,
    DEMO_CREDIT_CARDS,
    DEMO_INVOICES,
)
from truebalance.services.backend.interface import FinanceBackendInterface


class InMemoryFinanceBackend(FinanceBackendInterface):
    """Backend that keeps every record in process memory."""

    def __init__(
        self,
        bills: Optional[Iterable[Bill]] = None,
        credit_cards: Optional[Iterable[CreditCard]] = None,
        invoices: Optional[Iterable[Invoice]] = None,
    ):
        self._bills: dict[int, Bill] = {}
        self._credit_cards: dict[int, CreditCard] = {}
        self._invoices: dict[int, Invoice] = {}
        self._next_id = 1

        for card in credit_cards or []:
            self._store(self._credit_cards, card)
        for bill in bills or []:
            self._store(self._bills, bill)
        for invoice in invoices or []:
            self._store(self._invoices, invoice)

    @classmethod
    def with_demo_data(cls) -> "InMemoryFinanceBackend":
        """Backend seeded with the demo dataset."""
        return cls(
            bills=[Bill.model_validate(b) for b in DEMO_BILLS],
            credit_cards=[CreditCard.model_validate(c) for c in DEMO_CREDIT_CARDS],
            invoices=[Invoice.model_validate(i) for i in DEMO_INVOICES],
        )

    def _store(self, table: dict, record):
        """Insert a record, assigning the next ID when it has none."""
        if record.id is None:
            record = record.model_copy(update={"id": self._next_id})
        table[record.id] = record
        self._next_id = max(self._next_id, record.id + 1)
        return record

    # =========================================================================
    # READS
    # =========================================================================

    async def list_bills(
        self,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
    ) -> list[Bill]:
        bills = list(self._bills.values())
        if date_from is None and date_to is None:
            return bills

        def in_range(bill: Bill) -> bool:
            if bill.execution_date is None:
                return False
            if date_from and bill.execution_date < date_from:
                return False
            if date_to and bill.execution_date > date_to:
                return False
            return True

        return [b for b in bills if in_range(b)]

    async def list_credit_cards(self) -> list[CreditCard]:
        return list(self._credit_cards.values())

    async def list_invoices_by_credit_card(self, credit_card_id: int) -> list[Invoice]:
        self._require_card(credit_card_id)
        return [i for i in self._invoices.values() if i.credit_card_id == credit_card_id]

    # =========================================================================
    # WRITES
    # =========================================================================

    async def create_bill(self, item: BillImportItem) -> Bill:
        if item.credit_card_id is not None:
            self._require_card(item.credit_card_id)
        bill = Bill.model_validate(item.model_dump())
        return self._store(self._bills, bill)

    async def create_invoice(self, item: InvoiceImportItem) -> Invoice:
        self._require_card(item.credit_card_id)
        invoice = Invoice.model_validate(item.model_dump())
        return self._store(self._invoices, invoice)

    async def create_credit_card(self, item: CreditCardImportItem) -> CreditCard:
        card = CreditCard.model_validate(item.model_dump())
        return self._store(self._credit_cards, card)

    def _require_card(self, credit_card_id: int) -> None:
        if credit_card_id not in self._credit_cards:
            raise NotFoundError(f"Cartão de crédito não encontrado com ID: {credit_card_id}")

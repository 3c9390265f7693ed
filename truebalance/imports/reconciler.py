"""
Duplicate Reconciler

Matches validated import items against existing records and creates the
ones the strategy allows.

DESIGN DECISION: Duplicates are matched on a normalized key per kind:
- bills:        (name, execution date, total in cents, installments)
- invoices:     (credit card, reference month, total in cents)
- credit cards: (name, limit in cents, closing day, due day)
Names are compared trimmed, lowercased and with collapsed whitespace.

Every record created during a run is added to the lookup, so a row repeated
inside the same file is caught as a duplicate too.

Each item is processed independently: a failing create is tallied as an
error for that line and the run continues. There is no rollback.
"""

import asyncio
from datetime import datetime
from typing import Any, Hashable, Iterable, Optional, Sequence, Union

import structlog

from truebalance.audit import AuditLogger
from truebalance.models.audit import AuditEventBuilder
from truebalance.models.finance import Bill, CreditCard, Invoice
from truebalance.models.imports import (
    AnyImportItem,
    BillImportItem,
    CreditCardImportItem,
    DuplicateInfo,
    DuplicateStrategy,
    EntityKind,
    ImportErrorDetail,
    ImportResult,
    InvoiceImportItem,
)
from truebalance.parsing.normalizers import normalize_name, parse_datetime, parse_year_month
from truebalance.services.backend.interface import (
    FinanceReaderInterface,
    FinanceWriterInterface,
)


logger = structlog.get_logger(__name__)

KIND_BY_ITEM_TYPE = {
    BillImportItem: EntityKind.BILL,
    InvoiceImportItem: EntityKind.INVOICE,
    CreditCardImportItem: EntityKind.CREDIT_CARD,
}

DUPLICATE_REASONS = {
    EntityKind.BILL: (
        "Duplicata encontrada: registro existente com mesmo nome, "
        "valor, data e número de parcelas (ID: {id})"
    ),
    EntityKind.INVOICE: (
        "Duplicata encontrada: já existe uma fatura para o cartão ID {card} "
        "no mês {month} (ID: {id})"
    ),
    EntityKind.CREDIT_CARD: (
        "Duplicata encontrada: já existe um cartão com o nome '{name}' (ID: {id})"
    ),
}


# =============================================================================
# DUPLICATE KEYS
# =============================================================================

def _cents(amount: Optional[float]) -> float:
    return round(amount or 0.0, 2)


def bill_key(
    name: str,
    execution_date: Union[str, datetime, None],
    total_amount: Optional[float],
    number_of_installments: int,
) -> tuple:
    parsed = parse_datetime(execution_date)
    return (
        normalize_name(name),
        parsed.date() if parsed else None,
        _cents(total_amount),
        max(number_of_installments, 1),
    )


def invoice_key(
    credit_card_id: Optional[int],
    reference_month: str,
    total_amount: Optional[float],
) -> tuple:
    return (credit_card_id, parse_year_month(reference_month), _cents(total_amount))


def credit_card_key(
    name: str,
    credit_limit: float,
    closing_day: int,
    due_day: int,
) -> tuple:
    return (normalize_name(name), _cents(credit_limit), closing_day, due_day)


def key_for(item: Union[AnyImportItem, Bill, Invoice, CreditCard]) -> tuple:
    """Duplicate key of an import item or an existing record."""
    if isinstance(item, (BillImportItem, Bill)):
        return bill_key(
            item.name, item.execution_date, item.total_amount, item.number_of_installments,
        )
    if isinstance(item, (InvoiceImportItem, Invoice)):
        return invoice_key(item.credit_card_id, item.reference_month, item.total_amount)
    return credit_card_key(item.name, item.credit_limit, item.closing_day, item.due_day)


# =============================================================================
# LOOKUP
# =============================================================================

class ExistingRecordsLookup:
    """
    In-memory index of existing records by duplicate key.

    Build it from plain lists, or from a reader with load().
    """

    def __init__(
        self,
        bills: Iterable[Bill] = (),
        invoices: Iterable[Invoice] = (),
        credit_cards: Iterable[CreditCard] = (),
    ):
        self._index: dict[EntityKind, dict[Hashable, Optional[int]]] = {
            kind: {} for kind in EntityKind
        }
        for bill in bills:
            self.register(EntityKind.BILL, key_for(bill), bill.id)
        for invoice in invoices:
            self.register(EntityKind.INVOICE, key_for(invoice), invoice.id)
        for card in credit_cards:
            self.register(EntityKind.CREDIT_CARD, key_for(card), card.id)

    @classmethod
    async def load(cls, reader: FinanceReaderInterface) -> "ExistingRecordsLookup":
        """
        Index every bill, credit card and invoice the reader returns.

        Raises:
            BackendError: If any listing fails. A partial index would let
                duplicates through, so there is no degraded mode here.
        """
        bills = await reader.list_bills()
        cards = await reader.list_credit_cards()
        per_card = await asyncio.gather(
            *(reader.list_invoices_by_credit_card(card.id) for card in cards)
        )
        invoices = [invoice for batch in per_card for invoice in batch]

        logger.info(
            "existing_records_indexed",
            bills=len(bills),
            credit_cards=len(cards),
            invoices=len(invoices),
        )
        return cls(bills=bills, invoices=invoices, credit_cards=cards)

    def register(self, kind: EntityKind, key: Hashable, record_id: Optional[int]) -> None:
        """Add a record; the first ID seen for a key is kept."""
        self._index[kind].setdefault(key, record_id)

    def contains(self, kind: EntityKind, key: Hashable) -> bool:
        return key in self._index[kind]

    def existing_id(self, kind: EntityKind, key: Hashable) -> Optional[int]:
        return self._index[kind].get(key)

    def size(self, kind: EntityKind) -> int:
        return len(self._index[kind])


# =============================================================================
# RECONCILIATION
# =============================================================================

async def reconcile(
    items: Sequence[AnyImportItem],
    strategy: DuplicateStrategy,
    existing: ExistingRecordsLookup,
    writer: FinanceWriterInterface,
    kind: Optional[EntityKind] = None,
    audit: Optional[AuditLogger] = None,
) -> ImportResult:
    """
    Create import items, skipping or duplicating matches per the strategy.

    Args:
        items: Validated items of a single kind
        strategy: SKIP or CREATE_DUPLICATE
        existing: Lookup of existing records; created records are added to it
        writer: Collaborator that creates records
        kind: Entity kind; required only when items is empty
        audit: Receives one event per item plus start/completion events

    Returns:
        ImportResult with total_processed == len(items)
    """
    if kind is None:
        if not items:
            raise ValueError("kind is required to reconcile an empty batch")
        kind = KIND_BY_ITEM_TYPE[type(items[0])]

    audit = audit or AuditLogger()
    result = ImportResult(entity=kind, total_processed=len(items))

    audit.log(AuditEventBuilder.import_started(
        kind.value, len(items), strategy.value, audit.correlation_id,
    ))

    for item in items:
        key = key_for(item)

        if existing.contains(kind, key):
            existing_id = existing.existing_id(kind, key)
            if strategy == DuplicateStrategy.SKIP:
                result.total_skipped += 1
                result.duplicates_found.append(DuplicateInfo(
                    line_number=item.line_number,
                    fields=item.model_dump(by_alias=True, mode="json"),
                    existing_id=existing_id,
                    reason=_duplicate_reason(kind, item, existing_id),
                ))
                audit.log(AuditEventBuilder.duplicate_skipped(
                    kind.value, item.line_number, existing_id, audit.correlation_id,
                ))
                continue

            logger.debug(
                "creating_duplicate",
                entity=kind.value,
                line_number=item.line_number,
                existing_id=existing_id,
            )

        try:
            record = await _create(writer, kind, item)
        except Exception as e:
            result.total_errors += 1
            result.errors.append(ImportErrorDetail(
                line_number=item.line_number,
                field="general",
                message=f"Erro ao processar: {e}",
                value="",
            ))
            audit.log(AuditEventBuilder.create_failed(
                kind.value, item.line_number, str(e), audit.correlation_id,
            ))
            continue

        result.total_created += 1
        result.created.append(record.model_dump(by_alias=True, mode="json"))
        existing.register(kind, key, record.id)
        audit.log(AuditEventBuilder.record_created(
            kind.value, item.line_number, record.id, audit.correlation_id,
        ))

    audit.log(AuditEventBuilder.import_completed(
        kind.value,
        result.total_created,
        result.total_skipped,
        result.total_errors,
        audit.correlation_id,
    ))
    return result


async def _create(
    writer: FinanceWriterInterface,
    kind: EntityKind,
    item: AnyImportItem,
) -> Any:
    if kind == EntityKind.BILL:
        return await writer.create_bill(item)
    elif kind == EntityKind.INVOICE:
        return await writer.create_invoice(item)
    return await writer.create_credit_card(item)


def _duplicate_reason(
    kind: EntityKind,
    item: AnyImportItem,
    existing_id: Optional[int],
) -> str:
    template = DUPLICATE_REASONS[kind]
    if kind == EntityKind.INVOICE:
        return template.format(card=item.credit_card_id, month=item.reference_month, id=existing_id)
    if kind == EntityKind.CREDIT_CARD:
        return template.format(name=item.name, id=existing_id)
    return template.format(id=existing_id)

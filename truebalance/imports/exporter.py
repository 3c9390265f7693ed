"""
Workbook Exporter

Writes bills, credit cards and invoices to one XLSX workbook with the
Contas, Cartões de Crédito and Faturas sheets, the layout
parse_unified_workbook reads back.

DESIGN DECISION: Amounts, dates, months and flags are written as pt-BR text
(R$ 1.234,56, dd/MM/yyyy, MM/yyyy, Sim/Não). The importer reads every cell
as a string, so an exported workbook re-imports without reformatting.
"""

from typing import Any, Iterable, Optional

import pandas as pd
import structlog

from truebalance.imports.headers import EXPORT_HEADERS
from truebalance.imports.parser import UNIFIED_SHEETS, Source
from truebalance.models.finance import Bill, CreditCard, Invoice
from truebalance.models.imports import EntityKind
from truebalance.parsing.normalizers import format_currency, is_finite_number


logger = structlog.get_logger(__name__)

SHEET_NAMES = {kind: name for name, kind in UNIFIED_SHEETS.items()}

# Sheet order of an exported workbook
EXPORT_ORDER = (EntityKind.BILL, EntityKind.CREDIT_CARD, EntityKind.INVOICE)


def export_workbook(
    bills: Iterable[Bill],
    credit_cards: Iterable[CreditCard],
    invoices: Iterable[Invoice],
    target: Source,
) -> dict[EntityKind, int]:
    """
    Write the three sheets to an XLSX file or binary buffer.

    Empty inputs still produce a sheet with its header row.

    Returns:
        Rows written per entity kind
    """
    rows = {
        EntityKind.BILL: [_bill_row(b) for b in bills],
        EntityKind.CREDIT_CARD: [_credit_card_row(c) for c in credit_cards],
        EntityKind.INVOICE: [_invoice_row(i) for i in invoices],
    }

    with pd.ExcelWriter(target, engine="openpyxl") as writer:
        for kind in EXPORT_ORDER:
            frame = pd.DataFrame(rows[kind], columns=EXPORT_HEADERS[kind])
            frame.to_excel(writer, sheet_name=SHEET_NAMES[kind], index=False)

    counts = {kind: len(kind_rows) for kind, kind_rows in rows.items()}
    logger.info("workbook_exported", **{kind.value: n for kind, n in counts.items()})
    return counts


# =============================================================================
# ROWS
# =============================================================================

def _bill_row(bill: Bill) -> dict[str, Any]:
    return {
        "ID": _cell(bill.id),
        "Nome": bill.name,
        "Descrição": bill.description or "",
        "Data": bill.execution_date.strftime("%d/%m/%Y") if bill.execution_date else "",
        "Valor Total": _money(bill.total_amount),
        "Número de Parcelas": bill.number_of_installments,
        "Valor da Parcela": _money(bill.installment_amount),
        "Categoria": bill.category or "",
        "ID Cartão": _cell(bill.credit_card_id),
    }


def _credit_card_row(card: CreditCard) -> dict[str, Any]:
    return {
        "ID": _cell(card.id),
        "Nome": card.name,
        "Limite de Crédito": _money(card.credit_limit),
        "Dia de Fechamento": card.closing_day,
        "Dia de Vencimento": card.due_day,
        "Permite Pagamento Parcial": _flag(card.allows_partial_payment),
    }


def _invoice_row(invoice: Invoice) -> dict[str, Any]:
    year_month = invoice.year_month
    if year_month:
        month = f"{year_month[1]:02d}/{year_month[0]:04d}"
    else:
        month = invoice.reference_month

    return {
        "ID": _cell(invoice.id),
        "ID Cartão": _cell(invoice.credit_card_id),
        "Mês de Referência": month,
        "Valor Total": _money(invoice.total_amount),
        "Saldo Anterior": _money(invoice.previous_balance),
        "Fechada": _flag(invoice.closed),
        "Paga": _flag(invoice.paid),
        "Valor Absoluto": _flag(invoice.use_absolute_value),
    }


def _money(value: Optional[float]) -> str:
    return format_currency(value) if is_finite_number(value) else ""


def _flag(value: bool) -> str:
    return "Sim" if value else "Não"


def _cell(value: Optional[int]) -> Any:
    return "" if value is None else value

"""
Spreadsheet header vocabulary.

Exports are written with the EXPORT_HEADERS columns; imports accept those
headers, a few shorter variants, and the API's camelCase field names.
"""

from typing import Any, Optional

from truebalance.models.imports import EntityKind


BILL_HEADERS_MAP = {
    "ID": "id",
    "Nome": "name",
    "Descrição": "description",
    "Data": "executionDate",
    "Valor Total": "totalAmount",
    "Número de Parcelas": "numberOfInstallments",
    "Valor da Parcela": "installmentAmount",
    "Categoria": "category",
    "ID Cartão": "creditCardId",
}

INVOICE_HEADERS_MAP = {
    "ID": "id",
    "ID Cartão": "creditCardId",
    "Cartão de Crédito": "creditCardId",
    "Mês de Referência": "referenceMonth",
    "Valor Total": "totalAmount",
    "Saldo Anterior": "previousBalance",
    "Fechada": "closed",
    "Paga": "paid",
    "Valor Absoluto": "useAbsoluteValue",
}

CREDIT_CARD_HEADERS_MAP = {
    "ID": "id",
    "Nome": "name",
    "Limite de Crédito": "creditLimit",
    "Limite": "creditLimit",
    "Dia de Fechamento": "closingDay",
    "Dia Fechamento": "closingDay",
    "Dia de Vencimento": "dueDay",
    "Dia Vencimento": "dueDay",
    "Permite Pagamento Parcial": "allowsPartialPayment",
    "Pagamento Parcial": "allowsPartialPayment",
}

HEADERS_MAPS = {
    EntityKind.BILL: BILL_HEADERS_MAP,
    EntityKind.INVOICE: INVOICE_HEADERS_MAP,
    EntityKind.CREDIT_CARD: CREDIT_CARD_HEADERS_MAP,
}

REQUIRED_HEADERS = {
    EntityKind.BILL: ["Nome", "Data", "Valor Total", "Número de Parcelas"],
    EntityKind.INVOICE: ["ID Cartão", "Mês de Referência", "Valor Total"],
    EntityKind.CREDIT_CARD: [
        "Nome", "Limite de Crédito", "Dia de Fechamento", "Dia de Vencimento",
    ],
}

# Column order of exported sheets. Every header is also accepted on import.
EXPORT_HEADERS = {
    EntityKind.BILL: [
        "ID", "Nome", "Descrição", "Data", "Valor Total", "Número de Parcelas",
        "Valor da Parcela", "Categoria", "ID Cartão",
    ],
    EntityKind.INVOICE: [
        "ID", "ID Cartão", "Mês de Referência", "Valor Total", "Saldo Anterior",
        "Fechada", "Paga", "Valor Absoluto",
    ],
    EntityKind.CREDIT_CARD: [
        "ID", "Nome", "Limite de Crédito", "Dia de Fechamento",
        "Dia de Vencimento", "Permite Pagamento Parcial",
    ],
}


def columns_for(kind: EntityKind, field: str) -> list[str]:
    """
    Every column a field may be read from: the Portuguese headers mapped to
    it, in declaration order, followed by the field name itself.
    """
    headers = [h for h, f in HEADERS_MAPS[kind].items() if f == field]
    return headers + [field]


def pick(row: dict[str, Any], columns: list[str], default: Optional[Any] = None) -> Any:
    """First non-blank cell among the columns, or the default."""
    for column in columns:
        value = row.get(column)
        if value is None:
            continue
        if isinstance(value, str) and value == "":
            continue
        return value
    return default

"""
Import Row Validator/Transformer

DESIGN DECISION: Validation happens in two distinct stages:

STAGE 1 - STRUCTURE VALIDATION (whole sheet):
- Sheet is not empty
- Required headers present (checked on the first row)
- Row count within the import limit
A failure here rejects the batch with ONE message.

STAGE 2 - ROW TRANSFORMATION (per row):
- Cells parsed with the pt-BR normalizers
- Field rules (name length, positive amounts, day ranges...)
Every failing row is reported with its 1-based line number and the
remaining rows are still checked, so the user sees all problems at once.

IMPORTANT: Validation NEVER silently fixes issues. A sheet with any row
error cannot be imported until the file is corrected.
"""

import math
from typing import Any, Optional

from truebalance.audit import AuditLogger
from truebalance.config import ImportSettings, get_settings
from truebalance.exceptions import RowValidationError
from truebalance.imports.headers import REQUIRED_HEADERS, columns_for, pick
from truebalance.models.imports import (
    AnyImportItem,
    BillImportItem,
    CreditCardImportItem,
    EntityKind,
    ImportErrorDetail,
    ImportValidationState,
    InvoiceImportItem,
    ValidationReport,
)
from truebalance.parsing.normalizers import (
    parse_boolean,
    parse_currency,
    parse_int,
    parse_local_date,
    parse_reference_month,
)


def _text(value: Any) -> str:
    return "" if value is None else str(value)


class ImportRowValidator:
    """
    Validates and transforms parsed spreadsheet rows into import items.

    Rows are dicts of header -> cell, as produced by the file parser.
    """

    def __init__(
        self,
        settings: Optional[ImportSettings] = None,
        audit: Optional[AuditLogger] = None,
    ):
        """
        Initialize validator.

        Args:
            settings: Limits and field rules. Defaults to the global settings.
            audit: Receives STRUCTURE_REJECTED and ROW_REJECTED events.
        """
        self._settings = settings or get_settings().imports
        self._audit = audit

    # =========================================================================
    # PIPELINE
    # =========================================================================

    def validate(self, kind: EntityKind, rows: list[dict[str, Any]]) -> ValidationReport:
        """
        Run both stages over one sheet.

        Returns:
            ValidationReport in state STRUCTURE_INVALID, HAS_ROW_ERRORS or ALL_VALID
        """
        structure_error = self.validate_structure(kind, rows)
        if structure_error:
            if self._audit:
                self._audit.log_structure_rejected(kind.value, structure_error)
            return ValidationReport(
                entity=kind,
                state=ImportValidationState.STRUCTURE_INVALID,
                structure_error=structure_error,
            )

        items, errors = self.validate_rows(kind, rows)
        state = (
            ImportValidationState.HAS_ROW_ERRORS
            if errors
            else ImportValidationState.ALL_VALID
        )
        return ValidationReport(entity=kind, state=state, items=items, errors=errors)

    def validate_structure(
        self,
        kind: EntityKind,
        rows: list[dict[str, Any]],
    ) -> Optional[str]:
        """
        Whole-sheet checks.

        Returns:
            The rejection message, or None when the structure is valid
        """
        if not rows:
            return "Arquivo vazio ou sem dados válidos"

        available = set(rows[0].keys())
        missing = [h for h in REQUIRED_HEADERS[kind] if h not in available]
        if missing:
            return f"Cabeçalhos obrigatórios faltando: {', '.join(missing)}"

        limit = self._settings.max_rows
        if len(rows) > limit:
            return (
                f"Limite de {limit} registros excedido. "
                f"Arquivo contém {len(rows)} registros"
            )

        return None

    def validate_rows(
        self,
        kind: EntityKind,
        rows: list[dict[str, Any]],
    ) -> tuple[list[AnyImportItem], list[ImportErrorDetail]]:
        """
        Transform every row, collecting errors instead of stopping.

        Line numbers are 1-based positions among the data rows.
        """
        items: list[AnyImportItem] = []
        errors: list[ImportErrorDetail] = []

        for index, row in enumerate(rows):
            line_number = index + 1
            try:
                items.append(self.transform_row(kind, row, line_number))
            except RowValidationError as e:
                errors.append(ImportErrorDetail(
                    line_number=e.line_number,
                    field=e.field,
                    message=str(e),
                    value=_text(e.value),
                ))
                if self._audit:
                    self._audit.log_row_rejected(kind.value, e.line_number, e.field, str(e))

        return items, errors

    def transform_row(
        self,
        kind: EntityKind,
        row: dict[str, Any],
        line_number: int,
    ) -> AnyImportItem:
        """
        Transform one row.

        Raises:
            RowValidationError: On the first failing field
        """
        if kind == EntityKind.BILL:
            return self._transform_bill(row, line_number)
        elif kind == EntityKind.INVOICE:
            return self._transform_invoice(row, line_number)
        return self._transform_credit_card(row, line_number)

    # =========================================================================
    # PER-KIND TRANSFORMS
    # =========================================================================

    def _transform_bill(self, row: dict[str, Any], line_number: int) -> BillImportItem:
        s = self._settings
        kind = EntityKind.BILL

        name = _text(pick(row, columns_for(kind, "name"), ""))
        description = pick(row, columns_for(kind, "description"))
        date_raw = pick(row, columns_for(kind, "executionDate") + ["date"], "")
        total_raw = pick(row, columns_for(kind, "totalAmount"), "0")
        installments_raw = pick(row, columns_for(kind, "numberOfInstallments"), "1")
        category = pick(row, columns_for(kind, "category"))
        card_raw = pick(row, columns_for(kind, "creditCardId"))

        execution_date = parse_local_date(_text(date_raw))
        if not execution_date:
            raise RowValidationError(
                line_number, "Data inválida. Use formato dd/MM/yyyy",
                field="executionDate", value=date_raw,
            )

        total = parse_currency(total_raw)
        if not math.isfinite(total) or total <= 0:
            raise RowValidationError(
                line_number, "Valor total inválido. Deve ser um número positivo",
                field="totalAmount", value=total_raw,
            )

        installments = parse_int(installments_raw)
        if installments is None or not 1 <= installments <= s.max_installments:
            raise RowValidationError(
                line_number,
                f"Número de parcelas inválido. Deve ser entre 1 e {s.max_installments}",
                field="numberOfInstallments", value=installments_raw,
            )

        self._check_name(name, line_number)

        description = _text(description).strip() or None
        if description and len(description) > s.description_max_length:
            raise RowValidationError(
                line_number,
                f"Descrição muito longa. Máximo de {s.description_max_length} caracteres",
                field="description", value=description,
            )

        credit_card_id = None
        if card_raw is not None:
            credit_card_id = self._parse_card_id(card_raw, line_number)

        return BillImportItem(
            line_number=line_number,
            name=name.strip(),
            execution_date=execution_date,
            total_amount=total,
            number_of_installments=installments,
            description=description,
            category=_text(category).strip() or None,
            credit_card_id=credit_card_id,
        )

    def _transform_invoice(self, row: dict[str, Any], line_number: int) -> InvoiceImportItem:
        kind = EntityKind.INVOICE

        card_raw = pick(row, columns_for(kind, "creditCardId"), "")
        month_raw = pick(row, columns_for(kind, "referenceMonth"), "")
        total_raw = pick(row, columns_for(kind, "totalAmount"), "0")
        previous_raw = pick(row, columns_for(kind, "previousBalance"), "0")
        closed_raw = pick(row, columns_for(kind, "closed"), "false")
        paid_raw = pick(row, columns_for(kind, "paid"), "false")
        absolute_raw = pick(row, columns_for(kind, "useAbsoluteValue"), "false")

        credit_card_id = self._parse_card_id(card_raw, line_number)

        reference_month = parse_reference_month(_text(month_raw))
        if not reference_month:
            raise RowValidationError(
                line_number,
                "Mês de referência inválido. Use formato MM/yyyy ou yyyy-MM",
                field="referenceMonth", value=month_raw,
            )

        total = parse_currency(total_raw)
        if not math.isfinite(total) or total < 0:
            raise RowValidationError(
                line_number,
                "Valor total inválido. Deve ser um número positivo ou zero",
                field="totalAmount", value=total_raw,
            )

        previous_balance = parse_currency(previous_raw)
        if not math.isfinite(previous_balance) or previous_balance < 0:
            raise RowValidationError(
                line_number,
                "Saldo anterior inválido. Deve ser um número positivo ou zero",
                field="previousBalance", value=previous_raw,
            )

        return InvoiceImportItem(
            line_number=line_number,
            credit_card_id=credit_card_id,
            reference_month=reference_month,
            total_amount=total,
            previous_balance=previous_balance if previous_balance > 0 else None,
            closed=parse_boolean(closed_raw),
            paid=parse_boolean(paid_raw),
            use_absolute_value=parse_boolean(absolute_raw),
        )

    def _transform_credit_card(
        self,
        row: dict[str, Any],
        line_number: int,
    ) -> CreditCardImportItem:
        kind = EntityKind.CREDIT_CARD

        name = _text(pick(row, columns_for(kind, "name"), ""))
        limit_raw = pick(row, columns_for(kind, "creditLimit"), "0")
        closing_raw = pick(row, columns_for(kind, "closingDay"), "")
        due_raw = pick(row, columns_for(kind, "dueDay"), "")
        partial_raw = pick(row, columns_for(kind, "allowsPartialPayment"), "true")

        self._check_name(name, line_number)

        credit_limit = parse_currency(limit_raw)
        if not math.isfinite(credit_limit) or credit_limit <= 0:
            raise RowValidationError(
                line_number,
                "Limite de crédito inválido. Deve ser um número positivo",
                field="creditLimit", value=limit_raw,
            )

        closing_day = parse_int(closing_raw)
        if closing_day is None or not 1 <= closing_day <= 31:
            raise RowValidationError(
                line_number,
                "Dia de fechamento inválido. Deve ser entre 1 e 31",
                field="closingDay", value=closing_raw,
            )

        due_day = parse_int(due_raw)
        if due_day is None or not 1 <= due_day <= 31:
            raise RowValidationError(
                line_number,
                "Dia de vencimento inválido. Deve ser entre 1 e 31",
                field="dueDay", value=due_raw,
            )

        return CreditCardImportItem(
            line_number=line_number,
            name=name.strip(),
            credit_limit=credit_limit,
            closing_day=closing_day,
            due_day=due_day,
            allows_partial_payment=parse_boolean(partial_raw),
        )

    # =========================================================================
    # SHARED RULES
    # =========================================================================

    def _check_name(self, name: str, line_number: int) -> None:
        s = self._settings
        length = len(name.strip())
        if not s.name_min_length <= length <= s.name_max_length:
            raise RowValidationError(
                line_number,
                f"Nome inválido. Deve ter entre {s.name_min_length} "
                f"e {s.name_max_length} caracteres",
                field="name", value=name,
            )

    @staticmethod
    def _parse_card_id(raw: Any, line_number: int) -> int:
        card_id = parse_int(raw)
        if card_id is None or card_id <= 0:
            raise RowValidationError(
                line_number, "ID do cartão de crédito inválido",
                field="creditCardId", value=raw,
            )
        return card_id

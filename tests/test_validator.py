"""
Tests for the import row validator

Test strategy:
1. Structure checks reject the whole sheet with one message
2. Row checks report every failing line with its 1-based number
3. Transform output for valid rows of each kind
"""

import pytest

from truebalance.config import ImportSettings
from truebalance.imports import ImportRowValidator
from truebalance.models.audit import AuditEventType
from truebalance.models.imports import (
    BillImportItem,
    EntityKind,
    ImportValidationState,
)


def bill_row(**overrides) -> dict:
    row = {
        "Nome": "Aluguel",
        "Data": "05/01/2025",
        "Valor Total": "R$ 2.500,00",
        "Número de Parcelas": "12",
        "Descrição": "",
    }
    row.update(overrides)
    return row


def invoice_row(**overrides) -> dict:
    row = {
        "ID Cartão": "1",
        "Mês de Referência": "01/2025",
        "Valor Total": "1.500,00",
        "Saldo Anterior": "0",
        "Fechada": "sim",
        "Paga": "não",
    }
    row.update(overrides)
    return row


def card_row(**overrides) -> dict:
    row = {
        "Nome": "Nubank Ultravioleta",
        "Limite de Crédito": "10.000,00",
        "Dia de Fechamento": "10",
        "Dia de Vencimento": "17",
    }
    row.update(overrides)
    return row


@pytest.fixture
def validator(import_settings, audit) -> ImportRowValidator:
    return ImportRowValidator(import_settings, audit)


class TestStructureValidation:
    """Tests for whole-sheet checks."""

    def test_empty_sheet(self, validator):
        report = validator.validate(EntityKind.BILL, [])

        assert report.state == ImportValidationState.STRUCTURE_INVALID
        assert report.structure_error == "Arquivo vazio ou sem dados válidos"
        assert report.can_import is False

    def test_missing_headers(self, validator, audit):
        """Test missing required headers are listed."""
        rows = [{"Nome": "Aluguel", "Data": "05/01/2025"}]

        report = validator.validate(EntityKind.BILL, rows)

        assert report.state == ImportValidationState.STRUCTURE_INVALID
        assert "Valor Total" in report.structure_error
        assert "Número de Parcelas" in report.structure_error
        assert audit.count(AuditEventType.STRUCTURE_REJECTED) == 1

    def test_row_limit(self, audit):
        validator = ImportRowValidator(ImportSettings(max_rows=2), audit)
        rows = [bill_row(), bill_row(), bill_row()]

        report = validator.validate(EntityKind.BILL, rows)

        assert report.structure_error == (
            "Limite de 2 registros excedido. Arquivo contém 3 registros"
        )

    def test_invoice_required_headers(self, validator):
        rows = [{"Cartão": "1", "Mês de Referência": "01/2025", "Valor Total": "10"}]
        message = validator.validate_structure(EntityKind.INVOICE, rows)
        assert message == "Cabeçalhos obrigatórios faltando: ID Cartão"


class TestBillRows:
    """Tests for bill row transformation."""

    def test_all_valid(self, validator):
        report = validator.validate(EntityKind.BILL, [bill_row(), bill_row(Nome="Internet")])

        assert report.state == ImportValidationState.ALL_VALID
        assert report.can_import is True
        first = report.items[0]
        assert isinstance(first, BillImportItem)
        assert first.line_number == 1
        assert first.execution_date == "2025-01-05T00:00:00"
        assert first.total_amount == pytest.approx(2500.0)
        assert first.number_of_installments == 12
        assert first.description is None

    def test_invalid_installments_reported_with_line(self, validator, audit):
        """Test one bad row among three is reported on line 2."""
        rows = [bill_row(), bill_row(**{"Número de Parcelas": "200"}), bill_row()]

        report = validator.validate(EntityKind.BILL, rows)

        assert report.state == ImportValidationState.HAS_ROW_ERRORS
        assert report.can_import is False
        assert len(report.errors) == 1
        error = report.errors[0]
        assert error.line_number == 2
        assert error.field == "numberOfInstallments"
        assert error.value == "200"
        assert error.message == "Linha 2: Número de parcelas inválido. Deve ser entre 1 e 120"
        assert [item.line_number for item in report.items] == [1, 3]
        assert audit.count(AuditEventType.ROW_REJECTED) == 1

    def test_every_bad_row_is_reported(self, validator):
        rows = [
            bill_row(Data="31/02/2025"),
            bill_row(**{"Valor Total": "-10"}),
            bill_row(Nome="ab"),
        ]

        report = validator.validate(EntityKind.BILL, rows)

        assert [e.line_number for e in report.errors] == [1, 2, 3]
        assert report.errors[0].message == "Linha 1: Data inválida. Use formato dd/MM/yyyy"
        assert report.errors[1].field == "totalAmount"
        assert report.errors[2].field == "name"
        assert report.error_messages[2].startswith("Linha 3: Nome inválido")

    def test_blank_installments_default_to_one(self, validator):
        item = validator.transform_row(
            EntityKind.BILL, bill_row(**{"Número de Parcelas": ""}), 1,
        )
        assert item.number_of_installments == 1

    def test_fractional_installments_rejected(self, validator):
        report = validator.validate(EntityKind.BILL, [bill_row(**{"Número de Parcelas": "2.5"})])
        assert report.errors[0].field == "numberOfInstallments"

    def test_description_too_long(self, validator):
        report = validator.validate(EntityKind.BILL, [bill_row(**{"Descrição": "x" * 501})])
        assert report.errors[0].field == "description"

    def test_optional_category_and_card(self, validator):
        row = bill_row(Categoria="Moradia", **{"ID Cartão": "3"})
        item = validator.transform_row(EntityKind.BILL, row, 1)
        assert item.category == "Moradia"
        assert item.credit_card_id == 3

    def test_invalid_card_id(self, validator):
        report = validator.validate(EntityKind.BILL, [bill_row(**{"ID Cartão": "abc"})])
        assert report.errors[0].message == "Linha 1: ID do cartão de crédito inválido"

    def test_camel_case_columns(self, validator):
        """Test API field names are accepted as columns."""
        row = {
            "name": "Academia",
            "executionDate": "2025-01-10",
            "totalAmount": "99,90",
            "numberOfInstallments": "1",
        }
        item = validator.transform_row(EntityKind.BILL, row, 4)
        assert item.name == "Academia"
        assert item.total_amount == pytest.approx(99.90)
        assert item.line_number == 4


class TestInvoiceRows:
    """Tests for invoice row transformation."""

    def test_valid_invoice(self, validator):
        item = validator.transform_row(EntityKind.INVOICE, invoice_row(), 1)

        assert item.credit_card_id == 1
        assert item.reference_month == "2025-01-01"
        assert item.total_amount == pytest.approx(1500.0)
        assert item.previous_balance is None
        assert item.closed is True
        assert item.paid is False
        assert item.use_absolute_value is False

    def test_previous_balance_kept_when_positive(self, validator):
        item = validator.transform_row(
            EntityKind.INVOICE, invoice_row(**{"Saldo Anterior": "250,00"}), 1,
        )
        assert item.previous_balance == pytest.approx(250.0)

    def test_zero_total_allowed(self, validator):
        item = validator.transform_row(EntityKind.INVOICE, invoice_row(**{"Valor Total": ""}), 1)
        assert item.total_amount == 0.0

    def test_card_column_variant(self, validator):
        row = invoice_row()
        row["ID Cartão"] = ""
        row["Cartão de Crédito"] = "2"
        item = validator.transform_row(EntityKind.INVOICE, row, 1)
        assert item.credit_card_id == 2

    @pytest.mark.parametrize("overrides,field", [
        ({"ID Cartão": "abc"}, "creditCardId"),
        ({"ID Cartão": "0"}, "creditCardId"),
        ({"Mês de Referência": "13/2025"}, "referenceMonth"),
        ({"Valor Total": "-1"}, "totalAmount"),
        ({"Saldo Anterior": "-5"}, "previousBalance"),
    ])
    def test_invalid_invoice_fields(self, validator, overrides, field):
        report = validator.validate(EntityKind.INVOICE, [invoice_row(**overrides)])
        assert report.state == ImportValidationState.HAS_ROW_ERRORS
        assert report.errors[0].field == field


class TestCreditCardRows:
    """Tests for credit card row transformation."""

    def test_valid_card_defaults_to_partial_payment(self, validator):
        item = validator.transform_row(EntityKind.CREDIT_CARD, card_row(), 1)

        assert item.name == "Nubank Ultravioleta"
        assert item.credit_limit == pytest.approx(10000.0)
        assert item.closing_day == 10
        assert item.due_day == 17
        assert item.allows_partial_payment is True

    def test_partial_payment_disabled(self, validator):
        row = card_row(**{"Permite Pagamento Parcial": "não"})
        item = validator.transform_row(EntityKind.CREDIT_CARD, row, 1)
        assert item.allows_partial_payment is False

    @pytest.mark.parametrize("overrides,field", [
        ({"Nome": "C6"}, "name"),
        ({"Limite de Crédito": "0"}, "creditLimit"),
        ({"Dia de Fechamento": "32"}, "closingDay"),
        ({"Dia de Vencimento": ""}, "dueDay"),
    ])
    def test_invalid_card_fields(self, validator, overrides, field):
        report = validator.validate(EntityKind.CREDIT_CARD, [card_row(**overrides)])
        assert report.errors[0].field == field


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

"""
Tests for TrueBalance models

Test strategy:
1. Unit tests for individual components (models, normalizers, aggregators)
2. Service tests against the in-memory backend
3. No real API calls in tests (httpx MockTransport)
"""

import math
from datetime import datetime
from uuid import uuid4

import pytest

from truebalance.config import (
    BackendSettings,
    ImportSettings,
    ReportSettings,
    get_settings,
    validate_all_settings,
)
from truebalance.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from truebalance.models.finance import (
    Bill,
    CreditCard,
    Installment,
    Invoice,
    PartialPayment,
)
from truebalance.models.imports import (
    BillImportItem,
    EntityKind,
    ImportResult,
    ImportValidationState,
    UnifiedImportResult,
    ValidationReport,
)


class TestBillModel:
    """Tests for the Bill model boundary normalization."""

    def test_bill_date_from_execution_date(self):
        """Test executionDate is parsed into a datetime."""
        bill = Bill.model_validate({"name": "Aluguel", "executionDate": "2025-01-05"})
        assert bill.execution_date == datetime(2025, 1, 5)

    def test_bill_date_from_bill_date_alias(self):
        """Test billDate takes precedence over the other aliases."""
        bill = Bill.model_validate({
            "name": "Academia",
            "billDate": "2024-03-10",
            "executionDate": "2024-04-01",
        })
        assert bill.execution_date == datetime(2024, 3, 10)

    def test_bill_date_from_brazilian_format(self):
        """Test the plain 'date' alias in dd/MM/yyyy."""
        bill = Bill.model_validate({"name": "Luz", "date": "15/01/2024"})
        assert bill.execution_date == datetime(2024, 1, 15)

    def test_unparseable_date_becomes_none(self):
        """Test a bad date does not fail validation."""
        bill = Bill.model_validate({"name": "Luz", "executionDate": "ontem"})
        assert bill.execution_date is None

    def test_installment_amount_derived(self):
        """Test installment_amount = total / installments."""
        bill = Bill(name="Notebook", total_amount=4800.0, number_of_installments=12)
        assert bill.installment_amount == pytest.approx(400.0)
        assert bill.installment_amount * bill.number_of_installments == pytest.approx(4800.0)

    def test_string_amount_parsed_as_currency(self):
        """Test pt-BR currency strings are accepted for amounts."""
        bill = Bill.model_validate({"name": "TV", "totalAmount": "R$ 1.234,56"})
        assert bill.total_amount == pytest.approx(1234.56)

    def test_garbage_amount_becomes_nan(self):
        """Test a non-numeric amount becomes NaN instead of failing."""
        bill = Bill.model_validate({"name": "TV", "totalAmount": "abc"})
        assert math.isnan(bill.total_amount)

    def test_null_name_becomes_empty(self):
        bill = Bill.model_validate({"name": None, "executionDate": "2025-01-05", "totalAmount": 50.0})
        assert bill.name == ""
        assert bill.execution_date == datetime(2025, 1, 5)

    def test_missing_installments_default_to_one(self):
        bill = Bill.model_validate({"name": "TV", "numberOfInstallments": None})
        assert bill.number_of_installments == 1

    def test_dump_uses_camel_case(self):
        """Test serialization uses the API field names."""
        bill = Bill(name="Aluguel", execution_date=datetime(2025, 1, 5), total_amount=100.0)
        data = bill.model_dump(by_alias=True)
        assert "executionDate" in data
        assert "totalAmount" in data
        assert "numberOfInstallments" in data


class TestInvoiceModel:
    """Tests for invoice helpers."""

    def test_amount_paid_and_balance_due(self):
        invoice = Invoice(
            credit_card_id=1,
            reference_month="2025-01-01",
            total_amount=1000.0,
            previous_balance=200.0,
            partial_payments=[
                PartialPayment(amount=300.0),
                PartialPayment(amount=150.0),
            ],
        )
        assert invoice.amount_paid == pytest.approx(450.0)
        assert invoice.balance_due == pytest.approx(750.0)

    def test_overpayment_gives_negative_balance(self):
        """Test payments may exceed the invoice total (credit)."""
        invoice = Invoice(
            reference_month="2025-01-01",
            total_amount=100.0,
            partial_payments=[PartialPayment(amount=250.0)],
        )
        assert invoice.balance_due == pytest.approx(-150.0)

    def test_year_month(self):
        assert Invoice(reference_month="2024-03-01").year_month == (2024, 3)
        assert Invoice(reference_month="2024-03").year_month == (2024, 3)
        assert Invoice(reference_month="março").year_month is None

    def test_null_reference_month_is_skippable(self):
        """Test a null month parses and leaves year_month empty."""
        invoice = Invoice.model_validate({
            "referenceMonth": None,
            "totalAmount": 20.0,
            "partialPayments": None,
        })
        assert invoice.reference_month == ""
        assert invoice.year_month is None
        assert invoice.partial_payments == []

    def test_null_previous_balance_defaults_to_zero(self):
        invoice = Invoice.model_validate({"referenceMonth": "2025-01", "previousBalance": None})
        assert invoice.previous_balance == 0.0

    def test_negative_previous_balance_rejected(self):
        with pytest.raises(ValueError):
            Invoice(reference_month="2025-01-01", previous_balance=-1.0)

    def test_installment_from_api_payload(self):
        installment = Installment.model_validate({
            "billId": 2,
            "invoiceId": 5,
            "installmentNumber": 3,
            "amount": 400.0,
            "dueDate": "2025-03-17T00:00:00",
        })
        assert installment.installment_number == 3
        assert installment.due_date == datetime(2025, 3, 17)


class TestCreditCardModel:

    def test_credit_card_from_api_payload(self):
        card = CreditCard.model_validate({
            "id": 2,
            "name": "Inter Gold",
            "creditLimit": 5000.0,
            "closingDay": 5,
            "dueDay": 12,
            "allowsPartialPayment": True,
        })
        assert card.credit_limit == 5000.0
        assert card.closing_day == 5

    def test_closing_day_bounds(self):
        """Test days outside 1..31 are rejected."""
        with pytest.raises(ValueError):
            CreditCard(name="Cartão", credit_limit=100.0, closing_day=32, due_day=10)


class TestImportModels:
    """Tests for transient import models."""

    def test_line_number_not_serialized(self):
        """Test the spreadsheet line never reaches the API payload."""
        item = BillImportItem(
            line_number=7,
            name="Aluguel",
            execution_date="2025-01-05T00:00:00",
            total_amount=2500.0,
            number_of_installments=12,
        )
        data = item.model_dump(by_alias=True)
        assert item.line_number == 7
        assert "lineNumber" not in data
        assert data["numberOfInstallments"] == 12

    def test_validation_report_can_import(self):
        ok = ValidationReport(entity=EntityKind.BILL, state=ImportValidationState.ALL_VALID)
        bad = ValidationReport(entity=EntityKind.BILL, state=ImportValidationState.HAS_ROW_ERRORS)
        assert ok.can_import is True
        assert bad.can_import is False

    def test_structure_error_messages(self):
        report = ValidationReport(
            entity=EntityKind.INVOICE,
            state=ImportValidationState.STRUCTURE_INVALID,
            structure_error="Arquivo vazio ou sem dados válidos",
        )
        assert report.error_messages == ["Arquivo vazio ou sem dados válidos"]

    def test_unified_summary_totals(self):
        """Test the summary adds the per-kind tallies."""
        cards = ImportResult(entity=EntityKind.CREDIT_CARD, total_processed=2, total_created=2)
        bills = ImportResult(
            entity=EntityKind.BILL,
            total_processed=5,
            total_created=3,
            total_skipped=1,
            total_errors=1,
        )
        unified = UnifiedImportResult.from_results(credit_cards=cards, bills=bills)

        assert unified.invoices is None
        assert unified.summary.total_created == 5
        assert unified.summary.total_skipped == 1
        assert unified.summary.total_errors == 1

    def test_unified_result_json(self):
        unified = UnifiedImportResult.from_results()
        data = unified.model_dump(by_alias=True, mode="json")
        assert data["summary"] == {"totalCreated": 0, "totalSkipped": 0, "totalErrors": 0}
        assert data["creditCards"] is None


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.IMPORT_STARTED,
            description="Import started",
        )
        assert event.event_type == AuditEventType.IMPORT_STARTED
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEvent(
            event_type=AuditEventType.RECORD_CREATED,
            description="Created bill",
            entity_type="bill",
            entity_id=42,
            line_number=3,
        )
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "record_created"
        assert log_dict["entity_id"] == 42
        assert log_dict["line_number"] == 3

    def test_builder_duplicate_skipped(self):
        correlation_id = uuid4()
        event = AuditEventBuilder.duplicate_skipped("bill", 4, 10, correlation_id)

        assert event.event_type == AuditEventType.DUPLICATE_SKIPPED
        assert event.entity_id == 10
        assert event.line_number == 4
        assert event.correlation_id == correlation_id

    def test_builder_create_failed_is_error(self):
        event = AuditEventBuilder.create_failed("invoice", 2, "card not found", None)
        assert event.severity == AuditSeverity.ERROR
        assert event.error_message == "card not found"

    def test_builder_import_completed_warns_on_errors(self):
        clean = AuditEventBuilder.import_completed("bill", 3, 0, 0, None)
        failed = AuditEventBuilder.import_completed("bill", 2, 0, 1, None)
        assert clean.severity == AuditSeverity.INFO
        assert failed.severity == AuditSeverity.WARNING


class TestSettings:
    """Tests for configuration defaults."""

    def test_backend_url_trailing_slash_stripped(self):
        settings = BackendSettings(base_url="http://api.test/")
        assert settings.base_url == "http://api.test"

    def test_import_defaults(self):
        settings = ImportSettings()
        assert settings.max_rows == 1000
        assert settings.supported_formats_list == ["csv", "xlsx", "xls"]
        assert settings.max_file_size_bytes == 5 * 1024 * 1024
        assert settings.max_installments == 120

    def test_report_defaults(self):
        settings = ReportSettings()
        assert settings.default_bill_category == "Contas"
        assert settings.credit_card_category == "Cartão de Crédito"
        assert settings.comparison_window_months == 6

    def test_validate_all_settings(self, monkeypatch):
        """Test a bad environment value is reported per section."""
        monkeypatch.setenv("TRUEBALANCE_IMPORT_MAX_ROWS", "zero")
        get_settings.cache_clear()

        results = validate_all_settings()

        assert results["backend"] is True
        assert results["imports"] is False
        assert "imports_error" in results
        get_settings.cache_clear()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

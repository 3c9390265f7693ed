"""
Data Models Package

This package contains all Pydantic models used in TrueBalance.
Backend records, report outputs and import results all conform to these schemas.
"""

from truebalance.models.finance import (
    Bill,
    CamelModel,
    CreditCard,
    Installment,
    Invoice,
    PartialPayment,
)
from truebalance.models.reports import (
    AggregationBucket,
    CategoryExpense,
    ConsolidatedSummary,
    ExpenseMetrics,
    MonthAmount,
    PeriodComparison,
)
from truebalance.models.imports import (
    AnyImportItem,
    BillImportItem,
    CreditCardImportItem,
    DuplicateInfo,
    DuplicateStrategy,
    EntityKind,
    ImportErrorDetail,
    ImportItem,
    ImportResult,
    ImportSummary,
    ImportValidationState,
    InvoiceImportItem,
    UnifiedImportResult,
    ValidationReport,
)
from truebalance.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Finance models
    "Bill",
    "CamelModel",
    "CreditCard",
    "Installment",
    "Invoice",
    "PartialPayment",
    # Report models
    "AggregationBucket",
    "CategoryExpense",
    "ConsolidatedSummary",
    "ExpenseMetrics",
    "MonthAmount",
    "PeriodComparison",
    # Import models
    "AnyImportItem",
    "BillImportItem",
    "CreditCardImportItem",
    "DuplicateInfo",
    "DuplicateStrategy",
    "EntityKind",
    "ImportErrorDetail",
    "ImportItem",
    "ImportResult",
    "ImportSummary",
    "ImportValidationState",
    "InvoiceImportItem",
    "UnifiedImportResult",
    "ValidationReport",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]

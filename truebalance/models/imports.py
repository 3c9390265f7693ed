"""
Import Models

Transient records of a bulk spreadsheet import: the validated items, the
validation report, and the reconciliation results.

DESIGN DECISION: Import items carry their 1-based spreadsheet line number so
every error and duplicate can be traced back to the row the user must fix.
The line number is excluded from serialization; it is never sent to the
backend.
"""

from enum import Enum
from typing import Any, Optional, Union

from pydantic import Field

from truebalance.models.finance import CamelModel


# =============================================================================
# ENUMS
# =============================================================================

class EntityKind(str, Enum):
    """Kinds of record a spreadsheet can import."""
    BILL = "bill"
    INVOICE = "invoice"
    CREDIT_CARD = "credit_card"


class DuplicateStrategy(str, Enum):
    """
    What to do when an imported row matches an existing record.

    SKIP records the duplicate and moves on; CREATE_DUPLICATE creates it anyway.
    """
    SKIP = "SKIP"
    CREATE_DUPLICATE = "CREATE_DUPLICATE"


class ImportValidationState(str, Enum):
    """
    Validation pipeline states.

    PARSE_FILE -> VALIDATE_STRUCTURE -> TRANSFORM_ROWS -> ALL_VALID | HAS_ROW_ERRORS,
    or STRUCTURE_INVALID when the whole batch is rejected.
    """
    PARSE_FILE = "parse_file"
    VALIDATE_STRUCTURE = "validate_structure"
    TRANSFORM_ROWS = "transform_rows"
    ALL_VALID = "all_valid"
    HAS_ROW_ERRORS = "has_row_errors"
    STRUCTURE_INVALID = "structure_invalid"


# =============================================================================
# IMPORT ITEMS
# =============================================================================

class ImportItem(CamelModel):
    """Base for validated spreadsheet rows."""

    line_number: int = Field(default=0, ge=0, exclude=True)


class BillImportItem(ImportItem):
    name: str
    execution_date: str = Field(..., description="ISO datetime at local midnight")
    total_amount: float = Field(..., gt=0)
    number_of_installments: int = Field(default=1, ge=1)
    description: Optional[str] = None
    category: Optional[str] = None
    credit_card_id: Optional[int] = None


class InvoiceImportItem(ImportItem):
    credit_card_id: int = Field(..., gt=0)
    reference_month: str = Field(..., description="YYYY-MM-01")
    total_amount: float = Field(..., ge=0)
    previous_balance: Optional[float] = Field(default=None, ge=0)
    closed: bool = False
    paid: bool = False
    use_absolute_value: bool = False


class CreditCardImportItem(ImportItem):
    name: str
    credit_limit: float = Field(..., gt=0)
    closing_day: int = Field(..., ge=1, le=31)
    due_day: int = Field(..., ge=1, le=31)
    allows_partial_payment: bool = True


AnyImportItem = Union[BillImportItem, InvoiceImportItem, CreditCardImportItem]


# =============================================================================
# VALIDATION & RECONCILIATION RESULTS
# =============================================================================

class ImportErrorDetail(CamelModel):
    """A row-level error, either from validation or from record creation."""

    line_number: int
    field: str = "general"
    message: str
    value: Optional[str] = ""


class DuplicateInfo(CamelModel):
    """An imported row that matched an existing record and was skipped."""

    line_number: int
    fields: dict[str, Any] = Field(
        default_factory=dict,
        description="Key fields of the imported row"
    )
    existing_id: Optional[int] = None
    reason: str = ""


class ValidationReport(CamelModel):
    """
    Outcome of validating one sheet.

    Only ALL_VALID reports may be imported. With HAS_ROW_ERRORS the valid
    rows are available for preview, but the file must be fixed first.
    """

    entity: EntityKind
    state: ImportValidationState
    items: list[AnyImportItem] = Field(default_factory=list)
    errors: list[ImportErrorDetail] = Field(default_factory=list)
    structure_error: Optional[str] = None

    @property
    def can_import(self) -> bool:
        return self.state == ImportValidationState.ALL_VALID

    @property
    def error_messages(self) -> list[str]:
        """Errors rendered as 'Linha N: ...'."""
        if self.structure_error:
            return [self.structure_error]
        return [e.message for e in self.errors]


class ImportResult(CamelModel):
    """Tallies of one reconciliation run."""

    entity: EntityKind
    total_processed: int = 0
    total_created: int = 0
    total_skipped: int = 0
    total_errors: int = 0
    duplicates_found: list[DuplicateInfo] = Field(default_factory=list)
    errors: list[ImportErrorDetail] = Field(default_factory=list)
    created: list[dict[str, Any]] = Field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return self.total_errors > 0


class ImportSummary(CamelModel):
    total_created: int = 0
    total_skipped: int = 0
    total_errors: int = 0


class UnifiedImportResult(CamelModel):
    """Results of a workbook import covering all three kinds."""

    credit_cards: Optional[ImportResult] = None
    invoices: Optional[ImportResult] = None
    bills: Optional[ImportResult] = None
    summary: ImportSummary = Field(default_factory=ImportSummary)

    @classmethod
    def from_results(
        cls,
        credit_cards: Optional[ImportResult] = None,
        invoices: Optional[ImportResult] = None,
        bills: Optional[ImportResult] = None,
    ) -> 'UnifiedImportResult':
        """Build the result and total the per-kind tallies."""
        present = [r for r in (credit_cards, invoices, bills) if r is not None]
        summary = ImportSummary(
            total_created=sum(r.total_created for r in present),
            total_skipped=sum(r.total_skipped for r in present),
            total_errors=sum(r.total_errors for r in present),
        )
        return cls(
            credit_cards=credit_cards,
            invoices=invoices,
            bills=bills,
            summary=summary,
        )

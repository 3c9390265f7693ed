"""
Import Service

Ties together the import flow:
1. File check (extension, size)
2. Parse (CSV/XLS/XLSX -> rows of strings)
3. Validate (structure, then every row)
4. Index existing records
5. Reconcile (skip or create per the duplicate strategy)

DESIGN DECISION: Nothing is created unless the whole sheet validates. Row
errors are returned to the user to fix the file; there is no partial import
of the "good" rows.

In a unified workbook import every sheet is validated before anything is
written, then credit cards are reconciled first, invoices second and bills
last, so rows can reference cards created earlier in the same run.
"""

import os
from pathlib import Path
from typing import Any, Optional

import structlog

from truebalance.audit import AuditLogger
from truebalance.config import ImportSettings, get_settings
from truebalance.exceptions import ImportValidationError, StructureValidationError
from truebalance.imports.parser import (
    Source,
    parse_import_file,
    parse_unified_workbook,
    validate_file,
)
from truebalance.imports.reconciler import ExistingRecordsLookup, reconcile
from truebalance.imports.validator import ImportRowValidator
from truebalance.models.imports import (
    AnyImportItem,
    DuplicateStrategy,
    EntityKind,
    ImportResult,
    ImportValidationState,
    UnifiedImportResult,
    ValidationReport,
)
from truebalance.services.backend.interface import FinanceBackendInterface


logger = structlog.get_logger(__name__)

UNIFIED_ORDER = (EntityKind.CREDIT_CARD, EntityKind.INVOICE, EntityKind.BILL)


class ImportService:
    """
    Orchestrates bulk imports against a backend.

    The backend serves both as the reader (duplicate index) and the
    writer (record creation).
    """

    def __init__(
        self,
        backend: FinanceBackendInterface,
        settings: Optional[ImportSettings] = None,
        audit: Optional[AuditLogger] = None,
    ):
        self._backend = backend
        self._settings = settings or get_settings().imports
        self._audit = audit or AuditLogger()
        self._validator = ImportRowValidator(self._settings, self._audit)

    @property
    def audit(self) -> AuditLogger:
        return self._audit

    # =========================================================================
    # SINGLE SHEET
    # =========================================================================

    def preview(self, kind: EntityKind, rows: list[dict[str, Any]]) -> ValidationReport:
        """Validate rows without writing anything."""
        return self._validator.validate(kind, rows)

    async def import_items(
        self,
        kind: EntityKind,
        items: list[AnyImportItem],
        strategy: DuplicateStrategy = DuplicateStrategy.SKIP,
        lookup: Optional[ExistingRecordsLookup] = None,
    ) -> ImportResult:
        """Reconcile already validated items."""
        lookup = lookup or await ExistingRecordsLookup.load(self._backend)
        return await reconcile(
            items, strategy, lookup, self._backend, kind=kind, audit=self._audit,
        )

    async def import_rows(
        self,
        kind: EntityKind,
        rows: list[dict[str, Any]],
        strategy: DuplicateStrategy = DuplicateStrategy.SKIP,
    ) -> ImportResult:
        """
        Validate then reconcile one sheet.

        Raises:
            StructureValidationError: The sheet was rejected as a whole
            ImportValidationError: One or more rows are invalid (see .errors)
        """
        report = self.preview(kind, rows)
        ensure_importable(report)
        return await self.import_items(kind, report.items, strategy)

    async def import_file(
        self,
        source: Source,
        filename: str,
        kind: EntityKind,
        strategy: DuplicateStrategy = DuplicateStrategy.SKIP,
        size_bytes: Optional[int] = None,
    ) -> ImportResult:
        """
        Import the first sheet of a CSV/XLS/XLSX file.

        Raises:
            FileValidationError: Bad extension, too large, or unreadable
            StructureValidationError, ImportValidationError: See import_rows
        """
        size = size_bytes if size_bytes is not None else source_size(source)
        validate_file(filename, size, self._settings)
        rows = parse_import_file(source, filename)
        return await self.import_rows(kind, rows, strategy)

    # =========================================================================
    # UNIFIED WORKBOOK
    # =========================================================================

    async def import_unified(
        self,
        sheets: dict[EntityKind, list[dict[str, Any]]],
        strategy: DuplicateStrategy = DuplicateStrategy.SKIP,
    ) -> UnifiedImportResult:
        """
        Import credit cards, then invoices, then bills.

        Empty or missing sheets are skipped and have no result. Any invalid
        sheet blocks the whole workbook before anything is created.
        """
        reports = {
            kind: self.preview(kind, rows)
            for kind, rows in sheets.items()
            if rows
        }
        for report in reports.values():
            ensure_importable(report)

        lookup = await ExistingRecordsLookup.load(self._backend)

        results: dict[EntityKind, ImportResult] = {}
        for kind in UNIFIED_ORDER:
            if kind in reports:
                results[kind] = await self.import_items(
                    kind, reports[kind].items, strategy, lookup,
                )

        unified = UnifiedImportResult.from_results(
            credit_cards=results.get(EntityKind.CREDIT_CARD),
            invoices=results.get(EntityKind.INVOICE),
            bills=results.get(EntityKind.BILL),
        )
        logger.info(
            "unified_import_completed",
            correlation_id=str(self._audit.correlation_id),
            **unified.summary.model_dump(),
        )
        return unified

    async def import_workbook(
        self,
        source: Source,
        filename: str,
        strategy: DuplicateStrategy = DuplicateStrategy.SKIP,
        size_bytes: Optional[int] = None,
    ) -> UnifiedImportResult:
        """Parse a Contas / Cartões de Crédito / Faturas workbook and import it."""
        size = size_bytes if size_bytes is not None else source_size(source)
        validate_file(filename, size, self._settings)
        sheets = parse_unified_workbook(source, filename)
        return await self.import_unified(sheets, strategy)


def ensure_importable(report: ValidationReport) -> None:
    """
    Raise unless the report is ALL_VALID.

    Raises:
        StructureValidationError: Whole sheet rejected
        ImportValidationError: Row errors; .errors holds each 'Linha N: ...'
    """
    if report.state == ImportValidationState.STRUCTURE_INVALID:
        raise StructureValidationError(
            report.structure_error or "Estrutura do arquivo inválida",
            errors=report.error_messages,
        )
    if not report.can_import:
        raise ImportValidationError(
            f"{len(report.errors)} linha(s) com erro na planilha de {report.entity.value}",
            errors=report.error_messages,
        )


def source_size(source: Source) -> int:
    """Size in bytes of a path or a seekable binary buffer."""
    if isinstance(source, (str, Path)):
        return os.path.getsize(source)
    position = source.tell()
    source.seek(0, os.SEEK_END)
    size = source.tell()
    source.seek(position)
    return size

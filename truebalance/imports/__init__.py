"""
Bulk import package.

File parsing, row validation and duplicate reconciliation for bills,
invoices and credit cards.
"""

from truebalance.imports.exporter import export_workbook
from truebalance.imports.parser import (
    parse_import_file,
    parse_unified_workbook,
    validate_file,
)
from truebalance.imports.reconciler import ExistingRecordsLookup, key_for, reconcile
from truebalance.imports.service import ImportService, ensure_importable
from truebalance.imports.validator import ImportRowValidator

__all__ = [
    "ExistingRecordsLookup",
    "ImportRowValidator",
    "ImportService",
    "ensure_importable",
    "export_workbook",
    "key_for",
    "parse_import_file",
    "parse_unified_workbook",
    "reconcile",
    "validate_file",
]

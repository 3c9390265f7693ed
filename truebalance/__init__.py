"""
TrueBalance - Financial Aggregation & Reconciliation Core

The computational core behind the TrueBalance personal finance client:
- Monthly and per-category expense summaries for dashboards and reports
- Bulk spreadsheet import with row validation and duplicate reconciliation

DESIGN PRINCIPLES:
1. Aggregation is total: malformed records are skipped, never raised
2. Validation reports every bad row, it never silently drops one
3. Reconciliation accounts for every item exactly once
4. Backends are collaborators behind an interface
"""

__version__ = "1.0.0"
__author__ = "TrueBalance Team"

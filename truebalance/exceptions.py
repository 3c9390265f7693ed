"""
Exception hierarchy for the TrueBalance core.

Parse helpers return sentinels by default and only raise ParseError when
called in strict mode. Import validation failures carry the line number and
field so callers can render them next to the offending row.
"""

from typing import Any, Optional


class TrueBalanceError(Exception):
    """Base exception for the core."""
    pass


class ParseError(TrueBalanceError, ValueError):
    """A currency, date or boolean value could not be parsed."""

    def __init__(self, message: str, value: Any = None):
        super().__init__(message)
        self.value = value


# =============================================================================
# IMPORT VALIDATION
# =============================================================================

class ImportValidationError(TrueBalanceError):
    """
    Base exception for import validation failures.

    When raised for a whole sheet, `errors` holds every row message.
    """

    def __init__(self, message: str, errors: Optional[list[str]] = None):
        super().__init__(message)
        self.errors = errors or []


class FileValidationError(ImportValidationError):
    """Uploaded file has an unsupported type, is too large, or is unreadable."""
    pass


class StructureValidationError(ImportValidationError):
    """
    Parsed sheet failed the whole-batch structural gate.

    Raised for empty sheets, missing required headers and row-count overflow.
    Nothing from the batch may be imported.
    """
    pass


class RowValidationError(ImportValidationError):
    """A single spreadsheet row failed field validation."""

    def __init__(
        self,
        line_number: int,
        message: str,
        field: str = "general",
        value: Optional[Any] = None,
    ):
        super().__init__(f"Linha {line_number}: {message}")
        self.line_number = line_number
        self.field = field
        self.value = value
        self.detail = message


# =============================================================================
# BACKEND COLLABORATORS
# =============================================================================

class BackendError(TrueBalanceError):
    """Base exception for backend collaborator operations."""
    pass


class NotFoundError(BackendError):
    """Referenced entity does not exist in the backend."""
    pass


class BackendUnavailableError(BackendError):
    """Backend could not be reached or timed out."""
    pass


class BackendRejectedError(BackendError):
    """Backend refused the request (validation or business rule)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code

"""
Money/Date Normalizers

Parse locale-formatted (pt-BR) currency strings, dates, reference months and
booleans into canonical Python values. Used by the aggregators (backend
payloads) and by the import validator (spreadsheet cells).

DESIGN DECISION: Parsers degrade to sentinels instead of raising:
- currency  -> float('nan')
- dates     -> None
- booleans  -> False
The caller decides whether a sentinel is an error (import rows) or a record
to skip (aggregation). parse_currency(strict=True) raises ParseError for
callers that prefer exceptions.
"""

import math
import re
from datetime import date, datetime
from typing import Any, Optional, Union

from truebalance.exceptions import ParseError


MONTH_NAMES_PT = [
    "janeiro", "fevereiro", "março", "abril", "maio", "junho",
    "julho", "agosto", "setembro", "outubro", "novembro", "dezembro",
]

TRUTHY_VALUES = frozenset({"true", "sim", "s", "1", "yes", "y"})

_BR_DATE_RE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")
_BR_MONTH_RE = re.compile(r"^(\d{1,2})/(\d{4})$")
_ISO_MONTH_RE = re.compile(r"^(\d{4})-(\d{1,2})$")
_NUMBER_RE = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)$")
_INTEGER_RE = re.compile(r"^[+-]?\d+(\.0+)?$")
_CURRENCY_SYMBOL_RE = re.compile(r"R?\$")
_WHITESPACE_RE = re.compile(r"\s+")


# =============================================================================
# CURRENCY
# =============================================================================

def parse_currency(raw: Union[str, int, float, None], strict: bool = False) -> float:
    """
    Parse a pt-BR currency value into a float.

    "R$ 1.234,56" -> 1234.56, "1234.5" -> 1234.5, 42 -> 42.0.
    The comma becomes the decimal point and every dot except the last one
    is treated as a thousands separator.

    Returns NaN for empty or non-numeric input, or raises ParseError
    when strict is True.
    """
    if isinstance(raw, bool):
        return _currency_failure(raw, strict)

    if isinstance(raw, (int, float)):
        return float(raw)

    if not isinstance(raw, str) or not raw.strip():
        return _currency_failure(raw, strict)

    cleaned = _CURRENCY_SYMBOL_RE.sub("", raw)
    cleaned = _WHITESPACE_RE.sub("", cleaned)
    cleaned = cleaned.replace(",", ".", 1)

    parts = cleaned.split(".")
    if len(parts) > 2:
        cleaned = "".join(parts[:-1]) + "." + parts[-1]

    if not _NUMBER_RE.match(cleaned):
        return _currency_failure(raw, strict)

    return float(cleaned)


def _currency_failure(raw: Any, strict: bool) -> float:
    if strict:
        raise ParseError(f"Invalid currency value: {raw!r}", value=raw)
    return math.nan


def format_currency(value: float) -> str:
    """Format a value as BRL, e.g. 1234.5 -> "R$ 1.234,50"."""
    sign = "-" if value < 0 else ""
    us = f"{abs(value):,.2f}"
    br = us.replace(",", "_").replace(".", ",").replace("_", ".")
    return f"{sign}R$ {br}"


def is_finite_number(value: Any) -> bool:
    """True for int/float values that are neither NaN nor infinite."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


# =============================================================================
# DATES
# =============================================================================

def parse_datetime(raw: Union[str, date, datetime, None]) -> Optional[datetime]:
    """
    Parse dd/MM/yyyy or an ISO-8601 string into a naive datetime.

    Timezone offsets are dropped; the wall-clock date is kept.
    Returns None when nothing matches.
    """
    if isinstance(raw, datetime):
        return raw.replace(tzinfo=None)
    if isinstance(raw, date):
        return datetime(raw.year, raw.month, raw.day)
    if not isinstance(raw, str):
        return None

    text = raw.strip()
    if not text:
        return None

    match = _BR_DATE_RE.match(text)
    if match:
        day, month, year = (int(g) for g in match.groups())
        try:
            return datetime(year, month, day)
        except ValueError:
            return None

    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text).replace(tzinfo=None)
    except ValueError:
        return None


def parse_local_date(raw: Union[str, date, datetime, None]) -> Optional[str]:
    """
    Parse dd/MM/yyyy or an ISO string into an ISO datetime string.

    "15/01/2024" -> "2024-01-15T00:00:00". Returns None (never raises) so
    callers can attach a line-specific error.
    """
    parsed = parse_datetime(raw)
    return parsed.isoformat() if parsed else None


def parse_reference_month(raw: Optional[str]) -> Optional[str]:
    """
    Parse MM/yyyy or yyyy-MM into the first day of that month.

    "03/2024" -> "2024-03-01", "2024-3" -> "2024-03-01".
    """
    if not isinstance(raw, str) or not raw.strip():
        return None

    text = raw.strip()
    match = _BR_MONTH_RE.match(text)
    if match:
        month, year = int(match.group(1)), int(match.group(2))
    else:
        match = _ISO_MONTH_RE.match(text)
        if not match:
            return None
        year, month = int(match.group(1)), int(match.group(2))

    if not 1 <= month <= 12:
        return None
    return f"{year:04d}-{month:02d}-01"


def parse_year_month(raw: Optional[str]) -> Optional[tuple[int, int]]:
    """
    Split a backend reference month ("YYYY-MM-DD" or "YYYY-MM") into
    (year, month). Returns None for malformed values.
    """
    if not isinstance(raw, str):
        return None
    parts = raw.strip().split("-")
    if len(parts) < 2:
        return None
    try:
        year, month = int(parts[0]), int(parts[1])
    except ValueError:
        return None
    if not 1 <= month <= 12:
        return None
    return year, month


def month_key(year: int, month: int) -> str:
    """Bucket key for a calendar month: "YYYY-MM"."""
    return f"{year:04d}-{month:02d}"


def month_name(month: int) -> str:
    """pt-BR month name for 1..12."""
    return MONTH_NAMES_PT[month - 1]


# =============================================================================
# SCALARS
# =============================================================================

def parse_boolean(raw: Any) -> bool:
    """
    Case-insensitive truthy check: true, sim, s, 1, yes, y.

    Anything else (including None) is False.
    """
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, (int, float)):
        return raw != 0
    if not isinstance(raw, str):
        return False
    return raw.strip().lower() in TRUTHY_VALUES


def parse_int(raw: Any) -> Optional[int]:
    """
    Parse an integer cell. Spreadsheet readers may deliver "12.0".

    Returns None for blanks, fractions and non-numeric text.
    """
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        return int(raw) if math.isfinite(raw) and raw.is_integer() else None
    if not isinstance(raw, str):
        return None

    text = raw.strip()
    if not _INTEGER_RE.match(text):
        return None
    return int(text.split(".")[0])


def normalize_name(name: Optional[str]) -> str:
    """Trim, lowercase and collapse internal whitespace."""
    if not name:
        return ""
    return _WHITESPACE_RE.sub(" ", name.strip().lower())

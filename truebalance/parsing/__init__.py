"""Value parsing package."""

from truebalance.parsing.normalizers import (
    MONTH_NAMES_PT,
    format_currency,
    is_finite_number,
    month_key,
    month_name,
    normalize_name,
    parse_boolean,
    parse_currency,
    parse_datetime,
    parse_int,
    parse_local_date,
    parse_reference_month,
    parse_year_month,
)

__all__ = [
    "MONTH_NAMES_PT",
    "format_currency",
    "is_finite_number",
    "month_key",
    "month_name",
    "normalize_name",
    "parse_boolean",
    "parse_currency",
    "parse_datetime",
    "parse_int",
    "parse_local_date",
    "parse_reference_month",
    "parse_year_month",
]

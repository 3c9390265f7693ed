"""Configuration package."""

from truebalance.config.settings import (
    AppSettings,
    BackendSettings,
    ImportSettings,
    ReportSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "BackendSettings",
    "ImportSettings",
    "ReportSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]

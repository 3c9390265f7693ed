"""
Configuration Management for TrueBalance

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here, and every entry point
(aggregators, import services, backend factory) accepts an explicit settings
object. Process-wide switches such as demo mode live here instead of in
module-level globals; get_settings() is only the fallback.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class BackendSettings(BaseSettings):
    """REST backend collaborator configuration."""

    model_config = SettingsConfigDict(
        env_prefix="TRUEBALANCE_API_",
        extra="ignore"
    )

    base_url: str = Field(
        default="http://localhost:8080",
        description="Base URL of the TrueBalance REST API"
    )
    timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="HTTP timeout per request"
    )
    max_retries: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts for read calls on transport errors"
    )
    retry_min_wait_seconds: float = Field(default=2.0, ge=0)
    retry_max_wait_seconds: float = Field(default=10.0, ge=0)
    page_size: int = Field(
        default=1000,
        ge=1,
        le=5000,
        description="Page size used when listing bills"
    )
    demo_mode: bool = Field(
        default=False,
        description="Serve sample data from memory instead of calling the API"
    )

    @field_validator('base_url')
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Endpoints are joined as base_url + '/path'."""
        return v.rstrip("/")


class ImportSettings(BaseSettings):
    """Bulk import limits and field rules."""

    model_config = SettingsConfigDict(
        env_prefix="TRUEBALANCE_IMPORT_",
        extra="ignore"
    )

    max_rows: int = Field(
        default=1000,
        ge=1,
        description="Hard cap on data rows per sheet"
    )
    max_file_size_mb: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Maximum upload file size in MB"
    )
    supported_formats: str = Field(
        default="csv,xlsx,xls",
        description="Comma-separated list of accepted file extensions"
    )
    name_min_length: int = Field(default=3, ge=1)
    name_max_length: int = Field(default=100, ge=1)
    description_max_length: int = Field(default=500, ge=1)
    max_installments: int = Field(
        default=120,
        ge=1,
        description="Upper bound for a bill's number of installments"
    )

    @property
    def supported_formats_list(self) -> list[str]:
        """Get supported formats as a list."""
        return [fmt.strip().lower() for fmt in self.supported_formats.split(",")]

    @property
    def max_file_size_bytes(self) -> int:
        """Get max file size in bytes."""
        return self.max_file_size_mb * 1024 * 1024


class ReportSettings(BaseSettings):
    """Dashboard and report aggregation settings."""

    model_config = SettingsConfigDict(
        env_prefix="TRUEBALANCE_REPORTS_",
        extra="ignore"
    )

    default_bill_category: str = Field(
        default="Contas",
        description="Category assigned to bills without one"
    )
    credit_card_category: str = Field(
        default="Cartão de Crédito",
        description="Category assigned to every invoice"
    )
    comparison_window_months: int = Field(
        default=6,
        ge=1,
        le=24,
        description="Months per side in the period comparison"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Minimum level for structured logs"
    )


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def backend(self) -> BackendSettings:
        return BackendSettings()

    @property
    def imports(self) -> ImportSettings:
        return ImportSettings()

    @property
    def reports(self) -> ReportSettings:
        return ReportSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, with an
    "<name>_error" entry for each section that failed to load.
    """
    results = {}
    settings = get_settings()

    for name in ("backend", "imports", "reports", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except ValueError as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results

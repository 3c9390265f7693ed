"""Services package."""

from truebalance.services.backend import (
    FinanceBackendInterface,
    FinanceReaderInterface,
    FinanceWriterInterface,
    HttpFinanceBackend,
    InMemoryFinanceBackend,
    create_backend,
)

__all__ = [
    # Interfaces
    "FinanceBackendInterface",
    "FinanceReaderInterface",
    "FinanceWriterInterface",
    # Implementations
    "HttpFinanceBackend",
    "InMemoryFinanceBackend",
    "create_backend",
]

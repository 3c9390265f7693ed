"""
Backend collaborators package.

Provides the reader/writer interfaces and their REST and in-memory
implementations.
"""

from typing import Optional

from truebalance.config import BackendSettings
from truebalance.services.backend.http_client import HttpFinanceBackend
from truebalance.services.backend.interface import (
    FinanceBackendInterface,
    FinanceReaderInterface,
    FinanceWriterInterface,
)
from truebalance.services.backend.memory import InMemoryFinanceBackend


def create_backend(settings: Optional[BackendSettings] = None) -> FinanceBackendInterface:
    """
    Backend for the configured mode.

    Demo mode serves the sample dataset from memory; otherwise the REST API
    at settings.base_url is used.
    """
    settings = settings or BackendSettings()
    if settings.demo_mode:
        return InMemoryFinanceBackend.with_demo_data()
    return HttpFinanceBackend(settings)


__all__ = [
    "FinanceBackendInterface",
    "FinanceReaderInterface",
    "FinanceWriterInterface",
    "HttpFinanceBackend",
    "InMemoryFinanceBackend",
    "create_backend",
]

"""
Storage Services Package

Provides the abstract audit storage interface and an in-memory implementation.
"""

from quantum_budget.services.storage.interface import (
    AuditStorageInterface,
    StorageError,
)
from quantum_budget.services.storage.memory import InMemoryAuditStorage

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    # Exceptions
    "StorageError",
    # Implementations
    "InMemoryAuditStorage",
]

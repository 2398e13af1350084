"""Services package."""

from quantum_budget.services.storage import (
    AuditStorageInterface,
    InMemoryAuditStorage,
    StorageError,
)
from quantum_budget.services.worker import (
    ChannelBusyError,
    CoreUnavailableError,
    CouplingWorker,
    GraphComputationError,
    WorkerError,
    compute_graph,
)

__all__ = [
    # Storage services
    "AuditStorageInterface",
    "InMemoryAuditStorage",
    "StorageError",
    # Worker
    "ChannelBusyError",
    "CoreUnavailableError",
    "CouplingWorker",
    "GraphComputationError",
    "WorkerError",
    "compute_graph",
]

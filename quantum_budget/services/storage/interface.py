"""
Abstract Storage Interface

DESIGN DECISION: Audit persistence sits behind an abstract interface.
The core never decides where audit events end up. This allows us to:
1. Keep events in memory for tests and short-lived sessions
2. Plug in a real backend later without touching the flows
"""

from abc import ABC, abstractmethod
from uuid import UUID

from quantum_budget.models.audit import AuditEvent, AuditEventType


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Args:
            event: The audit event to log

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """
        Get all events for a correlation ID (e.g., one refresh cycle).

        Returns:
            List of related events in chronological order
        """
        pass

    @abstractmethod
    async def get_events_by_type(
        self,
        event_type: AuditEventType,
    ) -> list[AuditEvent]:
        """
        Get all events of one type, in chronological order.
        """
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass

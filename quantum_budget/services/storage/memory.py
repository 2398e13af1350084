"""
In-Memory Audit Storage

Keeps the most recent audit events for the lifetime of the process.
Used by default and in tests.

The log is a sliding window: once `max_events` is reached the oldest
event is evicted for each new one, so a long-running monitor loop never
fills it up.
"""

from collections import deque
from typing import Optional
from uuid import UUID

from quantum_budget.models.audit import AuditEvent, AuditEventType
from quantum_budget.services.storage.interface import AuditStorageInterface


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only audit log held in memory, bounded to the newest events."""

    def __init__(self, max_events: Optional[int] = 10000):
        self._events: deque[AuditEvent] = deque(maxlen=max_events)

    def __len__(self) -> int:
        return len(self._events)

    @property
    def max_events(self) -> Optional[int]:
        return self._events.maxlen

    async def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        return [e for e in self._events if e.correlation_id == correlation_id]

    async def get_events_by_type(
        self,
        event_type: AuditEventType,
    ) -> list[AuditEvent]:
        return [e for e in self._events if e.event_type == event_type]

    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        events = list(self._events)
        return list(reversed(events[-limit:])) if limit > 0 else []

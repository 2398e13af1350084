"""Tests for the audit logger and in-memory audit storage."""

import asyncio

from quantum_budget.audit import AuditLogger, create_correlation_id
from quantum_budget.models.audit import AuditEvent, AuditEventType
from quantum_budget.services.storage import InMemoryAuditStorage, StorageError


def _event(event_type=AuditEventType.GRAPH_COMPUTED, correlation_id=None) -> AuditEvent:
    return AuditEvent(
        event_type=event_type,
        description="test event",
        correlation_id=correlation_id,
    )


class UnavailableStorage(InMemoryAuditStorage):
    """Backend whose writes always fail."""

    async def append_event(self, event: AuditEvent) -> bool:
        raise StorageError("backend offline")


class TestInMemoryAuditStorage:
    """Tests for InMemoryAuditStorage."""

    def test_queries(self):
        """Events can be looked up by correlation ID, type and recency."""
        storage = InMemoryAuditStorage()
        correlation_id = create_correlation_id()

        async def scenario():
            await storage.append_event(_event(correlation_id=correlation_id))
            await storage.append_event(_event(AuditEventType.FORECAST_GENERATED))
            await storage.append_event(_event(AuditEventType.FORECAST_GENERATED, correlation_id))
            return (
                await storage.get_events_by_correlation_id(correlation_id),
                await storage.get_events_by_type(AuditEventType.FORECAST_GENERATED),
                await storage.get_recent_events(limit=2),
            )

        related, forecasts, recent = asyncio.run(scenario())
        assert len(storage) == 3
        assert len(related) == 2
        assert len(forecasts) == 2
        assert [e.event_type for e in recent] == [
            AuditEventType.FORECAST_GENERATED,
            AuditEventType.FORECAST_GENERATED,
        ]
        assert recent[0].correlation_id == correlation_id

    def test_full_log_evicts_oldest(self):
        """A bounded log keeps accepting events and keeps the newest ones."""
        storage = InMemoryAuditStorage(max_events=3)
        events = [_event() for _ in range(4)]

        async def scenario():
            results = [await storage.append_event(event) for event in events]
            return results, await storage.get_recent_events()

        results, recent = asyncio.run(scenario())
        assert results == [True] * 4
        assert len(storage) == 3
        assert storage.max_events == 3
        assert recent[0].event_id == events[-1].event_id
        assert events[0].event_id not in {e.event_id for e in recent}

    def test_logger_keeps_writing_past_capacity(self):
        """Audit logging never wedges once the window is full."""
        storage = InMemoryAuditStorage(max_events=2)
        logger = AuditLogger(storage)

        async def scenario():
            return [await logger.log(_event()) for _ in range(5)]

        assert asyncio.run(scenario()) == [True] * 5
        assert len(storage) == 2


class TestAuditLogger:
    """Tests for AuditLogger."""

    def test_persists_to_empty_storage(self):
        """An empty storage backend still receives events."""
        storage = InMemoryAuditStorage()
        logger = AuditLogger(storage)

        assert asyncio.run(logger.log(_event())) is True
        assert len(storage) == 1

    def test_storage_failure_is_not_raised(self):
        """A failing backend makes log() return False instead of raising."""
        logger = AuditLogger(UnavailableStorage())

        assert asyncio.run(logger.log(_event())) is False

    def test_local_only(self):
        """Without storage, logging always succeeds."""
        assert asyncio.run(AuditLogger().log(_event())) is True

    def test_helpers_build_typed_events(self):
        """Helper methods write the matching event type."""
        storage = InMemoryAuditStorage()
        logger = AuditLogger(storage)
        correlation_id = create_correlation_id()

        async def scenario():
            await logger.log_core_unavailable("worker stopped", correlation_id)
            await logger.log_response_discarded(sequence=1, last_applied=2)
            await logger.log_error("RuntimeError", "boom", details={"tick": 1})
            return await storage.get_recent_events()

        events = asyncio.run(scenario())
        assert [e.event_type for e in events] == [
            AuditEventType.SYSTEM_ERROR,
            AuditEventType.RESPONSE_DISCARDED,
            AuditEventType.CORE_UNAVAILABLE,
        ]
        assert events[2].error_message == "worker stopped"
        assert events[1].sequence == 1

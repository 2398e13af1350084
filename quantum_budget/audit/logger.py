"""
Audit Logger

DESIGN DECISION: Every significant orchestrator action is logged.
This provides:
1. Traceability of refreshes, forecasts and alerts
2. Debugging capability for the worker boundary
3. A history the outer application can show the user

The audit logger:
- Is async to not block main flow
- Gracefully handles failures (doesn't crash the app if logging fails)
- Supports correlation IDs to trace related events
"""

from typing import Optional
from uuid import UUID, uuid4

import structlog

from quantum_budget.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from quantum_budget.services.storage import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. An audit storage backend, when one is configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger()

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage is not None:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_graph_requested(
        self,
        sequence: int,
        income_count: int,
        expense_count: int,
        correlation_id: UUID,
    ) -> None:
        """Log a graph request sent to the worker."""
        await self.log(AuditEventBuilder.graph_requested(
            sequence=sequence,
            income_count=income_count,
            expense_count=expense_count,
            correlation_id=correlation_id,
        ))

    async def log_graph_request_throttled(
        self,
        elapsed_seconds: float,
        correlation_id: UUID,
    ) -> None:
        """Log a request dropped by the redraw throttle."""
        await self.log(AuditEventBuilder.graph_request_throttled(
            elapsed_seconds=elapsed_seconds,
            correlation_id=correlation_id,
        ))

    async def log_graph_computed(
        self,
        sequence: int,
        node_count: int,
        edge_count: int,
        entropy: float,
    ) -> None:
        """Log an applied worker response."""
        await self.log(AuditEventBuilder.graph_computed(
            sequence=sequence,
            node_count=node_count,
            edge_count=edge_count,
            entropy=entropy,
        ))

    async def log_response_discarded(
        self,
        sequence: int,
        last_applied: int,
    ) -> None:
        """Log a stale worker response."""
        await self.log(AuditEventBuilder.response_discarded(
            sequence=sequence,
            last_applied=last_applied,
        ))

    async def log_core_unavailable(
        self,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log that the worker could not be reached."""
        await self.log(AuditEventBuilder.core_unavailable(
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    async def log_entropy_observed(
        self,
        entropy: float,
        history_length: int,
        correlation_id: UUID,
    ) -> None:
        """Log a monitoring tick."""
        await self.log(AuditEventBuilder.entropy_observed(
            entropy=entropy,
            history_length=history_length,
            correlation_id=correlation_id,
        ))

    async def log_collapse_detected(
        self,
        entropy: float,
        history_length: int,
        correlation_id: UUID,
    ) -> None:
        """Log a collapse flag."""
        await self.log(AuditEventBuilder.collapse_detected(
            entropy=entropy,
            history_length=history_length,
            correlation_id=correlation_id,
        ))

    async def log_forecast_generated(
        self,
        predicted_income: float,
        predicted_expense: float,
        mode: str,
        suggestion: str,
        correlation_id: UUID,
    ) -> None:
        """Log a forecast."""
        await self.log(AuditEventBuilder.forecast_generated(
            predicted_income=predicted_income,
            predicted_expense=predicted_expense,
            mode=mode,
            suggestion=suggestion,
            correlation_id=correlation_id,
        ))

    async def log_budget_warning(
        self,
        issues: list[dict],
        correlation_id: UUID,
    ) -> None:
        """Log budget validation warnings."""
        await self.log(AuditEventBuilder.budget_warning(
            issues=issues,
            correlation_id=correlation_id,
        ))

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        await self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new cycle (e.g., one refresh or forecast).
    Pass it through all subsequent operations.
    """
    return uuid4()

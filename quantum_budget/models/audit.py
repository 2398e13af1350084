"""
Audit Models for Quantum Budget

Every significant orchestrator action is logged for audit purposes.
This provides:
1. Traceability of every refresh, forecast and alert
2. Debugging information when the worker misbehaves
3. A record of which responses were discarded as stale

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

import json
from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """
    Types of events we audit.
    """
    # Coupling network
    GRAPH_REQUESTED = "graph_requested"
    GRAPH_REQUEST_THROTTLED = "graph_request_throttled"
    GRAPH_COMPUTED = "graph_computed"
    RESPONSE_DISCARDED = "response_discarded"
    CORE_UNAVAILABLE = "core_unavailable"

    # Monitoring
    ENTROPY_OBSERVED = "entropy_observed"
    COLLAPSE_DETECTED = "collapse_detected"

    # Forecasting and budget checks
    FORECAST_GENERATED = "forecast_generated"
    BUDGET_WARNING = "budget_warning"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one refresh cycle)"
    )
    sequence: Optional[int] = Field(
        default=None,
        ge=0,
        description="Worker request sequence number, if any"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "sequence": self.sequence,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }

    def to_row(self) -> list:
        """
        Flatten to a row for tabular storage.

        Columns: [event_id, timestamp, event_type, severity,
        correlation_id, sequence, description, details_json, error_message]
        """
        return [
            str(self.event_id),
            self.timestamp.isoformat(),
            self.event_type.value,
            self.severity.value,
            str(self.correlation_id) if self.correlation_id else "",
            "" if self.sequence is None else str(self.sequence),
            self.description,
            json.dumps(self.details) if self.details else "",
            self.error_message or "",
        ]


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.graph_computed(sequence, 12, 20, 0.41, cid)
        event = AuditEventBuilder.collapse_detected(0.9, 20, cid)
    """

    @staticmethod
    def graph_requested(
        sequence: int,
        income_count: int,
        expense_count: int,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.GRAPH_REQUESTED,
            severity=AuditSeverity.DEBUG,
            correlation_id=correlation_id,
            sequence=sequence,
            description=f"Graph requested for {income_count + expense_count} records",
            details={
                "income_count": income_count,
                "expense_count": expense_count,
            },
        )

    @staticmethod
    def graph_request_throttled(
        elapsed_seconds: float,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.GRAPH_REQUEST_THROTTLED,
            severity=AuditSeverity.DEBUG,
            correlation_id=correlation_id,
            description="Graph request dropped by redraw throttle",
            details={
                "elapsed_seconds": round(elapsed_seconds, 4),
            },
        )

    @staticmethod
    def graph_computed(
        sequence: int,
        node_count: int,
        edge_count: int,
        entropy: float,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.GRAPH_COMPUTED,
            correlation_id=correlation_id,
            sequence=sequence,
            description=f"Graph computed: {node_count} nodes, {edge_count} edges",
            details={
                "node_count": node_count,
                "edge_count": edge_count,
                "entropy": entropy,
            },
        )

    @staticmethod
    def response_discarded(
        sequence: int,
        last_applied: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RESPONSE_DISCARDED,
            severity=AuditSeverity.DEBUG,
            sequence=sequence,
            description=f"Stale response {sequence} discarded (applied {last_applied})",
            details={
                "last_applied": last_applied,
            },
        )

    @staticmethod
    def core_unavailable(
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CORE_UNAVAILABLE,
            severity=AuditSeverity.WARNING,
            correlation_id=correlation_id,
            description="Coupling core unavailable, no metrics this cycle",
            error_message=error_message,
        )

    @staticmethod
    def entropy_observed(
        entropy: float,
        history_length: int,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTROPY_OBSERVED,
            severity=AuditSeverity.DEBUG,
            correlation_id=correlation_id,
            description=f"Entropy sample {entropy:.3f} observed",
            details={
                "entropy": entropy,
                "history_length": history_length,
            },
        )

    @staticmethod
    def collapse_detected(
        entropy: float,
        history_length: int,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.COLLAPSE_DETECTED,
            severity=AuditSeverity.WARNING,
            correlation_id=correlation_id,
            description="Entropy series is approaching collapse",
            details={
                "entropy": entropy,
                "history_length": history_length,
            },
        )

    @staticmethod
    def forecast_generated(
        predicted_income: float,
        predicted_expense: float,
        mode: str,
        suggestion: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.FORECAST_GENERATED,
            correlation_id=correlation_id,
            description=f"Forecast generated ({mode}): {suggestion}",
            details={
                "predicted_income": predicted_income,
                "predicted_expense": predicted_expense,
                "mode": mode,
                "suggestion": suggestion,
            },
        )

    @staticmethod
    def budget_warning(
        issues: list[dict],
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BUDGET_WARNING,
            severity=AuditSeverity.WARNING,
            correlation_id=correlation_id,
            description=f"Budget check raised {len(issues)} warnings",
            details={
                "issues": issues,
            },
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )

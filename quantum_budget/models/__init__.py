"""
Data Models Package

This package contains all Pydantic models used in Quantum Budget.
All data flowing through the system must conform to these schemas.
"""

from quantum_budget.models.graph import (
    CouplingState,
    Edge,
    Graph,
    GraphFailure,
    GraphMetrics,
    GraphRequest,
    GraphResult,
    Node,
    Position,
    WeightedEdge,
)
from quantum_budget.models.finance import (
    BudgetSuggestion,
    ExpenseRecord,
    ForecastRequest,
    ForecastResult,
    IncomeRecord,
    PeriodAggregate,
    RecordSnapshot,
    StabilityReport,
    ValidationIssue,
    ValidationResult,
)
from quantum_budget.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Network models
    "CouplingState",
    "Edge",
    "Graph",
    "GraphFailure",
    "GraphMetrics",
    "GraphRequest",
    "GraphResult",
    "Node",
    "Position",
    "WeightedEdge",
    # Finance models
    "BudgetSuggestion",
    "ExpenseRecord",
    "ForecastRequest",
    "ForecastResult",
    "IncomeRecord",
    "PeriodAggregate",
    "RecordSnapshot",
    "StabilityReport",
    "ValidationIssue",
    "ValidationResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]

"""
Tests for Quantum Budget

Test strategy:
1. Unit tests for individual components (models, builders, analytics)
2. Integration tests for flows (with in-memory audit storage)
3. Seeded random sources wherever randomness is involved
"""

import pytest
from datetime import date
from uuid import uuid4

from quantum_budget.models.graph import (
    Edge,
    Graph,
    GraphRequest,
    Node,
    Position,
)
from quantum_budget.models.finance import (
    BudgetSuggestion,
    ExpenseRecord,
    ForecastRequest,
    IncomeRecord,
    PeriodAggregate,
    RecordSnapshot,
    ValidationIssue,
    ValidationResult,
)
from quantum_budget.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)


def _node(index: int) -> Node:
    return Node(index=index, position=Position(x=0.0, y=0.0, z=1.0), label=f"v{index + 1}")


class TestGraphModels:
    """Tests for network models."""

    def test_edge_creation(self):
        """Test Edge model creation."""
        edge = Edge(source=1, target=3, base_strength=0.5)
        assert edge.span == 2
        assert edge.key == (1, 3)

    def test_edge_rejects_self_loop(self):
        """Test that an edge cannot join a node to itself."""
        with pytest.raises(ValueError, match="lower than edge target"):
            Edge(source=2, target=2, base_strength=0.5)

    def test_edge_rejects_reversed_endpoints(self):
        """Test that source must be the lower index."""
        with pytest.raises(ValueError):
            Edge(source=3, target=1, base_strength=0.5)

    def test_edge_base_strength_bounds(self):
        """Test base strength must be between 0 and 1."""
        with pytest.raises(ValueError):
            Edge(source=0, target=1, base_strength=1.5)

    def test_edge_is_immutable(self):
        """Test that edges cannot be mutated after construction."""
        edge = Edge(source=0, target=1, base_strength=0.5)
        with pytest.raises(ValueError):
            edge.target = 2

    def test_graph_rejects_edge_outside_node_range(self):
        """Test that edges must reference existing nodes."""
        with pytest.raises(ValueError, match="outside node range"):
            Graph(
                nodes=(_node(0), _node(1)),
                edges=(Edge(source=0, target=2, base_strength=0.5),),
            )

    def test_graph_counts(self):
        """Test node and edge counts."""
        graph = Graph(
            nodes=(_node(0), _node(1), _node(2)),
            edges=(Edge(source=0, target=1, base_strength=0.5),),
        )
        assert graph.node_count == 3
        assert graph.edge_count == 1

    def test_graph_request_rejects_negative_counts(self):
        """Test that record counts cannot be negative."""
        with pytest.raises(ValueError):
            GraphRequest(sequence=1, income_count=-1, expense_count=0, timestamp=0.0)


class TestFinanceModels:
    """Tests for record and forecast models."""

    def test_expense_value(self):
        """Test that expense value is price times quantity."""
        record = ExpenseRecord(
            record_date=date(2024, 3, 1),
            name="Coffee",
            category="food",
            price=4.5,
            quantity=2,
        )
        assert record.value == pytest.approx(9.0)

    def test_expense_strips_whitespace(self):
        """Test that whitespace is stripped from item names."""
        record = ExpenseRecord(record_date=date(2024, 3, 1), name="  Tea  ", price=1.0)
        assert record.name == "Tea"

    def test_expense_rejects_fractional_quantity(self):
        """Test that quantities must be whole numbers."""
        with pytest.raises(ValueError):
            ExpenseRecord(record_date=date(2024, 3, 1), name="Rice", price=2.0, quantity=1.5)

    def test_expense_rejects_non_positive_price(self):
        """Test that price must be positive."""
        with pytest.raises(ValueError):
            ExpenseRecord(record_date=date(2024, 3, 1), name="Rice", price=0.0)

    def test_income_amount_bounds(self):
        """Test income amount must be in (0, 1 000 000]."""
        with pytest.raises(ValueError):
            IncomeRecord(record_date=date(2024, 3, 1), source="Salary", amount=0)
        with pytest.raises(ValueError):
            IncomeRecord(record_date=date(2024, 3, 1), source="Salary", amount=1000001)

    def test_income_source_min_length(self):
        """Test income source requires at least 2 characters."""
        with pytest.raises(ValueError):
            IncomeRecord(record_date=date(2024, 3, 1), source="X", amount=10)

    def test_snapshot_counts_and_totals(self):
        """Test snapshot helpers."""
        snapshot = RecordSnapshot(
            income=(IncomeRecord(record_date=date(2024, 3, 1), source="Salary", amount=3000),),
            expenses=(
                ExpenseRecord(record_date=date(2024, 3, 2), name="Rent", price=1200),
                ExpenseRecord(record_date=date(2024, 3, 3), name="Food", price=50, quantity=4),
            ),
        )
        assert snapshot.income_count == 1
        assert snapshot.expense_count == 2
        assert snapshot.total_income == pytest.approx(3000)
        assert snapshot.total_expense == pytest.approx(1400)
        assert snapshot.is_empty is False

    def test_empty_snapshot(self):
        """Test that a default snapshot is empty."""
        assert RecordSnapshot().is_empty is True

    def test_forecast_request_requires_ordered_periods(self):
        """Test that aggregates must be in increasing period order."""
        with pytest.raises(ValueError, match="ordered by increasing period"):
            ForecastRequest(income=(
                PeriodAggregate(period="2024-02", total=10),
                PeriodAggregate(period="2024-01", total=20),
            ))

    def test_forecast_request_totals(self):
        """Test extraction of the total series."""
        request = ForecastRequest(
            income=(
                PeriodAggregate(period="2024-01", total=10),
                PeriodAggregate(period="2024-02", total=20),
            ),
        )
        assert request.income_totals == [10, 20]
        assert request.expense_totals == []

    def test_budget_suggestion_values(self):
        """Test suggestion messages and criticality."""
        assert BudgetSuggestion.HEALTHY.value == "Budget healthy, keep it up!"
        assert BudgetSuggestion.DEFICIT.value == "Budget deficit risk, adjust spending"
        assert BudgetSuggestion.DEFICIT.is_critical is True
        assert BudgetSuggestion.HEALTHY.is_critical is False


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.GRAPH_COMPUTED,
            description="Graph computed",
        )
        assert event.event_type == AuditEventType.GRAPH_COMPUTED
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEvent(
            event_type=AuditEventType.FORECAST_GENERATED,
            description="Forecast generated",
            details={"mode": "regression"},
        )
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "forecast_generated"
        assert log_dict["details"]["mode"] == "regression"

    def test_audit_event_to_row(self):
        """Test conversion to a flat row."""
        event = AuditEvent(
            event_type=AuditEventType.RESPONSE_DISCARDED,
            description="Stale response",
            sequence=4,
        )
        row = event.to_row()
        assert len(row) == 9
        assert row[2] == "response_discarded"
        assert row[5] == "4"

    def test_audit_event_builder_collapse_detected(self):
        """Test AuditEventBuilder.collapse_detected."""
        correlation_id = uuid4()
        event = AuditEventBuilder.collapse_detected(
            entropy=0.9,
            history_length=20,
            correlation_id=correlation_id,
        )
        assert event.event_type == AuditEventType.COLLAPSE_DETECTED
        assert event.severity == AuditSeverity.WARNING
        assert event.correlation_id == correlation_id
        assert event.details["history_length"] == 20

    def test_audit_event_builder_graph_computed(self):
        """Test AuditEventBuilder.graph_computed."""
        event = AuditEventBuilder.graph_computed(
            sequence=3,
            node_count=12,
            edge_count=20,
            entropy=0.41,
        )
        assert event.sequence == 3
        assert event.details["node_count"] == 12


class TestValidationResult:
    """Tests for ValidationResult model."""

    def test_validation_result_has_errors(self):
        """Test has_errors property."""
        result = ValidationResult(
            is_valid=False,
            issues=[
                ValidationIssue(
                    field="records",
                    issue_type="invalid",
                    message="Broken",
                    severity="error",
                ),
            ],
        )
        assert result.has_errors is True
        assert result.error_count == 1

    def test_validation_result_warnings_only(self):
        """Test that warnings don't count as errors."""
        result = ValidationResult(
            is_valid=True,
            issues=[
                ValidationIssue(
                    field="category",
                    issue_type="category_limit_exceeded",
                    message="Too much",
                    severity="warning",
                ),
            ],
        )
        assert result.has_errors is False
        assert result.error_count == 0
        assert result.warning_count == 1

    def test_validation_issue_rejects_unknown_severity(self):
        """Test severity is restricted."""
        with pytest.raises(ValueError):
            ValidationIssue(field="x", issue_type="y", message="z", severity="fatal")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

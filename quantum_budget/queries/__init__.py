"""Record aggregation package."""

from quantum_budget.queries.aggregator import PeriodAggregator

__all__ = ["PeriodAggregator"]

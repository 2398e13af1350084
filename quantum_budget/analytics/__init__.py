"""Analytics package: entropy, stability and forecasting."""

from quantum_budget.analytics.entropy import (
    local_edge_entropy,
    record_entropy,
    shannon_entropy,
)
from quantum_budget.analytics.forecast import Forecaster
from quantum_budget.analytics.stability import StabilityMonitor

__all__ = [
    "Forecaster",
    "StabilityMonitor",
    "local_edge_entropy",
    "record_entropy",
    "shannon_entropy",
]

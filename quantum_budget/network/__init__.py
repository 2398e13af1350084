"""Coupling network package: construction and time-varying weights."""

from quantum_budget.network.builder import GOLDEN_RATIO, GraphBuilder
from quantum_budget.network.coupling import CouplingModel, chaos

__all__ = [
    "GOLDEN_RATIO",
    "CouplingModel",
    "GraphBuilder",
    "chaos",
]

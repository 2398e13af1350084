"""
Entropy Engine

Shannon entropy H = -sum(p * ln p) over a normalised weight distribution.

Two call sites:

1. Finance mode: one weight per record (its monetary value), normalised
   by the total across all records. Measures how concentrated spending
   or income is.
2. Graph mode: each edge's weight is normalised by the weighted degree
   of its *source* node only, the -p ln p terms are summed over edges
   and averaged by edge count. This is a local, per-source view and is
   not a single global distribution.

Every function here is total: empty input, zero totals and zero degrees
all give 0, never NaN.
"""

import math
from collections.abc import Iterable, Sequence
from typing import Union

from quantum_budget.models.finance import ExpenseRecord, IncomeRecord
from quantum_budget.models.graph import CouplingState


def _plogp(p: float) -> float:
    return p * math.log(p) if p > 0 else 0.0


def shannon_entropy(weights: Iterable[float]) -> float:
    """
    Entropy of the distribution obtained by normalising `weights`.

    Weights must be non-negative. Zero weights contribute nothing.
    """
    values = list(weights)
    total = sum(values)
    if total <= 0:
        return 0.0
    return max(0.0, -sum(_plogp(w / total) for w in values))


def record_entropy(records: Sequence[Union[IncomeRecord, ExpenseRecord]]) -> float:
    """Finance-mode entropy over record values."""
    return shannon_entropy(record.value for record in records)


def local_edge_entropy(state: CouplingState) -> float:
    """
    Graph-mode entropy: mean of -p ln p over edges, where p is the edge
    weight divided by the weighted degree of the edge's source node.
    """
    if not state.edges:
        return 0.0

    total = 0.0
    for edge in state.edges:
        degree = state.degrees[edge.source]
        if degree > 0:
            total -= _plogp(edge.weight / degree)
    return total / len(state.edges)

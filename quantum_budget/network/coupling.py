"""
Coupling Model

Assigns every edge a time-varying "coupling strength" in [0, 1]:

    w(i, j, t) = 0.5 * (sin(omega0 * t * (1 + chaos(t)) + phase(i, j)) + 1)

    phase(i, j) = (i + j) * pi / phase_divisor
    chaos(t)    = 0.2 sin(0.3t) cos(0.7t) + 0.1 sin(0.5t) cos(1.2t)

The chaos term is optionally softened for large networks by the factor
1 + ln(N) / 10.

The weight is a pure function of (edge, t, N): evaluating the same
instant twice gives the same numbers, so redraws are idempotent.
Edge topology is never touched here.
"""

import math
from typing import Optional

from quantum_budget.config import CouplingSettings, get_settings
from quantum_budget.models.graph import CouplingState, Edge, Graph, WeightedEdge


def chaos(t: float) -> float:
    """Bounded nonlinear perturbation of the base frequency (|chaos| <= 0.3)."""
    return (
        0.2 * math.sin(0.3 * t) * math.cos(0.7 * t)
        + 0.1 * math.sin(0.5 * t) * math.cos(1.2 * t)
    )


class CouplingModel:
    """Evaluates edge weights and weighted degrees at a given time."""

    def __init__(self, settings: Optional[CouplingSettings] = None):
        self._settings = settings or get_settings().coupling

    def chaos_scale(self, node_count: int) -> float:
        if not self._settings.scale_chaos_by_size or node_count < 1:
            return 1.0
        return 1 + math.log(node_count) / 10

    def phase(self, edge: Edge) -> float:
        return (edge.source + edge.target) * math.pi / self._settings.phase_divisor

    def weight(self, edge: Edge, t: float, node_count: int = 1) -> float:
        """
        Coupling strength of one edge at time t.

        `node_count` only matters when chaos scaling is enabled.
        """
        perturbation = chaos(t) * self.chaos_scale(node_count)
        angle = self._settings.omega0 * t * (1 + perturbation) + self.phase(edge)
        value = 0.5 * (math.sin(angle) + 1)
        return min(1.0, max(0.0, value))

    def compute_all(self, graph: Graph, t: float) -> CouplingState:
        """
        Weights for every edge and the weighted degree of every node.

        A node without incident edges has degree 0.
        """
        n = graph.node_count
        degrees = [0.0] * n
        weighted = []

        for edge in graph.edges:
            w = self.weight(edge, t, n)
            degrees[edge.source] += w
            degrees[edge.target] += w
            weighted.append(WeightedEdge(
                source=edge.source,
                target=edge.target,
                base_strength=edge.base_strength,
                weight=w,
            ))

        return CouplingState(
            timestamp=t,
            edges=tuple(weighted),
            degrees=tuple(degrees),
        )

"""
Coupling Network Builder

Builds the node/edge structure behind the entropy visualisation from a
node count hint (in practice: the number of financial records).

Nodes sit on the unit sphere in a golden-angle spiral, which keeps them
evenly spread and never coincident for any N. Edges only join nodes that
are close in index order, with a connection probability that falls off
with the index distance.

DESIGN DECISION: The random source is a constructor argument.
Production passes an unseeded random.Random; tests pass a seeded one and
get identical networks back. The builder holds no other state, so a
build is a pure function of (N, random source).
"""

import math
import random
from typing import Optional

import structlog

from quantum_budget.config import GraphSettings, get_settings
from quantum_budget.models.graph import Edge, Graph, Node, Position


GOLDEN_RATIO = (1 + math.sqrt(5)) / 2


class GraphBuilder:
    """
    Generates a coupling network of clamped size.

    GUARANTEES:
    - node count is always within [min_nodes, max_nodes]
    - every edge has 0 <= source < target < N
    - at least N / 2 edges
    """

    def __init__(
        self,
        settings: Optional[GraphSettings] = None,
        rng: Optional[random.Random] = None,
    ):
        self._settings = settings or get_settings().graph
        self._rng = rng or random.Random()
        self._logger = structlog.get_logger(__name__)

    def clamp_node_count(self, node_count_hint: int) -> int:
        """Clamp any hint, including negative ones, into the allowed range."""
        return min(
            self._settings.max_nodes,
            max(self._settings.min_nodes, node_count_hint),
        )

    def build(self, node_count_hint: int) -> Graph:
        """
        Build a network for the given hint.

        Never fails: out-of-range hints are clamped and sparse edge
        sets are topped up.
        """
        n = self.clamp_node_count(node_count_hint)
        nodes = tuple(self._make_node(i, n) for i in range(n))

        edges = self._connect(n)
        floor = math.ceil(n / 2)
        if len(edges) < floor:
            self._logger.debug(
                "sparse_network_topped_up",
                node_count=n,
                generated=len(edges),
                floor=floor,
            )
            edges.extend(self._fill_edges(n, edges, floor - len(edges)))

        edges.sort(key=lambda e: e.key)
        return Graph(nodes=nodes, edges=tuple(edges))

    def build_for_records(self, income_count: int, expense_count: int) -> Graph:
        """Build a network sized from record counts."""
        return self.build(
            income_count + expense_count + self._settings.node_count_offset
        )

    # ------------------------------------------------------------------

    @staticmethod
    def sphere_position(index: int, count: int) -> Position:
        """Golden-angle spiral point for node `index` of `count`."""
        theta = 2 * math.pi * index / GOLDEN_RATIO
        phi = math.acos(1 - 2 * (index + 0.5) / count)
        return Position(
            x=math.sin(phi) * math.cos(theta),
            y=math.sin(phi) * math.sin(theta),
            z=math.cos(phi),
        )

    def _make_node(self, index: int, count: int) -> Node:
        return Node(
            index=index,
            position=self.sphere_position(index, count),
            label=f"v{index + 1}",
        )

    def _draw_strength(self) -> float:
        return self._rng.uniform(
            self._settings.min_base_strength,
            self._settings.max_base_strength,
        )

    def _connect(self, n: int) -> list[Edge]:
        """Distance-biased random connections between nearby indices."""
        edges = []
        k = self._settings.connection_factor
        for i in range(n):
            for j in range(i + 1, min(n, i + self._settings.max_span + 1)):
                probability = min(1.0, k / (j - i))
                if self._rng.random() < probability:
                    edges.append(Edge(
                        source=i,
                        target=j,
                        base_strength=self._draw_strength(),
                    ))
        return edges

    def _fill_edges(self, n: int, existing: list[Edge], needed: int) -> list[Edge]:
        """Random extra edges between pairs that are not yet connected."""
        taken = {edge.key for edge in existing}
        candidates = [
            (i, j)
            for i in range(n)
            for j in range(i + 1, n)
            if (i, j) not in taken
        ]
        self._rng.shuffle(candidates)
        return [
            Edge(source=i, target=j, base_strength=self._draw_strength())
            for i, j in candidates[:needed]
        ]

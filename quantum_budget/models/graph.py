"""
Coupling Network Models

These models describe the procedurally generated network that backs the
entropy visualisation, and the messages exchanged with the coupling worker.

DESIGN DECISION: Everything here is frozen.
A network is rebuilt wholesale on every refresh and the worker only ever
exchanges immutable value messages, so no model needs to be mutated after
construction. Time-dependent weights live in WeightedEdge, never in Edge.
"""

from datetime import datetime
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    model_validator,
)


# =============================================================================
# NETWORK STRUCTURE
# =============================================================================

class Position(BaseModel):
    """A point on the unit sphere."""
    model_config = ConfigDict(frozen=True)

    x: float
    y: float
    z: float

    def as_tuple(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.z)


class Node(BaseModel):
    """
    A network node.

    Identified by its sequence index; the label is for display only.
    """
    model_config = ConfigDict(frozen=True)

    index: int = Field(..., ge=0)
    position: Position
    label: str = Field(..., min_length=1)


class Edge(BaseModel):
    """
    A connection between two nodes.

    Membership is fixed at construction time. The base strength is
    drawn once; the coupling weight is derived per timestamp.
    """
    model_config = ConfigDict(frozen=True)

    source: int = Field(..., ge=0, description="Lower node index")
    target: int = Field(..., ge=0, description="Higher node index")
    base_strength: float = Field(..., ge=0.0, le=1.0)

    @model_validator(mode='after')
    def validate_endpoints(self) -> 'Edge':
        """Endpoints are distinct and ordered."""
        if self.source >= self.target:
            raise ValueError("Edge source must be lower than edge target")
        return self

    @property
    def span(self) -> int:
        return self.target - self.source

    @property
    def key(self) -> tuple[int, int]:
        return (self.source, self.target)


class Graph(BaseModel):
    """Output of GraphBuilder.build: the nodes and edges of one network."""
    model_config = ConfigDict(frozen=True)

    nodes: tuple[Node, ...]
    edges: tuple[Edge, ...]

    @property
    def node_count(self) -> int:
        return len(self.nodes)

    @property
    def edge_count(self) -> int:
        return len(self.edges)

    @model_validator(mode='after')
    def validate_edges_in_range(self) -> 'Graph':
        """Every edge must point at existing nodes."""
        count = len(self.nodes)
        for edge in self.edges:
            if edge.target >= count:
                raise ValueError(
                    f"Edge ({edge.source}, {edge.target}) outside node range [0, {count})"
                )
        return self


class WeightedEdge(BaseModel):
    """An edge together with its coupling weight at one instant."""
    model_config = ConfigDict(frozen=True)

    source: int = Field(..., ge=0)
    target: int = Field(..., ge=0)
    base_strength: float = Field(..., ge=0.0, le=1.0)
    weight: float = Field(..., ge=0.0, le=1.0)


class CouplingState(BaseModel):
    """
    Weights and weighted degrees of a network evaluated at time t.

    Derived from a Graph by CouplingModel.compute_all; never persisted.
    """
    model_config = ConfigDict(frozen=True)

    timestamp: float
    edges: tuple[WeightedEdge, ...]
    degrees: tuple[float, ...] = Field(
        ...,
        description="Weighted degree per node, indexed by node index"
    )


# =============================================================================
# WORKER MESSAGES
# =============================================================================

class GraphMetrics(BaseModel):
    """Summary numbers reported alongside a computed network."""
    model_config = ConfigDict(frozen=True)

    entropy: float = Field(..., ge=0.0)
    node_count: int = Field(..., ge=0)
    edge_count: int = Field(..., ge=0)
    timestamp: float


class GraphRequest(BaseModel):
    """
    A record-count snapshot sent to the coupling worker.

    The sequence number lets the caller discard superseded responses.
    """
    model_config = ConfigDict(frozen=True)

    sequence: int = Field(..., ge=0)
    income_count: int = Field(..., ge=0)
    expense_count: int = Field(..., ge=0)
    timestamp: float = Field(
        ...,
        description="Time value at which coupling weights are evaluated"
    )
    seed: Optional[int] = Field(
        default=None,
        description="Seed for the edge generator; unseeded in production"
    )


class GraphResult(BaseModel):
    """The worker's answer to one GraphRequest."""
    model_config = ConfigDict(frozen=True)

    sequence: int = Field(..., ge=0)
    nodes: tuple[Node, ...]
    edges: tuple[WeightedEdge, ...]
    metrics: GraphMetrics
    computed_at: datetime = Field(
        default_factory=datetime.utcnow
    )


class GraphFailure(BaseModel):
    """The worker's answer to a GraphRequest whose computation failed."""
    model_config = ConfigDict(frozen=True)

    sequence: int = Field(..., ge=0)
    error: str = Field(
        ...,
        description="Error message from the failed computation"
    )
    failed_at: datetime = Field(
        default_factory=datetime.utcnow
    )

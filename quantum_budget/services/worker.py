"""
Coupling Worker

Runs the network computation away from the caller. The caller and the
worker share nothing but two queues of frozen messages:

    caller --GraphRequest--> [requests] --> worker
    caller <--GraphResult--- [responses] <-- worker

Each request is answered independently, with a GraphResult or, when
the computation fails, a GraphFailure for the same sequence. The worker
keeps no history between messages; the computation itself runs in a
thread so a slow build never stalls the caller's event loop.

There is no cancellation protocol. A caller that no longer wants an
answer simply ignores it when it arrives (see CouplingFlow).
"""

import asyncio
import random
from typing import Optional, Union

import structlog

from quantum_budget.analytics.entropy import local_edge_entropy
from quantum_budget.config import CouplingSettings, GraphSettings, get_settings
from quantum_budget.models.graph import (
    GraphFailure,
    GraphMetrics,
    GraphRequest,
    GraphResult,
)
from quantum_budget.network import CouplingModel, GraphBuilder


class WorkerError(Exception):
    """Base exception for the worker boundary."""
    pass


class CoreUnavailableError(WorkerError):
    """The worker is not running or its channel is closed."""
    pass


class ChannelBusyError(WorkerError):
    """The request channel is full."""
    pass


class GraphComputationError(WorkerError):
    """The worker could not compute the network for one request."""

    def __init__(self, sequence: int, message: str):
        super().__init__(f"Graph computation {sequence} failed: {message}")
        self.sequence = sequence


def compute_graph(
    request: GraphRequest,
    graph_settings: Optional[GraphSettings] = None,
    coupling_settings: Optional[CouplingSettings] = None,
) -> GraphResult:
    """
    Build, weigh and measure one network.

    Pure with respect to its arguments: a seeded request always gives
    the same result.
    """
    builder = GraphBuilder(graph_settings, rng=random.Random(request.seed))
    graph = builder.build_for_records(request.income_count, request.expense_count)

    state = CouplingModel(coupling_settings).compute_all(graph, request.timestamp)

    return GraphResult(
        sequence=request.sequence,
        nodes=graph.nodes,
        edges=state.edges,
        metrics=GraphMetrics(
            entropy=local_edge_entropy(state),
            node_count=graph.node_count,
            edge_count=graph.edge_count,
            timestamp=request.timestamp,
        ),
    )


class CouplingWorker:
    """
    Stateless request/response worker for the coupling network.

    Usage:
        worker = CouplingWorker()
        await worker.start()
        worker.submit(request)
        result = await worker.next_response(timeout=1.0)
        await worker.stop()
    """

    def __init__(
        self,
        graph_settings: Optional[GraphSettings] = None,
        coupling_settings: Optional[CouplingSettings] = None,
        capacity: Optional[int] = None,
    ):
        settings = get_settings()
        self._graph_settings = graph_settings or settings.graph
        self._coupling_settings = coupling_settings or settings.coupling
        self._capacity = capacity or settings.app.channel_capacity
        self._requests: Optional[asyncio.Queue] = None
        self._responses: Optional[asyncio.Queue] = None
        self._task: Optional[asyncio.Task] = None
        self._logger = structlog.get_logger(__name__)

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start the worker task. Calling it twice is harmless."""
        if self.is_running:
            return
        self._requests = asyncio.Queue(maxsize=self._capacity)
        self._responses = asyncio.Queue()
        self._task = asyncio.create_task(
            self._run(self._requests, self._responses)
        )

    async def stop(self) -> None:
        """Stop the worker; pending requests are dropped."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    def submit(self, request: GraphRequest) -> None:
        """
        Queue a request without waiting.

        Raises:
            CoreUnavailableError: worker not running
            ChannelBusyError: too many pending requests
        """
        if not self.is_running or self._requests is None:
            raise CoreUnavailableError("Coupling worker is not running")
        try:
            self._requests.put_nowait(request)
        except asyncio.QueueFull:
            raise ChannelBusyError(
                f"Coupling worker channel is full ({self._capacity} pending)"
            )

    async def next_response(self, timeout: Optional[float] = None) -> GraphResult:
        """
        Wait for the next response.

        Raises:
            CoreUnavailableError: worker not running, or no response in time
            GraphComputationError: the next response reports a failed request
        """
        if self._responses is None:
            raise CoreUnavailableError("Coupling worker was never started")
        if not self.is_running and self._responses.empty():
            raise CoreUnavailableError("Coupling worker is not running")
        try:
            response = await asyncio.wait_for(self._responses.get(), timeout)
        except asyncio.TimeoutError:
            raise CoreUnavailableError(
                f"No response from coupling worker within {timeout}s"
            )
        if isinstance(response, GraphFailure):
            raise GraphComputationError(response.sequence, response.error)
        return response

    def drain(self) -> list[Union[GraphResult, GraphFailure]]:
        """All responses that have already arrived, oldest first."""
        responses = []
        if self._responses is None:
            return responses
        while True:
            try:
                responses.append(self._responses.get_nowait())
            except asyncio.QueueEmpty:
                return responses

    async def _run(self, requests: asyncio.Queue, responses: asyncio.Queue) -> None:
        while True:
            request = await requests.get()
            try:
                result = await asyncio.to_thread(
                    compute_graph,
                    request,
                    self._graph_settings,
                    self._coupling_settings,
                )
            except Exception as e:
                # One bad request must not take the worker down
                self._logger.error(
                    "graph_computation_failed",
                    sequence=request.sequence,
                    error=str(e),
                )
                await responses.put(
                    GraphFailure(sequence=request.sequence, error=str(e))
                )
                continue
            await responses.put(result)

"""
Main Orchestrator for Quantum Budget

This module ties the core components together and defines the flows an
outer application drives:
1. Coupling refresh (record counts → worker → network + entropy metrics)
2. Monitoring (record snapshot → finance entropy → collapse flag)
3. Forecast (record snapshot → period aggregates → predictions → suggestion)

DESIGN DECISION: The orchestrator owns every piece of process-wide state.
The worker is stateless, the analytics are pure functions, and the only
history (the entropy window) lives in MonitorFlow. Collaborators are
passed in through constructors; nothing is looked up late from a shared
namespace.

An unavailable core is never an exception for the caller: it means
"no metrics this cycle" and is logged.
"""

import asyncio
import itertools
import time
from collections.abc import Callable
from typing import Optional
from uuid import UUID

from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from quantum_budget.analytics import Forecaster, StabilityMonitor, record_entropy
from quantum_budget.audit import AuditLogger, create_correlation_id
from quantum_budget.config import AppSettings, StabilitySettings, get_settings
from quantum_budget.models.finance import (
    BudgetSuggestion,
    ForecastRequest,
    ForecastResult,
    RecordSnapshot,
    StabilityReport,
    ValidationResult,
)
from quantum_budget.models.graph import GraphFailure, GraphRequest, GraphResult
from quantum_budget.queries import PeriodAggregator
from quantum_budget.services.storage import InMemoryAuditStorage
from quantum_budget.services.worker import (
    ChannelBusyError,
    CouplingWorker,
    GraphComputationError,
    WorkerError,
)
from quantum_budget.validation import BudgetValidator


class CouplingFlow:
    """
    Drives the coupling worker.

    Flow:
    1. request_refresh → throttle check → numbered GraphRequest → worker
    2. collect / refresh → apply responses, newest sequence wins

    A response whose sequence is not newer than the last applied one is
    stale and is discarded, so late or out-of-order answers never
    overwrite fresher metrics.
    """

    def __init__(
        self,
        worker: Optional[CouplingWorker] = None,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[AppSettings] = None,
        clock: Callable[[], float] = time.monotonic,
        time_source: Callable[[], float] = time.time,
    ):
        self._worker = worker or CouplingWorker()
        self._audit_logger = audit_logger
        self._settings = settings or get_settings().app
        self._clock = clock
        self._time_source = time_source
        self._sequence = itertools.count(1)
        self._last_dispatch: Optional[float] = None
        self._last_applied = 0
        self._current: Optional[GraphResult] = None

    @property
    def current(self) -> Optional[GraphResult]:
        """The most recently applied result, if any."""
        return self._current

    @property
    def last_applied_sequence(self) -> int:
        return self._last_applied

    async def start(self) -> None:
        await self._worker.start()

    async def stop(self) -> None:
        await self._worker.stop()

    async def _submit(self, request: GraphRequest) -> None:
        """Submit with bounded retries while the channel is busy."""
        wait = self._settings.channel_retry_wait_seconds
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self._settings.channel_retry_attempts),
            wait=wait_exponential(multiplier=wait, max=wait * 10),
            retry=retry_if_exception_type(ChannelBusyError),
            reraise=True,
        ):
            with attempt:
                self._worker.submit(request)

    async def request_refresh(
        self,
        income_count: int,
        expense_count: int,
        seed: Optional[int] = None,
        correlation_id: Optional[UUID] = None,
    ) -> Optional[int]:
        """
        Ask the worker for a new network.

        Returns:
            The request's sequence number, or None when the request was
            throttled or the core is unavailable.
        """
        correlation_id = correlation_id or create_correlation_id()

        now = self._clock()
        if self._last_dispatch is not None:
            elapsed = now - self._last_dispatch
            if elapsed < self._settings.redraw_throttle_seconds:
                if self._audit_logger:
                    await self._audit_logger.log_graph_request_throttled(
                        elapsed_seconds=elapsed,
                        correlation_id=correlation_id,
                    )
                return None

        request = GraphRequest(
            sequence=next(self._sequence),
            income_count=income_count,
            expense_count=expense_count,
            timestamp=self._time_source(),
            seed=seed,
        )

        try:
            await self._submit(request)
        except WorkerError as e:
            if self._audit_logger:
                await self._audit_logger.log_core_unavailable(
                    error_message=str(e),
                    correlation_id=correlation_id,
                )
            return None

        self._last_dispatch = now
        if self._audit_logger:
            await self._audit_logger.log_graph_requested(
                sequence=request.sequence,
                income_count=income_count,
                expense_count=expense_count,
                correlation_id=correlation_id,
            )
        return request.sequence

    async def apply(self, result: GraphResult) -> bool:
        """Apply a response unless it is stale. Returns True if applied."""
        if result.sequence <= self._last_applied:
            if self._audit_logger:
                await self._audit_logger.log_response_discarded(
                    sequence=result.sequence,
                    last_applied=self._last_applied,
                )
            return False

        self._last_applied = result.sequence
        self._current = result
        if self._audit_logger:
            await self._audit_logger.log_graph_computed(
                sequence=result.sequence,
                node_count=result.metrics.node_count,
                edge_count=result.metrics.edge_count,
                entropy=result.metrics.entropy,
            )
        return True

    async def _report_failure(
        self,
        error: GraphComputationError,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        if self._audit_logger:
            await self._audit_logger.log_error(
                error_type=type(error).__name__,
                error_message=str(error),
                details={"sequence": error.sequence},
                correlation_id=correlation_id,
            )

    async def collect(self) -> Optional[GraphResult]:
        """Apply every response that has arrived; return the current result."""
        for response in self._worker.drain():
            if isinstance(response, GraphFailure):
                await self._report_failure(
                    GraphComputationError(response.sequence, response.error)
                )
                continue
            await self.apply(response)
        return self._current

    async def refresh(
        self,
        income_count: int,
        expense_count: int,
        seed: Optional[int] = None,
        timeout: float = 5.0,
    ) -> Optional[GraphResult]:
        """
        Request a network and wait until it (or a newer one) is applied.

        Returns the current result; None if nothing is available.
        A throttled request returns the previous result unchanged, and a
        failed computation of this request returns without waiting out
        the timeout.
        """
        correlation_id = create_correlation_id()
        sequence = await self.request_refresh(
            income_count,
            expense_count,
            seed=seed,
            correlation_id=correlation_id,
        )
        if sequence is None:
            return self._current

        while self._last_applied < sequence:
            try:
                result = await self._worker.next_response(timeout=timeout)
            except GraphComputationError as e:
                await self._report_failure(e, correlation_id)
                if e.sequence >= sequence:
                    return self._current
                continue
            except WorkerError as e:
                if self._audit_logger:
                    await self._audit_logger.log_core_unavailable(
                        error_message=str(e),
                        correlation_id=correlation_id,
                    )
                return self._current
            await self.apply(result)

        return self._current


class MonitorFlow:
    """
    Feeds finance-mode entropy into the stability monitor.

    The entropy window lives here and only here. It starts empty and
    grows by one sample per tick up to the monitor's capacity.
    """

    def __init__(
        self,
        monitor: Optional[StabilityMonitor] = None,
        validator: Optional[BudgetValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[StabilitySettings] = None,
    ):
        self._settings = settings or get_settings().stability
        self._monitor = monitor or StabilityMonitor(self._settings)
        self._validator = validator or BudgetValidator()
        self._audit_logger = audit_logger

    @property
    def monitor(self) -> StabilityMonitor:
        return self._monitor

    async def observe(
        self,
        entropy: float,
        correlation_id: Optional[UUID] = None,
    ) -> StabilityReport:
        """Record one sample and evaluate the collapse test."""
        correlation_id = correlation_id or create_correlation_id()

        self._monitor.observe(entropy)
        report = StabilityReport(
            entropy=entropy,
            history_length=len(self._monitor),
            approaching_collapse=self._monitor.is_approaching_collapse(),
        )

        if self._audit_logger:
            await self._audit_logger.log_entropy_observed(
                entropy=entropy,
                history_length=report.history_length,
                correlation_id=correlation_id,
            )
            if report.approaching_collapse:
                await self._audit_logger.log_collapse_detected(
                    entropy=entropy,
                    history_length=report.history_length,
                    correlation_id=correlation_id,
                )

        return report

    async def check_budget(
        self,
        snapshot: RecordSnapshot,
        correlation_id: Optional[UUID] = None,
    ) -> ValidationResult:
        """Run the budget checks and log any warnings."""
        correlation_id = correlation_id or create_correlation_id()

        result = self._validator.validate(snapshot)
        if self._audit_logger and result.warning_count:
            await self._audit_logger.log_budget_warning(
                issues=[
                    {"type": i.issue_type, "message": i.message}
                    for i in result.issues
                    if i.severity == "warning"
                ],
                correlation_id=correlation_id,
            )
        return result

    async def poll_once(self, snapshot: RecordSnapshot) -> StabilityReport:
        """One monitoring tick over a record snapshot."""
        correlation_id = create_correlation_id()
        await self.check_budget(snapshot, correlation_id)
        return await self.observe(record_entropy(snapshot.expenses), correlation_id)

    async def run(
        self,
        snapshot_provider: Callable[[], RecordSnapshot],
        stop_event: asyncio.Event,
        on_report: Optional[Callable[[StabilityReport], None]] = None,
    ) -> int:
        """
        Poll on a fixed cadence until `stop_event` is set.

        A tick whose snapshot cannot be read is logged as a system error
        and the loop carries on with the next tick.

        Returns the number of ticks performed.
        """
        ticks = 0
        while not stop_event.is_set():
            ticks += 1
            try:
                report = await self.poll_once(snapshot_provider())
            except Exception as e:
                if self._audit_logger:
                    await self._audit_logger.log_error(
                        error_type=type(e).__name__,
                        error_message=str(e),
                        details={"tick": ticks},
                    )
                report = None
            if report is not None and on_report is not None:
                on_report(report)
            try:
                await asyncio.wait_for(
                    stop_event.wait(),
                    timeout=self._settings.poll_interval_seconds,
                )
            except asyncio.TimeoutError:
                pass
        return ticks


class ForecastFlow:
    """
    Predicts next-period income and expense and derives a suggestion.

    A predicted shortfall (income below expense) is a DEFICIT; anything
    else is HEALTHY.
    """

    def __init__(
        self,
        forecaster: Optional[Forecaster] = None,
        aggregator: Optional[PeriodAggregator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._forecaster = forecaster or Forecaster()
        self._aggregator = aggregator or PeriodAggregator()
        self._audit_logger = audit_logger

    @staticmethod
    def suggest(predicted_income: float, predicted_expense: float) -> BudgetSuggestion:
        if predicted_income - predicted_expense < 0:
            return BudgetSuggestion.DEFICIT
        return BudgetSuggestion.HEALTHY

    async def forecast(
        self,
        request: ForecastRequest,
        correlation_id: Optional[UUID] = None,
    ) -> ForecastResult:
        """Forecast from ordered period aggregates."""
        correlation_id = correlation_id or create_correlation_id()

        predicted_income = self._forecaster.predict(request.income_totals)
        predicted_expense = self._forecaster.predict(request.expense_totals)
        suggestion = self.suggest(predicted_income, predicted_expense)

        result = ForecastResult(
            predicted_income=predicted_income,
            predicted_expense=predicted_expense,
            mode=self._forecaster.mode,
            suggestion=suggestion,
        )

        if self._audit_logger:
            await self._audit_logger.log_forecast_generated(
                predicted_income=predicted_income,
                predicted_expense=predicted_expense,
                mode=result.mode,
                suggestion=suggestion.value,
                correlation_id=correlation_id,
            )

        return result

    async def forecast_snapshot(self, snapshot: RecordSnapshot) -> ForecastResult:
        """Aggregate a snapshot by month and forecast from it."""
        return await self.forecast(self._aggregator.to_forecast_request(snapshot))


def create_app_components(
    audit_logger: Optional[AuditLogger] = None,
) -> tuple[CouplingFlow, MonitorFlow, ForecastFlow]:
    """
    Factory function to create all application components.

    All flows share one audit logger; by default it keeps events in
    memory. The coupling worker is created but not started: call
    `await coupling_flow.start()` from inside the event loop.

    Returns:
        (coupling_flow, monitor_flow, forecast_flow)
    """
    audit_logger = audit_logger or AuditLogger(InMemoryAuditStorage())

    coupling_flow = CouplingFlow(audit_logger=audit_logger)
    monitor_flow = MonitorFlow(audit_logger=audit_logger)
    forecast_flow = ForecastFlow(audit_logger=audit_logger)

    return coupling_flow, monitor_flow, forecast_flow

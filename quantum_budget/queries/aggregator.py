"""
Period Aggregation

DESIGN DECISION: Aggregation is DETERMINISTIC and read-only.
The outer application hands over a RecordSnapshot; this module turns it
into the ordered PeriodAggregate series the Forecaster consumes. It
never mutates or keeps the snapshot.
"""

from collections.abc import Iterable
from typing import Union

from quantum_budget.models.finance import (
    ExpenseRecord,
    ForecastRequest,
    IncomeRecord,
    PeriodAggregate,
    RecordSnapshot,
)


class PeriodAggregator:
    """
    Groups records into calendar periods.

    Periods default to months ("%Y-%m"), which sort chronologically as
    plain strings.
    """

    def __init__(self, period_format: str = "%Y-%m"):
        self._period_format = period_format

    def period_key(self, record: Union[IncomeRecord, ExpenseRecord]) -> str:
        return record.record_date.strftime(self._period_format)

    def aggregate(
        self,
        records: Iterable[Union[IncomeRecord, ExpenseRecord]],
    ) -> list[PeriodAggregate]:
        """Sum record values per period, ordered by increasing period."""
        groups: dict[str, float] = {}

        for record in records:
            key = self.period_key(record)
            groups[key] = groups.get(key, 0.0) + record.value

        return [
            PeriodAggregate(period=key, total=total)
            for key, total in sorted(groups.items())
        ]

    def to_forecast_request(self, snapshot: RecordSnapshot) -> ForecastRequest:
        """Build a forecast request from a snapshot."""
        return ForecastRequest(
            income=tuple(self.aggregate(snapshot.income)),
            expenses=tuple(self.aggregate(snapshot.expenses)),
        )

    @staticmethod
    def totals_by_category(records: Iterable[ExpenseRecord]) -> dict[str, float]:
        """Expense value per category."""
        totals: dict[str, float] = {}
        for record in records:
            totals[record.category] = totals.get(record.category, 0.0) + record.value
        return totals

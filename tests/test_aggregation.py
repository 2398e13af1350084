"""Tests for period aggregation and budget validation."""

import math
from datetime import date

import pytest

from quantum_budget.config import BudgetSettings
from quantum_budget.models.finance import ExpenseRecord, IncomeRecord, RecordSnapshot
from quantum_budget.queries import PeriodAggregator
from quantum_budget.validation import BudgetValidator


def _expense(day: date, price: float, category: str = "food", quantity: int = 1) -> ExpenseRecord:
    return ExpenseRecord(
        record_date=day,
        name="Item",
        category=category,
        price=price,
        quantity=quantity,
    )


class TestPeriodAggregator:
    """Tests for PeriodAggregator."""

    def test_monthly_sums_in_order(self):
        """Records are summed per month and ordered chronologically."""
        records = [
            IncomeRecord(record_date=date(2024, 3, 5), source="Salary", amount=300),
            IncomeRecord(record_date=date(2024, 1, 9), source="Salary", amount=100),
            IncomeRecord(record_date=date(2024, 1, 20), source="Bonus", amount=50),
            IncomeRecord(record_date=date(2023, 12, 31), source="Salary", amount=90),
        ]
        aggregates = PeriodAggregator().aggregate(records)

        assert [a.period for a in aggregates] == ["2023-12", "2024-01", "2024-03"]
        assert [a.total for a in aggregates] == [90, 150, 300]

    def test_expenses_use_price_times_quantity(self):
        """Expense aggregates sum price x quantity."""
        aggregates = PeriodAggregator().aggregate([
            _expense(date(2024, 2, 1), 10, quantity=3),
            _expense(date(2024, 2, 2), 5),
        ])
        assert len(aggregates) == 1
        assert aggregates[0].total == pytest.approx(35)

    def test_empty(self):
        """No records, no aggregates."""
        assert PeriodAggregator().aggregate([]) == []

    def test_custom_period_format(self):
        """Periods can be yearly."""
        aggregates = PeriodAggregator("%Y").aggregate([
            _expense(date(2023, 5, 1), 10),
            _expense(date(2024, 5, 1), 20),
            _expense(date(2024, 6, 1), 30),
        ])
        assert [(a.period, a.total) for a in aggregates] == [("2023", 10), ("2024", 50)]

    def test_to_forecast_request(self):
        """A snapshot becomes two ordered aggregate series."""
        snapshot = RecordSnapshot(
            income=(
                IncomeRecord(record_date=date(2024, 2, 1), source="Salary", amount=2000),
                IncomeRecord(record_date=date(2024, 1, 1), source="Salary", amount=1000),
            ),
            expenses=(_expense(date(2024, 1, 15), 400),),
        )
        request = PeriodAggregator().to_forecast_request(snapshot)

        assert request.income_totals == [1000, 2000]
        assert request.expense_totals == [400]

    def test_totals_by_category(self):
        """Expense value per category."""
        totals = PeriodAggregator.totals_by_category([
            _expense(date(2024, 1, 1), 10, category="food"),
            _expense(date(2024, 1, 2), 20, category="rent"),
            _expense(date(2024, 1, 3), 5, category="food", quantity=2),
        ])
        assert totals == {"food": 20, "rent": 20}


class TestBudgetValidator:
    """Tests for BudgetValidator."""

    def _validator(self, **overrides) -> BudgetValidator:
        return BudgetValidator(BudgetSettings(**overrides), omega0=0.1)

    def test_empty_snapshot_is_info_only(self):
        """An empty snapshot is valid and flagged as informational."""
        result = self._validator().validate(RecordSnapshot())
        assert result.is_valid is True
        assert [i.issue_type for i in result.issues] == ["no_records"]
        assert result.issues[0].severity == "info"

    def test_category_limit_exceeded(self):
        """Categories above the limit produce a warning each."""
        snapshot = RecordSnapshot(expenses=(
            _expense(date(2024, 1, 1), 800, category="rent"),
            _expense(date(2024, 1, 2), 300, category="rent"),
            _expense(date(2024, 1, 3), 50, category="food"),
        ))
        result = self._validator(category_limit=1000).validate(snapshot)

        limit_issues = [i for i in result.issues if i.issue_type == "category_limit_exceeded"]
        assert len(limit_issues) == 1
        assert "rent" in limit_issues[0].message
        assert "RM1,100.00" in limit_issues[0].message
        assert result.is_valid is True
        assert result.has_errors is False

    def test_entropy_threshold_from_population_variance(self):
        """Equal values have zero variance, so the threshold is 2 * omega0."""
        validator = self._validator()
        expenses = (_expense(date(2024, 1, 1), 10), _expense(date(2024, 1, 2), 10))
        assert validator.entropy_threshold(expenses) == pytest.approx(0.2)

    def test_entropy_threshold_absent_for_large_variance(self):
        """A negative radicand means no threshold."""
        validator = self._validator()
        expenses = (_expense(date(2024, 1, 1), 10), _expense(date(2024, 1, 2), 90))
        assert validator.entropy_threshold(expenses) is None
        assert validator.entropy_threshold(()) is None

    def test_entropy_warning(self):
        """Evenly spread spending above the threshold is flagged."""
        snapshot = RecordSnapshot(expenses=(
            _expense(date(2024, 1, 1), 10),
            _expense(date(2024, 1, 2), 10),
        ))
        result = self._validator().validate(snapshot)

        entropy_issues = [i for i in result.issues if i.issue_type == "entropy_threshold_exceeded"]
        assert len(entropy_issues) == 1
        assert entropy_issues[0].suggested_fix == "Adjust spending distribution"
        assert f"{math.log(2):.3f}" in entropy_issues[0].message

    def test_single_expense_no_entropy_warning(self):
        """A single expense has zero entropy."""
        snapshot = RecordSnapshot(expenses=(_expense(date(2024, 1, 1), 10),))
        result = self._validator().validate(snapshot)
        assert result.issues == []

    def test_income_only_snapshot(self):
        """Income alone triggers no budget warnings."""
        snapshot = RecordSnapshot(income=(
            IncomeRecord(record_date=date(2024, 1, 1), source="Salary", amount=5000),
        ))
        result = self._validator().validate(snapshot)
        assert result.is_valid is True
        assert result.issues == []

    def test_user_friendly_summary(self):
        """Warnings are listed with their suggested fixes."""
        validator = self._validator(category_limit=100)
        result = validator.validate(RecordSnapshot(expenses=(
            _expense(date(2024, 1, 1), 500, category="travel"),
        )))
        summary = validator.get_user_friendly_summary(result)
        assert "travel" in summary
        assert "Reduce spending on travel" in summary

        clean = validator.validate(RecordSnapshot(expenses=(_expense(date(2024, 1, 1), 10),)))
        assert validator.get_user_friendly_summary(clean) == "✅ Budget looks fine."

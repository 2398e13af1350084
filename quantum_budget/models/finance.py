"""
Finance Models for Quantum Budget

The outer application owns the mutable record lists. The core only ever
sees read-only snapshots of them (RecordSnapshot) and the period
aggregates derived from those snapshots.

DESIGN DECISION: Record validation is strict.
A record that reaches the analytics layer always has a positive value,
so entropy weights and aggregates never see negative numbers.
"""

from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


# =============================================================================
# ENUMS
# =============================================================================


class BudgetSuggestion(str, Enum):
    """
    Outcome of comparing predicted income and expense.

    The value is the message shown to the user.
    """
    HEALTHY = "Budget healthy, keep it up!"
    DEFICIT = "Budget deficit risk, adjust spending"

    @property
    def is_critical(self) -> bool:
        return self is BudgetSuggestion.DEFICIT


# =============================================================================
# RECORDS
# =============================================================================

class IncomeRecord(BaseModel):
    """A single income entry."""
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    record_date: date
    source: str = Field(
        ...,
        min_length=2,
        max_length=200,
        description="Where the money came from"
    )
    category: str = Field(default="other", max_length=100)
    amount: float = Field(
        ...,
        gt=0,
        le=1000000,
        description="Amount received"
    )

    @property
    def value(self) -> float:
        return self.amount


class ExpenseRecord(BaseModel):
    """A single expense entry: price times a whole quantity."""
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    record_date: date
    name: str = Field(
        ...,
        min_length=2,
        max_length=200,
        description="Item bought"
    )
    category: str = Field(default="other", max_length=100)
    price: float = Field(..., gt=0)
    quantity: int = Field(default=1, gt=0)

    @field_validator('quantity', mode='before')
    @classmethod
    def validate_whole_quantity(cls, v):
        """Reject fractional quantities instead of truncating them."""
        if isinstance(v, float) and not v.is_integer():
            raise ValueError("Quantity must be a whole number")
        return v

    @property
    def value(self) -> float:
        return self.price * self.quantity


class RecordSnapshot(BaseModel):
    """
    A read-only view of the records at one moment.

    Handed to the core by the orchestrator; the core never keeps it.
    """
    model_config = ConfigDict(frozen=True)

    income: tuple[IncomeRecord, ...] = ()
    expenses: tuple[ExpenseRecord, ...] = ()
    taken_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def income_count(self) -> int:
        return len(self.income)

    @property
    def expense_count(self) -> int:
        return len(self.expenses)

    @property
    def total_income(self) -> float:
        return sum(r.value for r in self.income)

    @property
    def total_expense(self) -> float:
        return sum(r.value for r in self.expenses)

    @property
    def is_empty(self) -> bool:
        return not self.income and not self.expenses


# =============================================================================
# AGGREGATES AND FORECASTS
# =============================================================================

class PeriodAggregate(BaseModel):
    """The summed value of one kind of record within one calendar period."""
    model_config = ConfigDict(frozen=True)

    period: str = Field(
        ...,
        min_length=1,
        description="Period key, e.g. '2024-03'"
    )
    total: float = Field(..., ge=0)


class ForecastRequest(BaseModel):
    """Ordered income and expense aggregates to forecast from."""
    model_config = ConfigDict(frozen=True)

    income: tuple[PeriodAggregate, ...] = ()
    expenses: tuple[PeriodAggregate, ...] = ()

    @field_validator('income', 'expenses')
    @classmethod
    def validate_ordering(cls, v: tuple) -> tuple:
        """Periods must be strictly increasing."""
        periods = [agg.period for agg in v]
        if any(a >= b for a, b in zip(periods, periods[1:])):
            raise ValueError("Period aggregates must be ordered by increasing period")
        return v

    @property
    def income_totals(self) -> list[float]:
        return [agg.total for agg in self.income]

    @property
    def expense_totals(self) -> list[float]:
        return [agg.total for agg in self.expenses]


class ForecastResult(BaseModel):
    """Predicted next-period values and the derived suggestion."""
    model_config = ConfigDict(frozen=True)

    predicted_income: float = Field(..., ge=0)
    predicted_expense: float = Field(..., ge=0)
    mode: str
    suggestion: BudgetSuggestion
    generated_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def predicted_balance(self) -> float:
        return self.predicted_income - self.predicted_expense


class StabilityReport(BaseModel):
    """One monitoring tick: the observed sample and the collapse flag."""
    model_config = ConfigDict(frozen=True)

    entropy: float = Field(..., ge=0)
    history_length: int = Field(..., ge=0)
    approaching_collapse: bool
    observed_at: datetime = Field(default_factory=datetime.utcnow)


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field or area with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'category_limit_exceeded')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )


class ValidationResult(BaseModel):
    """Result of checking a record snapshot against the budget rules."""

    validated_at: datetime = Field(
        default_factory=datetime.utcnow
    )
    is_valid: bool = Field(
        ...,
        description="True when no error-level issue was found"
    )
    issues: list[ValidationIssue] = Field(
        default_factory=list,
        description="All issues found"
    )

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def warning_count(self) -> int:
        """Count warning-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "warning")

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

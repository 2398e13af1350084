"""
Budget Validation

DESIGN DECISION: Validation happens in two distinct layers:

LAYER 1 - RECORD VALIDATION:
- Handled by the pydantic record models themselves
- Positive amounts, whole quantities, minimum name lengths
- A record that fails never reaches this module

LAYER 2 - BUDGET VALIDATION (this module):
- Category spending limits
- Spending concentration (finance-mode entropy) against the
  oscillator threshold 2 * sqrt(omega0^2 - variance)
- This catches budgets that are well-formed but worth a second look

IMPORTANT: Validation NEVER silently fixes issues.
It reports them for the user to act on.
"""

import math
from typing import Optional

from quantum_budget.analytics.entropy import record_entropy
from quantum_budget.config import BudgetSettings, get_settings
from quantum_budget.models.finance import (
    ExpenseRecord,
    RecordSnapshot,
    ValidationIssue,
    ValidationResult,
)
from quantum_budget.queries import PeriodAggregator


class BudgetValidator:
    """Checks a record snapshot against the budget rules."""

    def __init__(
        self,
        settings: Optional[BudgetSettings] = None,
        omega0: Optional[float] = None,
    ):
        self._settings = settings or get_settings().budget
        self._omega0 = omega0 if omega0 is not None else get_settings().coupling.omega0

    def entropy_threshold(self, expenses: tuple[ExpenseRecord, ...]) -> Optional[float]:
        """
        Critical entropy for a set of expenses.

        Uses the population variance of the expense values. Returns None
        when omega0^2 - variance is not positive: there is no threshold
        and therefore no warning.
        """
        if not expenses:
            return None
        values = [record.value for record in expenses]
        mean = sum(values) / len(values)
        variance = sum((v - mean) ** 2 for v in values) / len(values)
        radicand = self._omega0 ** 2 - variance
        if radicand <= 0:
            return None
        return 2 * math.sqrt(radicand)

    def _check_category_limits(self, snapshot: RecordSnapshot) -> list[ValidationIssue]:
        issues = []
        limit = self._settings.category_limit
        currency = self._settings.currency

        totals = PeriodAggregator.totals_by_category(snapshot.expenses)
        for category, total in sorted(totals.items()):
            if total > limit:
                issues.append(ValidationIssue(
                    field="category",
                    issue_type="category_limit_exceeded",
                    message=(
                        f"Spending on '{category}' ({currency}{total:,.2f}) "
                        f"exceeds the limit of {currency}{limit:,.2f}"
                    ),
                    severity="warning",
                    suggested_fix=f"Reduce spending on {category}",
                ))
        return issues

    def _check_entropy(self, snapshot: RecordSnapshot) -> list[ValidationIssue]:
        threshold = self.entropy_threshold(snapshot.expenses)
        if threshold is None:
            return []

        entropy = record_entropy(snapshot.expenses)
        if entropy <= threshold:
            return []

        return [ValidationIssue(
            field="expenses",
            issue_type="entropy_threshold_exceeded",
            message=(
                f"Spending entropy ({entropy:.3f}) exceeds the critical "
                f"threshold ({threshold:.3f})"
            ),
            severity="warning",
            suggested_fix="Adjust spending distribution",
        )]

    def validate(self, snapshot: RecordSnapshot) -> ValidationResult:
        """Run all budget checks on a snapshot."""
        if snapshot.is_empty:
            return ValidationResult(
                is_valid=True,
                issues=[ValidationIssue(
                    field="records",
                    issue_type="no_records",
                    message="No income or expense records yet",
                    severity="info",
                )],
            )

        issues = []
        issues.extend(self._check_category_limits(snapshot))
        issues.extend(self._check_entropy(snapshot))

        return ValidationResult(
            is_valid=not any(issue.severity == "error" for issue in issues),
            issues=issues,
        )

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """
        Generate a user-friendly summary of validation results.
        """
        warnings = [i for i in result.issues if i.severity == "warning"]
        if result.is_valid and not warnings:
            return "✅ Budget looks fine."

        lines = ["⚠️ Please review the following:"]
        for issue in result.issues:
            if issue.severity == "info":
                continue
            lines.append(f"   • {issue.message}")
            if issue.suggested_fix:
                lines.append(f"     💡 {issue.suggested_fix}")

        return "\n".join(lines)

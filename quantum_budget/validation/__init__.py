"""Budget validation package."""

from quantum_budget.validation.validator import BudgetValidator

__all__ = ["BudgetValidator"]

"""Configuration package."""

from quantum_budget.config.settings import (
    AppSettings,
    BudgetSettings,
    CouplingSettings,
    ForecastSettings,
    GraphSettings,
    Settings,
    StabilitySettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "BudgetSettings",
    "CouplingSettings",
    "ForecastSettings",
    "GraphSettings",
    "Settings",
    "StabilitySettings",
    "get_settings",
    "validate_all_settings",
]

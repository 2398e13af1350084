"""
Configuration Management for Quantum Budget

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All tunable constants live here.
The reference values of the coupling network, the collapse test and
the forecaster are defaults, not literals scattered across modules,
so an outer application can retune them without touching the math.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GraphSettings(BaseSettings):
    """Coupling network construction parameters."""

    model_config = SettingsConfigDict(
        env_prefix="QB_GRAPH_",
        extra="ignore"
    )

    min_nodes: int = Field(
        default=8,
        ge=2,
        description="Smallest network ever built"
    )
    max_nodes: int = Field(
        default=30,
        ge=2,
        description="Largest network ever built"
    )
    node_count_offset: int = Field(
        default=5,
        ge=0,
        description="Added to the record count to form the node count hint"
    )
    max_span: int = Field(
        default=3,
        ge=1,
        description="Largest index distance between two connected nodes"
    )
    connection_factor: float = Field(
        default=0.8,
        gt=0.0,
        description="Connection probability numerator (k in k / span)"
    )
    min_base_strength: float = Field(
        default=0.3,
        ge=0.0,
        le=1.0,
    )
    max_base_strength: float = Field(
        default=1.0,
        ge=0.0,
        le=1.0,
    )

    @model_validator(mode='after')
    def validate_ranges(self) -> 'GraphSettings':
        """Bounds must be ordered."""
        if self.min_nodes > self.max_nodes:
            raise ValueError("min_nodes cannot exceed max_nodes")
        if self.min_base_strength > self.max_base_strength:
            raise ValueError("min_base_strength cannot exceed max_base_strength")
        return self


class CouplingSettings(BaseSettings):
    """Time-varying edge weight parameters."""

    model_config = SettingsConfigDict(
        env_prefix="QB_COUPLING_",
        extra="ignore"
    )

    omega0: float = Field(
        default=0.1,
        gt=0.0,
        description="Base angular frequency"
    )
    phase_divisor: float = Field(
        default=7.0,
        gt=0.0,
        description="Phase offset per edge is (i + j) * pi / phase_divisor"
    )
    scale_chaos_by_size: bool = Field(
        default=True,
        description="Scale the chaos term by 1 + ln(N) / 10"
    )


class StabilitySettings(BaseSettings):
    """Entropy history and collapse test parameters."""

    model_config = SettingsConfigDict(
        env_prefix="QB_STABILITY_",
        extra="ignore"
    )

    capacity: int = Field(
        default=20,
        ge=3,
        description="Maximum number of entropy samples kept"
    )
    min_samples: int = Field(
        default=5,
        ge=3,
        description="Samples required before the collapse test runs"
    )
    threshold: float = Field(
        default=0.5,
        gt=0.0,
        description="Residual magnitude that flags a collapse"
    )
    noise_variance: float = Field(
        default=0.005,
        ge=0.0,
        description="Fixed noise variance used in the damping coefficient"
    )
    poll_interval_seconds: float = Field(
        default=5.0,
        gt=0.0,
        description="Cadence of the monitoring loop"
    )

    @model_validator(mode='after')
    def validate_window(self) -> 'StabilitySettings':
        """The collapse test must be reachable within the window."""
        if self.min_samples > self.capacity:
            raise ValueError("min_samples cannot exceed capacity")
        return self


class ForecastSettings(BaseSettings):
    """Next-period prediction parameters."""

    model_config = SettingsConfigDict(
        env_prefix="QB_FORECAST_",
        extra="ignore"
    )

    mode: Literal["recursive", "regression"] = Field(
        default="regression",
        description="Prediction scheme used by Forecaster.predict"
    )
    growth_factor: float = Field(
        default=1.05,
        description="Per-step growth applied by the recursive projection"
    )
    alpha: float = Field(
        default=0.7,
        ge=0.0,
        le=1.0,
        description="Weight of the current value in the recursive blend"
    )
    lam: float = Field(
        default=0.3,
        ge=0.0,
        le=1.0,
        description="Weight of the projected value in the recursive blend"
    )
    depth: int = Field(
        default=5,
        ge=0,
        le=50,
    )
    tolerance: float = Field(
        default=0.01,
        ge=0.0,
    )
    recent_window: int = Field(
        default=5,
        ge=1,
        description="Aggregates averaged to seed the recursive projection"
    )
    apply_noise: bool = Field(
        default=False,
        description="Perturb regression predictions with bounded noise"
    )
    noise_scale: float = Field(
        default=0.1,
        ge=0.0,
        le=1.0,
        description="Noise amplitude as a fraction of the sample standard deviation"
    )


class BudgetSettings(BaseSettings):
    """Budget sanity-check limits."""

    model_config = SettingsConfigDict(
        env_prefix="QB_BUDGET_",
        extra="ignore"
    )

    category_limit: float = Field(
        default=1000.0,
        gt=0.0,
        description="Spending limit per expense category"
    )
    currency: str = Field(
        default="RM",
        description="Currency label used in messages"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    # Redraw and channel behaviour
    redraw_throttle_seconds: float = Field(
        default=0.3,
        ge=0.0,
        description="Minimum gap between two dispatched graph requests"
    )
    channel_capacity: int = Field(
        default=8,
        ge=1,
        le=1024,
        description="Pending requests the worker channel holds"
    )
    channel_retry_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
    )
    channel_retry_wait_seconds: float = Field(
        default=0.05,
        ge=0.0,
        description="Base wait between submission retries"
    )


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def graph(self) -> GraphSettings:
        return GraphSettings()

    @property
    def coupling(self) -> CouplingSettings:
        return CouplingSettings()

    @property
    def stability(self) -> StabilitySettings:
        return StabilitySettings()

    @property
    def forecast(self) -> ForecastSettings:
        return ForecastSettings()

    @property
    def budget(self) -> BudgetSettings:
        return BudgetSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    for name in ("graph", "coupling", "stability", "forecast", "budget", "app"):
        try:
            _ = getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results

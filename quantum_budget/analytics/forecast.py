"""
Forecaster

Predicts the next value of a period-aggregate series (monthly income or
monthly expense totals). Two schemes, selected by configuration:

REGRESSION (default):
    Ordinary least squares over (index, value) pairs, evaluated one step
    past the end. Optionally perturbed by bounded uniform noise whose
    scale is the sample standard deviation of the series.

RECURSIVE:
    Seed with the mean of the most recent aggregates, then project
        result = alpha * x + lam * project(x * growth_factor)
    until the step change drops below tolerance or depth runs out.
    Deterministic; a smoothing heuristic rather than an estimator.
    predict_recursive is also available directly for a single value.

Predictions are never negative: aggregates cannot be.
"""

import random
import statistics
from collections.abc import Sequence
from typing import Optional

from quantum_budget.config import ForecastSettings, get_settings


class Forecaster:
    """Next-period prediction over an ordered series of aggregates."""

    def __init__(
        self,
        settings: Optional[ForecastSettings] = None,
        rng: Optional[random.Random] = None,
    ):
        self._settings = settings or get_settings().forecast
        self._rng = rng or random.Random()

    @property
    def mode(self) -> str:
        return self._settings.mode

    def predict(self, values: Sequence[float]) -> float:
        """Predict the value following `values` using the configured mode."""
        if self._settings.mode == "regression":
            return self.predict_linear(values, noise=self._settings.apply_noise)
        return self.predict_smoothed(values)

    # ------------------------------------------------------------------
    # Regression
    # ------------------------------------------------------------------

    @staticmethod
    def fit_line(values: Sequence[float]) -> tuple[float, float]:
        """
        Least-squares (slope, intercept) with x = 0..n-1.

        Fewer than two points give a flat line through the sole value
        (or through 0).
        """
        n = len(values)
        if n == 0:
            return 0.0, 0.0
        if n == 1:
            return 0.0, float(values[0])

        sum_x = n * (n - 1) / 2
        sum_xx = (n - 1) * n * (2 * n - 1) / 6
        sum_y = sum(values)
        sum_xy = sum(x * y for x, y in enumerate(values))

        slope = (n * sum_xy - sum_x * sum_y) / (n * sum_xx - sum_x ** 2)
        intercept = (sum_y - slope * sum_x) / n
        return slope, intercept

    def predict_linear(self, values: Sequence[float], noise: bool = False) -> float:
        """Regression prediction for index n, optionally with noise."""
        slope, intercept = self.fit_line(values)
        predicted = intercept + slope * len(values)

        if noise and len(values) >= 2:
            spread = statistics.stdev(values) * self._settings.noise_scale
            predicted += self._rng.uniform(-spread, spread)

        return max(0.0, predicted)

    # ------------------------------------------------------------------
    # Recursive damping
    # ------------------------------------------------------------------

    def predict_smoothed(self, values: Sequence[float]) -> float:
        """Recursive projection seeded by the mean of the recent window."""
        if not values:
            return 0.0
        recent = list(values)[-self._settings.recent_window:]
        return self.predict_recursive(sum(recent) / len(recent))

    def predict_recursive(
        self,
        current: float,
        depth: Optional[int] = None,
        tolerance: Optional[float] = None,
    ) -> float:
        """Damped projection of a single value."""
        depth = self._settings.depth if depth is None else depth
        tolerance = self._settings.tolerance if tolerance is None else tolerance
        return max(0.0, self._project(current, depth, tolerance, None))

    def _project(
        self,
        data: float,
        depth: int,
        tolerance: float,
        previous: Optional[float],
    ) -> float:
        if depth <= 0:
            return data

        following = data * self._settings.growth_factor
        if previous is not None and abs(following - previous) < tolerance:
            return following

        return (
            self._settings.alpha * data
            + self._settings.lam * self._project(following, depth - 1, tolerance, data)
        )

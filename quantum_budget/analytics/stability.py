"""
Stability Monitor

Keeps a sliding window of entropy samples and tests it against a damped
harmonic oscillator around the window mean:

    d2S + gamma * dS + omega0^2 * (S - S_eq)

with first and second differences dS, d2S, equilibrium S_eq (the mean of
the window) and damping gamma = 2 * sqrt(omega0^2 - noise_variance).
A residual larger than the threshold at any interior index flags an
approaching collapse.

The noise variance is a fixed configured constant, not the variance of
the samples. A negative radicand means gamma = 0.

This is a heuristic early-warning signal, not a proof of distress.
"""

import math
from collections import deque
from typing import Optional

from quantum_budget.config import StabilitySettings, get_settings


class StabilityMonitor:
    """
    Rolling entropy history with a collapse test.

    The history is owned by the caller's process; it is never shared
    with the coupling worker.
    """

    def __init__(
        self,
        settings: Optional[StabilitySettings] = None,
        omega0: Optional[float] = None,
    ):
        self._settings = settings or get_settings().stability
        self._omega0 = omega0 if omega0 is not None else get_settings().coupling.omega0
        self._history: deque[float] = deque(maxlen=self._settings.capacity)

    @property
    def history(self) -> tuple[float, ...]:
        """Samples in chronological order, oldest first."""
        return tuple(self._history)

    @property
    def capacity(self) -> int:
        return self._settings.capacity

    def __len__(self) -> int:
        return len(self._history)

    def observe(self, sample: float) -> None:
        """Append a sample; the oldest one is evicted beyond capacity."""
        self._history.append(float(sample))

    def clear(self) -> None:
        self._history.clear()

    @property
    def damping(self) -> float:
        radicand = self._omega0 ** 2 - self._settings.noise_variance
        if radicand <= 0:
            return 0.0
        return 2 * math.sqrt(radicand)

    def residuals(self) -> list[float]:
        """Oscillator residual for every interior index (2 <= i < len)."""
        h = self._history
        if len(h) < 3:
            return []

        equilibrium = sum(h) / len(h)
        gamma = self.damping
        omega_sq = self._omega0 ** 2

        result = []
        for i in range(2, len(h)):
            ds = h[i] - h[i - 1]
            d2s = h[i] - 2 * h[i - 1] + h[i - 2]
            result.append(d2s + gamma * ds + omega_sq * (h[i] - equilibrium))
        return result

    def is_approaching_collapse(self) -> bool:
        """False until min_samples samples exist."""
        if len(self._history) < self._settings.min_samples:
            return False
        return any(abs(r) > self._settings.threshold for r in self.residuals())

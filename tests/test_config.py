"""Tests for configuration loading and validation."""

import pytest

from quantum_budget.config import (
    ForecastSettings,
    GraphSettings,
    StabilitySettings,
    validate_all_settings,
)


class TestSettings:
    """Tests for the settings classes."""

    def test_stability_defaults(self):
        """The window holds more samples than the collapse test needs."""
        settings = StabilitySettings()
        assert settings.capacity == 20
        assert settings.min_samples == 5
        assert settings.noise_variance == pytest.approx(0.005)

    def test_stability_rejects_unreachable_collapse_test(self):
        """min_samples above capacity could never be satisfied."""
        with pytest.raises(ValueError, match="min_samples cannot exceed capacity"):
            StabilitySettings(capacity=3, min_samples=5)

    def test_stability_accepts_equal_bounds(self):
        """A window exactly min_samples long is valid."""
        settings = StabilitySettings(capacity=5, min_samples=5)
        assert settings.capacity == settings.min_samples

    def test_graph_rejects_inverted_node_range(self):
        """min_nodes must not exceed max_nodes."""
        with pytest.raises(ValueError, match="min_nodes cannot exceed max_nodes"):
            GraphSettings(min_nodes=40, max_nodes=30)

    def test_forecast_default_mode(self):
        """Sequence prediction defaults to linear regression."""
        assert ForecastSettings().mode == "regression"

    def test_forecast_rejects_unknown_mode(self):
        """Only the two schemes are accepted."""
        with pytest.raises(ValueError):
            ForecastSettings(mode="average")

    def test_validate_all_settings(self):
        """Every section loads with defaults."""
        results = validate_all_settings()
        for name in ("graph", "coupling", "stability", "forecast", "budget", "app"):
            assert results[name] is True

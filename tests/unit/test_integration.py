"""
Unit tests for navhydro/physics/integration.py

Rule selection and exactness of the integration engine.
"""

import pytest
import numpy as np

from navhydro.errors import ErrorCode, ParameterInvalidError
from navhydro.physics.integration import IntegrationEngine


class TestRuleSelection:
    """Simpson for odd uniform samples, trapezoid otherwise."""

    def setup_method(self):
        self.engine = IntegrationEngine()

    def test_simpson_exact_for_cubic(self):
        """Simpson's rule integrates x³ exactly."""
        x = np.linspace(0.0, 2.0, 5)
        assert self.engine.integrate(x, x ** 3) == pytest.approx(4.0, abs=1e-12)

    def test_simpson_exact_for_parabola(self):
        """∫0..L (1 − (2x/L − 1)²) dx = 2L/3."""
        length = 10.0
        x = np.linspace(0.0, length, 11)
        y = 1.0 - (2.0 * x / length - 1.0) ** 2
        assert self.engine.integrate(x, y) == pytest.approx(2.0 * length / 3.0, abs=1e-12)

    def test_even_point_count_uses_trapezoid(self):
        """Four points: trapezoid, exact for linear data but not for x²."""
        x = np.linspace(0.0, 3.0, 4)
        assert self.engine.integrate(x, x) == pytest.approx(4.5)
        # trapezoid over x² on 0..3 with h=1 gives 9.5, Simpson-like rules would give 9
        assert self.engine.integrate(x, x ** 2) == pytest.approx(9.5)

    def test_non_uniform_spacing_uses_trapezoid(self):
        x = [0.0, 0.5, 2.0]
        y = [v * v for v in x]
        expected = 0.5 * (0.0 + 0.25) * 0.5 + 0.5 * (0.25 + 4.0) * 1.5
        assert self.engine.integrate(x, y) == pytest.approx(expected)

    def test_spacing_within_tolerance_counts_as_uniform(self):
        x = [0.0, 1.0004, 2.0]
        assert self.engine.is_uniform(x) is True
        assert self.engine.is_uniform([0.0, 1.01, 2.0]) is False

    def test_fewer_than_two_points_is_zero(self):
        assert self.engine.integrate([], []) == 0.0
        assert self.engine.integrate([1.0], [5.0]) == 0.0

    def test_two_points(self):
        assert self.engine.integrate([0.0, 2.0], [1.0, 3.0]) == pytest.approx(4.0)

    def test_mismatched_lengths_raise(self):
        with pytest.raises(ParameterInvalidError) as exc:
            self.engine.integrate([0.0, 1.0, 2.0], [1.0, 2.0])
        assert exc.value.code == ErrorCode.PAR_LENGTH_MISMATCH


class TestDirectRules:
    """simpson() and trapezoid() called directly."""

    def setup_method(self):
        self.engine = IntegrationEngine()

    def test_simpson_rejects_even_count(self):
        with pytest.raises(ParameterInvalidError):
            self.engine.simpson([0.0, 1.0, 2.0, 3.0], [0.0, 1.0, 2.0, 3.0])

    def test_simpson_rejects_non_uniform(self):
        with pytest.raises(ParameterInvalidError):
            self.engine.simpson([0.0, 0.5, 2.0], [0.0, 1.0, 2.0])

    def test_trapezoid_on_odd_uniform_samples(self):
        x = np.linspace(0.0, 2.0, 3)
        assert self.engine.trapezoid(x, x ** 2) == pytest.approx(3.0)

    def test_trapezoid_rejects_decreasing_abscissae(self):
        with pytest.raises(ParameterInvalidError):
            self.engine.trapezoid([0.0, 2.0, 1.0, 3.0], [1.0, 1.0, 1.0, 1.0])


class TestMoments:

    def setup_method(self):
        self.engine = IntegrationEngine()

    def test_first_moment(self):
        x = np.linspace(0.0, 2.0, 5)
        assert self.engine.first_moment(x, np.ones_like(x)) == pytest.approx(2.0)

    def test_second_moment(self):
        x = np.linspace(0.0, 3.0, 7)
        assert self.engine.second_moment(x, np.ones_like(x)) == pytest.approx(9.0)

    def test_custom_spacing_tolerance(self):
        loose = IntegrationEngine(spacing_tolerance=0.1)
        assert loose.is_uniform([0.0, 1.04, 2.0]) is True

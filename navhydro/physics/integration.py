"""
physics/integration.py - Numerical integration of tabulated ordinates

Composite Simpson's 1/3 rule when the samples allow it, composite
trapezoidal rule otherwise. Used for section areas, volumes, moments,
waterplane inertia and areas under the GZ curve.
"""

from __future__ import annotations
from typing import Sequence
import logging

import numpy as np

from navhydro.core.constants import SPACING_TOLERANCE_M
from navhydro.errors import ErrorCode, ParameterInvalidError

logger = logging.getLogger(__name__)


class IntegrationEngine:
    """
    Definite integral of y(x) over sampled points.

    Rule selection for :meth:`integrate`:
        - fewer than 2 points: 0.0
        - odd point count (even interval count) and uniform spacing:
          composite Simpson's 1/3 rule
        - anything else: composite trapezoidal rule

    Args:
        spacing_tolerance: Maximum deviation between intervals for the
            spacing to count as uniform
    """

    def __init__(self, spacing_tolerance: float = SPACING_TOLERANCE_M):
        self.spacing_tolerance = spacing_tolerance

    def integrate(self, x: Sequence[float], y: Sequence[float]) -> float:
        """Integrate y dx choosing Simpson or trapezoid."""
        xa, ya = self._as_arrays(x, y)
        n = len(xa)
        if n < 2:
            return 0.0

        if n >= 3 and n % 2 == 1 and self.is_uniform(xa):
            logger.debug(f"Simpson's rule over {n} points")
            return self._simpson(xa, ya)

        logger.debug(f"Trapezoidal rule over {n} points")
        return self._trapezoid(xa, ya)

    def simpson(self, x: Sequence[float], y: Sequence[float]) -> float:
        """
        Composite Simpson's 1/3 rule.

        h/3 · (y0 + 4·Σy_odd + 2·Σy_even_interior + yn)

        Raises:
            ParameterInvalidError: if the samples are not an odd count of
                uniformly spaced points
        """
        xa, ya = self._as_arrays(x, y)
        if len(xa) < 3 or len(xa) % 2 == 0:
            raise ParameterInvalidError(
                f"Simpson's rule requires an odd number of points (>= 3), got {len(xa)}",
                code=ErrorCode.PAR_POINT_COUNT,
                parameter="x",
                value=len(xa),
            )
        if not self.is_uniform(xa):
            raise ParameterInvalidError(
                "Simpson's rule requires equally spaced points",
                code=ErrorCode.PAR_INVALID,
                parameter="x",
            )
        return self._simpson(xa, ya)

    def trapezoid(self, x: Sequence[float], y: Sequence[float]) -> float:
        """Composite trapezoidal rule: Σ 0.5·(y_i + y_i+1)·(x_i+1 − x_i)."""
        xa, ya = self._as_arrays(x, y)
        if len(xa) < 2:
            return 0.0
        return self._trapezoid(xa, ya)

    def first_moment(self, x: Sequence[float], y: Sequence[float]) -> float:
        """∫ x·y dx"""
        xa, ya = self._as_arrays(x, y)
        return self.integrate(xa, xa * ya)

    def second_moment(self, x: Sequence[float], y: Sequence[float]) -> float:
        """∫ x²·y dx"""
        xa, ya = self._as_arrays(x, y)
        return self.integrate(xa, xa * xa * ya)

    def is_uniform(self, x: Sequence[float]) -> bool:
        """True when every interval matches the first within tolerance."""
        xa = np.asarray(x, dtype=float)
        if len(xa) < 3:
            return True
        dx = np.diff(xa)
        return bool(np.all(np.abs(dx - dx[0]) <= self.spacing_tolerance))

    # =========================================================================
    # RULES
    # =========================================================================

    @staticmethod
    def _simpson(x: np.ndarray, y: np.ndarray) -> float:
        h = (x[-1] - x[0]) / (len(x) - 1)
        total = y[0] + y[-1] + 4.0 * y[1:-1:2].sum() + 2.0 * y[2:-1:2].sum()
        return float(h / 3.0 * total)

    @staticmethod
    def _trapezoid(x: np.ndarray, y: np.ndarray) -> float:
        dx = np.diff(x)
        if np.any(dx < 0):
            raise ParameterInvalidError(
                "Abscissae must be non-decreasing",
                code=ErrorCode.PAR_INVALID,
                parameter="x",
            )
        return float(np.sum(0.5 * (y[:-1] + y[1:]) * dx))

    @staticmethod
    def _as_arrays(x: Sequence[float], y: Sequence[float]):
        xa = np.asarray(x, dtype=float)
        ya = np.asarray(y, dtype=float)
        if xa.shape != ya.shape:
            raise ParameterInvalidError(
                f"x and y must have the same length ({len(xa)} != {len(ya)})",
                code=ErrorCode.PAR_LENGTH_MISMATCH,
                parameter="y",
            )
        return xa, ya

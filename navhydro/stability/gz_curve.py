"""
navhydro GZ Curve Calculator

Generates righting arm (GZ) and cross-curve (KN) data for one draft and
loadcase over a heel-angle sweep.

Wall-sided method, from upright hydrostatics:
    KN = KB·sin(φ) + BMt·sin(φ)·(1 + tan²(φ)/2)

Full-immersion method, from heeled section polygons:
    KN = y_B·cos(φ) + z_B·sin(φ)

In both cases GZ = KN − KG·sin(φ). Areas under the curve are in m-rad.
"""

from __future__ import annotations
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union
import logging
import math
import numbers
import time

import numpy as np

from navhydro.core.constants import (
    DEFAULT_HEEL_STEP_DEG,
    DEFAULT_MAX_HEEL_DEG,
    DEFAULT_MIN_HEEL_DEG,
    DRAFT_SNAP_TOLERANCE_M,
    HEELED_WATERLINE_XTOL_M,
    WALL_SIDED_ACCURACY_LIMIT_DEG,
    WALL_SIDED_MAX_HEEL_DEG,
)
from navhydro.core.geometry import HullGeometry, Loadcase, PrincipalDimensions
from navhydro.errors import (
    ErrorCode,
    NotComputableError,
    NotComputableReason,
    ParameterInvalidError,
)
from navhydro.physics.hydrostatics import HydroResult, HydrostaticsCalculator
from navhydro.stability.constants import METHOD_CATALOGUE, StabilityMethod
from navhydro.stability.heeled import HeeledHull

logger = logging.getLogger(__name__)

# Upper bound for any heel sweep (capsized)
MAX_SWEEP_ANGLE_DEG = 180.0

# Angles closer than this are the same sample
ANGLE_TOLERANCE_DEG = 1e-9


# =============================================================================
# RESULTS
# =============================================================================

@dataclass
class StabilityPoint:
    """Single point on the GZ curve."""
    heel_angle: float
    gz: float
    kn: float

    def to_dict(self) -> Dict[str, float]:
        return {"heel_angle": self.heel_angle, "gz": self.gz, "kn": self.kn}


@dataclass
class StabilityCurve:
    """
    Righting arm curve with its summary values.

    ``vanishing_angle_found`` is False when GZ never dropped to zero after
    becoming positive; ``vanishing_angle`` then holds the end of the sweep,
    not a physical vanishing angle. Areas are None when the sweep does not
    cover their angle range.
    """
    points: List[StabilityPoint]
    method: str
    draft: float
    kg: float
    displacement: float
    initial_gmt: float

    max_gz: float = 0.0
    angle_at_max_gz: float = 0.0
    vanishing_angle: float = 0.0
    vanishing_angle_found: bool = False

    # Areas under curve (m-rad)
    area_0_30: Optional[float] = None
    area_30_vanishing: Optional[float] = None
    area_0_40: Optional[float] = None
    area_30_40: Optional[float] = None
    gz_at_30: Optional[float] = None

    calculation_time_ms: int = 0
    warnings: List[str] = field(default_factory=list)

    @property
    def angles(self) -> List[float]:
        return [p.heel_angle for p in self.points]

    @property
    def gz_values(self) -> List[float]:
        return [p.gz for p in self.points]

    def gz_at(self, angle: float) -> Optional[float]:
        """Linearly interpolated GZ, or None outside the sweep."""
        angles = self.angles
        if not angles or angle < angles[0] - ANGLE_TOLERANCE_DEG or angle > angles[-1] + ANGLE_TOLERANCE_DEG:
            return None
        return float(np.interp(angle, angles, self.gz_values))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "points": [p.to_dict() for p in self.points],
            "method": self.method,
            "draft": self.draft,
            "kg": self.kg,
            "displacement": self.displacement,
            "initial_gmt": self.initial_gmt,
            "max_gz": self.max_gz,
            "angle_at_max_gz": self.angle_at_max_gz,
            "vanishing_angle": self.vanishing_angle,
            "vanishing_angle_found": self.vanishing_angle_found,
            "area_0_30": self.area_0_30,
            "area_30_vanishing": self.area_30_vanishing,
            "area_0_40": self.area_0_40,
            "area_30_40": self.area_30_40,
            "gz_at_30": self.gz_at_30,
            "calculation_time_ms": self.calculation_time_ms,
            "warnings": list(self.warnings),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StabilityCurve":
        points = [StabilityPoint(**p) for p in data.get("points", [])]
        return cls(
            points=points,
            method=data["method"],
            draft=data["draft"],
            kg=data["kg"],
            displacement=data["displacement"],
            initial_gmt=data["initial_gmt"],
            max_gz=data.get("max_gz", 0.0),
            angle_at_max_gz=data.get("angle_at_max_gz", 0.0),
            vanishing_angle=data.get("vanishing_angle", 0.0),
            vanishing_angle_found=data.get("vanishing_angle_found", False),
            area_0_30=data.get("area_0_30"),
            area_30_vanishing=data.get("area_30_vanishing"),
            area_0_40=data.get("area_0_40"),
            area_30_40=data.get("area_30_40"),
            gz_at_30=data.get("gz_at_30"),
            calculation_time_ms=data.get("calculation_time_ms", 0),
            warnings=list(data.get("warnings", [])),
        )


# =============================================================================
# GZ CURVE CALCULATOR
# =============================================================================

class GZCurveCalculator:
    """
    Calculator for GZ (righting arm) curves.

    Args:
        calculator: Upright hydrostatics, shared with the curve generator
        max_workers: Threads used across heel angles (1 = serial)
        xtol: Root-finding tolerance for the heeled waterline
    """

    def __init__(
        self,
        calculator: Optional[HydrostaticsCalculator] = None,
        max_workers: int = 1,
        xtol: float = HEELED_WATERLINE_XTOL_M,
    ):
        self.calculator = calculator or HydrostaticsCalculator()
        self.max_workers = max(1, int(max_workers))
        self.xtol = xtol

    @property
    def integration(self):
        return self.calculator.integration

    def generate_gz_curve(
        self,
        geometry: HullGeometry,
        dimensions: PrincipalDimensions,
        loadcase: Loadcase,
        draft: float,
        min_angle: float = DEFAULT_MIN_HEEL_DEG,
        max_angle: float = DEFAULT_MAX_HEEL_DEG,
        angle_increment: float = DEFAULT_HEEL_STEP_DEG,
        method: Union[str, StabilityMethod] = StabilityMethod.WALL_SIDED,
    ) -> StabilityCurve:
        """
        Sweep heel angles and build the GZ curve.

        Raises:
            ParameterInvalidError: invalid draft, angle range, step, method
                or missing KG; checked before any integration
            NotComputableError: upright hydrostatics undefined at ``draft``
        """
        start_time = time.perf_counter()
        stability_method = parse_method(method)
        _check_inputs(loadcase, draft, min_angle, max_angle, angle_increment, stability_method)
        draft = float(draft)

        upright = self.calculator.compute_at(geometry, dimensions, draft, loadcase).require()
        warnings: List[str] = list(upright.warnings)
        angles = heel_angles(min_angle, max_angle, angle_increment)

        if stability_method is StabilityMethod.WALL_SIDED:
            kn_at = self._wall_sided(upright)
            if max_angle > WALL_SIDED_ACCURACY_LIMIT_DEG:
                warnings.append(
                    f"Wall-sided formula less accurate above {WALL_SIDED_ACCURACY_LIMIT_DEG:.0f}°"
                )
        else:
            kn_at = self._full_immersion(geometry, draft)

        if self.max_workers > 1 and len(angles) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                kns = list(executor.map(kn_at, angles))
        else:
            kns = [kn_at(a) for a in angles]

        kg = loadcase.kg
        points = [
            StabilityPoint(heel_angle=a, gz=kn - kg * math.sin(math.radians(a)), kn=kn)
            for a, kn in zip(angles, kns)
        ]

        curve = StabilityCurve(
            points=points,
            method=stability_method.value,
            draft=draft,
            kg=kg,
            displacement=upright.displacement,
            initial_gmt=upright.gmt,
            warnings=warnings,
        )
        self._summarize(curve)
        curve.calculation_time_ms = int((time.perf_counter() - start_time) * 1000)

        logger.info(
            f"GZ curve ({curve.method}) at draft {draft}: {len(points)} angles, "
            f"max GZ {curve.max_gz:.4f} at {curve.angle_at_max_gz:.1f}°"
        )
        return curve

    def available_methods(self) -> List[Dict[str, Any]]:
        return [info.to_dict() for info in METHOD_CATALOGUE]

    # =========================================================================
    # KN METHODS
    # =========================================================================

    @staticmethod
    def _wall_sided(upright: HydroResult):
        kb, bmt = upright.kb, upright.bmt

        def kn_at(angle: float) -> float:
            phi = math.radians(angle)
            sin_phi = math.sin(phi)
            tan_phi = math.tan(phi)
            return kb * sin_phi + bmt * sin_phi * (1.0 + 0.5 * tan_phi * tan_phi)

        return kn_at

    def _full_immersion(self, geometry: HullGeometry, draft: float):
        if draft > geometry.top_z + DRAFT_SNAP_TOLERANCE_M:
            raise NotComputableError(
                NotComputableReason.DRAFT_ABOVE_TABULATED,
                f"Full-immersion method needs the draft within the tabulated hull "
                f"(draft {draft} > {geometry.top_z})",
            )
        hull = HeeledHull(geometry, self.integration, xtol=self.xtol)
        volume = hull.upright_volume(draft)

        def kn_at(angle: float) -> float:
            if angle == 0.0:
                return 0.0
            return hull.equilibrium(angle, volume).kn

        return kn_at

    # =========================================================================
    # POST-PROCESSING
    # =========================================================================

    def _summarize(self, curve: StabilityCurve) -> None:
        points = curve.points
        best = max(points, key=lambda p: p.gz)
        curve.max_gz = best.gz
        curve.angle_at_max_gz = best.heel_angle

        vanishing = find_vanishing_angle(points)
        if vanishing is None:
            curve.vanishing_angle = points[-1].heel_angle
            curve.vanishing_angle_found = False
            if best.gz <= 0:
                curve.warnings.append("GZ is never positive within the swept range")
            else:
                curve.warnings.append(
                    f"GZ does not vanish within the swept range; "
                    f"vanishing angle truncated at {curve.vanishing_angle}°"
                )
            logger.warning(f"No vanishing angle found up to {curve.vanishing_angle}°")
        else:
            curve.vanishing_angle = vanishing
            curve.vanishing_angle_found = True

        curve.area_0_30 = self.area_between(points, 0.0, 30.0)
        curve.area_0_40 = self.area_between(points, 0.0, 40.0)
        curve.area_30_40 = self.area_between(points, 30.0, 40.0)
        curve.gz_at_30 = curve.gz_at(30.0)

        if best.gz <= 0 or curve.vanishing_angle <= 30.0:
            curve.area_30_vanishing = 0.0
        else:
            curve.area_30_vanishing = self.area_between(points, 30.0, curve.vanishing_angle)

    def area_between(
        self,
        points: List[StabilityPoint],
        angle_start: float,
        angle_end: float,
    ) -> Optional[float]:
        """
        Area under GZ between two angles in m-rad (trapezoidal rule).

        Returns None when the curve does not cover the range.
        """
        angles = np.array([p.heel_angle for p in points])
        gz = np.array([p.gz for p in points])
        if angle_start < angles[0] - ANGLE_TOLERANCE_DEG or angle_end > angles[-1] + ANGLE_TOLERANCE_DEG:
            return None

        inside = (angles > angle_start) & (angles < angle_end)
        xs = np.concatenate([[angle_start], angles[inside], [angle_end]])
        ys = np.interp(xs, angles, gz)
        return self.integration.trapezoid(np.radians(xs), ys)


# =============================================================================
# HELPERS
# =============================================================================

def parse_method(value: Union[str, StabilityMethod]) -> StabilityMethod:
    """Accept enum members, values ("wall_sided") or names ("WallSided")."""
    if isinstance(value, StabilityMethod):
        return value
    key = str(value).strip().lower().replace("-", "_")
    for method in StabilityMethod:
        if key in (method.value, method.value.replace("_", "")):
            return method
    valid = ", ".join(m.value for m in StabilityMethod)
    raise ParameterInvalidError(
        f"Unknown stability method '{value}'. Valid: {valid}",
        code=ErrorCode.PAR_UNKNOWN_METHOD,
        parameter="method",
        value=value,
    )


def heel_angles(min_angle: float, max_angle: float, increment: float) -> List[float]:
    """``min + i·increment`` up to ``max_angle``, which is always the last sample."""
    steps = int(math.floor((max_angle - min_angle) / increment + ANGLE_TOLERANCE_DEG))
    angles = [min_angle + i * increment for i in range(steps + 1)]
    if max_angle - angles[-1] > ANGLE_TOLERANCE_DEG * max(1.0, abs(max_angle)):
        angles.append(max_angle)
    else:
        angles[-1] = max_angle
    return [float(a) for a in angles]


def find_vanishing_angle(points: List[StabilityPoint]) -> Optional[float]:
    """
    First positive-to-non-positive crossing after GZ has become positive.

    Linear interpolation between the last positive and first non-positive
    sample. None if GZ never becomes positive or never returns to zero.
    """
    seen_positive = False
    for prev, cur in zip(points, points[1:]):
        if prev.gz > 0:
            seen_positive = True
        if seen_positive and prev.gz > 0 and cur.gz <= 0:
            t = prev.gz / (prev.gz - cur.gz)
            return prev.heel_angle + t * (cur.heel_angle - prev.heel_angle)
    return None


def _check_inputs(
    loadcase: Loadcase,
    draft: float,
    min_angle: float,
    max_angle: float,
    increment: float,
    method: StabilityMethod,
) -> None:
    if not isinstance(draft, numbers.Real) or not math.isfinite(draft) or draft <= 0:
        raise ParameterInvalidError(
            f"Draft must be positive, got {draft!r}",
            code=ErrorCode.PAR_DRAFT,
            parameter="draft",
            value=draft,
        )
    if not loadcase.has_kg:
        raise ParameterInvalidError(
            "GZ curve requires a loadcase with KG",
            code=ErrorCode.PAR_MISSING_KG,
            parameter="kg",
        )
    for name, value in (("min_angle", min_angle), ("max_angle", max_angle)):
        if not isinstance(value, numbers.Real) or not math.isfinite(value):
            raise ParameterInvalidError(
                f"{name} must be a finite number, got {value!r}",
                code=ErrorCode.PAR_ANGLE_RANGE,
                parameter=name,
                value=value,
            )
    if min_angle >= max_angle:
        raise ParameterInvalidError(
            f"min_angle ({min_angle}) must be less than max_angle ({max_angle})",
            code=ErrorCode.PAR_ANGLE_RANGE,
            parameter="min_angle",
            value=min_angle,
        )
    if min_angle < 0 or max_angle > MAX_SWEEP_ANGLE_DEG:
        raise ParameterInvalidError(
            f"Heel range must lie within 0..{MAX_SWEEP_ANGLE_DEG:.0f}°, "
            f"got {min_angle}..{max_angle}",
            code=ErrorCode.PAR_ANGLE_RANGE,
            parameter="max_angle",
            value=max_angle,
        )
    if not isinstance(increment, numbers.Real) or not math.isfinite(increment) or increment <= 0:
        raise ParameterInvalidError(
            f"angle_increment must be positive, got {increment!r}",
            code=ErrorCode.PAR_STEP,
            parameter="angle_increment",
            value=increment,
        )
    if method is StabilityMethod.WALL_SIDED and max_angle >= WALL_SIDED_MAX_HEEL_DEG:
        raise ParameterInvalidError(
            f"Wall-sided method is undefined at {WALL_SIDED_MAX_HEEL_DEG:.0f}° and above; "
            f"got max_angle {max_angle}",
            code=ErrorCode.PAR_ANGLE_RANGE,
            parameter="max_angle",
            value=max_angle,
        )

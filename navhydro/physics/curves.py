"""
physics/curves.py - Bonjean and hydrostatic property curves

Bonjean curves come straight from the offsets grid: every tabulated
waterline is a draft sample. Hydrostatic curves sample an evenly spaced
draft range and project one HydroResult field per curve.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union
import logging
import numbers

import numpy as np
from scipy.integrate import cumulative_trapezoid

from navhydro.core.constants import DEFAULT_CURVE_POINTS
from navhydro.core.geometry import HullGeometry, Loadcase, PrincipalDimensions
from navhydro.errors import ErrorCode, ParameterInvalidError
from navhydro.physics.hydrostatics import HydroResult, HydrostaticsCalculator

logger = logging.getLogger(__name__)

DRAFT_LABEL = "Draft (m)"
# skip reason for a computable sample whose field has no value
UNDEFINED_SAMPLE = "undefined"


# =============================================================================
# CURVE TYPES
# =============================================================================

class CurveType(Enum):
    """Hydrostatic quantities that can be plotted against draft."""
    DISPLACEMENT = "displacement"
    VOLUME = "volume"
    KB = "kb"
    LCB = "lcb"
    LCF = "lcf"
    AWP = "awp"
    BMT = "bmt"
    BML = "bml"
    KMT = "kmt"
    GMT = "gmt"
    GML = "gml"
    TPC = "tpc"
    MCT = "mct"
    CB = "cb"
    CP = "cp"
    CM = "cm"
    CWP = "cwp"

    @property
    def y_label(self) -> str:
        return _Y_LABELS[self]

    @property
    def requires_kg(self) -> bool:
        return self in (CurveType.GMT, CurveType.GML, CurveType.MCT)


_Y_LABELS = {
    CurveType.DISPLACEMENT: "Displacement (kg)",
    CurveType.VOLUME: "Volume (m³)",
    CurveType.KB: "KB (m)",
    CurveType.LCB: "LCB (m)",
    CurveType.LCF: "LCF (m)",
    CurveType.AWP: "Waterplane Area (m²)",
    CurveType.BMT: "BMt (m)",
    CurveType.BML: "BMl (m)",
    CurveType.KMT: "KMt (m)",
    CurveType.GMT: "GMt (m)",
    CurveType.GML: "GMl (m)",
    CurveType.TPC: "TPC (kg/cm)",
    CurveType.MCT: "MCT (kg·m/cm)",
    CurveType.CB: "Cb",
    CurveType.CP: "Cp",
    CurveType.CM: "Cm",
    CurveType.CWP: "Cwp",
}


# =============================================================================
# CURVE DATA
# =============================================================================

@dataclass(frozen=True)
class CurvePoint:
    x: float
    y: float

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y}


@dataclass(frozen=True)
class Curve:
    """A sampled curve with ascending x."""
    curve_type: str
    x_label: str
    y_label: str
    points: Tuple[CurvePoint, ...] = ()
    # (draft, reason) for every sample left out of the curve
    skipped: Tuple[Tuple[float, str], ...] = ()

    @property
    def xs(self) -> List[float]:
        return [p.x for p in self.points]

    @property
    def ys(self) -> List[float]:
        return [p.y for p in self.points]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.curve_type,
            "x_label": self.x_label,
            "y_label": self.y_label,
            "points": [p.to_dict() for p in self.points],
            "skipped": [{"draft": d, "reason": r} for d, r in self.skipped],
        }


@dataclass(frozen=True)
class BonjeanCurve:
    """Sectional area of one station against draft."""
    station_index: int
    station_x: float
    points: Tuple[CurvePoint, ...] = ()

    @property
    def drafts(self) -> List[float]:
        return [p.x for p in self.points]

    @property
    def areas(self) -> List[float]:
        return [p.y for p in self.points]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "station_index": self.station_index,
            "station_x": self.station_x,
            "points": [p.to_dict() for p in self.points],
        }


# =============================================================================
# CURVES GENERATOR
# =============================================================================

class CurvesGenerator:
    """
    Draft-sweep curve generation on top of a HydrostaticsCalculator.

    Args:
        calculator: Calculator used for every draft sample
        default_point_count: Samples per curve when none is given
    """

    def __init__(
        self,
        calculator: Optional[HydrostaticsCalculator] = None,
        default_point_count: int = DEFAULT_CURVE_POINTS,
    ):
        self.calculator = calculator or HydrostaticsCalculator()
        self.default_point_count = default_point_count

    def generate_bonjean_curves(self, geometry: HullGeometry) -> List[BonjeanCurve]:
        """
        One Bonjean curve per station, sampled at every tabulated waterline.

        Areas accumulate strip by strip from the keel so each curve is
        non-decreasing for non-negative offsets.
        """
        drafts = [float(z) for z in geometry.z]
        # areas[i][j]: station i at waterline j
        areas = 2.0 * cumulative_trapezoid(geometry.half_breadths, geometry.z, axis=1, initial=0.0)

        curves = []
        for i, station in enumerate(geometry.stations):
            curves.append(BonjeanCurve(
                station_index=station.station_index,
                station_x=station.x,
                points=tuple(CurvePoint(d, float(areas[i][j])) for j, d in enumerate(drafts)),
            ))

        logger.info(f"Generated Bonjean curves: {len(curves)} stations")
        return curves

    def generate_hydrostatic_curves(
        self,
        geometry: HullGeometry,
        dimensions: PrincipalDimensions,
        loadcase: Loadcase,
        types: Iterable[Union[str, CurveType]],
        min_draft: float,
        max_draft: float,
        point_count: Optional[int] = None,
    ) -> Dict[str, Curve]:
        """
        Sample ``point_count`` evenly spaced drafts and build one curve per type.

        Samples that are not computable, or whose field is undefined, are
        left out of the affected curve and listed in its ``skipped`` pairs
        with the not-computable reason or ``"undefined"``.

        Raises:
            ParameterInvalidError: bad draft range, point count or curve type,
                or a KG-dependent curve requested without KG
        """
        curve_types = [_parse_curve_type(t) for t in types]
        if not curve_types:
            raise ParameterInvalidError(
                "At least one curve type is required",
                code=ErrorCode.PAR_UNKNOWN_CURVE,
                parameter="types",
            )
        for ct in curve_types:
            if ct.requires_kg and not loadcase.has_kg:
                raise ParameterInvalidError(
                    f"Curve '{ct.value}' requires a loadcase with KG",
                    code=ErrorCode.PAR_MISSING_KG,
                    parameter="kg",
                )

        drafts = self.draft_range(min_draft, max_draft, point_count or self.default_point_count)
        results = self.calculator.compute_table(geometry, dimensions, drafts, loadcase)

        curves = {ct.value: _project(ct, results) for ct in curve_types}
        logger.info(f"Generated {len(curves)} hydrostatic curves over {len(drafts)} drafts")
        return curves

    def generate_curve(
        self,
        geometry: HullGeometry,
        dimensions: PrincipalDimensions,
        loadcase: Loadcase,
        curve_type: Union[str, CurveType],
        min_draft: float,
        max_draft: float,
        point_count: Optional[int] = None,
    ) -> Curve:
        """Single-type shortcut for :meth:`generate_hydrostatic_curves`."""
        ct = _parse_curve_type(curve_type)
        curves = self.generate_hydrostatic_curves(
            geometry, dimensions, loadcase, [ct], min_draft, max_draft, point_count
        )
        return curves[ct.value]

    @staticmethod
    def draft_range(min_draft: float, max_draft: float, point_count: int) -> List[float]:
        """Evenly spaced drafts, both ends included."""
        if not isinstance(point_count, numbers.Integral) or point_count < 2:
            raise ParameterInvalidError(
                f"At least 2 points required, got {point_count!r}",
                code=ErrorCode.PAR_POINT_COUNT,
                parameter="point_count",
                value=point_count,
            )
        if min_draft < 0:
            raise ParameterInvalidError(
                f"Min draft must be non-negative, got {min_draft}",
                code=ErrorCode.PAR_DRAFT,
                parameter="min_draft",
                value=min_draft,
            )
        if max_draft <= min_draft:
            raise ParameterInvalidError(
                f"Max draft ({max_draft}) must be greater than min draft ({min_draft})",
                code=ErrorCode.PAR_DRAFT,
                parameter="max_draft",
                value=max_draft,
            )
        return [float(d) for d in np.linspace(min_draft, max_draft, int(point_count))]


# =============================================================================
# HELPERS
# =============================================================================

def _parse_curve_type(value: Union[str, CurveType]) -> CurveType:
    if isinstance(value, CurveType):
        return value
    try:
        return CurveType(str(value).lower())
    except ValueError:
        valid = ", ".join(ct.value for ct in CurveType)
        raise ParameterInvalidError(
            f"Unknown curve type '{value}'. Valid: {valid}",
            code=ErrorCode.PAR_UNKNOWN_CURVE,
            parameter="types",
            value=value,
        ) from None


def _project(curve_type: CurveType, results: Sequence[HydroResult]) -> Curve:
    points = []
    skipped = []
    for r in results:
        if not r.computable:
            skipped.append((r.draft, r.reason.value))
            continue
        value = r.get(curve_type.value)
        if value is None:
            skipped.append((r.draft, UNDEFINED_SAMPLE))
            continue
        points.append(CurvePoint(r.draft, float(value)))
    if skipped:
        logger.debug(f"Skipped {len(skipped)} drafts for '{curve_type.value}' curve")
    return Curve(
        curve_type=curve_type.value,
        x_label=DRAFT_LABEL,
        y_label=curve_type.y_label,
        points=tuple(points),
        skipped=tuple(skipped),
    )

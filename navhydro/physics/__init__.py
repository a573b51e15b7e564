"""
navhydro Physics

Numerical integration, upright hydrostatics and draft-sweep curves.
"""

from .integration import IntegrationEngine

from .hydrostatics import (
    DraftPolicy,
    ResultStatus,
    HydroResult,
    HydrostaticsCalculator,
)

from .curves import (
    CurveType,
    CurvePoint,
    Curve,
    BonjeanCurve,
    CurvesGenerator,
)

__all__ = [
    "IntegrationEngine",
    "DraftPolicy",
    "ResultStatus",
    "HydroResult",
    "HydrostaticsCalculator",
    "CurveType",
    "CurvePoint",
    "Curve",
    "BonjeanCurve",
    "CurvesGenerator",
]

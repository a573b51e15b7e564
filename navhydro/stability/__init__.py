"""
navhydro Stability

Large-angle righting arm (GZ/KN) curves and IMO intact criteria.
"""

from .constants import (
    IMO_INTACT,
    IMOIntactCriteria,
    StabilityMethod,
    MethodInfo,
    METHOD_CATALOGUE,
)

from .heeled import (
    HeeledBuoyancy,
    HeeledHull,
    section_polygon,
    clip_below,
    polygon_properties,
)

from .gz_curve import (
    StabilityPoint,
    StabilityCurve,
    GZCurveCalculator,
    parse_method,
    heel_angles,
    find_vanishing_angle,
)

from .criteria import (
    CriterionResult,
    CriteriaResults,
    check_intact_criteria,
)

__all__ = [
    # Criteria constants
    "IMO_INTACT",
    "IMOIntactCriteria",
    "StabilityMethod",
    "MethodInfo",
    "METHOD_CATALOGUE",
    # Heeled geometry
    "HeeledBuoyancy",
    "HeeledHull",
    "section_polygon",
    "clip_below",
    "polygon_properties",
    # GZ curve
    "StabilityPoint",
    "StabilityCurve",
    "GZCurveCalculator",
    "parse_method",
    "heel_angles",
    "find_vanishing_angle",
    # Criteria check
    "CriterionResult",
    "CriteriaResults",
    "check_intact_criteria",
]

"""
stability/criteria.py - IMO intact stability criteria check

Evaluates a StabilityCurve against IMO A.749(18) general criteria. A
criterion whose quantity the curve does not cover (sweep too short) is
reported as failed with no actual value.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import logging

from navhydro.core.constants import RAD_TO_DEG
from navhydro.stability.constants import IMO_INTACT, IMOIntactCriteria
from navhydro.stability.gz_curve import StabilityCurve

logger = logging.getLogger(__name__)


@dataclass
class CriterionResult:
    """Outcome of a single criterion."""
    name: str
    required: float
    actual: Optional[float]
    unit: str
    passed: bool
    notes: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "required": self.required,
            "actual": self.actual,
            "unit": self.unit,
            "passed": self.passed,
            "notes": self.notes,
        }


@dataclass
class CriteriaResults:
    standard: str
    criteria: List[CriterionResult] = field(default_factory=list)

    @property
    def all_passed(self) -> bool:
        return all(c.passed for c in self.criteria)

    @property
    def passed_count(self) -> int:
        return sum(1 for c in self.criteria if c.passed)

    @property
    def summary(self) -> str:
        total = len(self.criteria)
        if self.all_passed:
            return f"All {total} {self.standard} intact stability criteria satisfied."
        return (
            f"{total - self.passed_count} of {total} criteria not satisfied. "
            f"Vessel may not meet intact stability requirements."
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "standard": self.standard,
            "all_passed": self.all_passed,
            "passed_count": self.passed_count,
            "summary": self.summary,
            "criteria": [c.to_dict() for c in self.criteria],
        }


def check_intact_criteria(
    curve: StabilityCurve,
    criteria: IMOIntactCriteria = IMO_INTACT,
) -> CriteriaResults:
    """
    Check a GZ curve against IMO intact stability criteria.

    Args:
        curve: GZ curve, typically swept from 0° to at least 40°
        criteria: Limits to check against (default IMO_INTACT)

    Returns:
        CriteriaResults with one entry per criterion
    """
    results = CriteriaResults(standard=criteria.standard)

    def add(name: str, required: float, actual: Optional[float], unit: str, notes: Optional[str] = None):
        passed = actual is not None and actual >= required
        if actual is None:
            notes = "Not covered by the swept heel range"
        results.criteria.append(CriterionResult(name, required, actual, unit, passed, notes))

    def in_degrees(area: Optional[float]) -> Optional[str]:
        return None if area is None else f"Equivalent to {area * RAD_TO_DEG:.3f} m·deg"

    add("Area under GZ curve (0° to 30°)", criteria.area_0_30_min_m_rad,
        curve.area_0_30, "m·rad", in_degrees(curve.area_0_30))
    add("Area under GZ curve (0° to 40°)", criteria.area_0_40_min_m_rad,
        curve.area_0_40, "m·rad", in_degrees(curve.area_0_40))
    add("Area under GZ curve (30° to 40°)", criteria.area_30_40_min_m_rad,
        curve.area_30_40, "m·rad", in_degrees(curve.area_30_40))
    add("Angle at maximum GZ", criteria.angle_gz_max_min_deg,
        curve.angle_at_max_gz, "deg", f"Maximum GZ = {curve.max_gz:.3f} m")
    add("Initial metacentric height (GMt)", criteria.gm_min_m, curve.initial_gmt, "m")
    add("Righting arm at 30° heel", criteria.gz_30_min_m, curve.gz_at_30, "m")

    logger.info(
        f"Stability criteria check completed: "
        f"{results.passed_count}/{len(results.criteria)} passed"
    )
    return results

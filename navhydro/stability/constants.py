"""
navhydro Stability Constants

IMO intact stability criteria and stability method catalogue.

References:
- IMO Resolution A.749(18), Code on Intact Stability, Section 3.1.2
- IMO IS Code (MSC.267(85)) Part A, Section 2.2
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List

from navhydro.core.constants import WALL_SIDED_ACCURACY_LIMIT_DEG


# =============================================================================
# IMO INTACT STABILITY CRITERIA
# =============================================================================

@dataclass(frozen=True)
class IMOIntactCriteria:
    """
    IMO general intact stability criteria.

    Areas are in meter-radians; GZ and GM limits in meters.
    """
    standard: str = "IMO A.749(18)"

    # Metacentric height
    gm_min_m: float = 0.15

    # GZ curve criteria
    gz_30_min_m: float = 0.20  # Minimum GZ at 30° heel
    angle_gz_max_min_deg: float = 25.0  # Minimum angle of maximum GZ

    # Area under GZ curve
    area_0_30_min_m_rad: float = 0.055
    area_0_40_min_m_rad: float = 0.090
    area_30_40_min_m_rad: float = 0.030

    def to_dict(self) -> Dict[str, Any]:
        return {
            "standard": self.standard,
            "gm_min_m": self.gm_min_m,
            "gz_30_min_m": self.gz_30_min_m,
            "angle_gz_max_min_deg": self.angle_gz_max_min_deg,
            "area_0_30_min_m_rad": self.area_0_30_min_m_rad,
            "area_0_40_min_m_rad": self.area_0_40_min_m_rad,
            "area_30_40_min_m_rad": self.area_30_40_min_m_rad,
        }


# Singleton instance
IMO_INTACT = IMOIntactCriteria()


# =============================================================================
# STABILITY METHODS
# =============================================================================

class StabilityMethod(Enum):
    """Righting-arm calculation method."""
    WALL_SIDED = "wall_sided"
    FULL_IMMERSION = "full_immersion"


@dataclass(frozen=True)
class MethodInfo:
    method: StabilityMethod
    name: str
    description: str
    max_recommended_angle_deg: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.method.value,
            "name": self.name,
            "description": self.description,
            "max_recommended_angle_deg": self.max_recommended_angle_deg,
        }


METHOD_CATALOGUE: List[MethodInfo] = [
    MethodInfo(
        method=StabilityMethod.WALL_SIDED,
        name="Wall-Sided Formula",
        description=(
            "Fast approximation from upright KB and BMt assuming vertical sides "
            "at the waterline. Suitable for small to moderate heel angles."
        ),
        max_recommended_angle_deg=WALL_SIDED_ACCURACY_LIMIT_DEG,
    ),
    MethodInfo(
        method=StabilityMethod.FULL_IMMERSION,
        name="Full Immersion/Emersion",
        description=(
            "Clips every station section against the heeled waterline and solves "
            "for constant displacement. Valid to large angles including deck-edge "
            "immersion."
        ),
        max_recommended_angle_deg=180.0,
    ),
]

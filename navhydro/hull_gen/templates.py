"""
hull_gen/templates.py - Analytical template hulls

Offsets generators for hull forms with closed-form hydrostatics, used for
validation and as starting geometry:

- Box barge: rectangular sections, every coefficient 1.0
- Wigley hull: parabolic waterlines and sections,
  y = B/2 · (1 − (2ξ/L)²) · (1 − (d/T)²), d = depth below the design waterline
- V-section hull: triangular prismatic sections, zero keel breadth

Stations run from x = 0 (aft) to x = L; waterlines from z = 0 (keel).
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

import numpy as np

from navhydro.core.geometry import HullGeometry, PrincipalDimensions
from navhydro.errors import ErrorCode, ParameterInvalidError


@dataclass(frozen=True)
class HullTemplate:
    """Generated hull with its principal dimensions and design draft."""
    name: str
    description: str
    geometry: HullGeometry
    dimensions: PrincipalDimensions
    design_draft: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "dimensions": self.dimensions.to_dict(),
            "design_draft": self.design_draft,
            "geometry": self.geometry.to_dict(),
        }


def _require(condition: bool, parameter: str, value: Any, message: str) -> None:
    if not condition:
        raise ParameterInvalidError(message, code=ErrorCode.PAR_INVALID, parameter=parameter, value=value)


def box_barge(
    length: float = 100.0,
    beam: float = 20.0,
    depth: float = 10.0,
    design_draft: float = 5.0,
    stations: int = 11,
    waterlines: int = 11,
) -> HullTemplate:
    """Rectangular barge with constant half-breadth B/2."""
    _require(stations >= 2, "stations", stations, "At least 2 stations required")
    _require(waterlines >= 2, "waterlines", waterlines, "At least 2 waterlines required")
    _require(0 < design_draft <= depth, "design_draft", design_draft, "Design draft must lie within the depth")

    x = np.linspace(0.0, length, stations)
    z = np.linspace(0.0, depth, waterlines)
    grid = np.full((stations, waterlines), beam / 2.0)

    return HullTemplate(
        name="box_barge",
        description=f"Box barge {length} x {beam} x {depth}",
        geometry=HullGeometry.from_grid(x, z, grid),
        dimensions=PrincipalDimensions(lpp=length, beam=beam),
        design_draft=design_draft,
    )


def wigley_hull(
    length: float = 100.0,
    beam: float = 10.0,
    draft: float = 6.25,
    stations: int = 21,
    waterlines: int = 13,
    freeboard_waterlines: int = 0,
) -> HullTemplate:
    """
    Wigley hull up to the design waterline.

    ``freeboard_waterlines`` extra waterlines are added above the draft at the
    same spacing, continuing the design waterline vertically (wall-sided
    topsides).
    """
    _require(stations >= 2, "stations", stations, "At least 2 stations required")
    _require(waterlines >= 2, "waterlines", waterlines, "At least 2 waterlines required")
    _require(freeboard_waterlines >= 0, "freeboard_waterlines", freeboard_waterlines,
             "Freeboard waterline count must be non-negative")

    x = np.linspace(0.0, length, stations)
    dz = draft / (waterlines - 1)
    z = dz * np.arange(waterlines + freeboard_waterlines)

    xi = (2.0 * x - length) / length  # -1 aft .. +1 forward
    depth_ratio = np.clip((draft - z) / draft, 0.0, None)
    grid = (beam / 2.0) * np.outer(1.0 - xi ** 2, 1.0 - depth_ratio ** 2)
    grid = np.maximum(grid, 0.0)

    return HullTemplate(
        name="wigley",
        description=f"Wigley hull {length} x {beam} x {draft}",
        geometry=HullGeometry.from_grid(x, z, grid),
        dimensions=PrincipalDimensions(lpp=length, beam=beam),
        design_draft=draft,
    )


def v_section_hull(
    length: float = 50.0,
    beam: float = 10.0,
    depth: float = 5.0,
    design_draft: float = 4.0,
    stations: int = 11,
    waterlines: int = 11,
) -> HullTemplate:
    """Prismatic hull with triangular sections: y = B/2 · z/depth."""
    _require(stations >= 2, "stations", stations, "At least 2 stations required")
    _require(waterlines >= 2, "waterlines", waterlines, "At least 2 waterlines required")
    _require(0 < design_draft <= depth, "design_draft", design_draft, "Design draft must lie within the depth")

    x = np.linspace(0.0, length, stations)
    z = np.linspace(0.0, depth, waterlines)
    grid = np.tile((beam / 2.0) * z / depth, (stations, 1))

    return HullTemplate(
        name="v_section",
        description=f"V-section hull {length} x {beam} x {depth}",
        geometry=HullGeometry.from_grid(x, z, grid),
        dimensions=PrincipalDimensions(lpp=length, beam=beam),
        design_draft=design_draft,
    )


TEMPLATES: Dict[str, Callable[..., HullTemplate]] = {
    "box_barge": box_barge,
    "wigley": wigley_hull,
    "v_section": v_section_hull,
}


def list_templates() -> List[str]:
    return list(TEMPLATES.keys())


def generate_template(name: str, **kwargs: Any) -> HullTemplate:
    """Build a template hull by name; keyword arguments go to the generator."""
    builder: Optional[Callable[..., HullTemplate]] = TEMPLATES.get(name)
    if builder is None:
        raise ParameterInvalidError(
            f"Unknown hull template '{name}'. Valid: {', '.join(TEMPLATES)}",
            code=ErrorCode.PAR_INVALID,
            parameter="name",
            value=name,
        )
    return builder(**kwargs)

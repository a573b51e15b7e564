"""
navhydro Core Module

Geometry snapshot, loadcase and shared constants.
"""

from navhydro.core.geometry import (
    Station,
    Waterline,
    Offset,
    PrincipalDimensions,
    Loadcase,
    HullGeometry,
)

__all__ = [
    "Station",
    "Waterline",
    "Offset",
    "PrincipalDimensions",
    "Loadcase",
    "HullGeometry",
]

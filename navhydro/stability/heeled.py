"""
stability/heeled.py - Immersed hull geometry at large heel angles

Each station is closed into a polygon in the section plane (y to
starboard, z up from the keel): starboard side from keel to the highest
waterline, across the deck, down the port side and back across the keel.
Heeling to starboard by θ puts a body point at height

    h(y, z) = z·cosθ − y·sinθ

above the keel in the earth frame. The immersed part of the hull is the
half-plane h <= c clipped out of every section; the waterline height c is
solved so that the immersed volume matches the upright volume.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import List, Tuple
import logging
import math

import numpy as np
from scipy.optimize import brentq

from navhydro.core.constants import HEELED_WATERLINE_XTOL_M, VOLUME_EPSILON_M3
from navhydro.core.geometry import HullGeometry
from navhydro.errors import NotComputableError, NotComputableReason
from navhydro.physics.integration import IntegrationEngine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HeeledBuoyancy:
    """Equilibrium waterline and centre of buoyancy at one heel angle."""
    heel_deg: float
    waterline_height: float  # c, earth-frame height above the keel
    volume: float
    y_b: float  # Body-frame transverse centre of buoyancy
    z_b: float  # Body-frame vertical centre of buoyancy

    @property
    def kn(self) -> float:
        """Horizontal distance from the keel to the vertical through B."""
        phi = math.radians(self.heel_deg)
        return self.y_b * math.cos(phi) + self.z_b * math.sin(phi)


# =============================================================================
# POLYGON HELPERS
# =============================================================================

def section_polygon(half_breadths: np.ndarray, z: np.ndarray) -> np.ndarray:
    """Closed, counter-clockwise section outline as an (N, 2) array of (y, z)."""
    starboard = np.column_stack([half_breadths, z])
    port = np.column_stack([-half_breadths[::-1], z[::-1]])
    return np.vstack([starboard, port])


def clip_below(polygon: np.ndarray, heights: np.ndarray, level: float) -> np.ndarray:
    """Part of ``polygon`` whose vertex heights are at or below ``level``."""
    n = len(polygon)
    out: List[np.ndarray] = []
    for i in range(n):
        j = (i + 1) % n
        cur_in = heights[i] <= level
        nxt_in = heights[j] <= level
        if cur_in:
            out.append(polygon[i])
        if cur_in != nxt_in:
            t = (level - heights[i]) / (heights[j] - heights[i])
            out.append(polygon[i] + t * (polygon[j] - polygon[i]))
    if len(out) < 3:
        return np.empty((0, 2))
    return np.array(out)


def polygon_properties(polygon: np.ndarray) -> Tuple[float, float, float]:
    """Shoelace area and centroid (area, y_c, z_c)."""
    if len(polygon) < 3:
        return 0.0, 0.0, 0.0
    y = polygon[:, 0]
    z = polygon[:, 1]
    y_next = np.roll(y, -1)
    z_next = np.roll(z, -1)
    cross = y * z_next - y_next * z
    area = 0.5 * float(cross.sum())
    if abs(area) <= VOLUME_EPSILON_M3:
        return 0.0, 0.0, 0.0
    yc = float(((y + y_next) * cross).sum()) / (6.0 * area)
    zc = float(((z + z_next) * cross).sum()) / (6.0 * area)
    return area, yc, zc


# =============================================================================
# HEELED HULL
# =============================================================================

class HeeledHull:
    """
    Section polygons of one hull, ready to be clipped at any heel.

    The deck is taken at the highest tabulated waterline.
    """

    def __init__(
        self,
        geometry: HullGeometry,
        integration: IntegrationEngine,
        xtol: float = HEELED_WATERLINE_XTOL_M,
    ):
        self.geometry = geometry
        self.integration = integration
        self.xtol = xtol
        self.polygons = [
            section_polygon(geometry.station_offsets(i), geometry.z)
            for i in range(geometry.station_count)
        ]

    def immersed(self, heel_deg: float, level: float) -> Tuple[float, float, float]:
        """Volume and body-frame centre (V, y_b, z_b) below waterline ``level``."""
        phi = math.radians(heel_deg)
        cos_phi, sin_phi = math.cos(phi), math.sin(phi)

        count = self.geometry.station_count
        areas = np.zeros(count)
        y_moments = np.zeros(count)
        z_moments = np.zeros(count)
        for i, polygon in enumerate(self.polygons):
            heights = polygon[:, 1] * cos_phi - polygon[:, 0] * sin_phi
            area, yc, zc = polygon_properties(clip_below(polygon, heights, level))
            areas[i] = area
            y_moments[i] = area * yc
            z_moments[i] = area * zc

        x = self.geometry.x
        volume = self.integration.integrate(x, areas)
        if volume <= VOLUME_EPSILON_M3:
            return 0.0, 0.0, 0.0
        y_b = self.integration.integrate(x, y_moments) / volume
        z_b = self.integration.integrate(x, z_moments) / volume
        return volume, y_b, z_b

    def upright_volume(self, draft: float) -> float:
        """Polygon-model volume below ``draft`` with no heel."""
        return self.immersed(0.0, draft)[0]

    def equilibrium(self, heel_deg: float, volume: float) -> HeeledBuoyancy:
        """
        Solve the heeled waterline that immerses ``volume``.

        Raises:
            NotComputableError: if the closed hull cannot displace ``volume``
        """
        phi = math.radians(heel_deg)
        cos_phi, sin_phi = math.cos(phi), math.sin(phi)
        all_heights = np.concatenate([
            p[:, 1] * cos_phi - p[:, 0] * sin_phi for p in self.polygons
        ])
        low, high = float(all_heights.min()), float(all_heights.max())

        def residual(level: float) -> float:
            return self.immersed(heel_deg, level)[0] - volume

        if residual(high) < -VOLUME_EPSILON_M3 * max(1.0, volume):
            raise NotComputableError(
                NotComputableReason.DRAFT_ABOVE_TABULATED,
                f"Hull closed at z={self.geometry.top_z} cannot displace {volume:.6g} "
                f"at {heel_deg}° heel",
            )

        if residual(high) <= 0.0:
            level = high
        else:
            level = brentq(residual, low, high, xtol=self.xtol)

        v, y_b, z_b = self.immersed(heel_deg, level)
        logger.debug(f"Heeled waterline at {heel_deg}°: c={level:.6f}, V={v:.6f}")
        return HeeledBuoyancy(
            heel_deg=heel_deg,
            waterline_height=level,
            volume=v,
            y_b=y_b,
            z_b=z_b,
        )

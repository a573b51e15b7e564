"""
physics/hydrostatics.py - Hydrostatic properties from hull offsets

Direct integration of the offsets grid at a given draft:

    A(x)   = 2 ∫ y dz                 sectional area (keel to draft)
    V      = ∫ A dx                   displaced volume
    KB     = ∫ A·z̄ dx / V             vertical center of buoyancy
    LCB    = ∫ A·x dx / V             longitudinal center of buoyancy
    Awp    = 2 ∫ y_T dx               waterplane area
    Iwp    = 2/3 ∫ y_T³ dx            transverse second moment
    Il     = 2 ∫ x²·y_T dx − Awp·LCF² longitudinal second moment about LCF
    BMt    = Iwp / V,  BMl = Il / V
    GM     = KB + BM − KG             only when the loadcase carries KG

Drafts above the highest tabulated waterline follow the configured
DraftPolicy. Drafts that immerse no volume produce a not-computable result
instead of dividing by zero.
"""

from __future__ import annotations
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple
import logging
import math
import numbers

import numpy as np

from navhydro.core.constants import (
    CM_PER_M,
    DRAFT_SNAP_TOLERANCE_M,
    VOLUME_EPSILON_M3,
)
from navhydro.core.geometry import HullGeometry, Loadcase, PrincipalDimensions
from navhydro.errors import (
    ErrorCode,
    NotComputableError,
    NotComputableReason,
    ParameterInvalidError,
)
from navhydro.physics.integration import IntegrationEngine

logger = logging.getLogger(__name__)


# =============================================================================
# POLICIES
# =============================================================================

class DraftPolicy(Enum):
    """Handling of drafts above the highest tabulated waterline."""
    REJECT = "reject"  # not-computable result
    EXTRAPOLATE = "extrapolate"  # extend offsets with the last two waterlines' slope


class ResultStatus(Enum):
    OK = "ok"
    NOT_COMPUTABLE = "not_computable"


# =============================================================================
# HYDRO RESULT
# =============================================================================

@dataclass(frozen=True)
class HydroResult:
    """
    Hydrostatic properties at one draft.

    When ``status`` is NOT_COMPUTABLE every derived quantity is None and
    ``reason`` says why. GMt, GMl and MCT are None whenever the loadcase has
    no KG.
    """
    draft: float
    status: ResultStatus = ResultStatus.OK
    reason: Optional[NotComputableReason] = None

    # Displacement
    volume: Optional[float] = None  # Displaced volume
    displacement: Optional[float] = None  # Displaced mass (volume × rho)

    # Centers of buoyancy
    kb: Optional[float] = None
    lcb: Optional[float] = None
    tcb: Optional[float] = None

    # Metacentric data
    bmt: Optional[float] = None
    bml: Optional[float] = None
    kmt: Optional[float] = None
    kml: Optional[float] = None
    gmt: Optional[float] = None
    gml: Optional[float] = None

    # Waterplane
    awp: Optional[float] = None
    lcf: Optional[float] = None
    iwp: Optional[float] = None  # Transverse second moment
    il: Optional[float] = None  # Longitudinal second moment about LCF
    tpc: Optional[float] = None  # Mass per cm immersion
    mct: Optional[float] = None  # Moment to change trim 1 cm

    # Form coefficients
    midship_area: Optional[float] = None
    cb: Optional[float] = None
    cp: Optional[float] = None
    cm: Optional[float] = None
    cwp: Optional[float] = None

    warnings: Tuple[str, ...] = ()

    @property
    def computable(self) -> bool:
        return self.status is ResultStatus.OK

    def require(self) -> "HydroResult":
        """Return self, or raise NotComputableError carrying the reason."""
        if not self.computable:
            raise NotComputableError(
                self.reason,
                f"Hydrostatics not computable at draft {self.draft}: {self.reason.value}",
            )
        return self

    def get(self, name: str) -> Optional[float]:
        """Scalar field by name, used when projecting results into curves."""
        return getattr(self, name)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, Enum):
                value = value.value
            elif isinstance(value, tuple):
                value = list(value)
            data[f.name] = value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HydroResult":
        kwargs = {f.name: data.get(f.name) for f in fields(cls) if f.name in data}
        kwargs["status"] = ResultStatus(data.get("status", "ok"))
        reason = data.get("reason")
        kwargs["reason"] = NotComputableReason(reason) if reason else None
        kwargs["warnings"] = tuple(data.get("warnings", ()))
        return cls(**kwargs)

    @classmethod
    def not_computable(
        cls,
        draft: float,
        reason: NotComputableReason,
        warnings: Sequence[str] = (),
    ) -> "HydroResult":
        return cls(
            draft=draft,
            status=ResultStatus.NOT_COMPUTABLE,
            reason=reason,
            warnings=tuple(warnings),
        )


# =============================================================================
# IMMERSED SAMPLES
# =============================================================================

@dataclass(frozen=True)
class _Immersion:
    """Offsets sampled from the keel up to a draft."""
    z: np.ndarray  # Sample heights, keel to draft
    y: np.ndarray  # Half-breadths [station, sample]
    waterplane: np.ndarray  # Half-breadth of each station at the draft
    warnings: Tuple[str, ...] = ()


# =============================================================================
# HYDROSTATICS CALCULATOR
# =============================================================================

class HydrostaticsCalculator:
    """
    Hydrostatic calculator over a validated offsets grid.

    Args:
        integration: Integration engine shared with the other calculators
        draft_policy: What to do with drafts above the tabulated waterlines
        max_workers: Thread count for :meth:`compute_table` (1 = serial)
    """

    def __init__(
        self,
        integration: Optional[IntegrationEngine] = None,
        draft_policy: DraftPolicy = DraftPolicy.REJECT,
        max_workers: int = 1,
    ):
        self.integration = integration or IntegrationEngine()
        self.draft_policy = DraftPolicy(draft_policy)
        self.max_workers = max(1, int(max_workers))

    # -------------------------------------------------------------------------
    # Public operations
    # -------------------------------------------------------------------------

    def compute_at(
        self,
        geometry: HullGeometry,
        dimensions: PrincipalDimensions,
        draft: float,
        loadcase: Optional[Loadcase] = None,
    ) -> HydroResult:
        """
        Compute all hydrostatic properties at ``draft``.

        Returns:
            HydroResult; not computable when the draft immerses no volume or
            lies above the tabulated waterlines under the REJECT policy

        Raises:
            ParameterInvalidError: if draft is negative or not finite
        """
        loadcase = loadcase or Loadcase()
        _check_draft(draft)
        draft = float(draft)

        immersion = self._immerse(geometry, draft)
        if isinstance(immersion, HydroResult):
            return immersion

        return self._compute_from_immersion(geometry, dimensions, draft, loadcase, immersion)

    def compute_table(
        self,
        geometry: HullGeometry,
        dimensions: PrincipalDimensions,
        drafts: Sequence[float],
        loadcase: Optional[Loadcase] = None,
    ) -> List[HydroResult]:
        """Compute results for several drafts, returned in input order."""
        loadcase = loadcase or Loadcase()
        for d in drafts:
            _check_draft(d)

        def one(d: float) -> HydroResult:
            return self.compute_at(geometry, dimensions, d, loadcase)

        if self.max_workers > 1 and len(drafts) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                results = list(executor.map(one, drafts))
        else:
            results = [one(d) for d in drafts]

        logger.info(f"Computed hydrostatic table: {len(results)} drafts")
        return results

    def section_areas_at(self, geometry: HullGeometry, draft: float) -> np.ndarray:
        """
        Immersed sectional area of every station at ``draft``.

        Areas are zero at or below the keel waterline. Drafts above the
        tabulated range follow the draft policy.

        Raises:
            NotComputableError: draft above the tabulated waterlines under REJECT
        """
        _check_draft(draft)
        immersion = self._immerse(geometry, float(draft))
        if isinstance(immersion, HydroResult):
            if immersion.reason is NotComputableReason.ZERO_VOLUME:
                return np.zeros(geometry.station_count)
            immersion.require()
        return np.array([
            2.0 * self.integration.integrate(immersion.z, immersion.y[i])
            for i in range(geometry.station_count)
        ])

    def section_area(self, geometry: HullGeometry, station_position: int, draft: float) -> float:
        """Immersed sectional area of a single station."""
        return float(self.section_areas_at(geometry, draft)[station_position])

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _immerse(self, geometry: HullGeometry, draft: float):
        """Sample offsets from the keel to the draft, or a not-computable result."""
        z = geometry.z
        grid = geometry.half_breadths
        warnings: List[str] = []

        if draft > geometry.top_z + DRAFT_SNAP_TOLERANCE_M:
            if self.draft_policy is DraftPolicy.REJECT:
                logger.debug(f"Draft {draft} above tabulated waterlines ({geometry.top_z})")
                return HydroResult.not_computable(
                    draft,
                    NotComputableReason.DRAFT_ABOVE_TABULATED,
                    [f"Draft {draft} exceeds highest waterline {geometry.top_z}"],
                )
            waterplane = _extrapolate_offsets(z, grid, draft)
            message = f"Draft {draft} above highest waterline {geometry.top_z}: offsets extrapolated"
            logger.warning(message)
            warnings.append(message)
            return _Immersion(
                z=np.append(z, draft),
                y=np.column_stack([grid, waterplane]),
                waterplane=waterplane,
                warnings=tuple(warnings),
            )

        below = z < draft - DRAFT_SNAP_TOLERANCE_M
        if not below.any():
            return HydroResult.not_computable(draft, NotComputableReason.ZERO_VOLUME)

        snapped = np.flatnonzero(np.abs(z - draft) <= DRAFT_SNAP_TOLERANCE_M)
        if len(snapped):
            waterplane = grid[:, snapped[0]]
        else:
            k = int(np.searchsorted(z, draft, side="right")) - 1
            t = (draft - z[k]) / (z[k + 1] - z[k])
            waterplane = grid[:, k] + t * (grid[:, k + 1] - grid[:, k])

        return _Immersion(
            z=np.append(z[below], draft),
            y=np.column_stack([grid[:, below], waterplane]),
            waterplane=np.asarray(waterplane, dtype=float),
            warnings=tuple(warnings),
        )

    def _compute_from_immersion(
        self,
        geometry: HullGeometry,
        dimensions: PrincipalDimensions,
        draft: float,
        loadcase: Loadcase,
        immersion: _Immersion,
    ) -> HydroResult:
        integrate = self.integration.integrate
        x = geometry.x
        zs = immersion.z

        # 1. Sectional areas and their vertical moments
        areas = np.empty(geometry.station_count)
        vertical_moments = np.empty(geometry.station_count)
        for i in range(geometry.station_count):
            ys = immersion.y[i]
            areas[i] = 2.0 * integrate(zs, ys)
            vertical_moments[i] = 2.0 * integrate(zs, zs * ys)

        # 2. Volume
        volume = integrate(x, areas)
        if volume <= VOLUME_EPSILON_M3:
            return HydroResult.not_computable(
                draft, NotComputableReason.ZERO_VOLUME, immersion.warnings
            )
        displacement = volume * loadcase.rho

        # 3-4. Centers of buoyancy
        kb = integrate(x, vertical_moments) / volume
        lcb = self.integration.first_moment(x, areas) / volume
        tcb = 0.0

        # 5. Waterplane
        yt = immersion.waterplane
        awp = 2.0 * integrate(x, yt)
        iwp = integrate(x, (2.0 / 3.0) * yt ** 3)
        if awp > 0:
            lcf = 2.0 * self.integration.first_moment(x, yt) / awp
            il = 2.0 * self.integration.second_moment(x, yt) - awp * lcf * lcf
        else:
            lcf = None
            il = 0.0

        # 6. Metacentric radii
        bmt = iwp / volume
        bml = il / volume
        kmt = kb + bmt
        kml = kb + bml

        # 7. Metacentric heights
        gmt = gml = mct = None
        if loadcase.has_kg:
            gmt = kmt - loadcase.kg
            gml = kml - loadcase.kg
            mct = displacement * gml / (CM_PER_M * dimensions.lpp)
        tpc = loadcase.rho * awp / CM_PER_M

        # 8. Form coefficients
        midship_area = float(np.interp(geometry.midship_x, x, areas))
        cb = volume / (dimensions.lpp * dimensions.beam * draft)
        cm = midship_area / (dimensions.beam * draft)
        cp = cb / cm if cm > 0 else None
        cwp = awp / (dimensions.lpp * dimensions.beam)

        logger.debug(
            f"Hydrostatics at draft {draft}: V={volume:.4f}, KB={kb:.4f}, "
            f"LCB={lcb:.4f}, BMt={bmt:.4f}"
        )

        return HydroResult(
            draft=draft,
            volume=volume,
            displacement=displacement,
            kb=kb,
            lcb=lcb,
            tcb=tcb,
            bmt=bmt,
            bml=bml,
            kmt=kmt,
            kml=kml,
            gmt=gmt,
            gml=gml,
            awp=awp,
            lcf=lcf,
            iwp=iwp,
            il=il,
            tpc=tpc,
            mct=mct,
            midship_area=midship_area,
            cb=cb,
            cp=cp,
            cm=cm,
            cwp=cwp,
            warnings=immersion.warnings,
        )


# =============================================================================
# HELPERS
# =============================================================================

def _check_draft(draft: float) -> None:
    if not isinstance(draft, numbers.Real) or not math.isfinite(draft) or draft < 0:
        raise ParameterInvalidError(
            f"Draft must be a non-negative number, got {draft!r}",
            code=ErrorCode.PAR_DRAFT,
            parameter="draft",
            value=draft,
        )


def _extrapolate_offsets(z: np.ndarray, grid: np.ndarray, draft: float) -> np.ndarray:
    """Extend each station linearly from its last two waterlines, never below 0."""
    dz = z[-1] - z[-2]
    if dz <= 0:
        return grid[:, -1].copy()
    slope = (grid[:, -1] - grid[:, -2]) / dz
    return np.maximum(grid[:, -1] + slope * (draft - z[-1]), 0.0)

"""
core/geometry.py - Hull offsets snapshot

Immutable geometry model consumed by every calculator.

COORDINATE FRAME CONTRACT
=========================
  X-axis: Longitudinal station position, increasing with station index
  Y-axis: Transverse, half-breadths are stored for one side only (y >= 0)
          and mirrored for the other side
  Z-axis: Vertical, measured upward from the keel (z = 0 at baseline)

  Draft is expressed in the same z coordinate as the waterlines.
"""

from __future__ import annotations
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple
import logging
import math
import numbers

import numpy as np

from navhydro.core.constants import SEAWATER_DENSITY_KG_M3
from navhydro.errors import (
    ErrorCode,
    GeometryInvalidError,
    GeometryIssue,
    ParameterInvalidError,
)

logger = logging.getLogger(__name__)

# Missing offsets listed individually before the message is summarized
MAX_LISTED_MISSING = 5


# =============================================================================
# INPUT RECORDS
# =============================================================================

@dataclass(frozen=True)
class Station:
    """Longitudinal station."""
    station_index: int
    x: float

    def to_dict(self) -> Dict[str, Any]:
        return {"station_index": self.station_index, "x": self.x}


@dataclass(frozen=True)
class Waterline:
    """Tabulated waterline height above keel."""
    waterline_index: int
    z: float

    def to_dict(self) -> Dict[str, Any]:
        return {"waterline_index": self.waterline_index, "z": self.z}


@dataclass(frozen=True)
class Offset:
    """Half-breadth at a station/waterline intersection."""
    station_index: int
    waterline_index: int
    half_breadth: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "station_index": self.station_index,
            "waterline_index": self.waterline_index,
            "half_breadth": self.half_breadth,
        }


@dataclass(frozen=True)
class PrincipalDimensions:
    """Principal dimensions used for form coefficients."""
    lpp: float  # Length between perpendiculars
    beam: float  # Moulded beam

    def __post_init__(self):
        for name in ("lpp", "beam"):
            value = getattr(self, name)
            if not isinstance(value, numbers.Real) or not math.isfinite(value) or value <= 0:
                raise ParameterInvalidError(
                    f"{name} must be a positive number, got {value!r}",
                    code=ErrorCode.PAR_DIMENSIONS,
                    parameter=name,
                    value=value,
                )

    def to_dict(self) -> Dict[str, float]:
        return {"lpp": self.lpp, "beam": self.beam}


@dataclass(frozen=True)
class Loadcase:
    """
    Fluid density and optional vertical center of gravity.

    When kg is None, GM values are omitted from results.
    """
    rho: float = SEAWATER_DENSITY_KG_M3
    kg: Optional[float] = None
    name: str = ""

    def __post_init__(self):
        if not isinstance(self.rho, numbers.Real) or not math.isfinite(self.rho) or self.rho <= 0:
            raise ParameterInvalidError(
                f"Fluid density must be positive, got {self.rho!r}",
                code=ErrorCode.PAR_DENSITY,
                parameter="rho",
                value=self.rho,
            )
        if self.kg is not None and (
            not isinstance(self.kg, numbers.Real) or not math.isfinite(self.kg)
        ):
            raise ParameterInvalidError(
                f"KG must be a finite number, got {self.kg!r}",
                code=ErrorCode.PAR_INVALID,
                parameter="kg",
                value=self.kg,
            )

    @property
    def has_kg(self) -> bool:
        return self.kg is not None

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "rho": self.rho, "kg": self.kg}


# =============================================================================
# HULL GEOMETRY
# =============================================================================

@dataclass(frozen=True, eq=False)
class HullGeometry:
    """
    Validated, dense offsets grid.

    Stations and waterlines are held sorted by index; ``half_breadths`` is a
    read-only array indexed ``[station_position, waterline_position]``.
    Construct through :meth:`build` (or :meth:`from_grid`), which raises
    :class:`GeometryInvalidError` on any structural problem.
    """
    stations: Tuple[Station, ...]
    waterlines: Tuple[Waterline, ...]
    half_breadths: np.ndarray = field(repr=False)

    _x: np.ndarray = field(init=False, repr=False)
    _z: np.ndarray = field(init=False, repr=False)

    def __post_init__(self):
        x = np.array([s.x for s in self.stations], dtype=float)
        z = np.array([w.z for w in self.waterlines], dtype=float)
        grid = np.array(self.half_breadths, dtype=float)
        for arr in (x, z, grid):
            arr.setflags(write=False)
        object.__setattr__(self, "_x", x)
        object.__setattr__(self, "_z", z)
        object.__setattr__(self, "half_breadths", grid)

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    def build(
        cls,
        stations: Iterable[Station],
        waterlines: Iterable[Waterline],
        offsets: Iterable[Offset],
    ) -> "HullGeometry":
        """
        Validate the three collections and assemble the dense grid.

        Raises:
            GeometryInvalidError: listing every problem found
        """
        stations = sorted(stations, key=lambda s: s.station_index)
        waterlines = sorted(waterlines, key=lambda w: w.waterline_index)
        offsets = list(offsets)

        issues: List[GeometryIssue] = []
        issues.extend(_check_stations(stations))
        issues.extend(_check_waterlines(waterlines))

        grid = None
        if not issues:
            grid, grid_issues = _assemble_grid(stations, waterlines, offsets)
            issues.extend(grid_issues)

        if issues:
            logger.debug(f"Geometry rejected with {len(issues)} issue(s)")
            raise GeometryInvalidError(issues)

        return cls(
            stations=tuple(stations),
            waterlines=tuple(waterlines),
            half_breadths=grid,
        )

    @classmethod
    def from_grid(
        cls,
        x: Sequence[float],
        z: Sequence[float],
        half_breadths: Any,
    ) -> "HullGeometry":
        """Build from station positions, waterline heights and a 2-D grid."""
        grid = np.asarray(half_breadths, dtype=float)
        if grid.shape != (len(x), len(z)):
            raise GeometryInvalidError([GeometryIssue(
                code=ErrorCode.GEO_NOT_DENSE,
                field="offsets",
                message=f"Offsets grid shape {grid.shape} does not match "
                        f"{len(x)} stations x {len(z)} waterlines",
            )])
        stations = [Station(i, float(xi)) for i, xi in enumerate(x)]
        waterlines = [Waterline(j, float(zj)) for j, zj in enumerate(z)]
        offsets = [
            Offset(i, j, float(grid[i, j]))
            for i in range(len(x))
            for j in range(len(z))
        ]
        return cls.build(stations, waterlines, offsets)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HullGeometry":
        """Deserialize from the snapshot dictionary produced by :meth:`to_dict`."""
        try:
            stations = [Station(int(s["station_index"]), float(s["x"])) for s in data["stations"]]
            waterlines = [Waterline(int(w["waterline_index"]), float(w["z"])) for w in data["waterlines"]]
            offsets = [
                Offset(int(o["station_index"]), int(o["waterline_index"]), float(o["half_breadth"]))
                for o in data["offsets"]
            ]
        except (KeyError, TypeError, ValueError) as e:
            raise GeometryInvalidError([GeometryIssue(
                code=ErrorCode.GEO_INVALID,
                field="snapshot",
                message=f"Malformed geometry snapshot: {e}",
            )]) from e
        return cls.build(stations, waterlines, offsets)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stations": [s.to_dict() for s in self.stations],
            "waterlines": [w.to_dict() for w in self.waterlines],
            "offsets": [
                Offset(s.station_index, w.waterline_index, float(self.half_breadths[i, j])).to_dict()
                for i, s in enumerate(self.stations)
                for j, w in enumerate(self.waterlines)
            ],
        }

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    @property
    def x(self) -> np.ndarray:
        """Station positions in index order."""
        return self._x

    @property
    def z(self) -> np.ndarray:
        """Waterline heights in index order."""
        return self._z

    @property
    def station_count(self) -> int:
        return len(self.stations)

    @property
    def waterline_count(self) -> int:
        return len(self.waterlines)

    @property
    def keel_z(self) -> float:
        return float(self._z[0])

    @property
    def top_z(self) -> float:
        return float(self._z[-1])

    @property
    def midship_x(self) -> float:
        """Midpoint of the station range."""
        return 0.5 * float(self._x[0] + self._x[-1])

    @property
    def max_half_breadth(self) -> float:
        return float(self.half_breadths.max())

    def station_offsets(self, position: int) -> np.ndarray:
        """Half-breadths of one station, bottom to top."""
        return self.half_breadths[position]


# =============================================================================
# VALIDATION HELPERS
# =============================================================================

def _check_stations(stations: List[Station]) -> List[GeometryIssue]:
    issues: List[GeometryIssue] = []
    if len(stations) < 2:
        issues.append(GeometryIssue(
            code=ErrorCode.GEO_TOO_FEW_STATIONS,
            field="stations",
            message=f"At least 2 stations are required, found {len(stations)}",
        ))
        return issues

    issues.extend(_check_duplicates([s.station_index for s in stations], "stations"))

    for row, s in enumerate(stations):
        if not math.isfinite(s.x):
            issues.append(GeometryIssue(
                code=ErrorCode.GEO_NON_FINITE,
                field="stations",
                message=f"Station {s.station_index} has non-finite x={s.x}",
                row=row,
            ))

    for row in range(1, len(stations)):
        prev, cur = stations[row - 1], stations[row]
        if cur.x < prev.x:
            issues.append(GeometryIssue(
                code=ErrorCode.GEO_NON_MONOTONIC,
                field="stations",
                message=f"Station x must be non-decreasing with index: "
                        f"station {cur.station_index} x={cur.x} < station {prev.station_index} x={prev.x}",
                row=row,
            ))
    return issues


def _check_waterlines(waterlines: List[Waterline]) -> List[GeometryIssue]:
    issues: List[GeometryIssue] = []
    if len(waterlines) < 2:
        issues.append(GeometryIssue(
            code=ErrorCode.GEO_TOO_FEW_WATERLINES,
            field="waterlines",
            message=f"At least 2 waterlines are required, found {len(waterlines)}",
        ))
        return issues

    issues.extend(_check_duplicates([w.waterline_index for w in waterlines], "waterlines"))

    for row, w in enumerate(waterlines):
        if not math.isfinite(w.z):
            issues.append(GeometryIssue(
                code=ErrorCode.GEO_NON_FINITE,
                field="waterlines",
                message=f"Waterline {w.waterline_index} has non-finite z={w.z}",
                row=row,
            ))
        elif w.z < 0:
            issues.append(GeometryIssue(
                code=ErrorCode.GEO_INVALID,
                field="waterlines",
                message=f"Waterline {w.waterline_index} lies below the keel (z={w.z})",
                row=row,
            ))

    for row in range(1, len(waterlines)):
        prev, cur = waterlines[row - 1], waterlines[row]
        if cur.z < prev.z:
            issues.append(GeometryIssue(
                code=ErrorCode.GEO_NON_MONOTONIC,
                field="waterlines",
                message=f"Waterline z must be non-decreasing with index: "
                        f"waterline {cur.waterline_index} z={cur.z} < waterline {prev.waterline_index} z={prev.z}",
                row=row,
            ))
    return issues


def _check_duplicates(indices: List[int], field_name: str) -> List[GeometryIssue]:
    counts = Counter(indices)
    duplicates = sorted(i for i, n in counts.items() if n > 1)
    if not duplicates:
        return []
    return [GeometryIssue(
        code=ErrorCode.GEO_DUPLICATE_INDEX,
        field=field_name,
        message=f"Duplicate {field_name[:-1]} indices: {', '.join(str(d) for d in duplicates)}",
    )]


def _assemble_grid(
    stations: List[Station],
    waterlines: List[Waterline],
    offsets: List[Offset],
) -> Tuple[np.ndarray, List[GeometryIssue]]:
    issues: List[GeometryIssue] = []
    station_pos = {s.station_index: i for i, s in enumerate(stations)}
    waterline_pos = {w.waterline_index: j for j, w in enumerate(waterlines)}

    grid = np.full((len(stations), len(waterlines)), np.nan)
    filled = np.zeros(grid.shape, dtype=bool)

    for row, o in enumerate(offsets):
        i = station_pos.get(o.station_index)
        j = waterline_pos.get(o.waterline_index)
        if i is None or j is None:
            issues.append(GeometryIssue(
                code=ErrorCode.GEO_NOT_DENSE,
                field="offsets",
                message=f"Offset references unknown station {o.station_index} "
                        f"or waterline {o.waterline_index}",
                row=row,
            ))
            continue
        if filled[i, j]:
            issues.append(GeometryIssue(
                code=ErrorCode.GEO_NOT_DENSE,
                field="offsets",
                message=f"More than one offset for station {o.station_index}, "
                        f"waterline {o.waterline_index}",
                row=row,
            ))
            continue
        if not math.isfinite(o.half_breadth):
            issues.append(GeometryIssue(
                code=ErrorCode.GEO_NON_FINITE,
                field="offsets",
                message=f"Non-finite half-breadth at station {o.station_index}, "
                        f"waterline {o.waterline_index}",
                row=row,
            ))
        elif o.half_breadth < 0:
            issues.append(GeometryIssue(
                code=ErrorCode.GEO_NEGATIVE_OFFSET,
                field="offsets",
                message=f"Negative half-breadth {o.half_breadth} at station "
                        f"{o.station_index}, waterline {o.waterline_index}",
                row=row,
            ))
        grid[i, j] = o.half_breadth
        filled[i, j] = True

    missing = np.argwhere(~filled)
    if len(missing):
        listed = ", ".join(
            f"({stations[i].station_index}, {waterlines[j].waterline_index})"
            for i, j in missing[:MAX_LISTED_MISSING]
        )
        more = f" and {len(missing) - MAX_LISTED_MISSING} more" if len(missing) > MAX_LISTED_MISSING else ""
        issues.append(GeometryIssue(
            code=ErrorCode.GEO_NOT_DENSE,
            field="offsets",
            message=f"Offsets grid has {len(missing)} gap(s) at (station, waterline): {listed}{more}",
        ))

    return grid, issues

"""
errors/taxonomy.py - Error classification for the hydrostatics engine

Every failure the engine can report belongs to one category:

- GEOMETRY: the offsets snapshot itself is unusable (raised at build time)
- PARAMETER: a calculation argument is out of its domain (raised before
  any integration runs)
- COMPUTATION: inputs are valid but the requested quantity does not exist
  (returned as a not-computable result, raised only on demand)
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
from enum import Enum


class ErrorCategory(Enum):
    """Error categories."""
    GEOMETRY = "geometry"
    PARAMETER = "parameter"
    COMPUTATION = "computation"


class ErrorCode(Enum):
    """Specific error codes."""

    # Geometry (1xxx)
    GEO_INVALID = 1001
    GEO_TOO_FEW_STATIONS = 1002
    GEO_TOO_FEW_WATERLINES = 1003
    GEO_DUPLICATE_INDEX = 1004
    GEO_NON_MONOTONIC = 1005
    GEO_NOT_DENSE = 1006
    GEO_NEGATIVE_OFFSET = 1007
    GEO_NON_FINITE = 1008

    # Parameter (2xxx)
    PAR_INVALID = 2001
    PAR_DRAFT = 2002
    PAR_ANGLE_RANGE = 2003
    PAR_STEP = 2004
    PAR_POINT_COUNT = 2005
    PAR_MISSING_KG = 2006
    PAR_UNKNOWN_METHOD = 2007
    PAR_UNKNOWN_CURVE = 2008
    PAR_LENGTH_MISMATCH = 2009
    PAR_DENSITY = 2010
    PAR_DIMENSIONS = 2011

    # Computation (3xxx)
    CMP_ZERO_VOLUME = 3001
    CMP_DRAFT_ABOVE_TABULATED = 3002


class NotComputableReason(Enum):
    """Why a hydrostatic result carries no values."""
    ZERO_VOLUME = "zero_volume"
    DRAFT_ABOVE_TABULATED = "draft_above_tabulated"

    @property
    def code(self) -> ErrorCode:
        if self is NotComputableReason.ZERO_VOLUME:
            return ErrorCode.CMP_ZERO_VOLUME
        return ErrorCode.CMP_DRAFT_ABOVE_TABULATED


@dataclass(frozen=True)
class GeometryIssue:
    """A single problem found while validating an offsets snapshot."""
    code: ErrorCode
    field: str
    message: str
    row: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code.value,
            "field": self.field,
            "message": self.message,
            "row": self.row,
        }


class HydroError(Exception):
    """Base class for all engine errors."""

    category: ErrorCategory = ErrorCategory.PARAMETER
    default_code: ErrorCode = ErrorCode.PAR_INVALID

    def __init__(
        self,
        message: str,
        code: Optional[ErrorCode] = None,
        detail: str = "",
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.detail = detail

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code.value,
            "name": self.code.name,
            "category": self.category.value,
            "message": self.message,
            "detail": self.detail,
        }


class GeometryInvalidError(HydroError, ValueError):
    """The hull geometry snapshot violates a structural invariant."""

    category = ErrorCategory.GEOMETRY
    default_code = ErrorCode.GEO_INVALID

    def __init__(self, issues: List[GeometryIssue]):
        self.issues = list(issues)
        first = self.issues[0] if self.issues else None
        message = first.message if first else "Invalid geometry"
        if len(self.issues) > 1:
            message = f"{message} (+{len(self.issues) - 1} more)"
        super().__init__(message, code=first.code if first else None)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["issues"] = [issue.to_dict() for issue in self.issues]
        return data


class ParameterInvalidError(HydroError, ValueError):
    """A calculation parameter is outside its valid domain."""

    category = ErrorCategory.PARAMETER
    default_code = ErrorCode.PAR_INVALID

    def __init__(
        self,
        message: str,
        code: Optional[ErrorCode] = None,
        parameter: Optional[str] = None,
        value: Any = None,
    ):
        super().__init__(message, code=code)
        self.parameter = parameter
        self.value = value

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["parameter"] = self.parameter
        data["value"] = self.value
        return data


class NotComputableError(HydroError):
    """A quantity was required but the inputs do not define it."""

    category = ErrorCategory.COMPUTATION
    default_code = ErrorCode.CMP_ZERO_VOLUME

    def __init__(self, reason: NotComputableReason, message: str = ""):
        self.reason = reason
        super().__init__(message or f"Not computable: {reason.value}", code=reason.code)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["reason"] = self.reason.value
        return data

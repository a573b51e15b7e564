"""
errors/ - Error Taxonomy

Typed errors and reason codes shared by every engine component.
"""

from .taxonomy import (
    ErrorCategory,
    ErrorCode,
    NotComputableReason,
    GeometryIssue,
    HydroError,
    GeometryInvalidError,
    ParameterInvalidError,
    NotComputableError,
)

__all__ = [
    "ErrorCategory",
    "ErrorCode",
    "NotComputableReason",
    "GeometryIssue",
    "HydroError",
    "GeometryInvalidError",
    "ParameterInvalidError",
    "NotComputableError",
]

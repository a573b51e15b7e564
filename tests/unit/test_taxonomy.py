"""
Unit tests for navhydro/errors/taxonomy.py
"""

import pytest

from navhydro.errors import (
    ErrorCategory,
    ErrorCode,
    GeometryInvalidError,
    NotComputableError,
    NotComputableReason,
    ParameterInvalidError,
)


PREFIXES = {
    ErrorCategory.GEOMETRY: 1,
    ErrorCategory.PARAMETER: 2,
    ErrorCategory.COMPUTATION: 3,
}


class TestErrorCodes:

    def test_every_code_belongs_to_a_category(self):
        for code in ErrorCode:
            assert code.value // 1000 in PREFIXES.values(), code.name

    def test_every_category_has_an_error_class(self):
        raised = {GeometryInvalidError.category, ParameterInvalidError.category, NotComputableError.category}
        assert raised == set(ErrorCategory)

    @pytest.mark.parametrize("reason", list(NotComputableReason))
    def test_reason_codes_are_computation_codes(self, reason):
        assert reason.code.value // 1000 == PREFIXES[ErrorCategory.COMPUTATION]

    def test_not_computable_carries_reason_code(self):
        error = NotComputableError(NotComputableReason.DRAFT_ABOVE_TABULATED)
        data = error.to_dict()
        assert data["category"] == "computation"
        assert data["name"] == "CMP_DRAFT_ABOVE_TABULATED"

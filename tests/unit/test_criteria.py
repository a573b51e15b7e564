"""
Unit tests for navhydro/stability/criteria.py
"""

import pytest

from navhydro.core.geometry import Loadcase
from navhydro.stability.constants import IMO_INTACT, IMOIntactCriteria
from navhydro.stability.criteria import check_intact_criteria
from navhydro.stability.gz_curve import GZCurveCalculator

from conftest import BARGE_T


class TestIntactCriteria:

    def setup_method(self):
        self.calculator = GZCurveCalculator()

    def _curve(self, barge, kg, **kwargs):
        return self.calculator.generate_gz_curve(
            barge.geometry, barge.dimensions, Loadcase(kg=kg), BARGE_T, **kwargs
        )

    def test_stiff_barge_passes(self, barge):
        results = check_intact_criteria(self._curve(barge, 6.0))
        assert results.standard == "IMO A.749(18)"
        assert len(results.criteria) == 6
        assert results.all_passed
        assert results.passed_count == 6
        assert results.summary.startswith("All 6")

    def test_low_gm_fails(self, barge):
        results = check_intact_criteria(self._curve(barge, 9.1))
        by_name = {c.name: c for c in results.criteria}
        gm = by_name["Initial metacentric height (GMt)"]
        assert gm.actual == pytest.approx(2.5 + 20.0 / 3.0 - 9.1)
        assert gm.passed is False
        assert not results.all_passed
        assert "not satisfied" in results.summary

    def test_short_sweep_fails_uncovered_criteria(self, barge):
        results = check_intact_criteria(self._curve(barge, 6.0, max_angle=20.0))
        by_name = {c.name: c for c in results.criteria}
        for name in (
            "Area under GZ curve (0° to 30°)",
            "Area under GZ curve (0° to 40°)",
            "Area under GZ curve (30° to 40°)",
            "Righting arm at 30° heel",
        ):
            assert by_name[name].actual is None
            assert by_name[name].passed is False
            assert by_name[name].notes == "Not covered by the swept heel range"
        assert by_name["Angle at maximum GZ"].passed is False
        assert by_name["Initial metacentric height (GMt)"].passed is True

    def test_custom_limits(self, barge):
        strict = IMOIntactCriteria(standard="Owner", gm_min_m=5.0)
        results = check_intact_criteria(self._curve(barge, 6.0), strict)
        assert results.standard == "Owner"
        assert results.passed_count == 5

    def test_area_notes_in_degrees(self, barge):
        results = check_intact_criteria(self._curve(barge, 6.0))
        assert "m·deg" in results.criteria[0].notes

    def test_to_dict(self, barge):
        data = check_intact_criteria(self._curve(barge, 6.0)).to_dict()
        assert data["all_passed"] is True
        assert data["passed_count"] == 6
        assert data["criteria"][0]["unit"] == "m·rad"
        assert data["criteria"][0]["required"] == IMO_INTACT.area_0_30_min_m_rad

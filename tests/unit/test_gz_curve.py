"""
Unit tests for navhydro/stability/gz_curve.py

Tests for GZ curve generation, vanishing angle and areas under the curve.
"""

import math

import numpy as np
import pytest

from navhydro.core.geometry import Loadcase
from navhydro.errors import (
    ErrorCode,
    NotComputableError,
    NotComputableReason,
    ParameterInvalidError,
)
from navhydro.physics.hydrostatics import DraftPolicy, HydrostaticsCalculator
from navhydro.stability.constants import StabilityMethod
from navhydro.stability.gz_curve import (
    GZCurveCalculator,
    StabilityCurve,
    StabilityPoint,
    find_vanishing_angle,
    heel_angles,
    parse_method,
)

from conftest import BARGE_T


def _points(angles, gz):
    return [StabilityPoint(heel_angle=a, gz=g, kn=0.0) for a, g in zip(angles, gz)]


def _wall_sided_area(gm, bm, angle_deg):
    """∫0..a GM·sinφ + (BM/2)·sinφ·tan²φ dφ"""
    a = math.radians(angle_deg)
    return gm * (1.0 - math.cos(a)) + 0.5 * bm * (1.0 / math.cos(a) + math.cos(a) - 2.0)


class TestHeelAngles:

    def test_max_angle_appended(self):
        assert heel_angles(0.0, 32.0, 5.0) == [0.0, 5.0, 10.0, 15.0, 20.0, 25.0, 30.0, 32.0]

    def test_exact_multiple(self):
        angles = heel_angles(0.0, 90.0, 5.0)
        assert len(angles) == 19
        assert angles[-1] == 90.0

    def test_fractional_step_ends_on_max(self):
        angles = heel_angles(0.0, 1.0, 0.1)
        assert len(angles) == 11
        assert angles[-1] == 1.0

    def test_non_zero_start(self):
        assert heel_angles(10.0, 20.0, 4.0) == [10.0, 14.0, 18.0, 20.0]


class TestFindVanishingAngle:

    def test_interpolated_crossing(self):
        points = _points([0, 10, 20, 30, 40], [0.0, 1.0, 2.0, 1.0, -1.0])
        assert find_vanishing_angle(points) == pytest.approx(35.0)

    def test_initial_negative_dip_ignored(self):
        points = _points([0, 10, 20, 30], [0.0, -0.1, 0.5, -0.5])
        assert find_vanishing_angle(points) == pytest.approx(25.0)

    def test_exact_zero_sample(self):
        points = _points([0, 10, 20], [0.0, 1.0, 0.0])
        assert find_vanishing_angle(points) == pytest.approx(20.0)

    def test_never_vanishes(self):
        assert find_vanishing_angle(_points([0, 10, 20], [0.0, 0.5, 1.0])) is None

    def test_never_positive(self):
        assert find_vanishing_angle(_points([0, 10, 20], [0.0, -0.5, -1.0])) is None


class TestParseMethod:

    @pytest.mark.parametrize("value", [
        StabilityMethod.WALL_SIDED, "wall_sided", "WallSided", "wall-sided", "WALL_SIDED",
    ])
    def test_wall_sided_spellings(self, value):
        assert parse_method(value) is StabilityMethod.WALL_SIDED

    def test_full_immersion(self):
        assert parse_method("FullImmersion") is StabilityMethod.FULL_IMMERSION

    def test_unknown(self):
        with pytest.raises(ParameterInvalidError) as exc:
            parse_method("simpson")
        assert exc.value.code == ErrorCode.PAR_UNKNOWN_METHOD


class TestWallSidedCurve:
    """Box barge at 5 m draft, KG 6 m: GM = 3.1667 m, BMt = 6.6667 m."""

    def setup_method(self):
        self.calculator = GZCurveCalculator()

    def test_zero_heel_has_zero_gz(self, barge, loaded):
        curve = self.calculator.generate_gz_curve(barge.geometry, barge.dimensions, loaded, BARGE_T)
        assert curve.points[0].heel_angle == 0.0
        assert curve.points[0].gz == pytest.approx(0.0, abs=1e-12)

    def test_default_sweep(self, barge, loaded):
        curve = self.calculator.generate_gz_curve(barge.geometry, barge.dimensions, loaded, BARGE_T)
        assert curve.angles[-1] == 80.0
        assert len(curve.points) == 17
        assert curve.method == "wall_sided"

    def test_formula(self, barge, loaded):
        curve = self.calculator.generate_gz_curve(
            barge.geometry, barge.dimensions, loaded, BARGE_T, max_angle=40.0
        )
        gm = 2.5 + 20.0 / 3.0 - 6.0
        for p in curve.points:
            phi = math.radians(p.heel_angle)
            expected = math.sin(phi) * (gm + (10.0 / 3.0) * math.tan(phi) ** 2)
            assert p.gz == pytest.approx(expected, abs=1e-9)
            assert p.kn == pytest.approx(p.gz + 6.0 * math.sin(phi), abs=1e-9)

    def test_summary_values(self, barge, loaded):
        curve = self.calculator.generate_gz_curve(
            barge.geometry, barge.dimensions, loaded, BARGE_T, max_angle=40.0
        )
        assert curve.initial_gmt == pytest.approx(2.5 + 20.0 / 3.0 - 6.0)
        assert curve.displacement == pytest.approx(10_000.0 * 1025.0)
        assert curve.kg == 6.0
        assert curve.draft == BARGE_T
        assert curve.angle_at_max_gz == 40.0
        assert curve.max_gz == pytest.approx(curve.points[-1].gz)

    def test_area_0_30(self, barge, loaded):
        curve = self.calculator.generate_gz_curve(
            barge.geometry, barge.dimensions, loaded, BARGE_T, max_angle=40.0
        )
        expected = _wall_sided_area(2.5 + 20.0 / 3.0 - 6.0, 20.0 / 3.0, 30.0)
        assert expected == pytest.approx(0.49334, rel=1e-4)
        assert curve.area_0_30 == pytest.approx(expected, rel=5e-3)

    def test_areas_add_up(self, barge, loaded):
        curve = self.calculator.generate_gz_curve(
            barge.geometry, barge.dimensions, loaded, BARGE_T, max_angle=40.0
        )
        assert curve.area_0_40 == pytest.approx(curve.area_0_30 + curve.area_30_40)

    def test_gz_at_30(self, barge, loaded):
        curve = self.calculator.generate_gz_curve(barge.geometry, barge.dimensions, loaded, BARGE_T)
        phi = math.radians(30.0)
        expected = math.sin(phi) * (2.5 + 20.0 / 3.0 - 6.0 + (10.0 / 3.0) * math.tan(phi) ** 2)
        assert curve.gz_at_30 == pytest.approx(expected)

    def test_no_vanishing_angle_within_sweep(self, barge, loaded):
        curve = self.calculator.generate_gz_curve(barge.geometry, barge.dimensions, loaded, BARGE_T)
        assert curve.vanishing_angle_found is False
        assert curve.vanishing_angle == 80.0
        assert any("does not vanish" in w for w in curve.warnings)
        assert curve.area_30_vanishing == pytest.approx(
            self.calculator.area_between(curve.points, 30.0, 80.0)
        )

    def test_accuracy_warning_above_40(self, barge, loaded):
        curve = self.calculator.generate_gz_curve(barge.geometry, barge.dimensions, loaded, BARGE_T)
        assert any("less accurate" in w for w in curve.warnings)
        short = self.calculator.generate_gz_curve(
            barge.geometry, barge.dimensions, loaded, BARGE_T, max_angle=40.0
        )
        assert not any("less accurate" in w for w in short.warnings)

    def test_short_sweep_leaves_areas_undefined(self, barge, loaded):
        curve = self.calculator.generate_gz_curve(
            barge.geometry, barge.dimensions, loaded, BARGE_T, max_angle=20.0
        )
        assert curve.area_0_30 is None
        assert curve.area_0_40 is None
        assert curve.area_30_40 is None
        assert curve.gz_at_30 is None

    def test_unstable_vessel(self, barge):
        top_heavy = Loadcase(kg=12.0)
        curve = self.calculator.generate_gz_curve(
            barge.geometry, barge.dimensions, top_heavy, BARGE_T, max_angle=20.0
        )
        assert curve.initial_gmt < 0
        assert curve.vanishing_angle_found is False
        assert any("never positive" in w for w in curve.warnings)

    def test_never_positive_has_no_area_past_30(self, barge):
        top_heavy = Loadcase(kg=20.0)
        curve = self.calculator.generate_gz_curve(
            barge.geometry, barge.dimensions, top_heavy, BARGE_T, max_angle=60.0
        )
        assert curve.max_gz <= 0
        assert curve.area_30_vanishing == 0.0
        assert curve.area_0_30 < 0

    def test_numpy_draft_accepted(self, barge, loaded):
        curve = self.calculator.generate_gz_curve(
            barge.geometry, barge.dimensions, loaded, np.float64(BARGE_T), max_angle=30.0
        )
        assert curve.draft == BARGE_T
        assert type(curve.draft) is float

    def test_parallel_matches_serial(self, barge, loaded):
        serial = self.calculator.generate_gz_curve(barge.geometry, barge.dimensions, loaded, BARGE_T)
        parallel = GZCurveCalculator(max_workers=4).generate_gz_curve(
            barge.geometry, barge.dimensions, loaded, BARGE_T
        )
        assert parallel.gz_values == serial.gz_values


class TestFullImmersionCurve:

    def setup_method(self):
        self.calculator = GZCurveCalculator()

    def test_matches_wall_sided_before_deck_edge(self, barge, loaded):
        wall = self.calculator.generate_gz_curve(
            barge.geometry, barge.dimensions, loaded, BARGE_T, max_angle=25.0
        )
        full = self.calculator.generate_gz_curve(
            barge.geometry, barge.dimensions, loaded, BARGE_T, max_angle=25.0,
            method="full_immersion",
        )
        assert full.method == "full_immersion"
        assert full.gz_values == pytest.approx(wall.gz_values, rel=1e-6, abs=1e-9)

    def test_righting_arm_on_its_side(self, barge, loaded):
        curve = self.calculator.generate_gz_curve(
            barge.geometry, barge.dimensions, loaded, BARGE_T, max_angle=90.0,
            method=StabilityMethod.FULL_IMMERSION,
        )
        assert curve.points[-1].kn == pytest.approx(5.0, rel=1e-6)
        assert curve.points[-1].gz == pytest.approx(-1.0, rel=1e-5)
        assert curve.vanishing_angle_found is True
        assert 30.0 < curve.vanishing_angle < 90.0

    def test_finds_vanishing_angle_wall_sided_misses(self, barge):
        tender = Loadcase(kg=9.0)
        wall = self.calculator.generate_gz_curve(
            barge.geometry, barge.dimensions, tender, BARGE_T, max_angle=85.0
        )
        full = self.calculator.generate_gz_curve(
            barge.geometry, barge.dimensions, tender, BARGE_T, max_angle=90.0,
            method="full_immersion",
        )
        assert wall.initial_gmt == pytest.approx(1.0 / 6.0)
        assert wall.vanishing_angle_found is False
        assert full.vanishing_angle_found is True
        assert full.vanishing_angle < 90.0

    def test_large_angle_sweep_allowed(self, barge, loaded):
        curve = self.calculator.generate_gz_curve(
            barge.geometry, barge.dimensions, loaded, BARGE_T, max_angle=180.0,
            angle_increment=30.0, method="full_immersion",
        )
        assert curve.angles == [0.0, 30.0, 60.0, 90.0, 120.0, 150.0, 180.0]
        # upside down the barge floats symmetric again
        assert curve.points[-1].gz == pytest.approx(0.0, abs=1e-6)

    def test_draft_above_hull_not_computable(self, barge, loaded):
        calculator = GZCurveCalculator(HydrostaticsCalculator(draft_policy=DraftPolicy.EXTRAPOLATE))
        with pytest.raises(NotComputableError) as exc:
            calculator.generate_gz_curve(
                barge.geometry, barge.dimensions, loaded, 11.0, method="full_immersion"
            )
        assert exc.value.reason is NotComputableReason.DRAFT_ABOVE_TABULATED


class TestInputValidation:

    def setup_method(self):
        self.calculator = GZCurveCalculator()

    def _generate(self, barge, loadcase, **kwargs):
        params = {"draft": BARGE_T}
        params.update(kwargs)
        return self.calculator.generate_gz_curve(barge.geometry, barge.dimensions, loadcase, **params)

    def test_missing_kg(self, barge, seawater):
        with pytest.raises(ParameterInvalidError) as exc:
            self._generate(barge, seawater)
        assert exc.value.code == ErrorCode.PAR_MISSING_KG

    @pytest.mark.parametrize("draft", [0.0, -1.0, float("inf")])
    def test_bad_draft(self, barge, loaded, draft):
        with pytest.raises(ParameterInvalidError) as exc:
            self._generate(barge, loaded, draft=draft)
        assert exc.value.code == ErrorCode.PAR_DRAFT

    @pytest.mark.parametrize("min_angle,max_angle", [
        (30.0, 30.0), (40.0, 10.0), (-5.0, 40.0), (0.0, 200.0), (0.0, float("nan")),
    ])
    def test_bad_angle_range(self, barge, loaded, min_angle, max_angle):
        with pytest.raises(ParameterInvalidError) as exc:
            self._generate(barge, loaded, min_angle=min_angle, max_angle=max_angle,
                           method="full_immersion")
        assert exc.value.code == ErrorCode.PAR_ANGLE_RANGE

    @pytest.mark.parametrize("step", [0.0, -5.0])
    def test_bad_step(self, barge, loaded, step):
        with pytest.raises(ParameterInvalidError) as exc:
            self._generate(barge, loaded, angle_increment=step)
        assert exc.value.code == ErrorCode.PAR_STEP

    def test_wall_sided_rejects_90(self, barge, loaded):
        with pytest.raises(ParameterInvalidError) as exc:
            self._generate(barge, loaded, max_angle=90.0)
        assert exc.value.code == ErrorCode.PAR_ANGLE_RANGE

    def test_unknown_method(self, barge, loaded):
        with pytest.raises(ParameterInvalidError) as exc:
            self._generate(barge, loaded, method="exact")
        assert exc.value.code == ErrorCode.PAR_UNKNOWN_METHOD

    def test_draft_above_tabulated(self, barge, loaded):
        with pytest.raises(NotComputableError):
            self._generate(barge, loaded, draft=12.0)


class TestStabilityCurve:

    def _curve(self):
        return StabilityCurve(
            points=_points([0.0, 10.0, 20.0], [0.0, 0.5, 0.8]),
            method="wall_sided",
            draft=5.0,
            kg=6.0,
            displacement=1.0e7,
            initial_gmt=3.0,
        )

    def test_gz_at_interpolates(self):
        curve = self._curve()
        assert curve.gz_at(15.0) == pytest.approx(0.65)
        assert curve.gz_at(20.0) == pytest.approx(0.8)

    def test_gz_at_outside_sweep(self):
        assert self._curve().gz_at(30.0) is None

    def test_dict_round_trip(self, barge, loaded):
        curve = GZCurveCalculator().generate_gz_curve(barge.geometry, barge.dimensions, loaded, BARGE_T)
        data = curve.to_dict()
        assert data["method"] == "wall_sided"
        assert len(data["points"]) == 17
        restored = StabilityCurve.from_dict(data)
        assert restored == curve


class TestAvailableMethods:

    def test_catalogue(self):
        methods = GZCurveCalculator().available_methods()
        assert [m["id"] for m in methods] == ["wall_sided", "full_immersion"]
        assert methods[0]["max_recommended_angle_deg"] == 40.0

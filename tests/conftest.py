"""
navhydro Test Configuration and Fixtures

Template hulls with closed-form hydrostatics shared across the suite.
"""

import pytest

from navhydro.core.geometry import Loadcase
from navhydro.hull_gen.templates import box_barge, v_section_hull, wigley_hull
from navhydro.physics.curves import CurvesGenerator
from navhydro.physics.hydrostatics import HydrostaticsCalculator
from navhydro.stability.gz_curve import GZCurveCalculator


# Reference barge: L=100, B=20, depth 10, design draft 5
BARGE_L = 100.0
BARGE_B = 20.0
BARGE_T = 5.0
RHO = 1025.0


@pytest.fixture
def barge():
    """Box barge 100 x 20 x 10, 11 stations x 11 waterlines (1 m apart)."""
    return box_barge(length=BARGE_L, beam=BARGE_B, depth=10.0, design_draft=BARGE_T)


@pytest.fixture
def wigley():
    """Wigley hull 100 x 10 x 6.25, waterlines up to the design draft."""
    return wigley_hull(length=100.0, beam=10.0, draft=6.25, stations=21, waterlines=13)


@pytest.fixture
def v_hull():
    """Triangular-section prism 50 x 10 x 5, zero breadth at the keel."""
    return v_section_hull(length=50.0, beam=10.0, depth=5.0, design_draft=4.0)


@pytest.fixture
def seawater():
    return Loadcase(rho=RHO)


@pytest.fixture
def loaded():
    """Seawater loadcase with KG = 6 m (barge GMt = 3.1667 m at 5 m draft)."""
    return Loadcase(rho=RHO, kg=6.0, name="Design Condition")


@pytest.fixture
def calculator():
    return HydrostaticsCalculator()


@pytest.fixture
def curves(calculator):
    return CurvesGenerator(calculator)


@pytest.fixture
def gz_calculator(calculator):
    return GZCurveCalculator(calculator)

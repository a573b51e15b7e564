"""
bootstrap/engine.py - Engine assembly

Builds the integration engine once and hands it down to the hydrostatics
calculator, which is shared by the curve generator and the GZ calculator.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional
import logging

from navhydro.core.geometry import Loadcase
from navhydro.physics.curves import CurvesGenerator
from navhydro.physics.hydrostatics import HydrostaticsCalculator
from navhydro.physics.integration import IntegrationEngine
from navhydro.stability.gz_curve import GZCurveCalculator

from .config import EngineConfig, NavHydroConfig, get_config

logger = logging.getLogger("navhydro.bootstrap.engine")


@dataclass(frozen=True)
class Engine:
    """Composed calculators sharing one integration engine."""
    config: EngineConfig
    integration: IntegrationEngine
    hydrostatics: HydrostaticsCalculator
    curves: CurvesGenerator
    stability: GZCurveCalculator

    def loadcase(self, kg: Optional[float] = None, rho: Optional[float] = None, name: str = "") -> Loadcase:
        """Loadcase with the configured default density."""
        return Loadcase(rho=self.config.default_rho if rho is None else rho, kg=kg, name=name)


def build_engine(config: Optional[NavHydroConfig] = None) -> Engine:
    """Assemble an Engine from configuration (global config if omitted)."""
    engine_config = (config or get_config()).engine

    integration = IntegrationEngine(spacing_tolerance=engine_config.spacing_tolerance)
    hydrostatics = HydrostaticsCalculator(
        integration=integration,
        draft_policy=engine_config.policy,
        max_workers=engine_config.max_workers,
    )
    curves = CurvesGenerator(hydrostatics, default_point_count=engine_config.default_point_count)
    stability = GZCurveCalculator(
        hydrostatics,
        max_workers=engine_config.max_workers,
        xtol=engine_config.brent_xtol,
    )

    logger.debug(
        f"Engine built: policy={engine_config.draft_policy}, workers={engine_config.max_workers}"
    )
    return Engine(
        config=engine_config,
        integration=integration,
        hydrostatics=hydrostatics,
        curves=curves,
        stability=stability,
    )

"""
deployment/api.py - REST API

Exposes the hydrostatics engine over HTTP. Request bodies carry the full
geometry snapshot; nothing is stored between requests.

Error mapping:
- GeometryInvalidError -> 422 with the list of issues
- ParameterInvalidError -> 400
- NotComputableError -> 409 (stability); hydrostatics endpoints return the
  not-computable result itself with 200
"""

from __future__ import annotations
from typing import Any, Dict, List, Optional
import logging

from fastapi import APIRouter, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, field_validator

from navhydro.bootstrap.config import NavHydroConfig, get_config
from navhydro.bootstrap.engine import Engine, build_engine
from navhydro.core.constants import (
    DEFAULT_HEEL_STEP_DEG,
    DEFAULT_MAX_HEEL_DEG,
    DEFAULT_MIN_HEEL_DEG,
)
from navhydro.core.geometry import HullGeometry, Loadcase, PrincipalDimensions
from navhydro.errors import (
    GeometryInvalidError,
    HydroError,
    NotComputableError,
    ParameterInvalidError,
)
from navhydro.stability.constants import StabilityMethod
from navhydro.stability.criteria import check_intact_criteria

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


# =============================================================================
# Request Models
# =============================================================================

class StationModel(BaseModel):
    station_index: int
    x: float


class WaterlineModel(BaseModel):
    waterline_index: int
    z: float


class OffsetModel(BaseModel):
    station_index: int
    waterline_index: int
    half_breadth: float


class GeometryModel(BaseModel):
    """Offsets snapshot."""
    stations: List[StationModel]
    waterlines: List[WaterlineModel]
    offsets: List[OffsetModel]

    def to_geometry(self) -> HullGeometry:
        return HullGeometry.from_dict(self.model_dump())


class DimensionsModel(BaseModel):
    lpp: float
    beam: float

    def to_dimensions(self) -> PrincipalDimensions:
        return PrincipalDimensions(lpp=self.lpp, beam=self.beam)


class LoadcaseModel(BaseModel):
    rho: Optional[float] = None
    kg: Optional[float] = None
    name: str = ""


class VesselRequest(BaseModel):
    """Geometry, dimensions and loadcase shared by most requests."""
    geometry: GeometryModel
    dimensions: DimensionsModel
    loadcase: LoadcaseModel = Field(default_factory=LoadcaseModel)


class HydrostaticsRequest(VesselRequest):
    draft: float


class HydrostaticsTableRequest(VesselRequest):
    """Explicit ``drafts`` or an evenly spaced range."""
    drafts: Optional[List[float]] = None
    min_draft: Optional[float] = None
    max_draft: Optional[float] = None
    point_count: Optional[int] = None


class BonjeanRequest(BaseModel):
    geometry: GeometryModel


class HydrostaticCurvesRequest(VesselRequest):
    types: List[str]
    min_draft: float
    max_draft: float
    point_count: Optional[int] = None

    @field_validator("types")
    @classmethod
    def validate_types(cls, v):
        if not v:
            raise ValueError("types list cannot be empty")
        return v


class GZRequest(VesselRequest):
    draft: float
    min_angle: float = DEFAULT_MIN_HEEL_DEG
    max_angle: float = DEFAULT_MAX_HEEL_DEG
    angle_increment: float = DEFAULT_HEEL_STEP_DEG
    method: str = StabilityMethod.WALL_SIDED.value


# =============================================================================
# Helpers
# =============================================================================

def _vessel(engine: Engine, req: VesselRequest):
    geometry = req.geometry.to_geometry()
    dimensions = req.dimensions.to_dimensions()
    loadcase = engine.loadcase(kg=req.loadcase.kg, rho=req.loadcase.rho, name=req.loadcase.name)
    return geometry, dimensions, loadcase


def _error_response(status_code: int, error: HydroError) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": error.to_dict()})


def _gz_curve(engine: Engine, req: GZRequest):
    geometry, dimensions, loadcase = _vessel(engine, req)
    return engine.stability.generate_gz_curve(
        geometry,
        dimensions,
        loadcase,
        req.draft,
        min_angle=req.min_angle,
        max_angle=req.max_angle,
        angle_increment=req.angle_increment,
        method=req.method,
    )


# =============================================================================
# Router
# =============================================================================

def create_router(engine: Engine) -> APIRouter:
    router = APIRouter(prefix=API_PREFIX)

    @router.post("/hydrostatics")
    def hydrostatics(req: HydrostaticsRequest) -> Dict[str, Any]:
        geometry, dimensions, loadcase = _vessel(engine, req)
        result = engine.hydrostatics.compute_at(geometry, dimensions, req.draft, loadcase)
        return result.to_dict()

    @router.post("/hydrostatics/table")
    def hydrostatics_table(req: HydrostaticsTableRequest) -> Dict[str, Any]:
        geometry, dimensions, loadcase = _vessel(engine, req)
        if req.drafts is not None:
            drafts = req.drafts
        elif req.min_draft is not None and req.max_draft is not None:
            drafts = engine.curves.draft_range(
                req.min_draft,
                req.max_draft,
                req.point_count or engine.config.default_point_count,
            )
        else:
            raise ParameterInvalidError(
                "Either drafts or min_draft and max_draft are required",
                parameter="drafts",
            )
        results = engine.hydrostatics.compute_table(geometry, dimensions, drafts, loadcase)
        return {"results": [r.to_dict() for r in results]}

    @router.post("/curves/bonjean")
    def bonjean_curves(req: BonjeanRequest) -> Dict[str, Any]:
        curves = engine.curves.generate_bonjean_curves(req.geometry.to_geometry())
        return {"curves": [c.to_dict() for c in curves]}

    @router.post("/curves/hydrostatic")
    def hydrostatic_curves(req: HydrostaticCurvesRequest) -> Dict[str, Any]:
        geometry, dimensions, loadcase = _vessel(engine, req)
        curves = engine.curves.generate_hydrostatic_curves(
            geometry,
            dimensions,
            loadcase,
            types=req.types,
            min_draft=req.min_draft,
            max_draft=req.max_draft,
            point_count=req.point_count,
        )
        return {"curves": {name: c.to_dict() for name, c in curves.items()}}

    @router.post("/stability/gz")
    def gz_curve(req: GZRequest) -> Dict[str, Any]:
        return _gz_curve(engine, req).to_dict()

    @router.post("/stability/criteria")
    def stability_criteria(req: GZRequest) -> Dict[str, Any]:
        curve = _gz_curve(engine, req)
        return {
            "curve": curve.to_dict(),
            "criteria": check_intact_criteria(curve).to_dict(),
        }

    @router.get("/stability/methods")
    def stability_methods() -> Dict[str, Any]:
        return {"methods": engine.stability.available_methods()}

    return router


def create_app(config: Optional[NavHydroConfig] = None) -> FastAPI:
    """
    Create FastAPI application.

    Args:
        config: Application configuration (global config if omitted)

    Returns:
        FastAPI application instance
    """
    config = config or get_config()
    engine = build_engine(config)

    app = FastAPI(
        title="navhydro API",
        description="Hydrostatics and stability engine",
        version=config.version,
        docs_url=config.api.docs_url if config.api.enable_docs else None,
        redoc_url="/redoc" if config.api.enable_docs else None,
    )
    app.state.engine = engine

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.api.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(GeometryInvalidError)
    async def geometry_error(request: Request, exc: GeometryInvalidError):
        logger.info(f"Rejected geometry: {exc.message}")
        return _error_response(422, exc)

    @app.exception_handler(ParameterInvalidError)
    async def parameter_error(request: Request, exc: ParameterInvalidError):
        logger.info(f"Rejected parameter: {exc.message}")
        return _error_response(400, exc)

    @app.exception_handler(NotComputableError)
    async def not_computable(request: Request, exc: NotComputableError):
        return _error_response(409, exc)

    @app.get("/health")
    def health() -> Dict[str, Any]:
        return {"status": "healthy", "version": config.version}

    app.include_router(create_router(engine))
    logger.info("navhydro API created")
    return app

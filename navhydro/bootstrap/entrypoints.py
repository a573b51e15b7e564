"""
bootstrap/entrypoints.py - Application entry points

Provides the command line interface and the API server entry point.
Every calculation subcommand reads a JSON geometry snapshot, runs the
engine and prints JSON to stdout.
"""

from __future__ import annotations
from pathlib import Path
from typing import Any, Dict
import argparse
import json
import logging
import sys

from navhydro.core.geometry import HullGeometry, PrincipalDimensions
from navhydro.errors import ErrorCode, HydroError, ParameterInvalidError

logger = logging.getLogger("navhydro.bootstrap.entrypoints")

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class JSONFormatter(logging.Formatter):
    def format(self, record):
        return json.dumps({
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        })


def setup_logging(level: str = "INFO", log_file: str = None, json_format: bool = False) -> None:
    """
    Configure application logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional log file path
        json_format: Use JSON format for logs
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    formatter = JSONFormatter() if json_format else logging.Formatter(LOG_FORMAT)

    # Console handler; stdout carries the JSON results
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(log_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for handler in [h for h in root_logger.handlers if getattr(h, "_navhydro", False)]:
        root_logger.removeHandler(handler)
    console_handler._navhydro = True
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        file_handler.setLevel(log_level)
        file_handler._navhydro = True
        root_logger.addHandler(file_handler)

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


# =============================================================================
# INPUT
# =============================================================================

def load_snapshot(path: str) -> Dict[str, Any]:
    """
    Read a vessel snapshot: ``{"dimensions": {...}, "geometry": {...}}``.

    A bare geometry dictionary (stations/waterlines/offsets at the top level)
    is accepted when dimensions are passed on the command line.
    """
    with open(Path(path)) as f:
        data = json.load(f)
    if "geometry" not in data:
        data = {"geometry": data}
    return data


def _resolve_inputs(parsed: argparse.Namespace):
    snapshot = load_snapshot(parsed.geometry)
    geometry = HullGeometry.from_dict(snapshot["geometry"])
    dims = dict(snapshot.get("dimensions") or {})
    if parsed.lpp is not None:
        dims["lpp"] = parsed.lpp
    if parsed.beam is not None:
        dims["beam"] = parsed.beam
    if "lpp" not in dims or "beam" not in dims:
        raise ParameterInvalidError(
            "Principal dimensions missing: give --lpp and --beam or a 'dimensions' entry",
            code=ErrorCode.PAR_DIMENSIONS,
            parameter="dimensions",
        )
    return geometry, PrincipalDimensions(lpp=float(dims["lpp"]), beam=float(dims["beam"]))


# =============================================================================
# SUBCOMMANDS
# =============================================================================

def _cmd_hydro(engine, parsed) -> Any:
    geometry, dims = _resolve_inputs(parsed)
    loadcase = engine.loadcase(kg=parsed.kg, rho=parsed.rho)
    return engine.hydrostatics.compute_at(geometry, dims, parsed.draft, loadcase).to_dict()


def _cmd_table(engine, parsed) -> Any:
    geometry, dims = _resolve_inputs(parsed)
    loadcase = engine.loadcase(kg=parsed.kg, rho=parsed.rho)
    drafts = engine.curves.draft_range(parsed.min_draft, parsed.max_draft, parsed.points)
    results = engine.hydrostatics.compute_table(geometry, dims, drafts, loadcase)
    return [r.to_dict() for r in results]


def _cmd_bonjean(engine, parsed) -> Any:
    geometry, _ = _resolve_inputs(parsed)
    return [c.to_dict() for c in engine.curves.generate_bonjean_curves(geometry)]


def _cmd_curves(engine, parsed) -> Any:
    geometry, dims = _resolve_inputs(parsed)
    loadcase = engine.loadcase(kg=parsed.kg, rho=parsed.rho)
    curves = engine.curves.generate_hydrostatic_curves(
        geometry, dims, loadcase,
        types=parsed.types.split(","),
        min_draft=parsed.min_draft,
        max_draft=parsed.max_draft,
        point_count=parsed.points,
    )
    return {name: curve.to_dict() for name, curve in curves.items()}


def _cmd_gz(engine, parsed) -> Any:
    from navhydro.stability.criteria import check_intact_criteria

    geometry, dims = _resolve_inputs(parsed)
    loadcase = engine.loadcase(kg=parsed.kg, rho=parsed.rho)
    curve = engine.stability.generate_gz_curve(
        geometry, dims, loadcase, parsed.draft,
        min_angle=parsed.min_angle,
        max_angle=parsed.max_angle,
        angle_increment=parsed.step,
        method=parsed.method,
    )
    output = curve.to_dict()
    if parsed.criteria:
        output["criteria"] = check_intact_criteria(curve).to_dict()
    return output


def _cmd_template(engine, parsed) -> Any:
    from navhydro.hull_gen.templates import generate_template

    template = generate_template(parsed.name)
    return template.to_dict()


def build_parser() -> argparse.ArgumentParser:
    from navhydro.core.constants import (
        DEFAULT_HEEL_STEP_DEG,
        DEFAULT_MAX_HEEL_DEG,
        DEFAULT_MIN_HEEL_DEG,
    )
    from navhydro.hull_gen.templates import list_templates
    from navhydro.stability.constants import StabilityMethod

    parser = argparse.ArgumentParser(
        description="navhydro hydrostatics and stability engine",
        prog="navhydro",
    )
    parser.add_argument("-c", "--config", help="Path to configuration file", default=None)
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Log level",
    )
    parser.add_argument("--log-file", help="Log file path", default=None)
    parser.add_argument("-o", "--output", help="Write JSON to this file instead of stdout", default=None)

    sub = parser.add_subparsers(dest="command", required=True)

    def with_geometry(p: argparse.ArgumentParser, loadcase: bool = True) -> argparse.ArgumentParser:
        p.add_argument("geometry", help="JSON vessel or geometry snapshot")
        p.add_argument("--lpp", type=float, default=None, help="Length between perpendiculars")
        p.add_argument("--beam", type=float, default=None, help="Moulded beam")
        if loadcase:
            p.add_argument("--kg", type=float, default=None, help="Vertical centre of gravity")
            p.add_argument("--rho", type=float, default=None, help="Fluid density")
        return p

    p = with_geometry(sub.add_parser("hydro", help="Hydrostatics at one draft"))
    p.add_argument("--draft", type=float, required=True)
    p.set_defaults(handler=_cmd_hydro)

    p = with_geometry(sub.add_parser("table", help="Hydrostatics over a draft range"))
    p.add_argument("--min-draft", type=float, required=True)
    p.add_argument("--max-draft", type=float, required=True)
    p.add_argument("--points", type=int, default=None)
    p.set_defaults(handler=_cmd_table)

    p = with_geometry(sub.add_parser("bonjean", help="Bonjean curves"), loadcase=False)
    p.set_defaults(handler=_cmd_bonjean)

    p = with_geometry(sub.add_parser("curves", help="Hydrostatic curves"))
    p.add_argument("--types", default="displacement,kb,lcb,awp", help="Comma-separated curve types")
    p.add_argument("--min-draft", type=float, required=True)
    p.add_argument("--max-draft", type=float, required=True)
    p.add_argument("--points", type=int, default=None)
    p.set_defaults(handler=_cmd_curves)

    p = with_geometry(sub.add_parser("gz", help="GZ curve at one draft"))
    p.add_argument("--draft", type=float, required=True)
    p.add_argument("--min-angle", type=float, default=DEFAULT_MIN_HEEL_DEG)
    p.add_argument("--max-angle", type=float, default=DEFAULT_MAX_HEEL_DEG)
    p.add_argument("--step", type=float, default=DEFAULT_HEEL_STEP_DEG)
    p.add_argument(
        "--method",
        choices=[m.value for m in StabilityMethod],
        default=StabilityMethod.WALL_SIDED.value,
    )
    p.add_argument("--criteria", action="store_true", help="Include IMO intact criteria check")
    p.set_defaults(handler=_cmd_gz)

    p = sub.add_parser("template", help="Generate a template hull snapshot")
    p.add_argument("name", choices=list_templates())
    p.set_defaults(handler=_cmd_template)

    return parser


def cli_main(args: list = None) -> int:
    """
    CLI entry point.

    Args:
        args: Command line arguments (defaults to sys.argv)

    Returns:
        Exit code
    """
    from .config import load_config
    from .engine import build_engine

    parser = build_parser()
    parsed = parser.parse_args(args)

    log_level = "DEBUG" if parsed.verbose else parsed.log_level
    setup_logging(level=log_level, log_file=parsed.log_file)

    try:
        engine = build_engine(load_config(parsed.config))
        if hasattr(parsed, "points") and parsed.points is None:
            parsed.points = engine.config.default_point_count
        result = parsed.handler(engine, parsed)
    except HydroError as e:
        print(json.dumps({"error": e.to_dict()}, indent=2, default=str), file=sys.stderr)
        return 2
    except OSError as e:
        logger.error(f"Cannot read input: {e}")
        return 1
    except (ValueError, KeyError) as e:
        logger.error(f"Malformed input: {e}")
        return 1

    text = json.dumps(result, indent=2)
    if parsed.output:
        Path(parsed.output).write_text(text + "\n")
    else:
        print(text)
    return 0


def api_main(args: list = None) -> None:
    """
    API server entry point.

    Args:
        args: Command line arguments
    """
    parser = argparse.ArgumentParser(
        description="navhydro API Server",
        prog="navhydro-api",
    )
    parser.add_argument("-c", "--config", help="Path to configuration file", default=None)
    parser.add_argument("-p", "--port", type=int, help="API port", default=None)
    parser.add_argument("-H", "--host", help="API host", default=None)
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Log level",
    )

    parsed = parser.parse_args(args)

    import uvicorn

    from .config import load_config
    from navhydro.deployment.api import create_app

    config = load_config(parsed.config)
    setup_logging(
        level=parsed.log_level or config.logging.level,
        log_file=config.logging.log_file,
        json_format=config.logging.json_logs,
    )
    if parsed.port:
        config.api.port = parsed.port
    if parsed.host:
        config.api.host = parsed.host

    try:
        uvicorn.run(create_app(config), host=config.api.host, port=config.api.port)
    except KeyboardInterrupt:
        print("\nShutting down...")


def main():
    """Main entry point for the package."""
    sys.exit(cli_main(sys.argv[1:]))


if __name__ == "__main__":
    main()

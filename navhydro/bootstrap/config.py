"""
bootstrap/config.py - Engine configuration

Provides configuration loading from files, environment variables, and defaults.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from pathlib import Path
import os
import json
import logging

from navhydro.core.constants import (
    DEFAULT_CURVE_POINTS,
    HEELED_WATERLINE_XTOL_M,
    SEAWATER_DENSITY_KG_M3,
    SPACING_TOLERANCE_M,
)
from navhydro.physics.hydrostatics import DraftPolicy

logger = logging.getLogger("navhydro.bootstrap.config")


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass
class EngineConfig:
    """Numerical engine settings."""

    draft_policy: str = DraftPolicy.REJECT.value
    spacing_tolerance: float = SPACING_TOLERANCE_M
    default_point_count: int = DEFAULT_CURVE_POINTS
    max_workers: int = 1
    default_rho: float = SEAWATER_DENSITY_KG_M3
    brent_xtol: float = HEELED_WATERLINE_XTOL_M

    @classmethod
    def from_env(cls) -> "EngineConfig":
        return cls(
            draft_policy=os.getenv("NAVHYDRO_DRAFT_POLICY", DraftPolicy.REJECT.value),
            spacing_tolerance=float(os.getenv("NAVHYDRO_SPACING_TOLERANCE", str(SPACING_TOLERANCE_M))),
            default_point_count=int(os.getenv("NAVHYDRO_POINT_COUNT", str(DEFAULT_CURVE_POINTS))),
            max_workers=int(os.getenv("NAVHYDRO_MAX_WORKERS", "1")),
            default_rho=float(os.getenv("NAVHYDRO_DEFAULT_RHO", str(SEAWATER_DENSITY_KG_M3))),
            brent_xtol=float(os.getenv("NAVHYDRO_BRENT_XTOL", str(HEELED_WATERLINE_XTOL_M))),
        )

    @property
    def policy(self) -> DraftPolicy:
        return DraftPolicy(self.draft_policy)


@dataclass
class APIConfig:
    """API server configuration."""

    host: str = "0.0.0.0"
    port: int = 8000
    workers: int = 1
    enable_docs: bool = True
    docs_url: str = "/docs"
    cors_origins: List[str] = field(default_factory=lambda: ["*"])

    @classmethod
    def from_env(cls) -> "APIConfig":
        cors = os.getenv("NAVHYDRO_API_CORS_ORIGINS", "*")
        return cls(
            host=os.getenv("NAVHYDRO_API_HOST", "0.0.0.0"),
            port=int(os.getenv("NAVHYDRO_API_PORT", "8000")),
            workers=int(os.getenv("NAVHYDRO_API_WORKERS", "1")),
            enable_docs=_env_bool("NAVHYDRO_API_ENABLE_DOCS", "true"),
            docs_url=os.getenv("NAVHYDRO_API_DOCS_URL", "/docs"),
            cors_origins=cors.split(",") if cors else ["*"],
        )


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "INFO"
    log_file: Optional[str] = None
    json_logs: bool = False

    @classmethod
    def from_env(cls) -> "LoggingConfig":
        return cls(
            level=os.getenv("NAVHYDRO_LOG_LEVEL", "INFO"),
            log_file=os.getenv("NAVHYDRO_LOG_FILE"),
            json_logs=_env_bool("NAVHYDRO_JSON_LOGS", "false"),
        )


@dataclass
class NavHydroConfig:
    """Root configuration."""

    environment: str = "development"
    debug: bool = False
    version: str = "0.1.0"

    engine: EngineConfig = field(default_factory=EngineConfig)
    api: APIConfig = field(default_factory=APIConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_env(cls) -> "NavHydroConfig":
        """Create configuration from environment variables."""
        return cls(
            environment=os.getenv("NAVHYDRO_ENVIRONMENT", "development"),
            debug=_env_bool("NAVHYDRO_DEBUG", "false"),
            engine=EngineConfig.from_env(),
            api=APIConfig.from_env(),
            logging=LoggingConfig.from_env(),
        )

    @classmethod
    def from_file(cls, filepath: str) -> "NavHydroConfig":
        """Load configuration from JSON file."""
        path = Path(filepath)
        if not path.exists():
            logger.warning(f"Config file not found: {filepath}, using defaults")
            return cls.from_env()

        with open(path) as f:
            data = json.load(f)

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NavHydroConfig":
        """Environment values overridden by ``data``."""
        config = cls.from_env()

        if "environment" in data:
            config.environment = data["environment"]
        if "debug" in data:
            config.debug = data["debug"]

        for section in ("engine", "api", "logging"):
            target = getattr(config, section)
            for key, value in data.get(section, {}).items():
                if hasattr(target, key):
                    setattr(target, key, value)
                else:
                    logger.warning(f"Ignoring unknown config key: {section}.{key}")

        DraftPolicy(config.engine.draft_policy)  # ValueError on unknown policy
        return config

    def to_dict(self) -> Dict[str, Any]:
        """Serialize config to dictionary."""
        return {
            "environment": self.environment,
            "debug": self.debug,
            "version": self.version,
            "engine": {
                "draft_policy": self.engine.draft_policy,
                "spacing_tolerance": self.engine.spacing_tolerance,
                "default_point_count": self.engine.default_point_count,
                "max_workers": self.engine.max_workers,
                "default_rho": self.engine.default_rho,
                "brent_xtol": self.engine.brent_xtol,
            },
            "api": {
                "host": self.api.host,
                "port": self.api.port,
                "workers": self.api.workers,
            },
            "logging": {
                "level": self.logging.level,
                "log_file": self.logging.log_file,
                "json_logs": self.logging.json_logs,
            },
        }


# Global config instance
_config: Optional[NavHydroConfig] = None


def load_config(filepath: str = None) -> NavHydroConfig:
    """
    Load configuration from file or environment.

    Args:
        filepath: Optional path to JSON config file

    Returns:
        NavHydroConfig instance
    """
    global _config

    if filepath:
        _config = NavHydroConfig.from_file(filepath)
    else:
        default_paths = [
            "./navhydro.json",
            "./config/navhydro.json",
            os.path.expanduser("~/.navhydro/config.json"),
        ]

        for path in default_paths:
            if Path(path).exists():
                logger.info(f"Loading config from: {path}")
                _config = NavHydroConfig.from_file(path)
                return _config

        _config = NavHydroConfig.from_env()

    logger.info(f"Configuration loaded: environment={_config.environment}")
    return _config


def get_config() -> NavHydroConfig:
    """Get current configuration, loading if needed."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reset_config() -> None:
    """Forget the loaded configuration."""
    global _config
    _config = None

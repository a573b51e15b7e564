"""
bootstrap/ - Application Bootstrap

Configuration, logging setup, engine assembly and entry points.
"""

from .config import (
    EngineConfig,
    APIConfig,
    LoggingConfig,
    NavHydroConfig,
    load_config,
    get_config,
    reset_config,
)

from .engine import (
    Engine,
    build_engine,
)

from .entrypoints import (
    setup_logging,
    cli_main,
    api_main,
    main,
)

__all__ = [
    # Config
    "EngineConfig",
    "APIConfig",
    "LoggingConfig",
    "NavHydroConfig",
    "load_config",
    "get_config",
    "reset_config",
    # Engine
    "Engine",
    "build_engine",
    # Entry points
    "setup_logging",
    "cli_main",
    "api_main",
    "main",
]

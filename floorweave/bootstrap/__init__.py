"""
bootstrap/ - Bootstrap Layer

Provides configuration loading, logging setup, and the API entry point.
"""

from .config import (
    FloorweaveConfig,
    EngineConfig,
    APIConfig,
    LoggingConfig,
    load_config,
    get_config,
    reset_config,
)

from .entrypoints import (
    api_main,
    setup_logging,
    JSONFormatter,
)


__all__ = [
    # Config
    "FloorweaveConfig",
    "EngineConfig",
    "APIConfig",
    "LoggingConfig",
    "load_config",
    "get_config",
    "reset_config",
    # Entry Points
    "api_main",
    "setup_logging",
    "JSONFormatter",
]

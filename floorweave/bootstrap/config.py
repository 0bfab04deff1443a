"""
bootstrap/config.py - Application configuration v1.0

Provides configuration loading from files, environment variables, and defaults.
"""

from __future__ import annotations
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional
from pathlib import Path
import os
import json
import logging

logger = logging.getLogger("bootstrap.config")


@dataclass
class EngineConfig:
    """Layout engine tuning."""

    # Grid
    grid_size_ft: float = 5.0

    # Reciprocal matching; keep at least two grid steps so one snapped step
    # of drift never orphans a mirror door
    position_tolerance_ft: float = 10.0
    search_step_ft: float = 1.0

    # History
    history_limit: int = 50

    # Layout placement
    seed_offset_units: float = 10.0
    padding_units: float = 2.0
    fallback_origin_x_ft: float = 500.0
    fallback_cell_ft: float = 200.0

    # Wall defaults
    default_wall_thickness_ft: float = 10.0
    default_wall_material: str = "stone"

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """Raise ValueError on an inconsistent configuration."""
        if self.grid_size_ft <= 0:
            raise ValueError(f"grid_size_ft must be > 0 (got {self.grid_size_ft})")
        if self.position_tolerance_ft < 2 * self.grid_size_ft:
            raise ValueError(
                f"position_tolerance_ft ({self.position_tolerance_ft}) must be at least "
                f"twice grid_size_ft ({self.grid_size_ft})"
            )
        if self.search_step_ft <= 0:
            raise ValueError(f"search_step_ft must be > 0 (got {self.search_step_ft})")
        if self.history_limit < 1:
            raise ValueError(f"history_limit must be >= 1 (got {self.history_limit})")
        if self.default_wall_thickness_ft <= 0:
            raise ValueError(
                f"default_wall_thickness_ft must be > 0 (got {self.default_wall_thickness_ft})"
            )

    @classmethod
    def from_env(cls) -> "EngineConfig":
        return cls(
            grid_size_ft=float(os.getenv("FLOORWEAVE_GRID_SIZE_FT", "5")),
            position_tolerance_ft=float(os.getenv("FLOORWEAVE_POSITION_TOLERANCE_FT", "10")),
            search_step_ft=float(os.getenv("FLOORWEAVE_SEARCH_STEP_FT", "1")),
            history_limit=int(os.getenv("FLOORWEAVE_HISTORY_LIMIT", "50")),
            seed_offset_units=float(os.getenv("FLOORWEAVE_SEED_OFFSET_UNITS", "10")),
            padding_units=float(os.getenv("FLOORWEAVE_PADDING_UNITS", "2")),
            fallback_origin_x_ft=float(os.getenv("FLOORWEAVE_FALLBACK_ORIGIN_X_FT", "500")),
            fallback_cell_ft=float(os.getenv("FLOORWEAVE_FALLBACK_CELL_FT", "200")),
            default_wall_thickness_ft=float(os.getenv("FLOORWEAVE_WALL_THICKNESS_FT", "10")),
            default_wall_material=os.getenv("FLOORWEAVE_WALL_MATERIAL", "stone"),
        )


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
        cors = os.getenv("FLOORWEAVE_API_CORS_ORIGINS", "*")
        return cls(
            host=os.getenv("FLOORWEAVE_API_HOST", "0.0.0.0"),
            port=int(os.getenv("FLOORWEAVE_API_PORT", "8000")),
            workers=int(os.getenv("FLOORWEAVE_API_WORKERS", "1")),
            enable_docs=os.getenv("FLOORWEAVE_API_ENABLE_DOCS", "true").lower() == "true",
            docs_url=os.getenv("FLOORWEAVE_API_DOCS_URL", "/docs"),
            cors_origins=cors.split(",") if cors else ["*"],
        )


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    log_file: Optional[str] = None
    json_logs: bool = False

    @classmethod
    def from_env(cls) -> "LoggingConfig":
        return cls(
            level=os.getenv("FLOORWEAVE_LOG_LEVEL", "INFO"),
            format=os.getenv("FLOORWEAVE_LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"),
            log_file=os.getenv("FLOORWEAVE_LOG_FILE"),
            json_logs=os.getenv("FLOORWEAVE_JSON_LOGS", "false").lower() == "true",
        )


@dataclass
class FloorweaveConfig:
    """Root configuration."""

    environment: str = "development"
    debug: bool = False
    version: str = "1.0.0"

    engine: EngineConfig = field(default_factory=EngineConfig)
    api: APIConfig = field(default_factory=APIConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_env(cls) -> "FloorweaveConfig":
        """Create configuration from environment variables."""
        return cls(
            environment=os.getenv("FLOORWEAVE_ENVIRONMENT", "development"),
            debug=os.getenv("FLOORWEAVE_DEBUG", "false").lower() == "true",
            engine=EngineConfig.from_env(),
            api=APIConfig.from_env(),
            logging=LoggingConfig.from_env(),
        )

    @classmethod
    def from_file(cls, filepath: str) -> "FloorweaveConfig":
        """Load configuration from JSON file."""
        path = Path(filepath)
        if not path.exists():
            logger.warning(f"Config file not found: {filepath}, using defaults")
            return cls.from_env()

        with open(path) as f:
            data = json.load(f)

        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: Dict[str, Any]) -> "FloorweaveConfig":
        """Create config from dictionary. File values override the environment."""
        config = cls.from_env()

        if "environment" in data:
            config.environment = data["environment"]
        if "debug" in data:
            config.debug = data["debug"]

        for section in ("engine", "api", "logging"):
            if section in data:
                target = getattr(config, section)
                for key, value in data[section].items():
                    if hasattr(target, key):
                        setattr(target, key, value)
                    else:
                        logger.warning(f"Ignoring unknown config key: {section}.{key}")

        config.engine.validate()
        return config

    def to_dict(self) -> Dict[str, Any]:
        """Serialize config to dictionary."""
        return {
            "environment": self.environment,
            "debug": self.debug,
            "version": self.version,
            "engine": asdict(self.engine),
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
_config: Optional[FloorweaveConfig] = None


def load_config(filepath: str = None) -> FloorweaveConfig:
    """
    Load configuration from file or environment.

    Args:
        filepath: Optional path to JSON config file

    Returns:
        FloorweaveConfig instance
    """
    global _config

    if filepath:
        _config = FloorweaveConfig.from_file(filepath)
    else:
        default_paths = [
            "./floorweave.json",
            "./config/floorweave.json",
            os.path.expanduser("~/.floorweave/config.json"),
        ]

        for path in default_paths:
            if Path(path).exists():
                logger.info(f"Loading config from: {path}")
                _config = FloorweaveConfig.from_file(path)
                return _config

        _config = FloorweaveConfig.from_env()

    logger.info(f"Configuration loaded: environment={_config.environment}")
    return _config


def get_config() -> FloorweaveConfig:
    """Get current configuration, loading if needed."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reset_config() -> None:
    """Forget the loaded configuration."""
    global _config
    _config = None

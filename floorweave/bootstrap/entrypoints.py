"""
bootstrap/entrypoints.py - Application entry points v1.0

Provides logging setup and the API server entry point.
"""

from __future__ import annotations
import argparse
import json
import logging
import sys

logger = logging.getLogger("bootstrap.entrypoints")

DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class JSONFormatter(logging.Formatter):
    """One JSON object per log record."""

    def format(self, record: logging.LogRecord) -> str:
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
    formatter = JSONFormatter() if json_format else logging.Formatter(DEFAULT_LOG_FORMAT)

    # Console handler
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(log_level)

    # Root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.addHandler(console_handler)

    # File handler
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        file_handler.setLevel(log_level)
        root_logger.addHandler(file_handler)

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Floorweave API Server",
        prog="floorweave-api",
    )

    parser.add_argument(
        "-c", "--config",
        help="Path to configuration file",
        default=None,
    )
    parser.add_argument(
        "-p", "--port",
        type=int,
        help="API port",
        default=None,
    )
    parser.add_argument(
        "-H", "--host",
        help="API host",
        default=None,
    )
    parser.add_argument(
        "-w", "--workers",
        type=int,
        help="Number of workers",
        default=None,
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Log level (overrides config)",
    )
    parser.add_argument(
        "--log-file",
        help="Log file path",
        default=None,
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Emit logs as JSON",
    )
    return parser


def api_main(args: list = None) -> None:
    """
    API server entry point.

    Args:
        args: Command line arguments (defaults to sys.argv)
    """
    parsed = build_parser().parse_args(args)

    from .config import load_config

    config = load_config(parsed.config)
    setup_logging(
        level=parsed.log_level or config.logging.level,
        log_file=parsed.log_file or config.logging.log_file,
        json_format=parsed.json_logs or config.logging.json_logs,
    )

    # Override config with CLI args
    if parsed.port:
        config.api.port = parsed.port
    if parsed.host:
        config.api.host = parsed.host
    if parsed.workers:
        config.api.workers = parsed.workers

    try:
        import uvicorn
        from floorweave.interior.api_endpoints import create_app

        # Sessions live in process memory, so a single worker serves them
        if config.api.workers > 1:
            logger.warning(f"Ignoring workers={config.api.workers}; sessions are held in memory")

        logger.info(f"Starting API on {config.api.host}:{config.api.port}")
        uvicorn.run(
            create_app(config),
            host=config.api.host,
            port=config.api.port,
        )

    except KeyboardInterrupt:
        print("\nShutting down...")
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        sys.exit(1)


def main():
    """Main entry point for the package."""
    api_main(sys.argv[1:])


if __name__ == "__main__":
    main()

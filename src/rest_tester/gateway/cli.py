"""rest-tester MCP server CLI."""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence

import anyio

from ..logger import LoggingConfig, configure_logging, get_logger
from .config import Settings
from .errors import ConfigurationError
from .server import serve

_log = get_logger("rest_tester.gateway.cli")


def main(argv: Sequence[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        description="MCP server exposing a REST endpoint tool for the API at $REST_BASE_URL",
    )
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    parser.add_argument("--log-dir", help="Also write detailed logs to DIR/rest-tester.log")
    parser.add_argument("--log-rotation", action="store_true", help="Rotate the log file")
    args = parser.parse_args(argv)

    configure_logging(
        LoggingConfig(
            level=getattr(logging, args.log_level),
            log_dir=args.log_dir,
            log_rotation=args.log_rotation,
        )
    )

    try:
        settings = Settings.from_env()
    except ConfigurationError as exc:
        _log.error(str(exc))
        sys.exit(1)

    try:
        anyio.run(serve, settings)
    except KeyboardInterrupt:
        _log.info("Interrupted, shutting down")


if __name__ == "__main__":
    main()

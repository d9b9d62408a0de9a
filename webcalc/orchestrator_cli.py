"""Command that starts the orchestrator."""

from __future__ import annotations

import argparse
from collections.abc import Sequence

from .api import OrchestratorApi, serve
from .config import DEFAULT_ENV_FILE, OrchestratorSettings, load_orchestrator_settings
from .logger import configure_logging, get_logger
from .managers import ExpressionManager
from .service import OrchestratorService

_log = get_logger(__name__)


def build_service(settings: OrchestratorSettings) -> OrchestratorService:
    """Create the orchestrator service with the operation times of ``settings``."""
    return OrchestratorService(ExpressionManager(settings.orchestrator.durations()))


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="webcalc-orchestrator", description="Run the orchestrator.")
    parser.add_argument("--env-file", default=DEFAULT_ENV_FILE, help="path of the .env file")
    parser.add_argument("--host", default="0.0.0.0", help="address to listen on")
    parser.add_argument("--port", type=int, default=None, help="port to listen on (default from settings)")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="logging level",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the orchestrator until interrupted; return the exit status."""
    args = _parse_args(argv)
    configure_logging(args.log_level)
    try:
        settings = load_orchestrator_settings(args.env_file)
    except ValueError as exc:
        _log.critical("failed to load config", extra={"error": str(exc)})
        return 1

    port = args.port if args.port is not None else settings.orchestrator.port
    api = OrchestratorApi(build_service(settings))
    try:
        serve(api, args.host, port)
    except OSError as exc:
        _log.critical(
            "ORCHESTRATOR failed to create listener on port",
            extra={"port": port, "error": str(exc)},
        )
        return 1
    _log.info("ORCHESTRATOR server stopped")
    return 0
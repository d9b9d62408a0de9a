"""Command that starts the agent workers."""

from __future__ import annotations

import argparse
import threading
from collections.abc import Sequence

from .agent import AgentService, run_workers
from .client import HttpOrchestratorClient
from .config import DEFAULT_ENV_FILE, AgentSettings, load_agent_settings
from .logger import configure_logging, get_logger

_log = get_logger(__name__)


def build_agent(settings: AgentSettings) -> AgentService:
    """Create an agent service that talks to the orchestrator named in ``settings``."""
    endpoint = settings.orchestrator
    client = HttpOrchestratorClient(
        f"http://{endpoint.host}:{endpoint.port}",
        timeout=endpoint.timeout / 1000,
        max_retries=endpoint.max_retries,
        base_retry_delay=endpoint.base_retry_delay,
    )
    return AgentService(client)


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="webcalc-agent", description="Run the calculation agents.")
    parser.add_argument("--env-file", default=DEFAULT_ENV_FILE, help="path of the .env file")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="logging level",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the agent workers until interrupted; return the exit status."""
    args = _parse_args(argv)
    configure_logging(args.log_level)
    try:
        settings = load_agent_settings(args.env_file)
    except ValueError as exc:
        _log.critical("failed to load config", extra={"error": str(exc)})
        return 1

    agent = build_agent(settings)
    stop = threading.Event()
    runner = threading.Thread(
        target=run_workers,
        args=(agent, settings.agent.computing_power, settings.agent.wait_time, stop),
        name="agent-workers",
        daemon=True,
    )
    runner.start()
    try:
        while runner.is_alive():
            runner.join(0.5)
    except KeyboardInterrupt:
        pass
    finally:
        stop.set()
    _log.info("AGENTS stopped")
    return 0
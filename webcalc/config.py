"""Settings of the orchestrator and the agents, read from a .env file and the environment."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from datetime import timedelta
from pathlib import Path
from typing import Any, TypeVar

from dotenv import dotenv_values

from .logger import get_logger

DEFAULT_ENV_FILE = "../.env"
PASSWORD = "password"

_log = get_logger(__name__)

C = TypeVar("C")


def _env(name: str, default: Any, *, minimum: int | None = None, maximum: int | None = None) -> Any:
    return field(default=default, metadata={"env": name, "min": minimum, "max": maximum})


@dataclass(frozen=True)
class PostgresConfig:
    """Connection settings of the PostgreSQL database."""

    host: str = _env("HOST", "localhost")
    port: int = _env("PORT", 5432, minimum=0, maximum=65535)
    username: str = _env("USER", "postgres")
    password: str = _env("PASSWORD", PASSWORD)
    database: str = _env("DB", "postgres")
    max_conns: int = _env("MAX_CONNS", 10)
    min_conns: int = _env("MIN_CONNS", 5)

    def conn_string(self) -> str:
        """Return the connection URL."""
        return (
            f"postgres://{self.username}:{self.password}@{self.host}:{self.port}"
            f"/{self.database}?sslmode=disable"
        )


@dataclass(frozen=True)
class OrchestratorConfig:
    """Orchestrator settings; operation times are in milliseconds."""

    host: str = _env("HOST", "localhost")
    port: int = _env("PORT", 5432)
    time_addition: int = _env("TIME_ADDITION_MS", 0)
    time_subtraction: int = _env("TIME_SUBTRACTION_MS", 0)
    time_multiplications: int = _env("TIME_MULTIPLICATIONS_MS", 0)
    time_divisions: int = _env("TIME_DIVISIONS_MS", 0)

    def durations(self) -> dict[str, int]:
        """Return the time of each operator in milliseconds."""
        return {
            "+": self.time_addition,
            "-": self.time_subtraction,
            "*": self.time_multiplications,
            "/": self.time_divisions,
        }

    def operation_time(self, operation: str) -> timedelta:
        """Return how long an operator takes; unknown operators take no time."""
        return timedelta(milliseconds=self.durations().get(operation, 0))


@dataclass(frozen=True)
class OrchestratorEndpointConfig:
    """Where an agent finds the orchestrator and how it calls it."""

    host: str = _env("HOST", "localhost")
    port: int = _env("PORT", 50052)
    timeout: int = _env("TIMEOUT_MS", 500)
    max_retries: int = _env("MAX_RETRIES", 3, minimum=0)
    base_retry_delay: int = _env("BASE_RETRY_DELAY", 100)


@dataclass(frozen=True)
class AgentConfig:
    """Settings of an agent."""

    host: str = _env("HOST", "localhost")
    port: int = _env("PORT", 50051)
    computing_power: int = _env("COMPUTING_POWER", 5)
    wait_time: int = _env("WAIT_TIME_MS", 500)


@dataclass(frozen=True)
class AgentSettings:
    """Everything an agent process reads at start."""

    orchestrator: OrchestratorEndpointConfig = field(default_factory=OrchestratorEndpointConfig)
    agent: AgentConfig = field(default_factory=AgentConfig)


@dataclass(frozen=True)
class OrchestratorSettings:
    """Everything the orchestrator process reads at start."""

    orchestrator: OrchestratorConfig = field(default_factory=OrchestratorConfig)
    postgres: PostgresConfig = field(default_factory=PostgresConfig)


def _gather(env_file: str | os.PathLike[str], environ: Mapping[str, str] | None) -> dict[str, str]:
    values = dict(os.environ if environ is None else environ)
    path = Path(env_file)
    if path.is_file():
        values.update({key: value for key, value in dotenv_values(path).items() if value is not None})
    else:
        _log.warning("config file %s not found, reading environment only", path)
    return values


def _read_section(cls: type[C], prefix: str, values: Mapping[str, str]) -> C:
    kwargs: dict[str, Any] = {}
    for item in fields(cls):  # type: ignore[arg-type]
        key = f"{prefix}_{item.metadata['env']}"
        raw = values.get(key)
        if raw is None:
            continue
        if isinstance(item.default, int):
            try:
                value: Any = int(raw)
            except ValueError:
                raise ValueError(f"failed to read env vars: {key} is not an integer: {raw!r}") from None
            minimum, maximum = item.metadata["min"], item.metadata["max"]
            if (minimum is not None and value < minimum) or (maximum is not None and value > maximum):
                raise ValueError(f"failed to read env vars: {key} is out of range: {value}")
        else:
            value = raw
        kwargs[item.name] = value
    return cls(**kwargs)


def load_agent_settings(
    env_file: str | os.PathLike[str] = DEFAULT_ENV_FILE,
    environ: Mapping[str, str] | None = None,
) -> AgentSettings:
    """Read agent settings; values in ``env_file`` win over the environment."""
    values = _gather(env_file, environ)
    return AgentSettings(
        orchestrator=_read_section(OrchestratorEndpointConfig, "ORCHESTRATOR", values),
        agent=_read_section(AgentConfig, "AGENT", values),
    )


def load_orchestrator_settings(
    env_file: str | os.PathLike[str] = DEFAULT_ENV_FILE,
    environ: Mapping[str, str] | None = None,
) -> OrchestratorSettings:
    """Read orchestrator settings; values in ``env_file`` win over the environment."""
    values = _gather(env_file, environ)
    return OrchestratorSettings(
        orchestrator=_read_section(OrchestratorConfig, "ORCHESTRATOR", values),
        postgres=_read_section(PostgresConfig, "POSTGRES", values),
    )
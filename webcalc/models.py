"""Data exchanged between the orchestrator and the agents."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import timedelta
from typing import Any


def _to_nanoseconds(value: timedelta) -> int:
    return value // timedelta(microseconds=1) * 1000


def _from_nanoseconds(value: int) -> timedelta:
    return timedelta(microseconds=value / 1000)


def _normalize(data: Mapping[str, Any]) -> dict[str, Any]:
    """Match keys regardless of case and underscores."""
    return {key.replace("_", "").lower(): value for key, value in data.items()}


@dataclass(frozen=True)
class Task:
    """One binary operation to be computed by an agent."""

    expression_id: int = 0
    task_id: int = 0
    arg1: float = 0.0
    arg2: float = 0.0
    operation: str = ""
    operation_time: timedelta = timedelta(0)

    def to_dict(self) -> dict[str, Any]:
        """Return the wire form; ``operation_time`` is in nanoseconds."""
        return {
            "expression_id": self.expression_id,
            "id": self.task_id,
            "arg1": self.arg1,
            "arg2": self.arg2,
            "operation": self.operation,
            "operation_time": _to_nanoseconds(self.operation_time),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Task:
        """Build a task from its wire form."""
        fields = _normalize(data)
        return cls(
            expression_id=int(fields.get("expressionid", 0)),
            task_id=int(fields.get("id", fields.get("taskid", 0))),
            arg1=float(fields.get("arg1", 0.0)),
            arg2=float(fields.get("arg2", 0.0)),
            operation=str(fields.get("operation", "")),
            operation_time=_from_nanoseconds(int(fields.get("operationtime", 0))),
        )


@dataclass(frozen=True)
class Result:
    """The value an agent computed for a task."""

    expression_id: int = 0
    task_id: int = 0
    result: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        """Return the wire form."""
        return {"expression_id": self.expression_id, "id": self.task_id, "result": self.result}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Result:
        """Build a result from its wire form."""
        fields = _normalize(data)
        return cls(
            expression_id=int(fields.get("expressionid", 0)),
            task_id=int(fields.get("id", fields.get("taskid", 0))),
            result=float(fields.get("result", 0.0)),
        )


@dataclass
class Expression:
    """An expression submitted for calculation and its state."""

    expression_id: int
    status: str = "pending"
    result: float | None = None

    def to_dict(self) -> dict[str, Any]:
        """Return the wire form; ``result`` is left out while unknown."""
        data: dict[str, Any] = {"id": self.expression_id, "status": self.status}
        if self.result is not None:
            data["result"] = self.result
        return data
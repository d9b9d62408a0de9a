"""Agent workers: take tasks from the orchestrator, compute them and send the results back."""

from __future__ import annotations

import operator
import threading
import time
from collections.abc import Callable
from typing import Protocol, runtime_checkable

from .errors import CalculatorError, DivideByZeroError, InvalidExpressionError
from .logger import get_logger
from .models import Result, Task

_log = get_logger(__name__)

_OPERATIONS: dict[str, Callable[[float, float], float]] = {
    "+": operator.add,
    "-": operator.sub,
    "*": operator.mul,
    "/": operator.truediv,
}


@runtime_checkable
class OrchestratorPort(Protocol):
    """What an agent needs from the orchestrator."""

    def get_task(self) -> Task:
        """Return the next waiting task or raise :class:`TaskNotFoundError`."""
        ...

    def result_task(self, expression_id: int, task_id: int, result: float) -> str:
        """Send the result of a task and return the orchestrator's status."""
        ...


def do_task(task: Task, sleep: Callable[[float], object] = time.sleep) -> float:
    """Compute a task, first waiting its operation time with ``sleep``.

    Raises :class:`InvalidExpressionError` for an unknown operator and
    :class:`DivideByZeroError` for a division by zero.
    """
    compute = _OPERATIONS.get(task.operation)
    if compute is None:
        raise InvalidExpressionError()
    sleep(task.operation_time.total_seconds())
    if task.operation == "/" and task.arg2 == 0:
        raise DivideByZeroError()
    return compute(task.arg1, task.arg2)


class AgentService:
    """Polls the orchestrator for tasks and answers them."""

    def __init__(self, orchestrator: OrchestratorPort) -> None:
        self.orchestrator = orchestrator

    def get_task(self) -> Task:
        """Ask the orchestrator for a task; its errors are raised unchanged."""
        return self.orchestrator.get_task()

    def post_result(self, result: Result) -> str:
        """Send a computed result to the orchestrator and return its status."""
        return self.orchestrator.result_task(result.expression_id, result.task_id, result.result)

    def work(self, wait_time: int, stop_event: threading.Event | None = None) -> None:
        """Process tasks until ``stop_event`` is set, pausing ``wait_time`` ms between polls."""
        stop = stop_event if stop_event is not None else threading.Event()
        pause = wait_time / 1000
        while not stop.is_set():
            try:
                task = self.get_task()
            except Exception as exc:
                _log.info("no task received: %s", exc)
                stop.wait(pause)
                continue

            try:
                value = do_task(task, stop.wait)
            except CalculatorError as exc:
                _log.warning("error calculating task %d: %s", task.task_id, exc)
                continue

            try:
                self.post_result(
                    Result(expression_id=task.expression_id, task_id=task.task_id, result=value)
                )
            except Exception as exc:
                _log.error("error posting result: %s", exc)
            _log.info("task %d processed, result: %f", task.task_id, value)
            stop.wait(pause)


def run_workers(
    agent_service: AgentService,
    computing_power: int,
    wait_time: int,
    stop_event: threading.Event | None = None,
) -> None:
    """Run ``computing_power`` workers in threads and wait until all of them end."""
    stop = stop_event if stop_event is not None else threading.Event()
    workers = []
    for index in range(computing_power):
        _log.info("AGENT Starting worker %d", index)
        worker = threading.Thread(
            target=agent_service.work,
            args=(wait_time, stop),
            name=f"agent-worker-{index}",
            daemon=True,
        )
        worker.start()
        workers.append(worker)
    for worker in workers:
        worker.join()
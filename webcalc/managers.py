"""Bookkeeping of expressions and of the tasks they are split into."""

from __future__ import annotations

import queue
import threading
from collections.abc import Mapping
from datetime import timedelta

from .errors import TaskNotFoundError
from .models import Expression, Result, Task

TASK_QUEUE_SIZE = 100
RESULT_QUEUE_SIZE = 1


class TaskManager:
    """Creates the tasks of one expression and hands their results back."""

    def __init__(self, durations: Mapping[str, int] | None = None) -> None:
        self._durations = dict(durations or {})
        self._lock = threading.Lock()
        self._results: queue.Queue[Result] = queue.Queue(maxsize=RESULT_QUEUE_SIZE)
        self.counter = 0

    def create_task(self, arg1: float, arg2: float, operation: str, expression_id: int) -> Task:
        """Return a new task with the next task id of this expression."""
        with self._lock:
            self.counter += 1
            task_id = self.counter
        return Task(
            expression_id=expression_id,
            task_id=task_id,
            arg1=arg1,
            arg2=arg2,
            operation=operation,
            operation_time=timedelta(milliseconds=self._durations.get(operation, 0)),
        )

    def add_result(self, result: Result) -> None:
        """Hand in the result of a task; blocks while an earlier one is unread."""
        self._results.put(result)

    def get_result(self, timeout: float | None = None) -> Result:
        """Wait for the next result; raise :class:`TimeoutError` after ``timeout`` seconds."""
        try:
            return self._results.get(timeout=timeout)
        except queue.Empty:
            raise TimeoutError(f"no result within {timeout}s") from None


class ExpressionManager:
    """Keeps every expression, its task manager and the queue of waiting tasks."""

    def __init__(self, durations: Mapping[str, int] | None = None) -> None:
        self._durations = dict(durations or {})
        self._lock = threading.Lock()
        self._expressions: dict[int, Expression] = {}
        self._task_managers: dict[int, TaskManager] = {}
        self._tasks: queue.Queue[Task] = queue.Queue(maxsize=TASK_QUEUE_SIZE)
        self._counter = 0

    def create_expression(self) -> int:
        """Register a new pending expression and return its id."""
        with self._lock:
            self._counter += 1
            expression_id = self._counter
            self._expressions[expression_id] = Expression(expression_id=expression_id)
            self._task_managers[expression_id] = TaskManager(self._durations)
        return expression_id

    def get_task_manager(self, expression_id: int) -> TaskManager | None:
        """Return the task manager of an expression, or ``None`` if there is none."""
        with self._lock:
            return self._task_managers.get(expression_id)

    def get_expressions(self) -> list[Expression]:
        """Return every expression, ordered by id."""
        with self._lock:
            return [self._expressions[key] for key in sorted(self._expressions)]

    def get_expression(self, expression_id: int) -> Expression | None:
        """Return an expression, or ``None`` if the id is unknown."""
        with self._lock:
            return self._expressions.get(expression_id)

    def add_task(self, task: Task) -> None:
        """Queue a task for the agents; blocks while the queue is full."""
        self._tasks.put(task)

    def take_task(self) -> Task:
        """Take the oldest waiting task; raise :class:`TaskNotFoundError` if none waits."""
        try:
            return self._tasks.get_nowait()
        except queue.Empty:
            raise TaskNotFoundError() from None

    def expression_done(self, expression_id: int, result: float) -> None:
        """Mark an expression as done with its result."""
        with self._lock:
            expression = self._expressions.get(expression_id)
            if expression is not None:
                expression.status = "done"
                expression.result = result

    def expression_error(self, expression_id: int) -> None:
        """Mark an expression that turned out not to be computable."""
        with self._lock:
            expression = self._expressions.get(expression_id)
            if expression is not None:
                expression.status = "invalid expression"
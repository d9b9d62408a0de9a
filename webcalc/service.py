"""The orchestrator's operations: accept expressions, hand out tasks, collect results."""

from __future__ import annotations

import threading

from .errors import ExpressionNotFoundError, InternalServerError, TaskNotFoundError
from .managers import ExpressionManager
from .models import Expression, Result, Task
from .processor import process
from .rpn import to_rpn

TASK_COMPLETED = "task completed"


class OrchestratorService:
    """Front of the orchestrator that the API layer calls."""

    def __init__(self, expression_manager: ExpressionManager) -> None:
        self.expression_manager = expression_manager

    def calculate(self, expression: str) -> int:
        """Accept an expression, start evaluating it in the background and return its id.

        Raises :class:`InvalidExpressionError` for an expression that cannot be parsed.
        """
        rpn = to_rpn(expression)
        expression_id = self.expression_manager.create_expression()
        task_manager = self.expression_manager.get_task_manager(expression_id)
        if task_manager is None:
            raise InternalServerError()
        threading.Thread(
            target=process,
            args=(rpn, task_manager, self.expression_manager, expression_id),
            name=f"expression-{expression_id}",
            daemon=True,
        ).start()
        return expression_id

    def expressions(self) -> list[Expression]:
        """Return every expression."""
        return list(self.expression_manager.get_expressions())

    def expression_by_id(self, expression_id: int) -> Expression:
        """Return one expression or raise :class:`ExpressionNotFoundError`."""
        expression = self.expression_manager.get_expression(expression_id)
        if expression is None:
            raise ExpressionNotFoundError()
        return expression

    def result_task(self, expression_id: int, task_id: int, result: float) -> str:
        """Accept an agent's result; raise :class:`TaskNotFoundError` for an unknown expression."""
        task_manager = self.expression_manager.get_task_manager(expression_id)
        if task_manager is None:
            raise TaskNotFoundError()
        task_manager.add_result(Result(expression_id=expression_id, task_id=task_id, result=result))
        return TASK_COMPLETED

    def get_task(self) -> Task:
        """Hand out the oldest waiting task; raise :class:`TaskNotFoundError` if none waits."""
        task = self.expression_manager.take_task()
        if task.task_id == 0:
            raise InternalServerError()
        return task
"""Evaluation of an expression in reverse Polish notation through agent tasks."""

from __future__ import annotations

from collections.abc import Iterable

from .managers import ExpressionManager, TaskManager


def _number(token: str) -> float | None:
    try:
        return float(token)
    except ValueError:
        return None


def process(
    rpn: Iterable[str],
    task_manager: TaskManager,
    expression_manager: ExpressionManager,
    expression_id: int,
) -> None:
    """Evaluate ``rpn``, sending each operation out as a task and waiting for its result.

    The expression ends up done with its value, or marked invalid when the
    tokens do not form a single value.
    """
    stack: list[float] = []
    for token in rpn:
        value = _number(token)
        if value is not None:
            stack.append(value)
            continue
        if len(stack) < 2:
            expression_manager.expression_error(expression_id)
            return
        arg2 = stack.pop()
        arg1 = stack.pop()
        task = task_manager.create_task(arg1, arg2, token, expression_id)
        expression_manager.add_task(task)
        stack.append(task_manager.get_result().result)

    if len(stack) != 1:
        expression_manager.expression_error(expression_id)
        return
    expression_manager.expression_done(expression_id, stack[0])
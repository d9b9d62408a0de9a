"""Errors shared by the orchestrator and the agents."""


class CalculatorError(Exception):
    """Base class of every calculator error."""

    default_message = "calculator error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class TaskNotFoundError(CalculatorError, LookupError):
    """No task is waiting, or the task's expression is unknown."""

    default_message = "task not found"


class ExpressionNotFoundError(CalculatorError, LookupError):
    """No expression has the requested id."""

    default_message = "expression not found"


class InternalServerError(CalculatorError):
    """The orchestrator failed in an unexpected way."""

    default_message = "internal server error"


class InvalidExpressionError(CalculatorError, ValueError):
    """The expression cannot be parsed or evaluated."""

    default_message = "invalid expression"


class DivideByZeroError(CalculatorError, ArithmeticError):
    """The expression divides by zero."""

    default_message = "division by zero"
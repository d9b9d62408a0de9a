"""Validation of arithmetic expressions and conversion to reverse Polish notation."""

from __future__ import annotations

import re

from .errors import CalculatorError, DivideByZeroError, InvalidExpressionError

_PRECEDENCE = {"+": 1, "-": 1, "*": 2, "/": 2}

_ALLOWED = re.compile(r"[0-9+\-*/().\s]+", re.ASCII)
_REPEATED_OPERATORS = re.compile(r"[+\-*/]{2,}")
_EXTRA_DOT = re.compile(r"\d*\.\d*\.\d*", re.ASCII)
_DIVISION_BY_ZERO = re.compile(r"/\s*0(\.0+)?\s*\Z", re.ASCII)


def _brackets_balanced(expr: str) -> bool:
    depth = 0
    for ch in expr:
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth < 0:
                return False
    return depth == 0


def validate_expression(expr: str) -> None:
    """Check an expression.

    Raises :class:`InvalidExpressionError` for bad input and
    :class:`DivideByZeroError` when the expression ends by dividing by zero.
    """
    expr = expr.replace(" ", "")
    if not expr:
        raise InvalidExpressionError()
    if not _ALLOWED.fullmatch(expr):
        raise InvalidExpressionError()
    if not _brackets_balanced(expr):
        raise InvalidExpressionError()
    if expr[0] in _PRECEDENCE or expr[-1] in _PRECEDENCE:
        raise InvalidExpressionError()
    if _REPEATED_OPERATORS.search(expr):
        raise InvalidExpressionError()
    if _EXTRA_DOT.search(expr):
        raise InvalidExpressionError()
    if _DIVISION_BY_ZERO.search(expr):
        raise DivideByZeroError()


def _is_digit(ch: str) -> bool:
    return ch.isascii() and ch.isdigit()


def to_rpn(expression: str) -> list[str]:
    """Convert an infix expression to a list of tokens in reverse Polish notation."""
    try:
        validate_expression(expression)
    except CalculatorError as exc:
        raise InvalidExpressionError() from exc

    output: list[str] = []
    stack: list[str] = []
    number = ""
    for ch in expression:
        if _is_digit(ch) or (ch == "." and number):
            number += ch
            continue
        if number:
            output.append(number)
            number = ""
        if ch in _PRECEDENCE:
            while stack and _PRECEDENCE.get(stack[-1], 0) >= _PRECEDENCE[ch]:
                output.append(stack.pop())
            stack.append(ch)
        elif ch == "(":
            stack.append(ch)
        elif ch == ")":
            while stack and stack[-1] != "(":
                output.append(stack.pop())
            if not stack:
                raise InvalidExpressionError()
            stack.pop()
        elif not ch.isspace():
            raise InvalidExpressionError()

    if number:
        output.append(number)
    while stack:
        token = stack.pop()
        if token == "(":
            raise InvalidExpressionError()
        output.append(token)
    return output
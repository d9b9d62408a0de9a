import threading
from datetime import timedelta

import pytest

from webcalc.errors import TaskNotFoundError
from webcalc.managers import ExpressionManager, TaskManager
from webcalc.models import Result, Task

DURATIONS = {"+": 100, "-": 100, "*": 100, "/": 100}


def test_create_expression_gives_distinct_pending_ids():
    em = ExpressionManager(DURATIONS)
    id1 = em.create_expression()
    id2 = em.create_expression()
    assert id1 != id2
    expr = em.get_expression(id1)
    assert expr is not None
    assert expr.status == "pending"
    assert expr.result is None


def test_add_task_then_take_task():
    em = ExpressionManager(DURATIONS)
    task = Task(
        expression_id=1,
        task_id=1,
        arg1=2,
        arg2=2,
        operation="+",
        operation_time=timedelta(milliseconds=DURATIONS["+"]),
    )
    em.add_task(task)
    assert em.take_task() == task


def test_take_task_on_empty_queue_raises():
    em = ExpressionManager(DURATIONS)
    with pytest.raises(TaskNotFoundError):
        em.take_task()


def test_tasks_come_out_in_order():
    em = ExpressionManager(DURATIONS)
    first = Task(task_id=1, operation="+")
    second = Task(task_id=2, operation="-")
    em.add_task(first)
    em.add_task(second)
    assert [em.take_task(), em.take_task()] == [first, second]


def test_expression_done():
    em = ExpressionManager(DURATIONS)
    expression_id = em.create_expression()
    em.expression_done(expression_id, 42.0)
    expr = em.get_expression(expression_id)
    assert expr is not None
    assert expr.status == "done"
    assert expr.result == 42.0


def test_expression_error():
    em = ExpressionManager(DURATIONS)
    expression_id = em.create_expression()
    em.expression_error(expression_id)
    expr = em.get_expression(expression_id)
    assert expr is not None
    assert expr.status == "invalid expression"


def test_done_for_unknown_expression_changes_nothing():
    em = ExpressionManager(DURATIONS)
    em.expression_done(5, 1.0)
    em.expression_error(6)
    assert em.get_expression(5) is None
    assert em.get_expressions() == []


def test_get_expressions():
    em = ExpressionManager(DURATIONS)
    em.create_expression()
    em.create_expression()
    all_expressions = em.get_expressions()
    assert len(all_expressions) == 2
    assert [e.expression_id for e in all_expressions] == [1, 2]


def test_get_task_manager():
    em = ExpressionManager(DURATIONS)
    expression_id = em.create_expression()
    assert isinstance(em.get_task_manager(expression_id), TaskManager)
    assert em.get_task_manager(expression_id + 1) is None


def test_task_manager_create_task_distinct():
    tm = TaskManager(DURATIONS)
    task1 = tm.create_task(1, 2, "+", 1)
    task2 = tm.create_task(1, 2, "+", 2)
    assert task1 != task2
    assert (task1.task_id, task2.task_id) == (1, 2)


def test_task_manager_create_task_fields():
    tm = TaskManager({"*": 250})
    task = tm.create_task(3.0, 4.0, "*", 7)
    assert task == Task(
        expression_id=7,
        task_id=1,
        arg1=3.0,
        arg2=4.0,
        operation="*",
        operation_time=timedelta(milliseconds=250),
    )
    assert tm.create_task(1, 1, "%", 7).operation_time == timedelta(0)


def test_task_manager_get_result():
    tm = TaskManager(DURATIONS)
    task = tm.create_task(1, 2, "+", 1)
    expected = Result(expression_id=task.expression_id, task_id=task.task_id, result=3)
    tm.add_result(expected)
    assert tm.get_result() == expected


def test_task_manager_get_result_times_out():
    tm = TaskManager(DURATIONS)
    with pytest.raises(TimeoutError):
        tm.get_result(timeout=0.05)


def test_task_manager_get_result_waits_for_other_thread():
    tm = TaskManager(DURATIONS)
    expected = Result(expression_id=1, task_id=1, result=9.5)
    threading.Timer(0.05, tm.add_result, args=(expected,)).start()
    assert tm.get_result(timeout=2) == expected
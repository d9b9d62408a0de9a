import threading
import time

from webcalc.errors import TaskNotFoundError
from webcalc.managers import ExpressionManager
from webcalc.models import Result, Task
from webcalc.processor import process


class FakeTaskManager:
    def __init__(self, task=None, result=None):
        self.task = task
        self.result = result
        self.created = []

    def create_task(self, arg1, arg2, operation, expression_id):
        self.created.append((arg1, arg2, operation, expression_id))
        return self.task

    def add_result(self, result):
        raise AssertionError("not expected")

    def get_result(self, timeout=None):
        return self.result


class FakeExpressionManager:
    def __init__(self):
        self.added = []
        self.done = []
        self.errors = []

    def add_task(self, task):
        self.added.append(task)

    def expression_done(self, expression_id, result):
        self.done.append((expression_id, result))

    def expression_error(self, expression_id):
        self.errors.append(expression_id)


def test_process_valid_expression():
    task = Task(expression_id=1, task_id=1, arg1=3, arg2=4, operation="+")
    tm = FakeTaskManager(task, Result(expression_id=1, task_id=1, result=7))
    em = FakeExpressionManager()

    process(["3", "4", "+"], tm, em, 1)

    assert tm.created == [(3.0, 4.0, "+", 1)]
    assert em.added == [task]
    assert em.done == [(1, 7.0)]
    assert em.errors == []


def test_process_invalid_expression():
    tm = FakeTaskManager()
    em = FakeExpressionManager()

    process(["3", "*"], tm, em, 1)

    assert tm.created == []
    assert em.added == []
    assert em.errors == [1]
    assert em.done == []


def test_process_leftover_values_is_an_error():
    tm = FakeTaskManager()
    em = FakeExpressionManager()

    process(["3", "4"], tm, em, 2)

    assert em.errors == [2]
    assert em.done == []


def test_process_single_number_is_done():
    em = FakeExpressionManager()
    process(["2.5"], FakeTaskManager(), em, 3)
    assert em.done == [(3, 2.5)]


def _compute(task):
    return {
        "+": task.arg1 + task.arg2,
        "-": task.arg1 - task.arg2,
        "*": task.arg1 * task.arg2,
        "/": task.arg1 / task.arg2,
    }[task.operation]


def test_process_with_real_managers():
    em = ExpressionManager({"+": 0, "-": 0, "*": 0, "/": 0})
    expression_id = em.create_expression()
    tm = em.get_task_manager(expression_id)

    worker = threading.Thread(
        target=process, args=(["2", "3", "*", "4", "-"], tm, em, expression_id), daemon=True
    )
    worker.start()

    seen = []
    deadline = time.monotonic() + 5
    while worker.is_alive() and time.monotonic() < deadline:
        try:
            task = em.take_task()
        except TaskNotFoundError:
            time.sleep(0.01)
            continue
        seen.append((task.arg1, task.arg2, task.operation))
        tm.add_result(Result(expression_id=task.expression_id, task_id=task.task_id, result=_compute(task)))
    worker.join(timeout=1)

    assert seen == [(2.0, 3.0, "*"), (6.0, 4.0, "-")]
    expression = em.get_expression(expression_id)
    assert expression.status == "done"
    assert expression.result == 2.0
import json
import socket
import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest

from webcalc.api import OrchestratorApi, make_server
from webcalc.client import HttpOrchestratorClient
from webcalc.errors import InternalServerError, TaskNotFoundError
from webcalc.managers import ExpressionManager
from webcalc.service import OrchestratorService


class StubState:
    def __init__(self):
        self.requests = []
        self.status = 200
        self.payload = b""
        self.url = ""


@pytest.fixture
def stub():
    state = StubState()

    class Handler(BaseHTTPRequestHandler):
        def _reply(self):
            length = int(self.headers.get("Content-Length") or 0)
            body = self.rfile.read(length) if length else b""
            state.requests.append((self.command, self.path, body))
            self.send_response(state.status)
            self.send_header("Content-Type", "application/json")
            self.send_header("Content-Length", str(len(state.payload)))
            self.end_headers()
            self.wfile.write(state.payload)

        do_GET = do_POST = _reply

        def log_message(self, format, *args):
            pass

    server = ThreadingHTTPServer(("127.0.0.1", 0), Handler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    state.url = f"http://127.0.0.1:{server.server_address[1]}"
    yield state
    server.shutdown()
    server.server_close()


def _client(url, retries=0):
    return HttpOrchestratorClient(url, timeout=2, max_retries=retries, base_retry_delay=0)


def test_get_task(stub):
    stub.payload = b'{"TaskID": 1, "Arg1": 3, "Arg2": 4, "Operation": "+"}'
    task = _client(stub.url).get_task()
    assert stub.requests[0][:2] == ("GET", "/internal/task")
    assert task.task_id == 1
    assert (task.arg1, task.arg2, task.operation) == (3.0, 4.0, "+")


def test_post_result(stub):
    stub.payload = b'"task completed"'
    status = _client(stub.url).result_task(0, 1, 7.0)
    assert status == "task completed"
    method, path, body = stub.requests[0]
    assert (method, path) == ("POST", "/internal/task")
    sent = json.loads(body)
    assert sent["id"] == 1
    assert sent["result"] == 7


def test_get_task_not_found_is_not_retried(stub):
    stub.status = 404
    stub.payload = b'"task not found"'
    with pytest.raises(TaskNotFoundError):
        _client(stub.url, retries=3).get_task()
    assert len(stub.requests) == 1


def test_result_task_not_found(stub):
    stub.status = 404
    stub.payload = b'"task not found"'
    with pytest.raises(TaskNotFoundError):
        _client(stub.url).result_task(999, 1, 7.0)


def test_result_task_unexpected_status_text(stub):
    stub.payload = b'"something else"'
    with pytest.raises(InternalServerError):
        _client(stub.url).result_task(1, 1, 7.0)


def test_server_errors_are_retried(stub):
    stub.status = 500
    stub.payload = b'"internal server error"'
    with pytest.raises(InternalServerError):
        _client(stub.url, retries=2).get_task()
    assert len(stub.requests) == 3


def test_unreachable_orchestrator():
    with socket.socket() as sock:
        sock.bind(("127.0.0.1", 0))
        port = sock.getsockname()[1]
    with pytest.raises(InternalServerError):
        _client(f"http://127.0.0.1:{port}", retries=1).get_task()


def _poll(fn, predicate, seconds=5.0):
    deadline = time.monotonic() + seconds
    while True:
        try:
            value = fn()
            if predicate(value):
                return value
        except TaskNotFoundError:
            pass
        if time.monotonic() > deadline:
            raise AssertionError("condition not reached in time")
        time.sleep(0.01)


def test_round_trip_with_orchestrator_api():
    service = OrchestratorService(ExpressionManager({"+": 0, "-": 0, "*": 0, "/": 0}))
    server = make_server(OrchestratorApi(service), "127.0.0.1", 0)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        client = _client(f"http://127.0.0.1:{server.server_address[1]}")
        expression_id = service.calculate("3+4")
        task = _poll(client.get_task, lambda t: True)
        assert (task.expression_id, task.arg1, task.arg2, task.operation) == (expression_id, 3.0, 4.0, "+")
        assert client.result_task(task.expression_id, task.task_id, 7.0) == "task completed"
        done = _poll(lambda: service.expression_by_id(expression_id), lambda e: e.status == "done")
        assert done.result == 7.0
    finally:
        server.shutdown()
        server.server_close()
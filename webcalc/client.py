"""HTTP client through which an agent talks to the orchestrator."""

from __future__ import annotations

import json
import urllib.request
from typing import Any
from urllib.error import HTTPError

from .callers import retry
from .errors import InternalServerError, TaskNotFoundError
from .logger import get_logger
from .models import Result, Task

_log = get_logger(__name__)

TASK_PATH = "/internal/task"
TASK_COMPLETED = "task completed"
TASK_NOT_FOUND = "task not found"


class _ServerError(Exception):
    """The orchestrator answered with a 5xx status."""

    def __init__(self, status: int, body: Any) -> None:
        super().__init__(f"status {status}: {body!r}")
        self.status = status


def _decode(raw: bytes) -> Any:
    if not raw.strip():
        return None
    return json.loads(raw.decode("utf-8"))


class HttpOrchestratorClient:
    """Calls the orchestrator's task endpoints, retrying failed transfers.

    ``timeout`` and ``base_retry_delay`` are in seconds.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 0.5,
        max_retries: int = 3,
        base_retry_delay: float = 0.1,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max_retries
        self.base_retry_delay = base_retry_delay

    def _request(self, method: str, path: str, payload: Any = None) -> tuple[int, Any]:
        data = None
        headers = {}
        if payload is not None:
            data = json.dumps(payload).encode("utf-8")
            headers["Content-Type"] = "application/json"
        request = urllib.request.Request(self.base_url + path, data=data, method=method, headers=headers)
        try:
            with urllib.request.urlopen(request, timeout=self.timeout) as response:
                return response.status, _decode(response.read())
        except HTTPError as exc:
            with exc:
                body = _decode(exc.read())
            if exc.code >= 500:
                raise _ServerError(exc.code, body) from None
            return exc.code, body

    def _call(self, method: str, path: str, what: str, payload: Any = None) -> tuple[int, Any]:
        try:
            return retry(
                lambda: self._request(method, path, payload),
                self.max_retries,
                self.base_retry_delay,
            )
        except (OSError, ValueError, _ServerError) as exc:
            _log.error("error calling orchestrator: %s", exc)
            raise InternalServerError(f"couldn't get {what} response: {exc}") from exc

    def get_task(self) -> Task:
        """Fetch the next task; raise :class:`TaskNotFoundError` when none waits."""
        status, body = self._call("GET", TASK_PATH, "GetTask")
        if status == 404:
            raise TaskNotFoundError()
        if status != 200 or not isinstance(body, dict):
            raise InternalServerError(f"unexpected GetTask response: {status}")
        try:
            return Task.from_dict(body)
        except (TypeError, ValueError) as exc:
            raise InternalServerError(f"malformed task: {exc}") from exc

    def result_task(self, expression_id: int, task_id: int, result: float) -> str:
        """Send the result of a task and return the orchestrator's status."""
        payload = Result(expression_id=expression_id, task_id=task_id, result=result).to_dict()
        status, body = self._call("POST", TASK_PATH, "ResultTask", payload)
        if status == 404 or body == TASK_NOT_FOUND:
            raise TaskNotFoundError()
        if status == 200 and body == TASK_COMPLETED:
            return body
        raise InternalServerError(f"unexpected ResultTask response: {status}")
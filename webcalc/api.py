"""JSON-over-HTTP front of the orchestrator."""

from __future__ import annotations

import json
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any
from urllib.parse import urlsplit

from .errors import InternalServerError, InvalidExpressionError, TaskNotFoundError
from .logger import get_logger, request_context
from .models import Result
from .service import OrchestratorService

_log = get_logger(__name__)

JSON_CONTENT_TYPE = "application/json; charset=UTF-8"
CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}

_INTEGER = re.compile(r"[+-]?[0-9]+", re.ASCII)


class _BadRequest(Exception):
    """The request body could not be bound."""


@dataclass(frozen=True)
class ApiResponse:
    """Status, JSON-ready body and headers of one reply."""

    status: int
    body: Any = None
    headers: dict[str, str] = field(default_factory=dict)


def _encode(body: Any) -> bytes:
    if body is None:
        return b""
    return json.dumps(body).encode("utf-8") + b"\n"


def _decode_object(body: bytes | str | None) -> dict[str, Any]:
    if body is None:
        return {}
    if isinstance(body, bytes):
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise _BadRequest() from exc
    if not body.strip():
        return {}
    try:
        data = json.loads(body)
    except json.JSONDecodeError as exc:
        raise _BadRequest() from exc
    if not isinstance(data, dict):
        raise _BadRequest()
    return data


class OrchestratorApi:
    """Routes HTTP requests to an :class:`OrchestratorService`."""

    def __init__(self, service: OrchestratorService) -> None:
        self.service = service
        self._routes: list[tuple[str, re.Pattern[str], Callable[..., ApiResponse]]] = [
            ("POST", re.compile(r"/api/v1/calculate"), self._calculate),
            ("GET", re.compile(r"/api/v1/expressions"), self._expressions),
            ("GET", re.compile(r"/api/v1/expressions/(?P<id>[^/]+)"), self._expression_by_id),
            ("POST", re.compile(r"/internal/task"), self._post_task),
            ("GET", re.compile(r"/internal/task"), self._get_task),
        ]

    def handle(self, method: str, path: str, body: bytes | str | None = None) -> ApiResponse:
        """Answer one request, with CORS headers and request logging."""
        method = method.upper()
        with request_context():
            _log.info("Request", extra={"method": method, "path": path})
            response = self._with_cors(method, path, body)
            _log.info(
                "Response",
                extra={"status": response.status, "method": method, "path": path},
            )
        return response

    def _with_cors(self, method: str, path: str, body: bytes | str | None) -> ApiResponse:
        if method == "OPTIONS":
            return ApiResponse(204, None, dict(CORS_HEADERS))
        reply = self._route(method, path, body)
        headers = dict(CORS_HEADERS)
        if reply.body is not None:
            headers["Content-Type"] = JSON_CONTENT_TYPE
        headers.update(reply.headers)
        return ApiResponse(reply.status, reply.body, headers)

    def _route(self, method: str, path: str, body: bytes | str | None) -> ApiResponse:
        path_matched = False
        for route_method, pattern, handler in self._routes:
            match = pattern.fullmatch(path)
            if match is None:
                continue
            path_matched = True
            if route_method == method:
                return handler(body, **match.groupdict())
        if path_matched:
            return ApiResponse(405, {"message": "Method Not Allowed"})
        return ApiResponse(404, {"message": "Not Found"})

    def _calculate(self, body: bytes | str | None) -> ApiResponse:
        try:
            data = _decode_object(body)
        except _BadRequest:
            return ApiResponse(422, "cannot parse request")
        expression = data.get("expression", "")
        if not isinstance(expression, str):
            return ApiResponse(422, "cannot parse request")
        try:
            expression_id = self.service.calculate(expression)
        except InvalidExpressionError:
            return ApiResponse(422, "invalid expression")
        except InternalServerError:
            return ApiResponse(500, "cannot get task manager")
        return ApiResponse(201, {"id": expression_id})

    def _expressions(self, body: bytes | str | None) -> ApiResponse:
        expressions = [expr.to_dict() for expr in self.service.expressions()]
        return ApiResponse(200, {"expressions": expressions})

    def _expression_by_id(self, body: bytes | str | None, id: str) -> ApiResponse:
        if not _INTEGER.fullmatch(id):
            return ApiResponse(500, "cannot parse id")
        try:
            expression = self.service.expression_by_id(int(id))
        except LookupError:
            return ApiResponse(404, "expression not found")
        return ApiResponse(200, expression.to_dict())

    def _post_task(self, body: bytes | str | None) -> ApiResponse:
        try:
            result = Result.from_dict(_decode_object(body))
        except (_BadRequest, TypeError, ValueError):
            return ApiResponse(422, "cannot parse request")
        try:
            status = self.service.result_task(result.expression_id, result.task_id, result.result)
        except TaskNotFoundError:
            return ApiResponse(404, "task not found")
        return ApiResponse(200, status)

    def _get_task(self, body: bytes | str | None) -> ApiResponse:
        try:
            task = self.service.get_task()
        except TaskNotFoundError:
            return ApiResponse(404, "task not found")
        except InternalServerError:
            return ApiResponse(500, "internal server error")
        return ApiResponse(200, task.to_dict())


class _ApiServer(ThreadingHTTPServer):
    daemon_threads = True

    def __init__(self, address: tuple[str, int], api: OrchestratorApi) -> None:
        self.api = api
        super().__init__(address, _ApiRequestHandler)


class _ApiRequestHandler(BaseHTTPRequestHandler):
    protocol_version = "HTTP/1.1"
    server: _ApiServer

    def _dispatch(self) -> None:
        length = int(self.headers.get("Content-Length") or 0)
        body = self.rfile.read(length) if length > 0 else b""
        response = self.server.api.handle(self.command, urlsplit(self.path).path, body)
        payload = _encode(response.body)
        self.send_response(response.status)
        for name, value in response.headers.items():
            self.send_header(name, value)
        self.send_header("Content-Length", str(len(payload)))
        self.end_headers()
        if payload:
            self.wfile.write(payload)

    do_GET = do_POST = do_PUT = do_DELETE = do_OPTIONS = _dispatch

    def log_message(self, format: str, *args: Any) -> None:
        pass


def make_server(api: OrchestratorApi, host: str = "0.0.0.0", port: int = 8080) -> ThreadingHTTPServer:
    """Bind an HTTP server for ``api``; port 0 picks a free port."""
    return _ApiServer((host, port), api)


def serve(api: OrchestratorApi, host: str = "0.0.0.0", port: int = 8080) -> None:
    """Serve ``api`` until interrupted."""
    with make_server(api, host, port) as server:
        _log.info("ORCHESTRATOR listening at :%d", server.server_address[1])
        try:
            server.serve_forever()
        except KeyboardInterrupt:
            pass
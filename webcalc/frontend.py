"""Static file server for the calculator's web front end."""

from __future__ import annotations

import argparse
import os
from collections.abc import Sequence
from functools import partial
from http.server import SimpleHTTPRequestHandler, ThreadingHTTPServer
from typing import Any

DEFAULT_DIRECTORY = "./frontend"
DEFAULT_PORT = 8081


class _QuietHandler(SimpleHTTPRequestHandler):
    def log_message(self, format: str, *args: Any) -> None:
        pass


def make_server(
    directory: str | os.PathLike[str] = DEFAULT_DIRECTORY,
    host: str = "",
    port: int = DEFAULT_PORT,
) -> ThreadingHTTPServer:
    """Bind a server that serves the files under ``directory``; port 0 picks a free port."""
    handler = partial(_QuietHandler, directory=os.fspath(directory))
    server = ThreadingHTTPServer((host, port), handler)
    server.daemon_threads = True
    return server


def main(argv: Sequence[str] | None = None) -> int:
    """Serve the front end until interrupted; return the exit status."""
    parser = argparse.ArgumentParser(prog="webcalc-frontend", description="Serve the web front end.")
    parser.add_argument("--directory", default=DEFAULT_DIRECTORY, help="directory to serve")
    parser.add_argument("--host", default="", help="address to listen on")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT, help="port to listen on")
    args = parser.parse_args(argv)

    print(f"Frontend server running on http://localhost:{args.port}")
    try:
        server = make_server(args.directory, args.host, args.port)
    except OSError as exc:
        print("Error starting server:", exc)
        return 1
    with server:
        try:
            server.serve_forever()
        except KeyboardInterrupt:
            pass
    return 0
"""Distributed calculator: an HTTP orchestrator, computing agents and a static file server."""

__version__ = "0.1.0"
"""HTTP API server for webcapture."""

from .app import CAPTURER_KEY, StreamAborted, create_app, error_status, forward_headers, run_server

__all__ = [
    "CAPTURER_KEY",
    "StreamAborted",
    "create_app",
    "error_status",
    "forward_headers",
    "run_server",
]

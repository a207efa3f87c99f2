"""HTTP client for webcapture."""

from .client import AsyncHttpClient
from .protocols import HttpClient, HttpResponse, HttpStream

__all__ = [
    "AsyncHttpClient",
    "HttpClient",
    "HttpResponse",
    "HttpStream",
]

"""Exceptions raised by webcapture operations."""

from __future__ import annotations


class CaptureError(Exception):
    """Base class for all webcapture errors."""


class MissingParameterError(CaptureError):
    """A required request parameter (usually ``url``) was not supplied."""


class InvalidUrlError(CaptureError):
    """URL could not be parsed or does not use http/https."""


class FetchError(CaptureError):
    """Upstream fetch failed (network error, timeout, size limit or bad status)."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RenderError(CaptureError):
    """The browser failed to launch, navigate or capture the page."""

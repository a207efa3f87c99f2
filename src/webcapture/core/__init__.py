"""Capture orchestration for webcapture."""

from .capturer import PNG_SIGNATURE, Capturer, normalize_url

__all__ = ["Capturer", "PNG_SIGNATURE", "normalize_url"]

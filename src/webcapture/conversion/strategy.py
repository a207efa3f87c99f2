"""Decide whether a fetched body can be served directly or needs a browser."""

import re

from ..models.capture import RenderDecision

# A complete <html ...>...</html> document.
_HTML_DOCUMENT = re.compile(r"<html\b[^>]*>[\s\S]*?</html>", re.IGNORECASE)

# Script elements, self-closing script tags, or javascript: references.
_SCRIPT_CONTENT = re.compile(
    r"<script\b[^>]*>[\s\S]*?</script>|<script\b[^>]*/>|javascript:",
    re.IGNORECASE,
)


def choose_render_strategy(body: str) -> RenderDecision:
    """
    Inspect a fetched body and pick a render strategy.

    A browser render is required when the body is not a complete
    ``<html>...</html>`` document (JSON, plain text, or an unhydrated
    client-side app shell) or when it carries script that has to run
    before the page reaches its final state.

    Args:
        body: Raw response body text

    Returns:
        RENDER_REQUIRED or DIRECT_FETCH_SUFFICIENT
    """
    if not _HTML_DOCUMENT.search(body) or _SCRIPT_CONTENT.search(body):
        return RenderDecision.RENDER_REQUIRED
    return RenderDecision.DIRECT_FETCH_SUFFICIENT


def requires_render(body: str) -> bool:
    """Return True if ``body`` must be rendered in a browser."""
    return choose_render_strategy(body) is RenderDecision.RENDER_REQUIRED

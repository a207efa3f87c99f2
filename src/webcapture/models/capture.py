"""Enumerations describing what to capture and how."""

from enum import Enum
from typing import Optional


class OutputFormat(str, Enum):
    """Artifact produced by a capture."""

    HTML = "html"
    MARKDOWN = "markdown"
    IMAGE = "image"

    @classmethod
    def parse(cls, value: str) -> "OutputFormat":
        """
        Resolve a user-supplied format name, accepting aliases.

        Raises:
            ValueError: If the name is not a known format or alias
        """
        normalized = value.strip().lower()
        resolved = _FORMAT_ALIASES.get(normalized)
        if resolved is None:
            raise ValueError(
                f"Unknown output format: {value!r} "
                "(expected html, markdown, md, image, png or screenshot)"
            )
        return resolved


_FORMAT_ALIASES = {
    "html": OutputFormat.HTML,
    "markdown": OutputFormat.MARKDOWN,
    "md": OutputFormat.MARKDOWN,
    "image": OutputFormat.IMAGE,
    "png": OutputFormat.IMAGE,
    "screenshot": OutputFormat.IMAGE,
}


class BrowserEngine(str, Enum):
    """Browser automation backends."""

    PUPPETEER = "puppeteer"
    PLAYWRIGHT = "playwright"

    @classmethod
    def parse(
        cls,
        value: Optional[str],
        default: "BrowserEngine | None" = None,
    ) -> "BrowserEngine":
        """
        Resolve an engine name, falling back to ``default`` for unknown names.

        ``primary``/``pptr`` select puppeteer, ``secondary``/``pw`` select playwright.
        """
        fallback = default or cls.PUPPETEER
        if not value:
            return fallback
        return _ENGINE_ALIASES.get(value.strip().lower(), fallback)


_ENGINE_ALIASES = {
    "puppeteer": BrowserEngine.PUPPETEER,
    "pptr": BrowserEngine.PUPPETEER,
    "primary": BrowserEngine.PUPPETEER,
    "playwright": BrowserEngine.PLAYWRIGHT,
    "pw": BrowserEngine.PLAYWRIGHT,
    "secondary": BrowserEngine.PLAYWRIGHT,
}


class RenderDecision(str, Enum):
    """Whether a fetched body can be used as-is or needs a browser render."""

    DIRECT_FETCH_SUFFICIENT = "direct_fetch_sufficient"
    RENDER_REQUIRED = "render_required"

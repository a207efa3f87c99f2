"""HTML to Markdown conversion."""

from __future__ import annotations

import logging
import re
from typing import Optional

import html2text
from bs4 import BeautifulSoup, NavigableString

from .sanitizer import HtmlSanitizer
from .urls import convert_relative_urls

logger = logging.getLogger(__name__)

STRIKETHROUGH_TAGS = ["del", "s", "strike"]

_EMPTY_LINK = re.compile(r"(?<!!)\[\s*\]\([^)]*\)")
_EMPTY_HEADING_LINE = re.compile(r"^#+[ \t]*$", re.MULTILINE)
_HTML2TEXT_RULE = re.compile(r"^[ \t]*\* \* \*[ \t]*$", re.MULTILINE)
_CODE_FENCE = re.compile(r"^[ \t]*```.*?^[ \t]*```[ \t]*$", re.MULTILINE | re.DOTALL)


def apply_gfm_extensions(soup: BeautifulSoup) -> None:
    """
    Rewrite strikethrough and checkbox markup into GFM syntax.

    ``<del>text</del>`` becomes ``~~text~~`` and checkbox inputs become
    ``[ ]`` / ``[x]`` task markers. Table captions become a paragraph
    placed above their table.
    """
    for tag in soup.find_all(STRIKETHROUGH_TAGS):
        if tag.decomposed:
            continue
        if tag.get_text().strip():
            tag.insert(0, NavigableString("~~"))
            tag.append(NavigableString("~~"))
        tag.unwrap()

    for box in soup.find_all("input"):
        if (box.get("type") or "").lower() != "checkbox":
            continue
        box.replace_with(NavigableString("[x] " if box.has_attr("checked") else "[ ] "))

    lift_table_captions(soup)


def lift_table_captions(soup: BeautifulSoup) -> None:
    """Move each ``<caption>`` out of its table into a paragraph just above it."""
    for caption in soup.find_all("caption"):
        table = caption.find_parent("table")
        text = caption.get_text().strip()
        caption.decompose()
        if table is None or not text:
            continue
        paragraph = soup.new_tag("p")
        paragraph.string = text
        table.insert_before(paragraph)


class HtmlToMarkdown:
    """
    Converts HTML content to clean Markdown.

    Uses html2text with a fixed profile: ATX headings, fenced code,
    ``*`` emphasis, ``**`` strong, ``-`` bullets, inline links, ``---``
    rules and pipe tables.

    Example:
        converter = HtmlToMarkdown()
        markdown = converter.convert(html_string, "https://docs.example.com/page")
    """

    def __init__(
        self,
        body_width: int = 0,
        inline_links: bool = True,
        ignore_images: bool = False,
        ignore_tables: bool = False,
        unicode_snob: bool = True,
    ):
        """
        Initialize the Markdown converter.

        Args:
            body_width: Max line width (0 = no wrapping)
            inline_links: Use inline [text](url) vs reference style
            ignore_images: Skip image conversion
            ignore_tables: Skip table conversion
            unicode_snob: Use Unicode chars where possible
        """
        self._converter = html2text.HTML2Text()

        # Line width (0 = no wrapping)
        self._converter.body_width = body_width

        # Link handling
        self._converter.inline_links = inline_links
        self._converter.wrap_links = False
        self._converter.protect_links = False

        # Markers
        self._converter.emphasis_mark = "*"
        self._converter.strong_mark = "**"
        self._converter.ul_item_mark = "-"

        # Content handling
        self._converter.ignore_images = ignore_images
        self._converter.ignore_tables = ignore_tables
        self._converter.pad_tables = True
        self._converter.unicode_snob = unicode_snob
        self._converter.escape_snob = False

        # Code blocks
        self._converter.mark_code = False
        self._converter.backquote_code_style = True
        self._converter.default_image_alt = ""
        self._converter.single_line_break = False

    @staticmethod
    def _clean_prose(text: str) -> str:
        text = _HTML2TEXT_RULE.sub("---", text)
        text = _EMPTY_LINK.sub("", text)
        text = _EMPTY_HEADING_LINE.sub("", text)

        # Remove trailing whitespace on each line
        text = "\n".join(line.rstrip() for line in text.split("\n"))

        # Remove excessive blank lines
        return re.sub(r"\n{3,}", "\n\n", text)

    def _clean_output(self, markdown: str) -> str:
        """Clean up the converted Markdown, leaving fenced code blocks as they are."""
        parts: list[str] = []
        last = 0
        for fence in _CODE_FENCE.finditer(markdown):
            parts.append(self._clean_prose(markdown[last : fence.start()]))
            parts.append(fence.group(0))
            last = fence.end()
        parts.append(self._clean_prose(markdown[last:]))

        return "".join(parts).strip() + "\n"

    def convert(self, html: str | BeautifulSoup, url: str = "") -> str:
        """
        Convert HTML to Markdown.

        Args:
            html: HTML content string or an already parsed document
            url: Source URL for resolving any remaining relative links

        Returns:
            Markdown string
        """
        soup = html if isinstance(html, BeautifulSoup) else BeautifulSoup(html, "html.parser")

        try:
            apply_gfm_extensions(soup)

            self._converter.baseurl = url
            markdown = self._converter.handle(str(soup))

            return self._clean_output(markdown)

        except Exception as e:
            logger.error(f"Failed to convert HTML to Markdown: {e}")
            # Return plain text as fallback
            text: str = soup.get_text(separator="\n")
            return text.strip() + "\n"


def convert_html_to_markdown(
    html: str,
    base_url: Optional[str] = None,
    sanitizer: Optional[HtmlSanitizer] = None,
    converter: Optional[HtmlToMarkdown] = None,
) -> str:
    """
    Sanitize an HTML document and convert it to Markdown.

    When ``base_url`` is given every reference is made absolute before
    the document is parsed.

    Args:
        html: HTML document
        base_url: URL the document was fetched from
        sanitizer: Cleanup pipeline (uses default passes if None)
        converter: Markdown converter (uses default profile if None)

    Returns:
        Markdown string
    """
    if base_url:
        html = convert_relative_urls(html, base_url)

    soup = (sanitizer or HtmlSanitizer()).sanitize(html)
    return (converter or HtmlToMarkdown()).convert(soup, base_url or "")

"""HTML cleanup passes run before Markdown conversion."""

import logging
from typing import Callable, Optional, Sequence

from bs4 import BeautifulSoup, Tag

logger = logging.getLogger(__name__)

SanitizePass = Callable[[BeautifulSoup], None]

NON_CONTENT_TAGS = ["style", "script", "noscript"]
HEADING_TAGS = ["h1", "h2", "h3", "h4", "h5", "h6"]


def _text(tag: Tag) -> str:
    return tag.get_text().strip()


def remove_non_content_elements(soup: BeautifulSoup) -> None:
    """Drop style, script and noscript elements together with their content."""
    for tag in soup.find_all(NON_CONTENT_TAGS):
        if not tag.decomposed:
            tag.decompose()


def remove_event_handlers(soup: BeautifulSoup) -> None:
    """Strip inline ``on*`` event handler attributes."""
    for tag in soup.find_all(True):
        for name in [attr for attr in tag.attrs if attr.lower().startswith("on")]:
            del tag[name]


def remove_javascript_links(soup: BeautifulSoup) -> None:
    for anchor in soup.find_all("a", href=True):
        if anchor.decomposed:
            continue
        if anchor["href"].strip().lower().startswith("javascript:"):
            anchor.decompose()


def remove_inline_styles(soup: BeautifulSoup) -> None:
    for tag in soup.find_all(style=True):
        del tag["style"]


def remove_empty_headings(soup: BeautifulSoup) -> None:
    """Remove h1-h6 elements whose text is empty or whitespace."""
    for heading in soup.find_all(HEADING_TAGS):
        if not heading.decomposed and not _text(heading):
            heading.decompose()


def _has_labelled_image(anchor: Tag) -> bool:
    return any((img.get("alt") or "").strip() for img in anchor.find_all("img"))


def remove_empty_anchors(soup: BeautifulSoup) -> None:
    """
    Remove anchors that would render as empty links.

    An anchor survives if it has visible text or wraps an image with a
    non-empty ``alt``. Whitespace-only anchors, anchors around unlabelled
    images and anchors whose children are all empty are removed.
    """
    for anchor in soup.find_all("a"):
        if anchor.decomposed:
            continue
        if _text(anchor) or _has_labelled_image(anchor):
            continue
        anchor.decompose()


def remove_marked_empty_elements(soup: BeautifulSoup) -> None:
    """Remove ``data-remove-empty`` elements that ended up without text."""
    for tag in soup.find_all(attrs={"data-remove-empty": True}):
        if not tag.decomposed and not _text(tag):
            tag.decompose()


def _collapse(text: str) -> str:
    return " ".join(text.split())


def _caption_text(soup: BeautifulSoup, element: Tag) -> Optional[str]:
    label = (element.get("aria-label") or "").strip()
    if label:
        return label

    described_by = element.get("aria-describedby")
    if not described_by:
        return None
    parts = []
    for ref in described_by.split():
        target = soup.find(id=ref)
        if target is not None:
            parts.append(_collapse(target.get_text()))
    return " ".join(part for part in parts if part) or None


def _build_table(soup: BeautifulSoup, element: Tag) -> Tag:
    table = soup.new_tag("table")

    caption_text = _caption_text(soup, element)
    if caption_text:
        caption = soup.new_tag("caption")
        caption.string = caption_text
        table.append(caption)

    # A table whose rows sit directly under it acts as a single row group.
    groups = element.find_all(attrs={"role": "rowgroup"}, recursive=False) or [element]

    thead = soup.new_tag("thead")
    tbody = soup.new_tag("tbody")
    for index, group in enumerate(groups):
        for row in group.find_all(attrs={"role": "row"}, recursive=False):
            tr = soup.new_tag("tr")
            for cell in row.find_all(attrs={"role": ["columnheader", "cell"]}, recursive=False):
                new_cell = soup.new_tag("th" if cell.get("role") == "columnheader" else "td")
                new_cell.string = _collapse(cell.get_text())
                tr.append(new_cell)

            if index == 0 and tr.find("th") is not None:
                thead.append(tr)
            else:
                tbody.append(tr)

    if thead.contents:
        table.append(thead)
    if tbody.contents:
        table.append(tbody)
    return table


def promote_aria_tables(soup: BeautifulSoup) -> None:
    """
    Replace ``role="table"`` structures with real table markup.

    The first row group supplies ``<thead>`` rows when they contain at
    least one ``columnheader``; every other row goes to ``<tbody>``.
    Caption text comes from ``aria-label`` or the ``aria-describedby``
    target.
    """
    # Innermost tables first so an outer table sees its nested text.
    for element in reversed(soup.find_all(attrs={"role": "table"})):
        if element.decomposed:
            continue
        element.replace_with(_build_table(soup, element))


# Order matters: later passes rely on the tree left by earlier ones.
DEFAULT_PASSES: tuple[SanitizePass, ...] = (
    remove_non_content_elements,
    remove_event_handlers,
    remove_javascript_links,
    remove_inline_styles,
    remove_empty_headings,
    remove_empty_anchors,
    remove_marked_empty_elements,
    promote_aria_tables,
)


class HtmlSanitizer:
    """
    Parses HTML and runs the cleanup passes in order.

    Example:
        sanitizer = HtmlSanitizer()
        soup = sanitizer.sanitize("<h1> </h1><p>Body</p>")
    """

    def __init__(self, passes: Optional[Sequence[SanitizePass]] = None, parser: str = "html.parser"):
        """
        Initialize the sanitizer.

        Args:
            passes: Cleanup passes to run (defaults to DEFAULT_PASSES)
            parser: BeautifulSoup parser name
        """
        self._passes = tuple(passes) if passes is not None else DEFAULT_PASSES
        self._parser = parser

    def sanitize(self, html: str) -> BeautifulSoup:
        """Parse ``html`` and return the cleaned document tree."""
        soup = BeautifulSoup(html, self._parser)
        for cleanup in self._passes:
            cleanup(soup)
            logger.debug(f"Applied sanitize pass {getattr(cleanup, '__name__', cleanup)!s}")
        return soup

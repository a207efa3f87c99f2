"""Normalize an HTML document to UTF-8 with an explicit charset declaration."""

from __future__ import annotations

import logging
import re

logger = logging.getLogger(__name__)

UTF8_META = '<meta charset="utf-8">'
UTF8_NAMES = frozenset({"utf-8", "utf8"})

# Matches <meta charset="x"> and <meta http-equiv=... content="...; charset=x">
_META_CHARSET = re.compile(r"""<meta\b[^>]*?charset\s*=\s*["']?\s*([^"'>\s;/]+)""", re.IGNORECASE)
_META_CHARSET_TAG = re.compile(r"<meta\b[^>]*?charset\s*=[^>]*>", re.IGNORECASE)
_HEAD_OPEN = re.compile(r"<head(?:\s[^>]*)?>", re.IGNORECASE)
_HTML_OPEN = re.compile(r"<html(?:\s[^>]*)?>", re.IGNORECASE)


def detect_declared_charset(html: str | bytes) -> str | None:
    """
    Return the charset named by the first charset ``<meta>`` tag, lowercased.

    Returns None when the document declares no charset.
    """
    view = html.decode("latin-1") if isinstance(html, bytes) else html
    match = _META_CHARSET.search(view)
    return match.group(1).lower() if match else None


def inject_utf8_meta(html: str) -> str:
    """
    Insert ``<meta charset="utf-8">`` right after the opening ``<head>`` tag.

    Documents without a head get one after ``<html>``; fragments without
    either get the tag prepended.
    """
    head = _HEAD_OPEN.search(html)
    if head:
        return html[: head.end()] + UTF8_META + html[head.end() :]

    root = _HTML_OPEN.search(html)
    if root:
        return html[: root.end()] + f"<head>{UTF8_META}</head>" + html[root.end() :]

    return UTF8_META + html


def _transcode(html: str | bytes, charset: str) -> str:
    if isinstance(html, bytes):
        return html.decode(charset)
    # Already text: make sure it is really expressible in the declared charset.
    return html.encode(charset).decode(charset)


def _as_text(html: str | bytes) -> str:
    if isinstance(html, bytes):
        return html.decode("utf-8", errors="replace")
    return html


def normalize_charset(html: str | bytes) -> str:
    """
    Convert an HTML document to UTF-8 text declaring ``charset="utf-8"``.

    The declared charset is read from the first charset ``<meta>`` tag and
    defaults to UTF-8. Documents in another charset are transcoded and
    their charset tag is replaced. If transcoding fails the original text
    is returned with a UTF-8 tag injected after ``<head>``; this function
    never raises.

    Args:
        html: Document as raw bytes or already-decoded text

    Returns:
        UTF-8 safe HTML text
    """
    declared = detect_declared_charset(html)
    charset = declared or "utf-8"

    if charset in UTF8_NAMES:
        text = _as_text(html)
        return text if declared else inject_utf8_meta(text)

    try:
        text = _transcode(html, charset)
    except Exception as e:
        logger.warning(f"Charset conversion from {charset} failed, keeping original text: {e}")
        return inject_utf8_meta(_as_text(html))

    logger.debug(f"Transcoded document from {charset} to utf-8")
    return _META_CHARSET_TAG.sub(UTF8_META, text, count=1)

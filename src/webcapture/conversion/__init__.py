"""Content conversion for webcapture (charset, URLs, sanitizing, Markdown)."""

from .charset import detect_declared_charset, inject_utf8_meta, normalize_charset
from .markdown import HtmlToMarkdown, apply_gfm_extensions, convert_html_to_markdown, lift_table_captions
from .sanitizer import DEFAULT_PASSES, HtmlSanitizer
from .strategy import choose_render_strategy, requires_render
from .urls import (
    URL_ATTRIBUTES,
    build_runtime_script,
    convert_relative_urls,
    resolve_url,
    rewrite_css_urls,
)

__all__ = [
    # Charset
    "detect_declared_charset",
    "inject_utf8_meta",
    "normalize_charset",
    # URLs
    "URL_ATTRIBUTES",
    "build_runtime_script",
    "convert_relative_urls",
    "resolve_url",
    "rewrite_css_urls",
    # Strategy
    "choose_render_strategy",
    "requires_render",
    # Markdown
    "DEFAULT_PASSES",
    "HtmlSanitizer",
    "HtmlToMarkdown",
    "apply_gfm_extensions",
    "convert_html_to_markdown",
    "lift_table_captions",
]

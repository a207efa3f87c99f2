"""Rewrite relative URLs in an HTML document to absolute form."""

from __future__ import annotations

import json
import logging
import re
from urllib.parse import urljoin

logger = logging.getLogger(__name__)

# (element, attribute) pairs that carry a URL.
URL_ATTRIBUTES: tuple[tuple[str, str], ...] = (
    ("a", "href"),
    ("img", "src"),
    ("script", "src"),
    ("link", "href"),
    ("form", "action"),
    ("video", "src"),
    ("audio", "src"),
    ("source", "src"),
    ("track", "src"),
    ("embed", "src"),
    ("object", "data"),
    ("iframe", "src"),
)
_URL_ATTRIBUTE_BY_TAG = dict(URL_ATTRIBUTES)

UNRESOLVED_PREFIXES = ("data:", "blob:", "javascript:")

_START_TAG = re.compile(r"""<([a-zA-Z][\w:-]*)((?:[^>"']|"[^"]*"|'[^']*')*)>""")
_ATTRIBUTE = re.compile(
    r"""(\s+)([^\s"'>/=]+)(?:(\s*=\s*)(?:"([^"]*)"|'([^']*)'|([^\s"'=<>`]+)))?"""
)
_STYLE_BLOCK = re.compile(r"(<style\b[^>]*>)(.*?)(</style\s*>)", re.IGNORECASE | re.DOTALL)
_CSS_URL = re.compile(r"""url\(\s*(&quot;|["']?)(.*?)\1\s*\)""", re.IGNORECASE)
# Comments and script bodies are text, not markup; only the <script> tag itself is rewritten.
_OPAQUE_REGION = re.compile(
    r"""<!--[\s\S]*?-->|(<script\b(?:[^>"']|"[^"]*"|'[^']*')*>)([\s\S]*?)(</script\s*>)""",
    re.IGNORECASE,
)
_SCRIPT_TAG = re.compile(r"<script[\s>/]", re.IGNORECASE)
_HEAD_CLOSE = re.compile(r"</head\s*>", re.IGNORECASE)

RUNTIME_MARKER = "data-webcapture-runtime"

# Browser-side copy of resolve_url(); keep the two in step.
_RUNTIME_SCRIPT = r"""<script data-webcapture-runtime>(function () {
  var BASE_URL = __BASE_URL__;
  var SKIPPED = ['data:', 'blob:', 'javascript:'];
  function absolutifyUrl(url) {
    if (!url) return url;
    var lowered = url.trim().toLowerCase();
    for (var i = 0; i < SKIPPED.length; i++) {
      if (lowered.indexOf(SKIPPED[i]) === 0) return url;
    }
    try { return new URL(url.trim(), BASE_URL).href; } catch (e) { return url; }
  }
  var CSS_URL = /url\(\s*(["']?)(.*?)\1\s*\)/gi;
  function fixCss(css) {
    return css.replace(CSS_URL, function (match, quote, value) {
      return 'url("' + absolutifyUrl(value) + '")';
    });
  }
  function fixElementUrls(el) {
    var tag = el.tagName;
    if ((tag === 'A' || tag === 'LINK') && el.hasAttribute('href')) {
      el.setAttribute('href', absolutifyUrl(el.getAttribute('href')));
    }
    if ((tag === 'IMG' || tag === 'SCRIPT' || tag === 'IFRAME' || tag === 'SOURCE') && el.hasAttribute('src')) {
      el.setAttribute('src', absolutifyUrl(el.getAttribute('src')));
    }
    if (el.hasAttribute('style')) {
      el.setAttribute('style', fixCss(el.getAttribute('style')));
    }
    if (tag === 'STYLE') {
      el.textContent = fixCss(el.textContent);
    }
  }
  function fixAllUrls(root) {
    if (root.nodeType === 1) fixElementUrls(root);
    root.querySelectorAll('*').forEach(fixElementUrls);
  }
  function start() {
    fixAllUrls(document);
    new MutationObserver(function (mutations) {
      mutations.forEach(function (mutation) {
        mutation.addedNodes.forEach(function (node) {
          if (node.nodeType === 1) fixAllUrls(node);
        });
      });
    }).observe(document.body, { childList: true, subtree: true });
  }
  if (document.body) {
    start();
  } else {
    document.addEventListener('DOMContentLoaded', start);
  }
})();</script>
"""


def resolve_url(value: str, base_url: str) -> str:
    """
    Resolve ``value`` against ``base_url``.

    Empty values and ``data:``, ``blob:`` or ``javascript:`` URLs are
    returned unchanged, as is anything urljoin cannot parse.
    """
    if not value:
        return value
    candidate = value.strip()
    if candidate.lower().startswith(UNRESOLVED_PREFIXES):
        return value
    try:
        return urljoin(base_url, candidate)
    except ValueError:
        logger.debug(f"Could not resolve {value!r} against {base_url}")
        return value


def rewrite_css_urls(css: str, base_url: str, quote: str = '"') -> str:
    """Resolve every ``url(...)`` in a CSS string, re-quoting with ``quote``."""

    def replace(match: re.Match[str]) -> str:
        return f"url({quote}{resolve_url(match.group(2), base_url)}{quote})"

    return _CSS_URL.sub(replace, css)


def _rewrite_start_tag(match: re.Match[str], base_url: str) -> str:
    tag_name = match.group(1).lower()
    url_attribute = _URL_ATTRIBUTE_BY_TAG.get(tag_name)
    attributes = match.group(2)

    def replace(attr: re.Match[str]) -> str:
        space, name, equals = attr.group(1), attr.group(2).lower(), attr.group(3)
        if equals is None:
            return attr.group(0)

        if attr.group(4) is not None:
            value, quote = attr.group(4), '"'
        elif attr.group(5) is not None:
            value, quote = attr.group(5), "'"
        else:
            value, quote = attr.group(6), ""

        if name == url_attribute:
            value = resolve_url(value, base_url)
        elif name == "style":
            if quote == "'":
                value = rewrite_css_urls(value, base_url, quote='"')
            else:
                # Unquoted values are promoted to double quotes.
                value = rewrite_css_urls(value, base_url, quote="&quot;")
                quote = '"'
        else:
            return attr.group(0)

        return f"{space}{attr.group(2)}{equals}{quote}{value}{quote}"

    if url_attribute is None and "style" not in attributes.lower():
        return match.group(0)

    rewritten = _ATTRIBUTE.sub(replace, attributes)
    return f"<{match.group(1)}{rewritten}>"


def _rewrite_markup(html: str, base_url: str) -> str:
    def rewrite_tags(text: str) -> str:
        return _START_TAG.sub(lambda m: _rewrite_start_tag(m, base_url), text)

    parts: list[str] = []
    last = 0
    for region in _OPAQUE_REGION.finditer(html):
        parts.append(rewrite_tags(html[last : region.start()]))
        if region.group(1) is None:
            parts.append(region.group(0))
        else:
            parts.append(rewrite_tags(region.group(1)) + region.group(2) + region.group(3))
        last = region.end()
    parts.append(rewrite_tags(html[last:]))
    return "".join(parts)


def build_runtime_script(base_url: str) -> str:
    """Return the client-side script that keeps late-inserted nodes absolute."""
    literal = json.dumps(base_url).replace("</", "<\\/")
    return _RUNTIME_SCRIPT.replace("__BASE_URL__", literal)


def convert_relative_urls(html: str, base_url: str) -> str:
    """
    Rewrite every URL-bearing attribute and CSS ``url()`` to absolute form.

    Documents that contain a ``<script>`` tag also get a runtime script
    injected before ``</head>`` which applies the same rule to nodes that
    scripts insert later.

    Args:
        html: HTML document
        base_url: Absolute URL used to resolve relative references

    Returns:
        HTML with absolute URLs
    """
    result = _STYLE_BLOCK.sub(
        lambda m: m.group(1) + rewrite_css_urls(m.group(2), base_url) + m.group(3),
        html,
    )
    result = _rewrite_markup(result, base_url)

    if _SCRIPT_TAG.search(html) and RUNTIME_MARKER not in html:
        head_close = _HEAD_CLOSE.search(result)
        if head_close:
            script = build_runtime_script(base_url)
            result = result[: head_close.start()] + script + result[head_close.start() :]
        else:
            logger.debug("Document has scripts but no </head>; runtime URL hook not injected")

    return result

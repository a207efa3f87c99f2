"""Tests for render strategy selection."""

from webcapture.conversion import choose_render_strategy, requires_render
from webcapture.models import RenderDecision


class TestChooseRenderStrategy:
    """Tests for choose_render_strategy."""

    def test_static_document_is_served_directly(self):
        """Test that a complete document without scripts needs no browser."""
        body = "<html><head><title>T</title></head><body><p>Hello</p></body></html>"

        assert choose_render_strategy(body) is RenderDecision.DIRECT_FETCH_SUFFICIENT

    def test_html_tag_with_attributes(self):
        """Test that attributes on the html tag still count as a document."""
        body = '<!DOCTYPE html><HTML lang="en"><body>Plain</body></HTML>'

        assert choose_render_strategy(body) is RenderDecision.DIRECT_FETCH_SUFFICIENT

    def test_script_element_requires_render(self):
        """Test that an inline script forces a browser render."""
        body = "<html><body><script>document.write('x')</script></body></html>"

        assert choose_render_strategy(body) is RenderDecision.RENDER_REQUIRED

    def test_external_script_requires_render(self):
        """Test that an empty external script element forces a render."""
        body = '<html><head><script src="/app.js"></script></head><body></body></html>'

        assert requires_render(body)

    def test_self_closing_script_requires_render(self):
        """Test that <script/> forces a render."""
        body = '<html><head><script src="/app.js"/></head><body></body></html>'

        assert requires_render(body)

    def test_javascript_url_requires_render(self):
        """Test that a javascript: reference forces a render."""
        body = '<html><body><a href="JavaScript:void(0)">x</a></body></html>'

        assert requires_render(body)

    def test_fragment_requires_render(self):
        """Test that a body without <html>...</html> forces a render."""
        assert requires_render("<div>Loading...</div>")

    def test_non_html_requires_render(self):
        """Test that JSON and plain text force a render."""
        assert requires_render('{"data": []}')
        assert requires_render("")

    def test_unclosed_html_requires_render(self):
        """Test that an html open tag without a close tag is not a document."""
        assert requires_render("<html><body>truncated")

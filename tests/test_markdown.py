"""Tests for HTML to Markdown conversion."""

import re
from unittest.mock import patch

from bs4 import BeautifulSoup

from webcapture.conversion import HtmlToMarkdown, apply_gfm_extensions, convert_html_to_markdown

BASE = "https://example.com/docs/"


class TestHtmlToMarkdown:
    """Tests for HtmlToMarkdown."""

    def test_converts_headings(self):
        """Test ATX heading output."""
        converter = HtmlToMarkdown()

        result = converter.convert("<h1>Title</h1><h2>Section</h2>")

        assert "# Title" in result
        assert "## Section" in result

    def test_converts_emphasis(self):
        """Test emphasis and strong markers."""
        converter = HtmlToMarkdown()

        result = converter.convert("<p><strong>bold</strong> and <em>italic</em></p>")

        assert "**bold**" in result
        assert "*italic*" in result

    def test_converts_lists_with_dash(self):
        """Test that bullet lists use the dash marker."""
        converter = HtmlToMarkdown()

        result = converter.convert("<ul><li>One</li><li>Two</li></ul>")

        assert "- One" in result
        assert "- Two" in result
        assert "* One" not in result

    def test_converts_links_inline(self):
        """Test inline link output."""
        converter = HtmlToMarkdown()

        result = converter.convert('<p><a href="https://example.com/a">Link</a></p>')

        assert "[Link](https://example.com/a)" in result

    def test_horizontal_rule(self):
        """Test that rules are emitted as ---."""
        converter = HtmlToMarkdown()

        result = converter.convert("<p>Above</p><hr><p>Below</p>")

        assert "---" in result
        assert "* * *" not in result

    def test_inline_code(self):
        """Test inline code spans."""
        converter = HtmlToMarkdown()

        result = converter.convert("<p>Run <code>make</code> now</p>")

        assert "`make`" in result

    def test_no_trailing_whitespace_or_blank_runs(self):
        """Test output cleanup."""
        converter = HtmlToMarkdown()

        result = converter.convert("<p>One</p><br><br><br><p>Two</p>")

        assert "\n\n\n" not in result
        assert all(line == line.rstrip() for line in result.split("\n"))
        assert result.endswith("\n")

    def test_accepts_parsed_document(self):
        """Test conversion of an existing BeautifulSoup tree."""
        converter = HtmlToMarkdown()
        soup = BeautifulSoup("<h3>Parsed</h3>", "html.parser")

        assert "### Parsed" in converter.convert(soup)

    def test_falls_back_to_text_on_failure(self):
        """Test that a converter failure degrades to plain text."""
        converter = HtmlToMarkdown()

        with patch.object(converter._converter, "handle", side_effect=RuntimeError("boom")):
            result = converter.convert("<h1>Title</h1><p>Body</p>")

        assert "Title" in result
        assert "Body" in result
        assert "#" not in result


class TestGfmExtensions:
    """Tests for apply_gfm_extensions."""

    def test_strikethrough(self):
        """Test del, s and strike become ~~text~~."""
        result = HtmlToMarkdown().convert("<p><del>old</del> <s>gone</s> <strike>was</strike></p>")

        assert "~~old~~" in result
        assert "~~gone~~" in result
        assert "~~was~~" in result

    def test_task_list_checkboxes(self):
        """Test that checkboxes become task markers."""
        soup = BeautifulSoup(
            '<ul><li><input type="checkbox" checked> Done</li><li><input type="checkbox"> Todo</li></ul>',
            "html.parser",
        )

        apply_gfm_extensions(soup)

        items = [li.get_text() for li in soup.find_all("li")]
        assert items == ["[x]  Done", "[ ]  Todo"]

    def test_other_inputs_untouched(self):
        """Test that non-checkbox inputs are left alone."""
        soup = BeautifulSoup('<input type="text" value="x">', "html.parser")

        apply_gfm_extensions(soup)

        assert soup.find("input") is not None

    def test_caption_lifted_above_table(self):
        """Test that a caption becomes a paragraph before its table."""
        soup = BeautifulSoup(
            "<table><caption>Prices</caption><tr><td>a</td></tr></table>",
            "html.parser",
        )

        apply_gfm_extensions(soup)

        assert soup.find("caption") is None
        assert soup.table.find_previous_sibling("p").get_text() == "Prices"


class TestConvertHtmlToMarkdown:
    """Tests for the full sanitize and convert pipeline."""

    def test_pipe_table(self):
        """Test that tables render as pipe tables."""
        html = (
            "<table><thead><tr><th>Header 1</th><th>Header 2</th></tr></thead>"
            "<tbody><tr><td>Cell 1</td><td>Cell 2</td></tr></tbody></table>"
        )

        result = convert_html_to_markdown(html)

        assert re.search(r"Header 1 *\| *Header 2", result)
        assert re.search(r"^\|[-: ]+\|[-: ]+\|$", result, re.MULTILINE)
        assert re.search(r"Cell 1 *\| *Cell 2", result)

    def test_empty_first_cell_keeps_columns(self):
        """Test that a row starting with an empty cell keeps its column positions."""
        html = "<table><tr><th>Name</th><th>Value</th></tr><tr><td></td><td>42</td></tr></table>"

        result = convert_html_to_markdown(html)

        assert re.search(r"^\| *Name *\| *Value *\|$", result, re.MULTILINE)
        assert re.search(r"^\| +\| *42 *\|$", result, re.MULTILINE)

    def test_empty_table_renders_blank_cells(self):
        """Test that a table of empty cells is still a two-column pipe table."""
        html = "<table><tr><td></td><td></td></tr><tr><td></td><td></td></tr></table>"

        result = convert_html_to_markdown(html)

        lines = [line for line in result.splitlines() if line]
        assert len(lines) == 3
        assert re.fullmatch(r"\| *\| *\|", lines[0])
        assert re.fullmatch(r"\|[-: ]+\|[-: ]+\|", lines[1])
        assert re.fullmatch(r"\| *\| *\|", lines[2])

    def test_code_block_lines_preserved(self):
        """Test that heading markers, rules and link syntax inside code survive cleanup."""
        html = "<pre><code>x = 1\n#\n* * *\n[](target)\ny = 2</code></pre>"

        result = convert_html_to_markdown(html)

        assert "x = 1\n#\n* * *\n[](target)\ny = 2" in result

    def test_cleanup_still_applies_outside_code(self):
        """Test that rules are normalized around a code block."""
        html = "<p>Above</p><hr><pre><code>#\n</code></pre><hr><p>Below</p>"

        result = convert_html_to_markdown(html)

        assert "* * *" not in result
        assert result.index("---") < result.index("```")
        assert result.rindex("---") > result.rindex("```")
        assert "\n#\n" in result

    def test_aria_table_becomes_pipe_table(self):
        """Test that ARIA tables are converted to pipe tables with a caption paragraph."""
        html = (
            '<div role="table" aria-label="Plans">'
            '<div role="rowgroup"><div role="row">'
            '<span role="columnheader">Name</span><span role="columnheader">Cost</span>'
            "</div></div>"
            '<div role="rowgroup"><div role="row">'
            '<span role="cell">Basic</span><span role="cell">Free</span>'
            "</div></div></div>"
        )

        result = convert_html_to_markdown(html)

        assert "Plans" in result
        assert re.search(r"Name *\| *Cost", result)
        assert re.search(r"Basic *\| *Free", result)
        assert "role" not in result

    def test_resolves_links_against_base(self):
        """Test that relative links become absolute."""
        result = convert_html_to_markdown('<p><a href="guide.html">Guide</a></p>', BASE)

        assert "[Guide](https://example.com/docs/guide.html)" in result

    def test_resolves_images_against_base(self):
        """Test that relative image sources become absolute."""
        result = convert_html_to_markdown('<p><img src="/logo.png" alt="Logo"></p>', BASE)

        assert "![Logo](https://example.com/logo.png)" in result

    def test_no_empty_links(self):
        """Test that empty and image-only unlabelled anchors leave no []() behind."""
        html = (
            '<p>Start <a href="/a"></a> <a href="/b"> </a> <a href="/c"><img src="x.png"></a> end</p>'
        )

        result = convert_html_to_markdown(html, BASE)

        assert "[]" not in result
        assert "Start" in result
        assert "end" in result

    def test_labelled_image_link_kept(self):
        """Test that an anchor around a labelled image survives as a link."""
        result = convert_html_to_markdown('<a href="/home"><img src="/logo.png" alt="Home"></a>', BASE)

        assert "![Home](https://example.com/logo.png)" in result
        assert "(https://example.com/home)" in result

    def test_no_empty_headings(self):
        """Test that empty headings never reach the output."""
        result = convert_html_to_markdown("<h1> </h1><h2><a href='/x'></a></h2><p>Body</p>", BASE)

        headings = [line for line in result.splitlines() if line.startswith("#")]
        assert all(heading.strip("# ") for heading in headings)
        assert "Body" in result

    def test_drops_scripts_styles_and_js_links(self):
        """Test that non-content and javascript: links are removed."""
        html = (
            "<html><head><style>body{color:red}</style><script>track()</script></head>"
            '<body><noscript>No JS</noscript><p onclick="x()">Text <a href="javascript:go()">Go</a></p></body></html>'
        )

        result = convert_html_to_markdown(html, BASE)

        assert "color:red" not in result
        assert "track()" not in result
        assert "No JS" not in result
        assert "Go" not in result
        assert "javascript" not in result
        assert "Text" in result

"""Tests for HtmlRenderer."""

from __future__ import annotations

import pytest

from lintian_ssg import Markdown, RenderError, parse
from lintian_ssg.nodes import Document, Inline, Link, LinkLabelState, Paragraph, Text
from lintian_ssg.renderers.html import (
    RAW_HTML_OMITTED,
    HtmlRenderer,
    html_escape,
    is_dangerous_url,
    raw_write,
    write_text,
)
from lintian_ssg.stringbuilder import StringBuilder
from lintian_ssg.text import Segment


class TestEscaping:
    """Text writers and URL checks."""

    def test_html_escape_keeps_single_quotes(self) -> None:
        """Double quotes are escaped, single quotes are not."""
        assert html_escape("<a href=\"x\">'&'</a>") == "&lt;a href=&quot;x&quot;&gt;'&amp;'&lt;/a&gt;"

    def test_write_text_resolves_escapes_and_entities(self) -> None:
        """Known entities resolve and unknown ones are escaped."""
        sb = StringBuilder()
        write_text(sb, "\\<b\\> &amp; &#65; &unknownentity;")
        assert sb.build() == "&lt;b&gt; &amp; A &amp;unknownentity;"

    def test_raw_write_escapes_only(self) -> None:
        """Backslashes and entities are left literal."""
        sb = StringBuilder()
        raw_write(sb, "\\<b\\> &amp;")
        assert sb.build() == "\\&lt;b\\&gt; &amp;amp;"

    @pytest.mark.parametrize(
        "url",
        ["javascript:alert(1)", "JAVASCRIPT:x", "vbscript:x", "file:///etc/passwd", "data:text/html,x"],
    )
    def test_dangerous_urls(self, url: str) -> None:
        """Script-capable schemes are flagged."""
        assert is_dangerous_url(url)

    @pytest.mark.parametrize(
        "url", ["https://lintian.debian.org", "mailto:a@b.org", "data:image/png;base64,AAAA", "/relative"]
    )
    def test_safe_urls(self, url: str) -> None:
        """Ordinary URLs and image data URLs pass."""
        assert not is_dangerous_url(url)


class TestLinkRendering:
    """Link destinations and titles."""

    def test_dangerous_destination_dropped(self) -> None:
        """A dangerous destination renders as an empty href."""
        assert Markdown()("[x](javascript:alert(1))") == '<p><a href="">x</a></p>\n'

    def test_dangerous_destination_kept_with_html(self) -> None:
        """With raw HTML enabled the destination is kept."""
        result = Markdown(html_enabled=True)("[x](javascript:alert(1))")
        assert result == '<p><a href="javascript:alert(1)">x</a></p>\n'

    def test_destination_percent_encoded(self) -> None:
        """Spaces in a destination are percent-encoded."""
        assert Markdown()("[x](<http://x.org/a b>)") == '<p><a href="http://x.org/a%20b">x</a></p>\n'

    def test_title_escaped(self) -> None:
        """Titles resolve entities and escape markup."""
        result = Markdown()('[x](http://x.org "a &amp; <b>")')
        assert result == '<p><a href="http://x.org" title="a &amp; &lt;b&gt;">x</a></p>\n'


class TestRegistration:
    """Render function lookup."""

    def test_unknown_node_kind_raises(self) -> None:
        """A node without a render function raises RenderError."""
        doc = Document(source="[\n")
        doc.append_child(LinkLabelState(segment=Segment(0, 1)))
        with pytest.raises(RenderError) as info:
            HtmlRenderer().render(doc)
        assert info.value.kind == "LinkLabelState"

    def test_register_replaces_function(self) -> None:
        """A registered function replaces the default."""
        def render_shouting_text(r, node, sb, ctx) -> None:
            sb.append(node.value(ctx.source).upper())

        renderer = HtmlRenderer().register(Text, render_shouting_text)
        doc = parse("quiet words")
        assert renderer.render(doc) == "<p>QUIET WORDS</p>\n"

    def test_register_base_class_covers_subclasses(self) -> None:
        """A base class registration renders its subclasses."""
        def render_inline(r, node, sb, ctx) -> None:
            sb.append("[inline]")

        renderer = HtmlRenderer().register(Inline, render_inline)
        doc = Document(source="x\n")
        paragraph = Paragraph()
        doc.append_child(paragraph)
        paragraph.append_child(LinkLabelState(segment=Segment(0, 1)))
        assert renderer.render(doc) == "<p>[inline]</p>\n"

    def test_renderers_are_independent(self) -> None:
        """Registering on one renderer leaves others unchanged."""
        renderer = HtmlRenderer().register(Link, lambda r, node, sb, ctx: sb.append("LINK"))
        doc = parse("[a](http://x.org)")
        assert renderer.render(doc) == "<p>LINK</p>\n"
        assert HtmlRenderer().render(doc) == '<p><a href="http://x.org">a</a></p>\n'

    def test_raw_html_marker(self) -> None:
        """The placeholder comment matches the usual goldmark text."""
        assert RAW_HTML_OMITTED == "<!-- raw HTML omitted -->"

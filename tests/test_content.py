"""Tests for post content rendering."""

from unittest.mock import patch

import pytest

from raindrop_press.adapters.content import ContentBuilder, MarkdownRenderer, format_link_post
from raindrop_press.core import RenderError


def test_render_markdown() -> None:
    """Test basic markdown rendering."""
    renderer = MarkdownRenderer()

    html = renderer.render("Some **bold** and *italic* text")

    assert "<strong>bold</strong>" in html
    assert "<em>italic</em>" in html
    assert html.startswith("<p>")


def test_render_empty_note() -> None:
    """Test empty or missing notes render to nothing."""
    renderer = MarkdownRenderer()

    assert renderer.render("") == ""
    assert renderer.render(None) == ""


def test_render_failure_falls_back_to_text() -> None:
    """Test a rendering failure degrades to escaped text with line breaks."""
    renderer = MarkdownRenderer()

    with patch.object(renderer.md, "render", side_effect=RuntimeError("parser crashed")):
        html = renderer.render("line one\nline <two>")

    assert html == "line one<br>line &lt;two&gt;"


def test_format_link_post_after_paragraph() -> None:
    """Test link paragraph follows rendered paragraphs on a new line."""
    result = format_link_post("<p>Hello</p>\n", "Title", "https://example.com")

    assert result == (
        "<p>Hello</p>\n"
        '<p>→ <a href="https://example.com" target="_blank" rel="noopener">Title</a></p>'
    )


def test_format_link_post_after_other_markup() -> None:
    """Test non-paragraph content is separated by a blank line."""
    result = format_link_post("<ul><li>a</li></ul>", "Title", "https://example.com")

    assert result.startswith("<ul><li>a</li></ul>\n\n<p>→ ")


def test_format_link_post_empty_content() -> None:
    """Test empty content yields only the link paragraph."""
    result = format_link_post("  ", "Title", "https://example.com")

    assert result == '<p>→ <a href="https://example.com" target="_blank" rel="noopener">Title</a></p>'


def test_format_link_post_escapes_title_and_url() -> None:
    """Test HTML-sensitive characters in title and link are escaped."""
    result = format_link_post(
        "", 'Post with "quotes" & <tags>', "https://example.com/?a=1&b='2'"
    )

    assert "&quot;quotes&quot; &amp; &lt;tags&gt;" in result
    assert "<tags>" not in result
    assert 'href="https://example.com/?a=1&amp;b=&#x27;2&#x27;"' in result


def test_build_post_content() -> None:
    """Test builder combines rendered note and link."""
    builder = ContentBuilder()

    content = builder.build_post_content("**bold**", "T", "https://x")

    assert content == (
        "<p><strong>bold</strong></p>\n"
        '<p>→ <a href="https://x" target="_blank" rel="noopener">T</a></p>'
    )


def test_build_post_content_without_note() -> None:
    """Test a bookmark without a note still gets its link paragraph."""
    builder = ContentBuilder()

    content = builder.build_post_content(None, "T", "https://x")

    assert content == '<p>→ <a href="https://x" target="_blank" rel="noopener">T</a></p>'


def test_build_post_content_wraps_failures() -> None:
    """Test unexpected failures surface as render errors."""
    builder = ContentBuilder()

    with patch(
        "raindrop_press.adapters.content.content_builder.format_link_post",
        side_effect=TypeError("boom"),
    ):
        with pytest.raises(RenderError, match="boom"):
            builder.build_post_content("note", "T", "https://x")

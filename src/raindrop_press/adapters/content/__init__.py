"""Content rendering adapters."""

from raindrop_press.adapters.content.content_builder import ContentBuilder
from raindrop_press.adapters.content.link_formatter import escape_html, format_link_post
from raindrop_press.adapters.content.markdown_renderer import MarkdownRenderer

__all__ = ["ContentBuilder", "MarkdownRenderer", "escape_html", "format_link_post"]

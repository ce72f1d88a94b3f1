"""Build publish-ready post content from a bookmark."""

from typing import Optional

from raindrop_press.adapters.content.link_formatter import format_link_post
from raindrop_press.adapters.content.markdown_renderer import MarkdownRenderer
from raindrop_press.core import BookmarkItem, RenderError


class ContentBuilder:
    """Combine note rendering with link formatting."""

    def __init__(self, renderer: Optional[MarkdownRenderer] = None) -> None:
        self.renderer = renderer or MarkdownRenderer()

    def build_post_content(self, note: Optional[str], title: str, link: str) -> str:
        try:
            rendered = self.renderer.render(note or "")
            return format_link_post(rendered, title, link)
        except Exception as e:
            raise RenderError(f"Failed to build content: {e}", cause=e) from e

    def build_for(self, item: BookmarkItem) -> str:
        return self.build_post_content(item.note, item.title, item.link)

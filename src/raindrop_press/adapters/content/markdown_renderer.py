"""Markdown to HTML rendering for bookmark notes."""

import html
import logging
from typing import Optional

from markdown_it import MarkdownIt

logger = logging.getLogger(__name__)


class MarkdownRenderer:
    """Render bookmark notes with markdown-it."""

    def __init__(self) -> None:
        self.md = MarkdownIt(
            "commonmark",
            {
                "html": True,
                "linkify": True,
                "typographer": True,
                "breaks": False,
                "langPrefix": "language-",
            },
        ).enable(["linkify", "replacements", "smartquotes"])

    def render(self, text: Optional[str]) -> str:
        """Convert markdown text to HTML.

        Empty input gives an empty string. A rendering failure falls back to
        the escaped literal text with newlines turned into ``<br>``.
        """
        if not text or not isinstance(text, str):
            return ""

        try:
            return self.md.render(text.strip())
        except Exception as e:
            logger.error("Error processing markdown: %s", e)
            return html.escape(text).replace("\n", "<br>")

"""Link post formatting."""

import html


def escape_html(text: str) -> str:
    """Escape ``& < > " '`` for use in markup and attribute values."""
    return html.escape(text, quote=True)


def format_link_post(content: str, title: str, url: str) -> str:
    """Append the source link paragraph to rendered content.

    Args:
        content: Rendered HTML, possibly empty
        title: Bookmark title used as link text
        url: Bookmark URL

    Returns:
        HTML ending in exactly one ``<p>→ <a ...>title</a></p>`` paragraph
    """
    formatted = content.strip()

    if formatted.endswith("</p>"):
        formatted += "\n"
    elif formatted:
        formatted += "\n\n"

    formatted += (
        f'<p>→ <a href="{escape_html(url)}" target="_blank" rel="noopener">'
        f"{escape_html(title)}</a></p>"
    )

    return formatted

"""Publishing adapters."""

from raindrop_press.adapters.publishing.wordpress_publisher import WordPressPublisher

__all__ = ["WordPressPublisher"]

"""Source adapters for fetching bookmarks."""

from raindrop_press.adapters.sources.raindrop_source import RaindropSource

__all__ = ["RaindropSource"]

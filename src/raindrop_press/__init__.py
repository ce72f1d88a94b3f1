"""Publish tagged Raindrop.io bookmarks as WordPress link posts."""

__version__ = "0.1.0"

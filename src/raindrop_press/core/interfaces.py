"""Core interfaces for adapters."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Optional, Union

from raindrop_press.core.entities import BookmarkItem, DiagnosticEntry, PublishedPost


class BookmarkSource(ABC):
    """Interface for fetching tagged bookmarks."""

    @abstractmethod
    async def fetch_bookmarks(
        self, tag: str, since: Optional[datetime] = None
    ) -> list[BookmarkItem]:
        """Fetch bookmarks with tag changed after since, newest first."""
        pass


class Publisher(ABC):
    """Interface for publishing posts."""

    @abstractmethod
    async def publish(self, title: str, content: str, status: str = "publish") -> PublishedPost:
        """Create a post and return it once confirmed."""
        pass


class StateStore(ABC):
    """Interface for sync state persistence."""

    @abstractmethod
    async def get_checkpoint(self) -> Optional[datetime]:
        """Return time of the last clean sync, or None on first run."""
        pass

    @abstractmethod
    async def set_checkpoint(self, timestamp: datetime) -> None:
        """Store time of the last clean sync."""
        pass

    @abstractmethod
    async def is_published(self, item_id: str) -> bool:
        """Check if bookmark was already published."""
        pass

    @abstractmethod
    async def mark_published(self, item_id: str) -> None:
        """Record that bookmark was published."""
        pass


class DiagnosticsSink(ABC):
    """Interface for the best-effort diagnostics log."""

    @abstractmethod
    async def log_error(
        self, error: Union[BaseException, str], context: Optional[dict[str, Any]] = None
    ) -> None:
        pass

    @abstractmethod
    async def log_warning(self, message: str, context: Optional[dict[str, Any]] = None) -> None:
        pass

    @abstractmethod
    async def log_info(self, message: str, context: Optional[dict[str, Any]] = None) -> None:
        pass

    @abstractmethod
    async def recent(self, limit: int = 50) -> list[DiagnosticEntry]:
        """List recent entries, newest first."""
        pass

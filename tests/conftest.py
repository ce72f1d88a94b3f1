"""Shared fixtures and in-memory collaborators."""

from datetime import datetime, timedelta, timezone
from typing import Any, Optional, Union
from unittest.mock import AsyncMock

import pytest

from raindrop_press.config import Settings, SyncConfig
from raindrop_press.core import (
    BookmarkItem,
    BookmarkSource,
    DiagnosticEntry,
    DiagnosticsSink,
    LogLevel,
    PublishedPost,
    StateStore,
    StoreError,
)
from raindrop_press.use_cases import SyncService


class MemoryStateStore(StateStore):
    """State store kept in memory."""

    def __init__(self) -> None:
        self.checkpoint: Optional[datetime] = None
        self.published: set[str] = set()
        self.fail_lookups = False
        self.fail_marks = False
        self.checkpoint_writes: list[datetime] = []

    async def get_checkpoint(self) -> Optional[datetime]:
        return self.checkpoint

    async def set_checkpoint(self, timestamp: datetime) -> None:
        self.checkpoint = timestamp
        self.checkpoint_writes.append(timestamp)

    async def is_published(self, item_id: str) -> bool:
        if self.fail_lookups:
            raise StoreError("store unavailable")
        return item_id in self.published

    async def mark_published(self, item_id: str) -> None:
        if self.fail_marks:
            raise StoreError(f"Failed to mark item {item_id} as posted")
        self.published.add(item_id)


class MemorySource(BookmarkSource):
    """Source that honours since the way the real adapter does."""

    def __init__(self, items: Optional[list[BookmarkItem]] = None) -> None:
        self.items = items or []
        self.calls: list[tuple[str, Optional[datetime]]] = []
        self.error: Optional[Exception] = None

    async def fetch_bookmarks(self, tag: str, since: Optional[datetime] = None) -> list[BookmarkItem]:
        self.calls.append((tag, since))
        if self.error is not None:
            raise self.error
        items = [i for i in self.items if since is None or i.last_update > since]
        return sorted(items, key=lambda i: i.created, reverse=True)


class MemoryDiagnostics(DiagnosticsSink):
    """Diagnostics sink collecting entries in a list."""

    def __init__(self) -> None:
        self.entries: list[DiagnosticEntry] = []

    async def log_error(
        self, error: Union[BaseException, str], context: Optional[dict[str, Any]] = None
    ) -> None:
        self.entries.append(DiagnosticEntry(LogLevel.ERROR, str(error), context))

    async def log_warning(self, message: str, context: Optional[dict[str, Any]] = None) -> None:
        self.entries.append(DiagnosticEntry(LogLevel.WARNING, message, context))

    async def log_info(self, message: str, context: Optional[dict[str, Any]] = None) -> None:
        self.entries.append(DiagnosticEntry(LogLevel.INFO, message, context))

    async def recent(self, limit: int = 50) -> list[DiagnosticEntry]:
        return list(reversed(self.entries))[:limit]

    def levels(self) -> list[LogLevel]:
        return [e.level for e in self.entries]


def make_item(item_id: str, minutes_ago: int = 0, **kwargs: Any) -> BookmarkItem:
    """Create a bookmark tagged 'blog'."""
    created = datetime.now(timezone.utc) - timedelta(hours=1, minutes=minutes_ago)
    defaults: dict[str, Any] = {
        "id": item_id,
        "title": f"Bookmark {item_id}",
        "link": f"https://example.com/{item_id}",
        "note": f"Note for *{item_id}*",
        "created": created,
        "tags": frozenset({"blog"}),
    }
    defaults.update(kwargs)
    return BookmarkItem(**defaults)


@pytest.fixture
def make_bookmark():
    """Factory for test bookmarks."""
    return make_item


@pytest.fixture
def settings() -> Settings:
    """Create test settings."""
    return Settings(
        trigger_token="secret-token",
        sync=SyncConfig(max_retries=1, base_delay=0.0, max_delay=0.0),
    )


@pytest.fixture
def store() -> MemoryStateStore:
    return MemoryStateStore()


@pytest.fixture
def source() -> MemorySource:
    return MemorySource()


@pytest.fixture
def diagnostics() -> MemoryDiagnostics:
    return MemoryDiagnostics()


@pytest.fixture
def publisher() -> AsyncMock:
    mock_publisher = AsyncMock()
    mock_publisher.publish.return_value = PublishedPost(
        id=1, link="https://blog.example.com/1", title="Post"
    )
    return mock_publisher


@pytest.fixture
def service(settings, source, publisher, store, diagnostics) -> SyncService:
    return SyncService(
        settings=settings,
        source=source,
        publisher=publisher,
        state_store=store,
        diagnostics=diagnostics,
    )

"""Core domain entities."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional


class LogLevel(str, Enum):
    """Severity of a diagnostic entry."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass(frozen=True)
class BookmarkItem:
    """A tagged bookmark pulled from the bookmarking service."""

    id: str
    title: str
    link: str
    created: datetime
    note: str = ""
    last_update: Optional[datetime] = None
    tags: frozenset[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Bookmark id cannot be empty")
        if not self.title:
            raise ValueError("Title cannot be empty")
        if not self.link:
            raise ValueError("Link cannot be empty")
        if self.created is None:
            raise ValueError("Creation timestamp is required")
        if self.last_update is None:
            object.__setattr__(self, "last_update", self.created)
        if not isinstance(self.tags, frozenset):
            object.__setattr__(self, "tags", frozenset(self.tags))
        if self.note is None:
            object.__setattr__(self, "note", "")


@dataclass(frozen=True)
class PublishedRecord:
    """Marker that a bookmark has been published."""

    item_id: str
    published_at: datetime


@dataclass(frozen=True)
class PublishedPost:
    """Post created on the blog."""

    id: int
    link: str
    title: str
    status: str = "publish"


@dataclass(frozen=True)
class SyncOptions:
    """Per-run overrides for a sync pass."""

    tag: Optional[str] = None
    limit: Optional[int] = None
    dry_run: Optional[bool] = None

    def __post_init__(self) -> None:
        if self.limit is not None and self.limit < 1:
            raise ValueError("Limit must be a positive integer")


@dataclass(frozen=True)
class SyncResult:
    """Outcome of one sync pass."""

    success: bool
    items_processed: int
    items_posted: int
    items_skipped: int
    errors: tuple[str, ...]
    dry_run: bool
    duration_ms: int
    last_fetch_time: Optional[str] = None

    @property
    def duration(self) -> str:
        return f"{self.duration_ms}ms"

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "success": self.success,
            "itemsProcessed": self.items_processed,
            "itemsPosted": self.items_posted,
            "itemsSkipped": self.items_skipped,
            "errors": list(self.errors),
            "dryRun": self.dry_run,
            "duration": self.duration,
        }
        if self.last_fetch_time is not None:
            data["lastFetchTime"] = self.last_fetch_time
        return data


@dataclass(frozen=True)
class DiagnosticEntry:
    """Single entry in the diagnostics log."""

    level: LogLevel
    message: str
    context: Optional[dict[str, Any]] = None
    stack: Optional[str] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "level": self.level.value,
            "message": self.message,
            "context": self.context,
            "stack": self.stack,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DiagnosticEntry":
        return cls(
            level=LogLevel(data["level"]),
            message=data["message"],
            context=data.get("context"),
            stack=data.get("stack"),
            timestamp=datetime.fromisoformat(data["timestamp"]),
        )

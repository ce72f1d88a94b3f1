"""Core domain layer."""

from raindrop_press.core.diagnostics import FileDiagnosticsLog
from raindrop_press.core.entities import (
    BookmarkItem,
    DiagnosticEntry,
    LogLevel,
    PublishedPost,
    PublishedRecord,
    SyncOptions,
    SyncResult,
)
from raindrop_press.core.errors import (
    ConfigError,
    FetchError,
    PublishError,
    RenderError,
    StoreError,
    SyncError,
)
from raindrop_press.core.interfaces import BookmarkSource, DiagnosticsSink, Publisher, StateStore
from raindrop_press.core.retry import RetryPolicy, is_retryable, retry_with_backoff
from raindrop_press.core.state_store import FileStateStore

__all__ = [
    "BookmarkItem",
    "DiagnosticEntry",
    "LogLevel",
    "PublishedPost",
    "PublishedRecord",
    "SyncOptions",
    "SyncResult",
    "SyncError",
    "FetchError",
    "PublishError",
    "StoreError",
    "RenderError",
    "ConfigError",
    "BookmarkSource",
    "Publisher",
    "StateStore",
    "DiagnosticsSink",
    "RetryPolicy",
    "is_retryable",
    "retry_with_backoff",
    "FileStateStore",
    "FileDiagnosticsLog",
]

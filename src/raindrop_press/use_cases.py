"""Business logic use cases."""

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import AsyncIterator, Optional

from raindrop_press.adapters.content import ContentBuilder
from raindrop_press.adapters.publishing import WordPressPublisher
from raindrop_press.adapters.sources import RaindropSource
from raindrop_press.config import Settings
from raindrop_press.core import (
    BookmarkItem,
    BookmarkSource,
    DiagnosticEntry,
    DiagnosticsSink,
    FileDiagnosticsLog,
    FileStateStore,
    Publisher,
    StateStore,
    SyncOptions,
    SyncResult,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ItemOutcome:
    """Result of processing one bookmark."""

    item: BookmarkItem
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class _RunTally:
    """Counters accumulated while a sync pass runs."""

    dry_run: bool
    started: float = field(default_factory=time.monotonic)
    processed: int = 0
    posted: int = 0
    skipped: int = 0
    errors: list[str] = field(default_factory=list)
    last_fetch_time: Optional[str] = None

    @property
    def duration_ms(self) -> int:
        return int((time.monotonic() - self.started) * 1000)

    def summary(self) -> dict:
        return {
            "itemsProcessed": self.processed,
            "itemsPosted": self.posted,
            "itemsSkipped": self.skipped,
            "duration": f"{self.duration_ms}ms",
            "dryRun": self.dry_run,
        }

    def freeze(self) -> SyncResult:
        return SyncResult(
            success=not self.errors,
            items_processed=self.processed,
            items_posted=self.posted,
            items_skipped=self.skipped,
            errors=tuple(self.errors),
            dry_run=self.dry_run,
            duration_ms=self.duration_ms,
            last_fetch_time=self.last_fetch_time,
        )


class SyncService:
    """Sync tagged bookmarks to the blog.

    One call to :meth:`perform_sync` reads the checkpoint, fetches bookmarks
    changed since then, skips those already published, publishes the rest
    one at a time and advances the checkpoint only when every item
    succeeded. It never raises; failures end up in the returned result and
    in the diagnostics log.
    """

    def __init__(
        self,
        settings: Settings,
        source: BookmarkSource,
        publisher: Publisher,
        state_store: StateStore,
        diagnostics: DiagnosticsSink,
        content_builder: Optional[ContentBuilder] = None,
    ) -> None:
        self.settings = settings
        self.source = source
        self.publisher = publisher
        self.state_store = state_store
        self.diagnostics = diagnostics
        self.content_builder = content_builder or ContentBuilder()

    @classmethod
    def from_settings(cls, settings: Settings) -> "SyncService":
        """Wire up the service with the real adapters."""
        return cls(
            settings=settings,
            source=RaindropSource(
                token=settings.raindrop.token,
                api_base=settings.raindrop.api_base,
                per_page=settings.raindrop.per_page,
                timeout=settings.sync.request_timeout,
            ),
            publisher=WordPressPublisher(
                endpoint=settings.wordpress.endpoint,
                username=settings.wordpress.username,
                app_password=settings.wordpress.app_password,
                retry_policy=settings.retry_policy,
                timeout=settings.sync.request_timeout,
            ),
            state_store=FileStateStore(
                settings.paths.state_dir, ttl_days=settings.sync.published_ttl_days
            ),
            diagnostics=FileDiagnosticsLog(
                settings.paths.diagnostics_dir,
                retention_days=settings.sync.error_retention_days,
            ),
        )

    async def perform_sync(self, options: Optional[SyncOptions] = None) -> SyncResult:
        options = options or SyncOptions()
        tag = options.tag or self.settings.raindrop.tag
        dry_run = self.settings.sync.dry_run if options.dry_run is None else options.dry_run
        limit = options.limit
        tally = _RunTally(dry_run=dry_run)

        try:
            # Step 1: last checkpoint; fetch failures abort the run
            checkpoint = await self.state_store.get_checkpoint()
            tally.last_fetch_time = checkpoint.isoformat() if checkpoint else None
            bookmarks = await self._fetch_new_bookmarks(tag, checkpoint, limit)
            tally.processed = len(bookmarks)

            # Step 2: drop already published bookmarks
            new_bookmarks = await self._filter_new_bookmarks(bookmarks)
            tally.skipped = tally.processed - len(new_bookmarks)

            # Step 3: publish one by one
            async for outcome in self._process_bookmarks(new_bookmarks, dry_run):
                if outcome.ok:
                    tally.posted += 1
                else:
                    tally.errors.append(
                        f"Failed to process bookmark {outcome.item.id}: {outcome.error}"
                    )

            # Step 4: a failed item keeps the checkpoint so the next run retries it
            if not dry_run and not tally.errors:
                await self.state_store.set_checkpoint(datetime.now(timezone.utc))

        except Exception as e:
            tally.errors.append(f"Sync failed: {e}")
            await self.diagnostics.log_error(
                e,
                {
                    "operation": "sync-orchestrator",
                    "duration": f"{tally.duration_ms}ms",
                    "tag": tag,
                    "dryRun": dry_run,
                },
            )
            return tally.freeze()

        context = {**tally.summary(), "tag": tag}
        if tally.errors:
            await self.diagnostics.log_error(
                "Sync completed with errors",
                {**context, "operation": "sync-orchestrator", "errorCount": len(tally.errors)},
            )
        else:
            await self.diagnostics.log_info("Sync completed successfully", context)

        return tally.freeze()

    async def _fetch_new_bookmarks(
        self, tag: str, since: Optional[datetime], limit: Optional[int]
    ) -> list[BookmarkItem]:
        bookmarks = await self.source.fetch_bookmarks(tag, since)
        logger.info(
            "Fetched %d bookmarks tagged #%s since %s",
            len(bookmarks),
            tag,
            since.isoformat() if since else "the beginning",
        )

        if limit and limit > 0:
            return bookmarks[:limit]
        return bookmarks

    async def _filter_new_bookmarks(self, bookmarks: list[BookmarkItem]) -> list[BookmarkItem]:
        new_bookmarks: list[BookmarkItem] = []

        for bookmark in bookmarks:
            try:
                already_posted = await self.state_store.is_published(bookmark.id)
            except Exception as e:
                # Better a duplicate post than a silently dropped bookmark
                await self.diagnostics.log_warning(
                    f"Failed to check if item {bookmark.id} was posted, including it",
                    {"bookmarkId": bookmark.id, "error": str(e)},
                )
                already_posted = False

            if not already_posted:
                new_bookmarks.append(bookmark)

        return new_bookmarks

    async def _process_bookmarks(
        self, bookmarks: list[BookmarkItem], dry_run: bool
    ) -> AsyncIterator[ItemOutcome]:
        """Process bookmarks strictly in order, yielding one outcome each."""
        for bookmark in bookmarks:
            try:
                await self._process_bookmark(bookmark, dry_run)
            except Exception as e:
                await self.diagnostics.log_error(
                    e,
                    {
                        "operation": "process-bookmark",
                        "bookmarkId": bookmark.id,
                        "title": bookmark.title,
                        "link": bookmark.link,
                    },
                )
                yield ItemOutcome(bookmark, error=e)
            else:
                yield ItemOutcome(bookmark)

    async def _process_bookmark(self, bookmark: BookmarkItem, dry_run: bool) -> None:
        content = self.content_builder.build_for(bookmark)

        if dry_run:
            logger.info("Dry run: would publish %s (%s)", bookmark.title, bookmark.link)
            return

        post = await self.publisher.publish(bookmark.title, content)
        await self.state_store.mark_published(bookmark.id)
        logger.info("Published bookmark %s as post %s", bookmark.id, post.id)

    async def reset_checkpoint(self, days_back: int = 90) -> tuple[Optional[datetime], datetime]:
        """Rewind the checkpoint so older bookmarks are considered again.

        Returns:
            Tuple of (previous checkpoint, new checkpoint)
        """
        previous = await self.state_store.get_checkpoint()
        new_checkpoint = datetime.now(timezone.utc) - timedelta(days=days_back)
        await self.state_store.set_checkpoint(new_checkpoint)
        return previous, new_checkpoint

    async def recent_diagnostics(self, limit: int = 50) -> list[DiagnosticEntry]:
        return await self.diagnostics.recent(limit)

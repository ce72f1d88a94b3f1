"""Raindrop.io source for bookmarks carrying a given tag."""

import logging
from datetime import datetime, timezone
from typing import Any, Optional

import httpx

from raindrop_press.core import BookmarkItem, BookmarkSource, FetchError

logger = logging.getLogger(__name__)

RAINDROP_API_BASE = "https://api.raindrop.io/rest/v1"


class RaindropSource(BookmarkSource):
    """Fetch tagged bookmarks from the Raindrop REST API."""

    name = "Raindrop.io"

    def __init__(
        self,
        token: str,
        api_base: str = RAINDROP_API_BASE,
        per_page: int = 50,
        timeout: float = 30.0,
    ) -> None:
        self.token = token
        self.api_base = api_base.rstrip("/")
        self.per_page = per_page
        self.timeout = timeout

    async def fetch_bookmarks(
        self, tag: str, since: Optional[datetime] = None
    ) -> list[BookmarkItem]:
        """Fetch bookmarks tagged with tag, newest first.

        The API only filters on creation date, so bookmarks that got the tag
        after they were created are caught by filtering on ``lastUpdate``
        here instead.
        """
        params = {
            "search": f"#{tag}",
            "sort": "-created",
            "perpage": self.per_page,
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(
                    f"{self.api_base}/raindrops/0",
                    headers=self._get_headers(),
                    params=params,
                )
        except httpx.HTTPError as e:
            raise FetchError(f"Failed to fetch bookmarks: {e}", cause=e) from e

        if not response.is_success:
            raise FetchError(
                f"Raindrop API error: {response.status_code} {response.reason_phrase}",
                status=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise FetchError("Raindrop API returned invalid JSON", cause=e) from e

        if not isinstance(data, dict) or not data.get("result"):
            raise FetchError("Raindrop API returned unsuccessful result")

        raw_items = data.get("items")
        if not isinstance(raw_items, list):
            raise FetchError("Invalid response structure: items is not an array")

        items = [item for item in map(self._create_item, raw_items) if item is not None]

        tag_lower = tag.lower()
        items = [item for item in items if any(t.lower() == tag_lower for t in item.tags)]

        if since is not None:
            since = _as_utc(since)
            items = [item for item in items if item.last_update > since]

        items.sort(key=lambda item: item.created, reverse=True)

        logger.info("Fetched %d bookmarks tagged #%s from %d results", len(items), tag, len(raw_items))
        return items

    def _create_item(self, raw: Any) -> Optional[BookmarkItem]:
        """Create item from API result, or None if it is incomplete."""
        if not isinstance(raw, dict):
            return None

        tags = raw.get("tags")
        if not (raw.get("_id") and raw.get("title") and raw.get("link") and raw.get("created")):
            return None
        if not isinstance(tags, list):
            return None

        try:
            created = _parse_date(raw["created"])
            last_update = _parse_date(raw["lastUpdate"]) if raw.get("lastUpdate") else created
            return BookmarkItem(
                id=str(raw["_id"]),
                title=raw["title"],
                note=raw.get("note") or "",
                link=raw["link"],
                created=created,
                last_update=last_update,
                tags=frozenset(str(t) for t in tags),
            )
        except (TypeError, ValueError) as e:
            logger.warning("Skipping malformed bookmark %s: %s", raw.get("_id"), e)
            return None

    def _get_headers(self) -> dict[str, str]:
        """Get headers for Raindrop API requests."""
        return {
            "Authorization": f"Bearer {self.token}",
            "Content-Type": "application/json",
        }


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _parse_date(value: str) -> datetime:
    return _as_utc(datetime.fromisoformat(str(value).replace("Z", "+00:00")))

"""Tests for Raindrop source."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, Mock, patch

import httpx
import pytest

from raindrop_press.adapters.sources import RaindropSource
from raindrop_press.core import FetchError


def raindrop(item_id: int, created: str, tags: list[str], **kwargs) -> dict:
    data = {
        "_id": item_id,
        "title": f"Bookmark {item_id}",
        "note": "",
        "link": f"https://example.com/{item_id}",
        "created": created,
        "lastUpdate": created,
        "tags": tags,
        "type": "link",
    }
    data.update(kwargs)
    return data


def mock_response(payload, status_code: int = 200) -> Mock:
    response = Mock()
    response.status_code = status_code
    response.is_success = 200 <= status_code < 300
    response.reason_phrase = "OK" if status_code == 200 else "Unauthorized"
    response.json.return_value = payload
    return response


@pytest.fixture
def source() -> RaindropSource:
    return RaindropSource(token="rd-token")


@pytest.mark.asyncio
async def test_fetch_bookmarks_request(source: RaindropSource) -> None:
    """Test the API is queried with tag search and auth header."""
    with patch("httpx.AsyncClient") as mock_client:
        mock_get = AsyncMock(return_value=mock_response({"result": True, "items": []}))
        mock_client.return_value.__aenter__.return_value.get = mock_get

        items = await source.fetch_bookmarks("blog")

    assert items == []
    call_args = mock_get.call_args
    assert call_args.args[0] == "https://api.raindrop.io/rest/v1/raindrops/0"
    assert call_args.kwargs["params"] == {"search": "#blog", "sort": "-created", "perpage": 50}
    assert call_args.kwargs["headers"]["Authorization"] == "Bearer rd-token"


@pytest.mark.asyncio
async def test_fetch_bookmarks_filters_and_sorts(source: RaindropSource) -> None:
    """Test invalid and untagged items are dropped and the rest sorted newest first."""
    payload = {
        "result": True,
        "items": [
            raindrop(1, "2025-01-01T10:00:00.000Z", ["Blog"], note="Older note"),
            raindrop(2, "2025-01-03T10:00:00.000Z", ["blog", "python"]),
            raindrop(3, "2025-01-02T10:00:00.000Z", ["other"]),
            raindrop(4, "2025-01-04T10:00:00.000Z", ["blog"], title=""),
            raindrop(5, "2025-01-05T10:00:00.000Z", "blog"),
            {"_id": 6, "title": "No link", "created": "2025-01-05T10:00:00Z", "tags": ["blog"]},
        ],
    }

    with patch("httpx.AsyncClient") as mock_client:
        mock_client.return_value.__aenter__.return_value.get = AsyncMock(
            return_value=mock_response(payload)
        )
        items = await source.fetch_bookmarks("blog")

    assert [item.id for item in items] == ["2", "1"]
    assert items[1].note == "Older note"
    assert items[0].tags == frozenset({"blog", "python"})
    assert items[0].created == datetime(2025, 1, 3, 10, tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_fetch_bookmarks_since_uses_last_update(source: RaindropSource) -> None:
    """Test old bookmarks that were retagged recently are still picked up."""
    payload = {
        "result": True,
        "items": [
            raindrop(1, "2024-06-01T00:00:00Z", ["blog"], lastUpdate="2025-02-10T00:00:00Z"),
            raindrop(2, "2024-06-02T00:00:00Z", ["blog"]),
            raindrop(3, "2025-02-11T00:00:00Z", ["blog"], lastUpdate=None),
        ],
    }
    since = datetime(2025, 2, 1, tzinfo=timezone.utc)

    with patch("httpx.AsyncClient") as mock_client:
        mock_client.return_value.__aenter__.return_value.get = AsyncMock(
            return_value=mock_response(payload)
        )
        items = await source.fetch_bookmarks("blog", since=since)

    assert [item.id for item in items] == ["3", "1"]


@pytest.mark.asyncio
async def test_fetch_bookmarks_http_error(source: RaindropSource) -> None:
    """Test a non-2xx response raises a fetch error with its status."""
    with patch("httpx.AsyncClient") as mock_client:
        mock_client.return_value.__aenter__.return_value.get = AsyncMock(
            return_value=mock_response({"result": False}, status_code=401)
        )
        with pytest.raises(FetchError) as exc_info:
            await source.fetch_bookmarks("blog")

    assert exc_info.value.status == 401
    assert "401" in str(exc_info.value)


@pytest.mark.asyncio
async def test_fetch_bookmarks_bad_shape(source: RaindropSource) -> None:
    """Test unsuccessful results and malformed item lists are rejected."""
    with patch("httpx.AsyncClient") as mock_client:
        mock_get = AsyncMock(
            side_effect=[
                mock_response({"result": False, "items": []}),
                mock_response({"result": True, "items": "nope"}),
            ]
        )
        mock_client.return_value.__aenter__.return_value.get = mock_get

        with pytest.raises(FetchError, match="unsuccessful result"):
            await source.fetch_bookmarks("blog")
        with pytest.raises(FetchError, match="items is not an array"):
            await source.fetch_bookmarks("blog")


@pytest.mark.asyncio
async def test_fetch_bookmarks_network_error(source: RaindropSource) -> None:
    """Test transport failures are wrapped with their cause."""
    request = httpx.Request("GET", "https://api.raindrop.io/rest/v1/raindrops/0")
    error = httpx.ConnectError("connection refused", request=request)

    with patch("httpx.AsyncClient") as mock_client:
        mock_client.return_value.__aenter__.return_value.get = AsyncMock(side_effect=error)
        with pytest.raises(FetchError) as exc_info:
            await source.fetch_bookmarks("blog")

    assert exc_info.value.cause is error

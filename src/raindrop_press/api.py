"""HTTP endpoints for manual sync triggering and inspection."""

import logging
import secrets
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.responses import JSONResponse

from raindrop_press.config import Settings
from raindrop_press.core import SyncOptions
from raindrop_press.use_cases import SyncService

logger = logging.getLogger(__name__)

MAX_ERRORS_LIMIT = 100


def error_response(message: str, status_code: int = 500) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


def create_app(settings: Settings, service: Optional[SyncService] = None) -> FastAPI:
    """Build the FastAPI application.

    Args:
        settings: Application settings; ``trigger_token`` guards every
            route except ``/health``
        service: Sync service to use, built from settings when omitted
    """
    service = service or SyncService.from_settings(settings)
    app = FastAPI(title="raindrop-press")

    def require_token(token: Optional[str] = Query(None)) -> None:
        expected = settings.trigger_token
        if not token or not expected or not secrets.compare_digest(token, expected):
            raise HTTPException(status_code=403, detail="Forbidden")

    authed = [Depends(require_token)]

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok"}

    @app.get("/trigger", dependencies=authed)
    async def trigger(
        dry_run: bool = False,
        tag: Optional[str] = None,
        limit: Optional[int] = Query(None, ge=1),
    ):
        try:
            options = SyncOptions(tag=tag or None, limit=limit, dry_run=dry_run or None)
            result = await service.perform_sync(options)
        except Exception as e:
            logger.exception("Sync trigger failed")
            return error_response(f"Sync failed: {e}")
        return result.to_dict()

    @app.get("/errors", dependencies=authed)
    async def errors(limit: int = Query(50, ge=1)):
        try:
            entries = await service.recent_diagnostics(min(limit, MAX_ERRORS_LIMIT))
        except Exception as e:
            return error_response(f"Failed to retrieve errors: {e}")

        return {
            "success": True,
            "count": len(entries),
            "errors": [
                {
                    "timestamp": entry.timestamp.isoformat(),
                    "level": entry.level.value,
                    "message": entry.message,
                    "context": entry.context,
                    "hasStack": bool(entry.stack),
                }
                for entry in entries
            ],
        }

    @app.get("/reset-timestamp", dependencies=authed)
    async def reset_timestamp(days: int = Query(90, ge=0)):
        try:
            previous, new_checkpoint = await service.reset_checkpoint(days)
        except Exception as e:
            return error_response(f"Failed to reset timestamp: {e}")

        return {
            "success": True,
            "message": f"Last fetch timestamp reset to {days} days ago",
            "previousTimestamp": previous.isoformat() if previous else None,
            "newTimestamp": new_checkpoint.isoformat(),
            "daysBack": days,
        }

    @app.get("/test-raindrop", dependencies=authed)
    async def test_raindrop(tag: Optional[str] = None):
        if not settings.raindrop.token:
            return error_response("RAINDROP_TOKEN not configured")

        tag = tag or settings.raindrop.tag
        try:
            items = await service.source.fetch_bookmarks(tag)
        except Exception as e:
            return error_response(f"Raindrop API error: {e}")

        return {
            "success": True,
            "message": f'Found {len(items)} bookmarks with tag "{tag}"',
            "items": [
                {
                    "id": item.id,
                    "title": item.title,
                    "link": item.link,
                    "created": item.created.isoformat(),
                    "tags": sorted(item.tags),
                }
                for item in items[:3]
            ],
        }

    @app.get("/test-wordpress", dependencies=authed)
    async def test_wordpress():
        wp = settings.wordpress
        if not (wp.endpoint and wp.username and wp.app_password):
            return error_response("WordPress credentials not configured")

        title = "Test Post - Raindrop Press"
        try:
            content = service.content_builder.build_post_content(
                "This is a test post created by raindrop-press to verify "
                "WordPress API connectivity.",
                title,
                "https://example.com",
            )
            post = await service.publisher.publish(title, content, status="draft")
        except Exception as e:
            return error_response(f"WordPress API error: {e}")

        return {
            "success": True,
            "message": "WordPress API test successful",
            "post": {
                "id": post.id,
                "title": post.title,
                "status": post.status,
                "link": post.link,
            },
        }

    return app

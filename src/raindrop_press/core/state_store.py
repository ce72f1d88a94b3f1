"""File-backed sync state: checkpoint and published-bookmark records."""

import asyncio
import hashlib
import logging
import re
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional

import yaml

from raindrop_press.core.entities import PublishedRecord
from raindrop_press.core.errors import StoreError
from raindrop_press.core.interfaces import StateStore

logger = logging.getLogger(__name__)

CHECKPOINT_FILE = "checkpoint.yaml"
PUBLISHED_DIR = "published"


class FileStateStore(StateStore):
    """Keep sync state as individual YAML artifacts.

    Layout::

        <storage_dir>/checkpoint.yaml
        <storage_dir>/published/<safe id>_<hash>.yaml

    Published records expire after ``ttl_days``; an expired record is
    treated as absent.

    File access runs in a worker thread so a slow disk does not stall
    the event loop.
    """

    def __init__(self, storage_dir: Path, ttl_days: int = 30) -> None:
        self.storage_dir = storage_dir
        self.ttl = timedelta(days=ttl_days)
        self._ensure_structure()

    def _ensure_structure(self) -> None:
        """Create directory structure for artifacts."""
        (self.storage_dir / PUBLISHED_DIR).mkdir(parents=True, exist_ok=True)

    @property
    def checkpoint_path(self) -> Path:
        return self.storage_dir / CHECKPOINT_FILE

    async def get_checkpoint(self) -> Optional[datetime]:
        return await asyncio.to_thread(self._read_checkpoint)

    async def set_checkpoint(self, timestamp: datetime) -> None:
        try:
            await asyncio.to_thread(
                self._write_yaml,
                self.checkpoint_path,
                {"timestamp": _to_utc(timestamp).isoformat()},
            )
        except (OSError, yaml.YAMLError) as e:
            raise StoreError("Failed to update last fetch time", cause=e) from e

    async def is_published(self, item_id: str) -> bool:
        record = await asyncio.to_thread(self.get_record, item_id)
        if record is None:
            return False
        return not self._is_expired(record)

    async def mark_published(self, item_id: str) -> None:
        artifact = {
            "item_id": item_id,
            "published_at": datetime.now(timezone.utc).isoformat(),
        }
        try:
            await asyncio.to_thread(self._write_yaml, self._get_record_path(item_id), artifact)
        except (OSError, yaml.YAMLError) as e:
            raise StoreError(f"Failed to mark item {item_id} as posted", cause=e) from e

    def _read_checkpoint(self) -> Optional[datetime]:
        if not self.checkpoint_path.exists():
            return None

        try:
            with open(self.checkpoint_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
            return _parse_timestamp(data["timestamp"])
        except (OSError, yaml.YAMLError, KeyError, TypeError, ValueError) as e:
            logger.error("Could not read checkpoint %s: %s", self.checkpoint_path, e)
            return None

    def get_record(self, item_id: str) -> Optional[PublishedRecord]:
        """Load the published record for item_id, if any.

        Raises:
            StoreError: If the record exists but cannot be read
        """
        record_path = self._get_record_path(item_id)
        if not record_path.exists():
            return None

        try:
            return _load_record(record_path)
        except (OSError, yaml.YAMLError, KeyError, TypeError, ValueError) as e:
            raise StoreError(f"Could not read published record for {item_id}", cause=e) from e

    def prune_expired(self) -> int:
        """Remove expired published records.

        Returns:
            Number of records removed
        """
        removed = 0

        for record_path in (self.storage_dir / PUBLISHED_DIR).glob("*.yaml"):
            try:
                record = _load_record(record_path)
            except (OSError, yaml.YAMLError, KeyError, TypeError, ValueError) as e:
                logger.warning("Skipping unreadable record %s: %s", record_path.name, e)
                continue

            if self._is_expired(record):
                record_path.unlink()
                removed += 1

        return removed

    def get_stats(self) -> dict:
        """Get statistics about stored state."""
        published = list((self.storage_dir / PUBLISHED_DIR).glob("*.yaml"))
        return {
            "total_published": len(published),
            "has_checkpoint": self.checkpoint_path.exists(),
        }

    def _is_expired(self, record: PublishedRecord) -> bool:
        return datetime.now(timezone.utc) - record.published_at > self.ttl

    def _get_record_path(self, item_id: str) -> Path:
        """Get path for record file."""
        safe_id = re.sub(r"[^\w-]", "", item_id)[:50]
        id_hash = hashlib.md5(item_id.encode()).hexdigest()[:8]
        return self.storage_dir / PUBLISHED_DIR / f"{safe_id}_{id_hash}.yaml"

    @staticmethod
    def _write_yaml(path: Path, data: dict) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_suffix(".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            yaml.dump(data, f, allow_unicode=True, default_flow_style=False, sort_keys=False)
        tmp_path.replace(path)


def _load_record(path: Path) -> PublishedRecord:
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    return PublishedRecord(
        item_id=str(data["item_id"]),
        published_at=_parse_timestamp(data["published_at"]),
    )


def _to_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _parse_timestamp(value) -> datetime:
    # PyYAML may already have turned an ISO string into a datetime
    if isinstance(value, datetime):
        return _to_utc(value)
    return _to_utc(datetime.fromisoformat(str(value).replace("Z", "+00:00")))

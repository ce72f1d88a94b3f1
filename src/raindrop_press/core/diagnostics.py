"""Append-only diagnostics log stored as YAML entries."""

import asyncio
import itertools
import logging
import secrets
import traceback
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Optional, Union

import yaml

from raindrop_press.core.entities import DiagnosticEntry, LogLevel
from raindrop_press.core.interfaces import DiagnosticsSink

logger = logging.getLogger(__name__)

_sequence = itertools.count()

_LOG_LEVELS = {
    LogLevel.ERROR: logging.ERROR,
    LogLevel.WARNING: logging.WARNING,
    LogLevel.INFO: logging.INFO,
}


class FileDiagnosticsLog(DiagnosticsSink):
    """Record errors, warnings and info messages for later inspection.

    Each entry is written to its own file named after its timestamp, so
    sorting file names sorts entries chronologically. Writing never raises:
    failures are reported through ``logging`` and dropped.
    """

    def __init__(self, storage_dir: Path, retention_days: int = 30) -> None:
        self.storage_dir = storage_dir
        self.retention_days = retention_days

    async def log_error(
        self, error: Union[BaseException, str], context: Optional[dict[str, Any]] = None
    ) -> None:
        await asyncio.to_thread(self._log, LogLevel.ERROR, error, context)

    async def log_warning(self, message: str, context: Optional[dict[str, Any]] = None) -> None:
        await asyncio.to_thread(self._log, LogLevel.WARNING, message, context)

    async def log_info(self, message: str, context: Optional[dict[str, Any]] = None) -> None:
        await asyncio.to_thread(self._log, LogLevel.INFO, message, context)

    def _log(
        self,
        level: LogLevel,
        error: Union[BaseException, str],
        context: Optional[dict[str, Any]],
    ) -> None:
        if isinstance(error, BaseException):
            message = str(error) or error.__class__.__name__
            stack = "".join(
                traceback.format_exception(type(error), error, error.__traceback__)
            )
        else:
            message = error
            stack = None

        entry = DiagnosticEntry(level=level, message=message, context=context, stack=stack)
        logger.log(_LOG_LEVELS[level], "[%s] %s %s", level.value.upper(), message, context or "")

        try:
            self.storage_dir.mkdir(parents=True, exist_ok=True)
            entry_path = self.storage_dir / _entry_filename(entry)
            with open(entry_path, "w", encoding="utf-8") as f:
                yaml.safe_dump(entry.to_dict(), f, allow_unicode=True, sort_keys=False)
        except Exception:
            logger.exception("Failed to write diagnostics entry: %s", message)

    async def recent(self, limit: int = 50) -> list[DiagnosticEntry]:
        return await asyncio.to_thread(self._read_recent, limit)

    def _read_recent(self, limit: int) -> list[DiagnosticEntry]:
        entries: list[DiagnosticEntry] = []
        if not self.storage_dir.is_dir():
            return entries

        for entry_path in sorted(self.storage_dir.glob("*.yaml"), reverse=True):
            if len(entries) >= limit:
                break

            try:
                entries.append(_load_entry(entry_path))
            except Exception as e:
                logger.warning("Failed to parse diagnostics entry %s: %s", entry_path.name, e)

        return entries

    def clear_old(self, older_than_days: Optional[int] = None) -> int:
        """Remove entries older than N days, plus unreadable ones.

        Returns:
            Number of entries removed
        """
        days = self.retention_days if older_than_days is None else older_than_days
        cutoff = datetime.now(timezone.utc) - timedelta(days=days)
        removed = 0

        if not self.storage_dir.is_dir():
            return removed

        for entry_path in self.storage_dir.glob("*.yaml"):
            try:
                entry = _load_entry(entry_path)
            except Exception:
                entry_path.unlink()
                removed += 1
                continue

            if entry.timestamp < cutoff:
                entry_path.unlink()
                removed += 1

        return removed


def _entry_filename(entry: DiagnosticEntry) -> str:
    stamp = entry.timestamp.strftime("%Y%m%dT%H%M%S%f")
    return f"{stamp}_{next(_sequence):08d}_{secrets.token_hex(4)}.yaml"


def _load_entry(path: Path) -> DiagnosticEntry:
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if isinstance(data.get("timestamp"), datetime):
        data["timestamp"] = data["timestamp"].isoformat()
    return DiagnosticEntry.from_dict(data)

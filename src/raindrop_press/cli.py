"""CLI entry point for raindrop-press."""

import asyncio
from pathlib import Path
from typing import Optional

import typer

from raindrop_press.config import Settings, get_settings
from raindrop_press.core import ConfigError, FileDiagnosticsLog, FileStateStore, SyncOptions, SyncResult
from raindrop_press.logging_setup import setup_logging
from raindrop_press.use_cases import SyncService

app = typer.Typer(help="Publish tagged Raindrop bookmarks as WordPress link posts.")

ConfigOption = typer.Option(Path("config.yaml"), "--config", "-c", help="Path to YAML config")


def _load_settings(config: Path) -> Settings:
    settings = get_settings(config)
    try:
        settings.validate()
    except ConfigError as e:
        print(f"❌ Configuration error: {e.message}")
        raise typer.Exit(code=2)

    setup_logging(settings)
    return settings


def _load_service(config: Path) -> SyncService:
    return SyncService.from_settings(_load_settings(config))


def _print_result(result: SyncResult) -> None:
    print("\n" + "=" * 70)
    if result.success:
        print("✅ SYNC COMPLETE" + (" (dry run)" if result.dry_run else ""))
    else:
        print("❌ SYNC FINISHED WITH ERRORS" + (" (dry run)" if result.dry_run else ""))
    print("=" * 70)
    print(f"  • Last checkpoint: {result.last_fetch_time or 'none (first run)'}")
    print(f"  • Processed: {result.items_processed}")
    print(f"  • Posted: {result.items_posted}")
    print(f"  • Skipped (already posted): {result.items_skipped}")
    print(f"  • Duration: {result.duration}")

    if result.errors:
        print(f"\n⚠️  Errors ({len(result.errors)}):")
        for error in result.errors:
            print(f"  └─ {error}")
    print()


@app.command()
def sync(
    tag: Optional[str] = typer.Option(None, help="Tag to sync (defaults to configured tag)"),
    limit: Optional[int] = typer.Option(None, min=1, help="Process at most N bookmarks"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Render posts without publishing"),
    config: Path = ConfigOption,
) -> None:
    """Run one sync pass. Meant to be invoked by cron or a systemd timer."""
    service = _load_service(config)
    options = SyncOptions(tag=tag, limit=limit, dry_run=True if dry_run else None)

    result = asyncio.run(service.perform_sync(options))
    _print_result(result)

    if not result.success:
        raise typer.Exit(code=1)


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", help="Interface to bind"),
    port: int = typer.Option(8787, help="Port to listen on"),
    config: Path = ConfigOption,
) -> None:
    """Serve the authenticated trigger endpoint."""
    import uvicorn

    from raindrop_press.api import create_app

    service = _load_service(config)
    uvicorn.run(create_app(service.settings, service), host=host, port=port, log_config=None)


@app.command()
def errors(
    limit: int = typer.Option(20, min=1, max=100, help="Number of entries to show"),
    config: Path = ConfigOption,
) -> None:
    """Show recent diagnostics entries."""
    service = _load_service(config)
    entries = asyncio.run(service.recent_diagnostics(limit))

    if not entries:
        print("✓ No diagnostics recorded")
        return

    for entry in entries:
        icon = {"error": "❌", "warning": "⚠️ ", "info": "ℹ️ "}[entry.level.value]
        print(f"{icon} {entry.timestamp.isoformat()} {entry.message}")
        if entry.context:
            for key, value in entry.context.items():
                print(f"  └─ {key}: {value}")


@app.command()
def prune(config: Path = ConfigOption) -> None:
    """Drop expired published records and old diagnostics."""
    settings = _load_settings(config)
    state_store = FileStateStore(settings.paths.state_dir, ttl_days=settings.sync.published_ttl_days)
    diagnostics = FileDiagnosticsLog(
        settings.paths.diagnostics_dir, retention_days=settings.sync.error_retention_days
    )

    records = state_store.prune_expired()
    entries = diagnostics.clear_old()
    print(f"✓ Removed {records} expired published records")
    print(f"✓ Removed {entries} old diagnostics entries")


if __name__ == "__main__":
    app()

"""Configuration management."""

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Mapping, Optional
from urllib.parse import urlparse

import yaml

from raindrop_press.core import ConfigError, RetryPolicy


@dataclass(frozen=True)
class RaindropConfig:
    """Raindrop.io API settings."""
    token: str = ""
    tag: str = "blog"
    api_base: str = "https://api.raindrop.io/rest/v1"
    per_page: int = 50


@dataclass(frozen=True)
class WordPressConfig:
    """WordPress REST API settings."""
    endpoint: str = ""
    username: str = ""
    app_password: str = ""


@dataclass(frozen=True)
class SyncConfig:
    """Sync behaviour settings."""
    max_retries: int = 3
    base_delay: float = 1.0
    max_delay: float = 10.0
    request_timeout: float = 30.0
    dry_run: bool = False
    published_ttl_days: int = 30
    error_retention_days: int = 30


@dataclass(frozen=True)
class PathsConfig:
    """Path settings."""
    state_dir: Path = Path("state")
    log_file: Path = Path("logs/sync.log")

    @property
    def diagnostics_dir(self) -> Path:
        return self.state_dir / "diagnostics"


@dataclass(frozen=True)
class Settings:
    """Application settings."""

    trigger_token: str = ""
    log_level: str = "INFO"

    raindrop: RaindropConfig = field(default_factory=RaindropConfig)
    wordpress: WordPressConfig = field(default_factory=WordPressConfig)
    sync: SyncConfig = field(default_factory=SyncConfig)
    paths: PathsConfig = field(default_factory=PathsConfig)

    @property
    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_retries=self.sync.max_retries,
            base_delay=self.sync.base_delay,
            max_delay=self.sync.max_delay,
        )

    def validate(self) -> "Settings":
        """Check that required values are present and well-formed.

        Raises:
            ConfigError: Naming the missing or invalid setting
        """
        required = [
            ("RAINDROP_TOKEN", "Raindrop API token", self.raindrop.token),
            ("WP_USERNAME", "WordPress username", self.wordpress.username),
            ("WP_APP_PASSWORD", "WordPress application password", self.wordpress.app_password),
            ("WP_ENDPOINT", "WordPress REST API endpoint", self.wordpress.endpoint),
            ("TRIGGER_TOKEN", "API trigger token", self.trigger_token),
            ("RAINDROP_TAG", "Raindrop tag to sync", self.raindrop.tag),
        ]
        missing = [(key, name) for key, name, value in required if not str(value).strip()]
        if missing:
            names = ", ".join(name for _, name in missing)
            keys = ", ".join(key for key, _ in missing)
            raise ConfigError(
                f"Missing required configuration: {names}. "
                f"Please set the following environment variables: {keys}",
                missing[0][0],
            )

        url = urlparse(self.wordpress.endpoint)
        if url.scheme not in ("http", "https") or not url.netloc:
            raise ConfigError("WordPress endpoint must be a valid HTTP/HTTPS URL", "WP_ENDPOINT")
        if "/wp-json/" not in url.path + "/":
            raise ConfigError(
                "WordPress endpoint must include '/wp-json/' path "
                "(e.g., https://example.com/wp-json/wp/v2/posts)",
                "WP_ENDPOINT",
            )
        return self


def load_config(config_path: Path = Path("config.yaml")) -> dict:
    """Load configuration from YAML file."""
    if not config_path.exists():
        return {}

    with open(config_path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def parse_number(value: Any, default: float, cast: type = int) -> Any:
    """Parse a non-negative number, falling back to default."""
    if value is None or str(value).strip() == "":
        return default
    try:
        parsed = cast(str(value).strip())
    except ValueError:
        return default
    return default if parsed < 0 else parsed


def parse_bool(value: Any, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if value is None or str(value).strip() == "":
        return default
    return str(value).strip().lower() in {"true", "1", "yes"}


def _section(config_cls: type, values: Mapping[str, Any]) -> Any:
    """Build a config section from a mapping, coercing to the field types."""
    defaults = config_cls()
    kwargs = {}
    for f in fields(config_cls):
        if f.name not in values or values[f.name] is None:
            continue
        default = getattr(defaults, f.name)
        value = values[f.name]
        if isinstance(default, bool):
            kwargs[f.name] = parse_bool(value, default)
        elif isinstance(default, int):
            kwargs[f.name] = parse_number(value, default, int)
        elif isinstance(default, float):
            kwargs[f.name] = parse_number(value, default, float)
        elif isinstance(default, Path):
            kwargs[f.name] = Path(value)
        else:
            kwargs[f.name] = str(value)
    return config_cls(**kwargs)


def get_settings(
    config_path: Path = Path("config.yaml"),
    environ: Optional[Mapping[str, str]] = None,
) -> Settings:
    """Get application settings from YAML config and environment.

    Environment variables take precedence over the YAML file.
    """
    config = load_config(config_path)
    env = os.environ if environ is None else environ

    raindrop = dict(config.get("raindrop") or {})
    wordpress = dict(config.get("wordpress") or {})
    sync = dict(config.get("sync") or {})
    paths = dict(config.get("paths") or {})

    env_overrides = [
        ("RAINDROP_TOKEN", raindrop, "token"),
        ("RAINDROP_TAG", raindrop, "tag"),
        ("WP_ENDPOINT", wordpress, "endpoint"),
        ("WP_USERNAME", wordpress, "username"),
        ("WP_APP_PASSWORD", wordpress, "app_password"),
        ("MAX_RETRIES", sync, "max_retries"),
        ("REQUEST_TIMEOUT", sync, "request_timeout"),
        ("ERROR_RETENTION_DAYS", sync, "error_retention_days"),
        ("DRY_RUN", sync, "dry_run"),
        ("STATE_DIR", paths, "state_dir"),
    ]
    for env_key, section, key in env_overrides:
        value = env.get(env_key)
        if value is not None and value.strip():
            section[key] = value

    settings = Settings(
        trigger_token=env.get("TRIGGER_TOKEN") or str(config.get("trigger_token") or ""),
        log_level=env.get("LOG_LEVEL") or str(config.get("log_level") or "INFO"),
        raindrop=_section(RaindropConfig, raindrop),
        wordpress=_section(WordPressConfig, wordpress),
        sync=_section(SyncConfig, sync),
        paths=_section(PathsConfig, paths),
    )

    return settings

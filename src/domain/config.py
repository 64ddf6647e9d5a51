"""Load sync settings from a TOML file."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
import tomllib

from domain.filters import PlayerCountWindow

LOGS_TF_API_BASE = "https://logs.tf/api/v1/log"
MAX_SEARCH_LIMIT = 10_000


@dataclass(frozen=True)
class SyncSettings:
    """Which upstream logs get discovered and admitted."""

    min_ratio: float = 0.75
    window: PlayerCountWindow = field(default_factory=lambda: PlayerCountWindow(12, 14))
    search_limit: int = 1000
    title_filter: str | None = None


@dataclass(frozen=True)
class UpstreamSettings:
    """How the logs.tf API is contacted."""

    base_url: str = LOGS_TF_API_BASE
    timeout_seconds: float = 30.0
    request_delay_seconds: float = 1.0
    max_attempts: int = 3
    retry_delay_seconds: float = 5.0


@dataclass(frozen=True)
class SyncConfig:
    name: str
    description: str | None
    file_path: Path
    sync: SyncSettings
    upstream: UpstreamSettings

    def as_config_json(self) -> dict[str, Any]:
        return {
            "min_ratio": self.sync.min_ratio,
            "min_players": self.sync.window.min_players,
            "max_players": self.sync.window.max_players,
            "search_limit": self.sync.search_limit,
            "title_filter": self.sync.title_filter,
            "base_url": self.upstream.base_url,
            "timeout_seconds": self.upstream.timeout_seconds,
            "request_delay_seconds": self.upstream.request_delay_seconds,
            "max_attempts": self.upstream.max_attempts,
            "retry_delay_seconds": self.upstream.retry_delay_seconds,
        }


def load_sync_config(file_path: Path) -> SyncConfig:
    """Load and validate one sync TOML config file."""
    if not file_path.exists():
        raise FileNotFoundError(f"Config file not found: {file_path}")
    if not file_path.is_file():
        raise ValueError(f"Config path is not a file: {file_path}")

    with file_path.open("rb") as file:
        raw = tomllib.load(file)
    return _parse_sync_config(raw, file_path)


def _parse_sync_config(raw: dict[str, Any], file_path: Path) -> SyncConfig:
    system_raw = raw.get("system", {})
    sync_raw = raw.get("sync", {})
    upstream_raw = raw.get("upstream", {})

    name = str(system_raw.get("name", "")).strip()
    if not name:
        raise ValueError(f"{file_path}: [system].name is required")

    description_value = system_raw.get("description")
    description = None if description_value is None else str(description_value)

    min_ratio = float(sync_raw.get("min_ratio", 0.75))
    if min_ratio < 0.0 or min_ratio > 1.0:
        raise ValueError(f"{file_path}: [sync].min_ratio must be between 0 and 1")

    min_players = int(sync_raw.get("min_players", 12))
    max_players = int(sync_raw.get("max_players", 14))
    if min_players < 0:
        raise ValueError(f"{file_path}: [sync].min_players must be >= 0")
    if max_players < min_players:
        raise ValueError(f"{file_path}: [sync].max_players must be >= min_players")

    search_limit = int(sync_raw.get("search_limit", 1000))
    if search_limit <= 0 or search_limit > MAX_SEARCH_LIMIT:
        raise ValueError(f"{file_path}: [sync].search_limit must be between 1 and {MAX_SEARCH_LIMIT}")

    title_value = sync_raw.get("title_filter")
    title_filter = None if title_value is None or str(title_value) == "" else str(title_value)

    upstream = UpstreamSettings(
        base_url=str(upstream_raw.get("base_url", LOGS_TF_API_BASE)),
        timeout_seconds=float(upstream_raw.get("timeout_seconds", 30.0)),
        request_delay_seconds=float(upstream_raw.get("request_delay_seconds", 1.0)),
        max_attempts=int(upstream_raw.get("max_attempts", 3)),
        retry_delay_seconds=float(upstream_raw.get("retry_delay_seconds", 5.0)),
    )
    _validate_upstream(file_path=file_path, upstream=upstream)

    return SyncConfig(
        name=name,
        description=description,
        file_path=file_path,
        sync=SyncSettings(
            min_ratio=min_ratio,
            window=PlayerCountWindow(min_players=min_players, max_players=max_players),
            search_limit=search_limit,
            title_filter=title_filter,
        ),
        upstream=upstream,
    )


def _validate_upstream(*, file_path: Path, upstream: UpstreamSettings) -> None:
    if not upstream.base_url:
        raise ValueError(f"{file_path}: [upstream].base_url must not be empty")
    if upstream.timeout_seconds <= 0.0:
        raise ValueError(f"{file_path}: [upstream].timeout_seconds must be > 0")
    if upstream.request_delay_seconds < 0.0:
        raise ValueError(f"{file_path}: [upstream].request_delay_seconds must be >= 0")
    if upstream.max_attempts < 1:
        raise ValueError(f"{file_path}: [upstream].max_attempts must be >= 1")
    if upstream.retry_delay_seconds < 0.0:
        raise ValueError(f"{file_path}: [upstream].retry_delay_seconds must be >= 0")


__all__ = [
    "LOGS_TF_API_BASE",
    "MAX_SEARCH_LIMIT",
    "SyncConfig",
    "SyncSettings",
    "UpstreamSettings",
    "load_sync_config",
]

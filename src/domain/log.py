"""Log summaries from searches and fully parsed log records."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from domain.common import MalformedLogError
from domain.performance import Performance, Score, extract_performances
from domain.steam_id import SteamID


def _timestamp(value: Any, *, context: str) -> datetime:
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise MalformedLogError(f"{context}: date must be a unix timestamp, got {value!r}")
    return datetime.fromtimestamp(int(value), UTC).replace(tzinfo=None)


@dataclass(frozen=True)
class LogSummary:
    """Search-result metadata for one log."""

    log_id: int
    played_at: datetime
    map_name: str
    player_count: int
    title: str | None = None

    @classmethod
    def from_search_json(cls, item: Mapping[str, Any]) -> LogSummary:
        log_id = item.get("id")
        if isinstance(log_id, bool) or not isinstance(log_id, int) or log_id < 0:
            raise MalformedLogError(f"Search result has invalid id: {log_id!r}")

        player_count = item.get("players", 0)
        if isinstance(player_count, bool) or not isinstance(player_count, int) or player_count < 0:
            raise MalformedLogError(f"log_id={log_id} has invalid player count: {player_count!r}")

        title = item.get("title")
        return cls(
            log_id=log_id,
            played_at=_timestamp(item.get("date"), context=f"log_id={log_id}"),
            map_name=str(item.get("map") or ""),
            player_count=player_count,
            title=None if title is None else str(title),
        )


@dataclass(frozen=True)
class LogRecord:
    """A downloaded log with every player's performances."""

    summary: LogSummary
    duration_secs: int
    performances: dict[SteamID, list[Performance]] = field(default_factory=dict)

    @property
    def log_id(self) -> int:
        return self.summary.log_id


def parse_log_record(
    log_id: int,
    payload: Mapping[str, Any],
    *,
    summary: LogSummary | None = None,
) -> LogRecord:
    """Parse a full logs.tf document into a `LogRecord`.

    When `summary` is given (the search result the log was admitted on) it is
    kept as the record's summary, so the stored player count is the one the
    admission ratio was computed with. Otherwise the summary is built from
    the document, counting players in its `names` table.
    """
    if summary is not None and summary.log_id != log_id:
        raise ValueError(f"Summary of log_id={summary.log_id} passed for log_id={log_id}")

    info = payload.get("info")
    if not isinstance(info, Mapping):
        raise MalformedLogError(f"log_id={log_id} has no info block")

    duration_secs = info.get("total_length", 0)
    if isinstance(duration_secs, bool) or not isinstance(duration_secs, int) or duration_secs < 0:
        raise MalformedLogError(f"log_id={log_id} has invalid total_length={duration_secs!r}")

    names = payload.get("names") or {}
    players = payload.get("players") or {}
    if not isinstance(names, Mapping) or not isinstance(players, Mapping):
        raise MalformedLogError(f"log_id={log_id} has malformed names/players blocks")

    if summary is None:
        title = info.get("title")
        summary = LogSummary(
            log_id=log_id,
            played_at=_timestamp(info.get("date"), context=f"log_id={log_id}"),
            map_name=str(info.get("map") or ""),
            player_count=len(names),
            title=None if title is None else str(title),
        )

    try:
        score = Score.from_log_json(payload)
    except ValueError as exc:
        raise MalformedLogError(f"log_id={log_id}: {exc}") from exc

    performances: dict[SteamID, list[Performance]] = {}
    for player_key, raw_player in players.items():
        steam_id = SteamID.parse(player_key)
        performances[steam_id] = extract_performances(score, raw_player)

    return LogRecord(summary=summary, duration_secs=duration_secs, performances=performances)


__all__ = ["LogRecord", "LogSummary", "parse_log_record"]

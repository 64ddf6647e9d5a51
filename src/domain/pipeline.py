"""Incremental log discovery: search, deduplicate, admit, download, persist."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol

from domain.config import SyncSettings
from domain.filters import admit_logs, remove_known_logs, tally_participation, validate_min_ratio
from domain.log import LogRecord, LogSummary, parse_log_record
from domain.steam_id import SteamID

logger = logging.getLogger(__name__)


class LogStore(Protocol):
    """Persistence the sync needs."""

    def list_tracked_steam_ids(self) -> list[SteamID]: ...

    def list_known_log_ids(self) -> list[int]: ...

    def add_user(self, steam_id: SteamID, discord_id: int) -> bool: ...

    def remove_user(self, steam_id: SteamID) -> bool: ...

    def persist_log(self, record: LogRecord) -> None: ...


class LogArchive(Protocol):
    """Read-only upstream log archive."""

    def search_player_logs(
        self,
        steam_id: SteamID,
        *,
        limit: int,
        title: str | None = None,
    ) -> list[LogSummary]: ...

    def download_log(self, log_id: int) -> dict[str, Any]: ...


class SyncState(str, Enum):
    IDLE = "idle"
    FETCHING_SUMMARIES = "fetching_summaries"
    DEDUPLICATING = "deduplicating"
    ADMITTING = "admitting"
    DOWNLOADING = "downloading"
    EXTRACTING = "extracting"
    PERSISTING = "persisting"


@dataclass(frozen=True)
class SyncSummary:
    """Outcome of one sync run."""

    tracked_players: int
    candidate_logs: int
    admitted_logs: int
    persisted_logs: int
    cancelled: bool = False


class SyncOrchestrator:
    """Runs one pass of log discovery against the archive.

    Admission is always recomputed from the ids currently in the store, so a
    log that was persisted once is never admitted again and a failed run can
    simply be repeated.
    """

    def __init__(
        self,
        *,
        store: LogStore,
        archive: LogArchive,
        settings: SyncSettings,
        echo: Callable[[str], None] | None = None,
        should_cancel: Callable[[], bool] | None = None,
    ) -> None:
        validate_min_ratio(settings.min_ratio)
        self.store = store
        self.archive = archive
        self.settings = settings
        self.echo = echo
        self.should_cancel = should_cancel
        self._state = SyncState.IDLE

    @property
    def state(self) -> SyncState:
        return self._state

    def _enter(self, state: SyncState) -> None:
        logger.debug("sync state %s -> %s", self._state.value, state.value)
        self._state = state

    def _echo(self, message: str) -> None:
        logger.info(message)
        if self.echo is not None:
            self.echo(message)

    def sync(self) -> SyncSummary:
        """Discover, download and store every newly admitted log."""
        if self._state is not SyncState.IDLE:
            raise RuntimeError(f"sync already running (state={self._state.value})")

        try:
            return self._run()
        finally:
            self._state = SyncState.IDLE

    def _run(self) -> SyncSummary:
        self._enter(SyncState.FETCHING_SUMMARIES)
        tracked = self.store.list_tracked_steam_ids()
        known_ids = self.store.list_known_log_ids()

        found: dict[SteamID, list[LogSummary]] = {}
        for steam_id in tracked:
            found[steam_id] = self.archive.search_player_logs(
                steam_id,
                limit=self.settings.search_limit,
                title=self.settings.title_filter,
            )

        self._enter(SyncState.DEDUPLICATING)
        unknown = {
            steam_id: remove_known_logs(summaries, known_ids)
            for steam_id, summaries in found.items()
        }

        self._enter(SyncState.ADMITTING)
        tallies = tally_participation(unknown)
        admitted = admit_logs(
            tallies,
            min_ratio=self.settings.min_ratio,
            window=self.settings.window,
        )
        self._echo(
            f"tracked_players={len(tracked)} "
            f"known_logs={len(known_ids)} "
            f"candidate_logs={len(tallies)} "
            f"admitted_logs={len(admitted)}"
        )

        persisted, cancelled = self._store_logs(admitted)

        self._echo(
            "completed "
            f"persisted_logs={persisted}/{len(admitted)}"
            + (" cancelled=true" if cancelled else "")
        )
        return SyncSummary(
            tracked_players=len(tracked),
            candidate_logs=len(tallies),
            admitted_logs=len(admitted),
            persisted_logs=persisted,
            cancelled=cancelled,
        )

    def _store_logs(self, admitted: Mapping[int, LogSummary]) -> tuple[int, bool]:
        log_ids = sorted(admitted, reverse=True)
        persisted = 0
        for index, log_id in enumerate(log_ids, start=1):
            if self.should_cancel is not None and self.should_cancel():
                logger.info("sync cancelled after %d of %d logs", persisted, len(log_ids))
                return persisted, True

            self._enter(SyncState.DOWNLOADING)
            payload = self.archive.download_log(log_id)

            self._enter(SyncState.EXTRACTING)
            record = parse_log_record(log_id, payload, summary=admitted[log_id])

            self._enter(SyncState.PERSISTING)
            self.store.persist_log(record)
            persisted += 1
            logger.debug(
                "persisted log_id=%d players=%d (%d/%d)",
                log_id,
                len(record.performances),
                index,
                len(log_ids),
            )
        return persisted, False


__all__ = [
    "LogArchive",
    "LogStore",
    "SyncOrchestrator",
    "SyncState",
    "SyncSummary",
]

"""Tests for the sync orchestrator with in-memory collaborators."""

from __future__ import annotations

from typing import Any

import pytest

from domain.config import SyncSettings
from domain.filters import PlayerCountWindow
from domain.log import LogRecord, LogSummary
from domain.pipeline import SyncOrchestrator, SyncState
from domain.steam_id import SteamID
from log_documents import log_document, medic_stats, scout_stats, search_item
from logs_tf import LogsTfTransportError

ALICE = SteamID.parse("[U:0:1001]")
BOB = SteamID.parse("[U:1:2002]")


class FakeStore:
    def __init__(self, tracked: list[SteamID], known: list[int] | None = None) -> None:
        self.users = {steam_id: index for index, steam_id in enumerate(tracked)}
        self.logs: dict[int, LogRecord | None] = dict.fromkeys(known or [])
        self.persist_calls: list[int] = []
        self.fail_on: int | None = None

    def list_tracked_steam_ids(self) -> list[SteamID]:
        return list(self.users)

    def list_known_log_ids(self) -> list[int]:
        return sorted(self.logs, reverse=True)

    def add_user(self, steam_id: SteamID, discord_id: int) -> bool:
        if steam_id in self.users:
            return False
        self.users[steam_id] = discord_id
        return True

    def remove_user(self, steam_id: SteamID) -> bool:
        return self.users.pop(steam_id, None) is not None

    def persist_log(self, record: LogRecord) -> None:
        self.persist_calls.append(record.log_id)
        if record.log_id == self.fail_on:
            raise RuntimeError("disk full")
        assert record.log_id not in self.logs
        self.logs[record.log_id] = record


class FakeArchive:
    def __init__(
        self,
        searches: dict[SteamID, list[int]],
        *,
        player_counts: dict[int, int] | None = None,
    ) -> None:
        self.searches = searches
        self.player_counts = player_counts or {}
        self.downloads: list[int] = []
        self.failing_downloads: set[int] = set()
        self.name_counts: dict[int, int] = {}

    def search_player_logs(
        self,
        steam_id: SteamID,
        *,
        limit: int,
        title: str | None = None,
    ) -> list[LogSummary]:
        return [
            LogSummary.from_search_json(search_item(log_id, players=self.player_counts.get(log_id, 2)))
            for log_id in sorted(self.searches.get(steam_id, []), reverse=True)[:limit]
        ]

    def download_log(self, log_id: int) -> dict[str, Any]:
        self.downloads.append(log_id)
        if log_id in self.failing_downloads:
            raise LogsTfTransportError("connection reset")
        return log_document(
            log_id,
            {ALICE: scout_stats("Red"), BOB: medic_stats("Blue")},
            extra_names=self.name_counts.get(log_id, self.player_counts.get(log_id, 2)) - 2,
        )


def _settings(min_ratio: float = 1.0) -> SyncSettings:
    return SyncSettings(min_ratio=min_ratio, window=PlayerCountWindow(2, 12), search_limit=100)


def test_sync_persists_admitted_logs_newest_first() -> None:
    store = FakeStore([ALICE, BOB], known=[99])
    archive = FakeArchive(
        {ALICE: [105, 102, 99], BOB: [105, 99]},
        player_counts={105: 4, 102: 12, 99: 12},
    )
    messages: list[str] = []

    orchestrator = SyncOrchestrator(
        store=store,
        archive=archive,
        settings=_settings(min_ratio=0.5),
        echo=messages.append,
    )
    summary = orchestrator.sync()

    assert summary.tracked_players == 2
    assert summary.candidate_logs == 2
    assert summary.admitted_logs == 1
    assert summary.persisted_logs == 1
    assert not summary.cancelled
    assert archive.downloads == [105]
    assert set(store.logs) == {99, 105}
    stored = store.logs[105]
    assert stored is not None
    assert set(stored.performances) == {ALICE, BOB}
    assert orchestrator.state is SyncState.IDLE
    assert messages[-1] == "completed persisted_logs=1/1"


def test_second_sync_without_new_logs_persists_nothing() -> None:
    store = FakeStore([ALICE, BOB])
    archive = FakeArchive({ALICE: [3, 2, 1], BOB: [3, 2, 1]})
    orchestrator = SyncOrchestrator(store=store, archive=archive, settings=_settings())

    first = orchestrator.sync()
    second = orchestrator.sync()

    assert first.persisted_logs == 3
    assert archive.downloads == [3, 2, 1]
    assert second.candidate_logs == 0
    assert second.admitted_logs == 0
    assert second.persisted_logs == 0
    assert store.persist_calls == [3, 2, 1]


def test_failed_download_aborts_run_and_keeps_persisted_logs() -> None:
    store = FakeStore([ALICE, BOB])
    archive = FakeArchive({ALICE: [30, 20, 10], BOB: [30, 20, 10]})
    archive.failing_downloads.add(20)
    orchestrator = SyncOrchestrator(store=store, archive=archive, settings=_settings())

    with pytest.raises(LogsTfTransportError):
        orchestrator.sync()

    assert set(store.logs) == {30}
    assert orchestrator.state is SyncState.IDLE

    archive.failing_downloads.clear()
    resumed = orchestrator.sync()

    assert resumed.admitted_logs == 2
    assert set(store.logs) == {30, 20, 10}
    assert store.persist_calls == [30, 20, 10]


def test_persistence_failure_propagates() -> None:
    store = FakeStore([ALICE, BOB])
    store.fail_on = 2
    archive = FakeArchive({ALICE: [2, 1], BOB: [2, 1]})
    orchestrator = SyncOrchestrator(store=store, archive=archive, settings=_settings())

    with pytest.raises(RuntimeError, match="disk full"):
        orchestrator.sync()

    assert store.logs == {}
    assert archive.downloads == [2]


def test_cancellation_is_checked_between_logs() -> None:
    store = FakeStore([ALICE, BOB])
    archive = FakeArchive({ALICE: [3, 2, 1], BOB: [3, 2, 1]})
    orchestrator = SyncOrchestrator(
        store=store,
        archive=archive,
        settings=_settings(),
        should_cancel=lambda: len(store.logs) >= 2,
    )

    summary = orchestrator.sync()

    assert summary.cancelled
    assert summary.admitted_logs == 3
    assert summary.persisted_logs == 2
    assert set(store.logs) == {3, 2}


def test_logs_outside_player_window_are_not_downloaded() -> None:
    store = FakeStore([ALICE, BOB])
    archive = FakeArchive({ALICE: [8, 7], BOB: [8, 7]}, player_counts={8: 2, 7: 18})
    orchestrator = SyncOrchestrator(store=store, archive=archive, settings=_settings(min_ratio=0.0))

    orchestrator.sync()

    assert archive.downloads == [8]


def test_invalid_min_ratio_is_rejected_up_front() -> None:
    with pytest.raises(ValueError):
        SyncOrchestrator(
            store=FakeStore([]),
            archive=FakeArchive({}),
            settings=SyncSettings(min_ratio=1.5),
        )


def test_persisted_summary_is_the_admitted_one() -> None:
    store = FakeStore([ALICE, BOB])
    archive = FakeArchive({ALICE: [50], BOB: [50]}, player_counts={50: 4})
    archive.name_counts[50] = 6
    orchestrator = SyncOrchestrator(store=store, archive=archive, settings=_settings(min_ratio=0.5))

    orchestrator.sync()

    stored = store.logs[50]
    assert stored is not None
    assert stored.summary.player_count == 4
    assert stored.summary.title == "mix #50"

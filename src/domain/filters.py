"""Deduplication and participation-based admission of candidate logs."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass

from domain.log import LogSummary


def remove_known_logs(
    candidates: Sequence[LogSummary],
    known_ids: Sequence[int],
) -> list[LogSummary]:
    """Drop candidates whose id is already known.

    Both sequences must be sorted by id in descending order. The scan walks
    both from their largest id downwards, so it runs in linear time and keeps
    the relative order of the retained candidates.
    """
    retained: list[LogSummary] = []
    candidate_index = 0
    known_index = 0

    while candidate_index < len(candidates) and known_index < len(known_ids):
        candidate = candidates[candidate_index]
        known_id = known_ids[known_index]

        if candidate.log_id == known_id:
            candidate_index += 1
            known_index += 1
        elif candidate.log_id > known_id:
            # Everything left in known_ids is smaller still.
            retained.append(candidate)
            candidate_index += 1
        else:
            known_index += 1

    retained.extend(candidates[candidate_index:])
    return retained


@dataclass
class LogTally:
    """How many tracked players found one log in their own search results."""

    summary: LogSummary
    occurrences: int = 0


def tally_participation(
    summaries_by_player: Mapping[object, Iterable[LogSummary]],
) -> dict[int, LogTally]:
    """Count each log once for every tracked player it was found under."""
    tallies: dict[int, LogTally] = {}
    for summaries in summaries_by_player.values():
        seen_for_player: set[int] = set()
        for summary in summaries:
            if summary.log_id in seen_for_player:
                continue
            seen_for_player.add(summary.log_id)

            tally = tallies.get(summary.log_id)
            if tally is None:
                tally = LogTally(summary=summary)
                tallies[summary.log_id] = tally
            tally.occurrences += 1
    return tallies


@dataclass(frozen=True)
class PlayerCountWindow:
    """Inclusive bounds on the number of players in an admitted log."""

    min_players: int
    max_players: int

    def __post_init__(self) -> None:
        if self.min_players < 0:
            raise ValueError("min_players must be >= 0")
        if self.max_players < self.min_players:
            raise ValueError("max_players must be >= min_players")

    def contains(self, player_count: int) -> bool:
        return self.min_players <= player_count <= self.max_players


def validate_min_ratio(min_ratio: float) -> None:
    if not 0.0 <= min_ratio <= 1.0:
        raise ValueError(f"min_ratio must be between 0 and 1, got {min_ratio}")


def participation_ratio(occurrences: int, player_count: int) -> float | None:
    """Fraction of a log's players that are tracked, or None for an empty log."""
    if player_count <= 0:
        return None
    return occurrences / player_count


def is_admitted(tally: LogTally, *, min_ratio: float, window: PlayerCountWindow) -> bool:
    validate_min_ratio(min_ratio)

    player_count = tally.summary.player_count
    if not window.contains(player_count):
        return False

    ratio = participation_ratio(tally.occurrences, player_count)
    if ratio is None:
        return False
    return ratio >= min_ratio


def admit_logs(
    tallies: Mapping[int, LogTally],
    *,
    min_ratio: float,
    window: PlayerCountWindow,
) -> dict[int, LogSummary]:
    """Keep the logs inside the player-count window with enough tracked players."""
    validate_min_ratio(min_ratio)
    return {
        log_id: tally.summary
        for log_id, tally in tallies.items()
        if is_admitted(tally, min_ratio=min_ratio, window=window)
    }


__all__ = [
    "LogTally",
    "PlayerCountWindow",
    "admit_logs",
    "is_admitted",
    "participation_ratio",
    "remove_known_logs",
    "tally_participation",
    "validate_min_ratio",
]

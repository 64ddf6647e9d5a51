"""Turn one player's entry of a logs.tf document into typed performances."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from domain.common import MalformedLogError
from domain.performance.model import (
    ClassPerformance,
    GenericPerformance,
    MedicPerformance,
    OverallPerformance,
    Performance,
)
from domain.performance.score import Score, Team
from domain.player_class import PlayerClass


def _int(raw: Mapping[str, Any], key: str) -> int:
    # logs.tf leaves zero-valued counters out of the document.
    value = raw.get(key)
    if value is None:
        return 0
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise MalformedLogError(f"Field {key!r} is not an integer: {value!r}") from exc


def _float(raw: Mapping[str, Any], key: str) -> float:
    value = raw.get(key)
    if value is None:
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise MalformedLogError(f"Field {key!r} is not a number: {value!r}") from exc


def _class_stats(raw_player: Mapping[str, Any]) -> Sequence[Mapping[str, Any]]:
    class_stats = raw_player.get("class_stats") or []
    if not isinstance(class_stats, list):
        raise MalformedLogError(f"class_stats must be a list, got {type(class_stats).__name__}")
    return class_stats


def _class_of(class_stats: Mapping[str, Any]) -> PlayerClass:
    return PlayerClass.from_log_name(str(class_stats.get("type", "")))


def extract_generic(score: Score, raw_player: Mapping[str, Any]) -> GenericPerformance:
    team_name = raw_player.get("team")
    if not isinstance(team_name, str):
        raise MalformedLogError(f"Player has no team: {team_name!r}")
    try:
        team = Team.from_log_name(team_name)
    except ValueError as exc:
        raise MalformedLogError(str(exc)) from exc

    won_rounds = score.rounds_won(team)
    lost_rounds = score.rounds_won(team.other())
    return GenericPerformance(
        won_rounds=won_rounds,
        num_rounds=won_rounds + lost_rounds,
        damage_taken=_int(raw_player, "dt"),
    )


def extract_overall(raw_player: Mapping[str, Any]) -> OverallPerformance:
    return OverallPerformance(
        damage=_int(raw_player, "dmg"),
        kills=_int(raw_player, "kills"),
        deaths=_int(raw_player, "deaths"),
        medkits=_int(raw_player, "medkits"),
        medkits_hp=_int(raw_player, "medkits_hp"),
    )


def extract_class_performances(raw_player: Mapping[str, Any]) -> list[ClassPerformance]:
    return [
        ClassPerformance(
            player_class=_class_of(class_stats),
            kills=_int(class_stats, "kills"),
            assists=_int(class_stats, "assists"),
            deaths=_int(class_stats, "deaths"),
            damage=_int(class_stats, "dmg"),
            time_played_secs=_int(class_stats, "total_time"),
        )
        for class_stats in _class_stats(raw_player)
    ]


def extract_medic_performance(raw_player: Mapping[str, Any]) -> MedicPerformance | None:
    """Medic stats, or None unless both `medicstats` and medic class stats are present."""
    medic_stats = raw_player.get("medicstats")
    if medic_stats is None:
        return None

    medic_class_stats = next(
        (
            class_stats
            for class_stats in _class_stats(raw_player)
            if _class_of(class_stats) is PlayerClass.MEDIC
        ),
        None,
    )
    if medic_class_stats is None:
        return None

    return MedicPerformance(
        healing=_int(raw_player, "heal"),
        average_uber_length_secs=_float(medic_stats, "avg_uber_length"),
        num_ubers=_int(raw_player, "ubers"),
        num_drops=_int(raw_player, "drops"),
        deaths=_int(medic_class_stats, "deaths"),
        time_played_secs=_int(medic_class_stats, "total_time"),
    )


def extract_performances(score: Score, raw_player: Mapping[str, Any]) -> list[Performance]:
    """Extract the overall, per-class and medic performances of one player.

    The result always starts with the overall performance, followed by one
    entry per class in `class_stats` order and, last, the medic performance
    when the player healed as medic.
    """
    if not isinstance(raw_player, Mapping):
        raise MalformedLogError(f"Player stats must be an object, got {type(raw_player).__name__}")

    generic = extract_generic(score, raw_player)

    performances = [Performance(generic=generic, specific=extract_overall(raw_player))]
    performances.extend(
        Performance(generic=generic, specific=class_performance)
        for class_performance in extract_class_performances(raw_player)
    )

    medic_performance = extract_medic_performance(raw_player)
    if medic_performance is not None:
        performances.append(Performance(generic=generic, specific=medic_performance))

    return performances


__all__ = [
    "extract_class_performances",
    "extract_generic",
    "extract_medic_performance",
    "extract_overall",
    "extract_performances",
]

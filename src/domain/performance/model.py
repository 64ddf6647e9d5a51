"""Performance records extracted from one log for one player."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from domain.player_class import PlayerClass


class PerformanceKind(str, Enum):
    OVERALL = "overall"
    CLASS = "class"
    MEDIC = "medic"


@dataclass(frozen=True)
class GenericPerformance:
    """Log-wide facts that do not depend on which class the player was on."""

    won_rounds: int
    num_rounds: int
    damage_taken: int

    @property
    def lost_rounds(self) -> int:
        return self.num_rounds - self.won_rounds


@dataclass(frozen=True)
class OverallPerformance:
    """Aggregate over every class the player played during the log."""

    damage: int
    kills: int
    deaths: int
    medkits: int = 0
    medkits_hp: int = 0


@dataclass(frozen=True)
class ClassPerformance:
    """Stats for the time the player spent on one class."""

    player_class: PlayerClass
    kills: int
    assists: int
    deaths: int
    damage: int
    time_played_secs: int


@dataclass(frozen=True)
class MedicPerformance:
    healing: int
    average_uber_length_secs: float
    num_ubers: int
    num_drops: int
    deaths: int
    time_played_secs: int


SpecificPerformance = OverallPerformance | ClassPerformance | MedicPerformance

_KIND_BY_TYPE: dict[type, PerformanceKind] = {
    OverallPerformance: PerformanceKind.OVERALL,
    ClassPerformance: PerformanceKind.CLASS,
    MedicPerformance: PerformanceKind.MEDIC,
}


@dataclass(frozen=True)
class Performance:
    """What a player did in one log.

    `generic` is shared by every performance of the same player in the same
    log; `specific` is one of the three variants and decides the `kind`.
    """

    generic: GenericPerformance
    specific: SpecificPerformance

    def __post_init__(self) -> None:
        if type(self.specific) not in _KIND_BY_TYPE:
            raise TypeError(f"Unsupported performance variant: {type(self.specific)!r}")

    @property
    def kind(self) -> PerformanceKind:
        return _KIND_BY_TYPE[type(self.specific)]

    @property
    def player_class(self) -> PlayerClass | None:
        if isinstance(self.specific, ClassPerformance):
            return self.specific.player_class
        if isinstance(self.specific, MedicPerformance):
            return PlayerClass.MEDIC
        return None


@dataclass(frozen=True)
class LoggedPerformance:
    """A stored performance together with the log it came from."""

    log_id: int
    played_at: datetime
    map_name: str
    performance: Performance


__all__ = [
    "ClassPerformance",
    "GenericPerformance",
    "LoggedPerformance",
    "MedicPerformance",
    "OverallPerformance",
    "Performance",
    "PerformanceKind",
    "SpecificPerformance",
]

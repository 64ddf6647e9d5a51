"""Team score of one log."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any


class Team(str, Enum):
    RED = "Red"
    BLUE = "Blue"

    @classmethod
    def from_log_name(cls, name: str) -> Team:
        normalized = name.strip().lower()
        if normalized == "red":
            return cls.RED
        if normalized == "blue":
            return cls.BLUE
        raise ValueError(f"Unknown team {name!r}")

    def other(self) -> Team:
        return Team.BLUE if self is Team.RED else Team.RED


@dataclass(frozen=True)
class Score:
    """Rounds won by each team over the whole log."""

    red: int
    blue: int

    @classmethod
    def from_log_json(cls, payload: Mapping[str, Any]) -> Score:
        teams = payload.get("teams") or {}
        red = (teams.get("Red") or {}).get("score")
        blue = (teams.get("Blue") or {}).get("score")
        if not isinstance(red, int) or not isinstance(blue, int):
            raise ValueError(f"Log has no usable team score: red={red!r} blue={blue!r}")
        return cls(red=red, blue=blue)

    def rounds_won(self, team: Team) -> int:
        return self.red if team is Team.RED else self.blue


__all__ = ["Score", "Team"]

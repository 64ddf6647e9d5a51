"""TF2 classes as named by logs.tf."""

from __future__ import annotations

from enum import Enum


class UnknownClassError(ValueError):
    """Raised when a class name in a log is not one of the nine TF2 classes."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown class `{name}`")
        self.name = name


class PlayerClass(str, Enum):
    """All TF2 classes."""

    DEMOMAN = "demoman"
    ENGINEER = "engineer"
    HEAVY = "heavy"
    MEDIC = "medic"
    PYRO = "pyro"
    SCOUT = "scout"
    SNIPER = "sniper"
    SOLDIER = "soldier"
    SPY = "spy"

    @classmethod
    def from_log_name(cls, name: str) -> PlayerClass:
        """Map the lowercase class name used in log documents to a class."""
        normalized = name.strip().lower()
        if normalized == "heavyweapons":
            return cls.HEAVY
        try:
            return cls(normalized)
        except ValueError as exc:
            raise UnknownClassError(name) from exc


__all__ = ["PlayerClass", "UnknownClassError"]

"""Per-player performance model and extraction."""

from domain.performance.extractor import extract_performances
from domain.performance.model import (
    ClassPerformance,
    GenericPerformance,
    LoggedPerformance,
    MedicPerformance,
    OverallPerformance,
    Performance,
    PerformanceKind,
)
from domain.performance.score import Score, Team

__all__ = [
    "ClassPerformance",
    "GenericPerformance",
    "LoggedPerformance",
    "MedicPerformance",
    "OverallPerformance",
    "Performance",
    "PerformanceKind",
    "Score",
    "Team",
    "extract_performances",
]

"""Persistence helpers for users, logs and per-player stats."""

from __future__ import annotations

from typing import Any

from sqlalchemy import delete, insert, or_, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from domain.log import LogRecord
from domain.performance import (
    ClassPerformance,
    GenericPerformance,
    LoggedPerformance,
    MedicPerformance,
    OverallPerformance,
    Performance,
    PerformanceKind,
)
from domain.player_class import PlayerClass
from domain.steam_id import SteamID
from models import Base, Log, Stat, User

_SCHEMA_TABLES = (User, Log, Stat)


def ensure_schema(engine: Engine) -> None:
    """Create the users, logs and stats tables and their indexes when missing."""
    with engine.begin() as connection:
        Base.metadata.create_all(
            bind=connection,
            tables=[getattr(model, "__table__") for model in _SCHEMA_TABLES],
            checkfirst=True,
        )


def fetch_tracked_steam_ids(session: Session) -> list[SteamID]:
    rows = session.scalars(select(User.steam_id).order_by(User.steam_id)).all()
    return [SteamID.from_id64(int(row)) for row in rows]


def fetch_known_log_ids(session: Session) -> list[int]:
    """Return the ids of every stored log, largest first."""
    rows = session.scalars(select(Log.log_id).order_by(Log.log_id.desc())).all()
    return [int(row) for row in rows]


def insert_user(session: Session, steam_id: SteamID, discord_id: int) -> bool:
    """Register a user. Returns False when the steam id or discord id is already taken."""
    existing = session.scalar(
        select(User.steam_id).where(
            or_(User.steam_id == steam_id.id64, User.discord_id == discord_id)
        )
    )
    if existing is not None:
        return False

    session.add(User(steam_id=steam_id.id64, discord_id=discord_id))
    session.flush()
    return True


def delete_user(session: Session, steam_id: SteamID) -> bool:
    result = session.execute(delete(User).where(User.steam_id == steam_id.id64))
    return bool(result.rowcount)


def fetch_users(session: Session) -> list[tuple[SteamID, int]]:
    rows = session.execute(select(User.steam_id, User.discord_id).order_by(User.steam_id)).all()
    return [(SteamID.from_id64(int(steam_id)), int(discord_id)) for steam_id, discord_id in rows]


def _performance_to_row(log_id: int, steam_id: SteamID, performance: Performance) -> dict[str, Any]:
    generic = performance.generic
    player_class = performance.player_class
    row: dict[str, Any] = {
        "log_id": log_id,
        "steam_id": steam_id.id64,
        "kind": performance.kind.value,
        "player_class": None if player_class is None else player_class.value,
        "won_rounds": generic.won_rounds,
        "num_rounds": generic.num_rounds,
        "damage_taken": generic.damage_taken,
        "damage": None,
        "kills": None,
        "assists": None,
        "deaths": None,
        "medkits": None,
        "medkits_hp": None,
        "healing": None,
        "average_uber_length_secs": None,
        "num_ubers": None,
        "num_drops": None,
        "time_played_secs": None,
    }

    specific = performance.specific
    if isinstance(specific, OverallPerformance):
        row.update(
            damage=specific.damage,
            kills=specific.kills,
            deaths=specific.deaths,
            medkits=specific.medkits,
            medkits_hp=specific.medkits_hp,
        )
    elif isinstance(specific, ClassPerformance):
        row.update(
            kills=specific.kills,
            assists=specific.assists,
            deaths=specific.deaths,
            damage=specific.damage,
            time_played_secs=specific.time_played_secs,
        )
    else:
        row.update(
            healing=specific.healing,
            average_uber_length_secs=specific.average_uber_length_secs,
            num_ubers=specific.num_ubers,
            num_drops=specific.num_drops,
            deaths=specific.deaths,
            time_played_secs=specific.time_played_secs,
        )
    return row


def _row_to_performance(stat: Stat) -> Performance:
    generic = GenericPerformance(
        won_rounds=stat.won_rounds,
        num_rounds=stat.num_rounds,
        damage_taken=stat.damage_taken,
    )
    kind = PerformanceKind(stat.kind)
    if kind is PerformanceKind.OVERALL:
        specific: OverallPerformance | ClassPerformance | MedicPerformance = OverallPerformance(
            damage=stat.damage or 0,
            kills=stat.kills or 0,
            deaths=stat.deaths or 0,
            medkits=stat.medkits or 0,
            medkits_hp=stat.medkits_hp or 0,
        )
    elif kind is PerformanceKind.CLASS:
        if stat.player_class is None:
            raise ValueError(f"stats row id={stat.id} is a class row without a class")
        specific = ClassPerformance(
            player_class=PlayerClass(stat.player_class),
            kills=stat.kills or 0,
            assists=stat.assists or 0,
            deaths=stat.deaths or 0,
            damage=stat.damage or 0,
            time_played_secs=stat.time_played_secs or 0,
        )
    else:
        specific = MedicPerformance(
            healing=stat.healing or 0,
            average_uber_length_secs=stat.average_uber_length_secs or 0.0,
            num_ubers=stat.num_ubers or 0,
            num_drops=stat.num_drops or 0,
            deaths=stat.deaths or 0,
            time_played_secs=stat.time_played_secs or 0,
        )
    return Performance(generic=generic, specific=specific)


def insert_log(session: Session, record: LogRecord) -> int:
    """Write one log and all of its stats rows. Returns the number of stats rows.

    A log id that is already stored fails with an integrity error when the
    session flushes.
    """
    summary = record.summary
    session.add(
        Log(
            log_id=summary.log_id,
            played_at=summary.played_at,
            map_name=summary.map_name,
            title=summary.title,
            player_count=summary.player_count,
            duration_secs=record.duration_secs,
        )
    )
    session.flush()

    rows = [
        _performance_to_row(summary.log_id, steam_id, performance)
        for steam_id, performances in record.performances.items()
        for performance in performances
    ]
    if rows:
        session.execute(insert(Stat), rows)
    return len(rows)


def fetch_class_performances(
    session: Session,
    steam_id: SteamID,
    player_class: PlayerClass,
    *,
    limit: int,
) -> list[LoggedPerformance]:
    """Return the player's most recent performances on one class, newest log first.

    Medic queries return the medic variant rows next to the class rows of
    the same logs.
    """
    if limit < 0:
        raise ValueError("limit must be >= 0")

    recent_logs = (
        select(Stat.log_id)
        .join(Log, Log.log_id == Stat.log_id)
        .where(
            Stat.steam_id == steam_id.id64,
            Stat.player_class == player_class.value,
            Stat.kind == PerformanceKind.CLASS.value,
        )
        .order_by(Log.played_at.desc(), Log.log_id.desc())
        .limit(limit)
    )
    statement = (
        select(Stat, Log)
        .join(Log, Log.log_id == Stat.log_id)
        .where(
            Stat.steam_id == steam_id.id64,
            Stat.player_class == player_class.value,
            Stat.log_id.in_(recent_logs),
        )
        .order_by(Log.played_at.desc(), Log.log_id.desc(), Stat.id)
    )

    return [
        LoggedPerformance(
            log_id=log.log_id,
            played_at=log.played_at,
            map_name=log.map_name,
            performance=_row_to_performance(stat),
        )
        for stat, log in session.execute(statement).all()
    ]


__all__ = [
    "delete_user",
    "ensure_schema",
    "fetch_class_performances",
    "fetch_known_log_ids",
    "fetch_tracked_steam_ids",
    "fetch_users",
    "insert_log",
    "insert_user",
]

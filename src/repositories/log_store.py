"""SQL-backed store used by the sync and by the reporting commands."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from domain.log import LogRecord
from domain.performance import LoggedPerformance
from domain.player_class import PlayerClass
from domain.steam_id import SteamID
from repositories.repository import (
    delete_user,
    fetch_class_performances,
    fetch_known_log_ids,
    fetch_tracked_steam_ids,
    fetch_users,
    insert_log,
    insert_user,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class PersistenceError(RuntimeError):
    """A database operation failed; nothing from that call was committed."""


class SqlLogStore:
    """Runs every call in its own transaction."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self.session_factory = session_factory

    def _transaction(self, description: str, operation: Callable[[Session], T]) -> T:
        try:
            with self.session_factory() as session:
                with session.begin():
                    return operation(session)
        except SQLAlchemyError as exc:
            logger.error("%s failed: %s", description, exc)
            raise PersistenceError(f"{description} failed: {exc}") from exc

    def list_tracked_steam_ids(self) -> list[SteamID]:
        return self._transaction("list tracked users", fetch_tracked_steam_ids)

    def list_known_log_ids(self) -> list[int]:
        return self._transaction("list known logs", fetch_known_log_ids)

    def list_users(self) -> list[tuple[SteamID, int]]:
        return self._transaction("list users", fetch_users)

    def add_user(self, steam_id: SteamID, discord_id: int) -> bool:
        added = self._transaction(
            f"add user {steam_id}",
            lambda session: insert_user(session, steam_id, discord_id),
        )
        if added:
            logger.info("registered steam_id=%s discord_id=%d", steam_id, discord_id)
        return added

    def remove_user(self, steam_id: SteamID) -> bool:
        return self._transaction(
            f"remove user {steam_id}",
            lambda session: delete_user(session, steam_id),
        )

    def persist_log(self, record: LogRecord) -> None:
        """Store the log row and every stats row, or nothing."""
        stats_rows = self._transaction(
            f"persist log_id={record.log_id}",
            lambda session: insert_log(session, record),
        )
        logger.debug("stored log_id=%d stats_rows=%d", record.log_id, stats_rows)

    def get_class_performance(
        self,
        steam_id: SteamID,
        player_class: PlayerClass,
        limit: int,
    ) -> list[LoggedPerformance]:
        return self._transaction(
            f"read {player_class.value} performances of {steam_id}",
            lambda session: fetch_class_performances(session, steam_id, player_class, limit=limit),
        )


__all__ = ["PersistenceError", "SqlLogStore"]

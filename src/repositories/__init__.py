"""Database repository helpers."""

from repositories.log_store import PersistenceError, SqlLogStore
from repositories.repository import (
    delete_user,
    ensure_schema,
    fetch_class_performances,
    fetch_known_log_ids,
    fetch_tracked_steam_ids,
    fetch_users,
    insert_log,
    insert_user,
)

__all__ = [
    "PersistenceError",
    "SqlLogStore",
    "delete_user",
    "ensure_schema",
    "fetch_class_performances",
    "fetch_known_log_ids",
    "fetch_tracked_steam_ids",
    "fetch_users",
    "insert_log",
    "insert_user",
]

"""Steam ids, log parsing, performance extraction and log admission."""

from domain.common import MalformedLogError
from domain.log import LogRecord, LogSummary, parse_log_record
from domain.player_class import PlayerClass, UnknownClassError
from domain.steam_id import AccountType, MalformedSteamIdError, SteamID, Universe

__all__ = [
    "AccountType",
    "LogRecord",
    "LogSummary",
    "MalformedLogError",
    "MalformedSteamIdError",
    "PlayerClass",
    "SteamID",
    "UnknownClassError",
    "Universe",
    "parse_log_record",
]

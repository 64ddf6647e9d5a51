"""Builders for logs.tf style JSON documents used across tests."""

from __future__ import annotations

from typing import Any

from domain.steam_id import SteamID


def search_item(log_id: int, *, players: int = 12, date: int = 1_700_000_000) -> dict[str, Any]:
    return {
        "id": log_id,
        "date": date + log_id,
        "map": "cp_process_final",
        "players": players,
        "title": f"mix #{log_id}",
        "views": 3,
    }


def search_response(*log_ids: int, players: int = 12) -> dict[str, Any]:
    logs = [search_item(log_id, players=players) for log_id in log_ids]
    return {
        "success": True,
        "results": len(logs),
        "total": len(logs),
        "parameters": {},
        "logs": logs,
    }


def scout_stats(team: str = "Red") -> dict[str, Any]:
    return {
        "team": team,
        "kills": 4,
        "deaths": 2,
        "dmg": 500,
        "dt": 300,
        "class_stats": [
            {"type": "scout", "kills": 3, "assists": 1, "deaths": 1, "dmg": 400, "total_time": 600},
        ],
    }


def medic_stats(team: str = "Blue") -> dict[str, Any]:
    return {
        "team": team,
        "kills": 0,
        "deaths": 3,
        "dmg": 50,
        "dt": 1_200,
        "heal": 14_000,
        "ubers": 6,
        "drops": 1,
        "medicstats": {"avg_uber_length": 7.25},
        "class_stats": [
            {"type": "medic", "kills": 0, "assists": 8, "deaths": 3, "dmg": 50, "total_time": 1_700},
        ],
    }


def log_document(
    log_id: int,
    players: dict[SteamID, dict[str, Any]],
    *,
    red_score: int = 3,
    blue_score: int = 2,
    extra_names: int = 0,
) -> dict[str, Any]:
    """A downloaded log. `extra_names` adds untracked players to the name table."""
    names = {steam_id.to_id3_string(): f"player{index}" for index, steam_id in enumerate(players)}
    for index in range(extra_names):
        names[f"[U:0:{900_000 + index}]"] = f"pug{index}"

    return {
        "success": True,
        "version": 3,
        "teams": {
            "Red": {"score": red_score, "kills": 40},
            "Blue": {"score": blue_score, "kills": 35},
        },
        "length": 1_800,
        "players": {steam_id.to_id3_string(): stats for steam_id, stats in players.items()},
        "names": names,
        "info": {
            "map": "cp_gullywash_f9",
            "date": 1_700_000_000 + log_id,
            "title": f"mix #{log_id}",
            "total_length": 1_800,
        },
    }

"""Query parameters for the logs.tf search endpoint."""

from __future__ import annotations

from dataclasses import dataclass

from domain.config import MAX_SEARCH_LIMIT
from domain.steam_id import SteamID


@dataclass(frozen=True)
class SearchParams:
    player_id: SteamID | None = None
    title: str | None = None
    limit: int | None = None

    def __post_init__(self) -> None:
        if self.limit is not None:
            if self.limit < 0:
                raise ValueError("limit must be >= 0")
            object.__setattr__(self, "limit", min(self.limit, MAX_SEARCH_LIMIT))

    def to_query(self) -> dict[str, str]:
        query: dict[str, str] = {}
        if self.player_id is not None:
            query["player"] = self.player_id.to_id64_string()
        if self.title is not None:
            query["title"] = self.title
        if self.limit is not None:
            query["limit"] = str(self.limit)
        return query


__all__ = ["SearchParams"]

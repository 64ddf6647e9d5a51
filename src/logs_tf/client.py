"""HTTP client for the logs.tf JSON API.

logs.tf starts refusing requests when they arrive back to back, so every call
sleeps for `request_delay_seconds` before it goes out, retries included.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping
from typing import Any, TypeVar

import httpx
from tenacity import Retrying, before_sleep_log, retry_if_exception_type, stop_after_attempt, wait_fixed

from domain.common import MalformedLogError
from domain.config import LOGS_TF_API_BASE, UpstreamSettings
from domain.log import LogSummary
from domain.steam_id import SteamID
from logs_tf.errors import (
    LogsTfDecodeError,
    LogsTfError,
    LogsTfRejectedError,
    LogsTfTransportError,
)
from logs_tf.search_params import SearchParams

logger = logging.getLogger(__name__)

USER_AGENT = "mixes-stats/0.1 (+https://logs.tf)"

# Sections a full log document needs before it can be parsed.
LOG_SECTIONS = ("info", "teams", "players", "names")

T = TypeVar("T")


def check_success(payload: Any) -> dict[str, Any]:
    """Validate the `{"success": ..., "error": ...}` envelope every answer carries."""
    if not isinstance(payload, dict):
        raise LogsTfDecodeError(f"Expected a JSON object, got {type(payload).__name__}")

    success = payload.get("success")
    if not isinstance(success, bool):
        raise LogsTfDecodeError("Response has no boolean `success` field")
    if not success:
        raise LogsTfRejectedError(str(payload.get("error") or "unknown error"))
    return payload


class LogsTfClient:
    """Searches and downloads logs with a courtesy delay and bounded retries."""

    def __init__(
        self,
        *,
        base_url: str = LOGS_TF_API_BASE,
        timeout_seconds: float = 30.0,
        request_delay_seconds: float = 1.0,
        max_attempts: int = 3,
        retry_delay_seconds: float = 5.0,
        transport: httpx.BaseTransport | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if request_delay_seconds < 0.0 or retry_delay_seconds < 0.0:
            raise ValueError("delays must be >= 0")

        self.base_url = base_url.rstrip("/")
        self.request_delay_seconds = request_delay_seconds
        self.max_attempts = max_attempts
        self.retry_delay_seconds = retry_delay_seconds
        self._sleep = sleep
        self._client = httpx.Client(
            timeout=timeout_seconds,
            transport=transport,
            headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
        )

    @classmethod
    def from_settings(
        cls,
        settings: UpstreamSettings,
        *,
        transport: httpx.BaseTransport | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> LogsTfClient:
        return cls(
            base_url=settings.base_url,
            timeout_seconds=settings.timeout_seconds,
            request_delay_seconds=settings.request_delay_seconds,
            max_attempts=settings.max_attempts,
            retry_delay_seconds=settings.retry_delay_seconds,
            transport=transport,
            sleep=sleep,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> LogsTfClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def search_logs(self, params: SearchParams) -> list[LogSummary]:
        """Return the metadata of all logs matching `params`, newest (highest id) first."""
        return self._with_retries(self._fetch_search, params)

    def search_player_logs(
        self,
        steam_id: SteamID,
        *,
        limit: int,
        title: str | None = None,
    ) -> list[LogSummary]:
        return self.search_logs(SearchParams(player_id=steam_id, title=title, limit=limit))

    def download_log(self, log_id: int) -> dict[str, Any]:
        """Return the full, unparsed log document.

        A document without its info, teams, players or names objects counts as
        a decode failure and is retried like any other.
        """
        return self._with_retries(self._fetch_log, log_id)

    def _with_retries(self, fn: Callable[..., T], *args: Any) -> T:
        retrying = Retrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_fixed(self.retry_delay_seconds),
            retry=retry_if_exception_type(LogsTfError),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            sleep=self._sleep,
            reraise=True,
        )
        return retrying(fn, *args)

    def _fetch_search(self, params: SearchParams) -> list[LogSummary]:
        payload = self._get_json(self.base_url, params.to_query())

        items = payload.get("logs")
        if not isinstance(items, list):
            raise LogsTfDecodeError("Search response has no `logs` list")

        try:
            summaries = [LogSummary.from_search_json(item) for item in items]
        except (MalformedLogError, AttributeError) as exc:
            raise LogsTfDecodeError(f"Unusable search result: {exc}") from exc

        summaries.sort(key=lambda summary: summary.log_id, reverse=True)
        logger.debug("Search %s returned %d logs", params.to_query(), len(summaries))
        return summaries

    def _fetch_log(self, log_id: int) -> dict[str, Any]:
        payload = self._get_json(f"{self.base_url}/{log_id}", None)

        missing = [section for section in LOG_SECTIONS if not isinstance(payload.get(section), dict)]
        if missing:
            raise LogsTfDecodeError(f"log_id={log_id} is missing {', '.join(missing)}")
        return payload

    def _get_json(self, url: str, query: Mapping[str, str] | None) -> dict[str, Any]:
        if self.request_delay_seconds > 0.0:
            self._sleep(self.request_delay_seconds)

        try:
            response = self._client.get(url, params=query)
        except httpx.HTTPError as exc:
            raise LogsTfTransportError(f"An error occurred contacting logs.tf: {exc}") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            if response.is_error:
                raise LogsTfTransportError(
                    f"logs.tf answered HTTP {response.status_code} for {url}"
                ) from exc
            raise LogsTfDecodeError(f"logs.tf did not return valid json: {exc}") from exc

        return check_success(payload)


__all__ = ["LogsTfClient", "check_success"]

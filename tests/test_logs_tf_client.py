"""Tests for the logs.tf client against a mocked transport."""

from __future__ import annotations

from collections.abc import Callable

import httpx
import pytest

from domain.config import UpstreamSettings
from domain.steam_id import SteamID
from log_documents import log_document, scout_stats, search_response
from logs_tf import (
    LogsTfClient,
    LogsTfDecodeError,
    LogsTfRejectedError,
    LogsTfTransportError,
    SearchParams,
    check_success,
)

BASE_URL = "https://logs.test/api/v1/log"
PLAYER = SteamID.parse("76561197960287930")


class FakeSleep:
    def __init__(self) -> None:
        self.calls: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


def _client(
    handler: Callable[[httpx.Request], httpx.Response],
    *,
    sleep: FakeSleep | None = None,
    request_delay_seconds: float = 0.0,
    max_attempts: int = 3,
    retry_delay_seconds: float = 0.0,
) -> LogsTfClient:
    return LogsTfClient(
        base_url=BASE_URL,
        request_delay_seconds=request_delay_seconds,
        max_attempts=max_attempts,
        retry_delay_seconds=retry_delay_seconds,
        transport=httpx.MockTransport(handler),
        sleep=sleep or FakeSleep(),
    )


def test_search_sends_query_and_sorts_newest_first() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json=search_response(101, 305, 204))

    with _client(handler) as client:
        summaries = client.search_player_logs(PLAYER, limit=50, title="mix")

    assert [summary.log_id for summary in summaries] == [305, 204, 101]
    assert len(requests) == 1
    params = requests[0].url.params
    assert params["player"] == "76561197960287930"
    assert params["title"] == "mix"
    assert params["limit"] == "50"
    assert requests[0].headers["User-Agent"].startswith("mixes-stats/")


def test_search_params_cap_limit() -> None:
    assert SearchParams(limit=50_000).to_query() == {"limit": "10000"}
    assert SearchParams(player_id=PLAYER).to_query() == {"player": "76561197960287930"}

    with pytest.raises(ValueError):
        SearchParams(limit=-1)


def test_download_returns_raw_document() -> None:
    document = log_document(77, {PLAYER: scout_stats()})

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/v1/log/77"
        return httpx.Response(200, json=document)

    with _client(handler) as client:
        assert client.download_log(77) == document


def test_courtesy_delay_precedes_every_call() -> None:
    sleep = FakeSleep()

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=search_response(1))

    with _client(handler, sleep=sleep, request_delay_seconds=1.5) as client:
        client.search_player_logs(PLAYER, limit=10)
        client.search_player_logs(PLAYER, limit=10)

    assert sleep.calls == [1.5, 1.5]


def test_transient_failures_are_retried() -> None:
    attempts = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal attempts
        attempts += 1
        if attempts == 1:
            raise httpx.ConnectError("connection refused", request=request)
        if attempts == 2:
            return httpx.Response(502, text="<html>bad gateway</html>")
        return httpx.Response(200, json=search_response(9, 8))

    sleep = FakeSleep()
    with _client(handler, sleep=sleep, request_delay_seconds=1.0, retry_delay_seconds=5.0) as client:
        summaries = client.search_player_logs(PLAYER, limit=10)

    assert [summary.log_id for summary in summaries] == [9, 8]
    assert attempts == 3
    assert sleep.calls == [1.0, 5.0, 1.0, 5.0, 1.0]


def test_rejection_is_surfaced_after_retries_are_exhausted() -> None:
    attempts = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal attempts
        attempts += 1
        return httpx.Response(404, json={"success": False, "error": "Log not found"})

    with _client(handler, max_attempts=2) as client:
        with pytest.raises(LogsTfRejectedError) as exc_info:
            client.download_log(1)

    assert attempts == 2
    assert exc_info.value.message == "Log not found"


def test_non_json_body_is_a_decode_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="not json")

    with _client(handler, max_attempts=1) as client:
        with pytest.raises(LogsTfDecodeError):
            client.download_log(1)


def test_search_without_logs_list_is_a_decode_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"success": True, "logs": "nope"})

    with _client(handler, max_attempts=1) as client:
        with pytest.raises(LogsTfDecodeError):
            client.search_player_logs(PLAYER, limit=10)


def test_connection_failure_is_a_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with _client(handler, max_attempts=2) as client:
        with pytest.raises(LogsTfTransportError):
            client.download_log(1)


@pytest.mark.parametrize(
    "payload",
    [[], "success", {"logs": []}, {"success": "yes"}],
)
def test_check_success_rejects_missing_envelope(payload: object) -> None:
    with pytest.raises(LogsTfDecodeError):
        check_success(payload)


def test_check_success_passes_payload_through() -> None:
    payload = {"success": True, "logs": []}

    assert check_success(payload) is payload


def test_from_settings() -> None:
    settings = UpstreamSettings(base_url=BASE_URL + "/", max_attempts=4, retry_delay_seconds=0.0)

    client = LogsTfClient.from_settings(settings)
    try:
        assert client.base_url == BASE_URL
        assert client.max_attempts == 4
    finally:
        client.close()


def test_invalid_retry_settings_are_rejected() -> None:
    with pytest.raises(ValueError):
        LogsTfClient(max_attempts=0)


def test_incomplete_log_document_is_retried() -> None:
    complete = log_document(77, {PLAYER: scout_stats()})
    incomplete = dict(complete)
    del incomplete["teams"]
    responses = [incomplete, complete]

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=responses.pop(0))

    with _client(handler) as client:
        assert client.download_log(77) == complete

    assert responses == []


def test_incomplete_log_document_becomes_decode_error() -> None:
    attempts = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal attempts
        attempts += 1
        return httpx.Response(200, json={"success": True, "players": {}, "names": {}})

    with _client(handler, max_attempts=2) as client:
        with pytest.raises(LogsTfDecodeError, match="info, teams"):
            client.download_log(5)

    assert attempts == 2

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import httpx
import pytest

from rollcall.adapters.http import SourceClient, build_retry
from rollcall.config import RateLimit, RetryPolicy, RosterCache, SourcesConfig
from rollcall.domain.reconciliation import SourceReadError, SourceTimeoutError

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

BASE_URL = "https://sources.test/"


def _config(**overrides: object) -> SourcesConfig:
    values: dict[str, object] = {
        "base_url": BASE_URL,
        "retry": RetryPolicy(attempts=0),
        "ratelimit": None,
    }
    values.update(overrides)
    return SourcesConfig(**values)  # type: ignore[arg-type]


def _read(
    handler: Callable[[httpx.Request], httpx.Response],
    path: str,
    **overrides: object,
) -> object | None:
    async def run() -> object | None:
        client = SourceClient(_config(**overrides), transport=httpx.MockTransport(handler))
        async with client:
            return await client.read("registration", path)

    return asyncio.run(run())


def test_plain_client_is_not_cached() -> None:
    client = SourceClient(_config(roster_cache=RosterCache(ttl_seconds=60)))

    assert not client.is_cached
    asyncio.run(client.aclose())


def test_roster_client_uses_cache_when_configured(tmp_path: Path) -> None:
    cache = RosterCache(ttl_seconds=60, path=tmp_path / "roster.sqlite3")
    client = SourceClient(_config(roster_cache=cache), roster=True)

    assert client.is_cached
    asyncio.run(client.aclose())


def test_roster_client_without_cache_config_is_plain() -> None:
    client = SourceClient(_config(), roster=True)

    assert not client.is_cached
    asyncio.run(client.aclose())


def test_build_retry_only_retries_reads() -> None:
    retry = build_retry(RetryPolicy(attempts=5, retry_statuses=frozenset({503})))

    assert retry.total == 5
    assert "GET" in retry.allowed_methods
    assert "POST" not in retry.allowed_methods
    assert 503 in retry.status_forcelist
    assert 500 not in retry.status_forcelist


def test_read_decodes_json_and_sends_headers() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"eventId": "evt-1", "emails": []})

    payload = _read(handler, "registrations/evt-1", token="s3cret")

    assert payload == {"eventId": "evt-1", "emails": []}
    assert seen[0].url == httpx.URL("https://sources.test/registrations/evt-1")
    assert seen[0].headers["Authorization"] == "Bearer s3cret"
    assert seen[0].headers["Accept"] == "application/json"


def test_not_found_is_none() -> None:
    assert _read(lambda _request: httpx.Response(404), "registrations/evt-1") is None


def test_connection_errors_are_retried() -> None:
    attempts: list[int] = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(1)
        if len(attempts) < 3:
            raise httpx.ConnectError("refused", request=request)
        return httpx.Response(200, json={"ok": True})

    retry = RetryPolicy(attempts=3, backoff_factor=0.0, max_backoff_wait=0.01)

    assert _read(handler, "registrations/evt-1", retry=retry) == {"ok": True}
    assert len(attempts) == 3


def test_timeouts_are_not_retried() -> None:
    attempts: list[int] = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(1)
        raise httpx.ReadTimeout("too slow", request=request)

    retry = RetryPolicy(attempts=3, backoff_factor=0.0, max_backoff_wait=0.01)

    with pytest.raises(SourceTimeoutError):
        _read(handler, "registrations/evt-1", retry=retry)
    assert len(attempts) == 1


def test_error_status_raises_source_read_error() -> None:
    with pytest.raises(SourceReadError, match="HTTP 502"):
        _read(lambda _request: httpx.Response(502), "registrations/evt-1")


def test_rate_limited_client_sends_every_request() -> None:
    calls: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.url.path)
        return httpx.Response(200, json={})

    async def run() -> None:
        config = _config(ratelimit=RateLimit(max_calls=5))
        async with SourceClient(config, transport=httpx.MockTransport(handler)) as client:
            await client.read("registration", "registrations/evt-1")
            await client.read("registration", "registrations/evt-2")

    asyncio.run(run())

    assert calls == ["/registrations/evt-1", "/registrations/evt-2"]

"""Async client for the sources service.

Requests go through a rate limiter and a retry transport. Roster reads can also be
answered from a hishel cache when ``SourcesConfig.roster_cache`` is set.
"""

from __future__ import annotations

import json
from logging import getLogger
from typing import TYPE_CHECKING, TypedDict

import httpx
from aiolimiter import AsyncLimiter
from hishel import AsyncSqliteStorage, FilterPolicy
from hishel import Response as HishelCacheResponse
from hishel._policies import BaseFilter
from hishel.httpx import AsyncCacheClient
from httpx_retries import Retry, RetryTransport

from rollcall.domain.reconciliation.errors import SourceReadError, SourceTimeoutError

if TYPE_CHECKING:
    from types import TracebackType

    from rollcall.config import RetryPolicy, RosterCache, SourcesConfig

log = getLogger(__name__)


class _ClientOptions(TypedDict):
    base_url: str
    timeout: float
    headers: dict[str, str]
    transport: httpx.AsyncBaseTransport


def build_retry(policy: RetryPolicy) -> Retry:
    return Retry(
        total=policy.attempts,
        backoff_factor=policy.backoff_factor,
        max_backoff_wait=policy.max_backoff_wait,
        allowed_methods=("GET",),
        status_forcelist=tuple(sorted(policy.retry_statuses)),
        # timeouts are excluded: a slow source counts as "no signal"
        retry_on_exceptions=(httpx.NetworkError, httpx.RemoteProtocolError),
    )


class SourceClient:
    """One session against the sources service.

    ``read`` decodes the JSON body of a GET, returns ``None`` on 404 and maps every
    other failure onto ``SourceReadError`` or ``SourceTimeoutError``.
    """

    def __init__(
        self,
        config: SourcesConfig,
        *,
        roster: bool = False,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self._limiter = (
            AsyncLimiter(config.ratelimit.max_calls, config.ratelimit.per_seconds)
            if config.ratelimit is not None
            else None
        )
        options: _ClientOptions = {
            "base_url": config.base_url,
            "timeout": config.timeout_seconds,
            "headers": config.headers(),
            "transport": RetryTransport(transport=transport, retry=build_retry(config.retry)),
        }
        cache = config.roster_cache if roster else None
        self._client: httpx.AsyncClient
        if cache is None:
            self._client = httpx.AsyncClient(**options)
        else:
            self._client = AsyncCacheClient(
                **options,
                storage=_roster_storage(cache),
                policy=FilterPolicy(response_filters=[_NonEmptyRosterFilter()]),
            )

    @property
    def is_cached(self) -> bool:
        return isinstance(self._client, AsyncCacheClient)

    async def __aenter__(self) -> SourceClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def read(self, source: str, path: str) -> object | None:
        try:
            response = await self._get(path)
        except httpx.TimeoutException as exc:
            raise SourceTimeoutError(source, f"timed out reading {path}") from exc
        except httpx.HTTPError as exc:
            log.error(f"Source {source} request to {path} failed: {exc}")
            raise SourceReadError(source, f"request to {path} failed: {exc}") from exc

        if response.status_code == httpx.codes.NOT_FOUND:
            return None
        if response.is_error:
            raise SourceReadError(source, f"{path} answered HTTP {response.status_code}")
        try:
            return response.json()
        except ValueError as exc:
            raise SourceReadError(source, f"malformed payload from {path}") from exc

    async def _get(self, path: str) -> httpx.Response:
        if self._limiter is None:
            return await self._client.get(path)
        async with self._limiter:
            return await self._client.get(path)


class _NonEmptyRosterFilter(BaseFilter[HishelCacheResponse]):
    """Keeps an empty roster out of the cache so new registrants show up."""

    def needs_body(self) -> bool:
        return True

    def apply(self, item: HishelCacheResponse, body: bytes | None) -> bool:  # noqa: ARG002
        if not body:
            return False
        try:
            payload = json.loads(body)
        except ValueError:
            return False
        return isinstance(payload, dict) and bool(payload.get("emails"))


def _roster_storage(cache: RosterCache) -> AsyncSqliteStorage:
    return AsyncSqliteStorage(
        database_path=str(cache.path) if cache.path is not None else ":memory:",
        default_ttl=cache.ttl_seconds,
        refresh_ttl_on_access=False,
    )

"""Settings for the HTTP registration, attendance and certificate sources."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .env import env_float, env_int, optional_env_var, require_env_vars
from .storage import get_storage_config

if TYPE_CHECKING:
    from pathlib import Path

SOURCE_TIMEOUT_SECONDS = 5.0
SOURCE_RETRIES = 2
SOURCE_CALLS_PER_SECOND = 20


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """Retries for transient failures of a source read.

    Timeouts are never retried: a read that times out already counts as "no signal".
    """

    attempts: int = SOURCE_RETRIES
    backoff_factor: float = 0.25
    max_backoff_wait: float = 2.0
    retry_statuses: frozenset[int] = field(
        default_factory=lambda: frozenset({429, 502, 503, 504})
    )


@dataclass(frozen=True, slots=True)
class RateLimit:
    max_calls: int
    per_seconds: float = 1.0


@dataclass(frozen=True, slots=True)
class RosterCache:
    """Keeps ``list_registrants`` answers for ``ttl_seconds`` in a local SQLite file.

    ``path=None`` keeps the cache in memory for the life of the client.
    """

    ttl_seconds: float
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class SourcesConfig:
    base_url: str
    token: str | None = None
    timeout_seconds: float = SOURCE_TIMEOUT_SECONDS
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    ratelimit: RateLimit | None = field(
        default_factory=lambda: RateLimit(max_calls=SOURCE_CALLS_PER_SECOND)
    )
    roster_cache: RosterCache | None = None

    def headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers


def get_sources_config() -> SourcesConfig:
    values = require_env_vars(("ROLLCALL_SOURCES_BASE_URL",))
    calls_per_second = env_int("ROLLCALL_SOURCES_RATE_LIMIT", SOURCE_CALLS_PER_SECOND, minimum=0)
    roster_ttl = optional_env_var("ROLLCALL_ROSTER_CACHE_SECONDS")
    return SourcesConfig(
        base_url=values["ROLLCALL_SOURCES_BASE_URL"].rstrip("/") + "/",
        token=optional_env_var("ROLLCALL_SOURCES_TOKEN"),
        timeout_seconds=env_float("ROLLCALL_SOURCE_TIMEOUT_SECONDS", SOURCE_TIMEOUT_SECONDS),
        retry=RetryPolicy(attempts=env_int("ROLLCALL_SOURCES_RETRIES", SOURCE_RETRIES, minimum=0)),
        # 0 turns the limiter off
        ratelimit=RateLimit(max_calls=calls_per_second) if calls_per_second else None,
        roster_cache=(
            RosterCache(
                ttl_seconds=env_float("ROLLCALL_ROSTER_CACHE_SECONDS", 0.0),
                path=get_storage_config().roster_cache_path(),
            )
            if roster_ttl is not None
            else None
        ),
    )

"""Reconciliation engine settings."""

from __future__ import annotations

from dataclasses import dataclass

from rollcall.domain.reconciliation import TrustPolicy

from .env import env_bool, env_int

DEFAULT_WORKERS = 4
DEFAULT_MAX_PENDING = 256


@dataclass(frozen=True, slots=True)
class ReconciliationConfig:
    workers: int = DEFAULT_WORKERS
    max_pending: int = DEFAULT_MAX_PENDING
    respect_overrides: bool = True

    def trust_policy(self) -> TrustPolicy:
        return TrustPolicy(respect_manual_override=self.respect_overrides)


def get_reconciliation_config() -> ReconciliationConfig:
    return ReconciliationConfig(
        workers=env_int("ROLLCALL_WORKERS", DEFAULT_WORKERS, minimum=1),
        max_pending=env_int("ROLLCALL_MAX_PENDING", DEFAULT_MAX_PENDING, minimum=1),
        respect_overrides=env_bool("ROLLCALL_RESPECT_OVERRIDES", True),
    )

"""Result contracts produced by the reconciliation stages and services."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from rollcall.domain.model import CanonicalStatus

if TYPE_CHECKING:
    from datetime import datetime

    from rollcall.domain.model import (
        Conflict,
        Flags,
        ParticipationRecord,
        Signal,
        StatusBreakdown,
    )


@dataclass(frozen=True, slots=True, kw_only=True)
class Resolution:
    """Canonical status plus the per-category facts it was derived from."""

    status: CanonicalStatus
    is_registered: bool = False
    is_present: bool = False
    has_certificate: bool = False


@dataclass(frozen=True, slots=True, kw_only=True)
class Assessment:
    """Pure output of one pass over a signal set, before it touches a record."""

    signals: tuple[Signal, ...]
    conflicts: tuple[Conflict, ...]
    resolution: Resolution
    confidence_score: int
    flags: Flags
    status_breakdown: StatusBreakdown

    @property
    def canonical_status(self) -> CanonicalStatus:
        return self.resolution.status

    @property
    def active_count(self) -> int:
        return sum(1 for signal in self.signals if signal.is_active)


@dataclass(frozen=True, slots=True, kw_only=True)
class ReconciliationSummary:
    canonical_status: CanonicalStatus
    confidence_score: int
    conflict_count: int
    signal_count: int
    requires_manual_review: bool
    reconciliation_version: int

    @classmethod
    def from_record(cls, record: ParticipationRecord) -> ReconciliationSummary:
        return cls(
            canonical_status=record.canonical_status,
            confidence_score=record.confidence_score,
            conflict_count=len(record.conflicts),
            signal_count=len(record.signals),
            requires_manual_review=record.flags.requires_manual_review,
            reconciliation_version=record.version,
        )


@dataclass(slots=True, kw_only=True)
class BatchResult:
    """Aggregate counters of an event-wide pass; ``reconciled + failed == total``."""

    event_id: str
    total: int = 0
    reconciled: int = 0
    failed: int = 0
    conflicts: int = 0
    requires_review: int = 0
    failures: list[str] = field(default_factory=list[str])


@dataclass(frozen=True, slots=True, kw_only=True)
class StatusView:
    """Public view of a record, safe to expose for certificate verification."""

    email: str
    event_id: str
    canonical_status: CanonicalStatus
    confidence_score: int
    has_conflicts: bool
    requires_manual_review: bool
    is_suspicious: bool
    is_verified: bool
    last_reconciled_at: datetime | None
    status_breakdown: StatusBreakdown
    is_overridden: bool

    @classmethod
    def from_record(cls, record: ParticipationRecord) -> StatusView:
        return cls(
            email=record.email,
            event_id=record.event_id,
            canonical_status=record.canonical_status,
            confidence_score=record.confidence_score,
            has_conflicts=record.flags.has_conflicts,
            requires_manual_review=record.flags.requires_manual_review,
            is_suspicious=record.flags.is_suspicious,
            is_verified=record.flags.is_verified,
            last_reconciled_at=record.reconciliation.last_reconciled_at,
            status_breakdown=record.status_breakdown,
            is_overridden=record.manual_override.is_overridden,
        )


@dataclass(frozen=True, slots=True, kw_only=True)
class EventStats:
    event_id: str
    by_status: dict[CanonicalStatus, int]
    conflicts: int = 0
    requires_review: int = 0
    suspicious: int = 0
    verified: int = 0

    @property
    def total(self) -> int:
        return sum(self.by_status.values())

    def count(self, status: CanonicalStatus) -> int:
        return self.by_status.get(status, 0)


def zero_filled(counts: dict[CanonicalStatus, int]) -> dict[CanonicalStatus, int]:
    return {status: counts.get(status, 0) for status in CanonicalStatus}
